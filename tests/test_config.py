from __future__ import annotations

import json
from pathlib import Path

import pytest

from mdsite.config import DEFAULT_STYLESHEET, DEFAULT_TEMPLATE, load_config, parse_directives

DIRECTIVES = """\
# blog configuration
source-dir   data
source-url   https://github.com/example/blog-data/
target-dir   /srv/www/blog
target-url   https://blog.example.org/
page-name    Example Blog
page-desc    Notes about things
"""


def write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_directive_file(tmp_path: Path) -> None:
    config = load_config(write(tmp_path, "blog.conf", DIRECTIVES))

    assert config.source_dir == tmp_path.resolve() / "data"
    assert config.source_url == "https://github.com/example/blog-data"
    assert config.target_dir == Path("/srv/www/blog")
    assert config.target_url == "https://blog.example.org"
    assert config.page_name == "Example Blog"
    assert config.page_description == "Notes about things"
    assert config.post_identity == "history"
    assert config.source_branch == "master"
    assert config.language == "en"
    assert config.template == DEFAULT_TEMPLATE
    assert config.stylesheet == DEFAULT_STYLESHEET
    assert config.build_workers == 0
    assert config.clean is False
    assert config.target_path("posts", "a.html") == Path("/srv/www/blog/posts/a.html")


@pytest.mark.parametrize(
    "key", ["source-dir", "source-url", "target-dir", "target-url", "page-name", "page-desc"]
)
def test_missing_required_key(tmp_path: Path, capsys, key: str) -> None:
    text = "\n".join(line for line in DIRECTIVES.splitlines() if not line.startswith(key))
    with pytest.raises(SystemExit) as excinfo:
        load_config(write(tmp_path, "blog.conf", text))
    assert excinfo.value.code == 1
    assert f"missing {key}" in capsys.readouterr().err


def test_invalid_directive(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit):
        load_config(write(tmp_path, "blog.conf", DIRECTIVES + "orphan\n"))
    assert "invalid directive: orphan" in capsys.readouterr().err


def test_unknown_key_warns(tmp_path: Path, capsys) -> None:
    load_config(write(tmp_path, "blog.conf", DIRECTIVES + "colour blue\n"))
    assert "unrecognized configuration key" in capsys.readouterr().err


def test_parse_directives_ignores_comments_and_blank_lines() -> None:
    assert parse_directives("\n# comment\n  key  some value  \n") == {"key": "some value"}


def test_toml_file(tmp_path: Path) -> None:
    text = """
source_dir = "data"
source_url = "https://src.example.org"
target_dir = "out"
target_url = "https://blog.example.org"
page_name = "Example"
page_desc = "Desc"
post_identity = "filename"
build_workers = 4
clean = true
"""
    config = load_config(write(tmp_path, "site.toml", text))
    assert config.target_dir == tmp_path.resolve() / "out"
    assert config.post_identity == "filename"
    assert config.build_workers == 4
    assert config.clean is True


def test_yaml_file(tmp_path: Path) -> None:
    text = """
source-dir: data
source-url: https://src.example.org
target-dir: out
target-url: https://blog.example.org
page-name: Example
page-desc: Desc
language: de
template: theme/page.html
"""
    config = load_config(write(tmp_path, "site.yaml", text))
    assert config.language == "de"
    assert config.template == tmp_path.resolve() / "theme" / "page.html"


def test_json_file_with_overrides(tmp_path: Path) -> None:
    data = {
        "source-dir": "data",
        "source-url": "https://src.example.org",
        "target-dir": "out",
        "target-url": "https://blog.example.org",
        "page-name": "Example",
        "page-desc": "Desc",
    }
    path = write(tmp_path, "site.json", json.dumps(data))
    config = load_config(path, {"post-identity": "filename", "build-workers": None})
    assert config.post_identity == "filename"
    assert config.build_workers == 0


def test_invalid_identity(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit):
        load_config(write(tmp_path, "blog.conf", DIRECTIVES + "post-identity mtime\n"))
    assert "invalid post-identity" in capsys.readouterr().err


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        load_config(tmp_path / "absent.conf")


def test_yaml_must_be_mapping(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit):
        load_config(write(tmp_path, "site.yml", "- a\n- b\n"))
    assert "must be a mapping" in capsys.readouterr().err


@pytest.mark.parametrize("value", ["lots", "-2", "1.5"])
def test_invalid_build_workers(tmp_path: Path, capsys, value: str) -> None:
    with pytest.raises(SystemExit) as excinfo:
        load_config(write(tmp_path, "blog.conf", DIRECTIVES + f"build-workers {value}\n"))
    assert excinfo.value.code == 1
    assert f"invalid build-workers: {value}" in capsys.readouterr().err


def test_invalid_clean(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        load_config(write(tmp_path, "blog.conf", DIRECTIVES + "clean maybe\n"))
    assert excinfo.value.code == 1
    assert "invalid clean: maybe" in capsys.readouterr().err


@pytest.mark.parametrize("value, expected", [("yes", True), ("off", False), ("1", True)])
def test_clean_words(tmp_path: Path, value: str, expected: bool) -> None:
    config = load_config(write(tmp_path, "blog.conf", DIRECTIVES + f"clean {value}\nbuild-workers 3\n"))
    assert config.clean is expected
    assert config.build_workers == 3


def test_unreadable_config(tmp_path: Path, capsys) -> None:
    (tmp_path / "blog.conf").mkdir()
    with pytest.raises(SystemExit) as excinfo:
        load_config(tmp_path / "blog.conf")
    assert excinfo.value.code == 1
    assert "Cannot read config file" in capsys.readouterr().err


def test_config_not_utf8(tmp_path: Path, capsys) -> None:
    path = tmp_path / "blog.conf"
    path.write_bytes(DIRECTIVES.encode("utf-8") + b"page-name \xff\xfe\n")
    with pytest.raises(SystemExit):
        load_config(path)
    assert "Cannot read config file" in capsys.readouterr().err
