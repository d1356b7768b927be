from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .utils import FALSE_WORDS, TRUE_WORDS, fail, parse_bool, warn

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_TEMPLATE = PACKAGE_DIR / "templates" / "base.html"
DEFAULT_STYLESHEET = PACKAGE_DIR / "static" / "style.css"

DIRECTIVE_RE = re.compile(r"^(\S+)\s+(.+)$")

REQUIRED_KEYS = ("source-dir", "source-url", "target-dir", "target-url", "page-name", "page-desc")
OPTIONAL_KEYS = (
    "post-identity",
    "source-branch",
    "language",
    "template",
    "stylesheet",
    "build-workers",
    "clean",
)
IDENTITY_STRATEGIES = ("history", "filename")


@dataclass
class SiteConfig:
    source_dir: Path
    source_url: str
    target_dir: Path
    target_url: str
    page_name: str
    page_description: str
    post_identity: str = "history"
    source_branch: str = "master"
    language: str = "en"
    template: Path = field(default=DEFAULT_TEMPLATE)
    stylesheet: Path = field(default=DEFAULT_STYLESHEET)
    build_workers: int = 0
    clean: bool = False

    def source_path(self, *parts: str) -> Path:
        return self.source_dir.joinpath(*parts)

    def target_path(self, *parts: str) -> Path:
        return self.target_dir.joinpath(*parts)


def parse_directives(text: str) -> dict:
    values = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        match = DIRECTIVE_RE.match(line)
        if match is None:
            fail(f"invalid directive: {line}")
        values[match.group(1)] = match.group(2).strip()
    return values


def read_config_file(path: Path) -> dict:
    if not path.exists():
        fail(f"Config file not found: {path}")
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        fail(f"Cannot read config file {path}: {exc}")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            fail(f"Invalid TOML in config file {path}: {exc}")
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            fail(f"Invalid YAML in config file {path}: {exc}")
        if data is None:
            data = {}
    elif suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            fail(f"Invalid JSON in config file {path}: {exc}")
    else:
        return parse_directives(text)
    if not isinstance(data, dict):
        fail(f"Config must be a mapping: {path}")
    return {str(key).replace("_", "-"): value for key, value in data.items()}


def read_workers(value: object) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        fail(f"invalid build-workers: {value}")
    try:
        workers = int(str(value).strip())
    except ValueError:
        fail(f"invalid build-workers: {value}")
    if workers < 0:
        fail(f"invalid build-workers: {value}")
    return workers


def read_clean(value: object) -> bool:
    if isinstance(value, str) and value.strip().lower() not in TRUE_WORDS | FALSE_WORDS:
        fail(f"invalid clean: {value}")
    return parse_bool(value)


def load_config(path: Path, overrides: dict | None = None) -> SiteConfig:
    values = read_config_file(path)
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    unknown = sorted(set(values) - set(REQUIRED_KEYS) - set(OPTIONAL_KEYS))
    for key in unknown:
        warn(f"unrecognized configuration key in {path}: {key}")

    for key in REQUIRED_KEYS:
        if not str(values.get(key) or "").strip():
            fail(f"missing {key}")

    base = path.resolve().parent

    def resolve_path(value: object) -> Path:
        candidate = Path(str(value)).expanduser()
        return candidate if candidate.is_absolute() else base / candidate

    identity = str(values.get("post-identity") or "history").strip().lower()
    if identity not in IDENTITY_STRATEGIES:
        fail(f"invalid post-identity: {identity} (expected one of {', '.join(IDENTITY_STRATEGIES)})")

    return SiteConfig(
        source_dir=resolve_path(values["source-dir"]),
        source_url=str(values["source-url"]).strip().rstrip("/"),
        target_dir=resolve_path(values["target-dir"]),
        target_url=str(values["target-url"]).strip().rstrip("/"),
        page_name=str(values["page-name"]).strip(),
        page_description=str(values["page-desc"]).strip(),
        post_identity=identity,
        source_branch=str(values.get("source-branch") or "master").strip(),
        language=str(values.get("language") or "en").strip(),
        template=resolve_path(values["template"]) if values.get("template") else DEFAULT_TEMPLATE,
        stylesheet=resolve_path(values["stylesheet"]) if values.get("stylesheet") else DEFAULT_STYLESHEET,
        build_workers=read_workers(values.get("build-workers")),
        clean=read_clean(values.get("clean")),
    )
