from __future__ import annotations

import datetime as dt
import html
from pathlib import Path

from pygments.formatters import HtmlFormatter

from .config import SiteConfig
from .content import strip_tags
from .utils import fail

HIGHLIGHT_CLASS = "codehilite"


def render_template(template: str, **context: str) -> str:
    output = template
    # Page content may itself contain "{{...}}"; substitute it last.
    late_keys = {"content"}
    for key, value in context.items():
        if key in late_keys:
            continue
        output = output.replace(f"{{{{{key}}}}}", value)
    for key in late_keys:
        if key in context:
            output = output.replace(f"{{{{{key}}}}}", context[key])
    return output


def path_to_root(path: str) -> str:
    depth = path.count("/")
    if depth == 0:
        return "."
    return "/".join([".."] * depth)


def render_meta(metadata: dict[str, str]) -> str:
    return "".join(
        f'<meta property="{html.escape(key)}" content="{html.escape(value)}" />'
        for key, value in sorted(metadata.items())
    )


def read_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        fail(f"Cannot read template {path}: {exc}")


def write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        fail(f"Cannot write {path}: {exc}")


def build_stylesheet(stylesheet: Path) -> str:
    try:
        css = stylesheet.read_text(encoding="utf-8")
    except OSError as exc:
        fail(f"Cannot read stylesheet {stylesheet}: {exc}")
    highlight_css = HtmlFormatter().get_style_defs(f".{HIGHLIGHT_CLASS}")
    return f"{css.rstrip()}\n\n/* code highlighting */\n{highlight_css}\n"


class PageWriter:
    def __init__(self, config: SiteConfig, template: str | None = None):
        self.config = config
        self.template = read_template(config.template) if template is None else template

    def render(self, path: str, title: str, content: str, metadata: dict[str, str] | None = None) -> str:
        site_name = html.escape(self.config.page_name)
        if title:
            page_title = f"{strip_tags(title)} &ndash; {site_name}"
        else:
            page_title = site_name
        return render_template(
            self.template,
            title=page_title,
            root=path_to_root(path),
            meta=render_meta(metadata or {}),
            site_name=site_name,
            site_description=html.escape(self.config.page_description),
            year=str(dt.datetime.now().year),
            content=content,
        )

    def write(self, path: str, title: str, content: str, metadata: dict[str, str] | None = None) -> Path:
        output_path = self.config.target_path(*path.split("/"))
        write_text(output_path, self.render(path, title, content, metadata))
        return output_path

    def write_raw(self, path: str, text: str) -> Path:
        output_path = self.config.target_path(*path.split("/"))
        write_text(output_path, text)
        return output_path

    def write_stylesheet(self, path: str = "style.css") -> Path:
        return self.write_raw(path, build_stylesheet(self.config.stylesheet))
