from __future__ import annotations

import re

import markdown

INITIAL_HEADING_RE = re.compile(r"^<h1>(.+?)</h1>")
INNER_HEADING_RE = re.compile(r"^(.+?)<h[1-6]>", re.DOTALL)
TAG_RE = re.compile(r"<[^>]+>")

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite"]
MARKDOWN_EXTENSION_CONFIGS = {"codehilite": {"guess_lang": False}}

HTML_ESCAPES = (
    ("&", "&amp;"),
    ("'", "&#39;"),
    ('"', "&quot;"),
    ("<", "&lt;"),
    (">", "&gt;"),
)


def render_markdown(text: str) -> str:
    # Markdown instances are stateful; never share one across worker threads.
    md = markdown.Markdown(
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
    )
    return md.convert(text)


def extract_title(html_text: str, fallback: str) -> str:
    match = INITIAL_HEADING_RE.match(html_text)
    if match is None:
        return fallback
    return match.group(1)


def shorten_html(html_text: str, permalink: str) -> str:
    # A heading at the very start is the title, not a cut point.
    match = INNER_HEADING_RE.match(html_text)
    if match is None:
        return html_text
    return match.group(1) + f'<p class="more"><a href="{permalink}">Read more...</a></p>'


def add_permalink(html_text: str, permalink: str) -> str:
    def repl(match: re.Match) -> str:
        return f'<h1><a href="{permalink}" title="Permalink">[l]</a> {match.group(1)}</h1>'

    return INITIAL_HEADING_RE.sub(repl, html_text, count=1)


def extract_description(markdown_text: str) -> str:
    run: list[str] = []
    for line in markdown_text.splitlines() + [""]:
        if line.strip():
            run.append(line)
            continue
        if run and not run[0].lstrip().startswith("#"):
            return "\n".join(run).strip()
        run = []
    return ""


def escape_html(text: str) -> str:
    for char, entity in HTML_ESCAPES:
        text = text.replace(char, entity)
    return text


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)
