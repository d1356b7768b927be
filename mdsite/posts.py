from __future__ import annotations

import datetime as dt
import functools
import os
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .content import extract_description, extract_title, render_markdown, shorten_html
from .history import History, resolve_timestamps
from .utils import fail, utc_from_timestamp

POSTS_DIRNAME = "posts"
ENCODED_NAME_RE = re.compile(r"^([0-9]{10})-(.+)\.md$")


@dataclass
class Post:
    creation_timestamp: int
    last_edited_timestamp: int
    slug: str
    markdown: bytes
    html: str
    source_name: str = ""

    @property
    def output_file_name(self) -> str:
        return f"{POSTS_DIRNAME}/{self.slug}.html"

    @property
    def title(self) -> str:
        return extract_title(self.html, self.slug)

    @property
    def shortened_html(self) -> str:
        return shorten_html(self.html, self.output_file_name)

    @property
    def description(self) -> str:
        return extract_description(self.markdown_text)

    @property
    def markdown_text(self) -> str:
        return self.markdown.decode("utf-8")

    @property
    def creation_time(self) -> dt.datetime:
        return utc_from_timestamp(self.creation_timestamp)

    @property
    def last_edited_time(self) -> dt.datetime:
        return utc_from_timestamp(self.last_edited_timestamp)


def read_markdown(path: Path) -> tuple[bytes, str]:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        fail(f"Cannot read post {path}: {exc}")
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        fail(f"Post {path} is not valid UTF-8: {exc}")
    return raw, text


def post_from_filename(path: Path) -> Post:
    match = ENCODED_NAME_RE.match(path.name)
    if match is None:
        fail(f"malformed post filename (expected <timestamp>-<slug>.md): {path}")
    timestamp = int(match.group(1))
    raw, text = read_markdown(path)
    return Post(
        creation_timestamp=timestamp,
        last_edited_timestamp=timestamp,
        slug=match.group(2),
        markdown=raw,
        html=render_markdown(text),
        source_name=path.name,
    )


def post_from_history(path: Path, history: History) -> Post:
    rel_path = f"{POSTS_DIRNAME}/{path.name}"
    timestamps = history(rel_path)
    if not timestamps:
        fail(f"no commits found for {rel_path}; commit the post before building")
    creation, last_edited = resolve_timestamps(timestamps)
    raw, text = read_markdown(path)
    return Post(
        creation_timestamp=creation,
        last_edited_timestamp=last_edited,
        slug=path.stem,
        markdown=raw,
        html=render_markdown(text),
        source_name=path.name,
    )


def list_post_files(posts_dir: Path) -> list[Path]:
    try:
        with os.scandir(posts_dir) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        fail(f"Cannot list posts directory {posts_dir}: {exc}")
    return [
        Path(entry.path)
        for entry in entries
        if entry.is_file(follow_symlinks=False) and entry.name.endswith(".md")
    ]


def load_posts(
    posts_dir: Path,
    identity: str = "history",
    history: Optional[History] = None,
    workers: int = 1,
) -> list[Post]:
    post_files = list_post_files(posts_dir)
    if identity == "filename":
        load = post_from_filename
    elif history is None:
        raise ValueError("history-based post identity needs a history lookup")
    else:
        load = functools.partial(post_from_history, history=history)

    workers = max(1, min(workers, len(post_files)))
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            posts = list(executor.map(load, post_files))
    else:
        posts = [load(path) for path in post_files]

    # Stable sort: posts created in the same second keep filename order.
    posts.sort(key=lambda post: post.creation_timestamp)
    return posts


def dedupe_slugs(posts: list[Post]) -> None:
    taken = {post.slug for post in posts}
    seen: set[str] = set()
    for post in posts:
        if post.slug in seen:
            counter = 1
            while f"{post.slug}-{counter}" in taken:
                counter += 1
            post.slug = f"{post.slug}-{counter}"
            taken.add(post.slug)
        seen.add(post.slug)
