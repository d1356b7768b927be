"""Shared fixtures for the mdsite tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdsite.config import SiteConfig
from mdsite.content import render_markdown
from mdsite.posts import Post


@pytest.fixture
def site_config(tmp_path: Path) -> SiteConfig:
    source_dir = tmp_path / "source"
    (source_dir / "posts").mkdir(parents=True)
    return SiteConfig(
        source_dir=source_dir,
        source_url="https://github.com/example/blog-data",
        target_dir=tmp_path / "public",
        target_url="https://blog.example.org",
        page_name="Example Blog",
        page_description="Notes & thoughts",
        post_identity="filename",
        build_workers=1,
    )


@pytest.fixture
def write_post(site_config: SiteConfig):
    def write(name: str, text: str) -> Path:
        path = site_config.source_path("posts", name)
        path.write_text(text, encoding="utf-8")
        return path

    return write


@pytest.fixture
def make_post():
    def make(slug: str, text: str, created: int = 1_500_000_000, edited: int | None = None) -> Post:
        return Post(
            creation_timestamp=created,
            last_edited_timestamp=created if edited is None else edited,
            slug=slug,
            markdown=text.encode("utf-8"),
            html=render_markdown(text),
            source_name=f"{slug}.md",
        )

    return make
