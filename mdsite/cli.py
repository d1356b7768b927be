from __future__ import annotations

import argparse
import datetime as dt
import os
import time
from pathlib import Path
from typing import Optional

from .config import IDENTITY_STRATEGIES, SiteConfig, load_config
from .history import GitHistory, History
from .pages import build_index, build_posts, build_rss, build_sitemap
from .posts import POSTS_DIRNAME, dedupe_slugs, load_posts
from .render import PageWriter
from .utils import clean_output_dir, fail

MAX_WORKERS = 32


def resolve_workers(value: int) -> int:
    if value <= 0:
        value = os.cpu_count() or 1
    return max(1, min(value, MAX_WORKERS))


def build_site(
    config: SiteConfig,
    history: Optional[History] = None,
    now: Optional[dt.datetime] = None,
) -> int:
    posts_dir = config.source_path(POSTS_DIRNAME)
    if not posts_dir.is_dir():
        fail(f"Posts directory not found: {posts_dir}")
    workers = resolve_workers(config.build_workers)

    if config.post_identity == "history" and history is None:
        history = GitHistory(config.source_dir)

    # All posts load before the first write.
    posts = load_posts(posts_dir, config.post_identity, history, workers)
    dedupe_slugs(posts)
    writer = PageWriter(config)

    if config.clean:
        clean_output_dir(config.target_dir, [Path.cwd(), config.source_dir])
    config.target_path(POSTS_DIRNAME).mkdir(parents=True, exist_ok=True)

    writer.write_stylesheet()
    build_posts(writer, posts, workers=workers)

    posts.reverse()
    build_index(writer, posts)
    build_sitemap(writer, posts)
    build_rss(writer, posts, now)
    return len(posts)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Static blog generator for a directory of Markdown posts.")
    parser.add_argument("config", help="Path to the site config file (directives, TOML, YAML or JSON).")
    parser.add_argument(
        "--post-identity",
        choices=IDENTITY_STRATEGIES,
        default=None,
        help="Take post dates from git history or from <timestamp>-<slug>.md filenames.",
    )
    parser.add_argument(
        "--build-workers",
        type=int,
        default=None,
        help="Number of worker threads for loading and rendering posts (0 = auto).",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove the target directory before writing.",
    )
    args = parser.parse_args(argv)

    overrides = {
        "post-identity": args.post_identity,
        "build-workers": args.build_workers,
        "clean": args.clean,
    }
    config = load_config(Path(args.config), overrides)

    start = time.perf_counter()
    try:
        count = build_site(config)
    except OSError as exc:
        fail(str(exc))
    elapsed = time.perf_counter() - start
    print(f"Processed {count} posts.")
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {config.target_dir}")

