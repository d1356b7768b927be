from __future__ import annotations

import datetime as dt
import html
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .config import SiteConfig
from .content import add_permalink, escape_html, strip_tags
from .posts import POSTS_DIRNAME, Post
from .render import PageWriter
from .utils import join_url, readable_date, rfc822_date

INDEX_LIMIT = 10
FEED_LIMIT = 10
SITEMAP_MONTH_FMT = "%b %Y"


def history_url(config: SiteConfig, post: Post) -> str:
    return join_url(config.source_url, f"commits/{config.source_branch}/{POSTS_DIRNAME}/{post.source_name}")


def render_post_content(post: Post, config: SiteConfig) -> str:
    ctime = readable_date(post.creation_time)
    mtime = readable_date(post.last_edited_time)
    if ctime == mtime:
        footer = f"<p><i>Created: {ctime}</i></p>"
    else:
        footer = (
            f"<p><i>Created: {ctime}</i><br>"
            f'<i>Last edited: <a href="{history_url(config, post)}" title="Commit history">{mtime}</a></i></p>'
        )
    return post.html + footer


def post_metadata(post: Post, config: SiteConfig) -> dict[str, str]:
    metadata = {
        "og:title": post.title,
        "og:type": "article",
        "og:url": join_url(config.target_url, post.output_file_name),
    }
    description = post.description
    if description:
        metadata["og:description"] = description
    return metadata


def build_posts(writer: PageWriter, posts: list[Post], workers: int = 1) -> list[Path]:
    config = writer.config

    def render_post(post: Post) -> Path:
        return writer.write(
            post.output_file_name,
            post.title,
            render_post_content(post, config),
            post_metadata(post, config),
        )

    workers = max(1, min(workers, len(posts)))
    if workers <= 1:
        return [render_post(post) for post in posts]
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(render_post, posts))


def render_index(posts: list[Post], limit: int = INDEX_LIMIT) -> str:
    articles = [add_permalink(post.shortened_html, post.output_file_name) for post in posts[:limit]]
    if not articles:
        return ""
    return "<article>" + "</article><article>".join(articles) + "</article>"


def build_index(writer: PageWriter, posts: list[Post]) -> Path:
    config = writer.config
    metadata = {
        "og:title": config.page_name,
        "og:type": "website",
        "og:url": config.target_url,
    }
    return writer.write("index.html", "", render_index(posts), metadata)


def render_sitemap(posts: list[Post]) -> str:
    if not posts:
        return '<section class="sitemap"></section>'
    items = []
    current_month = ""
    for post in posts:
        month = post.creation_time.strftime(SITEMAP_MONTH_FMT)
        if month != current_month:
            items.append(f"</ul><h2>{month}</h2><ul>")
            current_month = month
        items.append(f'<li><a href="{post.output_file_name}">{post.title}</a></li>')
    body = "".join(items).removeprefix("</ul>")
    return f'<section class="sitemap">{body}</ul></section>'


def build_sitemap(writer: PageWriter, posts: list[Post]) -> Path:
    return writer.write("sitemap.html", "Article list", render_sitemap(posts), {})


def feed_title(post: Post) -> str:
    # XML knows none of the named HTML entities Markdown leaves in place.
    return escape_html(html.unescape(strip_tags(post.title)))


def render_rss(
    posts: list[Post], config: SiteConfig, now: dt.datetime | None = None, limit: int = FEED_LIMIT
) -> str:
    if now is None:
        now = dt.datetime.now(dt.timezone.utc)
    lines = [
        '<?xml version="1.0"?>',
        '<rss version="2.0"><channel>',
        f"  <title>{escape_html(config.page_name)}</title>",
        f"  <link>{config.target_url}</link>",
        f"  <description>{escape_html(config.page_description)}</description>",
        f"  <language>{config.language}</language>",
        f"  <lastBuildDate>{rfc822_date(now)}</lastBuildDate>",
    ]
    for post in posts[:limit]:
        link = join_url(config.target_url, post.output_file_name)
        lines.extend(
            [
                "  <item>",
                f"    <title>{feed_title(post)}</title>",
                f"    <description>{escape_html(post.shortened_html)}</description>",
                f"    <link>{link}</link>",
                f"    <guid>{link}</guid>",
                f"    <pubDate>{rfc822_date(post.creation_time)}</pubDate>",
                "  </item>",
            ]
        )
    lines.append("</channel></rss>\n")
    return "\n".join(lines)


def build_rss(writer: PageWriter, posts: list[Post], now: dt.datetime | None = None) -> Path:
    return writer.write_raw("rss.xml", render_rss(posts, writer.config, now))
