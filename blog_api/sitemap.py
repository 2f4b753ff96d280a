"""sitemap.xml generation: fixed site pages plus one entry per blog post."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
POST_PRIORITY = "0.6"


@dataclass(frozen=True)
class SitemapPage:
    path: str
    priority: str
    lastmod: str = ""


STATIC_PAGES = (
    SitemapPage("/", "1.0"),
    SitemapPage("/about", "0.8"),
    SitemapPage("/resume", "0.8"),
    SitemapPage("/contact", "0.6"),
    SitemapPage("/blog", "0.7"),
)


def _date_part(value: Optional[str]) -> str:
    # publish_date may be a full timestamp; the sitemap wants YYYY-MM-DD
    if not value:
        return ""
    return str(value)[:10]


def post_pages(posts: Iterable[dict[str, Any]]) -> list[SitemapPage]:
    return [
        SitemapPage(f"/blog/{post['id']}", POST_PRIORITY, _date_part(post.get("publish_date")))
        for post in posts
    ]


def render_sitemap(base_url: str, pages: Iterable[SitemapPage], today: Optional[str] = None) -> str:
    today = today or datetime.now(timezone.utc).date().isoformat()
    urlset = ET.Element("urlset", xmlns=SITEMAP_NS)
    for page in pages:
        url = ET.SubElement(urlset, "url")
        ET.SubElement(url, "loc").text = f"{base_url}{page.path}"
        ET.SubElement(url, "lastmod").text = page.lastmod or today
        ET.SubElement(url, "priority").text = page.priority

    ET.indent(urlset, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(urlset, encoding="unicode")


def generate_sitemap(base_url: str, fetch_posts: Callable[[], Iterable[dict[str, Any]]]) -> str:
    pages = list(STATIC_PAGES) + post_pages(fetch_posts())
    return render_sitemap(base_url, pages)
