"""Sitemap — XML rendering for search engines.

Invariants:
    - Static pages are emitted for every locale, even when activities fail to load
    - Only published activities with a slug get an entry
    - Output is well-formed XML (values are escaped)
"""

from dataclasses import dataclass
from typing import Iterable
from xml.sax.saxutils import escape

from rihigo_web.core.calendar_grid import parse_iso_date

STATIC_PAGES: tuple[tuple[str, str, str], ...] = (
    # (path, changefreq, priority)
    ("", "daily", "1.0"),
    ("activities", "daily", "0.9"),
    ("about-us", "monthly", "0.5"),
    ("faq", "weekly", "0.6"),
    ("imuga", "monthly", "0.6"),
    ("privacy", "yearly", "0.3"),
    ("terms", "yearly", "0.3"),
)


@dataclass(frozen=True)
class SitemapEntry:
    loc: str
    changefreq: str = "weekly"
    priority: str = "0.5"
    lastmod: str | None = None


def build_entries(
    site_url: str, locales: Iterable[str], activities: list[dict],
) -> list[SitemapEntry]:
    base = site_url.rstrip("/")
    langs = list(locales)
    entries = [
        SitemapEntry(f"{base}/{lang}/{path}", freq, priority)
        for lang in langs
        for path, freq, priority in STATIC_PAGES
    ]
    for activity in activities:
        slug = activity.get("slug")
        if not slug or activity.get("status", "published") != "published":
            continue
        if activity.get("is_active") is False:
            continue
        modified = parse_iso_date(activity.get("updated_at"))
        for lang in langs:
            entries.append(SitemapEntry(
                loc=f"{base}/{lang}/activities/{slug}",
                changefreq="weekly",
                priority="0.8",
                lastmod=modified.isoformat() if modified else None,
            ))
    return entries


def build_sitemap_xml(entries: list[SitemapEntry]) -> str:
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for entry in entries:
        lines.append("  <url>")
        lines.append(f"    <loc>{escape(entry.loc)}</loc>")
        if entry.lastmod:
            lines.append(f"    <lastmod>{entry.lastmod}</lastmod>")
        lines.append(f"    <changefreq>{entry.changefreq}</changefreq>")
        lines.append(f"    <priority>{entry.priority}</priority>")
        lines.append("  </url>")
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"
