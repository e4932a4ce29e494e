"""Catalog View — display helpers for activities, packages and island filters.

Invariants:
    - Translated text falls back: requested language, then the entity's own fields, then slug
    - Prices shown are USD amounts; currency conversion happens at render time
"""

import json
from typing import Any

PAGE_SECTION_TYPES = (
    "hero", "activity-hero", "itinerary", "faq", "gallery",
    "description", "overview", "highlights", "inclusions", "pricing",
)


def _translation(item: dict, lang: str, key: str) -> str | None:
    translations = item.get("translations")
    if isinstance(translations, dict):
        value = (translations.get(lang) or {}).get(key)
        if value:
            return value
    return None


def activity_title(activity: dict, lang: str) -> str:
    seo = activity.get("seo_metadata") or {}
    return (
        _translation(activity, lang, "title")
        or activity.get("title")
        or seo.get("title")
        or activity.get("slug")
        or "Activity"
    )


def activity_description(activity: dict, lang: str) -> str:
    seo = activity.get("seo_metadata") or {}
    return (
        _translation(activity, lang, "description")
        or activity.get("description")
        or seo.get("description")
        or ""
    )


def activity_images(activity: dict) -> list[str]:
    """images arrives either as a list of URLs or as a JSON-encoded string."""
    images = activity.get("images")
    if isinstance(images, str):
        try:
            images = json.loads(images)
        except ValueError:
            return [images] if images.startswith(("http://", "https://", "/")) else []
    return [i for i in images if isinstance(i, str)] if isinstance(images, list) else []


def package_name(package: dict, lang: str) -> str:
    options = package.get("options_config") or {}
    return (
        _translation(package, lang, "name")
        or options.get("title")
        or package.get("name_internal")
        or package.get("name")
        or "Package"
    )


def package_price(package: dict, currency_code: str = "USD") -> float | None:
    prices = package.get("prices") or []
    for price in prices:
        if price.get("currency_code") == currency_code:
            return _as_float(price.get("amount"))
    amounts = [_as_float(p.get("amount")) for p in prices]
    amounts = [a for a in amounts if a is not None]
    if amounts:
        return min(amounts)
    return _as_float(package.get("price"))


def activity_price(activity: dict) -> float | None:
    for key in ("min_price_usd", "base_price", "price"):
        value = _as_float(activity.get(key))
        if value is not None:
            return value
    return None


def active_packages(activity: dict) -> list[dict]:
    packages = [p for p in activity.get("packages") or [] if p.get("is_active", True)]
    return sorted(packages, key=lambda p: (not p.get("is_recommended"), p.get("sort_order", 0)))


def page_sections(activity: dict) -> list[dict]:
    """Known page-builder sections in layout order; unknown types are skipped."""
    layout = activity.get("page_layout") or []
    return [
        {"type": c.get("type"), "props": c.get("props") or {}}
        for c in layout
        if isinstance(c, dict) and c.get("type") in PAGE_SECTION_TYPES
    ]


def narrow_islands(islands: list[dict], atolls: list[dict], atoll_code: str | None) -> list[dict]:
    """Islands of the selected atoll (by code); all islands when no atoll is selected."""
    if not atoll_code:
        return islands
    atoll = next((a for a in atolls if a.get("code") == atoll_code), None)
    if atoll is None:
        return []
    return [i for i in islands if i.get("atoll_id") == atoll.get("id")]


def parse_layout(text: str) -> list[dict]:
    """Sections posted by the layout editor; raises ValueError naming the first problem."""
    try:
        sections = json.loads(text or "[]")
    except ValueError:
        raise ValueError("Layout must be valid JSON")
    if not isinstance(sections, list):
        raise ValueError("Layout must be a list of sections")
    parsed = []
    for index, section in enumerate(sections, start=1):
        if not isinstance(section, dict):
            raise ValueError(f"Section {index} must be an object")
        section_type = section.get("type")
        if section_type not in PAGE_SECTION_TYPES:
            raise ValueError(f"Section {index} has unknown type: {section_type}")
        props = section.get("props") or {}
        if not isinstance(props, dict):
            raise ValueError(f"Section {index} props must be an object")
        parsed.append({"type": section_type, "props": props})
    return parsed


def _as_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
