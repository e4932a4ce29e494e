"""Locale — URL language prefix resolution.

Invariants:
    - resolve_locale returns None for unsupported prefixes (caller responds 404)
    - Comparisons are case-insensitive; the canonical form is lowercase
"""

from typing import Iterable

LOCALE_NAMES: dict[str, str] = {
    "en": "English",
    "it": "Italiano",
}


def resolve_locale(lang: str | None, supported: Iterable[str]) -> str | None:
    if not lang:
        return None
    candidate = lang.lower()
    return candidate if candidate in {s.lower() for s in supported} else None


def switch_locale_path(path: str, target: str, supported: Iterable[str]) -> str:
    """Same page under another language prefix ("/en/faq" -> "/it/faq")."""
    parts = path.lstrip("/").split("/", 1)
    if parts and resolve_locale(parts[0], supported):
        rest = parts[1] if len(parts) > 1 else ""
        return f"/{target}/{rest}"
    return f"/{target}/"