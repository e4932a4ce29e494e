"""List Filters — search and filter over lists the API already returned.

Invariants:
    - Search is case-insensitive substring matching; an empty term matches everything
    - Filter values "" and "all" mean "no constraint"
    - Dotted keys ("island.name") walk nested dicts; missing paths never match
    - Pure functions: input lists are never mutated
"""

from collections import Counter
from typing import Any, Iterable, Mapping

from rihigo_web.core.api_response import PaginationData

NO_FILTER = ("", "all", None)


def get_path(item: Mapping[str, Any], path: str) -> Any:
    current: Any = item
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def matches_search(item: Mapping[str, Any], term: str | None, keys: Iterable[str]) -> bool:
    if not term or not term.strip():
        return True
    needle = term.strip().lower()
    for key in keys:
        value = get_path(item, key)
        if value is not None and needle in str(value).lower():
            return True
    return False


def matches_filters(item: Mapping[str, Any], equals: Mapping[str, Any]) -> bool:
    for key, expected in equals.items():
        if expected in NO_FILTER:
            continue
        actual = get_path(item, key)
        if actual is None or str(actual) != str(expected):
            return False
    return True


def filter_items(
    items: list[dict],
    search: str | None = None,
    search_keys: Iterable[str] = (),
    equals: Mapping[str, Any] | None = None,
) -> list[dict]:
    keys = tuple(search_keys)
    return [
        item for item in items
        if matches_search(item, search, keys) and matches_filters(item, equals or {})
    ]


def count_by(items: list[dict], key: str) -> dict[str, int]:
    return dict(Counter(
        str(v) for v in (get_path(i, key) for i in items) if v is not None
    ))


def unique_values(items: list[dict], key: str) -> list:
    """Distinct non-empty values in first-seen order."""
    seen: list = []
    for item in items:
        value = get_path(item, key)
        if value not in (None, "") and value not in seen:
            seen.append(value)
    return seen


def paginate(
    items: list, page: int = 1, page_size: int = 20,
) -> tuple[list, PaginationData]:
    page_size = max(1, page_size)
    total = len(items)
    total_pages = max(1, -(-total // page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return items[start:start + page_size], PaginationData(
        page=page, page_size=page_size, total_count=total, total_pages=total_pages,
    )


def active_filters(params: Mapping[str, Any], keys: Iterable[str]) -> dict[str, str]:
    """The subset of query params that constrain the list (FilterBar state)."""
    return {
        key: str(params[key]) for key in keys
        if key in params and params[key] not in NO_FILTER
    }
