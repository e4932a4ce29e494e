"""List Filters — verifies search, equality filters, counts and pagination.

Tests cover:
    - Dotted-path lookup
    - Case-insensitive search over several keys
    - "" / "all" / None filter values are ignored
    - count_by / unique_values
    - paginate clamps page numbers
    - active_filters keeps only constraining params
"""

from rihigo_web.core.list_filters import (
    active_filters,
    count_by,
    filter_items,
    get_path,
    matches_filters,
    matches_search,
    paginate,
    unique_values,
)

BOOKINGS = [
    {"id": "b1", "status": "pending", "customer": {"name": "Aishath Rasheed"}, "island": "Maafushi"},
    {"id": "b2", "status": "confirmed", "customer": {"name": "Marco Rossi"}, "island": "Thulusdhoo"},
    {"id": "b3", "status": "pending", "customer": {"name": "Mariyam Ali"}, "island": None},
]


# -- Lookup and matching -------------------------------------------------------


def test_get_path_walks_nested_dicts():
    assert get_path(BOOKINGS[0], "customer.name") == "Aishath Rasheed"
    assert get_path(BOOKINGS[0], "customer.email") is None
    assert get_path(BOOKINGS[0], "status.value") is None


def test_search_is_case_insensitive_over_keys():
    assert matches_search(BOOKINGS[1], "rossi", ["customer.name", "island"])
    assert matches_search(BOOKINGS[1], "THULUS", ["customer.name", "island"])
    assert not matches_search(BOOKINGS[1], "maafushi", ["customer.name"])


def test_blank_search_matches_everything():
    assert matches_search(BOOKINGS[0], "", ["id"])
    assert matches_search(BOOKINGS[0], "   ", ["id"])
    assert matches_search(BOOKINGS[0], None, ["id"])


def test_no_filter_values_are_ignored():
    assert matches_filters(BOOKINGS[0], {"status": "all", "island": "", "id": None})


def test_filter_compares_as_strings():
    assert matches_filters({"count": 3}, {"count": "3"})
    assert not matches_filters(BOOKINGS[2], {"island": "Maafushi"})


def test_filter_items_combines_search_and_equals():
    result = filter_items(BOOKINGS, search="mar", search_keys=["customer.name"], equals={"status": "pending"})
    assert [b["id"] for b in result] == ["b3"]


def test_filter_items_does_not_mutate_input():
    before = list(BOOKINGS)
    filter_items(BOOKINGS, equals={"status": "confirmed"})
    assert BOOKINGS == before


# -- Aggregates ----------------------------------------------------------------


def test_count_by_skips_missing_values():
    assert count_by(BOOKINGS, "status") == {"pending": 2, "confirmed": 1}
    assert count_by(BOOKINGS, "island") == {"Maafushi": 1, "Thulusdhoo": 1}


def test_unique_values_keeps_first_seen_order():
    items = [{"atoll": "Kaafu"}, {"atoll": "Baa"}, {"atoll": "Kaafu"}, {"atoll": ""}]
    assert unique_values(items, "atoll") == ["Kaafu", "Baa"]


# -- Pagination ----------------------------------------------------------------


def test_paginate_slices_and_reports_totals():
    items = list(range(45))
    page, info = paginate(items, page=2, page_size=20)
    assert page == list(range(20, 40))
    assert info.total_count == 45
    assert info.total_pages == 3
    assert info.has_previous and info.has_next


def test_paginate_clamps_out_of_range_pages():
    items = list(range(5))
    page, info = paginate(items, page=9, page_size=2)
    assert page == [4]
    assert info.page == 3
    _, info = paginate(items, page=0, page_size=2)
    assert info.page == 1


def test_paginate_empty_list_has_one_page():
    page, info = paginate([], page=1)
    assert page == []
    assert info.total_pages == 1
    assert not info.has_next


# -- Active filters ------------------------------------------------------------


def test_active_filters_drops_unconstrained_params():
    params = {"status": "pending", "island": "all", "q": "", "page": "2"}
    assert active_filters(params, ["status", "island", "q"]) == {"status": "pending"}
