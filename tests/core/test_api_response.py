"""API Response Envelope — verifies envelope parsing and error-message precedence.

Tests cover:
    - from_payload with and without the {success, ...} envelope
    - PaginationData parsing and navigation flags
    - items() over bare lists and keyed wrappers
    - get_error_message precedence and field_errors mapping
"""

from rihigo_web.core.api_response import (
    UNKNOWN_ERROR,
    ApiResponse,
    PaginationData,
    field_errors,
    get_error_message,
)


# -- Parsing -------------------------------------------------------------------


def test_envelope_payload_is_unwrapped():
    response = ApiResponse.from_payload({
        "success": True,
        "data": [{"id": 1}],
        "pagination_data": {"page": "2", "page_size": 10, "total_count": 35, "total_pages": 4},
        "message": "ok",
    }, status_code=200)
    assert response.success
    assert response.data == [{"id": 1}]
    assert response.pagination_data == PaginationData(2, 10, 35, 4)
    assert response.message == "ok"
    assert response.status_code == 200


def test_bare_payload_counts_as_data():
    response = ApiResponse.from_payload([1, 2, 3])
    assert response.success
    assert response.data == [1, 2, 3]
    assert response.pagination_data is None


def test_failed_envelope_keeps_errors():
    response = ApiResponse.from_payload(
        {"success": False, "error_message": "Vendor not found"}, status_code=404,
    )
    assert not response.success
    assert response.error_message == "Vendor not found"
    assert response.status_code == 404


def test_pagination_flags():
    assert not PaginationData(page=1, total_pages=1).has_previous
    assert not PaginationData(page=1, total_pages=1).has_next
    assert PaginationData(page=2, total_pages=3).has_previous
    assert PaginationData(page=2, total_pages=3).has_next


def test_pagination_from_bad_payload():
    assert PaginationData.from_payload(None) is None
    assert PaginationData.from_payload({"page": "x"}).page == 1


def test_items_handles_lists_and_wrappers():
    assert ApiResponse.ok([1, 2]).items() == [1, 2]
    assert ApiResponse.ok({"activities": [1]}).items("activities") == [1]
    assert ApiResponse.ok({"activities": None}).items("activities") == []
    assert ApiResponse.ok({"x": 1}).items() == []


# -- Error messages ------------------------------------------------------------


def test_error_message_wins():
    response = ApiResponse(success=False, error_message="Boom", errors=["a"])
    assert get_error_message(response) == "Boom"


def test_string_errors_are_joined():
    response = ApiResponse(success=False, errors=["Name taken", "Slug taken"])
    assert get_error_message(response) == "Name taken, Slug taken"


def test_field_errors_are_formatted():
    response = ApiResponse(success=False, errors=[
        {"field": "email", "message": "invalid"},
        {"field": "phone", "message": "too short"},
    ])
    assert get_error_message(response) == "email: invalid, phone: too short"
    assert field_errors(response) == {"email": "invalid", "phone": "too short"}


def test_record_errors_are_formatted():
    response = ApiResponse(success=False, errors={"name": "required"})
    assert get_error_message(response) == "name: required"
    assert field_errors(response) == {"name": "required"}


def test_unknown_error_fallback():
    assert get_error_message(ApiResponse(success=False)) == UNKNOWN_ERROR
    assert get_error_message(ApiResponse(success=False, errors=[])) == UNKNOWN_ERROR
    assert field_errors(ApiResponse(success=False, errors=["x"])) == {}
