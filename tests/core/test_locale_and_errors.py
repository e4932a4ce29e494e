"""Locale and Errors — verifies language prefixes and redirect/JSON error shapes.

Tests cover:
    - resolve_locale is case-insensitive and rejects unknown prefixes
    - switch_locale_path keeps the page path
    - Redirect targets of authentication/authorization errors
    - JSON envelope of API errors
"""

from rihigo_web.core.errors import (
    AccessDeniedError,
    AuthenticationRequiredError,
    BackendApiError,
    ErrorCategory,
    ResourceNotFoundError,
)
from rihigo_web.core.locale import resolve_locale, switch_locale_path

SUPPORTED = ["en", "it"]


# -- Locale --------------------------------------------------------------------


def test_resolve_locale():
    assert resolve_locale("en", SUPPORTED) == "en"
    assert resolve_locale("IT", SUPPORTED) == "it"
    assert resolve_locale("fr", SUPPORTED) is None
    assert resolve_locale(None, SUPPORTED) is None


def test_switch_locale_path_keeps_page():
    assert switch_locale_path("/en/faq", "it", SUPPORTED) == "/it/faq"
    assert switch_locale_path("/en/activities/dive", "it", SUPPORTED) == "/it/activities/dive"
    assert switch_locale_path("/en", "it", SUPPORTED) == "/it/"
    assert switch_locale_path("/vendor", "it", SUPPORTED) == "/it/"


# -- Errors --------------------------------------------------------------------


def test_authentication_error_redirects_to_sign_in_with_callback():
    error = AuthenticationRequiredError("/vendor/bookings?page=2")
    assert error.redirect_to == "/auth/sign-in?callbackUrl=%2Fvendor%2Fbookings%3Fpage%3D2"
    assert error.http_status == 401


def test_access_denied_redirect_target():
    assert AccessDeniedError("admin").redirect_to == "/"
    error = AccessDeniedError("vendor", redirect_to="/auth/vendor-access-denied")
    assert error.redirect_to == "/auth/vendor-access-denied"
    assert error.category == ErrorCategory.AUTHORIZATION


def test_page_errors_have_no_redirect():
    assert ResourceNotFoundError("Booking", "b1").redirect_to is None
    assert ResourceNotFoundError("Booking", "b1").http_status == 404


def test_backend_error_records_endpoint():
    error = BackendApiError("API down", endpoint="/api/activities")
    assert error.http_status == 502
    assert error.context.endpoint == "/api/activities"
    assert error.to_response()["error_message"] == "API down"
