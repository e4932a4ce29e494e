"""Auth Session — verifies session (de)serialization, expiry and callback safety.

Tests cover:
    - from_dict rejects sessions without a user email
    - to_dict never stores the vendor profile
    - Validity and expiry with the refresh skew
    - safe_callback_url keeps redirects on-site, including backslash tricks
"""

from rihigo_web.core.auth_session import (
    EXPIRY_SKEW_SECONDS,
    REFRESH_ERROR,
    AuthSession,
    SessionUser,
    safe_callback_url,
)


def _stored(**overrides):
    data = {
        "access_token": "id-token",
        "refresh_token": "refresh",
        "expires_at": 1_000,
        "error": None,
        "user": {"id": "u1", "email": "guest@example.mv", "name": "Guest", "role": "user"},
    }
    data.update(overrides)
    return data


# -- Serialization -------------------------------------------------------------


def test_from_dict_round_trip():
    auth = AuthSession.from_dict(_stored())
    assert auth.user.email == "guest@example.mv"
    assert AuthSession.from_dict(auth.to_dict()) == auth


def test_from_dict_rejects_malformed_data():
    assert AuthSession.from_dict(None) is None
    assert AuthSession.from_dict({"access_token": "x"}) is None
    assert AuthSession.from_dict(_stored(user={"name": "No email"})) is None


def test_missing_role_defaults_to_user():
    auth = AuthSession.from_dict(_stored(user={"email": "a@b.mv"}))
    assert auth.user.role == "user"
    assert not auth.user.is_admin


def test_vendor_profile_is_not_serialized():
    auth = AuthSession.from_dict(_stored())
    auth.vendor = {"id": "v1"}
    assert "vendor" not in auth.to_dict()


# -- Validity ------------------------------------------------------------------


def test_session_with_refresh_error_is_invalid():
    assert AuthSession.from_dict(_stored()).is_valid
    assert not AuthSession.from_dict(_stored(error=REFRESH_ERROR)).is_valid
    assert not AuthSession.from_dict(_stored(access_token="")).is_valid


def test_expiry_includes_skew():
    auth = AuthSession.from_dict(_stored(expires_at=1_000))
    assert not auth.is_expired(1_000 - EXPIRY_SKEW_SECONDS - 1)
    assert auth.is_expired(1_000 - EXPIRY_SKEW_SECONDS)


def test_session_without_expiry_never_expires():
    assert not AuthSession.from_dict(_stored(expires_at=0)).is_expired(10**12)


def test_user_display_name_and_admin_flag():
    assert SessionUser(id=None, email="ali@rihigo.com").display_name == "ali"
    assert SessionUser(id=None, email="a@b.mv", name="Ali").display_name == "Ali"
    assert SessionUser(id=None, email="a@b.mv", role="admin").is_admin


# -- Callback URLs -------------------------------------------------------------


def test_relative_paths_pass_through():
    assert safe_callback_url("/en/bookings?page=2") == "/en/bookings?page=2"


def test_offsite_and_loop_urls_fall_back():
    for url in (
        None, "", "//evil.com", "https://evil.com/", "javascript:alert(1)",
        "en/bookings", "/auth/sign-in?callbackUrl=/", "/auth/google/callback",
    ):
        assert safe_callback_url(url) == "/"
    assert safe_callback_url("//evil.com", default="/en/") == "/en/"


def test_backslash_and_control_characters_fall_back():
    for url in ("/\\evil.com", "/\\\\evil.com", "/en/\\bookings", "/en\t/bookings", "/en\n"):
        assert safe_callback_url(url) == "/"
