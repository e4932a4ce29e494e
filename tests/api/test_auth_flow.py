"""Auth Flow — Google sign-in round trip through the real cookie session.

Tests cover:
    - /auth/google stores a state and redirects to Google's consent page
    - Callback exchanges the code, syncs the backend user and lands on the callback URL
    - The stored session then satisfies guarded pages
    - State mismatch and provider errors bounce back to sign-in with an error code
    - Sign-out clears the session
"""

import httpx
import pytest

from rihigo_web.infrastructure.google_oauth import TOKEN_URL, USERINFO_URL

API = "http://api.test"


@pytest.fixture
def google(api_mock):
    api_mock.post(TOKEN_URL).respond(200, json={
        "id_token": "google-id-token",
        "access_token": "google-access-token",
        "refresh_token": "google-refresh-token",
        "expires_in": 3600,
    })
    api_mock.get(USERINFO_URL).respond(200, json={
        "email": "aisha@example.mv", "name": "Aisha Ali", "picture": "https://img.test/a.png",
    })
    api_mock.get(f"{API}/api/users/by-email").respond(200, json={"success": True, "data": {
        "id": "u42", "email": "aisha@example.mv", "name": "Aisha Ali", "role": "user",
    }})


async def _start(client, callback_url: str = "/en/bookings") -> str:
    response = await client.get("/auth/google", params={"callbackUrl": callback_url})
    assert response.status_code == 302
    location = httpx.URL(response.headers["location"])
    assert location.host == "accounts.google.com"
    return location.params["state"]


async def test_google_round_trip_signs_in(client, google, api_mock):
    state = await _start(client)
    response = await client.get("/auth/google/callback", params={"code": "abc", "state": state})
    assert response.status_code == 302
    assert response.headers["location"] == "/en/bookings"

    bookings = api_mock.get(f"{API}/api/bookings").respond(
        200, json={"success": True, "data": {"bookings": []}},
    )
    page = await client.get("/en/bookings")
    assert page.status_code == 200
    assert bookings.calls.last.request.headers["authorization"] == "Bearer google-id-token"


async def test_offsite_callback_falls_back_to_welcome(client, google):
    state = await _start(client, "https://evil.example/steal")
    response = await client.get("/auth/google/callback", params={"code": "abc", "state": state})
    assert response.headers["location"] == "/auth/welcome"


async def test_state_mismatch_is_rejected(client, google):
    await _start(client)
    response = await client.get("/auth/google/callback", params={"code": "abc", "state": "forged"})
    assert response.status_code == 302
    assert response.headers["location"] == "/auth/sign-in?error=OAuthState"


async def test_provider_error_is_rejected(client):
    response = await client.get("/auth/google/callback", params={"error": "access_denied"})
    assert response.headers["location"] == "/auth/sign-in?error=OAuthCallback"


async def test_sign_out_clears_session(client, google):
    state = await _start(client)
    await client.get("/auth/google/callback", params={"code": "abc", "state": state})

    response = await client.post("/auth/sign-out")
    assert response.status_code == 303
    assert response.headers["location"] == "/"

    page = await client.get("/en/bookings")
    assert page.status_code == 302
    assert page.headers["location"].startswith("/auth/sign-in")
