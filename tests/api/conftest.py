"""Route test fixtures — FastAPI test client over a mocked external API.

Invariants:
    - get_api_client overridden with a client whose transport is mocked by respx
    - Calls the test did not mock get an empty 200 (data None), never a real request
    - Signed-in state is injected by overriding get_auth_session; without sign_in()
      the real session dependency runs against the (empty) cookie session

Design Decisions:
    - ASGITransport does not run the lifespan, so the API client singleton is never
      initialized here; the override is mandatory
    - respx without base_url: the OAuth flow mocks Google endpoints alongside the API
"""

import httpx
import pytest
import respx
from fastapi import Request
from httpx import ASGITransport, AsyncClient

from rihigo_web.api.dependencies import get_auth_session
from rihigo_web.core.auth_session import AuthSession, SessionUser
from rihigo_web.infrastructure.api_client import BackendApiClient, get_api_client
from rihigo_web.main import app

API = "http://api.test"


@pytest.fixture
def api_mock():
    with respx.mock(assert_all_called=False, assert_all_mocked=False) as mock:
        yield mock


@pytest.fixture
async def backend(api_mock):
    client = BackendApiClient(API, http_client=httpx.AsyncClient())
    yield client
    await client.http.aclose()


@pytest.fixture
async def client(backend):
    """FastAPI test client with the API client dependency overridden."""
    app.dependency_overrides[get_api_client] = lambda: backend
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def sign_in():
    """Call sign_in(role=...) inside a test to act as a signed-in user."""
    def _sign_in(role: str = "user", email: str = "guest@example.mv") -> AuthSession:
        auth = AuthSession(
            access_token="test-id-token",
            user=SessionUser(id="u1", email=email, name="Test Guest", role=role),
        )

        def override(request: Request) -> AuthSession:
            request.state.auth = auth
            return auth

        app.dependency_overrides[get_auth_session] = override
        return auth
    return _sign_in


@pytest.fixture
def vendor_profile(api_mock):
    """The signed-in user is linked to a vendor account."""
    profile = {"id": "v1", "business_name": "Atoll Divers", "status": "active"}
    api_mock.get(f"{API}/api/vendor/profile").respond(
        200, json={"success": True, "data": profile},
    )
    return profile
