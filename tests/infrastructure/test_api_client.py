"""Backend API Client — verifies envelope handling over a mocked transport.

Tests cover:
    - Success envelope, bare JSON and empty bodies
    - Bearer header only when a token is given
    - Unset query params are dropped
    - Non-2xx with and without an error envelope
    - Invalid JSON, timeouts and connection errors never raise
    - authenticated() short-circuits without a token
    - Singleton lifecycle
"""

import json

import httpx
import pytest
import respx

from rihigo_web.core.api_response import ApiResponse
from rihigo_web.infrastructure import api_client as api_client_module
from rihigo_web.infrastructure.api_client import (
    AUTH_REQUIRED,
    BackendApiClient,
    authenticated,
    clean_params,
    close_api_client,
    get_api_client,
    init_api_client,
)

BASE = "http://api.test"


@pytest.fixture
async def client():
    api = BackendApiClient(BASE + "/")
    yield api
    await api.close()


# -- Success paths -------------------------------------------------------------


@respx.mock
async def test_envelope_is_parsed(client):
    respx.get(f"{BASE}/api/activities").mock(return_value=httpx.Response(200, json={
        "success": True,
        "data": {"activities": [{"slug": "dive"}]},
        "pagination_data": {"page": 1, "page_size": 20, "total_count": 1, "total_pages": 1},
    }))
    result = await client.get("/api/activities")
    assert result.success
    assert result.items("activities") == [{"slug": "dive"}]
    assert result.pagination_data.total_count == 1
    assert result.status_code == 200


@respx.mock
async def test_bare_json_is_data(client):
    respx.get(f"{BASE}/api/currencies").mock(return_value=httpx.Response(200, json=[{"code": "USD"}]))
    result = await client.get("/api/currencies")
    assert result.success
    assert result.data == [{"code": "USD"}]


@respx.mock
async def test_empty_body_is_success(client):
    respx.delete(f"{BASE}/api/admin/faqs/1").mock(return_value=httpx.Response(204))
    result = await client.delete("/api/admin/faqs/1", token="tok")
    assert result.success
    assert result.data is None


@respx.mock
async def test_bearer_header_only_with_token(client):
    route = respx.get(f"{BASE}/api/me").mock(return_value=httpx.Response(200, json={}))
    await client.get("/api/me", token="id-token")
    assert route.calls.last.request.headers["Authorization"] == "Bearer id-token"
    await client.get("/api/me")
    assert "Authorization" not in route.calls.last.request.headers


@respx.mock
async def test_unset_params_are_dropped(client):
    route = respx.get(f"{BASE}/api/activities").mock(return_value=httpx.Response(200, json=[]))
    await client.get("/api/activities", params={"page": 2, "q": "", "island": None})
    assert dict(route.calls.last.request.url.params) == {"page": "2"}


@respx.mock
async def test_post_sends_json_body(client):
    route = respx.post(f"{BASE}/api/bookings").mock(return_value=httpx.Response(201, json={"success": True, "data": {"id": "b1"}}))
    result = await client.post("/api/bookings", {"activity_id": "a1"}, token="t")
    assert result.data == {"id": "b1"}
    assert json.loads(route.calls.last.request.content) == {"activity_id": "a1"}


# -- Failure paths -------------------------------------------------------------


@respx.mock
async def test_error_envelope_is_kept(client):
    respx.post(f"{BASE}/api/admin/vendors").mock(return_value=httpx.Response(422, json={
        "success": False, "errors": [{"field": "email", "message": "already used"}],
    }))
    result = await client.post("/api/admin/vendors", {}, token="t")
    assert not result.success
    assert result.status_code == 422
    assert result.errors == [{"field": "email", "message": "already used"}]


@respx.mock
async def test_error_without_envelope_gets_status_message(client):
    respx.get(f"{BASE}/api/me").mock(return_value=httpx.Response(500, text="boom"))
    result = await client.get("/api/me")
    assert not result.success
    assert result.error_message == "API request failed with status 500: Internal Server Error"


@respx.mock
async def test_invalid_json_on_success(client):
    respx.get(f"{BASE}/api/faqs").mock(return_value=httpx.Response(200, text="<html>"))
    result = await client.get("/api/faqs")
    assert not result.success
    assert result.error_message == "Invalid JSON in API response"


@respx.mock
async def test_timeout_becomes_network_error(client):
    respx.get(f"{BASE}/api/faqs").mock(side_effect=httpx.ReadTimeout("slow"))
    result = await client.get("/api/faqs")
    assert not result.success
    assert result.error_message == "Network error: request timed out"


@respx.mock
async def test_connection_error_never_raises(client):
    respx.get(f"{BASE}/health").mock(side_effect=httpx.ConnectError("refused"))
    assert await client.health() is False


@respx.mock
async def test_health_true_on_2xx(client):
    respx.get(f"{BASE}/health").mock(return_value=httpx.Response(200, json={"status": "ok"}))
    assert await client.health() is True


# -- Helpers -------------------------------------------------------------------


async def test_authenticated_without_token():
    async def call(token):
        raise AssertionError("should not be called")

    result = await authenticated(None, call)
    assert not result.success
    assert result.error_message == AUTH_REQUIRED
    assert result.status_code == 401


async def test_authenticated_passes_token():
    async def call(token):
        return ApiResponse.ok(token)

    assert (await authenticated("tok", call)).data == "tok"


def test_clean_params():
    assert clean_params(None) is None
    assert clean_params({"q": ""}) is None
    assert clean_params({"q": "x", "page": 0}) == {"q": "x", "page": 0}


async def test_singleton_lifecycle(monkeypatch):
    monkeypatch.setattr(api_client_module, "api_client", None)
    with pytest.raises(RuntimeError):
        get_api_client()
    created = init_api_client("http://api.test/")
    assert get_api_client() is created
    assert created.base_url == BASE
    await close_api_client()
    assert api_client_module.api_client is None
