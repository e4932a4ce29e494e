"""Backend API Client — single generic request helper over a shared httpx.AsyncClient.

Invariants:
    - request() always returns an ApiResponse; transport failures never raise
    - Authorization header is sent only when a bearer token is given
    - Query params with None/empty values are dropped before encoding
    - Non-2xx bodies that carry the envelope keep their own error_message/errors
    - Every call is logged with endpoint, method, status_code and duration_ms

Design Decisions:
    - Singleton api_client initialized on startup: FastAPI lifespan manages lifecycle
      (ADR: no global import side effects)
    - No retry policy: a failed call surfaces to the page as an error state
"""

import logging
import time
from typing import Any, Awaitable, Callable, Mapping

import httpx

from rihigo_web.core.api_response import ApiResponse

logger = logging.getLogger(__name__)

NETWORK_ERROR = "Network error"
AUTH_REQUIRED = "Authentication required"

# Sentinel: body missing or not JSON
_UNDECODABLE = object()


def clean_params(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Drop unset filters so they never reach the query string."""
    if not params:
        return None
    cleaned = {k: v for k, v in params.items() if v is not None and v != ""}
    return cleaned or None


class BackendApiClient:
    """Thin JSON client for the external Rihigo API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    @property
    def http(self) -> httpx.AsyncClient:
        """The shared connection pool, reused by other outbound clients."""
        return self._client

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        token: str | None = None,
        json: Any = None,
        params: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        url = f"{self.base_url}{endpoint}"
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        started = time.perf_counter()
        try:
            response = await self._client.request(
                method, url, headers=headers, json=json, params=clean_params(params),
            )
        except httpx.TimeoutException as e:
            self._log_failure(method, endpoint, started, f"timeout: {e}")
            return ApiResponse.failure(f"{NETWORK_ERROR}: request timed out")
        except httpx.HTTPError as e:
            self._log_failure(method, endpoint, started, str(e) or type(e).__name__)
            return ApiResponse.failure(str(e) or NETWORK_ERROR)

        duration_ms = round((time.perf_counter() - started) * 1000, 1)
        extra = {
            "endpoint": endpoint, "method": method,
            "status_code": response.status_code, "duration_ms": duration_ms,
        }

        payload = self._decode(response)

        if not response.is_success:
            logger.warning(f"API {method} {endpoint} -> {response.status_code}", extra=extra)
            fallback = (
                f"API request failed with status {response.status_code}: "
                f"{response.reason_phrase}"
            )
            if isinstance(payload, dict) and (
                payload.get("error_message") or payload.get("errors")
            ):
                failed = ApiResponse.from_payload(payload, response.status_code)
                failed.success = False
                if not failed.error_message and not failed.errors:
                    failed.error_message = fallback
                return failed
            return ApiResponse.failure(fallback, response.status_code)

        logger.info(f"API {method} {endpoint}", extra=extra)

        if payload is _UNDECODABLE:
            if not response.content:
                return ApiResponse(success=True, status_code=response.status_code)
            return ApiResponse.failure(
                "Invalid JSON in API response", response.status_code,
            )
        return ApiResponse.from_payload(payload, response.status_code)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return _UNDECODABLE
        try:
            return response.json()
        except ValueError:
            return _UNDECODABLE

    @staticmethod
    def _log_failure(method: str, endpoint: str, started: float, reason: str) -> None:
        logger.error(
            f"API {method} {endpoint} failed: {reason}",
            extra={
                "endpoint": endpoint, "method": method,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )

    async def get(self, endpoint: str, *, token: str | None = None,
                  params: Mapping[str, Any] | None = None) -> ApiResponse:
        return await self.request("GET", endpoint, token=token, params=params)

    async def post(self, endpoint: str, json: Any = None, *, token: str | None = None,
                   params: Mapping[str, Any] | None = None) -> ApiResponse:
        return await self.request("POST", endpoint, token=token, json=json, params=params)

    async def put(self, endpoint: str, json: Any = None, *,
                  token: str | None = None) -> ApiResponse:
        return await self.request("PUT", endpoint, token=token, json=json)

    async def patch(self, endpoint: str, json: Any = None, *,
                    token: str | None = None) -> ApiResponse:
        return await self.request("PATCH", endpoint, token=token, json=json)

    async def delete(self, endpoint: str, *, token: str | None = None) -> ApiResponse:
        return await self.request("DELETE", endpoint, token=token)

    async def health(self) -> bool:
        """Readiness probe: the external API answers GET /health with 2xx."""
        result = await self.get("/health")
        return result.success


async def authenticated(
    token: str | None, call: Callable[[str], Awaitable[ApiResponse]],
) -> ApiResponse:
    """Run call(token) only when a token exists."""
    if not token:
        return ApiResponse.failure(AUTH_REQUIRED, 401)
    return await call(token)


# Singleton (initialized on startup)
api_client: BackendApiClient | None = None


def init_api_client(base_url: str, timeout: float = 15.0) -> BackendApiClient:
    global api_client
    api_client = BackendApiClient(base_url, timeout)
    return api_client


async def close_api_client() -> None:
    global api_client
    if api_client is not None:
        await api_client.close()
        api_client = None


def get_api_client() -> BackendApiClient:
    """FastAPI dependency for the shared API client."""
    if not api_client:
        raise RuntimeError("API client not initialized")
    return api_client
