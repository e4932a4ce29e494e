"""Google OAuth — authorization URL, code exchange and token refresh.

Invariants:
    - The Google id_token is what the external API accepts as a bearer token
    - Exchange/refresh failures return None and are logged; they never raise
    - expires_at is absolute epoch seconds

Design Decisions:
    - Plain httpx calls over an OAuth framework: only two token endpoints are used
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import httpx

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


@dataclass
class GoogleTokens:
    id_token: str
    refresh_token: str | None
    expires_at: int
    profile: dict[str, Any] = field(default_factory=dict)


def build_authorize_url(client_id: str, redirect_uri: str, state: str) -> str:
    query = urlencode({
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": "openid email profile",
        "state": state,
        "access_type": "offline",
        "prompt": "consent",
    })
    return f"{AUTHORIZE_URL}?{query}"


class GoogleOAuthClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._client = http_client

    def authorize_url(self, state: str) -> str:
        return build_authorize_url(self.client_id, self.redirect_uri, state)

    async def exchange_code(self, code: str) -> GoogleTokens | None:
        """Trade the callback code for tokens plus the user's profile."""
        data = await self._token_request({
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
        })
        if data is None or not data.get("id_token"):
            return None
        profile = await self._userinfo(data.get("access_token"))
        return GoogleTokens(
            id_token=data["id_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=_expires_at(data),
            profile=profile,
        )

    async def refresh(self, refresh_token: str) -> GoogleTokens | None:
        data = await self._token_request({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        })
        if data is None or not data.get("id_token"):
            logger.warning("Google token refresh returned no id_token")
            return None
        return GoogleTokens(
            id_token=data["id_token"],
            # Google only returns a new refresh token when it rotates
            refresh_token=data.get("refresh_token") or refresh_token,
            expires_at=_expires_at(data),
        )

    async def _token_request(self, form: dict[str, str]) -> dict | None:
        body = {"client_id": self.client_id, "client_secret": self.client_secret, **form}
        try:
            response = await self._http().post(TOKEN_URL, data=body)
        except httpx.HTTPError as e:
            logger.error(f"Google token request failed: {e}", extra={"endpoint": TOKEN_URL})
            return None
        if not response.is_success:
            logger.warning(
                f"Google token request rejected ({form['grant_type']})",
                extra={"endpoint": TOKEN_URL, "status_code": response.status_code},
            )
            return None
        try:
            return response.json()
        except ValueError:
            return None

    async def _userinfo(self, access_token: str | None) -> dict[str, Any]:
        if not access_token:
            return {}
        try:
            response = await self._http().get(
                USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"},
            )
            return response.json() if response.is_success else {}
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Google userinfo failed: {e}")
            return {}

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=10.0)
        return self._client


def _expires_at(data: dict) -> int:
    try:
        ttl = int(data.get("expires_in", 3600))
    except (TypeError, ValueError):
        ttl = 3600
    return int(time.time()) + ttl
