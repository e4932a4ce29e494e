"""Auth Session — the signed-in state kept in the session cookie.

Invariants:
    - access_token is the Google id_token; the external API accepts it as a bearer token
    - A session carrying an error (failed refresh) is treated as signed out
    - safe_callback_url only ever returns a same-site absolute path

Design Decisions:
    - Plain dict round-trip (to_dict/from_dict): the cookie serializer only handles JSON types
"""

from dataclasses import asdict, dataclass, field
from typing import Any
from urllib.parse import urlsplit

from rihigo_web.core.domain_types import UserRole

REFRESH_ERROR = "RefreshAccessTokenError"

# Refresh a little before Google's expiry so in-flight API calls still carry a valid token
EXPIRY_SKEW_SECONDS = 60


@dataclass
class SessionUser:
    id: str | None
    email: str
    name: str | None = None
    image: str | None = None
    role: str = UserRole.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]


@dataclass
class AuthSession:
    access_token: str
    user: SessionUser
    refresh_token: str | None = None
    expires_at: int = 0
    error: str | None = None
    vendor: dict[str, Any] | None = field(default=None, compare=False)

    @property
    def is_valid(self) -> bool:
        return bool(self.access_token) and self.error is None

    def is_expired(self, now: float) -> bool:
        return bool(self.expires_at) and now >= self.expires_at - EXPIRY_SKEW_SECONDS

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("vendor", None)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "AuthSession | None":
        if not isinstance(data, dict) or not isinstance(data.get("user"), dict):
            return None
        user = data["user"]
        if not user.get("email"):
            return None
        return cls(
            access_token=str(data.get("access_token") or ""),
            refresh_token=data.get("refresh_token"),
            expires_at=int(data.get("expires_at") or 0),
            error=data.get("error"),
            user=SessionUser(
                id=user.get("id"),
                email=user["email"],
                name=user.get("name"),
                image=user.get("image"),
                role=user.get("role") or UserRole.USER.value,
            ),
        )


def safe_callback_url(url: str | None, default: str = "/") -> str:
    """Keep post-login redirects on this site: "/path?x" passes, "//evil" and "https://..." do not."""
    if not url:
        return default
    parts = urlsplit(url)
    if parts.scheme or parts.netloc or not url.startswith("/") or url.startswith("//"):
        return default
    if "\\" in url or any(ord(ch) < 32 for ch in url):
        return default
    if url.startswith("/auth/sign-in") or url.startswith("/auth/google"):
        return default
    return url
