"""Account API — users, the signed-in profile and notifications."""

from typing import Any, Mapping

from rihigo_web.core.api_response import ApiResponse
from rihigo_web.infrastructure.api_client import BackendApiClient
from rihigo_web.services.resource_api import ResourceEndpoint

DEFAULT_PREFERENCES = {"language": "en", "currency": "USD"}


class AccountApi:
    def __init__(self, client: BackendApiClient):
        self.client = client
        self.admin_users = ResourceEndpoint(client, "/api/admin/users")

    async def create_user(self, body: Mapping[str, Any]) -> ApiResponse:
        return await self.client.post("/api/users", dict(body))

    async def get_user_by_email(self, email: str) -> ApiResponse:
        return await self.client.get("/api/users/by-email", params={"email": email})

    async def me(self, token: str) -> ApiResponse:
        return await self.client.get("/api/users/me", token=token)

    async def update_me(self, token: str, body: Mapping[str, Any]) -> ApiResponse:
        return await self.client.put("/api/users/me", dict(body), token=token)

    async def ensure_backend_user(
        self, email: str, name: str | None, image: str | None = None,
    ) -> ApiResponse:
        """Get-or-create the API user behind a Google sign-in."""
        existing = await self.get_user_by_email(email)
        if existing.success and existing.data:
            return existing
        return await self.create_user({
            "email": email,
            "name": name or email.split("@")[0],
            "image": image,
            "role": "user",
            "preferences": dict(DEFAULT_PREFERENCES),
        })

    # ─── Notifications ──────────────────────────────────────────

    async def list_notifications(
        self, token: str, page: int = 1, page_size: int = 20, unread_only: bool = False,
    ) -> ApiResponse:
        return await self.client.get(
            "/api/notifications", token=token,
            params={
                "page": page, "page_size": page_size,
                "unread_only": "true" if unread_only else None,
            },
        )

    async def unread_count(self, token: str) -> ApiResponse:
        return await self.client.get("/api/notifications/unread-count", token=token)

    async def mark_read(self, token: str, notification_id: str) -> ApiResponse:
        return await self.client.put(
            f"/api/notifications/{notification_id}/read", {}, token=token,
        )

    async def mark_all_read(self, token: str) -> ApiResponse:
        return await self.client.put("/api/notifications/read-all", {}, token=token)

    async def get_notification_preferences(self, token: str) -> ApiResponse:
        return await self.client.get("/api/notifications/preferences", token=token)

    async def update_notification_preferences(
        self, token: str, body: Mapping[str, Any],
    ) -> ApiResponse:
        return await self.client.put(
            "/api/notifications/preferences", dict(body), token=token,
        )
