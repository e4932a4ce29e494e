"""Admin API — vendors, vendor users, notifications and media."""

from typing import Any, Mapping

from rihigo_web.core.api_response import ApiResponse
from rihigo_web.infrastructure.api_client import BackendApiClient
from rihigo_web.services.resource_api import ResourceEndpoint


class AdminApi:
    def __init__(self, client: BackendApiClient):
        self.client = client
        self.vendors = ResourceEndpoint(client, "/api/admin/vendors")
        self.media = ResourceEndpoint(client, "/api/admin/media")

    def vendor_users(self, vendor_id: str) -> ResourceEndpoint:
        return ResourceEndpoint(self.client, f"/api/admin/vendors/{vendor_id}/users")

    async def notification_stats(self, token: str) -> ApiResponse:
        return await self.client.get("/api/admin/notifications/stats", token=token)

    async def create_notification(
        self, token: str, body: Mapping[str, Any],
    ) -> ApiResponse:
        return await self.client.post("/api/admin/notifications", dict(body), token=token)

    async def broadcast_notification(
        self, token: str, body: Mapping[str, Any],
    ) -> ApiResponse:
        return await self.client.post(
            "/api/admin/notifications/broadcast", dict(body), token=token,
        )

    async def presigned_upload(
        self, token: str, filename: str, content_type: str,
    ) -> ApiResponse:
        return await self.client.post(
            "/api/admin/media/presigned-upload",
            {"filename": filename, "content_type": content_type}, token=token,
        )
