"""Catalog API — activities, categories, FAQs, islands, atolls and currencies."""

from typing import Any, Mapping

from rihigo_web.core.api_response import ApiResponse
from rihigo_web.infrastructure.api_client import BackendApiClient
from rihigo_web.services.resource_api import ResourceEndpoint


class CatalogApi:
    def __init__(self, client: BackendApiClient):
        self.client = client
        self.admin_activities = ResourceEndpoint(client, "/api/admin/activities")
        self.admin_categories = ResourceEndpoint(client, "/api/admin/categories")
        self.admin_faqs = ResourceEndpoint(client, "/api/admin/faqs")
        self.tax_rules = ResourceEndpoint(client, "/api/admin/tax-rules")
        self.islands = ResourceEndpoint(client, "/api/islands")
        self.atolls = ResourceEndpoint(client, "/api/atolls")

    # ─── Public ─────────────────────────────────────────────────

    async def list_activities(
        self, page: int = 1, page_size: int = 20,
        filters: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        params = {"page": page, "page_size": page_size, **(filters or {})}
        return await self.client.get("/api/activities", params=params)

    async def top_activities(self, lang: str = "en") -> ApiResponse:
        return await self.client.get("/api/activities/top", params={"lang": lang})

    async def get_activity_by_slug(self, slug: str, lang: str | None = None) -> ApiResponse:
        return await self.client.get(
            f"/api/activities/slug/{slug}", params={"lang": lang},
        )

    async def list_categories(self) -> ApiResponse:
        return await self.client.get("/api/categories")

    async def list_faqs(self, page: int = 1, page_size: int = 50) -> ApiResponse:
        return await self.client.get(
            "/api/faqs", params={"page": page, "page_size": page_size},
        )

    async def list_islands(
        self, atoll_id: str | int | None = None, island_type: str | None = None,
    ) -> ApiResponse:
        return await self.client.get(
            "/api/islands", params={"atoll_id": atoll_id, "type": island_type},
        )

    async def list_atolls(self) -> ApiResponse:
        return await self.client.get("/api/atolls")

    async def list_currencies(self) -> ApiResponse:
        return await self.client.get("/api/currencies")

    # ─── Admin: activity packages and page layout ───────────────

    def packages(self, activity_id: str) -> ResourceEndpoint:
        return ResourceEndpoint(self.client, f"/api/admin/activities/{activity_id}/packages")

    async def get_layout(self, token: str, activity_id: str) -> ApiResponse:
        return await self.client.get(
            f"/api/admin/activities/{activity_id}/layout", token=token,
        )

    async def save_layout(
        self, token: str, activity_id: str, sections: list[dict],
    ) -> ApiResponse:
        return await self.client.put(
            f"/api/admin/activities/{activity_id}/layout",
            {"sections": sections}, token=token,
        )
