"""IMUGA API — immigration declaration requests and admin declarations."""

from typing import Any, Mapping

from rihigo_web.core.api_response import ApiResponse
from rihigo_web.infrastructure.api_client import BackendApiClient
from rihigo_web.services.resource_api import ResourceEndpoint


class ImugaApi:
    def __init__(self, client: BackendApiClient):
        self.client = client
        self.declarations = ResourceEndpoint(client, "/api/admin/imuga/declarations")
        self.requests = ResourceEndpoint(client, "/api/admin/imuga/requests")

    async def create_request(
        self, body: Mapping[str, Any], token: str | None = None,
    ) -> ApiResponse:
        return await self.client.post("/api/imuga/requests", dict(body), token=token)

    async def request_status(self, request_number: str) -> ApiResponse:
        return await self.client.get(f"/api/imuga/requests/{request_number}/status")

    async def export_declaration(self, token: str, declaration_id: str) -> ApiResponse:
        return await self.declarations.sub_get(token, declaration_id, "export")

    async def add_traveler(
        self, token: str, declaration_id: str, traveler: Mapping[str, Any],
    ) -> ApiResponse:
        return await self.declarations.action(
            token, declaration_id, "travelers", traveler,
        )

    async def remove_traveler(
        self, token: str, declaration_id: str, traveler_id: str,
    ) -> ApiResponse:
        return await self.client.delete(
            self.declarations.path(declaration_id, "travelers", traveler_id), token=token,
        )
