"""Resource Endpoint — the list/get/create/update/delete shape shared by most API areas.

Invariants:
    - base is an API path without trailing slash ("/api/vendor/guests")
    - Named actions are sub-paths of a single resource ("/{id}/send")
"""

from typing import Any, Mapping

from rihigo_web.core.api_response import ApiResponse
from rihigo_web.infrastructure.api_client import BackendApiClient


class ResourceEndpoint:
    def __init__(self, client: BackendApiClient, base: str, update_method: str = "PUT"):
        self.client = client
        self.base = base.rstrip("/")
        self.update_method = update_method

    def path(self, resource_id: str | int | None = None, *parts: str) -> str:
        segments = [self.base]
        if resource_id is not None:
            segments.append(str(resource_id))
        segments.extend(p.strip("/") for p in parts if p)
        return "/".join(segments)

    async def list(
        self, token: str | None, params: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        return await self.client.get(self.base, token=token, params=params)

    async def get(self, token: str | None, resource_id: str | int) -> ApiResponse:
        return await self.client.get(self.path(resource_id), token=token)

    async def create(self, token: str | None, body: Mapping[str, Any]) -> ApiResponse:
        return await self.client.post(self.base, dict(body), token=token)

    async def update(
        self, token: str | None, resource_id: str | int, body: Mapping[str, Any],
    ) -> ApiResponse:
        return await self.client.request(
            self.update_method, self.path(resource_id), token=token, json=dict(body),
        )

    async def delete(self, token: str | None, resource_id: str | int) -> ApiResponse:
        return await self.client.delete(self.path(resource_id), token=token)

    async def action(
        self,
        token: str | None,
        resource_id: str | int,
        name: str,
        body: Mapping[str, Any] | None = None,
        method: str = "POST",
    ) -> ApiResponse:
        return await self.client.request(
            method, self.path(resource_id, name), token=token,
            json=dict(body) if body is not None else {},
        )

    async def sub_get(
        self,
        token: str | None,
        resource_id: str | int,
        name: str,
        params: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        return await self.client.get(self.path(resource_id, name), token=token, params=params)
