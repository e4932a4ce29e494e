"""Support API — customer, vendor and admin ticket threads."""

from rihigo_web.core.api_response import ApiResponse
from rihigo_web.infrastructure.api_client import BackendApiClient
from rihigo_web.services.resource_api import ResourceEndpoint


class SupportApi:
    def __init__(self, client: BackendApiClient):
        self.client = client
        self.tickets = ResourceEndpoint(client, "/api/tickets")
        self.vendor_tickets = ResourceEndpoint(client, "/api/vendor/tickets")
        self.admin_tickets = ResourceEndpoint(client, "/api/admin/tickets")

    async def get_by_number(self, token: str, ticket_number: str) -> ApiResponse:
        return await self.client.get(f"/api/tickets/number/{ticket_number}", token=token)

    async def add_message(
        self, token: str, ticket_id: str, message: str, scope: str = "user",
    ) -> ApiResponse:
        endpoint = {
            "user": self.tickets,
            "vendor": self.vendor_tickets,
            "admin": self.admin_tickets,
        }[scope]
        return await endpoint.action(token, ticket_id, "messages", {"message": message})

    async def admin_summary(self, token: str) -> ApiResponse:
        return await self.client.get("/api/admin/tickets/summary", token=token)
