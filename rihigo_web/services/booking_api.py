"""Booking API — customer bookings and BML (Bank of Maldives) payments."""

from typing import Any, Mapping

from rihigo_web.core.api_response import ApiResponse
from rihigo_web.infrastructure.api_client import BackendApiClient
from rihigo_web.services.resource_api import ResourceEndpoint


class BookingApi:
    def __init__(self, client: BackendApiClient):
        self.client = client
        self.admin_bookings = ResourceEndpoint(client, "/api/admin/bookings")
        self.admin_payments = ResourceEndpoint(client, "/api/admin/payments")

    async def create(self, token: str, body: Mapping[str, Any]) -> ApiResponse:
        return await self.client.post("/api/bookings", dict(body), token=token)

    async def list_mine(self, token: str, page: int = 1, page_size: int = 20) -> ApiResponse:
        return await self.client.get(
            "/api/bookings", token=token, params={"page": page, "page_size": page_size},
        )

    async def get(self, token: str, booking_id: str) -> ApiResponse:
        return await self.client.get(f"/api/bookings/{booking_id}", token=token)

    async def cancel(self, token: str, booking_id: str) -> ApiResponse:
        return await self.client.post(f"/api/bookings/{booking_id}/cancel", {}, token=token)

    # ─── BML ────────────────────────────────────────────────────

    async def initiate_payment(
        self, token: str, booking_id: str, redirect_url: str,
    ) -> ApiResponse:
        return await self.client.post(
            "/api/payments/bml/initiate",
            {"booking_id": booking_id, "redirect_url": redirect_url},
            token=token,
        )

    async def payment_status(self, token: str, transaction_id: str) -> ApiResponse:
        return await self.client.get(
            f"/api/payments/bml/status/{transaction_id}", token=token,
        )

    async def forward_webhook(self, payload: Any) -> ApiResponse:
        return await self.client.post("/api/webhooks/bml", payload)
