"""Vendor API — everything under /api/vendor for the signed-in vendor.

Invariants:
    - The API scopes every call to the vendor behind the bearer token;
      no vendor id is ever sent from this side
"""

from typing import Any, Mapping

from rihigo_web.core.api_response import ApiResponse
from rihigo_web.infrastructure.api_client import BackendApiClient
from rihigo_web.services.resource_api import ResourceEndpoint

REPORT_KINDS = ("revenue", "payments", "occupancy", "tax", "bookings")


class VendorApi:
    def __init__(self, client: BackendApiClient):
        self.client = client
        self.activities = ResourceEndpoint(client, "/api/vendor/activities")
        self.bookings = ResourceEndpoint(client, "/api/vendor/bookings")
        self.staff = ResourceEndpoint(client, "/api/vendor/staff")
        self.guests = ResourceEndpoint(client, "/api/vendor/guests")
        self.resources = ResourceEndpoint(client, "/api/vendor/resources")
        self.quotations = ResourceEndpoint(client, "/api/vendor/quotations")
        self.invoices = ResourceEndpoint(client, "/api/vendor/invoices")
        self.payments = ResourceEndpoint(client, "/api/vendor/payments")
        self.refunds = ResourceEndpoint(client, "/api/vendor/refunds")
        self.discounts = ResourceEndpoint(client, "/api/vendor/discounts")
        self.tickets = ResourceEndpoint(client, "/api/vendor/tickets")

    async def profile(self, token: str) -> ApiResponse:
        return await self.client.get("/api/vendor/profile", token=token)

    def packages(self, activity_id: str) -> ResourceEndpoint:
        return ResourceEndpoint(self.client, f"/api/vendor/activities/{activity_id}/packages")

    # ─── Bookings ───────────────────────────────────────────────

    async def update_booking_status(
        self, token: str, booking_id: str, status: str, reason: str | None = None,
    ) -> ApiResponse:
        body = {"status": status}
        if reason:
            body["reason"] = reason
        return await self.bookings.action(token, booking_id, "status", body, method="PUT")

    async def confirm_booking(self, token: str, booking_id: str) -> ApiResponse:
        return await self.bookings.action(token, booking_id, "confirm")

    async def booking_calendar(self, token: str, start_date: str, end_date: str) -> ApiResponse:
        return await self.client.get(
            "/api/vendor/bookings/calendar", token=token,
            params={"start_date": start_date, "end_date": end_date},
        )

    # ─── Staff, guests, resources ───────────────────────────────

    async def guest_history(self, token: str, guest_id: str) -> ApiResponse:
        return await self.guests.sub_get(token, guest_id, "history")

    async def merge_guests(
        self, token: str, primary_id: str, duplicate_ids: list[str],
    ) -> ApiResponse:
        return await self.guests.action(
            token, primary_id, "merge", {"duplicate_ids": duplicate_ids},
        )

    async def resource_availability(
        self, token: str, resource_id: str, start_date: str, end_date: str,
    ) -> ApiResponse:
        return await self.resources.sub_get(
            token, resource_id, "availability",
            params={"start_date": start_date, "end_date": end_date},
        )

    async def update_resource_availability(
        self, token: str, resource_id: str, body: Mapping[str, Any],
    ) -> ApiResponse:
        return await self.resources.action(
            token, resource_id, "availability", body, method="PUT",
        )

    # ─── Billing ────────────────────────────────────────────────

    async def invoice_from_booking(self, token: str, booking_id: str) -> ApiResponse:
        return await self.client.post(
            f"/api/vendor/invoices/from-booking/{booking_id}", {}, token=token,
        )

    async def validate_discount(
        self, token: str, code: str, amount: float | None = None,
    ) -> ApiResponse:
        return await self.client.post(
            "/api/vendor/discounts/validate", {"code": code, "amount": amount}, token=token,
        )

    async def billing_settings(self, token: str) -> ApiResponse:
        return await self.client.get("/api/vendor/billing-settings", token=token)

    async def update_billing_settings(
        self, token: str, body: Mapping[str, Any],
    ) -> ApiResponse:
        return await self.client.put("/api/vendor/billing-settings", dict(body), token=token)

    async def tax_rates(self, token: str) -> ApiResponse:
        return await self.client.get("/api/vendor/tax-rates", token=token)

    async def tax_settings(self, token: str) -> ApiResponse:
        return await self.client.get("/api/vendor/tax-settings", token=token)

    async def update_tax_settings(self, token: str, body: Mapping[str, Any]) -> ApiResponse:
        return await self.client.put("/api/vendor/tax-settings", dict(body), token=token)

    async def calculate_tax(self, token: str, body: Mapping[str, Any]) -> ApiResponse:
        return await self.client.post("/api/vendor/tax/calculate", dict(body), token=token)

    # ─── Reports ────────────────────────────────────────────────

    async def dashboard(self, token: str) -> ApiResponse:
        return await self.client.get("/api/vendor/dashboard/overview", token=token)

    async def report(
        self, token: str, kind: str, params: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        if kind not in REPORT_KINDS:
            raise ValueError(f"Unknown report: {kind}")
        return await self.client.get(
            f"/api/vendor/reports/{kind}", token=token, params=params,
        )
