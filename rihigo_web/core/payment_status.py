"""Payment Status — booking payload shaping and BML callback classification.

Invariants:
    - classify_payment always returns a PaymentOutcome (unknown input is "processing")
    - build_booking_payload never drops a submitted field the API understands
"""

from datetime import date, timedelta
from typing import Any, Mapping

from rihigo_web.core.domain_types import PaymentOutcome

_SUCCESS_STATUSES = {"completed"}
_FAILED_STATUSES = {"failed", "cancelled"}
_SUCCESS_STATES = {"CONFIRMED"}
_FAILED_STATES = {"DECLINED", "CANCELLED"}

DEFAULT_PAYMENT_METHOD = "card"

# Keys with a dedicated slot in the create-booking body
_RESERVED_KEYS = {
    "activity_id", "package_id", "booking_date", "number_of_people",
    "full_name", "name", "email", "phone", "payment_method",
    "notes", "special_requests", "display_currency",
}


def classify_payment(
    payment_status: str | None, bml_state: str | None = None,
) -> PaymentOutcome:
    status = (payment_status or "").lower()
    state = (bml_state or "").upper()
    if status in _SUCCESS_STATUSES or state in _SUCCESS_STATES:
        return PaymentOutcome.SUCCESS
    if status in _FAILED_STATUSES or state in _FAILED_STATES:
        return PaymentOutcome.FAILED
    return PaymentOutcome.PROCESSING


def next_booking_date(today: date) -> str:
    return (today + timedelta(days=1)).isoformat()


def build_booking_payload(
    values: Mapping[str, Any], today: date, display_currency: str | None = None,
) -> dict[str, Any]:
    """Create-booking body from coerced form values.

    Dynamic fields beyond the standard ones travel in booking_data so the API
    keeps per-booking-type answers (flight number, pickup location, ...).
    """
    booking_date = (
        values.get("booking_date")
        or values.get("check_in_date")
        or next_booking_date(today)
    )
    try:
        people = int(values.get("number_of_people") or 1)
    except (TypeError, ValueError):
        people = 1

    payload: dict[str, Any] = {
        "activity_id": values.get("activity_id"),
        "booking_date": booking_date,
        "number_of_people": max(1, people),
        "customer_info": {
            "name": values.get("full_name") or values.get("name") or "",
            "email": values.get("email") or "",
            "phone": values.get("phone") or "",
        },
        "payment_method": values.get("payment_method") or DEFAULT_PAYMENT_METHOD,
        "notes": values.get("notes") or values.get("special_requests") or "",
    }
    if values.get("package_id"):
        payload["package_id"] = values["package_id"]
    currency = display_currency or values.get("display_currency")
    if currency:
        payload["display_currency"] = currency

    extra = {
        key: value for key, value in values.items()
        if key not in _RESERVED_KEYS and value not in (None, "")
    }
    if extra:
        payload["booking_data"] = extra
    return payload
