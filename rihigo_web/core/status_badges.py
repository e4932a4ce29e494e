"""Status Badges — status string to badge colour variant."""

STATUS_VARIANTS: dict[str, str] = {
    # Booking
    "pending": "warning",
    "confirmed": "info",
    "checked_in": "success",
    "checked_out": "neutral",
    "cancelled": "error",
    "no_show": "ghost",
    # Payment
    "unpaid": "error",
    "partial": "warning",
    "paid": "success",
    "refunded": "info",
    "partially_refunded": "accent",
    # Invoice
    "draft": "ghost",
    "sent": "info",
    "overdue": "error",
    "void": "ghost",
    # Quotation
    "viewed": "primary",
    "accepted": "success",
    "rejected": "error",
    "expired": "warning",
    "converted": "accent",
    # Resource
    "available": "success",
    "maintenance": "warning",
    "retired": "ghost",
    # Discount
    "active": "success",
    "paused": "warning",
    "depleted": "error",
    # Refund
    "approved": "info",
    "processing": "primary",
    "completed": "success",
    "failed": "error",
    # Content
    "published": "success",
    "archived": "ghost",
    # Tickets
    "open": "warning",
    "in_progress": "info",
    "resolved": "success",
    "closed": "neutral",
}


def badge_variant(status: str | None) -> str:
    if not status:
        return "neutral"
    return STATUS_VARIANTS.get(str(status).lower(), "neutral")


def status_label(status: str | None) -> str:
    """snake_case status to Title Case ("checked_in" -> "Checked In")."""
    if not status:
        return "Unknown"
    return " ".join(part.capitalize() for part in str(status).replace("-", "_").split("_") if part)
