"""Vendor Resources — declarative list/detail/form pages for the vendor portal.

Invariants:
    - Every view is served under /vendor and guarded by require_vendor
    - Row actions only render for items whose status allows them; the API still
      enforces the transition
"""

from fastapi import APIRouter

from rihigo_web.api.dependencies import require_vendor
from rihigo_web.api.resources import (
    Column,
    ListFilter,
    ResourceView,
    RowAction,
    build_resource_router,
    form_field,
)
from rihigo_web.core.booking_fields import FieldValidation
from rihigo_web.core.domain_types import BookingType, FieldType
from rihigo_web.schemas.forms import GuestForm, StaffForm, TicketForm

PREFIX = "/vendor"

ACTIVITY_STATUSES = ("draft", "published", "archived")
RESOURCE_TYPES = ("room", "boat", "vehicle", "equipment", "guide", "other")
PAYMENT_METHODS = ("cash", "card", "bank_transfer", "bml", "other")
_positive = FieldValidation(min=0)

ACTIVITIES = ResourceView(
    slug="activities",
    title="Activities",
    singular="Activity",
    endpoint=lambda s: s.vendor.activities,
    list_key="activities",
    title_key="title",
    columns=(
        Column("title", "Title", link=True),
        Column("category.name", "Category"),
        Column("base_price", "Base price", kind="money"),
        Column("status", "Status", kind="status"),
        Column("is_active", "Active", kind="bool"),
    ),
    search_keys=("title", "slug", "description"),
    filters=(ListFilter("status", "Status", ACTIVITY_STATUSES),),
    fields=(
        form_field("title", "Title", required=True, validation=FieldValidation(max_length=200)),
        form_field("slug", "Slug", validation=FieldValidation(pattern=r"[a-z0-9-]+")),
        form_field("description", "Description", FieldType.TEXTAREA),
        form_field("category_id", "Category ID"),
        form_field("base_price", "Base price (USD)", FieldType.NUMBER, validation=_positive),
        form_field("max_participants", "Max participants", FieldType.NUMBER,
                   validation=FieldValidation(min=1)),
        form_field("booking_type", "Booking type", FieldType.SELECT,
                   options=(t.value for t in BookingType), default_value="standard"),
        form_field("status", "Status", FieldType.SELECT, options=ACTIVITY_STATUSES,
                   default_value="draft"),
        form_field("is_active", "Active", FieldType.CHECKBOX, default_value=True),
    ),
    links=(("Packages", "/packages"),),
)

GUESTS = ResourceView(
    slug="guests",
    title="Guests",
    singular="Guest",
    endpoint=lambda s: s.vendor.guests,
    list_key="guests",
    title_key="full_name",
    columns=(
        Column("first_name", "First name", link=True),
        Column("last_name", "Last name"),
        Column("email", "Email"),
        Column("phone", "Phone"),
        Column("nationality", "Nationality"),
        Column("total_bookings", "Bookings"),
    ),
    search_keys=("first_name", "last_name", "email", "phone", "passport_number"),
    filters=(ListFilter("nationality", "Nationality"),),
    fields=(
        form_field("first_name", "First name", required=True),
        form_field("last_name", "Last name", required=True),
        form_field("email", "Email", FieldType.EMAIL),
        form_field("phone", "Phone", FieldType.TEL),
        form_field("nationality", "Nationality"),
        form_field("passport_number", "Passport number"),
        form_field("notes", "Notes", FieldType.TEXTAREA),
    ),
    schema=GuestForm,
    links=(("Booking history", "/history"), ("Merge duplicates", "/merge")),
)

STAFF = ResourceView(
    slug="staff",
    title="Staff",
    singular="Staff member",
    endpoint=lambda s: s.vendor.staff,
    list_key="staff",
    columns=(
        Column("name", "Name", link=True),
        Column("email", "Email"),
        Column("role", "Role", kind="status"),
        Column("is_active", "Active", kind="bool"),
    ),
    search_keys=("name", "email"),
    filters=(ListFilter("role", "Role", ("owner", "manager", "staff")),),
    fields=(
        form_field("name", "Name", required=True),
        form_field("email", "Email", FieldType.EMAIL, required=True),
        form_field("phone", "Phone", FieldType.TEL),
        form_field("role", "Role", FieldType.SELECT, options=("manager", "staff"),
                   default_value="staff"),
        form_field("is_active", "Active", FieldType.CHECKBOX, default_value=True),
    ),
    schema=StaffForm,
    actions=(
        RowAction("deactivate", "Deactivate", method="PUT", path="status",
                  body={"is_active": False}, when_field="is_active", when_status=("True",),
                  confirm="Deactivate this staff member?", style="warning"),
        RowAction("activate", "Activate", method="PUT", path="status",
                  body={"is_active": True}, when_field="is_active", when_status=("False",)),
    ),
)

RESOURCES = ResourceView(
    slug="resources",
    title="Resources",
    singular="Resource",
    endpoint=lambda s: s.vendor.resources,
    list_key="resources",
    columns=(
        Column("name", "Name", link=True),
        Column("type", "Type", kind="status"),
        Column("capacity", "Capacity"),
        Column("is_active", "Active", kind="bool"),
    ),
    search_keys=("name", "description"),
    filters=(ListFilter("type", "Type", RESOURCE_TYPES),),
    fields=(
        form_field("name", "Name", required=True),
        form_field("type", "Type", FieldType.SELECT, required=True, options=RESOURCE_TYPES),
        form_field("capacity", "Capacity", FieldType.NUMBER, validation=FieldValidation(min=1)),
        form_field("description", "Description", FieldType.TEXTAREA),
        form_field("is_active", "Active", FieldType.CHECKBOX, default_value=True),
    ),
    links=(("Availability", "/availability"),),
)

QUOTATIONS = ResourceView(
    slug="quotations",
    title="Quotations",
    singular="Quotation",
    endpoint=lambda s: s.vendor.quotations,
    list_key="quotations",
    title_key="quotation_number",
    columns=(
        Column("quotation_number", "Number", link=True),
        Column("customer_name", "Customer"),
        Column("total", "Total", kind="money"),
        Column("valid_until", "Valid until", kind="date"),
        Column("status", "Status", kind="status"),
    ),
    search_keys=("quotation_number", "customer_name", "customer_email"),
    filters=(ListFilter("status", "Status", ("draft", "sent", "accepted", "rejected", "expired", "converted")),),
    fields=(
        form_field("customer_name", "Customer name", required=True),
        form_field("customer_email", "Customer email", FieldType.EMAIL, required=True),
        form_field("activity_id", "Activity ID"),
        form_field("check_in_date", "Start date", FieldType.DATE),
        form_field("check_out_date", "End date", FieldType.DATE),
        form_field("total", "Total amount", FieldType.NUMBER, required=True,
                   validation=_positive),
        form_field("valid_until", "Valid until", FieldType.DATE),
        form_field("notes", "Notes", FieldType.TEXTAREA),
    ),
    actions=(
        RowAction("send", "Send to customer", when_status=("draft",)),
        RowAction("convert", "Convert to booking", when_status=("sent", "accepted"),
                  confirm="Create a booking from this quotation?"),
    ),
)

INVOICES = ResourceView(
    slug="invoices",
    title="Invoices",
    singular="Invoice",
    endpoint=lambda s: s.vendor.invoices,
    list_key="invoices",
    title_key="invoice_number",
    columns=(
        Column("invoice_number", "Number", link=True),
        Column("customer_name", "Customer"),
        Column("total", "Total", kind="money"),
        Column("amount_due", "Due", kind="money"),
        Column("due_date", "Due date", kind="date"),
        Column("status", "Status", kind="status"),
    ),
    search_keys=("invoice_number", "customer_name", "customer_email"),
    filters=(ListFilter("status", "Status", ("draft", "sent", "paid", "partial", "overdue", "void")),),
    fields=(
        form_field("customer_name", "Customer name", required=True),
        form_field("customer_email", "Customer email", FieldType.EMAIL, required=True),
        form_field("booking_id", "Booking ID"),
        form_field("total", "Total amount", FieldType.NUMBER, required=True,
                   validation=_positive),
        form_field("due_date", "Due date", FieldType.DATE),
        form_field("notes", "Notes", FieldType.TEXTAREA),
    ),
    actions=(
        RowAction("send", "Send to customer", when_status=("draft",)),
        RowAction("void", "Void", when_status=("draft", "sent", "overdue"),
                  confirm="Void this invoice? This cannot be undone.", style="error"),
    ),
)

PAYMENTS = ResourceView(
    slug="payments",
    title="Payments",
    singular="Payment",
    endpoint=lambda s: s.vendor.payments,
    list_key="payments",
    title_key="payment_number",
    can_edit=False,
    columns=(
        Column("payment_number", "Number", link=True),
        Column("customer_name", "Customer"),
        Column("amount", "Amount", kind="money"),
        Column("payment_method", "Method", kind="status"),
        Column("paid_at", "Paid", kind="date"),
        Column("status", "Status", kind="status"),
    ),
    search_keys=("payment_number", "customer_name", "reference"),
    filters=(ListFilter("payment_method", "Method", PAYMENT_METHODS),),
    fields=(
        form_field("amount", "Amount", FieldType.NUMBER, required=True,
                   validation=FieldValidation(min=0.01)),
        form_field("payment_method", "Method", FieldType.SELECT, required=True,
                   options=PAYMENT_METHODS),
        form_field("customer_name", "Customer name"),
        form_field("reference", "Reference"),
        form_field("paid_at", "Payment date", FieldType.DATE),
        form_field("notes", "Notes", FieldType.TEXTAREA),
    ),
    actions=(
        RowAction(
            "allocate", "Allocate to invoice",
            fields=(
                form_field("invoice_id", "Invoice ID", required=True),
                form_field("amount", "Amount", FieldType.NUMBER, required=True,
                           validation=FieldValidation(min=0.01)),
            ),
            wrap=lambda body: {"allocations": [body]},
        ),
    ),
)

REFUNDS = ResourceView(
    slug="refunds",
    title="Refunds",
    singular="Refund",
    endpoint=lambda s: s.vendor.refunds,
    list_key="refunds",
    title_key="refund_number",
    can_edit=False,
    can_delete=False,
    columns=(
        Column("refund_number", "Number", link=True),
        Column("booking_number", "Booking"),
        Column("amount", "Amount", kind="money"),
        Column("reason", "Reason"),
        Column("status", "Status", kind="status"),
    ),
    search_keys=("refund_number", "booking_number", "reason"),
    filters=(ListFilter("status", "Status", ("pending", "approved", "rejected", "processed")),),
    fields=(
        form_field("booking_id", "Booking ID", required=True),
        form_field("amount", "Amount", FieldType.NUMBER, required=True,
                   validation=FieldValidation(min=0.01)),
        form_field("reason", "Reason", FieldType.TEXTAREA, required=True),
    ),
    actions=(
        RowAction("approve", "Approve", when_status=("pending",)),
        RowAction(
            "reject", "Reject", when_status=("pending",), style="error",
            fields=(form_field("reason", "Rejection reason", FieldType.TEXTAREA, required=True),),
        ),
        RowAction("process", "Mark processed", when_status=("approved",),
                  confirm="Mark this refund as paid out?"),
    ),
)

DISCOUNTS = ResourceView(
    slug="discounts",
    title="Discounts",
    singular="Discount",
    endpoint=lambda s: s.vendor.discounts,
    list_key="discounts",
    title_key="code",
    columns=(
        Column("code", "Code", link=True),
        Column("discount_type", "Type", kind="status"),
        Column("value", "Value"),
        Column("times_used", "Used"),
        Column("valid_until", "Valid until", kind="date"),
        Column("is_active", "Active", kind="bool"),
    ),
    search_keys=("code", "description"),
    filters=(ListFilter("discount_type", "Type", ("percentage", "fixed")),),
    fields=(
        form_field("code", "Code", required=True, validation=FieldValidation(pattern=r"[A-Za-z0-9_-]+")),
        form_field("description", "Description"),
        form_field("discount_type", "Type", FieldType.SELECT, required=True,
                   options=("percentage", "fixed"), default_value="percentage"),
        form_field("value", "Value", FieldType.NUMBER, required=True, validation=_positive),
        form_field("min_amount", "Minimum amount", FieldType.NUMBER, validation=_positive),
        form_field("max_uses", "Maximum uses", FieldType.NUMBER, validation=FieldValidation(min=1)),
        form_field("valid_from", "Valid from", FieldType.DATE),
        form_field("valid_until", "Valid until", FieldType.DATE),
        form_field("is_active", "Active", FieldType.CHECKBOX, default_value=True),
    ),
)

TICKETS = ResourceView(
    slug="tickets",
    title="Support tickets",
    singular="Ticket",
    endpoint=lambda s: s.vendor.tickets,
    list_key="tickets",
    title_key="subject",
    can_edit=False,
    can_delete=False,
    columns=(
        Column("ticket_number", "Number", link=True),
        Column("subject", "Subject"),
        Column("priority", "Priority", kind="status"),
        Column("status", "Status", kind="status"),
        Column("updated_at", "Updated", kind="date"),
    ),
    search_keys=("ticket_number", "subject"),
    filters=(ListFilter("status", "Status", ("open", "in_progress", "resolved", "closed")),),
    fields=(
        form_field("subject", "Subject", required=True),
        form_field("category", "Category", FieldType.SELECT,
                   options=("general", "booking", "payment", "technical", "other"),
                   default_value="general"),
        form_field("priority", "Priority", FieldType.SELECT,
                   options=("low", "normal", "high", "urgent"), default_value="normal"),
        form_field("message", "Message", FieldType.TEXTAREA, required=True),
    ),
    schema=TicketForm,
    actions=(
        RowAction(
            "reply", "Reply", path="messages",
            when_status=("open", "in_progress", "resolved"),
            fields=(form_field("message", "Message", FieldType.TEXTAREA, required=True),),
        ),
    ),
)

VENDOR_VIEWS = (
    ACTIVITIES, GUESTS, STAFF, RESOURCES, QUOTATIONS,
    INVOICES, PAYMENTS, REFUNDS, DISCOUNTS, TICKETS,
)


def resource_routers() -> list[APIRouter]:
    return [
        build_resource_router(view, prefix=PREFIX, guard=require_vendor, portal="vendor")
        for view in VENDOR_VIEWS
    ]
