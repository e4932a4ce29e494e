"""Admin Resources — declarative list/detail/form pages for the admin panel."""

from fastapi import APIRouter

from rihigo_web.api.dependencies import require_admin
from rihigo_web.api.resources import (
    Column,
    ListFilter,
    ResourceView,
    RowAction,
    build_resource_router,
    form_field,
)
from rihigo_web.api.routes.vendor_resources import ACTIVITY_STATUSES
from rihigo_web.core.booking_fields import FieldValidation
from rihigo_web.core.domain_types import BookingType, FieldType, UserRole
from rihigo_web.schemas.forms import CategoryForm, FaqForm, VendorCreateForm, VendorUpdateForm

PREFIX = "/admin"

VENDOR_STATUSES = ("pending", "active", "suspended")
TICKET_STATUSES = ("open", "in_progress", "resolved", "closed")
DECLARATION_STATUSES = ("draft", "pending", "submitted", "approved", "rejected")

ACTIVITIES = ResourceView(
    slug="activities",
    title="Activities",
    singular="Activity",
    endpoint=lambda s: s.catalog.admin_activities,
    list_key="activities",
    title_key="title",
    columns=(
        Column("title", "Title", link=True),
        Column("vendor.business_name", "Vendor"),
        Column("category.name", "Category"),
        Column("min_price_usd", "From", kind="money"),
        Column("status", "Status", kind="status"),
        Column("is_active", "Active", kind="bool"),
    ),
    search_keys=("title", "slug", "vendor.business_name"),
    filters=(
        ListFilter("status", "Status", ACTIVITY_STATUSES, remote=True),
        ListFilter("vendor.business_name", "Vendor"),
    ),
    fields=(
        form_field("title", "Title", required=True, validation=FieldValidation(max_length=200)),
        form_field("slug", "Slug", required=True, validation=FieldValidation(pattern=r"[a-z0-9-]+")),
        form_field("vendor_id", "Vendor ID", required=True),
        form_field("category_id", "Category ID"),
        form_field("island_id", "Island ID"),
        form_field("description", "Description", FieldType.TEXTAREA),
        form_field("booking_type", "Booking type", FieldType.SELECT,
                   options=(t.value for t in BookingType), default_value="standard"),
        form_field("status", "Status", FieldType.SELECT, options=ACTIVITY_STATUSES,
                   default_value="draft"),
        form_field("is_active", "Active", FieldType.CHECKBOX, default_value=True),
    ),
    links=(("Packages", "/packages"), ("Page layout", "/layout")),
)

CATEGORIES = ResourceView(
    slug="categories",
    title="Categories",
    singular="Category",
    endpoint=lambda s: s.catalog.admin_categories,
    list_key="categories",
    columns=(
        Column("name", "Name", link=True),
        Column("id", "Slug"),
        Column("display_order", "Order"),
        Column("is_active", "Active", kind="bool"),
    ),
    search_keys=("name", "id", "description"),
    fields=(
        form_field("id", "Slug", placeholder="water-sports"),
        form_field("name", "Name", required=True),
        form_field("icon", "Icon"),
        form_field("description", "Description", FieldType.TEXTAREA),
        form_field("display_order", "Display order", FieldType.NUMBER, default_value=0),
        form_field("is_active", "Active", FieldType.CHECKBOX, default_value=True),
    ),
    schema=CategoryForm,
)

FAQS = ResourceView(
    slug="faqs",
    title="FAQs",
    singular="FAQ",
    endpoint=lambda s: s.catalog.admin_faqs,
    list_key="faqs",
    title_key="question",
    columns=(
        Column("question", "Question", link=True),
        Column("category", "Category"),
        Column("display_order", "Order"),
        Column("is_published", "Published", kind="bool"),
    ),
    search_keys=("question", "answer"),
    filters=(ListFilter("category", "Category"),),
    fields=(
        form_field("question", "Question", required=True),
        form_field("answer", "Answer", FieldType.TEXTAREA, required=True),
        form_field("category", "Category"),
        form_field("display_order", "Display order", FieldType.NUMBER, default_value=0),
        form_field("is_published", "Published", FieldType.CHECKBOX, default_value=True),
    ),
    schema=FaqForm,
)

_VENDOR_FIELDS = (
    form_field("business_name", "Business name", required=True),
    form_field("email", "Email", FieldType.EMAIL, required=True),
    form_field("phone", "Phone", FieldType.TEL),
    form_field("address", "Address", FieldType.TEXTAREA),
)

VENDORS = ResourceView(
    slug="vendors",
    title="Vendors",
    singular="Vendor",
    endpoint=lambda s: s.admin.vendors,
    list_key="vendors",
    title_key="business_name",
    columns=(
        Column("business_name", "Business", link=True),
        Column("email", "Email"),
        Column("phone", "Phone"),
        Column("status", "Status", kind="status"),
        Column("created_at", "Joined", kind="date"),
    ),
    search_keys=("business_name", "email", "phone"),
    filters=(ListFilter("status", "Status", VENDOR_STATUSES),),
    fields=_VENDOR_FIELDS,
    schema=VendorCreateForm,
    edit_fields=_VENDOR_FIELDS + (
        form_field("status", "Status", FieldType.SELECT, options=VENDOR_STATUSES),
        form_field("description", "Description", FieldType.TEXTAREA),
    ),
    edit_schema=VendorUpdateForm,
    links=(("Users", "/users"),),
)

USERS = ResourceView(
    slug="users",
    title="Users",
    singular="User",
    endpoint=lambda s: s.account.admin_users,
    list_key="users",
    can_create=False,
    columns=(
        Column("name", "Name", link=True),
        Column("email", "Email"),
        Column("role", "Role", kind="status"),
        Column("created_at", "Joined", kind="date"),
    ),
    search_keys=("name", "email"),
    filters=(ListFilter("role", "Role", tuple(r.value for r in UserRole)),),
    fields=(
        form_field("name", "Name", required=True),
        form_field("email", "Email", FieldType.EMAIL, required=True),
        form_field("role", "Role", FieldType.SELECT, required=True,
                   options=(r.value for r in UserRole)),
    ),
)

BOOKINGS = ResourceView(
    slug="bookings",
    title="Bookings",
    singular="Booking",
    endpoint=lambda s: s.booking.admin_bookings,
    list_key="bookings",
    title_key="booking_number",
    can_create=False,
    can_edit=False,
    can_delete=False,
    columns=(
        Column("booking_number", "Number", link=True),
        Column("activity.title", "Activity"),
        Column("customer_info.name", "Customer"),
        Column("booking_date", "Date", kind="date"),
        Column("total_price", "Total", kind="money"),
        Column("status", "Status", kind="status"),
        Column("payment_status", "Payment", kind="status"),
    ),
    search_keys=("booking_number", "customer_info.name", "customer_info.email", "activity.title"),
    filters=(
        ListFilter("status", "Status", remote=True),
        ListFilter("payment_status", "Payment"),
    ),
    actions=(
        RowAction(
            "status", "Update status", method="PUT",
            fields=(form_field("status", "Status", FieldType.SELECT, required=True,
                               options=("pending", "confirmed", "completed", "cancelled")),),
        ),
    ),
)

TICKETS = ResourceView(
    slug="tickets",
    title="Support tickets",
    singular="Ticket",
    endpoint=lambda s: s.support.admin_tickets,
    list_key="tickets",
    title_key="subject",
    can_create=False,
    can_edit=False,
    can_delete=False,
    columns=(
        Column("ticket_number", "Number", link=True),
        Column("subject", "Subject"),
        Column("user.email", "From"),
        Column("priority", "Priority", kind="status"),
        Column("status", "Status", kind="status"),
        Column("assigned_to_name", "Assignee"),
    ),
    search_keys=("ticket_number", "subject", "user.email"),
    filters=(
        ListFilter("status", "Status", TICKET_STATUSES, remote=True),
        ListFilter("priority", "Priority", ("low", "normal", "high", "urgent")),
    ),
    actions=(
        RowAction(
            "status", "Change status", method="PUT",
            fields=(form_field("status", "Status", FieldType.SELECT, required=True,
                               options=TICKET_STATUSES),),
        ),
        RowAction(
            "assign", "Assign", method="PUT",
            fields=(form_field("assigned_to", "Assignee user ID", required=True),),
        ),
        RowAction(
            "reply", "Reply", path="messages",
            fields=(form_field("message", "Message", FieldType.TEXTAREA, required=True),),
        ),
    ),
)

PAYMENTS = ResourceView(
    slug="payments",
    title="Payments",
    singular="Payment",
    endpoint=lambda s: s.booking.admin_payments,
    list_key="payments",
    title_key="transaction_id",
    can_create=False,
    can_edit=False,
    can_delete=False,
    columns=(
        Column("transaction_id", "Transaction", link=True),
        Column("booking_number", "Booking"),
        Column("amount", "Amount", kind="money"),
        Column("provider", "Provider"),
        Column("status", "Status", kind="status"),
        Column("created_at", "Created", kind="date"),
    ),
    search_keys=("transaction_id", "booking_number"),
    filters=(ListFilter("status", "Status"),),
    actions=(
        RowAction("sync", "Sync with gateway", when_status=("pending", "processing", "initiated")),
    ),
)

ISLANDS = ResourceView(
    slug="islands",
    title="Islands",
    singular="Island",
    endpoint=lambda s: s.catalog.islands,
    list_key="islands",
    can_create=False,
    can_edit=False,
    can_delete=False,
    page_size=50,
    columns=(
        Column("name", "Name", link=True),
        Column("atoll.name", "Atoll"),
        Column("type", "Type", kind="status"),
    ),
    search_keys=("name", "atoll.name"),
    filters=(ListFilter("type", "Type"), ListFilter("atoll.name", "Atoll")),
)

ATOLLS = ResourceView(
    slug="atolls",
    title="Atolls",
    singular="Atoll",
    endpoint=lambda s: s.catalog.atolls,
    list_key="atolls",
    can_create=False,
    can_edit=False,
    can_delete=False,
    page_size=50,
    columns=(
        Column("name", "Name", link=True),
        Column("code", "Code"),
        Column("official_name", "Official name"),
    ),
    search_keys=("name", "code", "official_name"),
)

TAXES = ResourceView(
    slug="taxes",
    title="Tax rules",
    singular="Tax rule",
    endpoint=lambda s: s.catalog.tax_rules,
    list_key="tax_rules",
    columns=(
        Column("name", "Name", link=True),
        Column("code", "Code"),
        Column("rate", "Rate"),
        Column("tax_type", "Type", kind="status"),
        Column("is_active", "Active", kind="bool"),
    ),
    search_keys=("name", "code"),
    fields=(
        form_field("name", "Name", required=True),
        form_field("code", "Code", required=True, placeholder="TGST"),
        form_field("rate", "Rate", FieldType.NUMBER, required=True,
                   validation=FieldValidation(min=0)),
        form_field("tax_type", "Type", FieldType.SELECT, options=("percentage", "fixed"),
                   default_value="percentage"),
        form_field("applies_to", "Applies to", FieldType.SELECT,
                   options=("all", "accommodation", "activity", "transfer"), default_value="all"),
        form_field("is_active", "Active", FieldType.CHECKBOX, default_value=True),
    ),
)

MEDIA = ResourceView(
    slug="media",
    title="Media",
    singular="Media file",
    endpoint=lambda s: s.admin.media,
    list_key="media",
    title_key="filename",
    can_create=False,
    can_edit=False,
    columns=(
        Column("filename", "File", link=True),
        Column("content_type", "Type"),
        Column("size", "Size"),
        Column("created_at", "Uploaded", kind="date"),
    ),
    search_keys=("filename",),
    filters=(ListFilter("content_type", "Type"),),
)

IMUGA_DECLARATIONS = ResourceView(
    slug="imuga/declarations",
    title="IMUGA declarations",
    singular="Declaration",
    endpoint=lambda s: s.imuga.declarations,
    list_key="declarations",
    title_key="declaration_number",
    columns=(
        Column("declaration_number", "Number", link=True),
        Column("group_name", "Group"),
        Column("accommodation_name", "Accommodation"),
        Column("arrival_date", "Arrival", kind="date"),
        Column("traveler_count", "Travelers"),
        Column("status", "Status", kind="status"),
    ),
    search_keys=("declaration_number", "group_name", "accommodation_name"),
    filters=(ListFilter("status", "Status", DECLARATION_STATUSES),),
    fields=(
        form_field("group_name", "Group name"),
        form_field("accommodation_name", "Accommodation", required=True),
        form_field("arrival_date", "Arrival date", FieldType.DATE, required=True),
        form_field("departure_date", "Departure date", FieldType.DATE, required=True),
        form_field("arrival_flight", "Arrival flight", required=True),
        form_field("departure_flight", "Departure flight"),
        form_field("notes", "Notes", FieldType.TEXTAREA),
    ),
    actions=(
        RowAction("validate", "Validate"),
        RowAction(
            "status", "Update status", method="PUT",
            fields=(form_field("status", "Status", FieldType.SELECT, required=True,
                               options=DECLARATION_STATUSES),),
        ),
    ),
    links=(("Travelers", "/travelers"), ("Export", "/export")),
)

IMUGA_REQUESTS = ResourceView(
    slug="imuga/requests",
    title="IMUGA requests",
    singular="Request",
    endpoint=lambda s: s.imuga.requests,
    list_key="requests",
    title_key="request_number",
    can_create=False,
    can_edit=False,
    can_delete=False,
    columns=(
        Column("request_number", "Number", link=True),
        Column("requester_name", "Requester"),
        Column("requester_email", "Email"),
        Column("arrival_date", "Arrival", kind="date"),
        Column("status", "Status", kind="status"),
    ),
    search_keys=("request_number", "requester_name", "requester_email"),
    filters=(ListFilter("status", "Status", ("pending", "processing", "completed", "cancelled")),),
    actions=(
        RowAction("process", "Start processing", when_status=("pending",)),
        RowAction("convert", "Convert to declaration", when_status=("pending", "processing"),
                  confirm="Create a declaration from this request?"),
    ),
)

ADMIN_VIEWS = (
    ACTIVITIES, CATEGORIES, FAQS, VENDORS, USERS, BOOKINGS, TICKETS, PAYMENTS,
    ISLANDS, ATOLLS, TAXES, MEDIA, IMUGA_DECLARATIONS, IMUGA_REQUESTS,
)


def resource_routers() -> list[APIRouter]:
    return [
        build_resource_router(view, prefix=PREFIX, guard=require_admin, portal="admin")
        for view in ADMIN_VIEWS
    ]
