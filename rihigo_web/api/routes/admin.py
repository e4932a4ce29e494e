"""Admin Panel — dashboard and the pages that don't fit the generic resource views.

Invariants:
    - Every route is guarded by require_admin; non-admins are redirected home
    - Unknown /admin paths render the admin-scoped not-found page, but only for admins
    - Layout saves are validated locally (known section types only) before the API call
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from rihigo_web.api.dependencies import Services, get_services, push_toast, require_admin
from rihigo_web.api.resources import form_field, load_or_raise, parse_form, redirect
from rihigo_web.api.templating import render
from rihigo_web.core.api_response import field_errors, get_error_message
from rihigo_web.core.auth_session import AuthSession
from rihigo_web.core.catalog_view import PAGE_SECTION_TYPES, parse_layout
from rihigo_web.core.domain_types import FieldType, ToastType
from rihigo_web.core.list_filters import count_by
from rihigo_web.schemas.forms import NotificationForm, form_errors

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])

VENDOR_USER_ROLES = ("owner", "manager", "staff")
NOTIFICATION_TYPES = ("system", "booking", "payment", "promotion", "support")
NOTIFICATION_PRIORITIES = ("low", "normal", "high", "urgent")

TRAVELER_FIELDS = (
    form_field("first_name", "First name", required=True),
    form_field("last_name", "Last name", required=True),
    form_field("passport_number", "Passport number", required=True),
    form_field("nationality", "Nationality", required=True),
    form_field("date_of_birth", "Date of birth", FieldType.DATE, required=True),
    form_field("gender", "Gender", FieldType.SELECT, options=("male", "female", "other")),
)

VENDOR_USER_FIELDS = (
    form_field("email", "Email", FieldType.EMAIL, required=True),
    form_field("role", "Role", FieldType.SELECT, required=True,
               options=VENDOR_USER_ROLES, default_value="staff"),
)

UPLOAD_FIELDS = (
    form_field("filename", "File name", required=True),
    form_field("content_type", "Content type", FieldType.SELECT, required=True,
               options=("image/jpeg", "image/png", "image/webp", "application/pdf")),
)


# ─── Dashboard ──────────────────────────────────────────────────

@router.get("")
@router.get("/dashboard")
async def dashboard(
    request: Request,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    token = auth.access_token
    activities, bookings, vendors, users, tickets, notifications = await asyncio.gather(
        services.catalog.admin_activities.list(token),
        services.booking.admin_bookings.list(token),
        services.admin.vendors.list(token),
        services.account.admin_users.list(token),
        services.support.admin_summary(token),
        services.admin.notification_stats(token),
    )
    booking_items = bookings.items("bookings")
    return render(request, "admin/dashboard.html", {
        "counts": {
            "activities": len(activities.items("activities")),
            "bookings": len(booking_items),
            "vendors": len(vendors.items("vendors")),
            "users": len(users.items("users")),
        },
        "booking_status_counts": count_by(booking_items, "status"),
        "recent_bookings": booking_items[:5],
        "ticket_summary": tickets.data if isinstance(tickets.data, dict) else {},
        "notification_stats": notifications.data if isinstance(notifications.data, dict) else {},
    })


# ─── Vendor users ───────────────────────────────────────────────

async def _vendor_users_page(
    request: Request, services: Services, token: str, vendor_id: str,
    values: dict | None = None, errors: dict | None = None, status_code: int = 200,
):
    vendor_response, users = await asyncio.gather(
        services.admin.vendors.get(token, vendor_id),
        services.admin.vendor_users(vendor_id).list(token),
    )
    vendor = load_or_raise(vendor_response, "Vendor", vendor_id)
    return render(request, "admin/vendor_users.html", {
        "vendor_record": vendor,
        "vendor_id": vendor_id,
        "users": users.items("users"),
        "fields": VENDOR_USER_FIELDS,
        "values": values or {"role": "staff"},
        "errors": errors or {},
        "error_message": None if users.success else get_error_message(users),
    }, status_code=status_code)


@router.get("/vendors/{vendor_id}/users")
async def vendor_users(
    request: Request,
    vendor_id: str,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    return await _vendor_users_page(request, services, auth.access_token, vendor_id)


@router.post("/vendors/{vendor_id}/users")
async def add_vendor_user(
    request: Request,
    vendor_id: str,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    form = await request.form()
    values, errors = parse_form(VENDOR_USER_FIELDS, None, form)
    if not errors:
        response = await services.admin.vendor_users(vendor_id).create(auth.access_token, values)
        if response.success:
            push_toast(request, ToastType.SUCCESS, "User added to vendor")
            return redirect(f"/admin/vendors/{vendor_id}/users")
        errors = field_errors(response) or {"email": get_error_message(response)}
    return await _vendor_users_page(
        request, services, auth.access_token, vendor_id, dict(form), errors, status_code=400,
    )


@router.post("/vendors/{vendor_id}/users/{user_id}/delete")
async def remove_vendor_user(
    request: Request,
    vendor_id: str,
    user_id: str,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    response = await services.admin.vendor_users(vendor_id).delete(auth.access_token, user_id)
    if response.success:
        push_toast(request, ToastType.SUCCESS, "User removed from vendor")
    else:
        push_toast(request, ToastType.ERROR, get_error_message(response))
    return redirect(f"/admin/vendors/{vendor_id}/users")


# ─── IMUGA declarations ─────────────────────────────────────────

@router.get("/imuga/declarations/{declaration_id}/travelers")
async def declaration_travelers(
    request: Request,
    declaration_id: str,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    response = await services.imuga.declarations.get(auth.access_token, declaration_id)
    declaration = load_or_raise(response, "Declaration", declaration_id)
    return render(request, "admin/imuga_travelers.html", {
        "declaration": declaration,
        "declaration_id": declaration_id,
        "travelers": declaration.get("travelers") or [],
        "fields": TRAVELER_FIELDS,
        "values": {},
        "errors": {},
    })


@router.post("/imuga/declarations/{declaration_id}/travelers")
async def add_traveler(
    request: Request,
    declaration_id: str,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    form = await request.form()
    values, errors = parse_form(TRAVELER_FIELDS, None, form)
    if not errors:
        response = await services.imuga.add_traveler(auth.access_token, declaration_id, values)
        if response.success:
            push_toast(request, ToastType.SUCCESS, "Traveler added")
            return redirect(f"/admin/imuga/declarations/{declaration_id}/travelers")
        errors = field_errors(response) or {"__all__": get_error_message(response)}
    declaration_response = await services.imuga.declarations.get(auth.access_token, declaration_id)
    declaration = load_or_raise(declaration_response, "Declaration", declaration_id)
    return render(request, "admin/imuga_travelers.html", {
        "declaration": declaration,
        "declaration_id": declaration_id,
        "travelers": declaration.get("travelers") or [],
        "fields": TRAVELER_FIELDS,
        "values": form,
        "errors": errors,
    }, status_code=400)


@router.post("/imuga/declarations/{declaration_id}/travelers/{traveler_id}/delete")
async def remove_traveler(
    request: Request,
    declaration_id: str,
    traveler_id: str,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    response = await services.imuga.remove_traveler(auth.access_token, declaration_id, traveler_id)
    if response.success:
        push_toast(request, ToastType.SUCCESS, "Traveler removed")
    else:
        push_toast(request, ToastType.ERROR, get_error_message(response))
    return redirect(f"/admin/imuga/declarations/{declaration_id}/travelers")


@router.get("/imuga/declarations/{declaration_id}/export")
async def export_declaration(
    request: Request,
    declaration_id: str,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    """Download link from the API when it offers one, otherwise the export as a JSON file."""
    response = await services.imuga.export_declaration(auth.access_token, declaration_id)
    data = load_or_raise(response, "Declaration", declaration_id)
    if isinstance(data, dict) and data.get("download_url"):
        return RedirectResponse(data["download_url"], status_code=302)
    return JSONResponse(data, headers={
        "Content-Disposition": f'attachment; filename="declaration-{declaration_id}.json"',
    })


# ─── Notifications ──────────────────────────────────────────────

def _notification_page(
    request: Request, stats: dict, values: dict, errors: dict,
    error_message: str | None = None, status_code: int = 200,
):
    return render(request, "admin/notifications.html", {
        "stats": stats,
        "types": NOTIFICATION_TYPES,
        "priorities": NOTIFICATION_PRIORITIES,
        "values": values,
        "errors": errors,
        "error_message": error_message,
    }, status_code=status_code)


@router.get("/notifications")
async def notifications(
    request: Request,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    stats = await services.admin.notification_stats(auth.access_token)
    return _notification_page(
        request, stats.data if isinstance(stats.data, dict) else {},
        {"type": "system", "priority": "normal"}, {},
    )


@router.post("/notifications")
async def send_notification(
    request: Request,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    form = dict(await request.form())
    try:
        data = NotificationForm.model_validate(form)
    except ValidationError as exc:
        return _notification_page(
            request, {}, form, form_errors(exc, NotificationForm), status_code=400,
        )
    body = data.payload()
    body.pop("broadcast", None)
    body.pop("user_ids", None)
    if data.broadcast:
        recipients = data.recipients()
        if recipients:
            body["user_ids"] = recipients
        body.pop("user_id", None)
        response = await services.admin.broadcast_notification(auth.access_token, body)
    else:
        response = await services.admin.create_notification(auth.access_token, body)
    if not response.success:
        return _notification_page(
            request, {}, form, field_errors(response), get_error_message(response), status_code=400,
        )
    logger.info("Notification sent", extra={"broadcast": data.broadcast})
    push_toast(request, ToastType.SUCCESS, "Notification broadcast" if data.broadcast else "Notification sent")
    return redirect("/admin/notifications")


# ─── Media upload ───────────────────────────────────────────────

@router.get("/media/upload")
async def media_upload_form(request: Request, auth: AuthSession = Depends(require_admin)):
    return render(request, "admin/media_upload.html", {
        "fields": UPLOAD_FIELDS, "values": {}, "errors": {}, "upload": None,
    })


@router.post("/media/upload")
async def media_upload(
    request: Request,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    """Request a presigned URL; the browser then uploads the file straight to storage."""
    form = await request.form()
    values, errors = parse_form(UPLOAD_FIELDS, None, form)
    upload = None
    error_message = None
    if not errors:
        response = await services.admin.presigned_upload(
            auth.access_token, values["filename"], values["content_type"],
        )
        if response.success and isinstance(response.data, dict):
            upload = response.data
        else:
            error_message = get_error_message(response)
    return render(request, "admin/media_upload.html", {
        "fields": UPLOAD_FIELDS, "values": form, "errors": errors,
        "upload": upload, "error_message": error_message,
    }, status_code=200 if upload else 400)


# ─── Page layout ────────────────────────────────────────────────

async def _layout_page(
    request: Request, services: Services, token: str, activity_id: str,
    layout_json: str | None = None, error_message: str | None = None, status_code: int = 200,
):
    activity_response, layout = await asyncio.gather(
        services.catalog.admin_activities.get(token, activity_id),
        services.catalog.get_layout(token, activity_id),
    )
    activity = load_or_raise(activity_response, "Activity", activity_id)
    if layout_json is None:
        sections = layout.items("sections") if layout.success else activity.get("page_layout") or []
        layout_json = json.dumps(sections, indent=2)
    return render(request, "admin/layout_editor.html", {
        "activity": activity,
        "activity_id": activity_id,
        "layout_json": layout_json,
        "section_types": PAGE_SECTION_TYPES,
        "error_message": error_message,
    }, status_code=status_code)


@router.get("/activities/{activity_id}/layout")
async def layout_editor(
    request: Request,
    activity_id: str,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    return await _layout_page(request, services, auth.access_token, activity_id)


@router.post("/activities/{activity_id}/layout")
async def save_layout(
    request: Request,
    activity_id: str,
    auth: AuthSession = Depends(require_admin),
    services: Services = Depends(get_services),
):
    form = await request.form()
    layout_json = str(form.get("layout") or "")
    try:
        sections = parse_layout(layout_json)
    except ValueError as exc:
        return await _layout_page(
            request, services, auth.access_token, activity_id, layout_json, str(exc), status_code=400,
        )
    response = await services.catalog.save_layout(auth.access_token, activity_id, sections)
    if not response.success:
        return await _layout_page(
            request, services, auth.access_token, activity_id, layout_json,
            get_error_message(response), status_code=400,
        )
    push_toast(request, ToastType.SUCCESS, f"Layout saved ({len(sections)} sections)")
    return redirect(f"/admin/activities/{activity_id}/layout")


# ─── Fallback ───────────────────────────────────────────────────

fallback_router = APIRouter(prefix="/admin", tags=["admin"])


@fallback_router.api_route("/{path:path}", methods=["GET", "POST"], include_in_schema=False)
async def admin_not_found(path: str, auth: AuthSession = Depends(require_admin)):
    raise HTTPException(status_code=404)
