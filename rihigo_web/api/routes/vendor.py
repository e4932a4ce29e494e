"""Vendor Portal — dashboard, bookings, calendars, reports and settings.

Invariants:
    - Every route is guarded by require_vendor (signed in and linked to a vendor)
    - Independent API calls for one page are issued concurrently
    - This router is registered before the generic vendor resource routers so
      /vendor/bookings/calendar and /vendor/discounts/validate win over /{item_id}

Design Decisions:
    - Booking lists are filtered locally after one API fetch, like the generic
      resource pages; the date range is the only filter forwarded to the API
"""

import asyncio
import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from rihigo_web.api.dependencies import Services, get_services, push_toast, require_vendor
from rihigo_web.api.resources import form_field, load_or_raise, parse_form, redirect
from rihigo_web.api.templating import render
from rihigo_web.core.api_response import field_errors, get_error_message
from rihigo_web.core.auth_session import AuthSession
from rihigo_web.core.booking_fields import FieldValidation
from rihigo_web.core.calendar_grid import (
    CalendarMonth, build_month_grid, grid_weeks, group_by_day, parse_iso_date,
)
from rihigo_web.core.domain_types import BookingSourceType, BookingStatus, FieldType, PaymentStatus, ToastType
from rihigo_web.core.list_filters import active_filters, count_by, filter_items, paginate
from rihigo_web.services.vendor_api import REPORT_KINDS

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/vendor", tags=["vendor"])

BOOKING_FILTERS = ("status", "payment_status", "source_type", "activity_id")
BOOKING_SEARCH_KEYS = (
    "booking_number", "guest_name", "guest_email", "activity.title",
    "primary_guest.first_name", "primary_guest.last_name", "primary_guest.email",
)
ACCEPTED_PAYMENT_METHODS = ("cash", "card", "bank_transfer", "bml")

BOOKING_FIELDS = (
    form_field("guest_name", "Guest name", required=True),
    form_field("guest_email", "Guest email", FieldType.EMAIL, required=True),
    form_field("guest_phone", "Guest phone", FieldType.TEL),
    form_field("check_in_date", "Check-in / start date", FieldType.DATE, required=True),
    form_field("check_out_date", "Check-out / end date", FieldType.DATE),
    form_field("adults", "Adults", FieldType.NUMBER, required=True, default_value=1,
               validation=FieldValidation(min=1, max=100)),
    form_field("children", "Children", FieldType.NUMBER, default_value=0,
               validation=FieldValidation(min=0, max=100)),
    form_field("source_type", "Source", FieldType.SELECT, required=True,
               options=(s.value for s in BookingSourceType), default_value="direct"),
    form_field("total", "Total amount (USD)", FieldType.NUMBER,
               validation=FieldValidation(min=0)),
    form_field("notes", "Notes", FieldType.TEXTAREA),
)

AVAILABILITY_FIELDS = (
    form_field("date", "Date", FieldType.DATE, required=True),
    form_field("is_available", "Available", FieldType.CHECKBOX),
    form_field("available_quantity", "Quantity", FieldType.NUMBER, validation=FieldValidation(min=0)),
    form_field("price_override", "Price override (USD)", FieldType.NUMBER,
               validation=FieldValidation(min=0)),
)

BILLING_FIELDS = (
    form_field("company_name", "Company name", required=True),
    form_field("tax_id", "Tax ID (TIN)"),
    form_field("address", "Billing address", FieldType.TEXTAREA),
    form_field("invoice_prefix", "Invoice prefix", validation=FieldValidation(max_length=10)),
    form_field("payment_terms_days", "Payment terms (days)", FieldType.NUMBER,
               validation=FieldValidation(min=0, max=365)),
    form_field("bank_name", "Bank name"),
    form_field("bank_account_number", "Bank account number"),
    form_field("invoice_notes", "Invoice footer", FieldType.TEXTAREA),
)

TAX_SETTING_FIELDS = (
    form_field("prices_include_tax", "Prices include tax", FieldType.CHECKBOX),
    form_field("tax_registration_number", "Tax registration number"),
    form_field("default_tax_rate_id", "Default tax rate"),
)

TAX_CALCULATION_FIELDS = (
    form_field("amount", "Amount", FieldType.NUMBER, required=True, validation=FieldValidation(min=0)),
    form_field("tax_rate_id", "Tax rate"),
)


def today() -> date:
    return date.today()


def _month_bounds(view: CalendarMonth) -> tuple[str, str]:
    return view.first_day.isoformat(), view.last_day.isoformat()


def _calendar_weeks(view: CalendarMonth, entries_by_day: dict[int, list[dict]]) -> list[list[dict | None]]:
    """Month grid where every cell carries the entries that fall on it."""
    cells = build_month_grid(view, today(), min_date=view.first_day)
    weeks = grid_weeks(cells)
    return [
        [None if cell is None else {"cell": cell, "entries": entries_by_day.get(cell.day, [])}
         for cell in week]
        for week in weeks
    ]


def _report_sections(data: Any) -> tuple[dict[str, Any], list[dict]]:
    """Split a report payload into scalar summary figures and tabular rows."""
    if isinstance(data, list):
        return {}, [r for r in data if isinstance(r, dict)]
    if not isinstance(data, dict):
        return {}, []
    summary = {k: v for k, v in data.items() if isinstance(v, (int, float, str)) and not isinstance(v, bool)}
    rows: list[dict] = []
    for key in ("rows", "items", "data", "breakdown"):
        if isinstance(data.get(key), list):
            rows = [r for r in data[key] if isinstance(r, dict)]
            break
    return summary, rows


# ─── Dashboard ──────────────────────────────────────────────────

@router.get("")
@router.get("/dashboard")
async def dashboard(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    token = auth.access_token
    profile, activities, bookings, overview = await asyncio.gather(
        services.vendor.profile(token),
        services.vendor.activities.list(token),
        services.vendor.bookings.list(token),
        services.vendor.dashboard(token),
    )
    booking_items = bookings.items("bookings")
    upcoming = sorted(
        (b for b in booking_items if (parse_iso_date(b.get("check_in_date")) or date.min) >= today()),
        key=lambda b: b.get("check_in_date") or "",
    )
    failed = [r for r in (profile, activities, bookings, overview) if not r.success]
    return render(request, "vendor/dashboard.html", {
        "profile": profile.data if profile.success else auth.vendor,
        "activity_count": len(activities.items("activities")),
        "booking_count": len(booking_items),
        "status_counts": count_by(booking_items, "status"),
        "upcoming": upcoming[:5],
        "overview": overview.data if overview.success and isinstance(overview.data, dict) else {},
        "error_message": get_error_message(failed[0]) if failed else None,
    })


# ─── Bookings ───────────────────────────────────────────────────

@router.get("/bookings")
async def booking_list(
    request: Request,
    q: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    page: int = 1,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    selected = active_filters(request.query_params, BOOKING_FILTERS)
    remote = {"start_date": start_date, "end_date": end_date}
    response = await services.vendor.bookings.list(auth.access_token, remote)
    items = response.items("bookings")
    matched = filter_items(items, q, BOOKING_SEARCH_KEYS, selected)
    page_items, pagination = paginate(matched, page, 20)
    return render(request, "vendor/bookings.html", {
        "bookings": page_items,
        "pagination": pagination,
        "total": len(items),
        "q": q or "",
        "start_date": start_date or "",
        "end_date": end_date or "",
        "selected": selected,
        "filter_options": {
            "status": [s.value for s in BookingStatus],
            "payment_status": [s.value for s in PaymentStatus],
            "source_type": [s.value for s in BookingSourceType],
        },
        "has_active_filters": bool(selected or q or start_date or end_date),
        "error_message": None if response.success else get_error_message(response),
    })


@router.get("/bookings/calendar")
async def booking_calendar(
    request: Request,
    month: str | None = None,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    view = CalendarMonth.parse(month, today())
    start, end = _month_bounds(view)
    response = await services.vendor.booking_calendar(auth.access_token, start, end)
    entries = response.items("bookings")
    return render(request, "vendor/booking_calendar.html", {
        "view": view,
        "weeks": _calendar_weeks(view, group_by_day(entries, view, "check_in_date")),
        "previous": view.previous().key,
        "next": view.next().key,
        "booking_count": len(entries),
        "error_message": None if response.success else get_error_message(response),
    })


async def _booking_form(
    request: Request, services: Services, token: str, values: Any,
    errors: dict, error_message: str | None = None, status_code: int = 200,
):
    activities = await services.vendor.activities.list(token)
    return render(request, "vendor/booking_new.html", {
        "activities": activities.items("activities"),
        "fields": BOOKING_FIELDS,
        "values": values,
        "errors": errors,
        "error_message": error_message,
    }, status_code=status_code)


@router.get("/bookings/new")
async def new_booking(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    defaults = {f.name: f.default_value for f in BOOKING_FIELDS if f.default_value is not None}
    defaults.update(request.query_params.items())
    return await _booking_form(request, services, auth.access_token, defaults, {})


@router.post("/bookings/new")
async def create_booking(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    form = await request.form()
    payload, errors = parse_form(BOOKING_FIELDS, None, form)
    if not form.get("activity_id"):
        errors["activity_id"] = "Activity is required"
    check_in = parse_iso_date(payload.get("check_in_date"))
    check_out = parse_iso_date(payload.get("check_out_date"))
    if check_in and check_out and check_out < check_in:
        errors["check_out_date"] = "Check-out / end date cannot be before the start date"
    if errors:
        return await _booking_form(
            request, services, auth.access_token, form, errors, status_code=400,
        )
    payload["activity_id"] = form.get("activity_id")
    response = await services.vendor.bookings.create(auth.access_token, payload)
    booking_id = response.data.get("id") if isinstance(response.data, dict) else None
    if not response.success or not booking_id:
        return await _booking_form(
            request, services, auth.access_token, form, field_errors(response),
            response.error_message or "Failed to create booking", status_code=400,
        )
    logger.info("Vendor booking created", extra={"booking_id": booking_id})
    push_toast(request, ToastType.SUCCESS, "Booking created")
    return redirect(f"/vendor/bookings/{booking_id}")


@router.get("/bookings/{booking_id}")
async def booking_detail(
    request: Request,
    booking_id: str,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    response = await services.vendor.bookings.get(auth.access_token, booking_id)
    booking = load_or_raise(response, "Booking", booking_id)
    return render(request, "vendor/booking_detail.html", {
        "booking": booking,
        "statuses": [s.value for s in BookingStatus],
    })


@router.post("/bookings/{booking_id}/status")
async def change_booking_status(
    request: Request,
    booking_id: str,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    form = await request.form()
    new_status = str(form.get("status") or "")
    if new_status not in {s.value for s in BookingStatus}:
        push_toast(request, ToastType.ERROR, "Choose a valid status")
        return redirect(f"/vendor/bookings/{booking_id}")
    response = await services.vendor.update_booking_status(
        auth.access_token, booking_id, new_status, str(form.get("reason") or "") or None,
    )
    if response.success:
        push_toast(request, ToastType.SUCCESS, f"Booking marked {new_status.replace('_', ' ')}")
    else:
        push_toast(request, ToastType.ERROR, get_error_message(response))
    return redirect(f"/vendor/bookings/{booking_id}")


@router.post("/bookings/{booking_id}/confirm")
async def confirm_booking(
    request: Request,
    booking_id: str,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    response = await services.vendor.confirm_booking(auth.access_token, booking_id)
    if response.success:
        push_toast(request, ToastType.SUCCESS, "Booking confirmed")
    else:
        push_toast(request, ToastType.ERROR, get_error_message(response))
    return redirect(f"/vendor/bookings/{booking_id}")


@router.post("/bookings/{booking_id}/invoice")
async def invoice_booking(
    request: Request,
    booking_id: str,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    response = await services.vendor.invoice_from_booking(auth.access_token, booking_id)
    invoice_id = response.data.get("id") if isinstance(response.data, dict) else None
    if response.success and invoice_id:
        push_toast(request, ToastType.SUCCESS, "Invoice created")
        return redirect(f"/vendor/invoices/{invoice_id}")
    push_toast(request, ToastType.ERROR, get_error_message(response))
    return redirect(f"/vendor/bookings/{booking_id}")


# ─── Guests ─────────────────────────────────────────────────────

@router.get("/guests/{guest_id}/history")
async def guest_history(
    request: Request,
    guest_id: str,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    guest_response, history = await asyncio.gather(
        services.vendor.guests.get(auth.access_token, guest_id),
        services.vendor.guest_history(auth.access_token, guest_id),
    )
    guest = load_or_raise(guest_response, "Guest", guest_id)
    return render(request, "vendor/guest_history.html", {
        "guest": guest,
        "bookings": history.items("bookings"),
        "error_message": None if history.success else get_error_message(history),
    })


@router.get("/guests/{guest_id}/merge")
async def merge_guests_form(
    request: Request,
    guest_id: str,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    guest_response, guests = await asyncio.gather(
        services.vendor.guests.get(auth.access_token, guest_id),
        services.vendor.guests.list(auth.access_token),
    )
    guest = load_or_raise(guest_response, "Guest", guest_id)
    return render(request, "vendor/guest_merge.html", {
        "guest": guest,
        "candidates": [g for g in guests.items("guests") if str(g.get("id")) != guest_id],
    })


@router.post("/guests/{guest_id}/merge")
async def merge_guests(
    request: Request,
    guest_id: str,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    form = await request.form()
    duplicate_ids = [str(v) for v in form.getlist("duplicate_ids") if v and str(v) != guest_id]
    if not duplicate_ids:
        push_toast(request, ToastType.ERROR, "Select at least one duplicate guest")
        return redirect(f"/vendor/guests/{guest_id}/merge")
    response = await services.vendor.merge_guests(auth.access_token, guest_id, duplicate_ids)
    if response.success:
        push_toast(request, ToastType.SUCCESS, f"Merged {len(duplicate_ids)} guest record(s)")
        return redirect(f"/vendor/guests/{guest_id}")
    push_toast(request, ToastType.ERROR, get_error_message(response))
    return redirect(f"/vendor/guests/{guest_id}/merge")


# ─── Resource availability ──────────────────────────────────────

@router.get("/resources/{resource_id}/availability")
async def resource_availability(
    request: Request,
    resource_id: str,
    month: str | None = None,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    view = CalendarMonth.parse(month, today())
    start, end = _month_bounds(view)
    resource_response, availability = await asyncio.gather(
        services.vendor.resources.get(auth.access_token, resource_id),
        services.vendor.resource_availability(auth.access_token, resource_id, start, end),
    )
    resource = load_or_raise(resource_response, "Resource", resource_id)
    return render(request, "vendor/resource_availability.html", {
        "resource": resource,
        "view": view,
        "weeks": _calendar_weeks(view, group_by_day(availability.items("availability"), view, "date")),
        "previous": view.previous().key,
        "next": view.next().key,
        "fields": AVAILABILITY_FIELDS,
        "values": {"is_available": True},
        "errors": {},
        "error_message": None if availability.success else get_error_message(availability),
    })


@router.post("/resources/{resource_id}/availability")
async def update_availability(
    request: Request,
    resource_id: str,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    form = await request.form()
    values, errors = parse_form(AVAILABILITY_FIELDS, None, form)
    day = parse_iso_date(values.get("date"))
    month = f"?month={day.year:04d}-{day.month:02d}" if day else ""
    if errors:
        push_toast(request, ToastType.ERROR, "; ".join(errors.values()))
        return redirect(f"/vendor/resources/{resource_id}/availability{month}")
    response = await services.vendor.update_resource_availability(
        auth.access_token, resource_id, values,
    )
    if response.success:
        push_toast(request, ToastType.SUCCESS, "Availability updated")
    else:
        push_toast(request, ToastType.ERROR, get_error_message(response))
    return redirect(f"/vendor/resources/{resource_id}/availability{month}")


# ─── Discounts ──────────────────────────────────────────────────

@router.get("/discounts/validate")
async def discount_check_form(request: Request, auth: AuthSession = Depends(require_vendor)):
    return render(request, "vendor/discount_validate.html", {"code": "", "amount": "", "result": None})


@router.post("/discounts/validate")
async def discount_check(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    form = await request.form()
    code = str(form.get("code") or "").strip()
    raw_amount = str(form.get("amount") or "").strip()
    try:
        amount = float(raw_amount) if raw_amount else None
    except ValueError:
        amount = None
    if not code:
        return render(request, "vendor/discount_validate.html", {
            "code": code, "amount": raw_amount, "result": None,
            "error_message": "Code is required",
        }, status_code=400)
    response = await services.vendor.validate_discount(auth.access_token, code, amount)
    return render(request, "vendor/discount_validate.html", {
        "code": code,
        "amount": raw_amount,
        "result": response.data if response.success else None,
        "error_message": None if response.success else get_error_message(response),
    })


# ─── Reports ────────────────────────────────────────────────────

@router.get("/reports")
async def reports_overview(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    response = await services.vendor.dashboard(auth.access_token)
    summary, rows = _report_sections(response.data)
    return render(request, "vendor/reports.html", {
        "kind": "overview",
        "kinds": REPORT_KINDS,
        "summary": summary,
        "rows": rows,
        "start_date": "",
        "end_date": "",
        "error_message": None if response.success else get_error_message(response),
    })


@router.get("/reports/{kind}")
async def report(
    request: Request,
    kind: str,
    start_date: str | None = None,
    end_date: str | None = None,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    if kind not in REPORT_KINDS:
        raise HTTPException(status_code=404)
    current = today()
    start = parse_iso_date(start_date) or current.replace(day=1)
    end = parse_iso_date(end_date) or current
    if end < start:
        start, end = end, start
    response = await services.vendor.report(
        auth.access_token, kind, {"start_date": start.isoformat(), "end_date": end.isoformat()},
    )
    summary, rows = _report_sections(response.data)
    return render(request, "vendor/reports.html", {
        "kind": kind,
        "kinds": REPORT_KINDS,
        "summary": summary,
        "rows": rows,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "error_message": None if response.success else get_error_message(response),
    })


# ─── Settings ───────────────────────────────────────────────────

@router.get("/settings")
async def settings_home(auth: AuthSession = Depends(require_vendor)):
    return redirect("/vendor/settings/billing")


@router.get("/settings/billing")
async def billing_settings(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    response = await services.vendor.billing_settings(auth.access_token)
    return render(request, "vendor/settings_form.html", {
        "section": "billing",
        "title": "Billing settings",
        "fields": BILLING_FIELDS,
        "values": response.data if isinstance(response.data, dict) else {},
        "errors": {},
        "error_message": None if response.success else get_error_message(response),
    })


@router.post("/settings/billing")
async def save_billing_settings(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    form = await request.form()
    values, errors = parse_form(BILLING_FIELDS, None, form)
    response = None
    if not errors:
        response = await services.vendor.update_billing_settings(auth.access_token, values)
        if response.success:
            push_toast(request, ToastType.SUCCESS, "Billing settings saved")
            return redirect("/vendor/settings/billing")
        errors = field_errors(response)
    return render(request, "vendor/settings_form.html", {
        "section": "billing",
        "title": "Billing settings",
        "fields": BILLING_FIELDS,
        "values": form,
        "errors": errors,
        "error_message": get_error_message(response) if response is not None else None,
    }, status_code=400)


@router.get("/settings/payment-methods")
async def payment_methods(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    response = await services.vendor.billing_settings(auth.access_token)
    data = response.data if isinstance(response.data, dict) else {}
    return render(request, "vendor/payment_methods.html", {
        "methods": ACCEPTED_PAYMENT_METHODS,
        "enabled": set(data.get("accepted_payment_methods") or ()),
        "error_message": None if response.success else get_error_message(response),
    })


@router.post("/settings/payment-methods")
async def save_payment_methods(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    form = await request.form()
    enabled = [m for m in ACCEPTED_PAYMENT_METHODS if m in form.getlist("methods")]
    response = await services.vendor.update_billing_settings(
        auth.access_token, {"accepted_payment_methods": enabled},
    )
    if response.success:
        push_toast(request, ToastType.SUCCESS, "Payment methods saved")
    else:
        push_toast(request, ToastType.ERROR, get_error_message(response))
    return redirect("/vendor/settings/payment-methods")


async def _tax_page(
    request: Request, services: Services, token: str, *,
    values: Any = None, errors: dict | None = None, calculation: Any = None,
    calc_values: Any = None, error_message: str | None = None, status_code: int = 200,
):
    settings, rates = await asyncio.gather(
        services.vendor.tax_settings(token), services.vendor.tax_rates(token),
    )
    return render(request, "vendor/tax_settings.html", {
        "fields": TAX_SETTING_FIELDS,
        "calc_fields": TAX_CALCULATION_FIELDS,
        "values": values if values is not None else (settings.data if isinstance(settings.data, dict) else {}),
        "calc_values": calc_values or {},
        "errors": errors or {},
        "rates": rates.items("tax_rates"),
        "calculation": calculation,
        "error_message": error_message or (None if settings.success else get_error_message(settings)),
    }, status_code=status_code)


@router.get("/settings/taxes")
async def tax_settings(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    return await _tax_page(request, services, auth.access_token)


@router.post("/settings/taxes")
async def save_tax_settings(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    form = await request.form()
    values, errors = parse_form(TAX_SETTING_FIELDS, None, form)
    if errors:
        return await _tax_page(
            request, services, auth.access_token, values=form, errors=errors, status_code=400,
        )
    response = await services.vendor.update_tax_settings(auth.access_token, values)
    if not response.success:
        return await _tax_page(
            request, services, auth.access_token, values=form, errors=field_errors(response),
            error_message=get_error_message(response), status_code=400,
        )
    push_toast(request, ToastType.SUCCESS, "Tax settings saved")
    return redirect("/vendor/settings/taxes")


@router.post("/settings/taxes/calculate")
async def calculate_tax(
    request: Request,
    auth: AuthSession = Depends(require_vendor),
    services: Services = Depends(get_services),
):
    form = await request.form()
    values, errors = parse_form(TAX_CALCULATION_FIELDS, None, form)
    if errors:
        return await _tax_page(
            request, services, auth.access_token, calc_values=form,
            error_message="; ".join(errors.values()), status_code=400,
        )
    response = await services.vendor.calculate_tax(auth.access_token, values)
    return await _tax_page(
        request, services, auth.access_token, calc_values=form,
        calculation=response.data if response.success else None,
        error_message=None if response.success else get_error_message(response),
    )
