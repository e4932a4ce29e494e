"""Booking Routes — dynamic booking form, my bookings, confirmation and BML payment.

Invariants:
    - Every page here requires a signed-in user
    - The booking form is built from the activity's booking type and field overrides;
      hidden (conditional) fields are neither rendered nor validated
    - Clicking a disabled calendar day leaves the bound date unchanged
    - A submitted date the calendar would disable is rejected with 400
    - Payment is only offered once the vendor confirmed and the booking is unpaid
"""

import asyncio
import logging
from datetime import date

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from rihigo_web.api.dependencies import Services, get_locale, get_services, push_toast, require_user
from rihigo_web.api.resources import load_or_raise
from rihigo_web.api.routes.website import catalog_helpers, load_currencies
from rihigo_web.api.templating import current_currency, render
from rihigo_web.core.api_response import PaginationData, get_error_message
from rihigo_web.core.auth_session import AuthSession
from rihigo_web.core.booking_fields import (
    FieldDefinition, fields_for_activity, group_fields, is_field_visible,
)
from rihigo_web.core.calendar_grid import (
    CalendarMonth, build_month_grid, grid_weeks, parse_iso_date, select_day,
)
from rihigo_web.core.catalog_view import active_packages
from rihigo_web.core.domain_types import FieldType, PaymentOutcome, ToastType
from rihigo_web.core.form_validation import coerce_values, validate_fields
from rihigo_web.core.payment_status import build_booking_payload, classify_payment

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/{lang}", tags=["booking"])

MISSING_TRANSACTION = "Missing transaction reference"


def today() -> date:
    return date.today()


def _calendar_field(fields: list[FieldDefinition]) -> FieldDefinition | None:
    return next((f for f in fields if f.type == FieldType.DATE), None)


def _calendar_context(
    field: FieldDefinition | None, selected: str | None, month: str | None, current_day: date,
) -> dict:
    if field is None:
        return {"calendar": None}
    view = CalendarMonth.parse(month, parse_iso_date(selected) or current_day)
    rules = field.validation
    cells = build_month_grid(view, current_day, selected, rules.min_date, rules.max_date)
    return {"calendar": {
        "field": field,
        "view": view,
        "weeks": grid_weeks(cells),
        "selected": selected,
        "previous": view.previous().key,
        "next": view.next().key,
    }}


def _form_page(
    request: Request, lang: str, activity: dict, fields: list[FieldDefinition],
    config, values: dict, errors: dict, currencies, month: str | None = None,
    error_message: str | None = None, status_code: int = 200,
):
    visible = [f for f in fields if is_field_visible(f, values)]
    calendar_field = _calendar_field(visible)
    selected = values.get(calendar_field.name) if calendar_field else None
    return render(request, "website/booking_form.html", {
        "lang": lang,
        "activity": activity,
        "packages": active_packages(activity),
        "groups": [(g, [f for f in fs if f in visible]) for g, fs in group_fields(config, fields)],
        "values": values,
        "errors": errors,
        "error_message": error_message,
        "currencies": currencies,
        **_calendar_context(calendar_field, selected, month, today()),
        **catalog_helpers(lang),
    }, status_code=status_code)


async def _load_activity(services: Services, slug: str, lang: str):
    response, currencies = await asyncio.gather(
        services.catalog.get_activity_by_slug(slug, lang),
        load_currencies(services),
    )
    return load_or_raise(response, "Activity", slug), currencies


@router.get("/booking/{slug}")
async def booking_form(
    request: Request,
    slug: str,
    month: str | None = None,
    day: int | None = None,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    activity, currencies = await _load_activity(services, slug, lang)
    config, fields = fields_for_activity(activity)
    values: dict = {f.name: f.default_value for f in fields if f.default_value is not None}
    values.update({k: v for k, v in request.query_params.items() if k not in ("month", "day")})
    values.setdefault("full_name", auth.user.name or "")
    values.setdefault("email", auth.user.email)

    calendar_field = _calendar_field(fields)
    if calendar_field is not None and day is not None:
        view = CalendarMonth.parse(month, today())
        rules = calendar_field.validation
        values[calendar_field.name] = select_day(
            view, day, today(), values.get(calendar_field.name),
            rules.min_date, rules.max_date,
        )
    return _form_page(request, lang, activity, fields, config, values, {}, currencies, month)


@router.post("/booking/{slug}")
async def create_booking(
    request: Request,
    slug: str,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    activity, currencies = await _load_activity(services, slug, lang)
    config, fields = fields_for_activity(activity)
    form = await request.form()
    values = coerce_values(fields, form)
    errors = validate_fields(fields, values, today())
    raw = dict(form)
    if errors:
        return _form_page(
            request, lang, activity, fields, config, {**raw, **values}, errors, currencies,
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    visible = {k: v for k, v in values.items() if any(
        f.name == k and is_field_visible(f, values) for f in fields
    )}
    payload = build_booking_payload(
        {**visible, "activity_id": activity.get("id"), "package_id": raw.get("package_id")},
        today(),
        display_currency=current_currency(request, currencies),
    )
    response = await services.booking.create(auth.access_token, payload)
    booking_id = response.data.get("id") if isinstance(response.data, dict) else None
    if not response.success or not booking_id:
        logger.warning(
            f"Booking creation failed: {response.error_message}",
            extra={"user_email": auth.user.email},
        )
        return _form_page(
            request, lang, activity, fields, config, {**raw, **values}, {},
            currencies, error_message=response.error_message or "Failed to create booking",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    push_toast(request, ToastType.SUCCESS, "Booking created")
    return RedirectResponse(
        f"/{lang}/bookings/{booking_id}/confirmation", status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/bookings")
async def my_bookings(
    request: Request,
    page: int = 1,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    response, currencies = await asyncio.gather(
        services.booking.list_mine(auth.access_token, max(1, page)),
        load_currencies(services),
    )
    items = response.items("bookings")
    return render(request, "website/bookings.html", {
        "lang": lang,
        "bookings": items,
        "pagination": response.pagination_data or PaginationData(
            page=1, total_count=len(items), total_pages=1,
        ),
        "currencies": currencies,
        "error_message": None if response.success else get_error_message(response),
    })


def can_pay(booking: dict) -> bool:
    return (
        booking.get("vendor_confirmation_status") == "confirmed"
        and booking.get("payment_status") != "paid"
    )


@router.get("/bookings/{booking_id}/confirmation")
async def confirmation(
    request: Request,
    booking_id: str,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    response, currencies = await asyncio.gather(
        services.booking.get(auth.access_token, booking_id),
        load_currencies(services),
    )
    booking = load_or_raise(response, "Booking", booking_id)
    return render(request, "website/confirmation.html", {
        "lang": lang, "booking": booking, "can_pay": can_pay(booking),
        "currencies": currencies,
    })


@router.post("/bookings/{booking_id}/cancel")
async def cancel_booking(
    request: Request,
    booking_id: str,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    response = await services.booking.cancel(auth.access_token, booking_id)
    if response.success:
        push_toast(request, ToastType.SUCCESS, "Booking cancelled")
    else:
        push_toast(request, ToastType.ERROR, get_error_message(response))
    return RedirectResponse(
        f"/{lang}/bookings/{booking_id}/confirmation", status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/bookings/{booking_id}/pay")
async def payment_page(
    request: Request,
    booking_id: str,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    response = await services.booking.get(auth.access_token, booking_id)
    booking = load_or_raise(response, "Booking", booking_id)
    if not can_pay(booking):
        return RedirectResponse(
            f"/{lang}/bookings/{booking_id}/confirmation", status_code=status.HTTP_302_FOUND,
        )
    return render(request, "website/pay.html", {"lang": lang, "booking": booking})


@router.post("/bookings/{booking_id}/pay")
async def initiate_payment(
    request: Request,
    booking_id: str,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    callback_url = str(request.url_for("payment_callback", lang=lang, booking_id=booking_id))
    response = await services.booking.initiate_payment(
        auth.access_token, booking_id, callback_url,
    )
    data = response.data if isinstance(response.data, dict) else {}
    payment_url = data.get("payment_url") or data.get("redirect_url")
    if response.success and payment_url:
        logger.info(f"Redirecting booking {booking_id} to BML payment page")
        return RedirectResponse(payment_url, status_code=status.HTTP_303_SEE_OTHER)
    push_toast(request, ToastType.ERROR, response.error_message or "Failed to start payment")
    return RedirectResponse(
        f"/{lang}/bookings/{booking_id}/pay", status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/bookings/{booking_id}/pay/callback", name="payment_callback")
async def payment_callback(
    request: Request,
    booking_id: str,
    transactionId: str | None = None,
    state: str | None = None,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    if not transactionId:
        return render(request, "website/pay_callback.html", {
            "lang": lang, "booking_id": booking_id, "outcome": None,
            "error_message": MISSING_TRANSACTION,
        }, status_code=status.HTTP_400_BAD_REQUEST)

    payment, booking = await asyncio.gather(
        services.booking.payment_status(auth.access_token, transactionId),
        services.booking.get(auth.access_token, booking_id),
    )
    payment_data = payment.data if isinstance(payment.data, dict) else {}
    outcome = classify_payment(payment_data.get("status"), state)
    logger.info(f"Payment callback for booking {booking_id}: {outcome.value}")
    return render(request, "website/pay_callback.html", {
        "lang": lang,
        "booking_id": booking_id,
        "booking": booking.data if booking.success else None,
        "payment": payment_data,
        "outcome": outcome,
        "outcomes": PaymentOutcome,
        "transaction_id": transactionId,
        "error_message": None if payment.success or outcome != PaymentOutcome.PROCESSING
        else get_error_message(payment),
    })
