"""Account Routes — profile and notifications for the signed-in customer."""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from rihigo_web.api.dependencies import (
    Services, get_locale, get_services, push_toast, require_user, store_auth_session,
)
from rihigo_web.api.routes.website import load_currencies
from rihigo_web.api.templating import render
from rihigo_web.core.api_response import field_errors, get_error_message
from rihigo_web.core.auth_session import AuthSession
from rihigo_web.core.domain_types import ToastType
from rihigo_web.schemas.forms import NotificationPreferencesForm, ProfileForm, form_errors

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/{lang}", tags=["account"])


async def _profile_page(
    request: Request, lang: str, auth: AuthSession, services: Services,
    values: dict | None = None, errors: dict | None = None,
    error_message: str | None = None, status_code: int = 200,
):
    me, notification_prefs, currencies = await asyncio.gather(
        services.account.me(auth.access_token),
        services.account.get_notification_preferences(auth.access_token),
        load_currencies(services),
    )
    profile = me.data if me.success and isinstance(me.data, dict) else {}
    preferences = profile.get("preferences") or {}
    return render(request, "website/profile.html", {
        "lang": lang,
        "profile": profile,
        "values": values if values is not None else {
            "name": profile.get("name") or auth.user.name or "",
            "phone": profile.get("phone") or "",
            "preferred_language": preferences.get("language") or lang,
            "preferred_currency": preferences.get("currency") or "",
        },
        "errors": errors or {},
        "notification_prefs": notification_prefs.data
        if notification_prefs.success and isinstance(notification_prefs.data, dict) else {},
        "currencies": currencies,
        "error_message": error_message or (None if me.success else get_error_message(me)),
    }, status_code=status_code)


@router.get("/profile")
async def profile(
    request: Request,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    return await _profile_page(request, lang, auth, services)


@router.post("/profile")
async def update_profile(
    request: Request,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    form = dict(await request.form())
    try:
        data = ProfileForm.model_validate(form)
    except ValidationError as exc:
        return await _profile_page(
            request, lang, auth, services, form, form_errors(exc, ProfileForm),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    response = await services.account.update_me(auth.access_token, data.payload())
    if not response.success:
        return await _profile_page(
            request, lang, auth, services, form, field_errors(response),
            get_error_message(response), status_code=status.HTTP_400_BAD_REQUEST,
        )
    auth.user.name = data.name
    store_auth_session(request, auth)
    push_toast(request, ToastType.SUCCESS, "Profile updated")
    return RedirectResponse(f"/{lang}/profile", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/profile/notifications")
async def update_notification_preferences(
    request: Request,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    form = dict(await request.form())
    try:
        data = NotificationPreferencesForm.model_validate(form)
    except ValidationError as exc:
        for message in form_errors(exc, NotificationPreferencesForm).values():
            push_toast(request, ToastType.ERROR, message)
        return RedirectResponse(f"/{lang}/profile", status_code=status.HTTP_303_SEE_OTHER)
    response = await services.account.update_notification_preferences(
        auth.access_token, data.payload(),
    )
    if response.success:
        push_toast(request, ToastType.SUCCESS, "Notification preferences saved")
    else:
        push_toast(request, ToastType.ERROR, get_error_message(response))
    return RedirectResponse(f"/{lang}/profile", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/notifications")
async def notifications(
    request: Request,
    page: int = 1,
    unread: bool = False,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    listing, count = await asyncio.gather(
        services.account.list_notifications(auth.access_token, max(1, page), unread_only=unread),
        services.account.unread_count(auth.access_token),
    )
    unread_count = count.data.get("count", 0) if isinstance(count.data, dict) else count.data
    return render(request, "website/notifications.html", {
        "lang": lang,
        "notifications": listing.items("notifications"),
        "pagination": listing.pagination_data,
        "unread_only": unread,
        "unread_count": unread_count or 0,
        "error_message": None if listing.success else get_error_message(listing),
    })


@router.post("/notifications/{notification_id}/read")
async def mark_read(
    request: Request,
    notification_id: str,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    response = await services.account.mark_read(auth.access_token, notification_id)
    if not response.success:
        push_toast(request, ToastType.ERROR, get_error_message(response))
    return RedirectResponse(f"/{lang}/notifications", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/notifications/read-all")
async def mark_all_read(
    request: Request,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    response = await services.account.mark_all_read(auth.access_token)
    if response.success:
        push_toast(request, ToastType.SUCCESS, "All notifications marked as read")
    else:
        push_toast(request, ToastType.ERROR, get_error_message(response))
    return RedirectResponse(f"/{lang}/notifications", status_code=status.HTTP_303_SEE_OTHER)
