"""Activity Packages — package list, create and delete pages shared by both portals.

Invariants:
    - Packages always belong to one activity; the activity is loaded first and a
      missing activity renders the not-found page
    - A package is priced in USD; other currencies are derived at render time
"""

import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends, Request

from rihigo_web.api.dependencies import Services, get_services, push_toast
from rihigo_web.api.resources import form_field, load_or_raise, parse_form, redirect
from rihigo_web.api.templating import render
from rihigo_web.core.api_response import ApiResponse, field_errors, get_error_message
from rihigo_web.core.auth_session import AuthSession
from rihigo_web.core.booking_fields import FieldValidation
from rihigo_web.core.catalog_view import active_packages, package_name, package_price
from rihigo_web.core.domain_types import FieldType, ToastType
from rihigo_web.services.resource_api import ResourceEndpoint

logger = logging.getLogger(__name__)

PACKAGE_FIELDS = (
    form_field("name_internal", "Internal name", required=True),
    form_field("name", "Display name"),
    form_field("description", "Description", FieldType.TEXTAREA),
    form_field(
        "price", "Price (USD)", FieldType.NUMBER, required=True,
        validation=FieldValidation(min=0),
    ),
    form_field("sort_order", "Sort order", FieldType.NUMBER, default_value=0),
    form_field("is_recommended", "Recommended", FieldType.CHECKBOX),
    form_field("is_active", "Active", FieldType.CHECKBOX, default_value=True),
)


def package_payload(values: dict[str, Any]) -> dict[str, Any]:
    """Form values to the API's package shape (prices as a currency list)."""
    body = {k: v for k, v in values.items() if k != "price"}
    body["prices"] = [{"currency_code": "USD", "amount": values["price"]}]
    return body


def build_package_router(
    *,
    prefix: str,
    guard: Callable[..., Any],
    portal: str,
    load_activity: Callable[[Services, str, str], Any],
    packages_for: Callable[[Services, str], ResourceEndpoint],
) -> APIRouter:
    """Routes under {prefix}/activities/{activity_id}/packages."""
    router = APIRouter(prefix=f"{prefix}/activities/{{activity_id}}/packages", tags=[f"{portal}-packages"])

    async def activity_or_404(services: Services, token: str, activity_id: str) -> dict:
        response: ApiResponse = await load_activity(services, token, activity_id)
        return load_or_raise(response, "Activity", activity_id)

    def base_path(activity_id: str) -> str:
        return f"{prefix}/activities/{activity_id}/packages"

    @router.get("")
    async def package_list(
        request: Request,
        activity_id: str,
        auth: AuthSession = Depends(guard),
        services: Services = Depends(get_services),
    ):
        activity = await activity_or_404(services, auth.access_token, activity_id)
        response = await packages_for(services, activity_id).list(auth.access_token)
        packages = response.items("packages") if response.success else active_packages(activity)
        return render(request, "portal/packages.html", {
            "portal": portal,
            "activity": activity,
            "packages": [
                {**p, "display_name": package_name(p, "en"), "usd_price": package_price(p)}
                for p in packages
            ],
            "base_path": base_path(activity_id),
            "fields": PACKAGE_FIELDS,
            "values": {f.name: f.default_value for f in PACKAGE_FIELDS if f.default_value is not None},
            "errors": {},
            "error_message": None if response.success else get_error_message(response),
        })

    @router.post("")
    async def create_package(
        request: Request,
        activity_id: str,
        auth: AuthSession = Depends(guard),
        services: Services = Depends(get_services),
    ):
        form = await request.form()
        values, errors = parse_form(PACKAGE_FIELDS, None, form)
        if errors:
            activity = await activity_or_404(services, auth.access_token, activity_id)
            return render(request, "portal/packages.html", {
                "portal": portal, "activity": activity, "packages": [],
                "base_path": base_path(activity_id), "fields": PACKAGE_FIELDS,
                "values": form, "errors": errors, "error_message": None,
            }, status_code=400)
        response = await packages_for(services, activity_id).create(
            auth.access_token, package_payload(values),
        )
        if response.success:
            push_toast(request, ToastType.SUCCESS, "Package created")
        else:
            for message in field_errors(response).values() or [get_error_message(response)]:
                push_toast(request, ToastType.ERROR, message)
        return redirect(base_path(activity_id))

    @router.post("/{package_id}/delete")
    async def delete_package(
        request: Request,
        activity_id: str,
        package_id: str,
        auth: AuthSession = Depends(guard),
        services: Services = Depends(get_services),
    ):
        response = await packages_for(services, activity_id).delete(auth.access_token, package_id)
        if response.success:
            push_toast(request, ToastType.SUCCESS, "Package deleted")
        else:
            push_toast(request, ToastType.ERROR, get_error_message(response))
        return redirect(base_path(activity_id))

    return router
