"""IMUGA Routes — public immigration declaration request form and status lookup.

Invariants:
    - A request needs at least one traveler; malformed traveler JSON is rejected
      before the external API is called
    - Signed-in users submit with their token so the request is linked to their account
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError

from rihigo_web.api.dependencies import Services, get_auth_session, get_locale, get_services
from rihigo_web.api.resources import load_or_raise
from rihigo_web.api.templating import render
from rihigo_web.core.api_response import field_errors
from rihigo_web.core.auth_session import AuthSession
from rihigo_web.schemas.forms import ImugaRequestForm, form_errors

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/{lang}/imuga", tags=["imuga"])


def _form(
    request: Request, lang: str, values: dict, errors: dict,
    error_message: str | None = None, status_code: int = 200,
):
    return render(request, "website/imuga_form.html", {
        "lang": lang, "values": values, "errors": errors, "error_message": error_message,
    }, status_code=status_code)


@router.get("")
async def imuga_form(
    request: Request,
    lang: str = Depends(get_locale),
    auth: AuthSession | None = Depends(get_auth_session),
):
    values = {"travelers_json": "[]"}
    if auth is not None:
        values.update({"requester_name": auth.user.name or "", "requester_email": auth.user.email})
    return _form(request, lang, values, {})


@router.post("")
async def submit_imuga_request(
    request: Request,
    lang: str = Depends(get_locale),
    auth: AuthSession | None = Depends(get_auth_session),
    services: Services = Depends(get_services),
):
    form = dict(await request.form())
    try:
        data = ImugaRequestForm.model_validate(form)
        payload = data.payload()
    except ValidationError as exc:
        return _form(
            request, lang, form, form_errors(exc, ImugaRequestForm),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    except ValueError as exc:
        return _form(request, lang, form, {}, str(exc), status_code=status.HTTP_400_BAD_REQUEST)

    response = await services.imuga.create_request(
        payload, token=auth.access_token if auth else None,
    )
    request_number = response.data.get("request_number") if isinstance(response.data, dict) else None
    if not response.success or not request_number:
        return _form(
            request, lang, form, field_errors(response),
            response.error_message or "Failed to submit request",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    logger.info(f"IMUGA request submitted: {request_number}")
    return render(request, "website/imuga_submitted.html", {
        "lang": lang, "request_number": request_number, "email": data.requester_email,
    })


@router.get("/{request_number}")
async def imuga_status(
    request: Request,
    request_number: str,
    lang: str = Depends(get_locale),
    auth: AuthSession | None = Depends(get_auth_session),
    services: Services = Depends(get_services),
):
    response = await services.imuga.request_status(request_number)
    status_data = load_or_raise(response, "IMUGA request", request_number)
    return render(request, "website/imuga_status.html", {
        "lang": lang, "request_number": request_number, "status": status_data,
    })
