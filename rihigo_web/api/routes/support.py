"""Support Routes — customer ticket list, new ticket, thread view and replies."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from rihigo_web.api.dependencies import Services, get_locale, get_services, push_toast, require_user
from rihigo_web.api.resources import load_or_raise
from rihigo_web.api.templating import render
from rihigo_web.core.api_response import field_errors, get_error_message
from rihigo_web.core.auth_session import AuthSession
from rihigo_web.core.domain_types import ToastType
from rihigo_web.schemas.forms import TicketForm, TicketMessageForm, form_errors

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/{lang}/support", tags=["support"])

TICKET_CATEGORIES = ("general", "booking", "payment", "refund", "technical", "other")


async def _ticket_list(request: Request, lang: str, auth: AuthSession, services: Services):
    response = await services.support.tickets.list(auth.access_token)
    return render(request, "website/support_list.html", {
        "lang": lang,
        "tickets": response.items("tickets"),
        "error_message": None if response.success else get_error_message(response),
    })


def _ticket_form(
    request: Request, lang: str, values: dict, errors: dict,
    error_message: str | None = None, status_code: int = 200,
):
    return render(request, "website/support_new.html", {
        "lang": lang, "values": values, "errors": errors,
        "categories": TICKET_CATEGORIES, "error_message": error_message,
    }, status_code=status_code)


@router.get("")
async def support_home(
    request: Request,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    return await _ticket_list(request, lang, auth, services)


@router.get("/tickets")
async def ticket_list(
    request: Request,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    return await _ticket_list(request, lang, auth, services)


@router.get("/new")
@router.get("/tickets/new")
async def new_ticket(
    request: Request,
    booking_id: str | None = None,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
):
    return _ticket_form(request, lang, {"booking_id": booking_id or ""}, {})


@router.post("/new")
@router.post("/tickets/new")
async def create_ticket(
    request: Request,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    form = dict(await request.form())
    try:
        data = TicketForm.model_validate(form)
    except ValidationError as exc:
        return _ticket_form(
            request, lang, form, form_errors(exc, TicketForm),
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    response = await services.support.tickets.create(auth.access_token, data.payload())
    ticket_id = response.data.get("id") if isinstance(response.data, dict) else None
    if not response.success or not ticket_id:
        return _ticket_form(
            request, lang, form, field_errors(response),
            response.error_message or "Failed to create ticket",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    push_toast(request, ToastType.SUCCESS, "Your ticket has been submitted")
    return RedirectResponse(
        f"/{lang}/support/tickets/{ticket_id}", status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/tickets/{ticket_id}")
async def ticket_detail(
    request: Request,
    ticket_id: str,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    response = await services.support.tickets.get(auth.access_token, ticket_id)
    ticket = load_or_raise(response, "Ticket", ticket_id)
    return render(request, "website/support_ticket.html", {
        "lang": lang, "ticket": ticket, "messages": ticket.get("messages") or [],
    })


@router.post("/tickets/{ticket_id}/messages")
async def reply(
    request: Request,
    ticket_id: str,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    try:
        data = TicketMessageForm.model_validate(dict(await request.form()))
    except ValidationError as exc:
        push_toast(request, ToastType.ERROR, "; ".join(form_errors(exc, TicketMessageForm).values()))
    else:
        response = await services.support.add_message(auth.access_token, ticket_id, data.message)
        if response.success:
            push_toast(request, ToastType.SUCCESS, "Message sent")
        else:
            push_toast(request, ToastType.ERROR, get_error_message(response))
    return RedirectResponse(
        f"/{lang}/support/tickets/{ticket_id}", status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/{ticket_number}")
async def ticket_by_number(
    request: Request,
    ticket_number: str,
    lang: str = Depends(get_locale),
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
):
    response = await services.support.get_by_number(auth.access_token, ticket_number)
    ticket = load_or_raise(response, "Ticket", ticket_number)
    return render(request, "website/support_ticket.html", {
        "lang": lang, "ticket": ticket, "messages": ticket.get("messages") or [],
    })
