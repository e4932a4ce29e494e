"""Templating — Jinja2 environment, filters and the page render helper.

Invariants:
    - Every page receives the same base context: user, toasts, locale, currency
    - Toasts are popped (rendered once) when a full page renders
    - Autoescaping is on for all .html templates
"""

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from jinja2 import Undefined

from rihigo_web.api.dependencies import pop_toasts
from rihigo_web.config import get_settings
from rihigo_web.core.booking_fields import control_for
from rihigo_web.core.calendar_grid import WEEKDAY_HEADERS, format_display_date, parse_iso_date
from rihigo_web.core.currency import DEFAULT_CURRENCIES, format_price, resolve_currency
from rihigo_web.core.list_filters import get_path
from rihigo_web.core.locale import LOCALE_NAMES, switch_locale_path
from rihigo_web.core.status_badges import badge_variant, status_label

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
CURRENCY_COOKIE = "preferred_currency"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _format_date(value: Any, fmt: str = "%b %d, %Y") -> str:
    day = parse_iso_date(value)
    return day.strftime(fmt) if day else ""


def _format_money(value: Any, currency: str = "USD") -> str:
    if value is None or isinstance(value, Undefined):
        return "-"
    try:
        return f"{currency} {float(value):,.2f}"
    except (TypeError, ValueError):
        return "-"


templates.env.filters.update({
    "badge_variant": badge_variant,
    "status_label": status_label,
    "display_date": format_display_date,
    "format_date": _format_date,
    "money": _format_money,
    "control_for": control_for,
    "get_path": get_path,
})


def current_currency(request: Request, currencies=DEFAULT_CURRENCIES) -> str:
    settings = get_settings()
    return resolve_currency(
        request.cookies.get(CURRENCY_COOKIE), currencies, settings.default_currency,
    )


def render(
    request: Request,
    name: str,
    context: dict[str, Any] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    settings = get_settings()
    ctx = dict(context or {})
    currencies = ctx.get("currencies") or list(DEFAULT_CURRENCIES)
    currency = current_currency(request, currencies)
    lang = ctx.get("lang") or request.path_params.get("lang") or settings.default_locale

    auth = getattr(request.state, "auth", None)
    ctx.setdefault("auth", auth)
    ctx.setdefault("user", auth.user if auth else None)
    ctx.setdefault("vendor", getattr(request.state, "vendor", None))
    ctx.update({
        "lang": lang,
        "locales": [(code, LOCALE_NAMES.get(code, code)) for code in settings.supported_locales],
        "locale_path": lambda target: switch_locale_path(
            request.url.path, target, settings.supported_locales,
        ),
        "currencies": currencies,
        "currency": currency,
        "price": lambda amount: format_price(amount, currency, currencies),
        "toasts": pop_toasts(request),
        "weekday_headers": WEEKDAY_HEADERS,
        "current_path": request.url.path,
    })
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)
