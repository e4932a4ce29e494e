"""Website Routes — public catalog pages under /{lang}.

Invariants:
    - "/" redirects to the default locale; unsupported locale prefixes are 404
    - Catalog loaders never fail the page on a secondary call (categories, islands,
      currencies); they render with what loaded
    - A missing activity renders the not-found page
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse

from rihigo_web.api.dependencies import Services, get_auth_session, get_locale, get_services
from rihigo_web.api.resources import load_or_raise
from rihigo_web.api.templating import CURRENCY_COOKIE, render
from rihigo_web.config import Settings, get_settings
from rihigo_web.core.api_response import PaginationData, get_error_message
from rihigo_web.core.auth_session import AuthSession, safe_callback_url
from rihigo_web.core.catalog_view import (
    active_packages, activity_description, activity_images, activity_price,
    activity_title, narrow_islands, package_name, package_price, page_sections,
)
from rihigo_web.core.currency import CurrencyData, currencies_from_payload, resolve_currency
from rihigo_web.core.list_filters import filter_items

logger = logging.getLogger(__name__)
router = APIRouter(tags=["website"])

ACTIVITIES_PAGE_SIZE = 12
HOME_FAQ_COUNT = 6
STATIC_PAGES = {
    "about-us": "website/about_us.html",
    "privacy": "website/privacy.html",
    "terms": "website/terms.html",
}


async def load_currencies(services: Services) -> list[CurrencyData]:
    response = await services.catalog.list_currencies()
    return currencies_from_payload(response.data if response.success else None)


def catalog_helpers(lang: str) -> dict:
    """Display helpers handed to catalog templates."""
    return {
        "title_of": lambda a: activity_title(a, lang),
        "description_of": lambda a: activity_description(a, lang),
        "images_of": activity_images,
        "price_of": activity_price,
        "package_name": lambda p: package_name(p, lang),
        "package_price": package_price,
    }


@router.get("/")
async def root(settings: Settings = Depends(get_settings)):
    return RedirectResponse(f"/{settings.default_locale}/", status_code=status.HTTP_302_FOUND)


@router.post("/preferences/currency")
async def set_currency(
    request: Request,
    currency: str = Form(...),
    next_url: str = Form("/", alias="next"),
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    currencies = await load_currencies(services)
    target = safe_callback_url(next_url, "/")
    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    code = resolve_currency(currency, currencies, default="")
    if code:
        response.set_cookie(
            CURRENCY_COOKIE, code, max_age=365 * 24 * 3600, samesite="lax",
            secure=settings.session_https_only,
        )
    else:
        logger.info(f"Ignored unknown currency selection: {currency}")
    return response


@router.get("/{lang}/")
async def home(
    request: Request,
    lang: str = Depends(get_locale),
    auth: AuthSession | None = Depends(get_auth_session),
    services: Services = Depends(get_services),
):
    top, categories, faqs, currencies = await asyncio.gather(
        services.catalog.top_activities(lang),
        services.catalog.list_categories(),
        services.catalog.list_faqs(1, HOME_FAQ_COUNT),
        load_currencies(services),
    )
    return render(request, "website/home.html", {
        "lang": lang,
        "activities": top.items("activities"),
        "categories": categories.items("categories"),
        "faqs": faqs.items("faqs"),
        "currencies": currencies,
        "error_message": None if top.success else get_error_message(top),
        **catalog_helpers(lang),
    })


@router.get("/{lang}/activities")
async def activities(
    request: Request,
    q: str | None = None,
    category_id: str | None = None,
    atoll_code: str | None = None,
    island_id: str | None = None,
    page: int = 1,
    lang: str = Depends(get_locale),
    auth: AuthSession | None = Depends(get_auth_session),
    services: Services = Depends(get_services),
):
    filters = {
        "category_id": category_id, "atoll_code": atoll_code,
        "island_id": island_id, "search": q, "lang": lang,
    }
    listing, categories, atolls, islands, currencies = await asyncio.gather(
        services.catalog.list_activities(max(1, page), ACTIVITIES_PAGE_SIZE, filters),
        services.catalog.list_categories(),
        services.catalog.list_atolls(),
        services.catalog.list_islands(),
        load_currencies(services),
    )
    items = filter_items(
        listing.items("activities"), q,
        ("title", "slug", "seo_metadata.title", f"translations.{lang}.title"),
    )
    pagination = listing.pagination_data or PaginationData(
        page=1, page_size=ACTIVITIES_PAGE_SIZE, total_count=len(items), total_pages=1,
    )
    atoll_list = atolls.items("atolls")
    return render(request, "website/activities.html", {
        "lang": lang,
        "activities": items,
        "pagination": pagination,
        "categories": categories.items("categories"),
        "atolls": atoll_list,
        "islands": narrow_islands(islands.items("islands"), atoll_list, atoll_code),
        "selected": {
            "q": q or "", "category_id": category_id or "",
            "atoll_code": atoll_code or "", "island_id": island_id or "",
        },
        "has_active_filters": any((q, category_id, atoll_code, island_id)),
        "currencies": currencies,
        "error_message": None if listing.success else get_error_message(listing),
        **catalog_helpers(lang),
    })


@router.get("/{lang}/activities/{slug}")
async def activity_detail(
    request: Request,
    slug: str,
    lang: str = Depends(get_locale),
    auth: AuthSession | None = Depends(get_auth_session),
    services: Services = Depends(get_services),
):
    response, currencies = await asyncio.gather(
        services.catalog.get_activity_by_slug(slug, lang),
        load_currencies(services),
    )
    activity = load_or_raise(response, "Activity", slug)
    return render(request, "website/activity_detail.html", {
        "lang": lang,
        "activity": activity,
        "packages": active_packages(activity),
        "sections": page_sections(activity),
        "currencies": currencies,
        **catalog_helpers(lang),
    })


@router.get("/{lang}/faq")
async def faq(
    request: Request,
    q: str | None = None,
    lang: str = Depends(get_locale),
    auth: AuthSession | None = Depends(get_auth_session),
    services: Services = Depends(get_services),
):
    response = await services.catalog.list_faqs(1, 100)
    items = filter_items(response.items("faqs"), q, ("question", "answer", "category"))
    groups: dict[str, list[dict]] = {}
    for item in items:
        groups.setdefault(item.get("category") or "General", []).append(item)
    return render(request, "website/faq.html", {
        "lang": lang,
        "groups": groups,
        "q": q or "",
        "error_message": None if response.success else get_error_message(response),
    })


def _static_page(template: str):
    async def page(
        request: Request,
        lang: str = Depends(get_locale),
        auth: AuthSession | None = Depends(get_auth_session),
    ):
        return render(request, template, {"lang": lang})
    return page


for _path, _template in STATIC_PAGES.items():
    router.add_api_route(f"/{{lang}}/{_path}", _static_page(_template), methods=["GET"])
