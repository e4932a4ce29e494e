"""Sitemap — /sitemap.xml built from static pages and published activities."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from rihigo_web.api.dependencies import Services, get_services
from rihigo_web.config import Settings, get_settings
from rihigo_web.core.sitemap import build_entries, build_sitemap_xml

logger = logging.getLogger(__name__)
router = APIRouter(tags=["sitemap"])

SITEMAP_PAGE_SIZE = 500


@router.get("/sitemap.xml")
async def sitemap(
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
):
    response = await services.catalog.list_activities(page=1, page_size=SITEMAP_PAGE_SIZE)
    activities = response.items("activities") if response.success else []
    if not response.success:
        logger.warning(f"Sitemap built without activities: {response.error_message}")
    entries = build_entries(settings.site_url, settings.supported_locales, activities)
    return Response(
        content=build_sitemap_xml(entries),
        media_type="application/xml",
        headers={"Cache-Control": "public, max-age=3600"},
    )
