"""Rihigo Web — FastAPI application entry point.

Invariants:
    - Routes registered explicitly, in precedence order: fixed prefixes (/api, /auth,
      /admin, /vendor) before the locale-prefixed website routes, and specialized
      portal pages before the generic resource routers
    - Global error handlers map RihigoError → redirect, error page or JSON envelope
    - The shared API client is opened and closed by the lifespan
    - Portal pages (/admin, /vendor) are never cached

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Signed cookie session (Starlette SessionMiddleware): the app keeps no
      server-side state of its own
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from rihigo_web.api.error_handlers import register_error_handlers
from rihigo_web.api.packages import build_package_router
from rihigo_web.api.routes import (
    account, admin, admin_resources, auth, booking, health, imuga, sitemap,
    support, vendor, vendor_resources, webhooks, website,
)
from rihigo_web.api.dependencies import require_admin, require_vendor
from rihigo_web.api.templating import TEMPLATES_DIR
from rihigo_web.config import get_settings
from rihigo_web.infrastructure.api_client import close_api_client, init_api_client
from rihigo_web.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)

STATIC_DIR = TEMPLATES_DIR.parent / "static"
PRIVATE_PREFIXES = ("/admin", "/vendor")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_api_client(settings.api_url, settings.api_timeout_seconds)
    logger.info("Rihigo web started", extra={"endpoint": settings.api_url})
    yield
    await close_api_client()
    logger.info("Rihigo web shutting down")


app = FastAPI(title="Rihigo Web", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    session_cookie=settings.session_cookie_name,
    max_age=settings.session_max_age_seconds,
    same_site="lax",
    https_only=settings.session_https_only,
)


@app.middleware("http")
async def portal_headers(request: Request, call_next):
    """Request logging, plus no-store on portal pages."""
    start = time.perf_counter()
    response = await call_next(request)
    path = request.url.path
    if path.startswith(PRIVATE_PREFIXES):
        response.headers["Cache-Control"] = "private, no-store"
    if not path.startswith("/static"):
        logger.info(
            f"{request.method} {path} {response.status_code}",
            extra={
                "method": request.method, "path": path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
    return response


# Routes: explicit registration, order matters (see Invariants)
app.include_router(health.router)
app.include_router(webhooks.router)
app.include_router(sitemap.router)
app.include_router(auth.router)

app.include_router(admin.router)
app.include_router(build_package_router(
    prefix="/admin", guard=require_admin, portal="admin",
    load_activity=lambda s, token, i: s.catalog.admin_activities.get(token, i),
    packages_for=lambda s, i: s.catalog.packages(i),
))
for resource_router in admin_resources.resource_routers():
    app.include_router(resource_router)
app.include_router(admin.fallback_router)

app.include_router(vendor.router)
app.include_router(build_package_router(
    prefix="/vendor", guard=require_vendor, portal="vendor",
    load_activity=lambda s, token, i: s.vendor.activities.get(token, i),
    packages_for=lambda s, i: s.vendor.packages(i),
))
for resource_router in vendor_resources.resource_routers():
    app.include_router(resource_router)

app.include_router(booking.router)
app.include_router(account.router)
app.include_router(support.router)
app.include_router(imuga.router)
app.include_router(website.router)

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

register_error_handlers(app)
