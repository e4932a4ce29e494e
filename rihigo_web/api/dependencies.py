"""Request Dependencies — services, session state and access guards.

Invariants:
    - get_auth_session never raises; a missing/invalid/expired session is None
    - An expired session is refreshed once; a failed refresh is persisted as an error
      and treated as signed out
    - Guards raise redirect errors (handled globally), never return None

Design Decisions:
    - Guards as FastAPI dependencies over middleware: each router declares its own
      access level and tests override get_auth_session directly
"""

import logging
import time
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from rihigo_web.config import Settings, get_settings
from rihigo_web.core.auth_session import REFRESH_ERROR, AuthSession
from rihigo_web.core.errors import AccessDeniedError, AuthenticationRequiredError
from rihigo_web.core.locale import resolve_locale
from rihigo_web.core.toasts import ToastQueue
from rihigo_web.core.domain_types import ToastType
from rihigo_web.infrastructure.api_client import BackendApiClient, get_api_client
from rihigo_web.infrastructure.google_oauth import GoogleOAuthClient
from rihigo_web.services.account_api import AccountApi
from rihigo_web.services.admin_api import AdminApi
from rihigo_web.services.booking_api import BookingApi
from rihigo_web.services.catalog_api import CatalogApi
from rihigo_web.services.imuga_api import ImugaApi
from rihigo_web.services.support_api import SupportApi
from rihigo_web.services.vendor_api import VendorApi

logger = logging.getLogger(__name__)

SESSION_AUTH_KEY = "auth"
SESSION_TOASTS_KEY = "toasts"
VENDOR_DENIED_PATH = "/auth/vendor-access-denied"


@dataclass
class Services:
    catalog: CatalogApi
    account: AccountApi
    booking: BookingApi
    support: SupportApi
    imuga: ImugaApi
    vendor: VendorApi
    admin: AdminApi


def get_services(client: BackendApiClient = Depends(get_api_client)) -> Services:
    return Services(
        catalog=CatalogApi(client),
        account=AccountApi(client),
        booking=BookingApi(client),
        support=SupportApi(client),
        imuga=ImugaApi(client),
        vendor=VendorApi(client),
        admin=AdminApi(client),
    )


def get_google_oauth(
    settings: Settings = Depends(get_settings),
    client: BackendApiClient = Depends(get_api_client),
) -> GoogleOAuthClient:
    return GoogleOAuthClient(
        settings.google_client_id,
        settings.google_client_secret,
        settings.google_redirect_uri,
        http_client=client.http,
    )


# ─── Session ────────────────────────────────────────────────────

def store_auth_session(request: Request, auth: AuthSession | None) -> None:
    if auth is None:
        request.session.pop(SESSION_AUTH_KEY, None)
    else:
        request.session[SESSION_AUTH_KEY] = auth.to_dict()


async def get_auth_session(
    request: Request, oauth: GoogleOAuthClient = Depends(get_google_oauth),
) -> AuthSession | None:
    auth = AuthSession.from_dict(request.session.get(SESSION_AUTH_KEY))
    if auth is not None and auth.is_valid and auth.is_expired(time.time()):
        auth = await _refresh(request, auth, oauth)
    if auth is not None and not auth.is_valid:
        auth = None
    request.state.auth = auth
    return auth


async def _refresh(
    request: Request, auth: AuthSession, oauth: GoogleOAuthClient,
) -> AuthSession:
    tokens = await oauth.refresh(auth.refresh_token) if auth.refresh_token else None
    if tokens is None:
        logger.warning(
            "Session token refresh failed", extra={"user_email": auth.user.email},
        )
        auth.error = REFRESH_ERROR
    else:
        auth.access_token = tokens.id_token
        auth.refresh_token = tokens.refresh_token
        auth.expires_at = tokens.expires_at
        auth.error = None
    store_auth_session(request, auth)
    return auth


def _callback_for(request: Request) -> str:
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


# ─── Guards ─────────────────────────────────────────────────────

def require_user(
    request: Request, auth: AuthSession | None = Depends(get_auth_session),
) -> AuthSession:
    if auth is None:
        raise AuthenticationRequiredError(_callback_for(request))
    return auth


def require_admin(auth: AuthSession = Depends(require_user)) -> AuthSession:
    if not auth.user.is_admin:
        raise AccessDeniedError("admin", redirect_to="/")
    return auth


async def require_vendor(
    request: Request,
    auth: AuthSession = Depends(require_user),
    services: Services = Depends(get_services),
) -> AuthSession:
    """Signed in and linked to a vendor account (the profile call succeeds)."""
    profile = await services.vendor.profile(auth.access_token)
    if not profile.success or not profile.data:
        logger.info(
            "Vendor access denied", extra={"user_email": auth.user.email, "path": request.url.path},
        )
        raise AccessDeniedError("vendor", redirect_to=VENDOR_DENIED_PATH)
    auth.vendor = profile.data
    request.state.vendor = profile.data
    return auth


# ─── Locale ─────────────────────────────────────────────────────

def get_locale(lang: str, settings: Settings = Depends(get_settings)) -> str:
    locale = resolve_locale(lang, settings.supported_locales)
    if locale is None:
        raise HTTPException(status_code=404)
    return locale


# ─── Toasts ─────────────────────────────────────────────────────

def push_toast(request: Request, type: ToastType, message: str, title: str | None = None) -> None:
    """Queue a toast for the next rendered page (POST/redirect/GET)."""
    queue = ToastQueue(request.session.get(SESSION_TOASTS_KEY))
    queue.add(type, message, title)
    request.session[SESSION_TOASTS_KEY] = queue.to_list()


def pop_toasts(request: Request) -> list:
    if "session" not in request.scope:
        return []
    queue = ToastQueue(request.session.pop(SESSION_TOASTS_KEY, None))
    return queue.pop_all()
