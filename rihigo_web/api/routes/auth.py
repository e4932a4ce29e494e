"""Auth Routes — Google sign-in, sign-out and the access-denied pages.

Invariants:
    - The OAuth state is single-use and must match the one stored in the session
    - A backend user-sync failure is logged and never blocks sign-in
    - Post-login redirects only go to same-site paths
"""

import logging
import secrets

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from rihigo_web.api.dependencies import (
    Services, get_auth_session, get_google_oauth, get_services,
    push_toast, store_auth_session,
)
from rihigo_web.api.templating import render
from rihigo_web.core.auth_session import AuthSession, SessionUser, safe_callback_url
from rihigo_web.core.domain_types import ToastType, UserRole
from rihigo_web.infrastructure.google_oauth import GoogleOAuthClient

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])

OAUTH_STATE_KEY = "oauth_state"
OAUTH_CALLBACK_KEY = "oauth_callback"
WELCOME_PATH = "/auth/welcome"


def _sign_in_page(request: Request, callback_url: str | None, auth: AuthSession | None):
    if auth is not None:
        return RedirectResponse(safe_callback_url(callback_url, "/"), status_code=status.HTTP_302_FOUND)
    return render(request, "auth/sign_in.html", {
        "callback_url": safe_callback_url(callback_url, ""),
        "error": request.query_params.get("error"),
    })


@router.get("/sign-in")
async def sign_in(
    request: Request, callbackUrl: str | None = None,
    auth: AuthSession | None = Depends(get_auth_session),
):
    return _sign_in_page(request, callbackUrl, auth)


@router.get("/login")
async def login(
    request: Request, callbackUrl: str | None = None,
    auth: AuthSession | None = Depends(get_auth_session),
):
    return _sign_in_page(request, callbackUrl, auth)


@router.get("/signup")
async def signup(
    request: Request, callbackUrl: str | None = None,
    auth: AuthSession | None = Depends(get_auth_session),
):
    return _sign_in_page(request, callbackUrl, auth)


@router.get("/google")
async def google_redirect(
    request: Request, callbackUrl: str | None = None,
    oauth: GoogleOAuthClient = Depends(get_google_oauth),
):
    state = secrets.token_urlsafe(24)
    request.session[OAUTH_STATE_KEY] = state
    request.session[OAUTH_CALLBACK_KEY] = safe_callback_url(callbackUrl, WELCOME_PATH)
    return RedirectResponse(oauth.authorize_url(state), status_code=status.HTTP_302_FOUND)


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    oauth: GoogleOAuthClient = Depends(get_google_oauth),
    services: Services = Depends(get_services),
):
    expected_state = request.session.pop(OAUTH_STATE_KEY, None)
    callback_url = request.session.pop(OAUTH_CALLBACK_KEY, WELCOME_PATH)

    if error or not code:
        logger.info(f"Google sign-in cancelled or failed: {error or 'missing code'}")
        return RedirectResponse("/auth/sign-in?error=OAuthCallback", status_code=status.HTTP_302_FOUND)
    if not expected_state or state != expected_state:
        logger.warning("Google sign-in state mismatch", extra={"path": request.url.path})
        return RedirectResponse("/auth/sign-in?error=OAuthState", status_code=status.HTTP_302_FOUND)

    tokens = await oauth.exchange_code(code)
    if tokens is None or not tokens.profile.get("email"):
        return RedirectResponse("/auth/sign-in?error=OAuthCallback", status_code=status.HTTP_302_FOUND)

    profile = tokens.profile
    user = SessionUser(
        id=None,
        email=profile["email"],
        name=profile.get("name"),
        image=profile.get("picture"),
    )

    synced = await services.account.ensure_backend_user(user.email, user.name, user.image)
    if synced.success and isinstance(synced.data, dict):
        user.id = str(synced.data.get("id")) if synced.data.get("id") else None
        user.role = synced.data.get("role") or UserRole.USER.value
        user.name = synced.data.get("name") or user.name
    else:
        logger.error(
            f"Backend user sync failed: {synced.error_message}",
            extra={"user_email": user.email},
        )

    store_auth_session(request, AuthSession(
        access_token=tokens.id_token,
        refresh_token=tokens.refresh_token,
        expires_at=tokens.expires_at,
        user=user,
    ))
    logger.info("User signed in", extra={"user_email": user.email})
    return RedirectResponse(callback_url, status_code=status.HTTP_302_FOUND)


@router.post("/sign-out")
async def sign_out(request: Request):
    store_auth_session(request, None)
    push_toast(request, ToastType.INFO, "You have been signed out")
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/unauthorized")
async def unauthorized(request: Request, auth: AuthSession | None = Depends(get_auth_session)):
    return render(request, "auth/unauthorized.html", status_code=status.HTTP_403_FORBIDDEN)


@router.get("/vendor-access-denied")
async def vendor_access_denied(
    request: Request, auth: AuthSession | None = Depends(get_auth_session),
):
    return render(request, "auth/vendor_access_denied.html", status_code=status.HTTP_403_FORBIDDEN)


@router.get("/welcome")
async def welcome(request: Request, auth: AuthSession | None = Depends(get_auth_session)):
    return render(request, "auth/welcome.html")
