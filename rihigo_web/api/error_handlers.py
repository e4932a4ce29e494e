"""Error Handlers — global exception handlers for pages and JSON endpoints.

Invariants:
    - RihigoError with a redirect target → 302 to that target
    - RihigoError otherwise → error page, or JSON envelope under /api/*
    - RequestValidationError → 400 with field-level details
    - 404 → not-found page (admin-scoped under /admin)
    - Exception (catch-all) → 500, never leaks internal details

Design Decisions:
    - Four-layer handler: domain (RihigoError), validation (Pydantic), HTTP (Starlette),
      catch-all (Exception)
    - Extracted from main.py to keep the entry point free of handler bodies
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from rihigo_web.api.templating import render
from rihigo_web.core.errors import ErrorSeverity, RihigoError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_rihigo_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def wants_json(request: Request) -> bool:
    return request.url.path.startswith("/api/")


def _register_rihigo_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RihigoError)
    async def rihigo_error_handler(request: Request, exc: RihigoError) -> Response:
        """Handle all Rihigo domain errors."""
        log = logger.info if exc.severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING) else logger.error
        log(
            f"RihigoError: {exc.message}",
            extra={
                "error_code": exc.code, "path": request.url.path,
                "endpoint": exc.context.endpoint,
            },
        )
        if wants_json(request):
            return JSONResponse(status_code=exc.http_status, content=exc.to_response())
        if exc.redirect_to:
            return RedirectResponse(exc.redirect_to, status_code=status.HTTP_302_FOUND)
        template = "errors/404.html" if exc.http_status == 404 else "errors/error.html"
        return render(request, template, {
            "status_code": exc.http_status,
            "title": "Not found" if exc.http_status == 404 else "Something went wrong",
            "message": exc.context.user_message or exc.message,
            "admin_scope": request.url.path.startswith("/admin"),
        }, status_code=exc.http_status)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ) -> Response:
        """Handle Pydantic validation errors on path/query/body parameters."""
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        body = _build_validation_error_response(exc)
        if wants_json(request):
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)
        return render(request, "errors/error.html", {
            "status_code": 400,
            "title": "Invalid request",
            "message": "; ".join(
                f"{d['field']}: {d['message']}" for d in body["error"]["details"]
            ),
        }, status_code=status.HTTP_400_BAD_REQUEST)


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException,
    ) -> Response:
        if wants_json(request):
            return JSONResponse(
                status_code=exc.status_code,
                content={"success": False, "error_message": str(exc.detail)},
                headers=getattr(exc, "headers", None),
            )
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return render(request, "errors/404.html", {
                "status_code": 404,
                "title": "Page not found",
                "message": "The page you are looking for does not exist.",
                "admin_scope": request.url.path.startswith("/admin"),
            }, status_code=404)
        return render(request, "errors/error.html", {
            "status_code": exc.status_code,
            "title": "Request failed",
            "message": str(exc.detail),
        }, status_code=exc.status_code)


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> Response:
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True, extra={"path": request.url.path},
        )
        if wants_json(request):
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "success": False,
                    "error_message": "An unexpected error occurred",
                    "error": {
                        "code": "INTERNAL_ERROR",
                        "message": "An unexpected error occurred",
                        "category": "internal",
                        "severity": ErrorSeverity.CRITICAL.value,
                    },
                },
            )
        return render(request, "errors/error.html", {
            "status_code": 500,
            "title": "Something went wrong",
            "message": "An unexpected error occurred. Please try again later.",
        }, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "success": False,
        "error_message": "Invalid request data",
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
