"""Error Hierarchy — typed, categorized exceptions for every failure a page can hit.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Redirect errors carry a target location instead of rendering a page
    - to_response() produces the JSON envelope used on /api/* paths
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with RihigoError base: one global handler catches all
    - Only two failure families exist in this app: the external API request failed,
      or local validation failed. Everything else is a redirect.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from urllib.parse import quote


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logs and error pages."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    path: str | None = None
    endpoint: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class RihigoError(Exception):
    """Base exception for all Rihigo web errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def redirect_to(self) -> str | None:
        """Location to redirect to instead of rendering an error page."""
        return None

    def to_response(self) -> dict:
        """Convert to standardized JSON error response."""
        return {
            "success": False,
            "error_message": self.context.user_message or self.message,
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            },
        }


# ─── Redirects (302) ────────────────────────────────────────────

class AuthenticationRequiredError(RihigoError):
    """No valid session: send the visitor to sign in, then back."""
    def __init__(self, callback_url: str = "/", context: ErrorContext | None = None):
        super().__init__(
            "Authentication required", "AUTHENTICATION_REQUIRED",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.INFO, context, 401,
        )
        self.callback_url = callback_url

    @property
    def redirect_to(self) -> str:
        return f"/auth/sign-in?callbackUrl={quote(self.callback_url, safe='')}"


class AccessDeniedError(RihigoError):
    """Signed in, but the role does not grant access to this area."""
    def __init__(
        self, required_role: str, redirect_to: str = "/",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{required_role} access required", "ACCESS_DENIED",
            ErrorCategory.AUTHORIZATION, ErrorSeverity.WARNING, context, 403,
        )
        self.required_role = required_role
        self._redirect_to = redirect_to

    @property
    def redirect_to(self) -> str:
        return self._redirect_to


# ─── Page errors ────────────────────────────────────────────────

class ResourceNotFoundError(RihigoError):
    """Requested resource does not exist in the external API."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class BackendApiError(RihigoError):
    """The external API failed and the page cannot render without its data."""
    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.endpoint = endpoint
        super().__init__(
            message, "BACKEND_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 502,
        )
