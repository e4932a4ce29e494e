"""API Response Envelope — normalized shape of every external API call.

Invariants:
    - Every call through the API client yields an ApiResponse, success or not
    - get_error_message() precedence: error_message, string errors, field errors,
      record errors, then a generic fallback
    - All functions are pure: no IO

Design Decisions:
    - Dataclass over pydantic model: the backend envelope is loosely typed
      (errors may be a list of strings, a dict, or a list of {field, message})
      and routes only need attribute access, not validation
"""

from dataclasses import dataclass
from typing import Any

UNKNOWN_ERROR = "An unknown error occurred"


@dataclass
class PaginationData:
    page: int = 1
    page_size: int = 20
    total_count: int = 0
    total_pages: int = 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @classmethod
    def from_payload(cls, payload: dict | None) -> "PaginationData | None":
        if not isinstance(payload, dict):
            return None
        return cls(
            page=_as_int(payload.get("page"), 1),
            page_size=_as_int(payload.get("page_size"), 20),
            total_count=_as_int(payload.get("total_count"), 0),
            total_pages=_as_int(payload.get("total_pages"), 0),
        )


@dataclass
class ApiResponse:
    """Mirror of the backend's {success, data, pagination_data, ...} envelope."""
    success: bool
    data: Any = None
    pagination_data: PaginationData | None = None
    error_message: str | None = None
    errors: Any = None
    message: str | None = None
    status_code: int | None = None

    @classmethod
    def ok(cls, data: Any = None, message: str | None = None) -> "ApiResponse":
        return cls(success=True, data=data, message=message)

    @classmethod
    def failure(
        cls, error_message: str, status_code: int | None = None, errors: Any = None,
    ) -> "ApiResponse":
        return cls(
            success=False, error_message=error_message,
            status_code=status_code, errors=errors,
        )

    @classmethod
    def from_payload(cls, payload: Any, status_code: int | None = None) -> "ApiResponse":
        """Wrap a decoded JSON body. Bodies without the envelope count as data."""
        if isinstance(payload, dict) and "success" in payload:
            return cls(
                success=bool(payload.get("success")),
                data=payload.get("data"),
                pagination_data=PaginationData.from_payload(
                    payload.get("pagination_data"),
                ),
                error_message=payload.get("error_message"),
                errors=payload.get("errors"),
                message=payload.get("message"),
                status_code=status_code,
            )
        return cls(success=True, data=payload, status_code=status_code)

    def items(self, key: str | None = None) -> list:
        """List payload, tolerating both bare lists and {key: [...]} wrappers."""
        data = self.data
        if isinstance(data, dict) and key:
            data = data.get(key)
        return data if isinstance(data, list) else []


def has_field_errors(response: ApiResponse) -> bool:
    errors = response.errors
    return (
        isinstance(errors, list) and len(errors) > 0
        and isinstance(errors[0], dict) and "field" in errors[0]
    )


def has_string_errors(response: ApiResponse) -> bool:
    errors = response.errors
    return isinstance(errors, list) and len(errors) > 0 and isinstance(errors[0], str)


def has_record_errors(response: ApiResponse) -> bool:
    return isinstance(response.errors, dict)


def get_error_message(response: ApiResponse) -> str:
    """Human-readable error for a failed response."""
    if response.error_message:
        return response.error_message
    if has_string_errors(response):
        return ", ".join(response.errors)
    if has_field_errors(response):
        return ", ".join(
            f"{e.get('field')}: {e.get('message')}" for e in response.errors
        )
    if has_record_errors(response):
        return ", ".join(
            f"{name}: {msg}" for name, msg in response.errors.items()
        )
    return UNKNOWN_ERROR


def field_errors(response: ApiResponse) -> dict[str, str]:
    """Per-field messages from the backend, for re-rendering a form."""
    if has_field_errors(response):
        return {
            str(e.get("field")): str(e.get("message", ""))
            for e in response.errors
        }
    if has_record_errors(response):
        return {str(k): str(v) for k, v in response.errors.items()}
    return {}


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
