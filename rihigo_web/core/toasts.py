"""Toast Queue — bounded list of flash notifications shown after a redirect.

Invariants:
    - Never holds more than MAX_TOASTS; adding beyond the limit drops the oldest
    - Ids are unique per toast
    - Serializable to plain dicts so the queue can live in the session cookie
"""

import secrets
import time
from dataclasses import asdict, dataclass, field
from typing import Any

from rihigo_web.core.domain_types import ToastType

MAX_TOASTS = 5
DEFAULT_DURATION_MS = 5000


def _toast_id() -> str:
    return f"toast-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


@dataclass
class Toast:
    type: ToastType
    message: str
    title: str | None = None
    duration: int = DEFAULT_DURATION_MS
    dismissible: bool = True
    id: str = field(default_factory=_toast_id)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Toast":
        return cls(
            type=ToastType(data.get("type", ToastType.INFO.value)),
            message=str(data.get("message", "")),
            title=data.get("title"),
            duration=int(data.get("duration", DEFAULT_DURATION_MS)),
            dismissible=bool(data.get("dismissible", True)),
            id=data.get("id") or _toast_id(),
        )


class ToastQueue:
    """Observable list with add/remove, backed by a list of dicts."""

    def __init__(self, stored: list[dict[str, Any]] | None = None):
        self._toasts: list[Toast] = []
        for raw in stored or []:
            try:
                self._toasts.append(Toast.from_dict(raw))
            except (ValueError, TypeError):
                continue
        self._toasts = self._toasts[-MAX_TOASTS:]

    def __len__(self) -> int:
        return len(self._toasts)

    def __iter__(self):
        return iter(list(self._toasts))

    def add(
        self,
        type: ToastType,
        message: str,
        title: str | None = None,
        duration: int = DEFAULT_DURATION_MS,
        dismissible: bool = True,
    ) -> str:
        toast = Toast(type, message, title, duration, dismissible)
        self._toasts = self._toasts[-(MAX_TOASTS - 1):] + [toast]
        return toast.id

    def remove(self, toast_id: str) -> None:
        self._toasts = [t for t in self._toasts if t.id != toast_id]

    def clear(self) -> None:
        self._toasts = []

    def success(self, message: str, title: str | None = None) -> str:
        return self.add(ToastType.SUCCESS, message, title)

    def error(self, message: str, title: str | None = None) -> str:
        return self.add(ToastType.ERROR, message, title)

    def warning(self, message: str, title: str | None = None) -> str:
        return self.add(ToastType.WARNING, message, title)

    def info(self, message: str, title: str | None = None) -> str:
        return self.add(ToastType.INFO, message, title)

    def pop_all(self) -> list[Toast]:
        toasts, self._toasts = self._toasts, []
        return toasts

    def to_list(self) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self._toasts]
