"""Domain Types — client-side mirrors of the enums the external API owns.

Invariants:
    - Only values the UI branches on are mirrored here; the API stays the source of truth
    - str Enums: compare equal to the raw JSON strings the API returns
"""

from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class BookingStatus(str, Enum):
    """Vendor booking lifecycle as shown in the portal."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    REFUNDED = "refunded"


class BookingSourceType(str, Enum):
    PLATFORM = "platform"
    DIRECT = "direct"
    OTA = "ota"
    AGENT = "agent"
    PHONE = "phone"
    WALK_IN = "walk_in"


class BookingType(str, Enum):
    """Booking form presets: selects which fields the booking page renders."""
    STANDARD = "standard"
    DIGITAL_PRODUCT = "digital_product"
    ACCOMMODATION = "accommodation"
    TRANSFER = "transfer"
    TOUR = "tour"
    RENTAL = "rental"


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    SELECT = "select"
    CHECKBOX = "checkbox"
    TEXTAREA = "textarea"
    TEL = "tel"
    EMAIL = "email"


class ToastType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class PaymentOutcome(str, Enum):
    """Result shown on the payment callback page."""
    SUCCESS = "success"
    FAILED = "failed"
    PROCESSING = "processing"
