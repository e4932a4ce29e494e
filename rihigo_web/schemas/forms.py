"""Form Schemas — Pydantic models for the fixed (non-dynamic) HTML forms.

Invariants:
    - Empty inputs count as missing: "" never satisfies a required field
    - Strings are stripped before validation
    - form_errors() yields one message per field, in the "{Label} is required" style
      used by the dynamic booking form

Design Decisions:
    - Pydantic over hand-written checks: same library validates API payloads elsewhere
    - extra="ignore": HTML forms post buttons and CSRF-free hidden inputs we don't model
"""

import json
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, model_validator

from rihigo_web.core.form_validation import is_valid_email


class FormModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_empty_inputs(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: v for k, v in data.items()
                if not (isinstance(v, str) and v.strip() == "")
            }
        return data

    def payload(self) -> dict[str, Any]:
        """Body for the external API; unset optionals are omitted."""
        return self.model_dump(exclude_none=True)


def _check_email(value: str | None) -> str | None:
    if value is not None and not is_valid_email(value):
        raise ValueError("must be a valid email address")
    return value


Email = Annotated[str, AfterValidator(_check_email)]


# ─── Admin ──────────────────────────────────────────────────────

class VendorCreateForm(FormModel):
    business_name: str = Field(title="Business name", max_length=200)
    email: Email = Field(title="Email")
    phone: str | None = Field(None, title="Phone", max_length=40)
    address: str | None = Field(None, title="Address", max_length=500)


class VendorUpdateForm(VendorCreateForm):
    status: str | None = Field(None, title="Status")
    description: str | None = Field(None, title="Description", max_length=5000)


class CategoryForm(FormModel):
    id: str | None = Field(None, title="Slug", pattern=r"^[a-z0-9-]+$")
    name: str = Field(title="Name", max_length=120)
    icon: str | None = Field(None, title="Icon")
    description: str | None = Field(None, title="Description", max_length=2000)
    display_order: int = Field(0, title="Display order", ge=0)
    is_active: bool = Field(False, title="Active")


class FaqForm(FormModel):
    question: str = Field(title="Question", max_length=500)
    answer: str = Field(title="Answer", max_length=5000)
    category: str | None = Field(None, title="Category")
    display_order: int = Field(0, title="Display order", ge=0)
    is_published: bool = Field(False, title="Published")


class NotificationForm(FormModel):
    type: str = Field("system", title="Type")
    title: str = Field(title="Title", max_length=200)
    body: str = Field(title="Message", max_length=2000)
    priority: str = Field("normal", title="Priority")
    action_url: str | None = Field(None, title="Action URL")
    user_id: str | None = Field(None, title="User")
    user_ids: str | None = Field(None, title="User IDs")
    broadcast: bool = Field(False, title="Broadcast")

    @model_validator(mode="after")
    def require_recipient(self) -> "NotificationForm":
        if not self.broadcast and not self.user_id:
            raise ValueError("user_id: User is required unless broadcasting")
        return self

    def recipients(self) -> list[str] | None:
        if not self.user_ids:
            return None
        return [s.strip() for s in self.user_ids.split(",") if s.strip()] or None


# ─── Customer ───────────────────────────────────────────────────

class ProfileForm(FormModel):
    name: str = Field(title="Name", max_length=120)
    phone: str | None = Field(None, title="Phone", max_length=40)
    preferred_language: str | None = Field(None, title="Language")
    preferred_currency: str | None = Field(None, title="Currency")

    def payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {"name": self.name}
        if self.phone:
            body["phone"] = self.phone
        preferences = {
            k: v for k, v in (
                ("language", self.preferred_language),
                ("currency", self.preferred_currency),
            ) if v
        }
        if preferences:
            body["preferences"] = preferences
        return body


class NotificationPreferencesForm(FormModel):
    email_enabled: bool = Field(False, title="Email")
    sms_enabled: bool = Field(False, title="SMS")
    quiet_hours_enabled: bool = Field(False, title="Quiet hours")
    quiet_hours_start: str = Field("22:00", title="Quiet hours start", pattern=r"^\d{2}:\d{2}$")
    quiet_hours_end: str = Field("08:00", title="Quiet hours end", pattern=r"^\d{2}:\d{2}$")

    def payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "email_enabled": self.email_enabled,
            "sms_enabled": self.sms_enabled,
            "quiet_hours_start": None,
            "quiet_hours_end": None,
        }
        if self.quiet_hours_enabled:
            body["quiet_hours_start"] = self.quiet_hours_start
            body["quiet_hours_end"] = self.quiet_hours_end
        return body


class TicketForm(FormModel):
    subject: str = Field(title="Subject", min_length=3, max_length=200)
    message: str = Field(title="Message", min_length=10, max_length=5000)
    category: str = Field("general", title="Category")
    priority: str = Field("normal", title="Priority")
    booking_id: str | None = Field(None, title="Booking")


class TicketMessageForm(FormModel):
    message: str = Field(title="Message", max_length=5000)


class ImugaRequestForm(FormModel):
    requester_name: str = Field(title="Your name")
    requester_email: Email = Field(title="Email")
    requester_phone: str | None = Field(None, title="Phone")
    group_name: str | None = Field(None, title="Group name")
    accommodation_name: str = Field(title="Accommodation")
    accommodation_island: str | None = Field(None, title="Island")
    accommodation_atoll: str | None = Field(None, title="Atoll")
    arrival_date: str = Field(title="Arrival date", pattern=r"^\d{4}-\d{2}-\d{2}$")
    departure_date: str = Field(title="Departure date", pattern=r"^\d{4}-\d{2}-\d{2}$")
    arrival_flight: str = Field(title="Arrival flight")
    departure_flight: str | None = Field(None, title="Departure flight")
    notes: str | None = Field(None, title="Notes", max_length=2000)
    travelers_json: str = Field("[]", title="Travelers")

    def travelers(self) -> list[dict]:
        """Parsed traveler list; raises ValueError with the message shown to the user."""
        try:
            travelers = json.loads(self.travelers_json)
        except ValueError:
            raise ValueError("Invalid traveler data")
        if not isinstance(travelers, list) or not all(isinstance(t, dict) for t in travelers):
            raise ValueError("Invalid traveler data")
        if not travelers:
            raise ValueError("At least one traveler is required")
        return travelers

    def payload(self) -> dict[str, Any]:
        body = self.model_dump(exclude_none=True, exclude={"travelers_json"})
        body["travelers_data"] = self.travelers()
        return body


# ─── Vendor ─────────────────────────────────────────────────────

class StaffForm(FormModel):
    name: str = Field(title="Name", max_length=120)
    email: Email = Field(title="Email")
    phone: str | None = Field(None, title="Phone")
    role: str = Field("staff", title="Role")
    is_active: bool = Field(False, title="Active")


class GuestForm(FormModel):
    first_name: str = Field(title="First name", max_length=80)
    last_name: str = Field(title="Last name", max_length=80)
    email: Email | None = Field(None, title="Email")
    phone: str | None = Field(None, title="Phone")
    nationality: str | None = Field(None, title="Nationality")
    passport_number: str | None = Field(None, title="Passport number")
    notes: str | None = Field(None, title="Notes", max_length=2000)


# ─── Errors ─────────────────────────────────────────────────────

def form_errors(exc: ValidationError, model: type[BaseModel] | None = None) -> dict[str, str]:
    """Map a ValidationError to {field: message} for re-rendering the form."""
    errors: dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        if loc:
            name = str(loc[0])
        elif ": " in message:
            # model-level validators name the field in the message ("field: text")
            name, message = message.split(": ", 1)
        else:
            name = "__all__"
        if name in errors:
            continue
        label = _label(model, name)
        error_type = error.get("type")
        ctx = error.get("ctx") or {}
        if error_type == "missing":
            errors[name] = f"{label} is required"
        elif error_type == "string_too_short" and ctx.get("min_length") == 1:
            errors[name] = f"{label} is required"
        elif error_type == "string_too_short":
            errors[name] = f"{label} must be at least {ctx.get('min_length')} characters"
        elif error_type == "string_too_long":
            errors[name] = f"{label} must be at most {ctx.get('max_length')} characters"
        elif error_type == "string_pattern_mismatch":
            errors[name] = f"{label} has an invalid format"
        elif name == "__all__":
            errors[name] = message
        else:
            errors[name] = f"{label} {message}" if message[:1].islower() else message
    return errors


def _label(model: type[BaseModel] | None, name: str) -> str:
    if model is not None:
        info = model.model_fields.get(name)
        if info is not None and info.title:
            return info.title
    return name.replace("_", " ").capitalize()
