"""Form Validation — server-side equivalent of the HTML5 required/pattern/length rules.

Invariants:
    - Hidden (conditional) fields are never validated
    - Returns {field_name: message}; empty dict means valid
    - Empty optional fields skip every other rule
    - Pure functions: "today" is passed in, never read from the clock
    - With today given, a date field accepts exactly the days the booking calendar
      leaves enabled
"""

import re
from datetime import date
from typing import Any, Mapping

from rihigo_web.core.booking_fields import FieldDefinition, is_field_visible
from rihigo_web.core.calendar_grid import parse_iso_date
from rihigo_web.core.domain_types import FieldType

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_TRUTHY = {"on", "true", "1", "yes"}


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value or ""))


def coerce_values(
    fields: list[FieldDefinition], form: Mapping[str, Any],
) -> dict[str, Any]:
    """Raw form strings to typed values. Unparseable numbers stay as strings."""
    values: dict[str, Any] = {}
    for definition in fields:
        raw = form.get(definition.name)
        if definition.type == FieldType.CHECKBOX:
            values[definition.name] = _is_checked(raw)
        elif definition.type == FieldType.NUMBER:
            values[definition.name] = _to_number(raw)
        elif raw is None:
            values[definition.name] = definition.default_value or ""
        else:
            values[definition.name] = str(raw).strip()
    return values


def validate_fields(
    fields: list[FieldDefinition], values: Mapping[str, Any], today: date | None = None,
) -> dict[str, str]:
    errors: dict[str, str] = {}
    for definition in fields:
        if not is_field_visible(definition, dict(values)):
            continue
        message = validate_field(definition, values.get(definition.name), today)
        if message:
            errors[definition.name] = message
    return errors


def validate_field(
    definition: FieldDefinition, value: Any, today: date | None = None,
) -> str | None:
    label = definition.label
    if definition.type == FieldType.CHECKBOX:
        if definition.required and not _is_checked(value):
            return f"{label} is required"
        return None

    if _is_empty(value):
        return f"{label} is required" if definition.required else None

    rules = definition.validation

    if definition.type == FieldType.NUMBER:
        number = _to_number(value)
        if not isinstance(number, (int, float)):
            return f"{label} must be a number"
        if rules.min is not None and number < rules.min:
            return f"{label} must be at least {_fmt(rules.min)}"
        if rules.max is not None and number > rules.max:
            return f"{label} must be at most {_fmt(rules.max)}"
        return None

    text = str(value)

    if definition.type == FieldType.EMAIL and not is_valid_email(text):
        return f"{label} must be a valid email address"

    if definition.type == FieldType.DATE:
        day = parse_iso_date(text)
        if day is None:
            return f"{label} must be a valid date"
        lower = parse_iso_date(rules.min_date) or today
        upper = parse_iso_date(rules.max_date)
        if lower and day < lower:
            return f"{label} cannot be before {lower.isoformat()}"
        if upper and day > upper:
            return f"{label} cannot be after {upper.isoformat()}"
        return None

    if definition.type == FieldType.SELECT and definition.options:
        if text not in definition.options:
            return f"{label} must be one of the listed options"

    if rules.min_length is not None and len(text) < rules.min_length:
        return f"{label} must be at least {rules.min_length} characters"
    if rules.max_length is not None and len(text) > rules.max_length:
        return f"{label} must be at most {rules.max_length} characters"
    if rules.pattern and not re.fullmatch(rules.pattern, text):
        return f"{label} has an invalid format"
    return None


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _is_checked(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY if value is not None else False


def _to_number(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    if value is None or str(value).strip() == "":
        return None
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        try:
            return float(text)
        except ValueError:
            return text


def _fmt(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)
