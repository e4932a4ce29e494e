"""Booking Fields — dynamic booking-form definitions per booking type.

Invariants:
    - get_fields_for_config() never returns two fields with the same name
    - Hidden fields are never returned, even if listed as required
    - Optional standard fields are always returned with required=False
    - Custom fields are appended after standard fields, in declaration order
    - STANDARD_FIELDS entries are never mutated (copies are returned)

Design Decisions:
    - Dataclasses over dicts: templates and the validator share one field shape
    - Activity-level overrides arrive as JSON from the API and are parsed with
      config_from_payload(); unknown keys are ignored
"""

import re
from dataclasses import dataclass, field, replace
from typing import Any

from rihigo_web.core.domain_types import BookingType, FieldType


@dataclass(frozen=True)
class FieldValidation:
    min: float | None = None
    max: float | None = None
    pattern: str | None = None
    min_length: int | None = None
    max_length: int | None = None
    min_date: str | None = None
    max_date: str | None = None


@dataclass(frozen=True)
class ConditionalDisplay:
    field: str
    value: Any
    operator: str = "equals"


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    type: FieldType
    label: str
    required: bool = False
    placeholder: str | None = None
    options: tuple[str, ...] = ()
    validation: FieldValidation = field(default_factory=FieldValidation)
    conditional: ConditionalDisplay | None = None
    default_value: Any = None
    help_text: str | None = None
    grid_columns: int = 1

    @property
    def grid_class(self) -> str:
        return "md:col-span-1" if self.grid_columns == 2 else "md:col-span-2"


@dataclass(frozen=True)
class FieldGroup:
    title: str
    fields: tuple[str, ...]
    description: str | None = None
    collapsible: bool = False
    default_collapsed: bool = False


@dataclass(frozen=True)
class BookingFieldConfig:
    required_fields: tuple[str, ...] | None = None
    optional_fields: tuple[str, ...] | None = None
    hide_fields: tuple[str, ...] = ()
    rename_fields: dict[str, str] = field(default_factory=dict)
    custom_fields: tuple[FieldDefinition, ...] = ()
    field_order: tuple[str, ...] | None = None
    field_groups: tuple[FieldGroup, ...] | None = None


STANDARD_FIELDS: dict[str, FieldDefinition] = {
    "booking_date": FieldDefinition(
        "booking_date", FieldType.DATE, "Select Date", required=True,
    ),
    "check_in_date": FieldDefinition(
        "check_in_date", FieldType.DATE, "Check-in Date", required=True, grid_columns=2,
    ),
    "check_out_date": FieldDefinition(
        "check_out_date", FieldType.DATE, "Check-out Date", required=True, grid_columns=2,
    ),
    "number_of_people": FieldDefinition(
        "number_of_people", FieldType.NUMBER, "Number of People", required=True,
        validation=FieldValidation(min=1),
    ),
    "full_name": FieldDefinition(
        "full_name", FieldType.TEXT, "Full Name", required=True, grid_columns=2,
    ),
    "email": FieldDefinition(
        "email", FieldType.EMAIL, "Email Address", required=True, grid_columns=2,
    ),
    "phone": FieldDefinition(
        "phone", FieldType.TEL, "Phone Number", required=True,
        placeholder="+1234567890", grid_columns=2,
    ),
    "nationality": FieldDefinition(
        "nationality", FieldType.TEXT, "Nationality", grid_columns=2,
    ),
    "special_requests": FieldDefinition(
        "special_requests", FieldType.TEXTAREA, "Special Requests",
        placeholder="Any dietary restrictions, accessibility needs, etc.",
    ),
    "notes": FieldDefinition("notes", FieldType.TEXTAREA, "Additional Notes"),
}


BOOKING_TYPE_PRESETS: dict[BookingType, BookingFieldConfig] = {
    BookingType.STANDARD: BookingFieldConfig(
        required_fields=("booking_date", "number_of_people", "full_name", "email", "phone"),
        optional_fields=("nationality", "special_requests"),
        field_groups=(
            FieldGroup("Booking Details", ("booking_date", "number_of_people")),
            FieldGroup("Guest Information", ("full_name", "email", "phone", "nationality")),
            FieldGroup("Additional Information", ("special_requests",)),
        ),
    ),
    BookingType.DIGITAL_PRODUCT: BookingFieldConfig(
        required_fields=("email", "phone"),
        hide_fields=("booking_date", "number_of_people"),
        custom_fields=(
            FieldDefinition(
                "delivery_email", FieldType.EMAIL, "Delivery Email (if different)",
            ),
        ),
        field_groups=(
            FieldGroup("Contact Information", ("email", "phone", "delivery_email")),
        ),
    ),
    BookingType.ACCOMMODATION: BookingFieldConfig(
        required_fields=(
            "check_in_date", "check_out_date", "number_of_people",
            "full_name", "email", "phone",
        ),
        hide_fields=("booking_date",),
        optional_fields=("special_requests",),
        field_groups=(
            FieldGroup("Stay Details", ("check_in_date", "check_out_date", "number_of_people")),
            FieldGroup("Guest Information", ("full_name", "email", "phone")),
            FieldGroup("Special Requests", ("special_requests",)),
        ),
    ),
    BookingType.TRANSFER: BookingFieldConfig(
        required_fields=("booking_date", "number_of_people", "full_name", "email", "phone"),
        custom_fields=(
            FieldDefinition(
                "pickup_location", FieldType.TEXT, "Pickup Location", required=True,
                placeholder="Hotel name or address", grid_columns=2,
            ),
            FieldDefinition(
                "dropoff_location", FieldType.TEXT, "Drop-off Location", required=True,
                placeholder="Destination", grid_columns=2,
            ),
            FieldDefinition(
                "pickup_time", FieldType.TIME, "Preferred Pickup Time", required=True,
                grid_columns=2,
            ),
            FieldDefinition(
                "luggage_count", FieldType.NUMBER, "Number of Luggage Pieces",
                validation=FieldValidation(min=0, max=20), grid_columns=2,
            ),
        ),
        field_groups=(
            FieldGroup(
                "Transfer Details",
                ("booking_date", "pickup_time", "pickup_location", "dropoff_location"),
            ),
            FieldGroup(
                "Passenger Information",
                ("number_of_people", "luggage_count", "full_name", "email", "phone"),
            ),
        ),
    ),
    BookingType.TOUR: BookingFieldConfig(
        required_fields=("booking_date", "number_of_people", "full_name", "email", "phone"),
        optional_fields=("special_requests",),
        custom_fields=(
            FieldDefinition("pickup_required", FieldType.CHECKBOX, "Require hotel pickup?"),
            FieldDefinition(
                "hotel_name", FieldType.TEXT, "Hotel Name", placeholder="Your hotel name",
                conditional=ConditionalDisplay("pickup_required", True),
            ),
        ),
        field_groups=(
            FieldGroup("Tour Details", ("booking_date", "number_of_people")),
            FieldGroup("Guest Information", ("full_name", "email", "phone")),
            FieldGroup("Pickup Information", ("pickup_required", "hotel_name")),
            FieldGroup("Additional Information", ("special_requests",)),
        ),
    ),
    BookingType.RENTAL: BookingFieldConfig(
        required_fields=("booking_date", "full_name", "email", "phone"),
        custom_fields=(
            FieldDefinition(
                "rental_duration", FieldType.NUMBER, "Rental Duration (hours)",
                required=True, validation=FieldValidation(min=1, max=72), grid_columns=2,
            ),
            FieldDefinition(
                "return_date", FieldType.DATETIME, "Expected Return Date & Time",
                required=True, grid_columns=2,
            ),
        ),
        field_groups=(
            FieldGroup("Rental Details", ("booking_date", "rental_duration", "return_date")),
            FieldGroup("Renter Information", ("full_name", "email", "phone")),
        ),
    ),
}


# --- Config composition -------------------------------------------------------

def merge_booking_configs(
    base: BookingFieldConfig, custom: BookingFieldConfig | None = None,
) -> BookingFieldConfig:
    """Layer an activity's overrides on top of a preset."""
    if custom is None:
        return base
    return BookingFieldConfig(
        required_fields=_first_set(custom.required_fields, base.required_fields),
        optional_fields=_first_set(custom.optional_fields, base.optional_fields),
        hide_fields=base.hide_fields + custom.hide_fields,
        rename_fields={**base.rename_fields, **custom.rename_fields},
        custom_fields=base.custom_fields + custom.custom_fields,
        field_order=_first_set(custom.field_order, base.field_order),
        field_groups=_first_set(custom.field_groups, base.field_groups),
    )


def get_fields_for_config(config: BookingFieldConfig) -> list[FieldDefinition]:
    fields: list[FieldDefinition] = []
    seen: set[str] = set()

    for name in config.required_fields or ():
        if name in config.hide_fields or name not in STANDARD_FIELDS:
            continue
        fields.append(_renamed(STANDARD_FIELDS[name], config))
        seen.add(name)

    for name in config.optional_fields or ():
        if name in config.hide_fields or name not in STANDARD_FIELDS or name in seen:
            continue
        fields.append(replace(_renamed(STANDARD_FIELDS[name], config), required=False))
        seen.add(name)

    for custom in config.custom_fields:
        if custom.name in seen:
            continue
        fields.append(custom)
        seen.add(custom.name)

    if config.field_order:
        order = {name: i for i, name in enumerate(config.field_order)}
        fields.sort(key=lambda f: order.get(f.name, len(order)))
    return fields


def fields_for_activity(activity: dict) -> tuple[BookingFieldConfig, list[FieldDefinition]]:
    """Resolve the booking form for an activity payload from the API."""
    try:
        booking_type = BookingType(activity.get("booking_type") or BookingType.STANDARD)
    except ValueError:
        booking_type = BookingType.STANDARD
    config = merge_booking_configs(
        BOOKING_TYPE_PRESETS[booking_type],
        config_from_payload(activity.get("booking_field_config")),
    )
    return config, get_fields_for_config(config)


# --- Display ------------------------------------------------------------------

def is_field_visible(definition: FieldDefinition, values: dict[str, Any] | None) -> bool:
    cond = definition.conditional
    if cond is None or values is None:
        return True
    actual = values.get(cond.field)
    expected = cond.value
    if cond.operator == "not_equals":
        return actual != expected
    if cond.operator == "contains":
        return actual is not None and str(expected) in str(actual)
    if cond.operator in ("greater_than", "less_than"):
        try:
            left, right = float(actual), float(expected)
        except (TypeError, ValueError):
            return False
        return left > right if cond.operator == "greater_than" else left < right
    return actual == expected


def group_fields(
    config: BookingFieldConfig, fields: list[FieldDefinition],
) -> list[tuple[FieldGroup, list[FieldDefinition]]]:
    """Fields arranged under their groups; leftovers go to a trailing "Other" group."""
    by_name = {f.name: f for f in fields}
    placed: set[str] = set()
    grouped: list[tuple[FieldGroup, list[FieldDefinition]]] = []
    for group in config.field_groups or ():
        members = [by_name[n] for n in group.fields if n in by_name and n not in placed]
        if members:
            grouped.append((group, members))
            placed.update(f.name for f in members)
    leftovers = [f for f in fields if f.name not in placed]
    if leftovers:
        title = "Other" if grouped else "Booking Details"
        grouped.append((FieldGroup(title, tuple(f.name for f in leftovers)), leftovers))
    return grouped


_CONTROLS: dict[FieldType, str] = {
    FieldType.TEXT: "input",
    FieldType.EMAIL: "input",
    FieldType.TEL: "input",
    FieldType.NUMBER: "number",
    FieldType.DATE: "calendar",
    FieldType.TIME: "time",
    FieldType.DATETIME: "datetime-local",
    FieldType.SELECT: "select",
    FieldType.CHECKBOX: "checkbox",
    FieldType.TEXTAREA: "textarea",
}


def control_for(definition: FieldDefinition) -> str | None:
    """Template macro name for a field type; None renders nothing."""
    return _CONTROLS.get(definition.type)


# --- Payload parsing ----------------------------------------------------------

def config_from_payload(payload: dict | None) -> BookingFieldConfig | None:
    """Parse a booking_field_config JSON object from the API."""
    if not isinstance(payload, dict):
        return None
    groups = payload.get("field_groups")
    return BookingFieldConfig(
        required_fields=_tuple_or_none(payload.get("required_fields")),
        optional_fields=_tuple_or_none(payload.get("optional_fields")),
        hide_fields=tuple(payload.get("hide_fields") or ()),
        rename_fields=dict(payload.get("rename_fields") or {}),
        custom_fields=tuple(
            f for f in (field_from_payload(raw) for raw in payload.get("custom_fields") or ())
            if f is not None
        ),
        field_order=_tuple_or_none(payload.get("field_order")),
        field_groups=tuple(
            FieldGroup(
                title=g.get("title", ""),
                fields=tuple(g.get("fields") or ()),
                description=g.get("description"),
                collapsible=bool(g.get("collapsible", False)),
                default_collapsed=bool(g.get("defaultCollapsed", g.get("default_collapsed", False))),
            )
            for g in groups if isinstance(g, dict)
        ) if isinstance(groups, list) else None,
    )


def field_from_payload(raw: Any) -> FieldDefinition | None:
    """Accepts both camelCase (as stored by the page builder) and snake_case keys."""
    if not isinstance(raw, dict) or not raw.get("name"):
        return None
    try:
        field_type = FieldType(raw.get("type", "text"))
    except ValueError:
        return None
    validation = raw.get("validation")
    if not isinstance(validation, dict):
        validation = {}
    conditional = raw.get("conditional")
    return FieldDefinition(
        name=raw["name"],
        type=field_type,
        label=raw.get("label") or raw["name"],
        required=bool(raw.get("required", False)),
        placeholder=raw.get("placeholder"),
        options=tuple(raw.get("options") or ()),
        validation=FieldValidation(
            min=_number(validation.get("min")),
            max=_number(validation.get("max")),
            pattern=_pattern(validation.get("pattern")),
            min_length=_count(validation.get("minLength", validation.get("min_length"))),
            max_length=_count(validation.get("maxLength", validation.get("max_length"))),
            min_date=validation.get("minDate", validation.get("min_date")),
            max_date=validation.get("maxDate", validation.get("max_date")),
        ),
        conditional=ConditionalDisplay(
            field=conditional["field"],
            value=conditional.get("value"),
            operator=conditional.get("operator") or "equals",
        ) if isinstance(conditional, dict) and conditional.get("field") else None,
        default_value=raw.get("defaultValue", raw.get("default_value")),
        help_text=raw.get("helpText", raw.get("help_text")),
        grid_columns=_count(raw.get("gridColumns", raw.get("grid_columns"))) or 1,
    )


# Malformed rules from the API are dropped.

def _number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _count(value: Any) -> int | None:
    number = _number(value)
    if number is None or number < 0 or not number.is_integer():
        return None
    return int(number)


def _pattern(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        re.compile(value)
    except re.error:
        return None
    return value


def _renamed(definition: FieldDefinition, config: BookingFieldConfig) -> FieldDefinition:
    label = config.rename_fields.get(definition.name)
    return replace(definition, label=label) if label else definition


def _first_set(preferred, fallback):
    return preferred if preferred is not None else fallback


def _tuple_or_none(value) -> tuple | None:
    return tuple(value) if isinstance(value, list) else None
