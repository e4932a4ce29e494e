"""Booking Fields — verifies per-type presets, overrides and conditional display.

Tests cover:
    - Preset field lists per booking type (hidden fields never returned)
    - Optional fields forced to required=False, duplicates dropped
    - Activity overrides: rename, custom fields, field_order
    - Conditional display operators
    - Grouping with "Other" / "Booking Details" fallbacks
    - Payload parsing with camelCase keys; malformed rules are dropped
"""

from dataclasses import replace

from rihigo_web.core.booking_fields import (
    BOOKING_TYPE_PRESETS,
    STANDARD_FIELDS,
    BookingFieldConfig,
    ConditionalDisplay,
    FieldDefinition,
    FieldValidation,
    config_from_payload,
    control_for,
    field_from_payload,
    fields_for_activity,
    get_fields_for_config,
    group_fields,
    is_field_visible,
    merge_booking_configs,
)
from rihigo_web.core.domain_types import BookingType, FieldType


def _names(fields):
    return [f.name for f in fields]


# -- Presets -------------------------------------------------------------------


def test_standard_preset_fields():
    fields = get_fields_for_config(BOOKING_TYPE_PRESETS[BookingType.STANDARD])
    assert _names(fields) == [
        "booking_date", "number_of_people", "full_name", "email", "phone",
        "nationality", "special_requests",
    ]


def test_optional_fields_are_not_required():
    fields = {f.name: f for f in get_fields_for_config(BOOKING_TYPE_PRESETS[BookingType.STANDARD])}
    assert fields["email"].required
    assert not fields["nationality"].required
    assert not fields["special_requests"].required


def test_digital_product_hides_date_and_people():
    fields = get_fields_for_config(BOOKING_TYPE_PRESETS[BookingType.DIGITAL_PRODUCT])
    assert _names(fields) == ["email", "phone", "delivery_email"]


def test_accommodation_uses_check_in_and_out():
    names = _names(get_fields_for_config(BOOKING_TYPE_PRESETS[BookingType.ACCOMMODATION]))
    assert "check_in_date" in names
    assert "check_out_date" in names
    assert "booking_date" not in names


def test_no_duplicate_names_in_any_preset():
    for preset in BOOKING_TYPE_PRESETS.values():
        names = _names(get_fields_for_config(preset))
        assert len(names) == len(set(names))


def test_required_field_also_listed_optional_stays_required():
    config = BookingFieldConfig(required_fields=("email",), optional_fields=("email", "notes"))
    fields = get_fields_for_config(config)
    assert _names(fields) == ["email", "notes"]
    assert fields[0].required


def test_standard_fields_are_not_mutated():
    config = BookingFieldConfig(optional_fields=("email",), rename_fields={"email": "Work email"})
    fields = get_fields_for_config(config)
    assert fields[0].label == "Work email"
    assert not fields[0].required
    assert STANDARD_FIELDS["email"].label == "Email Address"
    assert STANDARD_FIELDS["email"].required


def test_field_order_sorts_listed_fields_first():
    config = BookingFieldConfig(
        required_fields=("full_name", "email", "phone"),
        field_order=("phone", "full_name"),
    )
    assert _names(get_fields_for_config(config)) == ["phone", "full_name", "email"]


def test_grid_class_reflects_columns():
    assert STANDARD_FIELDS["full_name"].grid_class == "md:col-span-1"
    assert STANDARD_FIELDS["notes"].grid_class == "md:col-span-2"


# -- Activity overrides --------------------------------------------------------


def test_unknown_booking_type_falls_back_to_standard():
    _, fields = fields_for_activity({"booking_type": "spaceflight"})
    assert _names(fields)[0] == "booking_date"
    assert len(fields) == 7


def test_activity_override_merges_with_preset():
    activity = {
        "booking_type": "standard",
        "booking_field_config": {
            "hide_fields": ["nationality"],
            "rename_fields": {"full_name": "Lead guest"},
            "custom_fields": [
                {"name": "shoe_size", "type": "number", "label": "Shoe size",
                 "validation": {"min": 30, "max": 50}},
            ],
        },
    }
    config, fields = fields_for_activity(activity)
    by_name = {f.name: f for f in fields}
    assert "nationality" not in by_name
    assert by_name["full_name"].label == "Lead guest"
    assert by_name["shoe_size"].validation.min == 30
    assert config.field_groups == BOOKING_TYPE_PRESETS[BookingType.STANDARD].field_groups


def test_merge_without_custom_returns_base():
    base = BOOKING_TYPE_PRESETS[BookingType.TOUR]
    assert merge_booking_configs(base) is base


def test_merge_prefers_custom_required_fields():
    base = BOOKING_TYPE_PRESETS[BookingType.STANDARD]
    merged = merge_booking_configs(base, BookingFieldConfig(required_fields=("email",)))
    assert merged.required_fields == ("email",)
    assert merged.optional_fields == base.optional_fields


# -- Conditional display -------------------------------------------------------


def test_tour_hotel_name_depends_on_pickup():
    fields = {f.name: f for f in get_fields_for_config(BOOKING_TYPE_PRESETS[BookingType.TOUR])}
    hotel = fields["hotel_name"]
    assert not is_field_visible(hotel, {"pickup_required": False})
    assert is_field_visible(hotel, {"pickup_required": True})


def test_field_without_condition_is_visible():
    assert is_field_visible(STANDARD_FIELDS["email"], {})
    assert is_field_visible(STANDARD_FIELDS["email"], None)


def _conditional(operator, value):
    return replace(
        STANDARD_FIELDS["notes"], conditional=ConditionalDisplay("count", value, operator),
    )


def test_conditional_operators():
    assert is_field_visible(_conditional("not_equals", 2), {"count": 3})
    assert not is_field_visible(_conditional("not_equals", 2), {"count": 2})
    assert is_field_visible(_conditional("contains", "sea"), {"count": "seaplane"})
    assert not is_field_visible(_conditional("contains", "sea"), {"count": None})
    assert is_field_visible(_conditional("greater_than", 2), {"count": "3"})
    assert not is_field_visible(_conditional("less_than", 2), {"count": 3})
    assert not is_field_visible(_conditional("greater_than", 2), {"count": "many"})


# -- Grouping ------------------------------------------------------------------


def test_group_fields_follows_preset_groups():
    config = BOOKING_TYPE_PRESETS[BookingType.STANDARD]
    groups = group_fields(config, get_fields_for_config(config))
    assert [g.title for g, _ in groups] == [
        "Booking Details", "Guest Information", "Additional Information",
    ]


def test_ungrouped_custom_fields_land_in_other():
    config = merge_booking_configs(
        BOOKING_TYPE_PRESETS[BookingType.STANDARD],
        BookingFieldConfig(custom_fields=(FieldDefinition("room", FieldType.TEXT, "Room"),)),
    )
    groups = group_fields(config, get_fields_for_config(config))
    title, members = groups[-1][0].title, groups[-1][1]
    assert title == "Other"
    assert _names(members) == ["room"]


def test_config_without_groups_uses_booking_details():
    config = BookingFieldConfig(required_fields=("email", "phone"))
    groups = group_fields(config, get_fields_for_config(config))
    assert len(groups) == 1
    assert groups[0][0].title == "Booking Details"


def test_control_for_maps_types_to_macros():
    assert control_for(STANDARD_FIELDS["booking_date"]) == "calendar"
    assert control_for(STANDARD_FIELDS["full_name"]) == "input"
    assert control_for(STANDARD_FIELDS["number_of_people"]) == "number"
    assert control_for(STANDARD_FIELDS["notes"]) == "textarea"


# -- Payload parsing -----------------------------------------------------------


def test_field_from_payload_accepts_camel_case():
    field = field_from_payload({
        "name": "diver_level",
        "type": "select",
        "label": "Diver level",
        "required": True,
        "options": ["Open Water", "Advanced"],
        "helpText": "Highest certification",
        "gridColumns": 2,
        "validation": {"minLength": 2},
        "conditional": {"field": "is_diver", "value": True},
    })
    assert field.type == FieldType.SELECT
    assert field.options == ("Open Water", "Advanced")
    assert field.help_text == "Highest certification"
    assert field.grid_columns == 2
    assert field.validation.min_length == 2
    assert field.conditional == ConditionalDisplay("is_diver", True, "equals")


def test_field_from_payload_rejects_bad_input():
    assert field_from_payload({"type": "text"}) is None
    assert field_from_payload({"name": "x", "type": "hologram"}) is None
    assert field_from_payload("x") is None


def test_field_from_payload_drops_malformed_rules():
    field = field_from_payload({
        "name": "code",
        "type": "text",
        "gridColumns": "wide",
        "validation": {"pattern": "[A-Z", "min": "1", "max": "lots", "minLength": "2", "maxLength": -3},
    })
    assert field.grid_columns == 1
    assert field.validation.pattern is None
    assert field.validation.min == 1
    assert field.validation.max is None
    assert field.validation.min_length == 2
    assert field.validation.max_length is None


def test_field_from_payload_ignores_non_dict_validation():
    field = field_from_payload({"name": "code", "type": "text", "validation": "strict"})
    assert field.validation == FieldValidation()


def test_activity_with_malformed_custom_field_still_resolves():
    _, fields = fields_for_activity({
        "booking_type": "standard",
        "booking_field_config": {"custom_fields": [
            {"name": "boat", "type": "text", "label": "Boat", "gridColumns": "wide"},
        ]},
    })
    assert _names(fields)[-1] == "boat"


def test_config_from_payload_ignores_non_dicts():
    assert config_from_payload(None) is None
    assert config_from_payload(["a"]) is None


def test_config_from_payload_parses_groups():
    config = config_from_payload({
        "required_fields": ["email"],
        "field_groups": [{"title": "Contact", "fields": ["email"], "defaultCollapsed": True}],
    })
    assert config.required_fields == ("email",)
    assert config.optional_fields is None
    assert config.field_groups[0].title == "Contact"
    assert config.field_groups[0].default_collapsed
