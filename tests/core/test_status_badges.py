"""Status Badges — verifies status to badge-variant mapping and labels."""

from rihigo_web.core.status_badges import badge_variant, status_label


def test_known_statuses_map_to_variants():
    assert badge_variant("pending") == "warning"
    assert badge_variant("checked_in") == "success"
    assert badge_variant("cancelled") == "error"
    assert badge_variant("PAID") == "success"


def test_unknown_or_missing_status_is_neutral():
    assert badge_variant("teleported") == "neutral"
    assert badge_variant(None) == "neutral"
    assert badge_variant("") == "neutral"


def test_status_label_title_cases():
    assert status_label("checked_in") == "Checked In"
    assert status_label("partially-refunded") == "Partially Refunded"
    assert status_label("open") == "Open"
    assert status_label(None) == "Unknown"
