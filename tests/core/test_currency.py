"""Currency — verifies display formatting and conversion of USD prices.

Tests cover:
    - format_price with known, unknown and invalid inputs
    - convert_to_display_currency
    - Parsing the currencies payload with fallback to defaults
    - resolve_currency
"""

import math

from rihigo_web.core.currency import (
    DEFAULT_CURRENCIES,
    PRICE_UNAVAILABLE,
    CurrencyData,
    convert_to_display_currency,
    currencies_from_payload,
    format_price,
    resolve_currency,
)


def test_usd_is_formatted_with_two_decimals():
    assert format_price(120, "USD") == "$120.00"
    assert format_price("49.5", "USD") == "$49.50"


def test_converted_price_divides_by_rate():
    assert format_price(15.42, "MVR") == "Rf1.00"
    assert format_price(100, "EUR") == "€108.70"


def test_unknown_currency_falls_back_to_dollars():
    assert format_price(10, "XYZ") == "$10.00"


def test_invalid_amounts_are_unavailable():
    assert format_price(None, "USD") == PRICE_UNAVAILABLE
    assert format_price("free", "USD") == PRICE_UNAVAILABLE
    assert format_price(math.nan, "USD") == PRICE_UNAVAILABLE


def test_custom_currency_list():
    currencies = [CurrencyData("THB", "฿", 0.5)]
    assert format_price(10, "THB", currencies) == "฿20.00"


def test_convert_to_display_currency():
    assert convert_to_display_currency(30.84, "MVR") == 30.84 / 15.42
    assert convert_to_display_currency(30, "XYZ") == 30


def test_currencies_from_payload_normalizes_codes():
    parsed = currencies_from_payload([
        {"code": "mvr", "symbol": "Rf", "exchange_rate_to_usd": "15.4"},
        {"code": "eur", "exchange_rate": 0.9},
        {"code": "bad", "exchange_rate_to_usd": 0},
        {"symbol": "?"},
    ])
    assert parsed == [
        CurrencyData("MVR", "Rf", 15.4),
        CurrencyData("EUR", "eur", 0.9),
    ]


def test_currencies_from_empty_payload_uses_defaults():
    assert currencies_from_payload(None) == list(DEFAULT_CURRENCIES)
    assert currencies_from_payload([]) == list(DEFAULT_CURRENCIES)


def test_resolve_currency():
    assert resolve_currency("eur", DEFAULT_CURRENCIES) == "EUR"
    assert resolve_currency("XYZ", DEFAULT_CURRENCIES) == "USD"
    assert resolve_currency(None, DEFAULT_CURRENCIES, default="MVR") == "MVR"
