"""Currency — display-currency conversion for prices the API quotes in USD.

Invariants:
    - Prices from the API are always USD; conversion is display-only
    - display_amount = usd_amount / exchange_rate_to_usd
    - Unknown currency codes fall back to plain "$" formatting
"""

import math
from dataclasses import dataclass
from typing import Any

PRICE_UNAVAILABLE = "Price unavailable"


@dataclass(frozen=True)
class CurrencyData:
    code: str
    symbol: str
    exchange_rate_to_usd: float


DEFAULT_CURRENCIES: tuple[CurrencyData, ...] = (
    CurrencyData("USD", "$", 1),
    CurrencyData("EUR", "€", 0.92),
    CurrencyData("GBP", "£", 0.79),
    CurrencyData("CNY", "¥", 7.24),
    CurrencyData("MVR", "Rf", 15.42),
    CurrencyData("RUB", "₽", 92),
    CurrencyData("AED", "د.إ", 3.67),
    CurrencyData("INR", "₹", 83.12),
    CurrencyData("JPY", "¥", 149.5),
)


def _find(code: str, currencies: tuple[CurrencyData, ...] | list[CurrencyData]) -> CurrencyData | None:
    return next((c for c in currencies if c.code == code), None)


def format_price(
    amount_usd: Any,
    currency_code: str,
    currencies: tuple[CurrencyData, ...] | list[CurrencyData] = DEFAULT_CURRENCIES,
) -> str:
    try:
        amount = float(amount_usd)
    except (TypeError, ValueError):
        return PRICE_UNAVAILABLE
    if math.isnan(amount):
        return PRICE_UNAVAILABLE
    currency = _find(currency_code, currencies)
    if currency is None or not currency.exchange_rate_to_usd:
        return f"${amount:.2f}"
    return f"{currency.symbol}{convert_to_display_currency(amount, currency_code, currencies):.2f}"


def convert_to_display_currency(
    amount_usd: float,
    currency_code: str,
    currencies: tuple[CurrencyData, ...] | list[CurrencyData] = DEFAULT_CURRENCIES,
) -> float:
    currency = _find(currency_code, currencies)
    if currency is None or not currency.exchange_rate_to_usd:
        return amount_usd
    return amount_usd / currency.exchange_rate_to_usd


def currencies_from_payload(payload: Any) -> list[CurrencyData]:
    """Parse GET /api/currencies; falls back to the defaults when empty or malformed."""
    parsed: list[CurrencyData] = []
    for raw in payload if isinstance(payload, list) else []:
        if not isinstance(raw, dict) or not raw.get("code"):
            continue
        try:
            rate = float(raw.get("exchange_rate_to_usd") or raw.get("exchange_rate") or 0)
        except (TypeError, ValueError):
            continue
        if rate <= 0:
            continue
        parsed.append(CurrencyData(
            code=str(raw["code"]).upper(),
            symbol=raw.get("symbol") or str(raw["code"]),
            exchange_rate_to_usd=rate,
        ))
    return parsed or list(DEFAULT_CURRENCIES)


def resolve_currency(
    requested: str | None,
    currencies: tuple[CurrencyData, ...] | list[CurrencyData],
    default: str = "USD",
) -> str:
    """The requested code if known, otherwise the default."""
    if requested and _find(requested.upper(), currencies):
        return requested.upper()
    return default
