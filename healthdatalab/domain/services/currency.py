from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


DEFAULT_CURRENCY = "GBP"
SUPPORTED_CURRENCIES = ("USD", "EUR", "CHF", "CAD", "AUD")
CURRENCY_SYMBOLS = {"GBP": "£"}

MINOR_UNIT = Decimal("1")
CENT = Decimal("0.01")


def normalize_currency(value: str | None) -> str:
    if not value:
        return DEFAULT_CURRENCY
    return value.strip().upper() or DEFAULT_CURRENCY


def is_supported_currency(currency: str) -> bool:
    return currency == DEFAULT_CURRENCY or currency in SUPPORTED_CURRENCIES


def convert_minor_units(base_amount: Decimal, rate: Decimal) -> int:
    """Convert an amount of GBP minor units, rounding half up to a whole minor unit."""
    converted = (Decimal(base_amount) * Decimal(rate)).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)
    return int(converted)


def convert_display_amount(amount: Decimal, rate: Decimal) -> Decimal:
    return (Decimal(amount) * Decimal(rate)).quantize(CENT, rounding=ROUND_HALF_UP)


def currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency, f"{currency} ")


def format_money(amount: Decimal, currency: str) -> str:
    return f"{currency_symbol(currency)}{Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP):.2f}"


def minor_to_major(amount: int) -> Decimal:
    return (Decimal(amount) / Decimal(100)).quantize(CENT)
