"""Money helpers for deterministic rounding and display."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_decimal(value: float | int | str | Decimal | None) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: float | int | str | Decimal | None) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(value: Decimal | float | None, *, missing: str = "n/a") -> str:
    if value is None:
        return missing
    amount = round_money(value)
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"


def format_percent(value: Decimal | float | None, *, missing: str = "n/a") -> str:
    """Format a value already expressed in percent units, e.g. 2.17 -> '+2.17%'."""
    if value is None:
        return missing
    return f"{float(value):+.2f}%"


def format_quantity(value: Decimal | float) -> str:
    text = f"{to_decimal(value):f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
