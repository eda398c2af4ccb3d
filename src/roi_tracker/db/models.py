from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any

from roi_tracker.ingest.validators import is_missing, normalize_date, normalize_number, normalize_ticker


class PositionValidationError(ValueError):
    """Raised when manually entered position fields are invalid."""


@dataclass(frozen=True)
class Position:
    ticker: str
    quantity: Decimal
    cost_per_share: Decimal
    purchase_date: date
    sale_price: Decimal | None = None
    sale_date: date | None = None
    total_cost: Decimal | None = None
    total_proceeds: Decimal | None = None

    @property
    def is_open(self) -> bool:
        if self.sale_date is None:
            return True
        return self.sale_price is None and self.total_proceeds is None

    @property
    def is_closed(self) -> bool:
        return not self.is_open


def _required_number(raw: Any, label: str) -> Decimal:
    parsed = normalize_number(raw)
    if parsed is None:
        raise PositionValidationError(f"Invalid {label}")
    return parsed


def _required_date(raw: Any, label: str) -> date:
    parsed = normalize_date(raw)
    if parsed is None:
        raise PositionValidationError(
            f"Invalid {label}, expected YYYY-MM-DD or MM/DD/YYYY"
        )
    return parsed


def build_position(
    ticker: Any,
    cost_per_share: Any,
    quantity: Any,
    sale_price: Any,
    purchase_date: Any,
    sale_date: Any,
) -> Position:
    """Build a position from manually entered form fields.

    Sale price and sale date may both be left blank to record an open
    position; supplying only one of them is rejected.
    """
    symbol = normalize_ticker(ticker)
    if symbol is None:
        raise PositionValidationError("Ticker cannot be empty")

    cost = _required_number(cost_per_share, "cost/share")
    qty = _required_number(quantity, "quantity")
    bought = _required_date(purchase_date, "purchase date")

    if qty <= 0:
        raise PositionValidationError("Quantity must be greater than zero")
    if cost < 0:
        raise PositionValidationError("Cost/share cannot be negative")

    sale_missing = is_missing(sale_price)
    sold_missing = is_missing(sale_date)
    if sale_missing != sold_missing:
        raise PositionValidationError(
            "Sale price and sale date must both be set, or both left blank for an open position"
        )

    price: Decimal | None = None
    sold: date | None = None
    if not sale_missing:
        price = _required_number(sale_price, "sale price")
        sold = _required_date(sale_date, "sale date")
        if price < 0:
            raise PositionValidationError("Sale price cannot be negative")
        if sold < bought:
            raise PositionValidationError("Sale date cannot be before purchase date")

    return Position(
        ticker=symbol,
        quantity=qty,
        cost_per_share=cost,
        purchase_date=bought,
        sale_price=price,
        sale_date=sold,
    )


def carry_totals(current: Position, updated: Position) -> Position:
    """Keep imported totals on an edit that leaves quantity and the matching price alone."""
    same_quantity = updated.quantity == current.quantity
    total_cost = None
    if same_quantity and updated.cost_per_share == current.cost_per_share:
        total_cost = current.total_cost
    total_proceeds = None
    if same_quantity and updated.is_closed and updated.sale_price == current.sale_price:
        total_proceeds = current.total_proceeds
    return replace(updated, total_cost=total_cost, total_proceeds=total_proceeds)
