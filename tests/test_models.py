from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from roi_tracker.db.models import PositionValidationError, build_position, carry_totals


def _fields(**overrides):
    fields = {
        "ticker": "gm",
        "cost_per_share": "84.77",
        "quantity": "10",
        "sale_price": "86.61",
        "purchase_date": "2026-01-27",
        "sale_date": "01/27/2026",
    }
    fields.update(overrides)
    return fields


def test_build_position_parses_closed_position():
    position = build_position(**_fields())

    assert position.ticker == "GM"
    assert position.cost_per_share == Decimal("84.77")
    assert position.quantity == Decimal("10")
    assert position.sale_price == Decimal("86.61")
    assert position.purchase_date == date(2026, 1, 27)
    assert position.sale_date == date(2026, 1, 27)
    assert position.is_closed


def test_build_position_with_blank_sale_fields_is_open():
    position = build_position(**_fields(sale_price="", sale_date="--"))

    assert position.is_open
    assert position.sale_price is None
    assert position.sale_date is None


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"ticker": "  "}, "Ticker cannot be empty"),
        ({"cost_per_share": "abc"}, "Invalid cost/share"),
        ({"quantity": "0"}, "Quantity must be greater than zero"),
        ({"quantity": "-5"}, "Quantity must be greater than zero"),
        ({"cost_per_share": "-1"}, "Cost/share cannot be negative"),
        ({"sale_price": "-1"}, "Sale price cannot be negative"),
        ({"purchase_date": "27/01/2026"}, "Invalid purchase date, expected YYYY-MM-DD or MM/DD/YYYY"),
        ({"sale_date": "soon"}, "Invalid sale date"),
        ({"sale_date": ""}, "must both be set"),
        ({"sale_price": ""}, "must both be set"),
        ({"sale_date": "2026-01-26"}, "Sale date cannot be before purchase date"),
    ],
)
def test_build_position_rejects_invalid_input(overrides, message):
    with pytest.raises(PositionValidationError, match=message):
        build_position(**_fields(**overrides))


def test_build_position_accepts_zero_cost():
    position = build_position(**_fields(cost_per_share="0"))

    assert position.cost_per_share == Decimal("0")


def _imported_totals_position():
    position = build_position("TSLA", "33.3333", "3", "43.3333", "2024-01-02", "2024-02-02")
    return replace(position, total_cost=Decimal("100.00"), total_proceeds=Decimal("130.00"))


def test_carry_totals_keeps_totals_when_prices_unchanged():
    current = _imported_totals_position()
    edited = build_position("TSLA.X", "33.3333", "3.0", "43.3333", "2024-01-02", "2024-02-03")

    kept = carry_totals(current, edited)

    assert kept.ticker == "TSLA.X"
    assert kept.sale_date == date(2024, 2, 3)
    assert kept.total_cost == Decimal("100.00")
    assert kept.total_proceeds == Decimal("130.00")


def test_carry_totals_drops_totals_that_no_longer_match():
    current = _imported_totals_position()

    repriced = carry_totals(current, build_position("TSLA", "34", "3", "43.3333", "2024-01-02", "2024-02-02"))
    resized = carry_totals(current, build_position("TSLA", "33.3333", "2", "43.3333", "2024-01-02", "2024-02-02"))
    reopened = carry_totals(current, build_position("TSLA", "33.3333", "3", "", "2024-01-02", ""))

    assert repriced.total_cost is None
    assert repriced.total_proceeds == Decimal("130.00")
    assert resized.total_cost is None
    assert resized.total_proceeds is None
    assert reopened.total_cost == Decimal("100.00")
    assert reopened.total_proceeds is None
