from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from roi_tracker.analytics.metrics import (
    annualized_roi,
    compute_metrics,
    cost_basis,
    days_held,
    pnl,
    proceeds,
    roi_per_day,
    roi_percent,
)


def test_closed_position_metrics(closed_position):
    metrics = compute_metrics(closed_position)

    assert metrics.cost_basis == Decimal("4400.00")
    assert metrics.proceeds == Decimal("5100.00")
    assert metrics.pnl == Decimal("700.00")
    assert metrics.days_held == 12
    assert float(metrics.roi_percent) == pytest.approx(15.909090909)
    assert float(metrics.roi_per_day) == pytest.approx(15.909090909 / 12)
    assert metrics.annualized_roi == pytest.approx(((5100 / 4400) ** (365 / 12) - 1) * 100)
    assert not metrics.is_pending


def test_open_position_metrics_are_pending(open_position):
    metrics = compute_metrics(open_position, today=date(2026, 2, 14))

    assert metrics.proceeds is None
    assert metrics.pnl is None
    assert metrics.roi_percent is None
    assert metrics.roi_per_day is None
    assert metrics.annualized_roi is None
    assert metrics.days_held == 30
    assert metrics.is_pending


def test_sale_date_without_price_is_still_open(open_position):
    position = replace(open_position, sale_date=date(2026, 2, 1))

    assert position.is_open
    assert proceeds(position) is None


def test_total_fields_take_precedence_over_per_share(closed_position):
    position = replace(closed_position, total_cost=Decimal("4410.00"), total_proceeds=Decimal("5090.00"))

    assert cost_basis(position) == Decimal("4410.00")
    assert proceeds(position) == Decimal("5090.00")
    assert pnl(position) == Decimal("680.00")


def test_zero_cost_basis_leaves_roi_not_applicable(closed_position):
    position = replace(closed_position, cost_per_share=Decimal("0"))

    assert pnl(position) == Decimal("5100.00")
    assert roi_percent(position) is None
    assert roi_per_day(position) is None
    assert annualized_roi(position) is None


@pytest.mark.parametrize(
    "bought, sold",
    [
        (date(2026, 1, 27), date(2026, 1, 27)),
        (date(2026, 1, 27), date(2026, 1, 20)),
    ],
)
def test_days_held_is_never_below_one(closed_position, bought, sold):
    position = replace(closed_position, purchase_date=bought, sale_date=sold)

    assert days_held(position) == 1


def test_days_held_uses_today_for_open_positions(open_position):
    assert days_held(open_position, today=date(2026, 1, 16)) == 1
    assert days_held(open_position, today=date(2027, 1, 15)) == 365


def test_total_loss_annualizes_to_minus_one_hundred(closed_position):
    position = replace(closed_position, sale_price=Decimal("0"))

    assert roi_percent(position) == Decimal("-100")
    assert annualized_roi(position) == -100.0


def test_one_year_hold_annualizes_to_plain_roi(closed_position):
    position = replace(closed_position, sale_date=date(2027, 1, 1))

    assert annualized_roi(position) == pytest.approx(float(roi_percent(position)))


def test_annualized_roi_overflow_is_not_applicable(closed_position):
    position = replace(
        closed_position,
        sale_price=Decimal("110000"),
        sale_date=closed_position.purchase_date,
    )

    assert roi_percent(position) is not None
    assert annualized_roi(position) is None
