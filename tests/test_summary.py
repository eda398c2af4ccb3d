from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from roi_tracker.analytics.summary import filter_positions, portfolio_stats, summarize_positions
from roi_tracker.db.models import Position


@pytest.fixture
def losing_position() -> Position:
    return Position(
        ticker="AMD",
        quantity=Decimal("100"),
        cost_per_share=Decimal("64.00"),
        purchase_date=date(2026, 1, 9),
        sale_price=Decimal("59.40"),
        sale_date=date(2026, 1, 13),
    )


def test_filter_positions_keeps_original_indices(closed_position, open_position, losing_position):
    positions = [closed_position, open_position, losing_position]

    assert filter_positions(positions, "md") == [(2, losing_position)]
    assert filter_positions(positions, "a") == list(enumerate(positions))
    assert filter_positions(positions, " nv ") == [(1, open_position)]
    assert filter_positions(positions, "") == list(enumerate(positions))
    assert filter_positions(positions, None) == list(enumerate(positions))
    assert filter_positions(positions, "zzz") == []


def test_portfolio_stats_weights_roi_over_closed_positions(closed_position, open_position):
    stats = portfolio_stats([closed_position, open_position])

    assert stats.total_invested == Decimal("4880.00")
    assert stats.total_proceeds == Decimal("5100.00")
    assert float(stats.roi_percent) == pytest.approx(700 / 4400 * 100)
    assert stats.open_positions == 1
    assert stats.closed_positions == 1


def test_portfolio_stats_without_closed_positions(open_position):
    stats = portfolio_stats([open_position])

    assert stats.total_proceeds == Decimal("0")
    assert stats.roi_percent is None


def test_summarize_positions_averages_closed_rows(closed_position, open_position, losing_position):
    summary = summarize_positions(
        [closed_position, open_position, losing_position], today=date(2026, 1, 25)
    )

    assert summary.count == 3
    assert summary.closed_count == 2
    assert summary.total_pnl == Decimal("240.00")
    assert summary.avg_pnl == Decimal("120.00")
    assert float(summary.avg_roi_percent) == pytest.approx((700 / 4400 * 100 + -460 / 6400 * 100) / 2)
    assert float(summary.weighted_roi_percent) == pytest.approx(240 / 10800 * 100)
    assert summary.total_days == 12 + 10 + 4
    assert summary.avg_days == pytest.approx(26 / 3)


def test_summarize_positions_empty():
    summary = summarize_positions([])

    assert summary.count == 0
    assert summary.total_pnl == Decimal("0")
    assert summary.avg_pnl is None
    assert summary.avg_days is None
