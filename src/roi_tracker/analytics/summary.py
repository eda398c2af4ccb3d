from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from roi_tracker.analytics.metrics import HUNDRED, cost_basis, days_held, pnl, proceeds, roi_percent
from roi_tracker.db.models import Position

ZERO = Decimal("0")


@dataclass(frozen=True)
class PortfolioStats:
    total_invested: Decimal
    total_proceeds: Decimal
    roi_percent: Decimal | None
    open_positions: int
    closed_positions: int


@dataclass(frozen=True)
class PositionSummary:
    count: int
    closed_count: int
    total_pnl: Decimal
    avg_pnl: Decimal | None
    avg_roi_percent: Decimal | None
    weighted_roi_percent: Decimal | None
    total_days: int
    avg_days: float | None


def filter_positions(
    positions: Sequence[Position], text: str | None
) -> list[tuple[int, Position]]:
    needle = (text or "").strip().upper()
    return [
        (index, position)
        for index, position in enumerate(positions)
        if not needle or needle in position.ticker.upper()
    ]


def _weighted_roi(invested: Decimal, received: Decimal) -> Decimal | None:
    if invested == 0:
        return None
    return (received - invested) / invested * HUNDRED


def portfolio_stats(positions: Iterable[Position]) -> PortfolioStats:
    total_invested = ZERO
    total_proceeds = ZERO
    closed_invested = ZERO
    open_count = 0
    closed_count = 0

    for position in positions:
        basis = cost_basis(position)
        total_invested += basis
        received = proceeds(position)
        if received is None:
            open_count += 1
            continue
        closed_count += 1
        closed_invested += basis
        total_proceeds += received

    return PortfolioStats(
        total_invested=total_invested,
        total_proceeds=total_proceeds,
        roi_percent=_weighted_roi(closed_invested, total_proceeds),
        open_positions=open_count,
        closed_positions=closed_count,
    )


def summarize_positions(
    positions: Sequence[Position], today: date | None = None
) -> PositionSummary:
    count = len(positions)
    if count == 0:
        return PositionSummary(
            count=0,
            closed_count=0,
            total_pnl=ZERO,
            avg_pnl=None,
            avg_roi_percent=None,
            weighted_roi_percent=None,
            total_days=0,
            avg_days=None,
        )

    closed = [position for position in positions if pnl(position) is not None]
    total_pnl = sum((pnl(position) for position in closed), ZERO)
    rois = [roi for roi in (roi_percent(position) for position in closed) if roi is not None]
    closed_invested = sum((cost_basis(position) for position in closed), ZERO)
    closed_proceeds = sum((proceeds(position) for position in closed), ZERO)
    total_days = sum(days_held(position, today) for position in positions)

    return PositionSummary(
        count=count,
        closed_count=len(closed),
        total_pnl=total_pnl,
        avg_pnl=(total_pnl / len(closed)) if closed else None,
        avg_roi_percent=(sum(rois, ZERO) / len(rois)) if rois else None,
        weighted_roi_percent=_weighted_roi(closed_invested, closed_proceeds),
        total_days=total_days,
        avg_days=total_days / count,
    )
