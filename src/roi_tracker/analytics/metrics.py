"""Per-position ROI and P&L derivations.

Every function is pure. Values that cannot be computed (open positions, zero
cost basis) come back as ``None`` so callers render them as not-applicable
instead of a misleading zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from roi_tracker.db.models import Position
from roi_tracker.utils.dates import today as _today

HUNDRED = Decimal("100")
DAYS_PER_YEAR = 365.0


@dataclass(frozen=True)
class PositionMetrics:
    cost_basis: Decimal
    proceeds: Decimal | None
    pnl: Decimal | None
    roi_percent: Decimal | None
    days_held: int
    roi_per_day: Decimal | None
    annualized_roi: float | None

    @property
    def is_pending(self) -> bool:
        return self.pnl is None


def cost_basis(position: Position) -> Decimal:
    if position.total_cost is not None:
        return position.total_cost
    return position.cost_per_share * position.quantity


def proceeds(position: Position) -> Decimal | None:
    if position.is_open:
        return None
    if position.total_proceeds is not None:
        return position.total_proceeds
    if position.sale_price is None:
        return None
    return position.sale_price * position.quantity


def pnl(position: Position) -> Decimal | None:
    received = proceeds(position)
    if received is None:
        return None
    return received - cost_basis(position)


def roi_percent(position: Position) -> Decimal | None:
    profit = pnl(position)
    basis = cost_basis(position)
    if profit is None or basis == 0:
        return None
    return profit / basis * HUNDRED


def days_held(position: Position, today: date | None = None) -> int:
    end = position.sale_date or today or _today()
    return max(1, (end - position.purchase_date).days)


def roi_per_day(position: Position, today: date | None = None) -> Decimal | None:
    roi = roi_percent(position)
    if roi is None:
        return None
    return roi / days_held(position, today)


def annualized_roi(position: Position, today: date | None = None) -> float | None:
    received = proceeds(position)
    basis = cost_basis(position)
    if received is None or basis == 0:
        return None
    multiple = float(received / basis)
    if multiple <= 0:
        return -100.0
    years = days_held(position, today) / DAYS_PER_YEAR
    try:
        return (multiple ** (1.0 / years) - 1.0) * 100.0
    except OverflowError:
        return None


def compute_metrics(position: Position, today: date | None = None) -> PositionMetrics:
    return PositionMetrics(
        cost_basis=cost_basis(position),
        proceeds=proceeds(position),
        pnl=pnl(position),
        roi_percent=roi_percent(position),
        days_held=days_held(position, today),
        roi_per_day=roi_per_day(position, today),
        annualized_roi=annualized_roi(position, today),
    )
