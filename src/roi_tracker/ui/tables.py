"""Tabular views of positions shared by the CLI and the Streamlit app."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any

import pandas as pd

from roi_tracker.analytics.metrics import compute_metrics
from roi_tracker.analytics.summary import PositionSummary, summarize_positions
from roi_tracker.db.models import Position
from roi_tracker.utils.dates import format_date
from roi_tracker.utils.money import format_currency, format_percent, format_quantity

POSITION_COLUMNS = [
    "pos",
    "ticker",
    "cost_per_share",
    "quantity",
    "sale_price",
    "pnl",
    "roi_pct",
    "days_held",
    "purchase_date",
    "sale_date",
    "status",
]

DISPLAY_COLUMNS = {
    "pos": "Pos",
    "ticker": "Ticker",
    "cost_per_share": "Cost",
    "quantity": "Qty",
    "sale_price": "Sale",
    "pnl": "PnL$",
    "roi_pct": "ROI%",
    "days_held": "Days",
    "purchase_date": "Bought",
    "sale_date": "Sold",
    "status": "Status",
}

PENDING = "pending"


def _as_float(value: Any) -> float | None:
    return None if value is None else float(value)


def positions_dataframe(
    indexed_positions: Sequence[tuple[int, Position]], today: date | None = None
) -> pd.DataFrame:
    rows: list[dict[str, Any]] = []
    for index, position in indexed_positions:
        metrics = compute_metrics(position, today)
        rows.append(
            {
                "pos": index + 1,
                "ticker": position.ticker,
                "cost_per_share": float(position.cost_per_share),
                "quantity": float(position.quantity),
                "sale_price": _as_float(position.sale_price),
                "pnl": _as_float(metrics.pnl),
                "roi_pct": _as_float(metrics.roi_percent),
                "days_held": metrics.days_held,
                "purchase_date": position.purchase_date,
                "sale_date": position.sale_date,
                "status": "open" if position.is_open else "closed",
            }
        )
    if not rows:
        return pd.DataFrame(columns=POSITION_COLUMNS)
    return pd.DataFrame(rows, columns=POSITION_COLUMNS)


def display_dataframe(
    indexed_positions: Sequence[tuple[int, Position]], today: date | None = None
) -> pd.DataFrame:
    rows: list[dict[str, str]] = []
    for index, position in indexed_positions:
        metrics = compute_metrics(position, today)
        rows.append(
            {
                "Pos": f"#{index + 1}",
                "Ticker": position.ticker,
                "Cost": format_currency(position.cost_per_share),
                "Qty": format_quantity(position.quantity),
                "Sale": format_currency(position.sale_price, missing="--"),
                "PnL$": format_currency(metrics.pnl, missing=PENDING),
                "ROI%": format_percent(metrics.roi_percent, missing=PENDING if metrics.is_pending else "n/a"),
                "Days": str(metrics.days_held),
                "Bought": format_date(position.purchase_date),
                "Sold": format_date(position.sale_date),
            }
        )

    summary = summarize_positions([position for _, position in indexed_positions], today)
    rows.extend(summary_rows(summary))
    columns = [label for key, label in DISPLAY_COLUMNS.items() if key != "status"]
    return pd.DataFrame(rows, columns=columns).fillna("")


def summary_rows(summary: PositionSummary) -> list[dict[str, str]]:
    if summary.count == 0:
        return []
    avg_days = "" if summary.avg_days is None else f"{summary.avg_days:.1f}"
    return [
        {
            "Pos": "",
            "Ticker": "Avg",
            "PnL$": format_currency(summary.avg_pnl),
            "ROI%": format_percent(summary.avg_roi_percent),
            "Days": avg_days,
        },
        {
            "Pos": "",
            "Ticker": "Total",
            "PnL$": format_currency(summary.total_pnl),
            "ROI%": format_percent(summary.weighted_roi_percent),
            "Days": str(summary.total_days),
        },
    ]


def roi_chart_frame(indexed_positions: Sequence[tuple[int, Position]]) -> pd.DataFrame:
    frame = positions_dataframe(indexed_positions)
    closed = frame[frame["roi_pct"].notna()]
    return closed[["pos", "ticker", "roi_pct", "days_held"]].reset_index(drop=True)


def roi_timeline_frame(position: Position, today: date | None = None) -> pd.DataFrame:
    metrics = compute_metrics(position, today)
    roi = _as_float(metrics.roi_percent) or 0.0
    return pd.DataFrame(
        {"days_held": [0, metrics.days_held], "roi_pct": [0.0, roi]},
    )


def detail_lines(position: Position, today: date | None = None) -> list[tuple[str, str]]:
    metrics = compute_metrics(position, today)
    missing = PENDING if metrics.is_pending else "n/a"
    return [
        ("Ticker", position.ticker),
        ("Status", "open" if position.is_open else "closed"),
        ("ROI", format_percent(metrics.roi_percent, missing=missing)),
        ("Annualized", format_percent(metrics.annualized_roi, missing=missing)),
        ("ROI/day", format_percent(metrics.roi_per_day, missing=missing)),
        ("PnL", format_currency(metrics.pnl, missing=missing)),
        (
            "Held",
            f"{metrics.days_held} days  {format_date(position.purchase_date)} -> "
            f"{format_date(position.sale_date, missing='open')}",
        ),
        ("Invested", format_currency(metrics.cost_basis)),
        ("Proceeds", format_currency(metrics.proceeds, missing=missing)),
        ("Qty", format_quantity(position.quantity)),
    ]
