"""JSON-file persistence for the position list."""

from __future__ import annotations

import json
import threading
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable
from uuid import uuid4

from roi_tracker.config.settings import get_settings
from roi_tracker.db.models import Position
from roi_tracker.ingest.validators import normalize_date, normalize_number
from roi_tracker.utils.dates import today as _today
from roi_tracker.utils.logging import get_logger

logger = get_logger(__name__)

_DECIMAL_FIELDS = ("quantity", "cost_per_share", "sale_price", "total_cost", "total_proceeds")
_DATE_FIELDS = ("purchase_date", "sale_date")


class PositionStoreError(RuntimeError):
    """Raised when the positions file cannot be read or decoded."""


def position_to_dict(position: Position) -> dict[str, Any]:
    payload: dict[str, Any] = {"ticker": position.ticker}
    for name in _DECIMAL_FIELDS:
        value: Decimal | None = getattr(position, name)
        payload[name] = None if value is None else str(value)
    for name in _DATE_FIELDS:
        value_date: date | None = getattr(position, name)
        payload[name] = None if value_date is None else value_date.isoformat()
    return payload


def _decimal_field(payload: dict[str, Any], name: str, *, required: bool) -> Decimal | None:
    raw = payload.get(name)
    value = normalize_number(raw) if raw is not None else None
    if value is None and required:
        raise PositionStoreError(f"position is missing numeric field '{name}'")
    return value


def _date_field(payload: dict[str, Any], name: str, *, required: bool) -> date | None:
    raw = payload.get(name)
    value = normalize_date(raw) if raw is not None else None
    if value is None and required:
        raise PositionStoreError(f"position is missing date field '{name}'")
    return value


def position_from_dict(payload: dict[str, Any]) -> Position:
    if not isinstance(payload, dict):
        raise PositionStoreError("position entry must be an object")
    ticker = str(payload.get("ticker") or "").strip().upper()
    if not ticker:
        raise PositionStoreError("position is missing a ticker")
    return Position(
        ticker=ticker,
        quantity=_decimal_field(payload, "quantity", required=True),
        cost_per_share=_decimal_field(payload, "cost_per_share", required=True),
        purchase_date=_date_field(payload, "purchase_date", required=True),
        sale_price=_decimal_field(payload, "sale_price", required=False),
        sale_date=_date_field(payload, "sale_date", required=False),
        total_cost=_decimal_field(payload, "total_cost", required=False),
        total_proceeds=_decimal_field(payload, "total_proceeds", required=False),
    )


def seed_positions(today: date | None = None) -> list[Position]:
    anchor = today or _today()
    return [
        Position(
            ticker="AAPL",
            quantity=Decimal("40"),
            cost_per_share=Decimal("110.00"),
            purchase_date=anchor - timedelta(days=12),
            sale_price=Decimal("127.50"),
            sale_date=anchor,
        ),
        Position(
            ticker="AMD",
            quantity=Decimal("100"),
            cost_per_share=Decimal("64.00"),
            purchase_date=anchor - timedelta(days=4),
            sale_price=Decimal("59.40"),
            sale_date=anchor,
        ),
        Position(
            ticker="MSFT",
            quantity=Decimal("10"),
            cost_per_share=Decimal("320.50"),
            purchase_date=anchor - timedelta(days=25),
            sale_price=Decimal("355.20"),
            sale_date=anchor - timedelta(days=5),
        ),
    ]


def _write_json_atomic(path: Path, payload: list[dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.parent / f".{path.name}.{uuid4().hex}.tmp"
    temp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    temp_path.replace(path)


class PositionStore:
    def __init__(self, path: str | Path, *, seed_demo: bool = False) -> None:
        self.path = Path(path).expanduser()
        self.seed_demo = seed_demo
        self._lock = threading.RLock()

    @classmethod
    def default(cls) -> PositionStore:
        settings = get_settings()
        return cls(settings.positions_path, seed_demo=settings.seed_demo_positions)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> list[Position]:
        if not self.path.exists():
            return []
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PositionStoreError(f"Failed to read {self.path}: {exc}") from exc
        if not isinstance(loaded, list):
            raise PositionStoreError(f"Failed to parse {self.path}: expected a list of positions")
        return [position_from_dict(item) for item in loaded]

    def load_or_seed(self) -> list[Position]:
        if not self.path.exists():
            return seed_positions() if self.seed_demo else []
        try:
            return self.load()
        except PositionStoreError as exc:
            logger.warning("Could not load positions, starting fresh: %s", exc)
            return seed_positions() if self.seed_demo else []

    def save(self, positions: list[Position]) -> None:
        with self._lock:
            _write_json_atomic(self.path, [position_to_dict(item) for item in positions])
        logger.debug("Saved %d positions to %s", len(positions), self.path)

    def _mutate(self, change: Callable[[list[Position]], None]) -> list[Position]:
        with self._lock:
            # an unreadable file must not be overwritten by the seed
            positions = self.load() if self.path.exists() else self.load_or_seed()
            change(positions)
            self.save(positions)
            return positions

    def add(self, position: Position) -> list[Position]:
        return self._mutate(lambda positions: positions.append(position))

    def extend(self, new_positions: list[Position]) -> list[Position]:
        return self._mutate(lambda positions: positions.extend(new_positions))

    def update(self, index: int, position: Position) -> list[Position]:
        def _replace(positions: list[Position]) -> None:
            _check_index(positions, index)
            positions[index] = position

        return self._mutate(_replace)

    def delete(self, index: int) -> list[Position]:
        def _remove(positions: list[Position]) -> None:
            _check_index(positions, index)
            removed = positions.pop(index)
            logger.info("Deleted %s position at index %d", removed.ticker, index)

        return self._mutate(_remove)


def _check_index(positions: list[Position], index: int) -> None:
    if index < 0 or index >= len(positions):
        raise IndexError(f"No position at index {index} (have {len(positions)})")
