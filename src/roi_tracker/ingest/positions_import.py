"""CSV import pipeline for broker position exports."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Callable

from roi_tracker.db.models import Position
from roi_tracker.ingest.csv_mapping import (
    ColumnIndex,
    HeaderMatch,
    Schema,
    is_blank_row,
    locate_header,
)
from roi_tracker.ingest.validators import is_missing, normalize_date, normalize_number, normalize_ticker
from roi_tracker.utils.logging import get_logger

logger = get_logger(__name__)

SELL_MARKER = "SELL"
TOTAL_MARKERS = {"total", "subtotal"}
PER_SHARE = Decimal("0.0001")


@dataclass(frozen=True)
class ImportOutcome:
    positions: list[Position]
    rows_skipped: int
    detected_schema: Schema
    issues: list[str] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.positions)

    @property
    def reason(self) -> str | None:
        if self.positions:
            return None
        if self.detected_schema == Schema.UNRECOGNIZED:
            return "unrecognized format"
        if self.rows_skipped:
            return "every position row was skipped"
        return "no position rows matched"

    @property
    def message(self) -> str:
        if self.reason is not None:
            return f"No rows found to import ({self.reason})"
        return f"Imported {self.imported} positions, {self.rows_skipped} skipped"


@dataclass(frozen=True)
class MappedRows:
    positions: list[Position]
    rows_skipped: int
    issues: list[str]


@dataclass(frozen=True)
class _LotCells:
    ticker: str
    quantity: str
    cost_per_share: str
    purchase_date: str
    sale_price: str = ""
    sale_date: str = ""
    total_cost: str = ""
    proceeds: str = ""


class _RowDefect(ValueError):
    pass


def _cell(row: Sequence[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return str(row[index]).strip()


def _full_row_cells(row: Sequence[str], columns: ColumnIndex) -> _LotCells:
    return _LotCells(
        ticker=_cell(row, columns.ticker),
        quantity=_cell(row, columns.quantity),
        cost_per_share=_cell(row, columns.cost_per_share),
        purchase_date=_cell(row, columns.purchase_date),
        sale_price=_cell(row, columns.sale_price),
        sale_date=_cell(row, columns.sale_date),
        total_cost=_cell(row, columns.total_cost),
        proceeds=_cell(row, columns.proceeds),
    )


def _minimal_row_cells(row: Sequence[str], columns: ColumnIndex) -> _LotCells:
    return _LotCells(
        ticker=_cell(row, columns.ticker),
        quantity=_cell(row, columns.quantity),
        cost_per_share=_cell(row, columns.cost_per_share),
        purchase_date=_cell(row, columns.purchase_date),
        sale_price=_cell(row, columns.sale_price),
        sale_date=_cell(row, columns.sale_date),
    )


_ROW_READERS: dict[Schema, Callable[[Sequence[str], ColumnIndex], _LotCells]] = {
    Schema.FULL: _full_row_cells,
    Schema.MINIMAL: _minimal_row_cells,
}


def _is_total_row(row: Sequence[str]) -> bool:
    cells = [str(cell).strip().lower() for cell in row if str(cell).strip()]
    if not cells:
        return False
    if cells[0] in TOTAL_MARKERS:
        return True
    return len(cells) == 1 and any(marker in cells[0] for marker in TOTAL_MARKERS)


def _money(raw: str, label: str) -> Decimal | None:
    if is_missing(raw):
        return None
    value = normalize_number(raw)
    if value is None:
        raise _RowDefect(f"invalid {label} '{raw}'")
    if value < 0:
        raise _RowDefect(f"{label} cannot be negative")
    return value


def _optional_money(raw: str, label: str, notes: list[str]) -> Decimal | None:
    try:
        return _money(raw, label)
    except _RowDefect as exc:
        notes.append(str(exc))
        return None


def _per_share(total: Decimal, quantity: Decimal) -> Decimal:
    return (total / quantity).quantize(PER_SHARE, rounding=ROUND_HALF_UP)


def _build_position(ticker: str, cells: _LotCells, notes: list[str]) -> Position:
    quantity = normalize_number(cells.quantity)
    if quantity is None:
        raise _RowDefect(f"missing or invalid quantity '{cells.quantity}'")
    quantity = abs(quantity)
    if quantity == 0:
        raise _RowDefect("quantity must be greater than zero")

    purchase_date = normalize_date(cells.purchase_date)
    if purchase_date is None:
        raise _RowDefect(f"missing or invalid purchase date '{cells.purchase_date}'")

    cost_per_share = _money(cells.cost_per_share, "cost/share")
    total_cost = _money(cells.total_cost, "total cost")
    if cost_per_share is None and total_cost is None:
        raise _RowDefect("missing cost")
    if cost_per_share is None:
        cost_per_share = _per_share(total_cost, quantity)

    sale_price = _optional_money(cells.sale_price, "sale price", notes)
    total_proceeds = _optional_money(cells.proceeds, "proceeds", notes)
    if sale_price is None and total_proceeds is not None:
        sale_price = _per_share(total_proceeds, quantity)

    sale_date: date | None = None
    if not is_missing(cells.sale_date):
        sale_date = normalize_date(cells.sale_date)
        if sale_date is None:
            notes.append(f"invalid sale date '{cells.sale_date}'")

    if sale_date is None or sale_price is None:
        if sale_date is not None or sale_price is not None:
            notes.append("incomplete sale data, imported as open position")
        sale_date = None
        sale_price = None
        total_proceeds = None

    return Position(
        ticker=ticker,
        quantity=quantity,
        cost_per_share=cost_per_share,
        purchase_date=purchase_date,
        sale_price=sale_price,
        sale_date=sale_date,
        total_cost=total_cost,
        total_proceeds=total_proceeds,
    )


def map_rows(rows: Sequence[Sequence[str]], match: HeaderMatch) -> MappedRows:
    """Fold data rows into positions, carrying the current ticker between rows.

    Summary rows name a ticker; lot rows (``Sell`` rows or rows carrying a
    quantity and purchase date) become positions. A lot row without its own
    ticker inherits the most recent one. Defective lot rows are counted and
    described in ``issues`` instead of aborting the scan.
    """
    if match.schema == Schema.UNRECOGNIZED or match.columns is None:
        return MappedRows(positions=[], rows_skipped=0, issues=[])

    read_cells = _ROW_READERS[match.schema]
    current_ticker: str | None = None
    positions: list[Position] = []
    issues: list[str] = []
    skipped = 0

    for line_number, row in enumerate(rows[match.data_start :], start=match.data_start + 1):
        if is_blank_row(row) or _is_total_row(row):
            continue

        cells = read_cells(row, match.columns)
        ticker_token = normalize_ticker(cells.ticker)
        is_sell_row = ticker_token is not None and (
            ticker_token == SELL_MARKER or ticker_token.startswith(f"{SELL_MARKER} ")
        )
        own_ticker = None if is_sell_row else ticker_token
        has_lot_data = not is_missing(cells.quantity) and not is_missing(cells.purchase_date)
        if match.schema == Schema.FULL and not is_sell_row and normalize_date(cells.purchase_date) is None:
            # summary rows carry placeholders such as "Various" in the date column
            has_lot_data = False

        if own_ticker is not None:
            current_ticker = own_ticker
        if not is_sell_row and not has_lot_data:
            continue

        ticker = own_ticker or current_ticker
        if ticker is None:
            skipped += 1
            issues.append(f"Row {line_number}: skipped lot row with no ticker to inherit")
            continue

        notes: list[str] = []
        try:
            position = _build_position(ticker, cells, notes)
        except _RowDefect as exc:
            skipped += 1
            issues.append(f"Row {line_number}: skipped {ticker} lot, {exc}")
            continue

        issues.extend(f"Row {line_number}: {note}" for note in notes)
        positions.append(position)

    return MappedRows(positions=positions, rows_skipped=skipped, issues=issues)


def read_csv_rows(file_contents: str | bytes) -> list[list[str]]:
    if isinstance(file_contents, bytes):
        text = file_contents.decode("utf-8-sig", errors="replace")
    else:
        text = file_contents.lstrip("\ufeff")
    reader = csv.reader(io.StringIO(text, newline=""), skipinitialspace=True)
    return [[cell.strip() for cell in row] for row in reader]


def import_positions(file_contents: str | bytes) -> ImportOutcome:
    try:
        rows = read_csv_rows(file_contents)
    except csv.Error as exc:
        logger.warning("CSV could not be tokenized: %s", exc)
        return ImportOutcome(
            positions=[],
            rows_skipped=0,
            detected_schema=Schema.UNRECOGNIZED,
            issues=[f"CSV parse error: {exc}"],
        )

    match = locate_header(rows)
    if match.schema == Schema.UNRECOGNIZED:
        logger.info("No recognizable header in %d rows", len(rows))
        return ImportOutcome(
            positions=[],
            rows_skipped=0,
            detected_schema=Schema.UNRECOGNIZED,
            issues=["No recognizable header row"],
        )

    mapped = map_rows(rows, match)
    logger.info(
        "Imported %d positions from %s export (%d skipped)",
        len(mapped.positions),
        match.schema.value,
        mapped.rows_skipped,
    )
    for issue in mapped.issues:
        logger.debug(issue)
    return ImportOutcome(
        positions=mapped.positions,
        rows_skipped=mapped.rows_skipped,
        detected_schema=match.schema,
        issues=mapped.issues,
    )


def import_positions_file(path: str | Path) -> ImportOutcome:
    return import_positions(Path(path).expanduser().read_bytes())
