"""Header detection for broker position exports.

Two layouts are recognized: the full brokerage "gains and losses" export,
whose columns are located by marker tokens in any order, and a minimal
six-column layout (``ticker,cost,qty,sale,purchase_date,sale_date``) that may
be given with or without a header row.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from roi_tracker.ingest.validators import is_missing, normalize_date, normalize_number, normalize_ticker


class Schema(str, Enum):
    FULL = "full"
    MINIMAL = "minimal"
    UNRECOGNIZED = "unrecognized"


MINIMAL_HEADER = ("ticker", "cost", "qty", "sale", "purchase_date", "sale_date")

SECTION_MARKER = "taxable g&l details"

_FIELD_ALIASES = {
    "ticker": {"symbol", "ticker"},
    "quantity": {"quantity", "qty", "qtynumber", "qtyshare", "qtyshares", "shares"},
    "cost_per_share": {"costshare", "costpershare"},
    "total_cost": {"totalcost", "costbasis"},
    "sale_price": {"priceshare", "pricepershare", "saleprice", "sellprice"},
    "proceeds": {"proceeds", "totalproceeds"},
    "purchase_date": {"dateacquired", "purchasedate", "buydate", "dateadded", "opendate"},
    "sale_date": {"datesold", "saledate", "selldate", "closedate"},
    "gain": {"gain", "gainloss"},
    "deferred_loss": {"deferredloss", "washsaledisallowed"},
    "term": {"term"},
    "lot_selection": {"lotselection"},
}

_GENERIC_DATE_KEYS = {"date"}


@dataclass(frozen=True)
class ColumnIndex:
    ticker: int
    quantity: int
    purchase_date: int
    cost_per_share: int | None = None
    total_cost: int | None = None
    sale_price: int | None = None
    proceeds: int | None = None
    sale_date: int | None = None


MINIMAL_COLUMNS = ColumnIndex(
    ticker=0,
    cost_per_share=1,
    quantity=2,
    sale_price=3,
    purchase_date=4,
    sale_date=5,
)


@dataclass(frozen=True)
class HeaderMatch:
    schema: Schema
    columns: ColumnIndex | None
    data_start: int
    header_row: int | None = None


def match_key(text: str) -> str:
    return "".join(ch for ch in str(text).strip().lower() if ch.isalnum())


def _trim_trailing_blanks(row: Sequence[str]) -> list[str]:
    cells = [str(cell).strip() for cell in row]
    while cells and not cells[-1]:
        cells.pop()
    return cells


def is_blank_row(row: Sequence[str]) -> bool:
    return not _trim_trailing_blanks(row)


def is_minimal_header(row: Sequence[str]) -> bool:
    cells = _trim_trailing_blanks(row)
    if len(cells) != len(MINIMAL_HEADER):
        return False
    return all(match_key(cell) == match_key(name) for cell, name in zip(cells, MINIMAL_HEADER))


def looks_like_minimal_data(row: Sequence[str]) -> bool:
    cells = _trim_trailing_blanks(row)
    # an open position may leave the trailing sale date blank
    if len(cells) not in (len(MINIMAL_HEADER) - 1, len(MINIMAL_HEADER)):
        return False
    cells += [""] * (len(MINIMAL_HEADER) - len(cells))
    ticker, cost, qty, sale, bought, sold = cells
    if normalize_ticker(ticker) is None:
        return False
    if normalize_number(cost) is None or normalize_number(qty) is None:
        return False
    if not is_missing(sale) and normalize_number(sale) is None:
        return False
    if normalize_date(bought) is None:
        return False
    return is_missing(sold) or normalize_date(sold) is not None


def index_full_header(row: Sequence[str]) -> ColumnIndex | None:
    found: dict[str, int] = {}
    generic_dates: list[int] = []

    for position, cell in enumerate(row):
        key = match_key(cell)
        if not key:
            continue
        if key in _GENERIC_DATE_KEYS:
            generic_dates.append(position)
            continue
        for field, aliases in _FIELD_ALIASES.items():
            if key in aliases and field not in found:
                found[field] = position
                break

    if "purchase_date" not in found and generic_dates:
        found["purchase_date"] = generic_dates.pop(0)
    if "sale_date" not in found and generic_dates:
        found["sale_date"] = generic_dates.pop(0)

    if not {"ticker", "quantity", "purchase_date"}.issubset(found):
        return None
    if "cost_per_share" not in found and "total_cost" not in found:
        return None

    return ColumnIndex(
        ticker=found["ticker"],
        quantity=found["quantity"],
        purchase_date=found["purchase_date"],
        cost_per_share=found.get("cost_per_share"),
        total_cost=found.get("total_cost"),
        sale_price=found.get("sale_price"),
        proceeds=found.get("proceeds"),
        sale_date=found.get("sale_date"),
    )


def classify(header_row: Sequence[str]) -> Schema:
    """Decide which layout a candidate header row belongs to."""
    if is_minimal_header(header_row):
        return Schema.MINIMAL
    if index_full_header(header_row) is not None:
        return Schema.FULL
    if looks_like_minimal_data(header_row):
        return Schema.MINIMAL
    return Schema.UNRECOGNIZED


def _section_start(rows: Sequence[Sequence[str]]) -> int:
    for position, row in enumerate(rows):
        joined = " ".join(str(cell) for cell in row).lower()
        if SECTION_MARKER in joined:
            return position + 1
    return 0


def locate_header(rows: Sequence[Sequence[str]]) -> HeaderMatch:
    """Find the header row in ``rows`` and classify the file.

    Preamble lines before the header are skipped. When the export contains a
    gains-and-losses details section, the search starts after its title row.
    A headerless minimal file is only accepted when its first non-blank row
    is already valid data.
    """
    start = _section_start(rows)
    first_content_row = True

    for position in range(start, len(rows)):
        row = rows[position]
        if is_blank_row(row):
            continue

        if is_minimal_header(row):
            return HeaderMatch(
                schema=Schema.MINIMAL,
                columns=MINIMAL_COLUMNS,
                data_start=position + 1,
                header_row=position,
            )

        full_columns = index_full_header(row)
        if full_columns is not None:
            return HeaderMatch(
                schema=Schema.FULL,
                columns=full_columns,
                data_start=position + 1,
                header_row=position,
            )

        if first_content_row and looks_like_minimal_data(row):
            return HeaderMatch(
                schema=Schema.MINIMAL,
                columns=MINIMAL_COLUMNS,
                data_start=position,
            )
        first_content_row = False

    return HeaderMatch(schema=Schema.UNRECOGNIZED, columns=None, data_start=len(rows))
