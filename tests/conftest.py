from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from roi_tracker.db.models import Position

FULL_HEADER = (
    "Symbol,Quantity,Date,Cost/Share $,Total Cost $,Date,Price/Share $,"
    "Proceeds $,Gain $,Deferred Loss $,Term,Lot Selection"
)


@pytest.fixture
def full_export_csv() -> str:
    return "\n".join(
        [
            '"Brokerage Account XXXX-1234",,,',
            '"Realized Gain/Loss as of 03/31/2024",,,',
            "",
            '"Taxable G&L Details",,,',
            FULL_HEADER,
            'AAPL,10,--,--,"$1,500.00",--,--,"$1,700.00",$200.00,--,--,--',
            '  Sell,5,01/02/2024,$140.00,$700.00,03/04/2024,$160.00,$800.00,$100.00,--,Short Term,FIFO',
            '  Sell,5,2024-02-01,$160.00,$800.00,2024-03-04,$180.00,$900.00,$100.00,--,Short Term,FIFO',
            'Total,,,,"$1,500.00",,,"$1,700.00",$200.00,,,',
        ]
    )


@pytest.fixture
def minimal_csv() -> str:
    return "\n".join(
        [
            "ticker,cost,qty,sale,purchase_date,sale_date",
            "GM,84.77,10,86.61,2026-01-27,2026-01-27",
            "NVDA,120.00,4,--,01/15/2026,--",
        ]
    )


@pytest.fixture
def closed_position() -> Position:
    return Position(
        ticker="AAPL",
        quantity=Decimal("40"),
        cost_per_share=Decimal("110.00"),
        purchase_date=date(2026, 1, 1),
        sale_price=Decimal("127.50"),
        sale_date=date(2026, 1, 13),
    )


@pytest.fixture
def open_position() -> Position:
    return Position(
        ticker="NVDA",
        quantity=Decimal("4"),
        cost_per_share=Decimal("120.00"),
        purchase_date=date(2026, 1, 15),
    )


@pytest.fixture
def isolated_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("ROI_TRACKER_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("ROI_TRACKER_DATA_FILE", raising=False)
    monkeypatch.setenv("ROI_TRACKER_SEED_DEMO", "false")
    return tmp_path
