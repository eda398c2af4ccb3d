"""Date helpers shared by metrics and presentation."""

from __future__ import annotations

from datetime import date

DATE_FMT = "%Y-%m-%d"


def today() -> date:
    return date.today()


def format_date(value: date | None, *, missing: str = "--") -> str:
    if value is None:
        return missing
    return value.strftime(DATE_FMT)
