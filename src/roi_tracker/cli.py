from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

from roi_tracker.analytics.summary import filter_positions, portfolio_stats
from roi_tracker.config.settings import get_settings
from roi_tracker.db.models import Position, PositionValidationError, build_position, carry_totals
from roi_tracker.db.repository import PositionStore, PositionStoreError
from roi_tracker.ingest.positions_import import import_positions_file
from roi_tracker.ui.tables import detail_lines, display_dataframe
from roi_tracker.utils.dates import format_date
from roi_tracker.utils.logging import configure_logging
from roi_tracker.utils.money import format_currency, format_percent

APP_PATH = Path(__file__).resolve().parent / "ui/streamlit/app.py"


def _store(args: argparse.Namespace) -> PositionStore:
    if args.data_file:
        return PositionStore(args.data_file, seed_demo=False)
    return PositionStore.default()


def _position_index(positions: list[Position], number: int) -> int:
    index = number - 1
    if index < 0 or index >= len(positions):
        raise SystemExit(f"No position #{number} (have {len(positions)})")
    return index


def _cmd_list(args: argparse.Namespace) -> int:
    positions = _store(args).load_or_seed()
    selected = filter_positions(positions, args.filter)
    if not selected:
        print("No positions match." if args.filter else "No positions yet.")
        return 0
    print(display_dataframe(selected).to_string(index=False))
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    positions = _store(args).load_or_seed()
    position = positions[_position_index(positions, args.number)]
    width = max(len(label) for label, _ in detail_lines(position))
    for label, value in detail_lines(position):
        print(f"{label.ljust(width)}  {value}")
    return 0


def _cmd_add(args: argparse.Namespace) -> int:
    try:
        position = build_position(
            args.ticker, args.cost, args.qty, args.sale, args.bought, args.sold
        )
    except PositionValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    positions = _store(args).add(position)
    print(f"Added {position.ticker} as #{len(positions)}")
    return 0


def _cmd_edit(args: argparse.Namespace) -> int:
    store = _store(args)
    positions = store.load_or_seed()
    index = _position_index(positions, args.number)
    current = positions[index]

    def _pick(override: str | None, existing: object) -> str:
        if override is not None:
            return override
        if existing is None:
            return ""
        return format_date(existing) if hasattr(existing, "isoformat") else str(existing)

    try:
        updated = build_position(
            _pick(args.ticker, current.ticker),
            _pick(args.cost, current.cost_per_share),
            _pick(args.qty, current.quantity),
            _pick(args.sale, current.sale_price),
            _pick(args.bought, current.purchase_date),
            _pick(args.sold, current.sale_date),
        )
    except PositionValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    store.update(index, carry_totals(current, updated))
    print(f"Updated #{args.number} ({updated.ticker})")
    return 0


def _cmd_delete(args: argparse.Namespace) -> int:
    store = _store(args)
    positions = store.load_or_seed()
    index = _position_index(positions, args.number)
    ticker = positions[index].ticker
    store.delete(index)
    print(f"Deleted #{args.number} ({ticker})")
    return 0


def _cmd_import(args: argparse.Namespace) -> int:
    if not str(args.path).strip():
        print("error: Path cannot be empty", file=sys.stderr)
        return 2
    path = Path(args.path).expanduser()
    try:
        outcome = import_positions_file(path)
    except OSError as exc:
        print(f"error: Failed to read {path}: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        for issue in outcome.issues:
            print(f"  {issue}")
    if not outcome.positions:
        print(f"error: {outcome.message}", file=sys.stderr)
        return 1

    _store(args).extend(outcome.positions)
    print(outcome.message)
    return 0


def _cmd_summary(args: argparse.Namespace) -> int:
    stats = portfolio_stats(_store(args).load_or_seed())
    print(f"invested  {format_currency(stats.total_invested)}")
    print(f"proceeds  {format_currency(stats.total_proceeds)}")
    print(f"ROI       {format_percent(stats.roi_percent)}")
    print(f"closed    {stats.closed_positions}")
    print(f"open      {stats.open_positions}")
    return 0


def _cmd_paths(args: argparse.Namespace) -> int:
    store = _store(args)
    print(f"POSITIONS_FILE={store.path}")
    print(f"EXISTS={store.exists()}")
    return 0


def _cmd_run_app(_: argparse.Namespace) -> int:
    cmd = ["streamlit", "run", str(APP_PATH)]
    return subprocess.call(cmd)


def _add_position_fields(parser: argparse.ArgumentParser, *, required: bool) -> None:
    parser.add_argument("--ticker", required=required, help="Ticker symbol, e.g. AAPL")
    parser.add_argument("--cost", required=required, help="Cost per share, e.g. 112.40")
    parser.add_argument("--qty", required=required, help="Quantity, e.g. 50")
    parser.add_argument("--bought", required=required, help="Purchase date, YYYY-MM-DD or MM/DD/YYYY")
    # add: blank sale fields record an open position; edit: None keeps the stored value
    sale_default = "" if required else None
    parser.add_argument("--sale", default=sale_default, help="Sale price per share")
    parser.add_argument("--sold", default=sale_default, help="Sale date")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Offline ROI tracker for trading positions")
    parser.add_argument(
        "--data-file",
        default=None,
        help="Positions JSON file (defaults to ROI_TRACKER_DATA_FILE or the data directory).",
    )
    parser.add_argument("--log-level", default=None, help="Logging level, e.g. DEBUG.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sp_list = subparsers.add_parser("list", help="List positions with PnL and ROI")
    sp_list.add_argument("--filter", default="", help="Case-insensitive ticker filter.")
    sp_list.set_defaults(func=_cmd_list)

    sp_show = subparsers.add_parser("show", help="Show one position in detail")
    sp_show.add_argument("number", type=int, help="Position number as shown by `list`.")
    sp_show.set_defaults(func=_cmd_show)

    sp_add = subparsers.add_parser("add", help="Add a position")
    _add_position_fields(sp_add, required=True)
    sp_add.set_defaults(func=_cmd_add)

    sp_edit = subparsers.add_parser("edit", help="Edit a position")
    sp_edit.add_argument("number", type=int, help="Position number as shown by `list`.")
    _add_position_fields(sp_edit, required=False)
    sp_edit.set_defaults(func=_cmd_edit)

    sp_delete = subparsers.add_parser("delete", help="Delete a position")
    sp_delete.add_argument("number", type=int, help="Position number as shown by `list`.")
    sp_delete.set_defaults(func=_cmd_delete)

    sp_import = subparsers.add_parser("import", help="Import positions from a broker CSV export")
    sp_import.add_argument("path", help="CSV file to import.")
    sp_import.add_argument("-v", "--verbose", action="store_true", help="Print row issues.")
    sp_import.set_defaults(func=_cmd_import)

    sp_summary = subparsers.add_parser("summary", help="Print portfolio totals")
    sp_summary.set_defaults(func=_cmd_summary)

    sp_paths = subparsers.add_parser("paths", help="Print configured data paths")
    sp_paths.set_defaults(func=_cmd_paths)

    sp_run = subparsers.add_parser("run-app", help="Run Streamlit app")
    sp_run.set_defaults(func=_cmd_run_app)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level or get_settings().log_level)
    try:
        return args.func(args)
    except PositionStoreError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
