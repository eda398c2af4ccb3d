from __future__ import annotations

from pathlib import Path

import pandas as pd
import streamlit as st

from roi_tracker.ingest.csv_mapping import MINIMAL_HEADER
from roi_tracker.ingest.positions_import import ImportOutcome, import_positions, import_positions_file
from roi_tracker.ui.streamlit.views.common import flash, get_store, render_flash
from roi_tracker.ui.tables import positions_dataframe

PENDING_IMPORT_SESSION_KEY = "pending_import_outcome"
FORMAT_HINT = (
    "Accepts broker gain/loss exports with a symbol/quantity/date/cost header, "
    f"or a six-column file in this order: {', '.join(MINIMAL_HEADER)}."
)


def outcome_summary(outcome: ImportOutcome) -> dict[str, object]:
    return {
        "Detected format": outcome.detected_schema.value,
        "Imported": outcome.imported,
        "Skipped": outcome.rows_skipped,
    }


def _read_outcome() -> ImportOutcome | None:
    uploaded = st.file_uploader("Broker CSV export", type=["csv"])
    path_text = st.text_input("Or a path on this machine", placeholder="~/Downloads/positions.csv")
    if not st.button("Parse CSV", type="primary"):
        return None
    if uploaded is not None:
        return import_positions(uploaded.getvalue())
    if not path_text.strip():
        st.warning("Choose a file or enter a path")
        return None
    try:
        return import_positions_file(Path(path_text.strip()))
    except OSError as exc:
        st.error(f"Import failed: {exc}")
        return None


def render_page() -> None:
    st.header("Import CSV")
    st.caption(FORMAT_HINT)
    render_flash()

    outcome = _read_outcome()
    if outcome is not None:
        st.session_state[PENDING_IMPORT_SESSION_KEY] = outcome
    outcome = st.session_state.get(PENDING_IMPORT_SESSION_KEY)
    if outcome is None:
        return

    c1, c2, c3 = st.columns(3)
    summary = outcome_summary(outcome)
    for column, (label, value) in zip((c1, c2, c3), summary.items()):
        column.metric(label, value)

    if outcome.issues:
        with st.expander(f"Row issues ({len(outcome.issues)})"):
            st.dataframe(pd.DataFrame({"issue": outcome.issues}), use_container_width=True, hide_index=True)

    if not outcome.positions:
        st.error(outcome.message)
        return

    st.dataframe(
        positions_dataframe(list(enumerate(outcome.positions))),
        use_container_width=True,
        hide_index=True,
    )
    if st.button(f"Add {outcome.imported} positions to portfolio"):
        get_store().extend(outcome.positions)
        st.session_state.pop(PENDING_IMPORT_SESSION_KEY, None)
        flash(outcome.message)
        st.rerun()
