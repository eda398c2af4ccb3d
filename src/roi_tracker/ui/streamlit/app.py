from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# app.py -> streamlit -> ui -> roi_tracker -> src
SRC_ROOT = Path(__file__).resolve().parents[3]
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from roi_tracker.config.settings import get_settings
from roi_tracker.ui.streamlit.views import detail, help_page, import_csv, portfolio, position_form
from roi_tracker.utils.logging import configure_logging

NAV_ITEMS = [
    "Portfolio",
    "Detail",
    "Add / Edit",
    "Import CSV",
    "Help",
]

PAGE_RENDERERS = {
    "Portfolio": portfolio.render_page,
    "Detail": detail.render_page,
    "Add / Edit": position_form.render_page,
    "Import CSV": import_csv.render_page,
    "Help": help_page.render_page,
}


def _render_sidebar() -> str:
    if st.session_state.get("nav_item") not in NAV_ITEMS:
        st.session_state["nav_item"] = NAV_ITEMS[0]
    with st.sidebar:
        st.title("ROI Tracker")
        return st.radio("Navigate", NAV_ITEMS, key="nav_item")


def main() -> None:
    st.set_page_config(page_title="ROI Tracker", layout="wide")
    configure_logging(get_settings().log_level)
    nav = _render_sidebar()
    PAGE_RENDERERS[nav]()


if __name__ == "__main__":
    main()
