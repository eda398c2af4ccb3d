from __future__ import annotations

import streamlit as st

from roi_tracker.config.settings import get_settings

HELP_TEXT = """
**Portfolio** lists every position with PnL, ROI and days held. Open positions
show *pending* until a sale price and date are recorded. The Avg row averages
closed positions; the Total row sums PnL and days held.

**Detail** shows the selected position with annualized ROI and a timeline.

**Add / Edit** validates input before saving: quantity must be positive, prices
cannot be negative, and a sale needs both a price and a date.

**Import** reads broker gain/loss exports. Summary rows set the ticker for the
`Sell` lot rows beneath them; rows that cannot be parsed are skipped and listed.

Dates accept `YYYY-MM-DD` or `MM/DD/YYYY`.
"""


def render_page() -> None:
    st.header("Help")
    st.markdown(HELP_TEXT)
    settings = get_settings()
    st.caption(f"Data file: {settings.positions_path}")
