from __future__ import annotations

import altair as alt
import pandas as pd
import streamlit as st

from roi_tracker.ui.streamlit.views.common import load_positions, selected_index
from roi_tracker.ui.tables import detail_lines, roi_timeline_frame


def roi_timeline_chart(frame: pd.DataFrame) -> alt.Chart:
    return (
        alt.Chart(frame)
        .mark_line(point=True, color="#9467bd")
        .encode(
            x=alt.X("days_held:Q", title="Days held"),
            y=alt.Y("roi_pct:Q", title="ROI %"),
        )
        .properties(title="ROI timeline")
    )


def render_page() -> None:
    st.header("Position detail")
    positions = load_positions()
    index = selected_index(positions)
    if index is None:
        st.info("No position selected")
        return

    position = positions[index]
    st.subheader(f"#{index + 1} {position.ticker}")
    st.table(pd.DataFrame(detail_lines(position), columns=["Field", "Value"]))
    if position.is_open:
        st.caption("Open position: PnL and ROI are pending until it is sold.")
        return
    st.altair_chart(roi_timeline_chart(roi_timeline_frame(position)), use_container_width=True)
