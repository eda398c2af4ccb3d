from __future__ import annotations

import altair as alt
import pandas as pd
import streamlit as st

from roi_tracker.analytics.summary import filter_positions, portfolio_stats
from roi_tracker.db.models import Position
from roi_tracker.ui.streamlit.views.common import (
    FILTER_SESSION_KEY,
    SELECTED_SESSION_KEY,
    load_positions,
    money,
    selected_index,
)
from roi_tracker.ui.tables import display_dataframe, roi_chart_frame
from roi_tracker.utils.money import format_percent


def roi_scatter_chart(frame: pd.DataFrame) -> alt.Chart:
    return (
        alt.Chart(frame)
        .mark_circle(size=90)
        .encode(
            x=alt.X("pos:Q", title="Position", axis=alt.Axis(tickMinStep=1)),
            y=alt.Y("roi_pct:Q", title="ROI %"),
            color=alt.condition(
                alt.datum.roi_pct >= 0,
                alt.value("#2ca02c"),
                alt.value("#d62728"),
            ),
            tooltip=["pos", "ticker", alt.Tooltip("roi_pct:Q", format="+.2f"), "days_held"],
        )
        .properties(title="ROI % by position")
    )


def position_option_label(index: int, position: Position) -> str:
    return f"#{index + 1} {position.ticker}"


def render_header(positions: list[Position]) -> None:
    stats = portfolio_stats(positions)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Invested", money(stats.total_invested))
    c2.metric("Proceeds", money(stats.total_proceeds))
    c3.metric("ROI", format_percent(stats.roi_percent))
    c4.metric("Open positions", stats.open_positions)


def render_page() -> None:
    st.header("Positions")
    positions = load_positions()
    render_header(positions)

    filter_text = st.text_input("Filter by ticker", key=FILTER_SESSION_KEY)
    selected = filter_positions(positions, filter_text)
    if not selected:
        st.info("No positions match the filter." if filter_text else "No positions yet. Add one or import a CSV.")
        return

    left, right = st.columns([52, 48])
    with left:
        st.dataframe(display_dataframe(selected), use_container_width=True, hide_index=True)
    with right:
        chart_frame = roi_chart_frame(selected)
        if chart_frame.empty:
            st.caption("ROI chart appears once a position is closed.")
        else:
            st.altair_chart(roi_scatter_chart(chart_frame), use_container_width=True)

    indices = [index for index, _ in selected]
    current = selected_index(positions)
    if current not in indices:
        current = indices[0]
    choice = st.selectbox(
        "Selected position",
        indices,
        index=indices.index(current),
        format_func=lambda index: position_option_label(index, positions[index]),
    )
    st.session_state[SELECTED_SESSION_KEY] = choice
