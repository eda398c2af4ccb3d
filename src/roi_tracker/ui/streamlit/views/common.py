from __future__ import annotations

import streamlit as st

from roi_tracker.db.models import Position
from roi_tracker.db.repository import PositionStore
from roi_tracker.utils.money import format_currency

SELECTED_SESSION_KEY = "selected_position_index"
FILTER_SESSION_KEY = "ticker_filter"
EDITING_SESSION_KEY = "editing_position_index"
FLASH_SESSION_KEY = "flash_message"


@st.cache_resource
def get_store() -> PositionStore:
    return PositionStore.default()


def load_positions() -> list[Position]:
    return get_store().load_or_seed()


def money(value) -> str:
    return format_currency(value)


def selected_index(positions: list[Position]) -> int | None:
    if not positions:
        return None
    current = st.session_state.get(SELECTED_SESSION_KEY)
    if not isinstance(current, int) or current >= len(positions) or current < 0:
        current = len(positions) - 1
        st.session_state[SELECTED_SESSION_KEY] = current
    return current


def flash(message: str) -> None:
    st.session_state[FLASH_SESSION_KEY] = message


def render_flash() -> None:
    message = st.session_state.pop(FLASH_SESSION_KEY, None)
    if message:
        st.success(message)
