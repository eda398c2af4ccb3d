from __future__ import annotations

import streamlit as st

from roi_tracker.db.models import Position, PositionValidationError, build_position, carry_totals
from roi_tracker.ui.streamlit.views.common import (
    EDITING_SESSION_KEY,
    SELECTED_SESSION_KEY,
    flash,
    get_store,
    load_positions,
    render_flash,
)
from roi_tracker.utils.dates import format_date
from roi_tracker.utils.money import format_quantity

FORM_FIELDS = ("ticker", "cost_per_share", "quantity", "sale_price", "purchase_date", "sale_date")


def form_defaults(position: Position | None) -> dict[str, str]:
    """Text values that prefill the form; blank when adding a new position."""
    if position is None:
        return {name: "" for name in FORM_FIELDS}
    return {
        "ticker": position.ticker,
        "cost_per_share": str(position.cost_per_share),
        "quantity": format_quantity(position.quantity),
        "sale_price": "" if position.sale_price is None else str(position.sale_price),
        "purchase_date": format_date(position.purchase_date),
        "sale_date": format_date(position.sale_date, missing=""),
    }


def _editing_target(positions: list[Position]) -> int | None:
    options: list[int | None] = [None, *range(len(positions))]
    current = st.session_state.get(EDITING_SESSION_KEY)
    if current not in options:
        current = None
    return st.selectbox(
        "Position",
        options,
        index=options.index(current),
        format_func=lambda index: "New position" if index is None else f"#{index + 1} {positions[index].ticker}",
        key=EDITING_SESSION_KEY,
    )


def render_page() -> None:
    st.header("Add or edit a position")
    render_flash()
    store = get_store()
    positions = load_positions()
    target = _editing_target(positions)
    defaults = form_defaults(None if target is None else positions[target])
    form_key = f"position_form_{'new' if target is None else target}"

    with st.form(form_key):
        c1, c2, c3 = st.columns(3)
        ticker = c1.text_input("Ticker", value=defaults["ticker"])
        cost = c2.text_input("Cost/share", value=defaults["cost_per_share"])
        quantity = c3.text_input("Quantity", value=defaults["quantity"])
        c4, c5, c6 = st.columns(3)
        purchase_date = c4.text_input("Purchase date", value=defaults["purchase_date"], placeholder="YYYY-MM-DD")
        sale_price = c5.text_input("Sale price", value=defaults["sale_price"], help="Leave blank for an open position")
        sale_date = c6.text_input("Sale date", value=defaults["sale_date"], placeholder="YYYY-MM-DD")
        submitted = st.form_submit_button("Save position", type="primary")

    if submitted:
        try:
            position = build_position(
                ticker=ticker,
                cost_per_share=cost,
                quantity=quantity,
                sale_price=sale_price,
                purchase_date=purchase_date,
                sale_date=sale_date,
            )
        except PositionValidationError as exc:
            st.error(str(exc))
        else:
            if target is None:
                saved = store.add(position)
                st.session_state[SELECTED_SESSION_KEY] = len(saved) - 1
                flash(f"Added {position.ticker}")
            else:
                store.update(target, carry_totals(positions[target], position))
                st.session_state[SELECTED_SESSION_KEY] = target
                flash(f"Updated #{target + 1} {position.ticker}")
            st.rerun()

    if target is not None:
        st.divider()
        confirm = st.checkbox(f"Confirm deleting #{target + 1} {positions[target].ticker}")
        if st.button("Delete position", disabled=not confirm):
            removed = positions[target]
            store.delete(target)
            st.session_state.pop(EDITING_SESSION_KEY, None)
            st.session_state.pop(SELECTED_SESSION_KEY, None)
            flash(f"Deleted {removed.ticker}")
            st.rerun()
