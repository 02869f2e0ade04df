"""
UI components and visualization helpers.
"""

from typing import Optional

import pandas as pd
import plotly.express as px
import streamlit as st

from config import COLOR_MAP, MODE_LABELS, NUM_COLUMNS, SEQUENCES_TO_WIN, SUIT_SYMBOLS
from models import GameState, Move, Stats
from analytics import stats_table


def print_rules() -> None:
    """Display the rules of the game."""
    st.markdown("### Rules")
    st.write("- 104 cards, 10 columns. Complete 8 King-to-Ace runs of one suit to win.")
    st.write("- Any card may go on a card one rank higher, regardless of suit.")
    st.write("- Several cards move together only as a same-suit descending run.")
    st.write("- Any card or run may fill an empty column.")
    st.write("- Dealing puts one card on every column and needs every column occupied.")
    st.info(
        "Each new layout is played out by a greedy simulator before it is shown. "
        "A layout that passes is likely, not guaranteed, to be winnable."
    )


def render_tableau(state: GameState, hint: Optional[Move] = None) -> None:
    """Plot the tableau using Plotly: x-axis is the column, cards stacked downwards."""
    rows = []
    for c, col in enumerate(state.columns):
        for i, card in enumerate(col):
            hinted = hint is not None and c == hint.source and i >= hint.index
            rows.append(
                {
                    "column": c,
                    "depth": -i,
                    "label": f"*{card}*" if hinted else str(card),
                    "suit": card.suit if card.face_up else "hidden",
                }
            )

    if not rows:
        st.info("The tableau is empty.")
        return

    df = pd.DataFrame(rows)
    fig = px.scatter(
        df,
        x="column",
        y="depth",
        text="label",
        color="suit",
        hover_name="label",
        color_discrete_map=COLOR_MAP,
    )
    fig.update_traces(
        marker=dict(size=34, symbol="square", line=dict(width=1, color="black"), opacity=0.25),
        textfont=dict(size=14),
    )
    fig.update_layout(
        xaxis=dict(dtick=1, range=[-0.5, NUM_COLUMNS - 0.5], title="Column"),
        yaxis=dict(visible=False),
        height=650,
        showlegend=False,
        margin=dict(l=10, r=10, t=30, b=10),
    )
    st.plotly_chart(fig, use_container_width=True)


def render_status(state: GameState, deals_remaining: int) -> None:
    col_mode, col_moves, col_done, col_stock = st.columns(4)
    col_mode.metric("Mode", MODE_LABELS.get(state.mode, str(state.mode)))
    col_moves.metric("Moves", state.move_count)
    col_done.metric("Completed", f"{state.completed_count}/{SEQUENCES_TO_WIN}")
    col_stock.metric("Deals left", deals_remaining)

    if state.completed_suits:
        st.write("Completed runs: " + " ".join(SUIT_SYMBOLS[s] for s in state.completed_suits))


def render_hint(state: GameState, move: Optional[Move], reason: Optional[str]) -> None:
    if move is None:
        if reason:
            st.warning(reason)
        return
    dest = state.columns[move.dest]
    target = str(dest[-1]) if dest else "the empty column"
    st.success(
        f"Hint: move {move.cards[0]} from column {move.source} "
        f"onto {target} in column {move.dest}"
    )


def render_stats_table(stats: Stats) -> None:
    """Render per-mode win/loss statistics."""
    st.markdown("#### Statistics")
    st.dataframe(stats_table(stats), use_container_width=True, hide_index=True)
    st.caption(f"Total moves across all games: {stats.total_moves}")


def render_deal_quality_table(df: pd.DataFrame, n_deals: int) -> None:
    st.markdown("#### Deal certification rates")
    st.dataframe(df, use_container_width=True, hide_index=True)
    st.caption(f"Estimated via Monte Carlo with {n_deals} deals per mode.")
