"""
Main Streamlit application.
"""

import logging

import streamlit as st

from config import DEAL_QUALITY_SAMPLES, LOG_LEVEL, MODE_LABELS, MODES, NUM_COLUMNS, SEQUENCES_TO_WIN
from models import DealRejected, GameLost, GameWon, MoveRejected, SequenceCompleted, UndoRejected
from engine import GameEngine
from analytics import deal_quality_table
from storage import load_game, load_stats, save_game, save_stats

from ui import (
    print_rules,
    render_deal_quality_table,
    render_hint,
    render_stats_table,
    render_status,
    render_tableau,
)

logger = logging.getLogger(__name__)


def persist(engine: GameEngine) -> None:
    save_game(engine.state)
    save_stats(engine.stats)


def show_events(engine: GameEngine) -> None:
    for event in engine.drain_events():
        if isinstance(event, SequenceCompleted):
            st.toast(f"Sequence complete! ({event.new_count}/{SEQUENCES_TO_WIN})")
        elif isinstance(event, GameWon):
            st.balloons()
            st.success(f"Completed in {event.final_move_count} moves!")
        elif isinstance(event, GameLost):
            st.error("No more moves, game over!")
        elif isinstance(event, (MoveRejected, DealRejected, UndoRejected)):
            st.warning(event.reason)


def run_app() -> None:
    """Run the main Streamlit application."""
    st.set_page_config(page_title="Spider Patience", layout="wide")
    st.title("Spider Patience")

    # Initialize session state
    if "engine" not in st.session_state:
        logging.basicConfig(level=LOG_LEVEL)
        saved = load_game()
        engine = GameEngine(state=saved, stats=load_stats())
        if saved is None:
            engine.new_game(1)
        else:
            logger.info("Resumed saved %d-suit game at move %d", saved.mode, saved.move_count)
        st.session_state["engine"] = engine
        st.session_state["hint"] = None
        st.session_state["hint_reason"] = None

    engine: GameEngine = st.session_state["engine"]
    state = engine.state

    with st.expander("Rules", expanded=False):
        print_rules()

    # Controls
    col_mode, col_new, col_deal, col_undo, col_hint = st.columns([1.4, 1, 1, 1, 1])

    with col_mode:
        mode = st.selectbox("Suits", MODES, format_func=MODE_LABELS.get, index=MODES.index(state.mode))

    with col_new:
        if st.button("🆕 New game"):
            with st.spinner("Finding a winnable deal..."):
                engine.new_game(mode)
            st.session_state["hint"] = None
            st.session_state["hint_reason"] = None
            persist(engine)

    with col_deal:
        if st.button("🂠 Deal"):
            engine.deal_from_stock()
            st.session_state["hint"] = None
            st.session_state["hint_reason"] = None
            persist(engine)

    with col_undo:
        if st.button("↩️ Undo"):
            engine.undo()
            st.session_state["hint"] = None
            st.session_state["hint_reason"] = None
            persist(engine)

    with col_hint:
        if st.button("💡 Hint"):
            st.session_state["hint"] = engine.hint()
            st.session_state["hint_reason"] = engine.last_reason
            persist(engine)

    # Move entry
    with st.form("move"):
        c_src, c_idx, c_dst, c_go, c_smart = st.columns(5)
        source = c_src.number_input("From column", 0, NUM_COLUMNS - 1, 0)
        index = c_idx.number_input("Card index", 0, 200, 0)
        dest = c_dst.number_input("To column", 0, NUM_COLUMNS - 1, 0)
        move_clicked = c_go.form_submit_button("Move")
        smart_clicked = c_smart.form_submit_button("Best move")

    if move_clicked:
        engine.execute_move(int(source), int(index), int(dest))
        st.session_state["hint"] = None
        st.session_state["hint_reason"] = None
        persist(engine)
    elif smart_clicked:
        engine.smart_move(int(source), int(index))
        st.session_state["hint"] = None
        st.session_state["hint_reason"] = None
        persist(engine)

    show_events(engine)

    # Layout: board + dashboards
    board_col, metrics_col = st.columns([2.2, 1])
    hint = st.session_state["hint"]

    with board_col:
        render_status(engine.state, engine.deals_remaining)
        render_hint(engine.state, hint, st.session_state["hint_reason"])
        render_tableau(engine.state, hint)

    with metrics_col:
        st.subheader("Dashboards")
        render_stats_table(engine.stats)
        if st.button("Estimate deal certification"):
            with st.spinner("Probing deals..."):
                df = deal_quality_table(DEAL_QUALITY_SAMPLES)
            render_deal_quality_table(df, DEAL_QUALITY_SAMPLES)


if __name__ == "__main__":
    run_app()
