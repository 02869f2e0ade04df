"""
Saved game and stats persistence.
"""
import json
import random

import pytest

from analytics import record_loss, record_win
from engine import GameEngine
from models import GamePhase, Stats
from storage import (
    load_game,
    load_stats,
    save_game,
    save_stats,
    state_from_dict,
    state_to_dict,
)
from conftest import make_state


@pytest.fixture
def played_engine(small_budget):
    engine = GameEngine(rng=random.Random(8))
    engine.new_game(2)
    for _ in range(5):
        move = engine.hint()
        if move is None:
            break
        engine.execute_move(move.source, move.index, move.dest)
    return engine


def test_round_trip_through_file(tmp_path, played_engine):
    path = tmp_path / "state.json"
    save_game(played_engine.state, path)
    loaded = load_game(path)
    original = played_engine.state
    assert loaded.columns == original.columns
    assert loaded.stock == original.stock
    assert loaded.completed_count == original.completed_count
    assert loaded.completed_suits == original.completed_suits
    assert loaded.move_count == original.move_count
    assert loaded.mode == original.mode
    assert loaded.phase is original.phase
    assert loaded.undo_stack == []


def test_dict_round_trip_is_lossless(played_engine):
    data = state_to_dict(played_engine.state)
    assert state_to_dict(state_from_dict(json.loads(json.dumps(data)))) == data


def test_game_over_flag_restores_phase():
    won = make_state([], completed=8)
    assert won.card_count() == 0
    won.phase = GamePhase.GAME_WON
    assert state_from_dict(state_to_dict(won)).phase is GamePhase.GAME_WON


def test_missing_file_is_no_saved_game(tmp_path):
    assert load_game(tmp_path / "nothing.json") is None


@pytest.mark.parametrize(
    "payload",
    [
        "not json at all",
        "[]",
        json.dumps({"tableau": []}),
    ],
)
def test_malformed_file_is_no_saved_game(tmp_path, payload):
    path = tmp_path / "state.json"
    path.write_text(payload, encoding="utf-8")
    assert load_game(path) is None


def test_inconsistent_state_is_rejected(tmp_path, played_engine):
    data = state_to_dict(played_engine.state)
    data["stock"] = data["stock"][:-1]
    path = tmp_path / "state.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    assert load_game(path) is None

    data = state_to_dict(played_engine.state)
    data["tableau"][0][0]["suit"] = "stars"
    path.write_text(json.dumps(data), encoding="utf-8")
    assert load_game(path) is None


def test_stats_round_trip(tmp_path):
    stats = Stats(total_moves=120)
    record_win(stats, 1, 90)
    record_win(stats, 4, 150)
    record_loss(stats, 2)
    path = tmp_path / "stats.json"
    save_stats(stats, path)
    assert load_stats(path) == stats


def test_unreadable_stats_start_fresh(tmp_path):
    path = tmp_path / "stats.json"
    path.write_text("{broken", encoding="utf-8")
    assert load_stats(path) == Stats()
    assert load_stats(tmp_path / "missing.json") == Stats()


@pytest.mark.parametrize(
    "payload",
    [
        {"bestWin": "abc"},
        {"bestWin": True},
        {"byMode": {"2": {"gamesWon": 1, "bestWin": [3]}}},
    ],
)
def test_stats_with_bad_best_win_start_fresh(tmp_path, payload):
    path = tmp_path / "stats.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    stats = load_stats(path)
    assert stats == Stats()
    record_win(stats, 1, 10)
    assert stats.best_win == 10


def test_suits_outside_mode_are_rejected(tmp_path, played_engine):
    path = tmp_path / "state.json"
    data = state_to_dict(played_engine.state)
    card = data["tableau"][0][0]
    # a 2-suit game only uses spades and hearts
    card["suit"] = "clubs"
    path.write_text(json.dumps(data), encoding="utf-8")
    assert load_game(path) is None

    won = make_state([], completed=8, suits=["spades"] * 7 + ["stars"])
    with pytest.raises(ValueError):
        state_from_dict(state_to_dict(won))
    won = make_state([], completed=8, suits=["spades"] * 7 + ["clubs"], mode=1)
    with pytest.raises(ValueError):
        state_from_dict(state_to_dict(won))
