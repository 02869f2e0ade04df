"""Shared helpers for building hand-made layouts."""
from typing import List

import pytest

import config
from models import Card, GameState


def up(suit: str, rank: int) -> Card:
    return Card(suit, rank, True)


def down(suit: str, rank: int) -> Card:
    return Card(suit, rank, False)


def run(suit: str, high: int, low: int) -> List[Card]:
    """Face-up same-suit run from `high` down to `low`."""
    return [up(suit, r) for r in range(high, low - 1, -1)]


def make_state(columns, stock=None, completed=0, suits=None, mode=1) -> GameState:
    columns = [list(col) for col in columns]
    columns += [[] for _ in range(config.NUM_COLUMNS - len(columns))]
    return GameState(
        columns=columns,
        stock=list(stock or []),
        completed_count=completed,
        completed_suits=list(suits if suits is not None else ["spades"] * completed),
        mode=mode,
    )


def kings(n: int, suit: str = "clubs") -> List[List[Card]]:
    """`n` columns each holding a lone face-up King, which can never move."""
    return [[up(suit, 13)] for _ in range(n)]


@pytest.fixture
def small_budget(monkeypatch):
    """Keep deal generation quick: two candidates per mode."""
    for mode in config.MODES:
        monkeypatch.setitem(config.DEAL_ATTEMPTS, mode, 2)
