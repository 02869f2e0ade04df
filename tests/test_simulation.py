"""
Prober and deal generator tests on hand-built layouts.
"""
import random

import simulation
from models import SimulationState
from simulation import check_winnable, generate_winnable_deal, greedy_solve
from conftest import kings, run, up


def winnable_layout():
    """Eight King..2 runs and eight Aces split over two columns: every move completes a run."""
    columns = [run("spades", 13, 2) for _ in range(8)]
    columns.append([up("spades", 1) for _ in range(4)])
    columns.append([up("spades", 1) for _ in range(4)])
    return columns, []


def oscillating_layout():
    """A 6 that can only shuttle between two 7s, so nothing is ever revealed."""
    columns = [[up("spades", 7), up("spades", 6)], [up("hearts", 7)]] + kings(8)
    return columns, []


def test_greedy_solve_wins_constructed_layout():
    columns, stock = winnable_layout()
    sim = SimulationState.from_layout(columns, stock)
    assert greedy_solve(sim, random.Random(0), randomized=False)
    assert sim.completed == 8
    assert all(col == [] for col in sim.columns)


def test_greedy_solve_reports_stuck_layout():
    sim = SimulationState.from_layout(kings(10), [])
    assert not greedy_solve(sim, random.Random(0))


def test_greedy_solve_deals_when_stuck():
    stock = [up("clubs", 12) for _ in range(10)]
    sim = SimulationState.from_layout(kings(10, "hearts"), stock)
    assert not greedy_solve(sim, random.Random(0))
    assert sim.stock == []
    assert all(len(col) == 2 and col[-1].face_up for col in sim.columns)


def test_greedy_solve_no_deal_with_empty_column():
    stock = [up("clubs", 12) for _ in range(10)]
    sim = SimulationState.from_layout(kings(9) + [[]], stock)
    # the Kings can always move into the empty column, so it stalls instead
    assert not greedy_solve(sim, random.Random(0))
    assert len(sim.stock) == 10


def test_greedy_solve_gives_up_on_stall():
    columns, stock = oscillating_layout()
    sim = SimulationState.from_layout(columns, stock)
    assert not greedy_solve(sim, random.Random(0))
    assert sim.completed == 0


def test_check_winnable_accepts_and_leaves_input_alone():
    columns, stock = winnable_layout()
    before = [col[:] for col in columns]
    assert check_winnable(columns, stock, random.Random(5))
    assert columns == before


def test_check_winnable_rejects_dead_layout():
    assert not check_winnable(kings(10), [], random.Random(5))


def test_check_winnable_runs_three_trials(monkeypatch):
    calls = []

    def fake_solve(sim, rng, randomized=False):
        calls.append(randomized)
        return False

    monkeypatch.setattr(simulation, "greedy_solve", fake_solve)
    assert not check_winnable(kings(10), [], random.Random(0))
    assert calls == [False, True, True]


def test_generator_is_reproducible(small_budget):
    a = generate_winnable_deal(1, random.Random(42))
    b = generate_winnable_deal(1, random.Random(42))
    assert a == b
    assert sum(len(c) for c in a.columns) + len(a.stock) == 104


def test_generator_returns_first_certified(monkeypatch):
    verdicts = iter([False, False, True])
    monkeypatch.setattr(simulation, "check_winnable", lambda cols, stock, rng: next(verdicts))
    deal = generate_winnable_deal(2, random.Random(1))
    assert deal.certified
    assert deal.attempts == 3


def test_generator_falls_back_to_last_candidate(monkeypatch):
    seen = []

    def never(cols, stock, rng):
        seen.append((cols, stock))
        return False

    monkeypatch.setattr(simulation, "check_winnable", never)
    deal = generate_winnable_deal(4, random.Random(9))
    assert not deal.certified
    assert deal.attempts == 25
    assert len(seen) == 25
    assert (deal.columns, deal.stock) == seen[-1]
    assert len(deal.stock) == 50


def test_seeded_one_suit_deal_is_rechecked_or_falls_back():
    deal = generate_winnable_deal(1, random.Random(0))
    assert sum(len(c) for c in deal.columns) + len(deal.stock) == 104
    assert len(deal.stock) == 50
    assert [len(c) for c in deal.columns] == [6, 6, 6, 6, 5, 5, 5, 5, 5, 5]
    if deal.certified:
        assert check_winnable(deal.columns, deal.stock, random.Random(0))
    else:
        assert deal.attempts == 80


def test_certified_deal_passes_recheck(monkeypatch):
    monkeypatch.setattr(simulation, "build_random_deal", lambda mode, rng: winnable_layout())
    deal = generate_winnable_deal(1, random.Random(0))
    assert deal.certified
    assert deal.attempts == 1
    assert check_winnable(deal.columns, deal.stock, random.Random(1))
