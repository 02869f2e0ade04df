"""
Game analytics: cross-session statistics and deal-quality estimates.
"""

import random
from typing import Dict, Optional

import pandas as pd

from config import DEAL_ATTEMPTS, MODE_LABELS, MODES
from models import ModeStats, Stats
from game_logic import build_random_deal
from simulation import check_winnable, generate_winnable_deal


def record_move(stats: Stats) -> None:
    stats.total_moves += 1


def record_win(stats: Stats, mode: int, moves: int) -> None:
    """Count a win and keep the fewest-moves record, overall and for the mode."""
    stats.games_won += 1
    if stats.best_win is None or moves < stats.best_win:
        stats.best_win = moves
    ms = stats.by_mode.setdefault(mode, ModeStats())
    ms.games_won += 1
    if ms.best_win is None or moves < ms.best_win:
        ms.best_win = moves


def record_loss(stats: Stats, mode: int) -> None:
    stats.games_lost += 1
    stats.by_mode.setdefault(mode, ModeStats()).games_lost += 1


def win_rate(won: int, lost: int) -> Optional[float]:
    played = won + lost
    return won / played if played else None


def stats_table(stats: Stats) -> pd.DataFrame:
    """One row per mode plus an overall row."""
    rows = []
    for mode in MODES:
        ms = stats.by_mode.get(mode, ModeStats())
        rows.append(
            {
                "Mode": MODE_LABELS[mode],
                "Won": ms.games_won,
                "Lost": ms.games_lost,
                "Win rate": win_rate(ms.games_won, ms.games_lost),
                "Best win (moves)": ms.best_win,
            }
        )
    rows.append(
        {
            "Mode": "All",
            "Won": stats.games_won,
            "Lost": stats.games_lost,
            "Win rate": win_rate(stats.games_won, stats.games_lost),
            "Best win (moves)": stats.best_win,
        }
    )
    return pd.DataFrame(rows)


def estimate_deal_quality(mode: int, n_deals: int, rng: random.Random) -> Dict[str, float]:
    """
    Monte Carlo: how often the prober certifies a raw shuffle for `mode`, and
    how many attempts the generator spends on average.

    Returns:
      - certified_rate: fraction of raw deals check_winnable accepts
      - generator_success: fraction of generate_winnable_deal calls that certified
      - mean_attempts: average attempts per generate_winnable_deal call
    """
    certified = 0
    generated = 0
    attempts_sum = 0

    for _ in range(n_deals):
        columns, stock = build_random_deal(mode, rng)
        if check_winnable(columns, stock, rng):
            certified += 1
        deal = generate_winnable_deal(mode, rng)
        generated += deal.certified
        attempts_sum += deal.attempts

    if n_deals <= 0:
        return {"certified_rate": 0.0, "generator_success": 0.0, "mean_attempts": 0.0}
    return {
        "certified_rate": certified / n_deals,
        "generator_success": generated / n_deals,
        "mean_attempts": attempts_sum / n_deals,
    }


def deal_quality_table(n_deals: int, seed: Optional[int] = None) -> pd.DataFrame:
    rng = random.Random(seed)
    rows = []
    for mode in MODES:
        q = estimate_deal_quality(mode, n_deals, rng)
        rows.append(
            {
                "Mode": MODE_LABELS[mode],
                "Attempt budget": DEAL_ATTEMPTS[mode],
                "P(raw deal certified)": q["certified_rate"],
                "P(generator certifies)": q["generator_success"],
                "Mean attempts": q["mean_attempts"],
            }
        )
    return pd.DataFrame(rows)
