"""
Deal certification: greedy playouts and the winnable-deal generator.
"""

import logging
import random
from typing import List, Optional

from config import (
    DEAL_ATTEMPTS,
    NUM_COLUMNS,
    PROBE_MAX_STALE,
    PROBE_MAX_STEPS,
    PROBE_RANDOM_PICK_CHANCE,
    PROBE_RANDOM_TOP_N,
    PROBE_TRIALS,
    SEQUENCES_TO_WIN,
)
from models import Card, Column, Deal, SimulationState
from game_logic import (
    apply_move_core,
    build_random_deal,
    check_and_remove_sequence,
    deal_row,
    find_all_moves,
    rank_moves,
)

logger = logging.getLogger(__name__)


def greedy_solve(sim: SimulationState, rng: random.Random, randomized: bool = False) -> bool:
    """
    Play `sim` out greedily and report whether all sequences were completed.

    Each step takes the best-scored legal move; with `randomized`, a quarter
    of the steps instead pick uniformly among the top three. When no move
    exists a row is dealt from the stock, if every column is occupied.
    The playout gives up after PROBE_MAX_STEPS steps, or after
    PROBE_MAX_STALE consecutive moves that revealed nothing.

    `sim` is consumed; pass a fresh copy per playout.
    """
    cols = sim.columns
    stale = 0

    for step in range(PROBE_MAX_STEPS):
        if sim.completed >= SEQUENCES_TO_WIN:
            logger.debug("Playout won after %d steps", step)
            return True

        moves = find_all_moves(cols)
        if moves:
            ranked = rank_moves(cols, moves)
            pick = 0
            if randomized and len(ranked) > 1 and rng.random() < PROBE_RANDOM_PICK_CHANCE:
                pick = rng.randrange(min(PROBE_RANDOM_TOP_N, len(ranked)))
            best = ranked[pick]

            revealed = apply_move_core(cols, best)
            if check_and_remove_sequence(cols[best.dest]) is not None:
                sim.completed += 1
            stale = 0 if revealed else stale + 1
            if stale > PROBE_MAX_STALE:
                logger.debug("Playout stalled at step %d (%d completed)", step, sim.completed)
                return False
        elif len(sim.stock) >= NUM_COLUMNS and all(cols):
            deal_row(cols, sim.stock)
            for col in cols:
                if check_and_remove_sequence(col) is not None:
                    sim.completed += 1
            stale = 0
        else:
            logger.debug("Playout stuck at step %d (%d completed)", step, sim.completed)
            return False

    return sim.completed >= SEQUENCES_TO_WIN


def check_winnable(columns: List[Column], stock: List[Card], rng: random.Random) -> bool:
    """Up to PROBE_TRIALS playouts on independent copies: the first greedy, the rest randomized."""
    for trial in range(PROBE_TRIALS):
        sim = SimulationState.from_layout(columns, stock)
        if greedy_solve(sim, rng, randomized=trial > 0):
            return True
    return False


def generate_winnable_deal(mode: int, rng: Optional[random.Random] = None) -> Deal:
    """
    Shuffle and deal until a layout is certified by check_winnable, up to the
    mode's attempt budget. When the budget runs out the last candidate is
    returned uncertified rather than failing.
    """
    rng = rng or random.Random()
    max_attempts = DEAL_ATTEMPTS[mode]
    columns: List[Column] = []
    stock: List[Card] = []

    for attempt in range(1, max_attempts + 1):
        columns, stock = build_random_deal(mode, rng)
        if check_winnable(columns, stock, rng):
            logger.debug("Mode %d: certified deal on attempt %d", mode, attempt)
            return Deal(columns=columns, stock=stock, certified=True, attempts=attempt)

    logger.info("Mode %d: no deal certified in %d attempts, using last candidate", mode, max_attempts)
    return Deal(columns=columns, stock=stock, certified=False, attempts=max_attempts)
