"""
Game engine: applies moves, stock deals and undo to the live game.
"""

import logging
import random
from collections import deque
from typing import Callable, List, Optional

from config import EVENT_BUFFER_SIZE, MODES, NUM_COLUMNS, SEQUENCES_TO_WIN
from models import (
    DealRejected,
    EmptyUndo,
    GameError,
    GameFinished,
    GameLost,
    GamePhase,
    GameState,
    GameWon,
    InvalidDeal,
    InvalidMove,
    Move,
    MoveRejected,
    SequenceCompleted,
    Stats,
    UndoRejected,
)
from game_logic import (
    apply_move_core,
    can_place_on,
    check_and_remove_sequence,
    deal_row,
    find_all_moves,
    get_movable_sequence,
    moves_for_sequence,
    rank_moves,
)
from simulation import generate_winnable_deal
import analytics

logger = logging.getLogger(__name__)

NO_MOVES_DEAL = "No moves, try dealing from the stock"
NO_MOVES = "No moves available"


class GameEngine:
    """
    One play session. Owns the live GameState and its undo history; the
    cross-session Stats object is passed in by the caller and updated
    through analytics.record_* calls.

    Every public action is atomic: it either completes or raises internally,
    is rejected, and leaves the state untouched.
    """

    def __init__(
        self,
        state: Optional[GameState] = None,
        stats: Optional[Stats] = None,
        rng: Optional[random.Random] = None,
    ):
        self.state = state or GameState()
        self.stats = stats if stats is not None else Stats()
        self.rng = rng or random.Random()
        # Oldest events drop off when nobody drains the buffer
        self.events: deque = deque(maxlen=EVENT_BUFFER_SIZE)
        self.listeners: List[Callable[[object], None]] = []
        self.last_reason: Optional[str] = None

    # ---- events ----

    def subscribe(self, listener: Callable[[object], None]) -> None:
        self.listeners.append(listener)

    def _emit(self, event: object) -> None:
        self.events.append(event)
        for listener in self.listeners:
            listener(event)

    def drain_events(self) -> List[object]:
        events = list(self.events)
        self.events.clear()
        return events

    # ---- lifecycle ----

    def new_game(self, mode: int) -> GameState:
        if mode not in MODES:
            raise ValueError(f"Unsupported mode: {mode}")
        deal = generate_winnable_deal(mode, self.rng)
        self.state = GameState(columns=deal.columns, stock=deal.stock, mode=mode)
        self.last_reason = None
        logger.info(
            "New %d-suit game (certified=%s after %d attempts)", mode, deal.certified, deal.attempts
        )
        return self.state

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    @property
    def deals_remaining(self) -> int:
        return -(-len(self.state.stock) // NUM_COLUMNS)

    # ---- validation ----

    def _require_active(self) -> None:
        if self.state.phase is GamePhase.GAME_WON:
            raise GameFinished("The game is already won")
        if self.state.phase is GamePhase.GAME_LOST:
            raise GameFinished("The game is over, undo to keep playing")

    def validate_move(self, source: int, index: int, dest: int) -> Move:
        self._require_active()
        cols = self.state.columns
        if not (0 <= source < NUM_COLUMNS and 0 <= dest < NUM_COLUMNS):
            raise InvalidMove("No such column")
        if source == dest:
            raise InvalidMove("Source and destination are the same column")
        seq = get_movable_sequence(cols[source], index)
        if seq is None:
            raise InvalidMove("Those cards cannot be moved together")
        if not can_place_on(seq, cols[dest]):
            raise InvalidMove(f"{seq[0]} cannot go on {cols[dest][-1]}")
        return Move(source, index, dest, seq)

    def validate_deal(self) -> None:
        self._require_active()
        if not self.state.stock:
            raise InvalidDeal("Stock is empty")
        if len(self.state.stock) % NUM_COLUMNS:
            raise InvalidDeal(f"Stock holds {len(self.state.stock)} cards, not a multiple of {NUM_COLUMNS}")
        if not all(self.state.columns):
            raise InvalidDeal("Fill all empty columns before dealing")

    # ---- actions ----

    def execute_move(self, source: int, index: int, dest: int) -> bool:
        try:
            move = self.validate_move(source, index, dest)
        except GameError as exc:
            return self._reject(MoveRejected(str(exc)))

        state = self.state
        state.undo_stack.append(state.snapshot())
        apply_move_core(state.columns, move)
        state.move_count += 1
        analytics.record_move(self.stats)
        self._collapse(move.dest)
        self._check_win()
        self.last_reason = None
        return True

    def deal_from_stock(self) -> bool:
        try:
            self.validate_deal()
        except GameError as exc:
            return self._reject(DealRejected(str(exc)))

        state = self.state
        state.undo_stack.append(state.snapshot())
        deal_row(state.columns, state.stock)
        state.move_count += 1
        analytics.record_move(self.stats)
        for col in range(NUM_COLUMNS):
            self._collapse(col)
        self._check_win()
        self.last_reason = None
        return True

    def undo(self) -> bool:
        try:
            if self.state.phase is GamePhase.GAME_WON:
                raise GameFinished("The game is already won")
            if not self.state.undo_stack:
                raise EmptyUndo("Nothing to undo")
        except GameError as exc:
            return self._reject(UndoRejected(str(exc)))

        self.state.restore(self.state.undo_stack.pop())
        self.state.phase = GamePhase.AWAITING_INPUT
        self.last_reason = None
        return True

    def hint(self) -> Optional[Move]:
        """Best-scored legal move; None with `last_reason` set when there is none."""
        if self.state.game_over:
            self.last_reason = "The game is over"
            return None
        moves = find_all_moves(self.state.columns)
        if moves:
            self.last_reason = None
            return rank_moves(self.state.columns, moves)[0]
        if self.state.stock:
            self.last_reason = NO_MOVES_DEAL
        else:
            self.last_reason = NO_MOVES
            self.check_lose()
        return None

    def smart_move(self, source: int, index: int) -> bool:
        """Send the sequence at (source, index) to its best-scored destination."""
        try:
            self._require_active()
            if not 0 <= source < NUM_COLUMNS:
                raise InvalidMove("No such column")
            moves = moves_for_sequence(self.state.columns, source, index)
            if not moves:
                raise InvalidMove("No valid move for this card")
        except GameError as exc:
            return self._reject(MoveRejected(str(exc)))
        best = rank_moves(self.state.columns, moves)[0]
        return self.execute_move(best.source, best.index, best.dest)

    def check_lose(self) -> bool:
        """Move to GAME_LOST when no move exists and the stock is empty."""
        state = self.state
        if state.game_over:
            return state.phase is GamePhase.GAME_LOST
        if state.stock or find_all_moves(state.columns):
            return False
        state.phase = GamePhase.GAME_LOST
        analytics.record_loss(self.stats, state.mode)
        logger.info("Game lost after %d moves", state.move_count)
        self._emit(GameLost())
        return True

    # ---- internals ----

    def _reject(self, event) -> bool:
        self.last_reason = event.reason
        logger.debug("%s: %s", type(event).__name__, event.reason)
        self._emit(event)
        return False

    def _collapse(self, col: int) -> None:
        suit = check_and_remove_sequence(self.state.columns[col])
        if suit is None:
            return
        self.state.completed_count += 1
        self.state.completed_suits.append(suit)
        self._emit(SequenceCompleted(suit, self.state.completed_count))

    def _check_win(self) -> None:
        state = self.state
        if state.completed_count >= SEQUENCES_TO_WIN and state.phase is GamePhase.AWAITING_INPUT:
            state.phase = GamePhase.GAME_WON
            analytics.record_win(self.stats, state.mode, state.move_count)
            logger.info("Game won in %d moves", state.move_count)
            self._emit(GameWon(state.move_count))
