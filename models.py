"""
Data models and state representations.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from config import MODES, NUM_COLUMNS, RANK_LABELS, SUIT_SYMBOLS

Column = List["Card"]


@dataclass(frozen=True)
class Card:
    """A playing card. Frozen, so columns and snapshots can share instances."""
    suit: str
    rank: int                           # 1 (Ace) .. 13 (King)
    face_up: bool = False

    def turned_up(self) -> "Card":
        return self if self.face_up else replace(self, face_up=True)

    def __str__(self) -> str:
        if not self.face_up:
            return "##"
        return f"{RANK_LABELS[self.rank]}{SUIT_SYMBOLS[self.suit]}"


@dataclass
class Move:
    """A relocation of the movable sequence at (source, index) onto dest."""
    source: int
    index: int
    dest: int
    cards: List[Card]


@dataclass
class Deal:
    """A freshly shuffled layout produced by the deal generator."""
    columns: List[Column]
    stock: List[Card]
    certified: bool = False
    attempts: int = 0


@dataclass
class SimulationState:
    """Private copy of a layout explored by the prober."""
    columns: List[Column]
    stock: List[Card]
    completed: int = 0

    @classmethod
    def from_layout(cls, columns: List[Column], stock: List[Card]) -> "SimulationState":
        return cls(columns=[col[:] for col in columns], stock=stock[:])


@dataclass(frozen=True)
class UndoSnapshot:
    """
    Everything an undo restores. Columns are stored as tuples of frozen
    cards, so a snapshot costs one reference per card and can never be
    mutated through the live tableau.
    """
    columns: Tuple[Tuple[Card, ...], ...]
    stock: Tuple[Card, ...]
    completed_count: int
    completed_suits: Tuple[str, ...]
    move_count: int


class GamePhase(Enum):
    AWAITING_INPUT = "awaiting_input"
    GAME_WON = "game_won"
    GAME_LOST = "game_lost"


@dataclass
class GameState:
    """The live game. Mutated in place by the engine."""
    columns: List[Column] = field(default_factory=lambda: [[] for _ in range(NUM_COLUMNS)])
    stock: List[Card] = field(default_factory=list)
    completed_count: int = 0
    completed_suits: List[str] = field(default_factory=list)
    move_count: int = 0
    mode: int = 1
    phase: GamePhase = GamePhase.AWAITING_INPUT
    undo_stack: List[UndoSnapshot] = field(default_factory=list)

    @property
    def game_over(self) -> bool:
        return self.phase is not GamePhase.AWAITING_INPUT

    def snapshot(self) -> UndoSnapshot:
        return UndoSnapshot(
            columns=tuple(tuple(col) for col in self.columns),
            stock=tuple(self.stock),
            completed_count=self.completed_count,
            completed_suits=tuple(self.completed_suits),
            move_count=self.move_count,
        )

    def restore(self, snap: UndoSnapshot) -> None:
        self.columns = [list(col) for col in snap.columns]
        self.stock = list(snap.stock)
        self.completed_count = snap.completed_count
        self.completed_suits = list(snap.completed_suits)
        self.move_count = snap.move_count

    def card_count(self) -> int:
        return sum(len(col) for col in self.columns) + len(self.stock)


@dataclass
class ModeStats:
    games_won: int = 0
    games_lost: int = 0
    best_win: Optional[int] = None


@dataclass
class Stats:
    """Cross-session aggregate, updated only through analytics.record_* calls."""
    total_moves: int = 0
    games_won: int = 0
    games_lost: int = 0
    best_win: Optional[int] = None
    by_mode: Dict[int, ModeStats] = field(default_factory=lambda: {m: ModeStats() for m in MODES})


# Domain events

@dataclass(frozen=True)
class SequenceCompleted:
    suit: str
    new_count: int


@dataclass(frozen=True)
class GameWon:
    final_move_count: int


@dataclass(frozen=True)
class GameLost:
    pass


@dataclass(frozen=True)
class MoveRejected:
    reason: str


@dataclass(frozen=True)
class DealRejected:
    reason: str


@dataclass(frozen=True)
class UndoRejected:
    reason: str


# Errors

class GameError(Exception):
    """Base class for locally recoverable rule violations."""


class InvalidMove(GameError):
    pass


class InvalidDeal(GameError):
    pass


class EmptyUndo(GameError):
    pass


class GameFinished(GameError):
    pass
