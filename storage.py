"""
Saved game and statistics: JSON round trip.

Anything unreadable is treated as "nothing saved" and reported as None.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from config import (
    ACE,
    KING,
    MODES,
    NUM_COLUMNS,
    SEQUENCE_LENGTH,
    SEQUENCES_TO_WIN,
    STATE_FILE,
    STATS_FILE,
    SUITS,
    TOTAL_CARDS,
)
from models import Card, GamePhase, GameState, ModeStats, Stats

logger = logging.getLogger(__name__)

_LOAD_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


def card_to_dict(card: Card) -> dict:
    return {"suit": card.suit, "rank": card.rank, "faceUp": card.face_up}


def card_from_dict(data: dict) -> Card:
    suit, rank, face_up = data["suit"], data["rank"], data["faceUp"]
    if suit not in SUITS:
        raise ValueError(f"Invalid suit: {suit}")
    if not isinstance(rank, int) or not ACE <= rank <= KING:
        raise ValueError(f"Invalid rank: {rank}")
    if not isinstance(face_up, bool):
        raise ValueError(f"Invalid faceUp flag: {face_up}")
    return Card(suit, rank, face_up)


def state_to_dict(state: GameState) -> dict:
    """The persisted fields. The undo history is not saved."""
    return {
        "tableau": [[card_to_dict(c) for c in col] for col in state.columns],
        "stock": [card_to_dict(c) for c in state.stock],
        "completedCount": state.completed_count,
        "completedSuits": list(state.completed_suits),
        "moveCount": state.move_count,
        "mode": state.mode,
        "gameOver": state.game_over,
    }


def state_from_dict(data: dict) -> GameState:
    """Rebuild a GameState, raising ValueError/KeyError/TypeError on anything inconsistent."""
    columns = [[card_from_dict(c) for c in col] for col in data["tableau"]]
    stock = [card_from_dict(c) for c in data["stock"]]
    completed = int(data["completedCount"])
    suits = [str(s) for s in data["completedSuits"]]
    mode = int(data["mode"])
    game_over = bool(data["gameOver"])

    if len(columns) != NUM_COLUMNS:
        raise ValueError(f"Expected {NUM_COLUMNS} columns, got {len(columns)}")
    if mode not in MODES:
        raise ValueError(f"Invalid mode: {mode}")
    allowed = SUITS[:mode]
    if any(s not in allowed for s in suits):
        raise ValueError(f"completedSuits {suits} not valid for mode {mode}")
    if any(c.suit not in allowed for col in columns + [stock] for c in col):
        raise ValueError(f"Saved cards use suits outside mode {mode}")
    if len(suits) != completed:
        raise ValueError("completedSuits does not match completedCount")
    total = sum(len(c) for c in columns) + len(stock) + SEQUENCE_LENGTH * completed
    if total != TOTAL_CARDS:
        raise ValueError(f"Saved game holds {total} cards")
    if len(stock) % NUM_COLUMNS:
        raise ValueError(f"Stock of {len(stock)} cards is not a whole number of rows")

    if not game_over:
        phase = GamePhase.AWAITING_INPUT
    elif completed >= SEQUENCES_TO_WIN:
        phase = GamePhase.GAME_WON
    else:
        phase = GamePhase.GAME_LOST

    return GameState(
        columns=columns,
        stock=stock,
        completed_count=completed,
        completed_suits=suits,
        move_count=int(data["moveCount"]),
        mode=mode,
        phase=phase,
    )


def stats_to_dict(stats: Stats) -> dict:
    return {
        "totalMoves": stats.total_moves,
        "gamesWon": stats.games_won,
        "gamesLost": stats.games_lost,
        "bestWin": stats.best_win,
        "byMode": {
            str(mode): {"gamesWon": ms.games_won, "gamesLost": ms.games_lost, "bestWin": ms.best_win}
            for mode, ms in stats.by_mode.items()
        },
    }


def _best_win(value) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Invalid bestWin: {value!r}")
    return value


def stats_from_dict(data: dict) -> Stats:
    stats = Stats(
        total_moves=int(data.get("totalMoves", 0)),
        games_won=int(data.get("gamesWon", 0)),
        games_lost=int(data.get("gamesLost", 0)),
        best_win=_best_win(data.get("bestWin")),
    )
    for mode in MODES:
        saved = data.get("byMode", {}).get(str(mode))
        if saved:
            stats.by_mode[mode] = ModeStats(
                games_won=int(saved.get("gamesWon", 0)),
                games_lost=int(saved.get("gamesLost", 0)),
                best_win=_best_win(saved.get("bestWin")),
            )
    return stats


def _write_json(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")


def _read_json(path: Path) -> Optional[dict]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return None


def save_game(state: GameState, path: Path = STATE_FILE) -> None:
    _write_json(path, state_to_dict(state))


def load_game(path: Path = STATE_FILE) -> Optional[GameState]:
    data = _read_json(path)
    if data is None:
        return None
    try:
        return state_from_dict(data)
    except _LOAD_ERRORS as exc:
        logger.warning("Ignoring malformed saved game in %s: %s", path, exc)
        return None


def save_stats(stats: Stats, path: Path = STATS_FILE) -> None:
    _write_json(path, stats_to_dict(stats))


def load_stats(path: Path = STATS_FILE) -> Stats:
    """Saved statistics, or a fresh Stats when none are readable."""
    data = _read_json(path)
    if data is None:
        return Stats()
    try:
        return stats_from_dict(data)
    except _LOAD_ERRORS as exc:
        logger.warning("Ignoring malformed stats in %s: %s", path, exc)
        return Stats()
