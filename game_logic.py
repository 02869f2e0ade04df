"""
Core game rules: deck construction, move finding, scoring and sequence removal.
"""

import logging
import random
from typing import List, Optional, Tuple

from config import (
    ACE,
    INITIAL_DEAL_LONG,
    INITIAL_DEAL_LONG_COLUMNS,
    INITIAL_DEAL_SHORT,
    KING,
    NUM_COLUMNS,
    SCORE_CLEARS_COLUMN,
    SCORE_COMPLETES_SEQUENCE,
    SCORE_EMPTY_DESTINATION,
    SCORE_PER_MOVED_CARD,
    SCORE_PER_RUN_CARD,
    SCORE_REVEALS_CARD,
    SCORE_SAME_SUIT,
    SEQUENCE_LENGTH,
    SUITS,
    TOTAL_CARDS,
)
from models import Card, Column, Move

logger = logging.getLogger(__name__)


def create_deck(mode: int) -> List[Card]:
    """104 face-down cards using the first `mode` suits, 104/mode cards per suit."""
    copies = TOTAL_CARDS // mode // SEQUENCE_LENGTH
    return [
        Card(suit, rank)
        for suit in SUITS[:mode]
        for _ in range(copies)
        for rank in range(ACE, KING + 1)
    ]


def deal_layout(deck: List[Card]) -> Tuple[List[Column], List[Card]]:
    """
    Lay a shuffled deck out: 6 cards to each of the first 4 columns, 5 to the
    other 6, only the last card of each column face-up. The rest is stock.
    """
    columns: List[Column] = []
    idx = 0
    for col in range(NUM_COLUMNS):
        count = INITIAL_DEAL_LONG if col < INITIAL_DEAL_LONG_COLUMNS else INITIAL_DEAL_SHORT
        dealt = deck[idx:idx + count]
        dealt[-1] = dealt[-1].turned_up()
        columns.append(dealt)
        idx += count
    return columns, deck[idx:]


def build_random_deal(mode: int, rng: random.Random) -> Tuple[List[Column], List[Card]]:
    deck = create_deck(mode)
    rng.shuffle(deck)
    return deal_layout(deck)


def get_movable_sequence(column: Column, index: int) -> Optional[List[Card]]:
    """
    The run from `index` to the top of the column, or None when the card is
    face-down or the same-suit descending chain breaks before the top.
    """
    if index < 0 or index >= len(column) or not column[index].face_up:
        return None
    cards = [column[index]]
    for i in range(index + 1, len(column)):
        prev, curr = column[i - 1], column[i]
        if not curr.face_up or curr.suit != prev.suit or curr.rank != prev.rank - 1:
            return None
        cards.append(curr)
    return cards


def can_place_on(sequence: List[Card], dest: Column) -> bool:
    """Empty columns take anything; otherwise rank must be one below, any suit."""
    if not dest:
        return True
    return sequence[0].rank == dest[-1].rank - 1


def moves_for_sequence(columns: List[Column], source: int, index: int) -> List[Move]:
    seq = get_movable_sequence(columns[source], index)
    if seq is None:
        return []
    return [
        Move(source, index, dest, seq)
        for dest in range(len(columns))
        if dest != source and can_place_on(seq, columns[dest])
    ]


def find_all_moves(columns: List[Column]) -> List[Move]:
    """Every legal move, scanning each column from its top down to the first face-down card."""
    moves: List[Move] = []
    for source, col in enumerate(columns):
        for index in range(len(col) - 1, -1, -1):
            if not col[index].face_up:
                break
            moves.extend(moves_for_sequence(columns, source, index))
    return moves


def is_completed_run(cards: List[Card]) -> bool:
    """True if `cards` is exactly a face-up King..Ace run of one suit."""
    if len(cards) != SEQUENCE_LENGTH:
        return False
    suit = cards[0].suit
    return all(
        card.face_up and card.suit == suit and card.rank == KING - i
        for i, card in enumerate(cards)
    )


def completes_sequence(sequence: List[Card], dest: Column) -> bool:
    combined = dest[-SEQUENCE_LENGTH:] + sequence
    return is_completed_run(combined[-SEQUENCE_LENGTH:])


def score_move(columns: List[Column], move: Move) -> int:
    """Heuristic value of a move, shared by hints, smart click and the prober."""
    src = columns[move.source]
    dest = columns[move.dest]
    cards = move.cards
    score = 0

    if completes_sequence(cards, dest):
        score += SCORE_COMPLETES_SEQUENCE

    # Only Kings should open an empty column
    if not dest:
        score -= SCORE_EMPTY_DESTINATION
        if cards[0].rank == KING:
            score += SCORE_EMPTY_DESTINATION

    # A card above an already face-up card earns neither bonus
    if move.index > 0 and not src[move.index - 1].face_up:
        score += SCORE_REVEALS_CARD
    elif move.index == 0:
        score += SCORE_CLEARS_COLUMN

    if dest:
        top = dest[-1]
        if top.suit == cards[0].suit:
            score += SCORE_SAME_SUIT
            run = 1
            for i in range(len(dest) - 2, -1, -1):
                below = dest[i]
                if below.face_up and below.suit == top.suit and below.rank == dest[i + 1].rank + 1:
                    run += 1
                else:
                    break
            score += run * SCORE_PER_RUN_CARD

    score += len(cards) * SCORE_PER_MOVED_CARD
    return score


def rank_moves(columns: List[Column], moves: List[Move]) -> List[Move]:
    """Best first. sorted() is stable, so ties keep their discovery order."""
    return sorted(moves, key=lambda m: score_move(columns, m), reverse=True)


def flip_top(column: Column) -> bool:
    """Turn the top card face-up. Returns True if a card was revealed."""
    if column and not column[-1].face_up:
        column[-1] = column[-1].turned_up()
        return True
    return False


def apply_move_core(columns: List[Column], move: Move) -> bool:
    """
    Relocate the sequence and flip the newly exposed source card.
    Returns whether a face-down card was revealed. No validation.
    """
    src = columns[move.source]
    taken = src[move.index:]
    del src[move.index:]
    columns[move.dest].extend(taken)
    return flip_top(src)


def deal_row(columns: List[Column], stock: List[Card]) -> None:
    """One card face-up onto every column, taken from the end of the stock."""
    for col in columns:
        col.append(stock.pop().turned_up())


def check_and_remove_sequence(column: Column) -> Optional[str]:
    """
    Remove a completed King..Ace run sitting on top of the column and flip
    the card it uncovers. Returns the run's suit, or None if nothing fired.
    """
    if len(column) < SEQUENCE_LENGTH:
        return None
    top = column[-SEQUENCE_LENGTH:]
    if not is_completed_run(top):
        return None
    suit = top[0].suit
    del column[-SEQUENCE_LENGTH:]
    flip_top(column)
    logger.debug("Removed completed %s sequence", suit)
    return suit
