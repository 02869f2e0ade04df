"""
Game configuration and constants.
"""

import os
from pathlib import Path

# Suits, in the order modes pick them (mode m uses the first m)
SUITS = ["spades", "hearts", "diamonds", "clubs"]
SUIT_SYMBOLS = {"spades": "♠", "hearts": "♥", "diamonds": "♦", "clubs": "♣"}
RANK_LABELS = ["", "A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"]
MODES = [1, 2, 4]
MODE_LABELS = {1: "1 Suit", 2: "2 Suits", 4: "4 Suits"}

# Table geometry
NUM_COLUMNS = 10
TOTAL_CARDS = 104
SEQUENCE_LENGTH = 13  # King down to Ace
SEQUENCES_TO_WIN = 8
KING = 13
ACE = 1
INITIAL_DEAL_LONG_COLUMNS = 4  # first 4 columns get 6 cards, the rest 5
INITIAL_DEAL_LONG = 6
INITIAL_DEAL_SHORT = 5

# Move scoring weights (relative magnitudes encode priority; do not rescale)
SCORE_COMPLETES_SEQUENCE = 10000
SCORE_REVEALS_CARD = 500
SCORE_SAME_SUIT = 300
SCORE_CLEARS_COLUMN = 200
SCORE_EMPTY_DESTINATION = 50
SCORE_PER_RUN_CARD = 20
SCORE_PER_MOVED_CARD = 10

# Solvability prober
PROBE_MAX_STEPS = 1500
PROBE_MAX_STALE = 150
PROBE_TRIALS = 3
PROBE_RANDOM_PICK_CHANCE = 0.25
PROBE_RANDOM_TOP_N = 3

# Deal generation: fewer attempts where simulation is costlier
DEAL_ATTEMPTS = {1: 80, 2: 50, 4: 25}

# Persistence
SAVE_DIR = Path(os.environ.get("SPIDER_SAVE_DIR", Path.home() / ".spider_patience"))
STATE_FILE = SAVE_DIR / "state.json"
STATS_FILE = SAVE_DIR / "stats.json"

LOG_LEVEL = os.environ.get("SPIDER_LOG_LEVEL", "WARNING")

# Colors for plotting
COLOR_MAP = {
    "spades": "#222222",
    "hearts": "#e41a1c",
    "diamonds": "#ff7f00",
    "clubs": "#377eb8",
    "hidden": "#999999",
}

# Engine
EVENT_BUFFER_SIZE = 100  # undrained events kept per session

# UI Settings
DEAL_QUALITY_SAMPLES = 20  # raw deals probed per mode on the analytics tab
