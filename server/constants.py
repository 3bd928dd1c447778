"""
Rule constants for 5-handed Wisconsin Sheepshead.

This module is the single source of truth for card point values, hand
sizes and scoring thresholds. Room limits come from config.py so they
can be tuned per deployment.

Card Points:
    - Ace: 11
    - Ten: 10
    - King: 4
    - Queen: 3
    - Jack: 2
    - 9, 8, 7: 0

Every 32-card deck sums to exactly 120 points.
"""

from config import config


# =============================================================================
# Card Values - Single Source of Truth
# =============================================================================

CARD_POINTS: dict[str, int] = {
    'A': 11,
    '10': 10,
    'K': 4,
    'Q': 3,
    'J': 2,
    '9': 0,
    '8': 0,
    '7': 0,
}

# Schwanzer tally: queens, jacks, then any remaining diamond
SCHWANZER_QUEEN_POINTS: int = 3
SCHWANZER_JACK_POINTS: int = 2
SCHWANZER_DIAMOND_POINTS: int = 1


# =============================================================================
# Hand Constants
# =============================================================================

NUM_PLAYERS = 5
CARDS_PER_PLAYER = 6
BLIND_SIZE = 2
TRICKS_PER_HAND = CARDS_PER_PLAYER
TOTAL_POINTS = 120
WIN_THRESHOLD = 61

# Losing side at or below these totals is schneidered
SCHNEIDER_DEFENDERS_MAX = 29
SCHNEIDER_PICKERS_MAX = 30

# A leader holding the called card may only "run" the suit with this many
RUN_SUIT_MIN_CARDS = 4

# Loser count -> (score for each loser, score for each winner)
SCHWANZER_PAYOUTS: dict[int, tuple[int, int]] = {
    1: (-4, 1),
    2: (-3, 2),
    3: (-2, 3),
    4: (-1, 4),
    5: (0, 0),
}


# =============================================================================
# Room Constants
# =============================================================================

ROOM_CODE_LENGTH = config.ROOM_CODE_LENGTH
ROOM_TIMEOUT_MINUTES = config.ROOM_TIMEOUT_MINUTES
MAX_ROOMS = config.MAX_ROOMS
