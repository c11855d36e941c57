"""
FSRS Constants

Enums and fixed values shared by the scheduling engine and the service layer.
"""

from __future__ import annotations

from datetime import timedelta
from enum import IntEnum


# ---- Ratings ----

class Rating(IntEnum):
    """
    User's self-assessed recall quality for one review.

    The value is the grade ordinal used by the formulas: GOOD is the
    neutral reference, so ``value - 2`` is the distance from it.
    """
    AGAIN = 0   # Retrieval failed
    HARD = 1    # Retrieved with high effort
    GOOD = 2    # Retrieved normally
    EASY = 3    # Retrieved fluently


# ---- Scheduler states ----

class State(IntEnum):
    """Lifecycle state of a card inside the scheduling engine."""
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    RELEARNING = 3


class CardPhase(IntEnum):
    """Lifecycle phase of a persisted flash card."""
    NEW = 0
    RELEARNING = 1
    REVIEW = 2


# ---- Stability / difficulty bounds ----

S_MIN = 0.1      # Minimum stability (days)
D_MIN = 1.0      # Minimum difficulty
D_MAX = 10.0     # Maximum difficulty

# Reference recall probability of the forgetting curve
R_REFERENCE = 0.9


# ---- New card defaults (persisted representation) ----

DEFAULT_STABILITY = 2.5
DEFAULT_DIFFICULTY = 2.5


# ---- Short-term steps ----

NEW_CARD_STEPS = {
    Rating.AGAIN: timedelta(minutes=1),
    Rating.HARD: timedelta(minutes=5),
    Rating.GOOD: timedelta(minutes=10),
}

RELEARN_STEP = timedelta(minutes=5)


# ---- Time units ----

MILLIS_PER_DAY = 24 * 60 * 60 * 1000
MILLIS_PER_MINUTE = 60 * 1000


# ---- Grade presentation ----

GRADE_COLORS = {
    Rating.AGAIN: "#F44336",
    Rating.HARD: "#9C27B0",
    Rating.GOOD: "#4CAF50",
    Rating.EASY: "#2196F3",
}

GRADE_TITLES = {
    Rating.AGAIN: "Again",
    Rating.HARD: "Hard",
    Rating.GOOD: "Good",
    Rating.EASY: "Easy",
}
