"""
FSRS - Free Spaced Repetition Scheduler

Scheduling engine for flash cards.

This package implements an exponential-forgetting-curve scheduler with:
- Per-card memory state (Stability, Difficulty)
- Four-way grading (Again / Hard / Good / Easy)
- New / Learning / Review / Relearning state machine
- Pure functions: every review yields four candidate successor states

Quick start:
    from srs_core import fsrs

    outcomes = fsrs.repeat(card, now)
    next_card, log = outcomes[fsrs.Rating.GOOD]

The card-level API (FlashCard, grades, due queries) lives in
``srs_core.fsrs.service``; database I/O in ``srs_core.fsrs.database``.
"""

# Core scheduler API (algorithm logic)
from srs_core.fsrs.scheduler import (
    repeat,
    init_stability,
    init_difficulty,
    next_interval,
    next_difficulty,
    next_recall_stability,
    next_forget_stability,
)

# Constants and parameters
from srs_core.fsrs.constants import (
    Rating,
    State,
    CardPhase,
    S_MIN,
    D_MIN,
    D_MAX,
)
from srs_core.fsrs.parameters import Parameters, Weights, DEFAULT_PARAMETERS

# Memory state
from srs_core.fsrs.memory_state import (
    Card,
    ReviewLog,
    SchedulingInfo,
    calculate_retrievability,
    estimate_retention,
)

# Time
from srs_core.fsrs.timeutils import Clock, SystemClock, FixedClock


__all__ = [
    # Core algorithm
    "repeat",
    "init_stability",
    "init_difficulty",
    "next_interval",
    "next_difficulty",
    "next_recall_stability",
    "next_forget_stability",

    # Enums
    "Rating",
    "State",
    "CardPhase",

    # Memory state
    "Card",
    "ReviewLog",
    "SchedulingInfo",
    "calculate_retrievability",
    "estimate_retention",

    # Parameters
    "Parameters",
    "Weights",
    "DEFAULT_PARAMETERS",
    "S_MIN",
    "D_MIN",
    "D_MAX",

    # Time
    "Clock",
    "SystemClock",
    "FixedClock",
]
