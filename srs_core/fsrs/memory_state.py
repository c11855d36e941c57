"""
Memory State - Scheduler Card State and Retrievability

Defines the memory state the scheduling engine works on and the derived
quantities of the forgetting curve.

Key concepts:
- Stability (S): Days until recall probability decays to ~90%
- Difficulty (D): How hard the card is to learn (1-10 scale)
- Retrievability (R): Probability of successful recall at time t
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import NamedTuple, Optional

from srs_core.fsrs.constants import R_REFERENCE, S_MIN, Rating, State

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Card:
    """
    Memory state for a single card, as seen by the scheduler.

    Cards are value snapshots: a review produces new Card values via
    ``dataclasses.replace`` and never mutates an existing one.
    """
    due: datetime
    last_review: datetime
    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    state: State = State.NEW


@dataclass(frozen=True)
class ReviewLog:
    """
    Log entry for one candidate review outcome.

    ``state`` is the card's state before the review.
    """
    rating: Rating
    elapsed_days: int
    scheduled_days: int
    review_time: datetime
    state: State
    card_id: Optional[int] = None


class SchedulingInfo(NamedTuple):
    """Successor card and log entry for one rating."""
    card: Card
    review_log: ReviewLog


def calculate_retrievability(elapsed_days: float, stability: float) -> float:
    """
    Calculate retrievability on the forgetting curve.

    Formula: R = 0.9 ^ (Δt / S)  (equivalently exp(ln(0.9) * Δt / S))

    Degenerate inputs are clamped: stability is floored at S_MIN and
    negative elapsed time counts as zero.

    Args:
        elapsed_days: Days since the previous review
        stability: Stability in days

    Returns:
        Retrievability between 0 and 1
    """
    if elapsed_days <= 0:
        return 1.0
    return math.exp(math.log(R_REFERENCE) * elapsed_days / max(stability, S_MIN))


def estimate_retention(days_since_review: float, stability: float) -> float:
    """
    Estimate the current retention with the plain exponential decay
    ``exp(-Δt / S)``. Returns 0 for non-positive stability.
    """
    if stability <= 0:
        return 0.0
    return math.exp(-days_since_review / stability)


def whole_days_between(start: datetime, end: datetime) -> int:
    """
    Whole days from ``start`` to ``end``, truncated toward zero.

    Negative when ``end`` is before ``start``.
    """
    return int((end - start) / timedelta(days=1))


def get_elapsed_days(card: Card, now: datetime) -> int:
    """
    Days since the card's previous review, as used by the scheduler.

    New cards have no previous review and always report 0. Clock skew
    (``now`` before ``last_review``) is clamped to 0.
    """
    if card.state == State.NEW:
        return 0
    elapsed = whole_days_between(card.last_review, now)
    if elapsed < 0:
        logger.warning(
            "Review time %s precedes last review %s; treating elapsed days as 0",
            now.isoformat(), card.last_review.isoformat()
        )
        return 0
    return elapsed
