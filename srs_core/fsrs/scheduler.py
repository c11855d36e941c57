"""
Scheduler - FSRS Algorithm Logic

Pure FSRS scheduling (no database calls, no clock reads).

Main workflow:
1. Caller passes the current card and "now"
2. Compute elapsed days and bump the repetition counter
3. Branch on the card's state (New / Learning / Relearning / Review)
4. Return one successor card + review log per rating

The caller commits exactly one of the four outcomes.

Note the two meanings of ``r`` in the formulas below: in the init and
difficulty formulas it is the grade ordinal (AGAIN=0 .. EASY=3), in the
stability formulas it is the retrievability (a probability in 0..1).
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from srs_core.fsrs.constants import (
    D_MAX,
    D_MIN,
    NEW_CARD_STEPS,
    R_REFERENCE,
    RELEARN_STEP,
    S_MIN,
    Rating,
    State,
)
from srs_core.fsrs.memory_state import (
    Card,
    ReviewLog,
    SchedulingInfo,
    calculate_retrievability,
    get_elapsed_days,
)
from srs_core.fsrs.parameters import DEFAULT_PARAMETERS, Parameters

logger = logging.getLogger(__name__)


# ---- Initial state ----

def init_stability(rating: Rating, params: Parameters = DEFAULT_PARAMETERS) -> float:
    """
    Initial stability after the first review.

    Formula: S0(r) = max(w0 + w1 * r, 0.1)
    """
    w = params.weights
    return max(w.init_stability_base + w.init_stability_grade_gain * int(rating), S_MIN)


def init_difficulty(rating: Rating, params: Parameters = DEFAULT_PARAMETERS) -> float:
    """
    Initial difficulty after the first review.

    Formula: D0(r) = clamp(w2 + w3 * (r - 2), 1, 10)
    """
    w = params.weights
    return _clamp_difficulty(
        w.init_difficulty + w.init_difficulty_grade_step * (int(rating) - 2)
    )


# ---- Difficulty ----

def mean_reversion(init: float, current: float, params: Parameters = DEFAULT_PARAMETERS) -> float:
    """Pull ``current`` toward ``init`` by the mean-reversion rate w5."""
    w5 = params.weights.mean_reversion_rate
    return w5 * init + (1 - w5) * current


def next_difficulty(difficulty: float, rating: Rating, params: Parameters = DEFAULT_PARAMETERS) -> float:
    """
    Difficulty after a review.

    Formula: D' = clamp(meanReversion(w2, D + w4 * (r - 2)), 1, 10)
    """
    w = params.weights
    candidate = difficulty + w.difficulty_grade_step * (int(rating) - 2)
    return _clamp_difficulty(mean_reversion(w.init_difficulty, candidate, params))


# ---- Stability ----

def next_recall_stability(
    difficulty: float,
    stability: float,
    retrievability: float,
    params: Parameters = DEFAULT_PARAMETERS
) -> float:
    """
    Stability after a successful recall (Hard / Good / Easy).

    Formula:
        S' = S * (1 + e^w6 * (11 - D) * S^w7 * (e^((1 - R) * w8) - 1))

    Args:
        difficulty: Difficulty used for the update
        stability: Stability before the review (floored at 0.1)
        retrievability: Recall probability at review time

    Returns:
        New stability, floored at 0.1
    """
    w = params.weights
    s = max(stability, S_MIN)
    growth = (
        math.exp(w.recall_stability_exponent)
        * (11 - difficulty)
        * math.pow(s, w.recall_stability_power)
        * (math.exp((1 - retrievability) * w.recall_retrievability_factor) - 1)
    )
    return max(s * (1 + growth), S_MIN)


def next_forget_stability(
    difficulty: float,
    stability: float,
    retrievability: float,
    params: Parameters = DEFAULT_PARAMETERS
) -> float:
    """
    Stability after a lapse (Again).

    Formula:
        S' = w9 * D^w10 * S^w11 * e^((1 - R) * w12)

    Returns:
        New stability, floored at 0.1
    """
    w = params.weights
    s = max(stability, S_MIN)
    d = max(difficulty, D_MIN)
    result = (
        w.forget_stability_scale
        * math.pow(d, w.forget_difficulty_power)
        * math.pow(s, w.forget_stability_power)
        * math.exp((1 - retrievability) * w.forget_retrievability_factor)
    )
    return max(result, S_MIN)


# ---- Intervals ----

def next_interval(
    stability: float,
    params: Parameters = DEFAULT_PARAMETERS,
    fuzz_factor: Optional[float] = None,
    scheduled_days: int = 0,
    is_review: bool = False
) -> int:
    """
    Days until the next review for a given stability.

    Formula: I = clamp(round(S * ln(retention) / ln(0.9)), 1, maximum_interval)

    Args:
        stability: Stability in days
        params: Scheduler parameters
        fuzz_factor: Random number in [0, 1) to spread the interval, or None
        scheduled_days: Interval the card was previously scheduled with
        is_review: Forwarded review flag (only affects fuzzing)

    Returns:
        Interval in whole days
    """
    interval = stability * math.log(params.request_retention) / math.log(R_REFERENCE)
    if fuzz_factor is not None:
        interval = apply_fuzz(interval, fuzz_factor, scheduled_days, is_review)
    return min(max(_round_half_up(interval), 1), params.maximum_interval)


def apply_fuzz(
    interval: float,
    fuzz_factor: float,
    scheduled_days: int = 0,
    is_review: bool = False
) -> float:
    """
    Spread an interval over roughly ±5% so cards learned together do not
    stay due together. Intervals below 2.5 days are left untouched.

    With ``is_review`` the result is kept above the previously scheduled
    interval.
    """
    if interval < 2.5:
        return interval

    ivl = _round_half_up(interval)
    min_ivl = max(2, _round_half_up(ivl * 0.95 - 1))
    max_ivl = _round_half_up(ivl * 1.05 + 1)

    if is_review and ivl > scheduled_days:
        min_ivl = max(min_ivl, scheduled_days + 1)

    return math.floor(fuzz_factor * (max_ivl - min_ivl + 1) + min_ivl)


def order_intervals(hard: int, good: int, easy: int, maximum_interval: int) -> tuple[int, int, int]:
    """
    Enforce ``hard <= good < easy <= maximum_interval``.
    """
    good = max(good, hard + 1)
    easy = max(easy, good + 1)
    if easy > maximum_interval:
        easy = maximum_interval
        good = min(good, easy - 1)
        hard = min(hard, good)
    return hard, good, easy


# ---- Main API ----

def repeat(
    card: Card,
    now: datetime,
    params: Parameters = DEFAULT_PARAMETERS,
    is_review: bool = False
) -> dict[Rating, SchedulingInfo]:
    """
    Compute the four candidate outcomes of reviewing ``card`` at ``now``.

    This is the core FSRS algorithm. It does not mutate ``card``.

    Args:
        card: Current card state
        now: Review time (should not precede ``card.last_review``)
        params: Scheduler parameters
        is_review: Opaque review flag, forwarded to interval fuzzing

    Returns:
        Mapping of every Rating to its (successor card, review log)
    """
    elapsed_days = get_elapsed_days(card, now)
    base = replace(card, elapsed_days=elapsed_days, last_review=now, reps=card.reps + 1)

    fuzz_factor = _fuzz_factor(card) if params.enable_fuzz else None

    def interval_for(stability: float) -> int:
        return next_interval(stability, params, fuzz_factor, card.scheduled_days, is_review)

    if card.state == State.NEW:
        outcomes = _schedule_new(base, card, now, params, interval_for)
    elif card.state in (State.LEARNING, State.RELEARNING):
        outcomes = _schedule_learning(base, card, now, params, interval_for)
    else:
        outcomes = _schedule_review(base, card, now, params, interval_for)

    logger.debug(
        "Scheduled %s card (elapsed=%d): %s",
        card.state.name,
        elapsed_days,
        ", ".join(f"{r.name}={info.card.scheduled_days}d" for r, info in outcomes.items())
    )
    return outcomes


def _schedule_new(base: Card, card: Card, now: datetime, params: Parameters, interval_for) -> dict[Rating, SchedulingInfo]:
    """New card: initial D/S per grade, fixed minute steps except Easy."""
    outcomes = {}
    for rating in Rating:
        stability = init_stability(rating, params)
        difficulty = init_difficulty(rating, params)

        if rating == Rating.EASY:
            days = interval_for(stability * params.easy_bonus)
            outcomes[rating] = _successor(
                base, card, rating, now,
                stability=stability,
                difficulty=difficulty,
                state=State.REVIEW,
                scheduled_days=days,
                due=now + timedelta(days=days),
            )
        else:
            outcomes[rating] = _successor(
                base, card, rating, now,
                stability=stability,
                difficulty=difficulty,
                state=State.LEARNING,
                scheduled_days=0,
                due=now + NEW_CARD_STEPS[rating],
                lapses=card.lapses + 1 if rating == Rating.AGAIN else card.lapses,
            )
    return outcomes


def _schedule_learning(base: Card, card: Card, now: datetime, params: Parameters, interval_for) -> dict[Rating, SchedulingInfo]:
    """Learning / Relearning: D and S carry over, day intervals for success."""
    stability = _checked_stability(card)
    difficulty = _clamp_difficulty(card.difficulty)

    hard, good, easy = order_intervals(
        interval_for(stability),
        interval_for(stability),
        interval_for(stability * params.easy_bonus),
        params.maximum_interval,
    )
    days = {Rating.HARD: hard, Rating.GOOD: good, Rating.EASY: easy}

    outcomes = {
        Rating.AGAIN: _successor(
            base, card, Rating.AGAIN, now,
            stability=stability,
            difficulty=difficulty,
            state=card.state,
            scheduled_days=0,
            due=now + RELEARN_STEP,
        )
    }
    for rating, scheduled in days.items():
        outcomes[rating] = _successor(
            base, card, rating, now,
            stability=stability,
            difficulty=difficulty,
            state=State.REVIEW,
            scheduled_days=scheduled,
            due=now + timedelta(days=scheduled),
        )
    return outcomes


def _schedule_review(base: Card, card: Card, now: datetime, params: Parameters, interval_for) -> dict[Rating, SchedulingInfo]:
    """Review: D/S from the forgetting curve at the elapsed time."""
    last_d = card.difficulty
    last_s = _checked_stability(card)
    retrievability = calculate_retrievability(base.elapsed_days, last_s)

    difficulties = {rating: next_difficulty(last_d, rating, params) for rating in Rating}
    stabilities = {
        rating: (
            next_forget_stability(difficulties[rating], last_s, retrievability, params)
            if rating == Rating.AGAIN
            else next_recall_stability(difficulties[rating], last_s, retrievability, params)
        )
        for rating in Rating
    }

    good = interval_for(stabilities[Rating.GOOD])
    hard = min(interval_for(last_s * params.hard_factor), good)
    hard, good, easy = order_intervals(
        hard,
        good,
        interval_for(stabilities[Rating.EASY] * params.easy_bonus),
        params.maximum_interval,
    )
    days = {Rating.HARD: hard, Rating.GOOD: good, Rating.EASY: easy}

    outcomes = {
        Rating.AGAIN: _successor(
            base, card, Rating.AGAIN, now,
            stability=stabilities[Rating.AGAIN],
            difficulty=difficulties[Rating.AGAIN],
            state=State.RELEARNING,
            scheduled_days=0,
            due=now + RELEARN_STEP,
            lapses=card.lapses + 1,
        )
    }
    for rating, scheduled in days.items():
        outcomes[rating] = _successor(
            base, card, rating, now,
            stability=stabilities[rating],
            difficulty=difficulties[rating],
            state=State.REVIEW,
            scheduled_days=scheduled,
            due=now + timedelta(days=scheduled),
        )
    return outcomes


# ---- Helpers ----

def _successor(
    base: Card,
    previous: Card,
    rating: Rating,
    now: datetime,
    *,
    stability: float,
    difficulty: float,
    state: State,
    scheduled_days: int,
    due: datetime,
    lapses: Optional[int] = None
) -> SchedulingInfo:
    successor = replace(
        base,
        stability=stability,
        difficulty=difficulty,
        state=state,
        scheduled_days=scheduled_days,
        due=due,
        lapses=previous.lapses if lapses is None else lapses,
    )
    log = ReviewLog(
        rating=rating,
        elapsed_days=base.elapsed_days,
        scheduled_days=scheduled_days,
        review_time=now,
        state=previous.state,
    )
    return SchedulingInfo(successor, log)


def _checked_stability(card: Card) -> float:
    if card.stability < S_MIN:
        logger.warning(
            "Card stability %.3f below %.1f; clamping", card.stability, S_MIN
        )
        return S_MIN
    return card.stability


def _clamp_difficulty(value: float) -> float:
    return min(max(value, D_MIN), D_MAX)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _fuzz_factor(card: Card) -> float:
    # Seeded from the card so repeated calls for the same state agree
    seed = f"{card.reps}:{card.last_review.isoformat()}"
    return random.Random(seed).random()
