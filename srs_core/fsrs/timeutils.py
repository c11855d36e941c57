"""
Time Utilities - clocks and due-date arithmetic

All datetimes are timezone-aware local times. Durations that cross the
service boundary are whole milliseconds.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional, Protocol

from srs_core.fsrs.constants import MILLIS_PER_DAY, MILLIS_PER_MINUTE, CardPhase, Rating

if TYPE_CHECKING:
    from srs_core.fsrs.service import Grade
    from srs_core.schemas import FlashCard


# ---- Clocks ----

class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time in the local timezone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock:
    """
    Clock frozen at a given moment, moved only by ``advance``.

    Used for deterministic tests and for replaying review histories.
    """

    def __init__(self, moment: datetime):
        self._moment = ensure_aware(moment)

    def now(self) -> datetime:
        return self._moment

    def advance(self, delta: Optional[timedelta] = None, **kwargs) -> datetime:
        """Move the clock forward by ``delta`` or by timedelta kwargs."""
        self._moment += delta if delta is not None else timedelta(**kwargs)
        return self._moment

    def set(self, moment: datetime):
        self._moment = ensure_aware(moment)


SYSTEM_CLOCK = SystemClock()


def ensure_aware(moment: datetime) -> datetime:
    """Attach the local timezone to a naive datetime."""
    if moment.tzinfo is None:
        return moment.astimezone()
    return moment


def current_time(clock: Optional[Clock] = None) -> datetime:
    return (clock or SYSTEM_CLOCK).now()


# ---- Duration arithmetic ----

def add_millis_to_now(millis: int, clock: Optional[Clock] = None) -> datetime:
    """Return "now" plus ``millis`` milliseconds."""
    return add_millis_to_time(current_time(clock), millis)


def add_millis_to_time(base: datetime, millis: int) -> datetime:
    """Return ``base`` plus ``millis`` milliseconds, zone-aware."""
    return ensure_aware(base) + timedelta(milliseconds=millis)


def millis_between(start: datetime, end: datetime) -> int:
    """Whole milliseconds from ``start`` to ``end`` (negative if reversed)."""
    return int((ensure_aware(end) - ensure_aware(start)) / timedelta(milliseconds=1))


# ---- Due dates ----

def is_card_due(card: FlashCard, now: Optional[datetime] = None, clock: Optional[Clock] = None) -> bool:
    """A card is due once "now" reaches its due date (inclusive)."""
    now = now or current_time(clock)
    return ensure_aware(now) >= card.due_date


def time_until_due(card: FlashCard, now: Optional[datetime] = None, clock: Optional[Clock] = None) -> int:
    """Milliseconds until the card is due; 0 when it already is."""
    now = now or current_time(clock)
    return max(millis_between(now, card.due_date), 0)


def update_card_due_date(
    card: FlashCard,
    grade: Grade,
    now: Optional[datetime] = None,
    clock: Optional[Clock] = None
) -> FlashCard:
    """
    Commit a grade's outcome to a card.

    Sets stability, difficulty, interval and lapses from the grade, moves
    the due date ``grade.duration_millis`` past "now", stamps the review
    and advances the phase (RELEARNING after Again, REVIEW otherwise).

    Args:
        card: Card the grade was computed for
        grade: Chosen outcome
        now: Review time (defaults to the clock)

    Returns:
        New FlashCard; ``card`` is unchanged
    """
    now = ensure_aware(now or current_time(clock))
    return card.model_copy(update={
        "stability": grade.stability,
        "difficulty": grade.difficulty,
        "interval": grade.interval,
        "lapses": grade.lapses,
        "due_date": add_millis_to_time(now, grade.duration_millis),
        "last_review": now,
        "review_count": card.review_count + 1,
        "phase": CardPhase.RELEARNING if grade.choice == Rating.AGAIN else CardPhase.REVIEW,
    })


# ---- Display ----

def format_days(days: float) -> str:
    """
    Human-readable day count using the largest unit that keeps the
    number at least 1: "5 day", "2.5 month", "1.2 year".
    """
    if days > 365:
        return f"{days / 365.0:.1f} year"
    if days > 30:
        return f"{days / 30.0:.1f} month"
    return f"{int(days)} day"


def format_duration(millis: int) -> str:
    """Text for a grade button: minutes below one day, days above."""
    if millis < MILLIS_PER_DAY:
        return f"{round(millis / MILLIS_PER_MINUTE)} Min"
    return format_days(millis / MILLIS_PER_DAY)
