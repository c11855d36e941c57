"""
FSRS Service - card-level API over the scheduler

Wraps the pure scheduler with business defaults and the persisted
FlashCard representation:
- create_new_card: fresh card in phase NEW
- get_grade_options: the four candidate outcomes for "now"
- apply_grade: commit one outcome
- is_due / get_due_cards / batch_calculate_grades / get_learning_stat

Every operation that needs "now" takes an optional ``now`` and otherwise
asks the injected clock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from srs_core.errors import InvalidGradeError
from srs_core.fsrs.adapter import to_scheduling_card
from srs_core.fsrs.constants import GRADE_COLORS, GRADE_TITLES, CardPhase, Rating
from srs_core.fsrs.memory_state import ReviewLog
from srs_core.fsrs.parameters import Parameters, Weights
from srs_core.fsrs.scheduler import repeat
from srs_core.fsrs.timeutils import (
    Clock,
    SYSTEM_CLOCK,
    ensure_aware,
    format_duration,
    is_card_due,
    millis_between,
    update_card_due_date,
)
from srs_core.schemas import FlashCard

if TYPE_CHECKING:
    from srs_core.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Grade:
    """
    One candidate outcome of reviewing a card right now.

    Grades are recomputed on every request and never persisted.
    ``card_id`` and ``source_review_count`` identify the card state the
    grade was computed from.
    """
    color: str
    title: str
    choice: Rating
    stability: float
    difficulty: float
    interval: int
    duration_millis: int
    txt: str
    lapses: int
    card_id: int
    source_review_count: int
    log: ReviewLog


@dataclass(frozen=True)
class LearningStat:
    """Aggregate counts and averages over a card collection."""
    total_cards: int
    due_cards: int
    new_cards: int
    review_cards: int
    relearning_cards: int
    average_difficulty: float
    average_stability: float


class FSRSService:
    """
    Facade over the scheduling engine.

    Args:
        request_retention: Target recall probability (0-1)
        custom_params: Optional 13-weight vector replacing the defaults
        is_review: Review flag forwarded to the scheduler
        clock: Time source (defaults to the system clock)
        parameters: Complete parameter set; overrides the two above
    """

    def __init__(
        self,
        request_retention: float = 0.9,
        custom_params: Optional[Sequence[float]] = None,
        is_review: bool = False,
        clock: Optional[Clock] = None,
        parameters: Optional[Parameters] = None
    ):
        if parameters is None:
            weights = Weights.from_sequence(custom_params) if custom_params is not None else Weights()
            parameters = Parameters(request_retention=request_retention, weights=weights)
        self.parameters = parameters
        self.is_review = is_review
        self.clock = clock or SYSTEM_CLOCK

    @classmethod
    def from_settings(cls, settings: Settings, clock: Optional[Clock] = None) -> "FSRSService":
        """Build a service from environment-derived settings."""
        return cls(
            parameters=settings.to_parameters(),
            is_review=settings.is_review,
            clock=clock,
        )

    def now(self) -> datetime:
        return self.clock.now()

    # ---- Cards ----

    def create_new_card(self, card_id: int, word: Optional[str] = None, now: Optional[datetime] = None) -> FlashCard:
        """Fresh card in phase NEW, due immediately."""
        now = now or self.now()
        return FlashCard(id=card_id, word=word, due_date=now, last_review=now)

    def get_grade_options(self, card: FlashCard, now: Optional[datetime] = None) -> list[Grade]:
        """
        Compute the four candidate outcomes for reviewing ``card`` at ``now``.

        Returns:
            Grades ordered Again, Hard, Good, Easy
        """
        now = ensure_aware(now or self.now())
        outcomes = repeat(to_scheduling_card(card), now, self.parameters, self.is_review)

        grades = []
        for rating in Rating:
            successor, log = outcomes[rating]
            duration = millis_between(now, successor.due)
            grades.append(Grade(
                color=GRADE_COLORS[rating],
                title=GRADE_TITLES[rating],
                choice=rating,
                stability=successor.stability,
                difficulty=successor.difficulty,
                interval=successor.scheduled_days,
                duration_millis=duration,
                txt=format_duration(duration),
                lapses=successor.lapses,
                card_id=card.id,
                source_review_count=card.review_count,
                log=replace(log, card_id=card.id),
            ))
        return grades

    def apply_grade(self, card: FlashCard, grade: Grade, now: Optional[datetime] = None) -> FlashCard:
        """
        Commit ``grade`` to ``card``.

        Raises:
            InvalidGradeError: if the grade was computed for another card
                or an older state of this one
        """
        if grade.card_id != card.id or grade.source_review_count != card.review_count:
            raise InvalidGradeError(
                f"Grade for card {grade.card_id} (review {grade.source_review_count}) "
                f"cannot be applied to card {card.id} (review {card.review_count})"
            )
        updated = update_card_due_date(card, grade, now=now, clock=self.clock)
        logger.debug(
            "Applied %s to card %s: interval=%d stability=%.2f difficulty=%.2f",
            grade.choice.name, card.id, grade.interval, grade.stability, grade.difficulty
        )
        return updated

    # ---- Queries ----

    def is_due(self, card: FlashCard, now: Optional[datetime] = None) -> bool:
        return is_card_due(card, now=now, clock=self.clock)

    def get_due_cards(self, cards: Iterable[FlashCard], now: Optional[datetime] = None) -> list[FlashCard]:
        now = now or self.now()
        return [card for card in cards if self.is_due(card, now)]

    def batch_calculate_grades(
        self,
        cards: Iterable[FlashCard],
        now: Optional[datetime] = None
    ) -> dict[FlashCard, list[Grade]]:
        """Grade options for every card, all computed at the same instant."""
        now = now or self.now()
        return {card: self.get_grade_options(card, now) for card in cards}

    def get_learning_stat(self, cards: Sequence[FlashCard], now: Optional[datetime] = None) -> LearningStat:
        """Aggregate statistics; averages of an empty collection are 0.0."""
        now = now or self.now()
        total = len(cards)
        return LearningStat(
            total_cards=total,
            due_cards=len(self.get_due_cards(cards, now)),
            new_cards=sum(1 for c in cards if c.phase == CardPhase.NEW),
            review_cards=sum(1 for c in cards if c.phase == CardPhase.REVIEW),
            relearning_cards=sum(1 for c in cards if c.phase == CardPhase.RELEARNING),
            average_difficulty=sum(c.difficulty for c in cards) / total if total else 0.0,
            average_stability=sum(c.stability for c in cards) / total if total else 0.0,
        )
