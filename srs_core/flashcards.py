"""
Flash card manager - bulk operations over card collections

All operations are pure: they return new FlashCard values and leave the
input collection untouched. The caller persists whatever it keeps.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional

from srs_core.analytics import (
    BatchAnalysisResult,
    CardAnalytics,
    build_batch_analysis,
    build_card_analytics,
)
from srs_core.analytics.constants import OVERDUE_THRESHOLD_DAYS
from srs_core.errors import ConfigurationError
from srs_core.fsrs.constants import DEFAULT_DIFFICULTY, DEFAULT_STABILITY, CardPhase
from srs_core.fsrs.memory_state import whole_days_between
from srs_core.fsrs.service import FSRSService
from srs_core.fsrs.timeutils import Clock, ensure_aware
from srs_core.schemas import FlashCard

logger = logging.getLogger(__name__)

DEFAULT_SUSPEND_DAYS = 365


class CardIdGenerator:
    """
    Monotonically increasing card ids.

    Seeded from the clock's epoch milliseconds unless ``start`` is given,
    so ids from separate runs do not collide.

    Raises:
        ConfigurationError: if neither ``start`` nor ``clock`` is given
    """

    def __init__(self, start: Optional[int] = None, clock: Optional[Clock] = None):
        if start is None:
            if clock is None:
                raise ConfigurationError("CardIdGenerator needs a start value or a clock")
            start = int(clock.now().timestamp() * 1000)
        self._counter = itertools.count(start)

    def __call__(self) -> int:
        return next(self._counter)


@dataclass(frozen=True)
class CardFilter:
    """
    Conjunctive card filter. ``None`` / empty / ``False`` fields do not
    constrain.
    """
    phases: frozenset[CardPhase] = frozenset()
    min_difficulty: Optional[float] = None
    max_difficulty: Optional[float] = None
    min_stability: Optional[float] = None
    max_stability: Optional[float] = None
    due_only: Optional[bool] = None
    overdue_only: Optional[bool] = None


class SortStrategy(Enum):
    DUE_DATE_ASC = "due_date_asc"
    DUE_DATE_DESC = "due_date_desc"
    DIFFICULTY_ASC = "difficulty_asc"
    DIFFICULTY_DESC = "difficulty_desc"
    STABILITY_ASC = "stability_asc"
    STABILITY_DESC = "stability_desc"
    REVIEW_COUNT_ASC = "review_count_asc"
    REVIEW_COUNT_DESC = "review_count_desc"
    PRIORITY = "priority"  # most overdue and most difficult first


def priority_score(card: FlashCard, now: datetime) -> float:
    """
    Sort key for PRIORITY: -(days past due + difficulty / 10).
    Lower scores come first.
    """
    days_past_due = whole_days_between(card.due_date, now)
    return -(days_past_due + card.difficulty / 10.0)


class FlashCardManager:
    """
    Creation, reset, suspension, filtering, sorting and analytics for
    collections of flash cards.
    """

    def __init__(
        self,
        service: FSRSService,
        id_generator: Optional[CardIdGenerator] = None,
        clock: Optional[Clock] = None
    ):
        self.service = service
        self.clock = clock or service.clock
        self.id_generator = id_generator or CardIdGenerator(clock=self.clock)

    def _now(self, now: Optional[datetime]) -> datetime:
        return ensure_aware(now or self.clock.now())

    # ---- Creation / lifecycle ----

    def create_card(self, word: Optional[str] = None, now: Optional[datetime] = None) -> FlashCard:
        return self.service.create_new_card(self.id_generator(), word=word, now=self._now(now))

    def create_cards(self, words: Iterable[Optional[str]], now: Optional[datetime] = None) -> list[FlashCard]:
        """Create one card per word, all stamped with the same instant."""
        now = self._now(now)
        cards = [self.create_card(word, now) for word in words]
        logger.debug("Created %d cards", len(cards))
        return cards

    def reset_card(self, card: FlashCard, now: Optional[datetime] = None) -> FlashCard:
        """Back to NEW defaults; ``id`` and ``word`` are kept."""
        now = self._now(now)
        return card.model_copy(update={
            "stability": DEFAULT_STABILITY,
            "difficulty": DEFAULT_DIFFICULTY,
            "interval": 0,
            "lapses": 0,
            "review_count": 0,
            "due_date": now,
            "last_review": now,
            "phase": CardPhase.NEW,
        })

    def reset_cards(self, cards: Iterable[FlashCard], now: Optional[datetime] = None) -> list[FlashCard]:
        now = self._now(now)
        return [self.reset_card(card, now) for card in cards]

    def suspend_card(
        self,
        card: FlashCard,
        days: int = DEFAULT_SUSPEND_DAYS,
        now: Optional[datetime] = None
    ) -> FlashCard:
        """Push the due date ``days`` into the future; memory state untouched."""
        return card.model_copy(update={"due_date": self._now(now) + timedelta(days=days)})

    def resume_card(self, card: FlashCard, now: Optional[datetime] = None) -> FlashCard:
        """Make a suspended card due now."""
        return card.model_copy(update={"due_date": self._now(now)})

    # ---- Analytics ----

    def get_card_analytics(self, card: FlashCard, now: Optional[datetime] = None) -> CardAnalytics:
        return build_card_analytics(card, self.service, self._now(now))

    def batch_analyze_cards(self, cards: Iterable[FlashCard], now: Optional[datetime] = None) -> BatchAnalysisResult:
        return build_batch_analysis(cards, self._now(now))

    # ---- Filtering / sorting ----

    def filter_cards(
        self,
        cards: Iterable[FlashCard],
        card_filter: CardFilter,
        now: Optional[datetime] = None
    ) -> list[FlashCard]:
        """Keep the cards matching every constraint of ``card_filter``."""
        now = self._now(now)
        return [card for card in cards if self._matches(card, card_filter, now)]

    def _matches(self, card: FlashCard, card_filter: CardFilter, now: datetime) -> bool:
        if card_filter.phases and card.phase not in card_filter.phases:
            return False
        if card_filter.min_difficulty is not None and card.difficulty < card_filter.min_difficulty:
            return False
        if card_filter.max_difficulty is not None and card.difficulty > card_filter.max_difficulty:
            return False
        if card_filter.min_stability is not None and card.stability < card_filter.min_stability:
            return False
        if card_filter.max_stability is not None and card.stability > card_filter.max_stability:
            return False
        if card_filter.due_only and not self.service.is_due(card, now):
            return False
        if card_filter.overdue_only and whole_days_between(now, card.due_date) >= OVERDUE_THRESHOLD_DAYS:
            return False
        return True

    def sort_cards(
        self,
        cards: Iterable[FlashCard],
        strategy: SortStrategy,
        now: Optional[datetime] = None
    ) -> list[FlashCard]:
        """Stable sort by ``strategy``."""
        if strategy == SortStrategy.PRIORITY:
            now = self._now(now)
            return sorted(cards, key=lambda card: priority_score(card, now))

        keys = {
            SortStrategy.DUE_DATE_ASC: (lambda c: c.due_date, False),
            SortStrategy.DUE_DATE_DESC: (lambda c: c.due_date, True),
            SortStrategy.DIFFICULTY_ASC: (lambda c: c.difficulty, False),
            SortStrategy.DIFFICULTY_DESC: (lambda c: c.difficulty, True),
            SortStrategy.STABILITY_ASC: (lambda c: c.stability, False),
            SortStrategy.STABILITY_DESC: (lambda c: c.stability, True),
            SortStrategy.REVIEW_COUNT_ASC: (lambda c: c.review_count, False),
            SortStrategy.REVIEW_COUNT_DESC: (lambda c: c.review_count, True),
        }
        key, reverse = keys[strategy]
        return sorted(cards, key=key, reverse=reverse)
