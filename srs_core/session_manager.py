"""
Learning Session Manager

Orchestrates a bounded sequence of reviews:
1. start_session picks due review cards and new cards, then shuffles them
2. process_card_review commits one grade and advances the session
3. get_learning_recommendations derives workload and study suggestions

Sessions are immutable; every step returns a new LearningSession.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional, Sequence

from srs_core.errors import InvalidStateError
from srs_core.fsrs.constants import CardPhase, Rating
from srs_core.fsrs.memory_state import ReviewLog, whole_days_between
from srs_core.fsrs.service import FSRSService, Grade, LearningStat
from srs_core.fsrs.timeutils import Clock, ensure_aware
from srs_core.schemas import FlashCard

logger = logging.getLogger(__name__)


DEFAULT_MAX_NEW_CARDS = 10
DEFAULT_MAX_REVIEW_CARDS = 50

DEFAULT_SECONDS_PER_CARD = 30.0
PRIORITY_CARD_LIMIT = 10

HIGH_LOAD_THRESHOLD = 50
MEDIUM_LOAD_THRESHOLD = 20

HIGH_DIFFICULTY_THRESHOLD = 7.0
RELEARNING_RATIO_THRESHOLD = 0.2


# ---- Session ----

@dataclass(frozen=True)
class LearningSession:
    """
    One bounded review session.

    ``session_stats`` maps card id to the rating it received.
    ``end_time`` is set when the last card is processed.
    """
    session_id: str
    cards: tuple[FlashCard, ...]
    start_time: datetime
    current_index: int = 0
    completed_count: int = 0
    correct_count: int = 0
    session_stats: dict[int, Rating] = field(default_factory=dict)
    end_time: Optional[datetime] = None
    review_logs: tuple[ReviewLog, ...] = ()

    def get_current_card(self) -> Optional[FlashCard]:
        """Card to review next, or None once the session is complete."""
        if self.current_index < len(self.cards):
            return self.cards[self.current_index]
        return None

    def is_completed(self) -> bool:
        return self.current_index >= len(self.cards)

    def get_progress(self) -> float:
        """Percent of cards completed; an empty session counts as done."""
        if not self.cards:
            return 100.0
        return self.completed_count / len(self.cards) * 100.0

    def get_accuracy(self) -> float:
        """Percent of completed cards not graded Again."""
        if self.completed_count == 0:
            return 0.0
        return self.correct_count / self.completed_count * 100.0

    def get_average_time_per_card(self, now: datetime) -> float:
        """Seconds per completed card, measured up to ``end_time`` or ``now``."""
        if self.completed_count == 0:
            return 0.0
        end = self.end_time or ensure_aware(now)
        return int((end - self.start_time).total_seconds()) / self.completed_count


# ---- Recommendations ----

class StudyLoadLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class StudyLoad:
    """Due-card counts now, in one day and in one week."""
    today: int
    tomorrow: int
    next_week: int
    level: StudyLoadLevel


@dataclass(frozen=True)
class LearningRecommendations:
    suggested_new_cards: int
    suggested_review_cards: int
    estimated_study_time: int  # minutes
    priority_cards: list[FlashCard]
    study_load: StudyLoad
    recommendations: list[str]


SUGGESTED_NEW_CARDS = {
    StudyLoadLevel.HIGH: 0,
    StudyLoadLevel.MEDIUM: 5,
    StudyLoadLevel.LOW: 10,
}

LOAD_RECOMMENDATIONS = {
    StudyLoadLevel.HIGH: [
        "Your review load is heavy; clear the due cards first",
        "Pause new cards for now and focus on reviews",
    ],
    StudyLoadLevel.MEDIUM: [
        "Your review load is moderate; keep the current pace",
        "A few new cards are fine",
    ],
    StudyLoadLevel.LOW: [
        "Great! You are ahead of schedule",
        "You can take on more new cards",
    ],
}

SLOW_DOWN_RECOMMENDATION = "Average difficulty is high; slow down on new cards"
RELEARNING_RECOMMENDATION = "Many cards need relearning; strengthen your reviews"


class LearningSessionManager:
    """
    Runs review sessions on top of an FSRSService.

    Args:
        service: Scheduling service used to grade cards
        clock: Time source (defaults to the service's clock)
        rng: Random source for shuffling and session ids
    """

    def __init__(
        self,
        service: FSRSService,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None
    ):
        self.service = service
        self.clock = clock or service.clock
        self.rng = rng or random.Random()

    def _now(self, now: Optional[datetime]) -> datetime:
        return ensure_aware(now or self.clock.now())

    def start_session(
        self,
        all_cards: Sequence[FlashCard],
        max_new_cards: int = DEFAULT_MAX_NEW_CARDS,
        max_review_cards: int = DEFAULT_MAX_REVIEW_CARDS,
        now: Optional[datetime] = None
    ) -> LearningSession:
        """
        Select up to ``max_review_cards`` due non-new cards and up to
        ``max_new_cards`` new cards, in random order.
        """
        now = self._now(now)
        due_reviews = [
            card for card in self.service.get_due_cards(all_cards, now)
            if card.phase != CardPhase.NEW
        ][:max_review_cards]
        new_cards = [card for card in all_cards if card.phase == CardPhase.NEW][:max_new_cards]

        selected = due_reviews + new_cards
        self.rng.shuffle(selected)

        session = LearningSession(
            session_id=uuid.UUID(int=self.rng.getrandbits(128)).hex,
            cards=tuple(selected),
            start_time=now,
        )
        logger.debug(
            "Started session %s: %d review + %d new cards",
            session.session_id, len(due_reviews), len(new_cards)
        )
        return session

    def process_card_review(
        self,
        session: LearningSession,
        grade: Grade,
        now: Optional[datetime] = None
    ) -> tuple[LearningSession, FlashCard]:
        """
        Commit ``grade`` to the session's current card and advance.

        Returns:
            (updated session, updated card)

        Raises:
            InvalidStateError: if the session has no current card
            InvalidGradeError: if the grade belongs to a different card
        """
        card = session.get_current_card()
        if card is None:
            raise InvalidStateError(f"Session {session.session_id} has no current card")

        now = self._now(now)
        updated_card = self.service.apply_grade(card, grade, now)

        next_index = session.current_index + 1
        updated = replace(
            session,
            current_index=next_index,
            completed_count=session.completed_count + 1,
            correct_count=session.correct_count + (0 if grade.choice == Rating.AGAIN else 1),
            session_stats={**session.session_stats, card.id: grade.choice},
            end_time=now if next_index >= len(session.cards) else session.end_time,
            review_logs=session.review_logs + (grade.log,),
        )
        logger.debug(
            "Session %s: card %s graded %s (%.0f%% done)",
            session.session_id, card.id, grade.choice.name, updated.get_progress()
        )
        return updated, updated_card

    # ---- Recommendations ----

    def get_learning_recommendations(
        self,
        cards: Sequence[FlashCard],
        recent_sessions: Iterable[LearningSession] = (),
        now: Optional[datetime] = None
    ) -> LearningRecommendations:
        """Workload, suggested amounts and text advice for the next study block."""
        now = self._now(now)
        stats = self.service.get_learning_stat(cards, now)
        study_load = self.calculate_study_load(cards, now)

        return LearningRecommendations(
            suggested_new_cards=SUGGESTED_NEW_CARDS[study_load.level],
            suggested_review_cards=stats.due_cards,
            estimated_study_time=self.estimate_study_time(stats, recent_sessions, now),
            priority_cards=self.get_priority_cards(cards, now),
            study_load=study_load,
            recommendations=self._text_recommendations(stats, study_load),
        )

    def get_priority_cards(self, cards: Sequence[FlashCard], now: datetime) -> list[FlashCard]:
        """Due cards, longest unreviewed and hardest first."""
        due = self.service.get_due_cards(cards, now)
        due.sort(
            key=lambda card: whole_days_between(card.last_review, now) * card.difficulty,
            reverse=True,
        )
        return due[:PRIORITY_CARD_LIMIT]

    def calculate_study_load(self, cards: Sequence[FlashCard], now: datetime) -> StudyLoad:
        today = len(self.service.get_due_cards(cards, now))
        if today > HIGH_LOAD_THRESHOLD:
            level = StudyLoadLevel.HIGH
        elif today > MEDIUM_LOAD_THRESHOLD:
            level = StudyLoadLevel.MEDIUM
        else:
            level = StudyLoadLevel.LOW

        return StudyLoad(
            today=today,
            tomorrow=len(self.service.get_due_cards(cards, now + timedelta(days=1))),
            next_week=len(self.service.get_due_cards(cards, now + timedelta(days=7))),
            level=level,
        )

    def estimate_study_time(
        self,
        stats: LearningStat,
        recent_sessions: Iterable[LearningSession],
        now: datetime
    ) -> int:
        """
        Minutes needed for the due cards, from the average pace of recent
        sessions that completed at least one card (30 s per card otherwise).
        """
        paces = [
            session.get_average_time_per_card(now)
            for session in recent_sessions
            if session.completed_count > 0
        ]
        seconds_per_card = sum(paces) / len(paces) if paces else DEFAULT_SECONDS_PER_CARD
        return int(stats.due_cards * seconds_per_card / 60)

    def _text_recommendations(self, stats: LearningStat, study_load: StudyLoad) -> list[str]:
        recommendations = list(LOAD_RECOMMENDATIONS[study_load.level])
        if stats.average_difficulty > HIGH_DIFFICULTY_THRESHOLD:
            recommendations.append(SLOW_DOWN_RECOMMENDATION)
        if stats.total_cards and stats.relearning_cards / stats.total_cards > RELEARNING_RATIO_THRESHOLD:
            recommendations.append(RELEARNING_RECOMMENDATION)
        return recommendations
