import random
from datetime import datetime, timedelta, timezone

import pytest

from srs_core.flashcards import CardIdGenerator, FlashCardManager
from srs_core.fsrs.constants import CardPhase
from srs_core.fsrs.service import FSRSService
from srs_core.fsrs.timeutils import FixedClock
from srs_core.schemas import FlashCard
from srs_core.session_manager import LearningSessionManager


NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    """Clock frozen at NOW."""
    return FixedClock(NOW)


@pytest.fixture
def service(clock):
    return FSRSService(clock=clock)


@pytest.fixture
def manager(service, clock):
    return FlashCardManager(service, id_generator=CardIdGenerator(start=1000), clock=clock)


@pytest.fixture
def session_manager(service, clock):
    return LearningSessionManager(service, clock=clock, rng=random.Random(42))


@pytest.fixture
def make_card():
    """Factory for FlashCards relative to NOW."""
    counter = iter(range(1, 10_000))

    def _make(
        phase=CardPhase.REVIEW,
        due_in_days=0.0,
        last_review_days_ago=1.0,
        stability=5.0,
        difficulty=5.0,
        **kwargs,
    ):
        return FlashCard(
            id=kwargs.pop("id", next(counter)),
            phase=phase,
            stability=stability,
            difficulty=difficulty,
            due_date=NOW + timedelta(days=due_in_days),
            last_review=NOW - timedelta(days=last_review_days_ago),
            **kwargs,
        )

    return _make
