"""
Adapter between the persisted FlashCard and the scheduler Card.

The persisted model has one short-term phase (RELEARNING); the scheduler
distinguishes first-time LEARNING from RELEARNING after a lapse.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from srs_core.fsrs.constants import CardPhase, State
from srs_core.fsrs.memory_state import Card

if TYPE_CHECKING:
    from srs_core.schemas import FlashCard


_STATE_FOR_PHASE = {
    CardPhase.NEW: State.NEW,
    CardPhase.RELEARNING: State.RELEARNING,
    CardPhase.REVIEW: State.REVIEW,
}

_PHASE_FOR_STATE = {
    State.NEW: CardPhase.NEW,
    State.LEARNING: CardPhase.RELEARNING,
    State.RELEARNING: CardPhase.RELEARNING,
    State.REVIEW: CardPhase.REVIEW,
}


def state_for_phase(phase: CardPhase) -> State:
    return _STATE_FOR_PHASE[CardPhase(phase)]


def phase_for_state(state: State) -> CardPhase:
    return _PHASE_FOR_STATE[State(state)]


def to_scheduling_card(flash_card: FlashCard) -> Card:
    """
    Build the scheduler's view of a persisted card.

    ``interval`` becomes ``scheduled_days`` and ``review_count`` becomes
    ``reps``; ``elapsed_days`` is recomputed by the scheduler at review time.
    """
    return Card(
        due=flash_card.due_date,
        last_review=flash_card.last_review,
        stability=flash_card.stability,
        difficulty=flash_card.difficulty,
        scheduled_days=flash_card.interval,
        reps=flash_card.review_count,
        lapses=flash_card.lapses,
        state=state_for_phase(flash_card.phase),
    )
