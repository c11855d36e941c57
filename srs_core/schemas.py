"""
Pydantic models for persisted flash cards.

A FlashCard is an immutable value snapshot: reviewing, resetting or
suspending a card produces a new FlashCard via ``model_copy``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from srs_core.fsrs.constants import DEFAULT_DIFFICULTY, DEFAULT_STABILITY, CardPhase
from srs_core.fsrs.timeutils import ensure_aware


def _local_now() -> datetime:
    return datetime.now().astimezone()


class FlashCard(BaseModel):
    """Persistent memory state of one learnable item."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Unique card identifier")
    word: Optional[str] = Field(default=None, description="Label of the learnable item")

    # Memory model
    stability: float = Field(default=DEFAULT_STABILITY, description="Days until recall decays to ~90%")
    difficulty: float = Field(default=DEFAULT_DIFFICULTY, description="Intrinsic hardness (1-10)")
    interval: int = Field(default=0, ge=0, description="Scheduled gap in days")

    # Review tracking
    lapses: int = Field(default=0, ge=0, description="Again grades given from New/Review")
    review_count: int = Field(default=0, ge=0, description="Number of committed reviews")
    due_date: datetime = Field(default_factory=_local_now, description="Next scheduled review")
    last_review: datetime = Field(default_factory=_local_now, description="Most recent review")
    phase: CardPhase = Field(default=CardPhase.NEW, description="Lifecycle phase")

    @field_validator("due_date", "last_review")
    @classmethod
    def _attach_timezone(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    def __repr__(self):
        return f"<FlashCard(id={self.id}, phase={self.phase.name}, due={self.due_date.isoformat()})>"
