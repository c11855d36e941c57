"""
Types for card analytics.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from srs_core.fsrs.constants import CardPhase
from srs_core.fsrs.service import Grade


@dataclass(frozen=True)
class CardAnalytics:
    """
    Derived view of a single card at one instant.

    ``next_review_in`` is negative for overdue cards; both day counts
    truncate toward zero.
    """
    card_id: int
    current_phase: CardPhase
    stability: float
    difficulty: float
    review_count: int
    days_since_last_review: int
    next_review_in: int
    estimated_retention: float
    next_review_options: list[Grade]


@dataclass(frozen=True)
class BatchAnalysisResult:
    """
    Aggregates over a card collection. Empty input yields zeros.
    """
    total_cards: int = 0
    average_difficulty: float = 0.0
    average_stability: float = 0.0
    average_retention: float = 0.0
    difficulty_distribution: dict[str, int] = field(default_factory=dict)
    phase_distribution: dict[CardPhase, int] = field(default_factory=dict)
    cards_needing_review: int = 0
    overdue_cards: int = 0
