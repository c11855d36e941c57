"""
Service layer to assemble card analytics.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from srs_core.analytics.metrics import (
    compute_cards_needing_review,
    compute_difficulty_distribution,
    compute_mean,
    compute_overdue_cards,
    compute_phase_distribution,
)
from srs_core.analytics.queries import card_row, load_cards_df
from srs_core.analytics.types import BatchAnalysisResult, CardAnalytics
from srs_core.fsrs.service import FSRSService
from srs_core.schemas import FlashCard


def build_card_analytics(card: FlashCard, service: FSRSService, now: datetime) -> CardAnalytics:
    """
    Derived values and the four grade options for one card.
    """
    row = card_row(card, now)
    return CardAnalytics(
        card_id=card.id,
        current_phase=card.phase,
        stability=card.stability,
        difficulty=card.difficulty,
        review_count=card.review_count,
        days_since_last_review=row["days_since_last_review"],
        next_review_in=row["next_review_in"],
        estimated_retention=row["estimated_retention"],
        next_review_options=service.get_grade_options(card, now),
    )


def build_batch_analysis(cards: Iterable[FlashCard], now: datetime) -> BatchAnalysisResult:
    """
    Aggregate metrics over a card collection.
    """
    cards_df = load_cards_df(cards, now)
    if cards_df.empty:
        return BatchAnalysisResult()

    return BatchAnalysisResult(
        total_cards=len(cards_df),
        average_difficulty=compute_mean(cards_df, "difficulty"),
        average_stability=compute_mean(cards_df, "stability"),
        average_retention=compute_mean(cards_df, "estimated_retention"),
        difficulty_distribution=compute_difficulty_distribution(cards_df),
        phase_distribution=compute_phase_distribution(cards_df),
        cards_needing_review=compute_cards_needing_review(cards_df),
        overdue_cards=compute_overdue_cards(cards_df),
    )
