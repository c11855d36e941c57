"""
Metric computations for card analytics.
"""

from __future__ import annotations

import pandas as pd

from srs_core.analytics.constants import (
    DIFFICULTY_BINS,
    DIFFICULTY_LABELS,
    OVERDUE_THRESHOLD_DAYS,
)
from srs_core.fsrs.constants import CardPhase


def compute_mean(cards_df: pd.DataFrame, column: str) -> float:
    """
    Column mean, 0.0 for an empty frame.
    """
    if cards_df.empty:
        return 0.0
    return float(cards_df[column].mean())


def compute_difficulty_distribution(cards_df: pd.DataFrame) -> dict[str, int]:
    """
    Count cards per difficulty bucket (Easy < 3 <= Medium < 7 <= Hard).

    Buckets without cards are omitted.
    """
    if cards_df.empty:
        return {}
    buckets = pd.cut(
        cards_df["difficulty"].astype("float64"),
        bins=DIFFICULTY_BINS,
        labels=DIFFICULTY_LABELS,
        right=False,
    )
    counts = buckets.value_counts()
    return {str(label): int(count) for label, count in counts.items() if count > 0}


def compute_phase_distribution(cards_df: pd.DataFrame) -> dict[CardPhase, int]:
    """
    Count cards per lifecycle phase.
    """
    if cards_df.empty:
        return {}
    counts = cards_df["phase"].value_counts()
    return {CardPhase(int(phase)): int(count) for phase, count in counts.items()}


def compute_cards_needing_review(cards_df: pd.DataFrame) -> int:
    """
    Cards whose next review is today or earlier.
    """
    if cards_df.empty:
        return 0
    return int((cards_df["next_review_in"] <= 0).sum())


def compute_overdue_cards(cards_df: pd.DataFrame) -> int:
    """
    Cards more than a day past due.
    """
    if cards_df.empty:
        return 0
    return int((cards_df["next_review_in"] < OVERDUE_THRESHOLD_DAYS).sum())
