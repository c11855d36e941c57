"""
Constants for card analytics.
"""

from __future__ import annotations

from typing import Final


# Difficulty buckets: [lower, upper) per label
DIFFICULTY_BINS: Final[list[float]] = [float("-inf"), 3.0, 7.0, float("inf")]
DIFFICULTY_LABELS: Final[list[str]] = ["Easy", "Medium", "Hard"]

CARD_COLUMNS: Final[list[str]] = [
    "card_id",
    "phase",
    "stability",
    "difficulty",
    "review_count",
    "days_since_last_review",
    "next_review_in",
    "estimated_retention",
]

# Cards further past due than this many days count as overdue
OVERDUE_THRESHOLD_DAYS: Final[int] = -1
