"""
Data-loading helpers for analytics.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

import pandas as pd

from srs_core.analytics.constants import CARD_COLUMNS
from srs_core.fsrs.memory_state import estimate_retention, whole_days_between
from srs_core.schemas import FlashCard


def card_row(card: FlashCard, now: datetime) -> dict:
    """
    Derived per-card values at ``now``.
    """
    days_since = whole_days_between(card.last_review, now)
    return {
        "card_id": card.id,
        "phase": int(card.phase),
        "stability": card.stability,
        "difficulty": card.difficulty,
        "review_count": card.review_count,
        "days_since_last_review": days_since,
        "next_review_in": whole_days_between(now, card.due_date),
        "estimated_retention": estimate_retention(days_since, card.stability),
    }


def load_cards_df(cards: Iterable[FlashCard], now: datetime) -> pd.DataFrame:
    """
    Load a card collection into a dataframe, one row per card.
    """
    rows = [card_row(card, now) for card in cards]
    if not rows:
        return pd.DataFrame(columns=CARD_COLUMNS)
    return pd.DataFrame(rows, columns=CARD_COLUMNS)
