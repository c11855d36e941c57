"""
Analytics package exports.
"""

from srs_core.analytics.constants import DIFFICULTY_LABELS
from srs_core.analytics.service import build_batch_analysis, build_card_analytics
from srs_core.analytics.types import BatchAnalysisResult, CardAnalytics

__all__ = [
    "DIFFICULTY_LABELS",
    "build_batch_analysis",
    "build_card_analytics",
    "BatchAnalysisResult",
    "CardAnalytics",
]
