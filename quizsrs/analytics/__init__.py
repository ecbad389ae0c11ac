"""
Analytics package exports.
"""

from quizsrs.analytics.service import build_daily_queue, build_review_stats, new_items_target
from quizsrs.analytics.types import DailyReviewQueue, ReviewStats

__all__ = [
    "build_daily_queue",
    "build_review_stats",
    "new_items_target",
    "DailyReviewQueue",
    "ReviewStats",
]
