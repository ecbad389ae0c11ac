"""
Service layer to assemble daily review queues and review statistics.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Iterable, Optional

from quizsrs.analytics.metrics import (
    compute_average_ease_factor,
    compute_mastery_level_counts,
    compute_next_review_date,
    compute_total_reviews,
    due_today_mask,
    ordered_item_ids,
    overdue_mask,
)
from quizsrs.analytics.queries import load_schedules_df
from quizsrs.analytics.types import DailyReviewQueue, ReviewStats
from quizsrs.sm2.constants import DEFAULT_EASE_FACTOR, MIN_NEW_ITEMS, NEW_ITEMS_DIVISOR
from quizsrs.sm2.review_schedule import ReviewSchedule


def new_items_target(review_count: int) -> int:
    """
    Number of new items to mix into a session with review_count reviews.

    Aims at an 80:20 review/new split: review_count // 4, at least one
    whenever there is anything to review.
    """
    if review_count <= 0:
        return 0
    return max(MIN_NEW_ITEMS, review_count // NEW_ITEMS_DIVISOR)


def build_daily_queue(
    schedules: Iterable[ReviewSchedule],
    now: datetime,
    group_id: Optional[str] = None,
    tz: Optional[tzinfo] = None
) -> DailyReviewQueue:
    """
    Build the review queue for the current day.

    Overdue items come first (most overdue first), then items due later
    today. Items due on a later day are left out. new_items stays empty;
    choosing never-seen items is the caller's job.
    """
    schedules_df = load_schedules_df(schedules, group_id)
    if schedules_df.empty:
        return DailyReviewQueue()

    overdue = ordered_item_ids(schedules_df, overdue_mask(schedules_df, now))
    due_today = ordered_item_ids(schedules_df, due_today_mask(schedules_df, now, tz))
    review_items = overdue + due_today

    return DailyReviewQueue(
        review_items=review_items,
        new_items=[],
        new_items_target=new_items_target(len(review_items)),
    )


def build_review_stats(
    schedules: Iterable[ReviewSchedule],
    group_id: str,
    now: datetime,
    tz: Optional[tzinfo] = None
) -> ReviewStats:
    """
    Aggregate review statistics for one group.

    An empty group reports zero counts with the default ease factor (2.5).
    """
    schedules_df = load_schedules_df(schedules, group_id)
    if schedules_df.empty:
        return ReviewStats(
            group_id=group_id,
            total_reviews=0,
            overdue_count=0,
            due_today_count=0,
            average_ease_factor=DEFAULT_EASE_FACTOR,
            mastery_level_counts={},
            next_review_date=None,
        )

    return ReviewStats(
        group_id=group_id,
        total_reviews=compute_total_reviews(schedules_df),
        overdue_count=int(overdue_mask(schedules_df, now).sum()),
        due_today_count=int(due_today_mask(schedules_df, now, tz).sum()),
        average_ease_factor=compute_average_ease_factor(schedules_df, DEFAULT_EASE_FACTOR),
        mastery_level_counts=compute_mastery_level_counts(schedules_df),
        next_review_date=compute_next_review_date(schedules_df, now),
    )
