"""
Types for review queues and review statistics.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional

from quizsrs.sm2.constants import MASTERY_SCORE_WEIGHTS, MasteryLevel


@dataclass(frozen=True)
class DailyReviewQueue:
    """
    Items to present in one study session.

    review_items: overdue items (oldest first) followed by items due later today
    new_items: never-scheduled items; the scheduler leaves this empty and the
        consumer fills it (see with_new_items)
    new_items_target: how many new items the session should mix in
    """
    review_items: list[str] = field(default_factory=list)
    new_items: list[str] = field(default_factory=list)
    new_items_target: int = 0

    @property
    def total_count(self) -> int:
        return len(self.review_items) + len(self.new_items)

    @property
    def review_ratio(self) -> float:
        """Share of review items in the queue (0 for an empty queue)."""
        if self.total_count == 0:
            return 0.0
        return len(self.review_items) / self.total_count

    def with_new_items(self, item_ids: Iterable[str]) -> DailyReviewQueue:
        """Copy of the queue with new items, capped at new_items_target."""
        return replace(self, new_items=list(item_ids)[:self.new_items_target])


@dataclass(frozen=True)
class ReviewStats:
    """
    Aggregate review statistics for one group.
    """
    group_id: str
    total_reviews: int
    overdue_count: int
    due_today_count: int
    average_ease_factor: float
    mastery_level_counts: dict[MasteryLevel, int] = field(default_factory=dict)
    next_review_date: Optional[datetime] = None

    @property
    def mastery_score(self) -> float:
        """
        Weighted mastery score in 0-100.

        learning=0, reviewing=33, familiar=66, mastered=100, averaged over
        all classified schedules. 0 when nothing has been reviewed.
        """
        if self.total_reviews <= 0:
            return 0.0

        total = sum(self.mastery_level_counts.get(level, 0) for level in MasteryLevel)
        if total == 0:
            return 0.0

        weighted_sum = sum(
            self.mastery_level_counts.get(level, 0) * weight
            for level, weight in MASTERY_SCORE_WEIGHTS.items()
        )
        return weighted_sum / total
