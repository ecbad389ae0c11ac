"""
Quiz-side integration with the review scheduler.

The quiz view-model reports answers and reads queues/stats through
ReviewSession. Spaced repetition is an enhancement on top of quiz scoring:
scheduler failures are logged and swallowed here so a broken store never
blocks recording an answer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from quizsrs.analytics import DailyReviewQueue, ReviewStats
from quizsrs.scheduler import SRSScheduler
from quizsrs.sm2.constants import ReviewQuality
from quizsrs.sm2.errors import SRSError

logger = logging.getLogger(__name__)


def quality_for_answer(is_correct: bool) -> ReviewQuality:
    """Binary answer -> SM-2 quality (5 for correct, 0 for incorrect)."""
    return ReviewQuality.CORRECT if is_correct else ReviewQuality.INCORRECT


class ReviewSession:
    """
    Scheduler facade for one quiz screen.

    Every method degrades to None (or a no-op) when the scheduler fails or
    spaced repetition is disabled.
    """

    def __init__(self, scheduler: SRSScheduler, enabled: bool = True):
        self.scheduler = scheduler
        self.enabled = enabled

    async def record_answer(
        self,
        item_id: str,
        group_id: str,
        is_correct: bool
    ) -> Optional[ReviewStats]:
        """
        Update the item's schedule after an answer and return refreshed group stats.

        Returns:
            Updated ReviewStats, or None if disabled or the scheduler failed
        """
        if not self.enabled:
            return None

        try:
            await self.scheduler.update_schedule_after_review(
                item_id=item_id,
                group_id=group_id,
                quality=int(quality_for_answer(is_correct))
            )
            return await self.scheduler.get_review_stats(group_id)
        except SRSError:
            logger.exception("Failed to update review schedule for %s", item_id)
            return None

    async def load_review_data(
        self,
        group_id: str
    ) -> tuple[Optional[DailyReviewQueue], Optional[ReviewStats]]:
        """
        Load today's queue and the stats for a group together.

        Returns:
            (queue, stats), or (None, None) if disabled or loading failed
        """
        if not self.enabled:
            return None, None

        try:
            queue = await self.scheduler.generate_daily_queue(group_id)
            stats = await self.scheduler.get_review_stats(group_id)
        except SRSError:
            logger.exception("Failed to load review data for group %s", group_id)
            return None, None
        return queue, stats

    async def reset_group(self, group_id: str) -> bool:
        """
        Delete all schedules of a group.

        Returns:
            True if the schedules were removed (or nothing to do while disabled)
        """
        if not self.enabled:
            return True

        try:
            await self.scheduler.delete_schedules(group_id)
        except SRSError:
            logger.exception("Failed to delete review schedules for group %s", group_id)
            return False
        return True

    async def fill_new_items(
        self,
        queue: DailyReviewQueue,
        candidate_item_ids: Iterable[str]
    ) -> DailyReviewQueue:
        """
        Pick never-reviewed items for the queue's new-item slots.

        Candidates keep their given order; items that already have a
        schedule or already sit in the queue are skipped.
        """
        if queue.new_items_target <= 0:
            return queue

        try:
            scheduled = await self.scheduler.get_all_schedules()
        except SRSError:
            logger.exception("Failed to load schedules while picking new items")
            return queue

        taken = set(queue.review_items)
        fresh: list[str] = []
        for item_id in candidate_item_ids:
            if item_id in scheduled or item_id in taken:
                continue
            taken.add(item_id)
            fresh.append(item_id)
            if len(fresh) >= queue.new_items_target:
                break
        return queue.with_new_items(fresh)


# ---- Group progress ----

class ProgressStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class GroupProgress:
    """
    Quiz progress for one group, optionally enriched with review stats.
    """
    group_id: str
    answered_count: int
    total_count: int
    correct_count: int
    review_stats: Optional[ReviewStats] = None

    @property
    def progress_rate(self) -> float:
        """Answered share of the group's questions (0.0-1.0)."""
        if self.total_count <= 0:
            return 0.0
        return self.answered_count / self.total_count

    @property
    def progress_percentage(self) -> float:
        return self.progress_rate * 100

    @property
    def accuracy_percentage(self) -> float:
        if self.answered_count <= 0:
            return 0.0
        return self.correct_count / self.answered_count * 100

    @property
    def status(self) -> ProgressStatus:
        if self.answered_count == 0:
            return ProgressStatus.NOT_STARTED
        if self.answered_count == self.total_count:
            return ProgressStatus.COMPLETED
        return ProgressStatus.IN_PROGRESS

    @property
    def mastery_score(self) -> Optional[float]:
        if self.review_stats is None:
            return None
        return self.review_stats.mastery_score

    @property
    def has_overdue_reviews(self) -> bool:
        return self.review_stats is not None and self.review_stats.overdue_count > 0

    @property
    def has_due_today_reviews(self) -> bool:
        return self.review_stats is not None and self.review_stats.due_today_count > 0


# ---- Review reminders ----

@dataclass(frozen=True)
class ReviewReminder:
    """Content of the daily "time to review" reminder."""
    title: str
    body: str
    badge_count: int


async def build_review_reminder(
    scheduler: SRSScheduler,
    as_of: Optional[datetime] = None
) -> Optional[ReviewReminder]:
    """
    Reminder content for the items due at as_of, or None if nothing is due.
    """
    due = await scheduler.get_due_reviews(as_of)
    if not due:
        return None

    count = len(due)
    noun = "review" if count == 1 else "reviews"
    return ReviewReminder(
        title="Time to review",
        body=f"You have {count} {noun} due. Keep your streak going!",
        badge_count=count
    )
