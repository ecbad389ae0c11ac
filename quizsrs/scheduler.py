"""
Review scheduler for quiz items.

Uses the SM-2 algorithm (quizsrs.sm2) to keep one review schedule per quiz
item and answers the questions the quiz UI asks:
- Which items are due?
- What should today's session contain?
- How well is a group (e.g. a proposal) mastered?

All operations are coroutines. Store I/O runs in a worker thread, so they
only suspend at the store boundary. The store serializes mutations, so
several schedulers may share one store. Writes are shielded from
cancellation.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional

from quizsrs import config
from quizsrs.analytics import DailyReviewQueue, ReviewStats, build_daily_queue, build_review_stats
from quizsrs.sm2.database import SqlScheduleStore
from quizsrs.sm2.errors import InvalidQuality, ScheduleNotFound
from quizsrs.sm2.json_store import JsonScheduleStore
from quizsrs.sm2.review_schedule import (
    ReviewSchedule,
    initialize_new_schedule,
    is_valid_quality,
    updated_after_review,
    utc_now,
)
from quizsrs.sm2.store import ScheduleStore

logger = logging.getLogger(__name__)


class SRSScheduler:
    """
    Spaced-repetition scheduler service over a ScheduleStore.
    """

    def __init__(
        self,
        store: ScheduleStore,
        clock: Optional[Callable[[], datetime]] = None,
        day_timezone: Optional[tzinfo] = None
    ):
        """
        Args:
            store: Schedule store to read and write
            clock: Returns the current time (default: UTC now)
            day_timezone: Timezone that defines "today" (default: UTC)
        """
        self.store = store
        self.clock = clock or utc_now
        self.day_timezone = day_timezone or timezone.utc

    # ---- Writes ----

    async def update_schedule_after_review(
        self,
        item_id: str,
        group_id: str,
        quality: int
    ) -> ReviewSchedule:
        """
        Record a review and persist the updated schedule.

        This is the only operation that creates or updates schedules.
        Items without a schedule get a fresh one in group_id first.

        Args:
            item_id: Quiz item identifier
            group_id: Group the item belongs to
            quality: Recall quality 0-5 (the quiz sends 5 or 0)

        Returns:
            The schedule as persisted

        Raises:
            InvalidQuality: If quality is not an integer in 0-5
            PersistenceError: If the store fails
        """
        if isinstance(quality, bool) or not isinstance(quality, int) or not is_valid_quality(quality):
            raise InvalidQuality(quality)

        return await asyncio.shield(self._apply_review(item_id, group_id, quality))

    async def _apply_review(self, item_id: str, group_id: str, quality: int) -> ReviewSchedule:
        now = self.clock()

        def review(current: Optional[ReviewSchedule]) -> ReviewSchedule:
            if current is None:
                current = initialize_new_schedule(item_id, group_id, now)
            return updated_after_review(current, quality, now)

        updated = await asyncio.to_thread(self.store.modify, item_id, review)

        logger.debug(
            "Reviewed %s (quality=%d): interval=%.0fs ease=%.2f streak=%d",
            item_id,
            quality,
            updated.interval_seconds,
            updated.ease_factor,
            updated.consecutive_correct
        )
        return updated

    async def delete_schedules(self, group_id: str) -> int:
        """
        Remove every schedule in a group (progress reset).

        Either the whole group is removed or PersistenceError is raised.

        Returns:
            Number of schedules removed
        """
        return await asyncio.shield(self._delete_group(group_id))

    async def _delete_group(self, group_id: str) -> int:
        deleted = await asyncio.to_thread(self.store.delete_by_group, group_id)
        logger.info("Deleted %d schedules for group %s", deleted, group_id)
        return deleted

    # ---- Reads ----

    async def get_schedule(self, item_id: str) -> Optional[ReviewSchedule]:
        """Schedule for item_id, or None if it was never reviewed."""
        return await asyncio.to_thread(self.store.get, item_id)

    async def require_schedule(self, item_id: str) -> ReviewSchedule:
        """
        Schedule for item_id.

        Raises:
            ScheduleNotFound: If the item was never reviewed
        """
        schedule = await self.get_schedule(item_id)
        if schedule is None:
            raise ScheduleNotFound(item_id)
        return schedule

    async def get_all_schedules(self) -> dict[str, ReviewSchedule]:
        """All schedules keyed by item_id."""
        return await asyncio.to_thread(self.store.get_all)

    async def get_due_reviews(self, as_of: Optional[datetime] = None) -> list[str]:
        """
        Ids of every item due at or before as_of, across all groups.

        Args:
            as_of: Reference time (default: now); naive values are taken as UTC
        """
        if as_of is None:
            as_of = self.clock()
        elif as_of.tzinfo is None:
            as_of = as_of.replace(tzinfo=timezone.utc)
        schedules = await self.get_all_schedules()
        return [
            schedule.item_id
            for schedule in schedules.values()
            if schedule.next_review_due_at <= as_of
        ]

    async def generate_daily_queue(self, group_id: Optional[str] = None) -> DailyReviewQueue:
        """
        Build today's review queue, optionally for one group only.

        Read-only: calling it twice without reviews in between gives the
        same queue (until the day rolls over).
        """
        schedules = await self.get_all_schedules()
        queue = build_daily_queue(
            schedules.values(),
            now=self.clock(),
            group_id=group_id,
            tz=self.day_timezone
        )
        logger.debug(
            "Daily queue for %s: %d review items, new target %d",
            group_id or "all groups",
            len(queue.review_items),
            queue.new_items_target
        )
        return queue

    async def get_review_stats(self, group_id: str) -> ReviewStats:
        """Aggregate review statistics for one group."""
        schedules = await self.get_all_schedules()
        return build_review_stats(
            schedules.values(),
            group_id=group_id,
            now=self.clock(),
            tz=self.day_timezone
        )


def create_default_store() -> ScheduleStore:
    """
    Build the store selected by SRS_STORE_BACKEND.

    The SQL store gets its table created if needed.
    """
    backend = config.get_store_backend()
    if backend == "json":
        return JsonScheduleStore(config.get_json_store_path())

    store = SqlScheduleStore(user_id=config.get_default_user_id())
    store.init_db()
    return store


def create_default_scheduler(clock: Optional[Callable[[], datetime]] = None) -> SRSScheduler:
    """Scheduler over the configured store and day timezone."""
    return SRSScheduler(
        create_default_store(),
        clock=clock,
        day_timezone=config.get_day_timezone()
    )
