"""
Schedule store contract.

A store is a durable mapping item_id -> ReviewSchedule that can also be
scanned as a whole. Implementations:
- SqlScheduleStore (quizsrs.sm2.database): SQLAlchemy table, one row per item
- JsonScheduleStore (quizsrs.sm2.json_store): one JSON document for all items
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from quizsrs.sm2.review_schedule import ReviewSchedule


class ScheduleStore(ABC):
    """
    Durable item_id -> ReviewSchedule mapping.

    All methods raise PersistenceError when the underlying storage fails or
    holds data that cannot be decoded.
    """

    @abstractmethod
    def get(self, item_id: str) -> Optional[ReviewSchedule]:
        """Return the schedule for item_id, or None if it has none."""

    @abstractmethod
    def get_all(self) -> dict[str, ReviewSchedule]:
        """Return every stored schedule keyed by item_id."""

    @abstractmethod
    def put(self, item_id: str, schedule: ReviewSchedule) -> None:
        """Insert or replace the schedule for item_id."""

    @abstractmethod
    def delete_by_group(self, group_id: str) -> int:
        """
        Remove every schedule tagged with group_id, all or nothing.

        Returns:
            Number of schedules removed
        """

    @abstractmethod
    def modify(
        self,
        item_id: str,
        update: Callable[[Optional[ReviewSchedule]], ReviewSchedule]
    ) -> ReviewSchedule:
        """
        Atomically replace the schedule for item_id with update(current).

        current is None when the item has no schedule yet. Concurrent
        modify/put/delete_by_group calls on the same storage never
        interleave, even across store instances.

        Returns:
            The schedule written
        """


def check_item_id(item_id: str, schedule: ReviewSchedule) -> None:
    if schedule.item_id != item_id:
        raise ValueError(
            f"Schedule item_id {schedule.item_id!r} does not match key {item_id!r}"
        )


_storage_locks: dict[tuple, threading.RLock] = {}
_storage_locks_guard = threading.Lock()


def storage_lock(*key) -> threading.RLock:
    """
    Process-wide write lock for one storage location.

    Stores pointing at the same database or file get the same lock.
    """
    with _storage_locks_guard:
        lock = _storage_locks.get(key)
        if lock is None:
            lock = _storage_locks[key] = threading.RLock()
        return lock
