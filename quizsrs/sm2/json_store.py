"""
Single-document schedule store.

Keeps the whole schedule table as one JSON object keyed by item_id, written
atomically (temp file + rename). Suited to a single user's few thousand
items; every read decodes the full document.
"""

from __future__ import annotations
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional

from quizsrs import config
from quizsrs.sm2.errors import PersistenceError
from quizsrs.sm2.records import decode_schedules, encode_schedules
from quizsrs.sm2.review_schedule import ReviewSchedule
from quizsrs.sm2.store import ScheduleStore, check_item_id, storage_lock

logger = logging.getLogger(__name__)


class JsonScheduleStore(ScheduleStore):
    """Schedule store persisted as a single JSON file."""

    def __init__(self, path: Optional[Path] = None):
        """
        Args:
            path: JSON file location (defaults to config.get_json_store_path())
        """
        self.path = Path(path) if path is not None else config.get_json_store_path()
        self._write_lock = storage_lock("json", str(self.path.resolve()))

    def _load(self) -> dict[str, ReviewSchedule]:
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to read {self.path}: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Failed to decode schedules in {self.path}: {exc}") from exc
        return decode_schedules(payload)

    def _save(self, schedules: dict[str, ReviewSchedule]) -> None:
        payload = encode_schedules(schedules)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh)
            os.replace(tmp_name, self.path)
            logger.debug("Saved %d schedules to %s", len(payload), self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise PersistenceError(f"Failed to write {self.path}: {exc}") from exc

    def get(self, item_id: str) -> Optional[ReviewSchedule]:
        return self._load().get(item_id)

    def get_all(self) -> dict[str, ReviewSchedule]:
        return self._load()

    def put(self, item_id: str, schedule: ReviewSchedule) -> None:
        check_item_id(item_id, schedule)
        with self._write_lock:
            schedules = self._load()
            schedules[item_id] = schedule
            self._save(schedules)

    def delete_by_group(self, group_id: str) -> int:
        with self._write_lock:
            schedules = self._load()
            kept = {
                item_id: schedule
                for item_id, schedule in schedules.items()
                if schedule.group_id != group_id
            }
            deleted = len(schedules) - len(kept)
            if deleted:
                self._save(kept)
            return deleted

    def modify(
        self,
        item_id: str,
        update: Callable[[Optional[ReviewSchedule]], ReviewSchedule]
    ) -> ReviewSchedule:
        with self._write_lock:
            schedules = self._load()
            updated = update(schedules.get(item_id))
            check_item_id(item_id, updated)
            schedules[item_id] = updated
            self._save(schedules)
            return updated
