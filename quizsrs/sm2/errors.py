"""
Errors raised by the SM-2 scheduler and its stores.
"""

from __future__ import annotations

from quizsrs.sm2.constants import QUALITY_MAX, QUALITY_MIN


class SRSError(Exception):
    """Base class for all scheduler errors."""


class InvalidQuality(SRSError):
    """Quality signal outside the 0-5 range reached the scheduler entry point."""

    def __init__(self, quality: int):
        self.quality = quality
        super().__init__(
            f"Invalid quality value: {quality}. "
            f"Must be between {QUALITY_MIN} and {QUALITY_MAX}."
        )


class PersistenceError(SRSError):
    """Schedule store read/write or (de)serialization failure."""


class ScheduleNotFound(SRSError):
    """An operation required an existing schedule and there was none."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Schedule not found for item ID: {item_id}")
