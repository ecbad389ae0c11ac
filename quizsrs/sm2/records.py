"""
Pydantic models for the persisted schedule format.

Each schedule serializes as a flat record: identifiers as strings, timestamps
as epoch seconds, the interval in seconds and the ease factor as a float.
The store as a whole is a mapping keyed by item_id.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from quizsrs.sm2.constants import MIN_EASE_FACTOR
from quizsrs.sm2.errors import PersistenceError
from quizsrs.sm2.review_schedule import ReviewSchedule


class ReviewScheduleRecord(BaseModel):
    """Flat, storage-ready form of a ReviewSchedule."""
    item_id: str = Field(..., min_length=1)
    group_id: str
    next_review_due_at: float = Field(..., description="Epoch seconds")
    interval_seconds: float = Field(..., gt=0)
    ease_factor: float = Field(..., ge=MIN_EASE_FACTOR)
    consecutive_correct: int = Field(..., ge=0)
    review_count: int = Field(..., ge=0)
    last_reviewed_at: Optional[float] = Field(None, description="Epoch seconds")
    created_at: float
    updated_at: float


def to_epoch(value: datetime) -> float:
    return value.timestamp()


def from_epoch(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


def schedule_to_record(schedule: ReviewSchedule) -> ReviewScheduleRecord:
    return ReviewScheduleRecord(
        item_id=schedule.item_id,
        group_id=schedule.group_id,
        next_review_due_at=to_epoch(schedule.next_review_due_at),
        interval_seconds=schedule.interval_seconds,
        ease_factor=schedule.ease_factor,
        consecutive_correct=schedule.consecutive_correct,
        review_count=schedule.review_count,
        last_reviewed_at=to_epoch(schedule.last_reviewed_at) if schedule.last_reviewed_at else None,
        created_at=to_epoch(schedule.created_at),
        updated_at=to_epoch(schedule.updated_at)
    )


def record_to_schedule(record: ReviewScheduleRecord) -> ReviewSchedule:
    return ReviewSchedule(
        item_id=record.item_id,
        group_id=record.group_id,
        next_review_due_at=from_epoch(record.next_review_due_at),
        interval_seconds=record.interval_seconds,
        ease_factor=record.ease_factor,
        consecutive_correct=record.consecutive_correct,
        review_count=record.review_count,
        last_reviewed_at=(
            from_epoch(record.last_reviewed_at)
            if record.last_reviewed_at is not None
            else None
        ),
        created_at=from_epoch(record.created_at),
        updated_at=from_epoch(record.updated_at)
    )


def decode_record(raw: Any, item_id: str) -> ReviewSchedule:
    """
    Validate one stored record and convert it to a ReviewSchedule.

    Raises:
        PersistenceError: If the record is malformed or out of range
    """
    try:
        record = ReviewScheduleRecord.model_validate(raw)
        schedule = record_to_schedule(record)
    except (ValidationError, ValueError, OverflowError, OSError) as exc:
        raise PersistenceError(f"Failed to decode schedule {item_id!r}: {exc}") from exc
    if schedule.item_id != item_id:
        raise PersistenceError(
            f"Failed to decode schedule {item_id!r}: record carries item_id {schedule.item_id!r}"
        )
    return schedule


def encode_schedules(schedules: dict[str, ReviewSchedule]) -> dict[str, dict]:
    """
    Encode a schedule table into a JSON-ready mapping keyed by item_id.
    """
    return {
        item_id: schedule_to_record(schedule).model_dump()
        for item_id, schedule in schedules.items()
    }


def decode_schedules(payload: Any) -> dict[str, ReviewSchedule]:
    """
    Decode a mapping produced by encode_schedules.

    Raises:
        PersistenceError: If the payload is not a mapping or any record is invalid
    """
    if not isinstance(payload, dict):
        raise PersistenceError(
            f"Failed to decode schedules: expected a mapping, got {type(payload).__name__}"
        )

    return {item_id: decode_record(raw, item_id) for item_id, raw in payload.items()}
