"""
SM-2 - Spaced Repetition Schedules for Quiz Items

Review schedule model, the SM-2 update rule, and schedule stores.

This package implements:
- Interval ladder: 1 day, 3 days, then interval * ease factor
- Ease factor update: EF' = max(1.3, EF + 0.1 - (5-q)(0.08 + (5-q)0.02))
- Lapse reset: any quality < 3 restarts at 1 day
- Durable stores: SQLAlchemy table or a single JSON document

Quick start:
    from quizsrs import sm2

    # Pure update (no I/O)
    schedule = sm2.initialize_new_schedule("quiz-1", "SE-0401")
    schedule = sm2.updated_after_review(schedule, quality=5)

    # Persist
    store = sm2.SqlScheduleStore()
    store.init_db()
    store.put(schedule.item_id, schedule)
"""

# Core algorithm (no I/O)
from quizsrs.sm2.review_schedule import (
    ReviewSchedule,
    day_bounds,
    ease_factor_delta,
    initialize_new_schedule,
    is_valid_quality,
    mastery_level_for_streak,
    updated_after_review,
)

# Stores
from quizsrs.sm2.store import ScheduleStore
from quizsrs.sm2.database import SqlScheduleStore, get_engine
from quizsrs.sm2.json_store import JsonScheduleStore
from quizsrs.sm2.records import (
    ReviewScheduleRecord,
    decode_schedules,
    encode_schedules,
)

# Errors
from quizsrs.sm2.errors import (
    InvalidQuality,
    PersistenceError,
    ScheduleNotFound,
    SRSError,
)

# Constants and parameters
from quizsrs.sm2.constants import (
    DEFAULT_EASE_FACTOR,
    FIRST_INTERVAL,
    LAPSE_INTERVAL,
    MAX_INTERVAL,
    MIN_EASE_FACTOR,
    QUALITY_MAX,
    QUALITY_MIN,
    SECOND_INTERVAL,
    MasteryLevel,
    ReviewQuality,
)


__all__ = [
    # Core algorithm
    "ReviewSchedule",
    "day_bounds",
    "ease_factor_delta",
    "initialize_new_schedule",
    "is_valid_quality",
    "mastery_level_for_streak",
    "updated_after_review",

    # Stores
    "ScheduleStore",
    "SqlScheduleStore",
    "JsonScheduleStore",
    "get_engine",
    "ReviewScheduleRecord",
    "decode_schedules",
    "encode_schedules",

    # Errors
    "SRSError",
    "InvalidQuality",
    "PersistenceError",
    "ScheduleNotFound",

    # Enums
    "MasteryLevel",
    "ReviewQuality",

    # Parameters
    "DEFAULT_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "FIRST_INTERVAL",
    "SECOND_INTERVAL",
    "LAPSE_INTERVAL",
    "MAX_INTERVAL",
    "QUALITY_MIN",
    "QUALITY_MAX",
]
