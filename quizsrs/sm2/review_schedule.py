"""
Review Schedule - SM-2 Schedule State and Update Rule

Defines the per-item review schedule and the pure SM-2 update applied after
each review.

Key concepts:
- Interval: seconds until the item becomes due again
- Ease factor (EF): multiplier controlling interval growth, floored at 1.3
- Streak: consecutive successful reviews (quality >= 3) since the last lapse
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from quizsrs.sm2.constants import (
    DEFAULT_EASE_FACTOR,
    FIRST_INTERVAL,
    LAPSE_INTERVAL,
    MAX_INTERVAL,
    MASTERY_STREAK_THRESHOLDS,
    MIN_EASE_FACTOR,
    QUALITY_MAX,
    QUALITY_MIN,
    SECOND_INTERVAL,
    SUCCESS_THRESHOLD,
    MasteryLevel,
)


@dataclass
class ReviewSchedule:
    """
    Review schedule for a single quiz item.

    A schedule is identified by item_id; group_id only tags it for
    group-scoped queries and resets.
    """
    item_id: str
    group_id: str

    # Scheduling parameters
    next_review_due_at: datetime
    interval_seconds: float
    ease_factor: float

    # Review tracking
    consecutive_correct: int  # Successful reviews since the last lapse
    review_count: int  # Lifetime number of reviews
    last_reviewed_at: Optional[datetime]  # None until first review

    # Metadata
    created_at: datetime
    updated_at: datetime

    @property
    def mastery_level(self) -> MasteryLevel:
        """Mastery tier derived from the consecutive-correct streak."""
        return mastery_level_for_streak(self.consecutive_correct)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """True if the due date has already passed."""
        if now is None:
            now = utc_now()
        return self.next_review_due_at < now

    def is_due_today(self, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> bool:
        """True if the due date falls on the same calendar day as now (in tz)."""
        if now is None:
            now = utc_now()
        start, end = day_bounds(now, tz)
        return start <= self.next_review_due_at < end


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def day_bounds(now: datetime, tz: Optional[tzinfo] = None) -> tuple[datetime, datetime]:
    """
    Start and end (exclusive) of the calendar day containing now.

    Args:
        now: Reference time (timezone-aware)
        tz: Timezone defining the calendar day (default: UTC)

    Returns:
        Tuple of (start_of_day, start_of_next_day), both timezone-aware
    """
    tz = tz or timezone.utc
    local_day: date = now.astimezone(tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    end = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def mastery_level_for_streak(consecutive_correct: int) -> MasteryLevel:
    """
    Classify a streak length into a mastery tier.

    0 -> learning, 1-2 -> reviewing, 3-5 -> familiar, 6+ -> mastered
    """
    level = MasteryLevel.LEARNING
    for candidate, threshold in MASTERY_STREAK_THRESHOLDS.items():
        if consecutive_correct >= threshold:
            level = candidate
    return level


def is_valid_quality(quality: int) -> bool:
    return QUALITY_MIN <= quality <= QUALITY_MAX


def ease_factor_delta(quality: int) -> float:
    """
    SM-2 ease factor adjustment for a review.

    Formula: delta = 0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)

    q=5 -> +0.10, q=4 -> 0.00, q=3 -> -0.14, q=0 -> -0.80
    """
    miss = QUALITY_MAX - quality
    return 0.1 - miss * (0.08 + miss * 0.02)


def initialize_new_schedule(
    item_id: str,
    group_id: str,
    now: Optional[datetime] = None
) -> ReviewSchedule:
    """
    Initialize the schedule for an item that has never been reviewed.

    Args:
        item_id: Quiz item identifier
        group_id: Group the item belongs to (e.g. proposal id)
        now: Creation time (defaults to now)

    Returns:
        New ReviewSchedule with SM-2 defaults, due one day from now
    """
    if now is None:
        now = utc_now()

    return ReviewSchedule(
        item_id=item_id,
        group_id=group_id,
        next_review_due_at=now + timedelta(seconds=FIRST_INTERVAL),
        interval_seconds=FIRST_INTERVAL,
        ease_factor=DEFAULT_EASE_FACTOR,
        consecutive_correct=0,
        review_count=0,
        last_reviewed_at=None,
        created_at=now,
        updated_at=now
    )


def updated_after_review(
    schedule: ReviewSchedule,
    quality: int,
    now: Optional[datetime] = None
) -> ReviewSchedule:
    """
    Apply the SM-2 update rule and return the updated schedule.

    Pure function: the input schedule is not modified and nothing is
    persisted. Quality outside 0-5 returns the schedule unchanged.

    Rules:
    - quality >= 3 (success):
        streak 0 -> interval 1 day
        streak 1 -> interval 3 days
        otherwise -> interval * EF, capped at MAX_INTERVAL
        streak += 1
    - quality < 3 (lapse): streak = 0, interval = 1 day
    - Always: EF' = max(1.3, EF + delta(q)), review_count += 1,
      next due = now + interval

    Args:
        schedule: Current schedule
        quality: Recall quality 0-5 (0 = blackout, 3 = correct, 5 = perfect)
        now: Review time (defaults to now)

    Returns:
        Updated ReviewSchedule
    """
    if not is_valid_quality(quality):
        return schedule

    if now is None:
        now = utc_now()

    if quality >= SUCCESS_THRESHOLD:
        if schedule.consecutive_correct == 0:
            interval = FIRST_INTERVAL
        elif schedule.consecutive_correct == 1:
            interval = SECOND_INTERVAL
        else:
            interval = min(MAX_INTERVAL, schedule.interval_seconds * schedule.ease_factor)
        consecutive_correct = schedule.consecutive_correct + 1
    else:
        interval = LAPSE_INTERVAL
        consecutive_correct = 0

    # Interval growth above uses the pre-review EF
    ease_factor = max(MIN_EASE_FACTOR, schedule.ease_factor + ease_factor_delta(quality))

    return replace(
        schedule,
        next_review_due_at=now + timedelta(seconds=interval),
        interval_seconds=interval,
        ease_factor=ease_factor,
        consecutive_correct=consecutive_correct,
        review_count=schedule.review_count + 1,
        last_reviewed_at=now,
        updated_at=now
    )
