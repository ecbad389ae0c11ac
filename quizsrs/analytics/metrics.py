"""
Metric computations for review queues and statistics.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional

import pandas as pd

from quizsrs.sm2.constants import MasteryLevel
from quizsrs.sm2.review_schedule import day_bounds, mastery_level_for_streak


def overdue_mask(schedules_df: pd.DataFrame, now: datetime) -> pd.Series:
    """
    Schedules whose due date has already passed.
    """
    return schedules_df["next_review_due_at"] < pd.Timestamp(now)


def due_today_mask(
    schedules_df: pd.DataFrame,
    now: datetime,
    tz: Optional[tzinfo] = None
) -> pd.Series:
    """
    Schedules due from now until the end of the current calendar day.
    """
    _, day_end = day_bounds(now, tz)
    due = schedules_df["next_review_due_at"]
    return (due >= pd.Timestamp(now)) & (due < pd.Timestamp(day_end))


def ordered_item_ids(schedules_df: pd.DataFrame, mask: pd.Series) -> list[str]:
    """
    Item ids selected by mask, earliest due date first.
    """
    selected = schedules_df[mask]
    if selected.empty:
        return []
    selected = selected.sort_values(["next_review_due_at", "item_id"], kind="stable")
    return selected["item_id"].tolist()


def compute_total_reviews(schedules_df: pd.DataFrame) -> int:
    if schedules_df.empty:
        return 0
    return int(schedules_df["review_count"].sum())


def compute_average_ease_factor(schedules_df: pd.DataFrame, default: float) -> float:
    if schedules_df.empty:
        return default
    return float(schedules_df["ease_factor"].mean())


def compute_mastery_level_counts(schedules_df: pd.DataFrame) -> dict[MasteryLevel, int]:
    """
    Histogram of schedules by mastery level (levels with no schedules omitted).
    """
    if schedules_df.empty:
        return {}
    levels = schedules_df["consecutive_correct"].map(mastery_level_for_streak)
    counts = levels.value_counts()
    return {
        level: int(counts[level])
        for level in MasteryLevel
        if level in counts.index
    }


def compute_next_review_date(schedules_df: pd.DataFrame, now: datetime) -> Optional[datetime]:
    """
    Nearest due date that is not in the past, or None.
    """
    if schedules_df.empty:
        return None
    due = schedules_df["next_review_due_at"]
    upcoming = due[due >= pd.Timestamp(now)]
    if upcoming.empty:
        return None
    return upcoming.min().to_pydatetime()
