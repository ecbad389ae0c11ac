"""
Data-loading helpers for analytics.
"""

from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd

from quizsrs.sm2.review_schedule import ReviewSchedule


SCHEDULE_COLUMNS = [
    "item_id",
    "group_id",
    "next_review_due_at",
    "ease_factor",
    "consecutive_correct",
    "review_count",
]


def empty_schedules_df() -> pd.DataFrame:
    return pd.DataFrame({
        "item_id": pd.Series(dtype="object"),
        "group_id": pd.Series(dtype="object"),
        "next_review_due_at": pd.Series(dtype="datetime64[ns, UTC]"),
        "ease_factor": pd.Series(dtype="float64"),
        "consecutive_correct": pd.Series(dtype="int64"),
        "review_count": pd.Series(dtype="int64"),
    })


def load_schedules_df(
    schedules: Iterable[ReviewSchedule],
    group_id: Optional[str] = None
) -> pd.DataFrame:
    """
    Load schedules into a dataframe, optionally scoped to one group.
    """
    rows = [
        {
            "item_id": s.item_id,
            "group_id": s.group_id,
            "next_review_due_at": s.next_review_due_at,
            "ease_factor": s.ease_factor,
            "consecutive_correct": s.consecutive_correct,
            "review_count": s.review_count,
        }
        for s in schedules
        if group_id is None or s.group_id == group_id
    ]
    if not rows:
        return empty_schedules_df()

    df = pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)
    df["next_review_due_at"] = pd.to_datetime(df["next_review_due_at"], utc=True)
    return df.reset_index(drop=True)
