from datetime import datetime, timedelta, timezone

import pytest

from quizsrs.scheduler import SRSScheduler
from quizsrs.sm2.database import SqlScheduleStore, get_engine
from quizsrs.sm2.json_store import JsonScheduleStore
from quizsrs.sm2.review_schedule import ReviewSchedule

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock; tests move time forward explicitly."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_schedule(
    item_id: str,
    group_id: str = "SE-0001",
    due: datetime = NOW,
    consecutive_correct: int = 0,
    review_count: int = 1,
    ease_factor: float = 2.5,
    interval_seconds: float = 86400.0,
) -> ReviewSchedule:
    last_reviewed_at = due - timedelta(seconds=interval_seconds)
    return ReviewSchedule(
        item_id=item_id,
        group_id=group_id,
        next_review_due_at=due,
        interval_seconds=interval_seconds,
        ease_factor=ease_factor,
        consecutive_correct=consecutive_correct,
        review_count=review_count,
        last_reviewed_at=last_reviewed_at,
        created_at=last_reviewed_at,
        updated_at=last_reviewed_at,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sql_store(tmp_path):
    store = SqlScheduleStore(get_engine(f"sqlite:///{tmp_path / 'srs.sqlite'}"), user_id="tester")
    store.init_db()
    yield store
    store.engine.dispose()


@pytest.fixture
def json_store(tmp_path):
    return JsonScheduleStore(tmp_path / "schedules.json")


@pytest.fixture(params=["sql", "json"])
def store(request, sql_store, json_store):
    return sql_store if request.param == "sql" else json_store


@pytest.fixture
def scheduler(store, clock):
    return SRSScheduler(store, clock=clock)
