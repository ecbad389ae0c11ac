import random
from datetime import timedelta, timezone

import pytest

from conftest import NOW
from quizsrs.sm2.constants import MAX_INTERVAL, MIN_EASE_FACTOR, MasteryLevel
from quizsrs.sm2.review_schedule import (
    day_bounds,
    ease_factor_delta,
    initialize_new_schedule,
    mastery_level_for_streak,
    updated_after_review,
)


def review_sequence(qualities, start=NOW, step=timedelta(days=1)):
    schedule = initialize_new_schedule("quiz-1", "SE-0001", now=start)
    now = start
    for quality in qualities:
        now = now + step
        schedule = updated_after_review(schedule, quality, now=now)
    return schedule


def test_new_schedule_defaults():
    schedule = initialize_new_schedule("quiz-1", "SE-0001", now=NOW)

    assert schedule.interval_seconds == 86400
    assert schedule.ease_factor == 2.5
    assert schedule.consecutive_correct == 0
    assert schedule.review_count == 0
    assert schedule.last_reviewed_at is None
    assert schedule.next_review_due_at == NOW + timedelta(days=1)
    assert schedule.created_at == schedule.updated_at == NOW


def test_interval_ladder_for_three_perfect_reviews():
    schedule = initialize_new_schedule("quiz-1", "SE-0001", now=NOW)

    first = updated_after_review(schedule, 5, now=NOW)
    second = updated_after_review(first, 5, now=NOW + timedelta(days=1))
    third = updated_after_review(second, 5, now=NOW + timedelta(days=4))

    assert first.interval_seconds == 86400
    assert second.interval_seconds == 259200
    assert third.interval_seconds == pytest.approx(259200 * second.ease_factor)
    assert second.ease_factor == pytest.approx(2.7)
    assert third.consecutive_correct == 3


def test_ease_factor_never_drops_below_floor():
    schedule = review_sequence([0] * 20)
    assert schedule.ease_factor == MIN_EASE_FACTOR

    rng = random.Random(1234)
    schedule = initialize_new_schedule("quiz-2", "SE-0001", now=NOW)
    for step in range(300):
        schedule = updated_after_review(schedule, rng.randint(0, 5), now=NOW + timedelta(hours=step))
        assert schedule.ease_factor >= MIN_EASE_FACTOR
        assert schedule.interval_seconds > 0


@pytest.mark.parametrize("streak", [1, 2, 5, 9])
@pytest.mark.parametrize("quality", [0, 1, 2])
def test_lapse_resets_streak_and_interval(streak, quality):
    schedule = review_sequence([5] * streak)
    assert schedule.consecutive_correct == streak

    lapsed = updated_after_review(schedule, quality, now=NOW + timedelta(days=60))

    assert lapsed.consecutive_correct == 0
    assert lapsed.interval_seconds == 86400


def test_review_count_matches_number_of_reviews():
    qualities = [5, 0, 3, 4, 2, 5, 5, 1]
    schedule = review_sequence(qualities)
    assert schedule.review_count == len(qualities)


@pytest.mark.parametrize("quality", [-1, 6, 100])
def test_invalid_quality_returns_schedule_unchanged(quality):
    schedule = review_sequence([5, 5])
    assert updated_after_review(schedule, quality, now=NOW + timedelta(days=30)) is schedule


@pytest.mark.parametrize("quality", [0, 2, 3, 4, 5])
def test_due_date_is_last_review_plus_interval(quality):
    schedule = review_sequence([5, 5, 5, quality])
    assert schedule.next_review_due_at == schedule.last_reviewed_at + timedelta(
        seconds=schedule.interval_seconds
    )


def test_update_does_not_mutate_input():
    schedule = initialize_new_schedule("quiz-1", "SE-0001", now=NOW)
    updated_after_review(schedule, 5, now=NOW)

    assert schedule.review_count == 0
    assert schedule.last_reviewed_at is None


def test_failure_still_lowers_ease():
    schedule = updated_after_review(initialize_new_schedule("q", "g", now=NOW), 0, now=NOW)
    assert schedule.ease_factor == pytest.approx(2.5 - 0.8)


@pytest.mark.parametrize(
    "quality,expected",
    [(5, 0.1), (4, 0.0), (3, -0.14), (2, -0.32), (1, -0.54), (0, -0.8)],
)
def test_ease_factor_delta(quality, expected):
    assert ease_factor_delta(quality) == pytest.approx(expected)


@pytest.mark.parametrize(
    "streak,level",
    [
        (0, MasteryLevel.LEARNING),
        (1, MasteryLevel.REVIEWING),
        (2, MasteryLevel.REVIEWING),
        (3, MasteryLevel.FAMILIAR),
        (5, MasteryLevel.FAMILIAR),
        (6, MasteryLevel.MASTERED),
        (40, MasteryLevel.MASTERED),
    ],
)
def test_mastery_level_for_streak(streak, level):
    assert mastery_level_for_streak(streak) == level


def test_mastery_progression_and_lapse():
    levels = []
    schedule = initialize_new_schedule("quiz-1", "SE-0001", now=NOW)
    for step in range(6):
        schedule = updated_after_review(schedule, 5, now=NOW + timedelta(days=step))
        levels.append(schedule.mastery_level)

    assert levels == [
        MasteryLevel.REVIEWING,
        MasteryLevel.REVIEWING,
        MasteryLevel.FAMILIAR,
        MasteryLevel.FAMILIAR,
        MasteryLevel.FAMILIAR,
        MasteryLevel.MASTERED,
    ]
    assert updated_after_review(schedule, 0, now=NOW + timedelta(days=90)).mastery_level == MasteryLevel.LEARNING


def test_overdue_and_due_today():
    schedule = initialize_new_schedule("quiz-1", "SE-0001", now=NOW - timedelta(days=2))

    assert schedule.is_overdue(NOW)
    assert not schedule.is_due_today(NOW)
    assert schedule.is_due_today(NOW - timedelta(days=1))


def test_day_bounds_follow_timezone():
    tokyo = timezone(timedelta(hours=9))
    start, end = day_bounds(NOW, tokyo)

    # 12:00 UTC is 21:00 in UTC+9, same calendar date
    assert start == NOW.replace(hour=0) - timedelta(hours=9)
    assert end - start == timedelta(days=1)

    utc_start, utc_end = day_bounds(NOW)
    assert utc_start == NOW.replace(hour=0)
    assert utc_end == NOW.replace(hour=0) + timedelta(days=1)


def test_interval_stops_growing_at_cap():
    schedule = initialize_new_schedule("quiz-1", "SE-0001", now=NOW)
    now = NOW
    for _ in range(40):
        schedule = updated_after_review(schedule, 5, now=now)
        assert schedule.interval_seconds <= MAX_INTERVAL
        assert schedule.next_review_due_at == now + timedelta(seconds=schedule.interval_seconds)
        now = now + timedelta(hours=1)

    assert schedule.interval_seconds == MAX_INTERVAL
    assert schedule.consecutive_correct == 40
