"""Tests for adaptive overload, overclock and streak rules."""

from questline.core.models import Exercise
from questline.services.progression import (
    overload_increment, apply_overload, overclock_bonus, fast_track,
    advance_daily_streak, is_streak_alive
)


def _exercise(start=10, target=50):
    return Exercise.create("Push-ups", start, target)


def test_overload_escalates_after_three_completions():
    exercise = _exercise()

    assert apply_overload(exercise) is False
    assert apply_overload(exercise) is False
    assert exercise.current_amount == 10

    assert apply_overload(exercise) is True
    # ceil(40 * 0.1) = 4
    assert exercise.current_amount == 14
    assert exercise.days_at_current_target == 0


def test_overload_minimum_step():
    exercise = _exercise(start=45, target=50)
    assert overload_increment(exercise) == 2


def test_overload_never_exceeds_target():
    exercise = _exercise(start=10, target=50)
    exercise.current_amount = 49
    exercise.days_at_current_target = 2

    assert apply_overload(exercise) is True
    assert exercise.current_amount == 50


def test_overload_at_target_is_noop():
    exercise = _exercise()
    exercise.current_amount = 50
    exercise.days_at_current_target = 2

    assert apply_overload(exercise) is False
    assert exercise.current_amount == 50
    assert exercise.days_at_current_target == 0


def test_overclock_bonus():
    assert overclock_bonus(10, 10) == 0
    assert overclock_bonus(10, 8) == 0
    assert overclock_bonus(10, 15) == 10
    assert overclock_bonus(10, 100) == 100


def test_fast_track_boost():
    exercise = _exercise()
    exercise.days_at_current_target = 2

    assert fast_track(exercise, 5) == 3
    assert exercise.current_amount == 13
    assert exercise.days_at_current_target == 0

    assert fast_track(exercise, 1000) == 37
    assert exercise.current_amount == 50


def test_daily_streak_rule():
    today, yesterday = "2024-06-05", "2024-06-04"

    assert advance_daily_streak(None, today, yesterday, 0) == (1, True)
    assert advance_daily_streak(yesterday, today, yesterday, 3) == (4, True)
    assert advance_daily_streak(today, today, yesterday, 4) == (4, False)
    assert advance_daily_streak("2024-06-01", today, yesterday, 5) == (1, True)


def test_streak_alive():
    assert is_streak_alive("2024-06-04", "2024-06-05", "2024-06-04")
    assert not is_streak_alive("2024-06-03", "2024-06-05", "2024-06-04")
    assert not is_streak_alive(None, "2024-06-05", "2024-06-04")
