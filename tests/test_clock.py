"""Tests for the engine clock and date helpers."""

from datetime import datetime

import pytz

from questline.utils.datetime_utils import Clock, add_days, days_between


def test_today_and_yesterday(clock):
    assert clock.today() == "2024-06-05"
    assert clock.yesterday() == "2024-06-04"


def test_start_of_week_is_sunday(clock):
    assert clock.start_of_week() == "2024-06-02"


def test_start_of_week_on_sunday_is_same_day():
    sunday = Clock(now_func=lambda: datetime(2024, 6, 2, 8, 0, tzinfo=pytz.utc))
    assert sunday.start_of_week() == "2024-06-02"


def test_advance_moves_today(clock):
    assert clock.advance(1) == 1
    assert clock.today() == "2024-06-06"
    assert clock.advance(-2) == -1
    assert clock.today() == "2024-06-04"


def test_offset_from_construction():
    clock = Clock(offset_days=30, now_func=lambda: datetime(2024, 6, 5, 12, 0, tzinfo=pytz.utc))
    assert clock.today() == "2024-07-05"


def test_timezone_controls_calendar_day():
    late_utc = lambda: datetime(2024, 6, 5, 20, 0, tzinfo=pytz.utc)
    assert Clock("UTC", now_func=late_utc).today() == "2024-06-05"
    assert Clock("Asia/Tokyo", now_func=late_utc).today() == "2024-06-06"


def test_naive_now_is_localized():
    clock = Clock("Europe/Moscow", now_func=lambda: datetime(2024, 6, 5, 23, 30))
    assert clock.today() == "2024-06-05"


def test_windows(clock):
    last_week = clock.last_7_days()
    assert len(last_week) == 7
    assert last_week[0] == "2024-06-05"
    assert last_week[-1] == "2024-05-30"

    assert clock.current_month_days() == [f"2024-06-0{d}" for d in range(1, 6)]
    assert clock.days_in_current_month() == 30
    assert clock.is_current_month("2024-06-30")
    assert not clock.is_current_month("2024-05-31")


def test_start_of_today_round_trip(clock):
    assert clock.date_of_ms(clock.start_of_today_ms()) == clock.today()
    assert clock.date_of_ms(clock.start_of_today_ms() - 1) == clock.yesterday()


def test_date_arithmetic():
    assert add_days("2024-02-28", 2) == "2024-03-01"
    assert add_days("2024-03-01", -1) == "2024-02-29"
    assert days_between("2024-06-01", "2024-06-05") == 4
