"""Tests for the XP economy: levels and leagues."""

import pytest

from questline.core.economy import (
    League, level_from_total_xp, xp_for_level, xp_for_next_level,
    level_progress, league_for_monthly_xp, league_progress, cycle_league, next_league
)


@pytest.mark.parametrize("total_xp, level", [
    (0, 1), (99, 1), (100, 2), (399, 2), (400, 3), (899, 3), (900, 4), (10000, 11),
])
def test_level_from_total_xp(total_xp, level):
    assert level_from_total_xp(total_xp) == level


def test_negative_xp_is_level_one():
    assert level_from_total_xp(-50) == 1


def test_level_thresholds():
    assert xp_for_level(1) == 0
    assert xp_for_next_level(1) == 100
    assert xp_for_next_level(2) == 400
    assert xp_for_next_level(10) == 10000


def test_level_progress_inside_level():
    assert level_progress(250, 2) == pytest.approx(0.5)
    assert level_progress(0, 1) == 0.0


@pytest.mark.parametrize("monthly_xp, league", [
    (0, League.BRONZE),
    (499, League.BRONZE),
    (500, League.SILVER),
    (1500, League.GOLD),
    (34999, League.LEGEND),
    (35000, League.IMMORTAL),
    (100000, League.IMMORTAL),
])
def test_league_for_monthly_xp(monthly_xp, league):
    assert league_for_monthly_xp(monthly_xp) == league


def test_league_progress_percent():
    progress = league_progress(1000, League.SILVER)
    assert progress.next_league == League.GOLD
    assert progress.needed == 1500
    assert progress.percent == pytest.approx(50.0)


def test_league_progress_has_visible_minimum():
    assert league_progress(10, League.BRONZE).percent == 3
    assert league_progress(0, League.BRONZE).percent == 0


def test_league_progress_is_clamped_for_overridden_league():
    # Gold shown while only 0 XP earned this month
    assert league_progress(0, League.GOLD).percent == 0.0
    assert league_progress(40000, League.GOLD).percent == 100.0


def test_top_league_has_no_next():
    progress = league_progress(40000, League.IMMORTAL)
    assert progress.next_league is None
    assert progress.percent == 100.0
    assert progress.to_dict()["nextLeague"] is None
    assert next_league(League.IMMORTAL) is None


def test_cycle_league_wraps():
    assert cycle_league(League.IMMORTAL, "next") == League.BRONZE
    assert cycle_league(League.BRONZE, "prev") == League.IMMORTAL
    assert cycle_league(League.GOLD, "next") == League.PLATINUM


def test_level_starts_exactly_at_threshold():
    for level in range(1, 60):
        assert level_from_total_xp(xp_for_level(level)) == level
        assert level_from_total_xp(xp_for_level(level + 1) - 1) == level
