#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Questline - Economy
Экономика опыта: уровни, лиги и прогресс

Версия: 1.0.0
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Any

# ===== ENUMS =====

class Difficulty(Enum):
    """Сложность задачи"""
    TRIVIAL = "trivial"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    BOSS = "boss"

class League(Enum):
    """Месячные лиги (порядок объявления = порядок рангов)"""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"
    MASTER = "master"
    GRANDMASTER = "grandmaster"
    CHAMPION = "champion"
    LEGEND = "legend"
    IMMORTAL = "immortal"

# ===== CONSTANTS =====

XP_VALUES: Dict[Difficulty, int] = {
    Difficulty.TRIVIAL: 5,
    Difficulty.EASY: 10,
    Difficulty.MEDIUM: 25,
    Difficulty.HARD: 50,
    Difficulty.BOSS: 100,
}

LEAGUE_THRESHOLDS: Dict[League, int] = {
    League.BRONZE: 0,
    League.SILVER: 500,
    League.GOLD: 1500,
    League.PLATINUM: 3000,
    League.DIAMOND: 5000,
    League.MASTER: 8000,
    League.GRANDMASTER: 12000,
    League.CHAMPION: 18000,
    League.LEGEND: 25000,
    League.IMMORTAL: 35000,
}

LEAGUE_ORDER = list(League)

# Видимый минимум полосы прогресса лиги, если XP за месяц уже есть
MIN_VISIBLE_LEAGUE_PERCENT = 3

# Награды
GOAL_COMPLETION_BONUS = 1000
WEEKLY_FREQUENCY_BONUS = 50
VICE_CLEAN_DAY_XP = 50
ACCUMULATOR_CONTRIBUTION_XP = XP_VALUES[Difficulty.TRIVIAL]

# Окно учета XP по дням
DAILY_XP_WINDOW_DAYS = 30

# ===== LEVELS =====

def level_from_total_xp(total_xp: float) -> int:
    """
    Уровень по накопленному XP: max(1, floor(0.1 * sqrt(total)) + 1)

    floor(sqrt(t / 100)) == isqrt(floor(t) // 100) для t >= 0,
    поэтому считаем в целых числах без ошибок округления.
    """
    total = max(0, int(total_xp))
    return max(1, math.isqrt(total // 100) + 1)

def xp_for_level(level: int) -> int:
    """XP, с которого начинается уровень (уровень 1 начинается с 0)"""
    if level <= 1:
        return 0
    return 100 * (level - 1) ** 2

def xp_for_next_level(level: int) -> int:
    return xp_for_level(level + 1)

def level_progress(total_xp: float, level: int) -> float:
    """Прогресс внутри текущего уровня (0..1)"""
    current_level_xp = xp_for_level(level)
    needed = xp_for_level(level + 1) - current_level_xp
    if needed <= 0:
        return 0.0
    progress = (total_xp - current_level_xp) / needed
    return min(max(progress, 0.0), 1.0)

# ===== LEAGUES =====

def league_for_monthly_xp(monthly_xp: float) -> League:
    """Лига по XP за текущий месяц"""
    current = League.BRONZE
    for league in LEAGUE_ORDER:
        if monthly_xp >= LEAGUE_THRESHOLDS[league]:
            current = league
    return current

def next_league(league: League) -> Optional[League]:
    index = LEAGUE_ORDER.index(league)
    if index + 1 >= len(LEAGUE_ORDER):
        return None
    return LEAGUE_ORDER[index + 1]

def cycle_league(league: League, direction: str = "next") -> League:
    """Следующая/предыдущая лига по кругу"""
    step = 1 if direction == "next" else -1
    index = (LEAGUE_ORDER.index(league) + step) % len(LEAGUE_ORDER)
    return LEAGUE_ORDER[index]

@dataclass
class LeagueProgress:
    """Прогресс до следующей лиги"""
    current: int
    needed: int
    next_league: Optional[League]
    percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current': self.current,
            'needed': self.needed,
            'nextLeague': self.next_league.value if self.next_league else None,
            'percent': self.percent,
        }

def league_progress(monthly_xp: int, league: League) -> LeagueProgress:
    """
    Прогресс внутри лиги. league может быть отладочным переопределением,
    поэтому процент всегда зажимается в [0, 100].
    """
    upcoming = next_league(league)
    if upcoming is None:
        return LeagueProgress(
            current=monthly_xp,
            needed=LEAGUE_THRESHOLDS[League.IMMORTAL],
            next_league=None,
            percent=100.0,
        )

    current_threshold = LEAGUE_THRESHOLDS[league]
    next_threshold = LEAGUE_THRESHOLDS[upcoming]
    percent = (monthly_xp - current_threshold) / (next_threshold - current_threshold) * 100

    if monthly_xp > 0:
        percent = max(MIN_VISIBLE_LEAGUE_PERCENT, percent)

    return LeagueProgress(
        current=monthly_xp,
        needed=next_threshold,
        next_league=upcoming,
        percent=min(max(percent, 0.0), 100.0),
    )
