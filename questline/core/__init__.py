#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Questline - Core Package
Экономика, модели данных и хранилище состояния

Version: 1.0.0
"""

from .economy import (
    Difficulty,
    League,
    XP_VALUES,
    LEAGUE_THRESHOLDS,
    level_from_total_xp,
    xp_for_level,
    league_for_monthly_xp,
    league_progress
)

from .models import (
    ValidationError,
    ExerciseUnit,
    GoalType,
    GoalTemplate,
    Frequency,
    ViceStatus,
    Exercise,
    HistoryEntry,
    Task,
    GoalParams,
    Goal,
    ProgressiveGoal,
    AccumulatorGoal,
    FrequencyGoal,
    Habit,
    Vice,
    UserStats,
    GameState
)

from .database import (
    DatabaseError,
    DatabaseCorruptionError,
    BackupManager,
    StateStore
)

__all__ = [
    # Economy
    'Difficulty',
    'League',
    'XP_VALUES',
    'LEAGUE_THRESHOLDS',
    'level_from_total_xp',
    'xp_for_level',
    'league_for_monthly_xp',
    'league_progress',

    # Models
    'ValidationError',
    'ExerciseUnit',
    'GoalType',
    'GoalTemplate',
    'Frequency',
    'ViceStatus',
    'Exercise',
    'HistoryEntry',
    'Task',
    'GoalParams',
    'Goal',
    'ProgressiveGoal',
    'AccumulatorGoal',
    'FrequencyGoal',
    'Habit',
    'Vice',
    'UserStats',
    'GameState',

    # Storage
    'DatabaseError',
    'DatabaseCorruptionError',
    'BackupManager',
    'StateStore'
]
