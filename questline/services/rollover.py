#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Questline - Rollover Scheduler
Ежедневная сверка состояния: архив задач, обрывы серий, новые задачи дня

Проход идемпотентен: повторный запуск для того же "сегодня" ничего
не меняет. Сдвиг отладочной даты на +1 день и повторный запуск
эквивалентны реально прошедшим суткам.

Версия: 1.0.0
"""

import logging
from dataclasses import dataclass, asdict
from typing import Dict, List, Any

from questline.core.models import (
    GameState, Goal, Habit, Task, HistoryEntry, FrequencyGoal, Frequency, GoalType
)
from questline.services.progression import is_streak_alive
from questline.services.task_generator import generate_goal_task, generate_habit_task
from questline.utils.datetime_utils import Clock

logger = logging.getLogger(__name__)

@dataclass
class RolloverReport:
    """Итоги прохода rollover"""
    date: str
    global_streak_reset: bool = False
    habits_lapsed: int = 0
    habits_week_reset: int = 0
    tasks_archived: int = 0
    tasks_pruned: int = 0
    goals_week_reset: int = 0
    goals_lapsed: int = 0
    goals_rearmed: int = 0
    tasks_generated: int = 0

    @property
    def changed(self) -> bool:
        return any(value for key, value in asdict(self).items() if key != 'date')

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

class RolloverScheduler:
    """Процедура "начала нового дня" над GameState"""

    def __init__(self, clock: Clock):
        self.clock = clock

    def run(self, state: GameState) -> RolloverReport:
        """Выполнить все шаги rollover по порядку"""
        today = self.clock.today()
        yesterday = self.clock.yesterday()
        report = RolloverReport(date=today)

        report.global_streak_reset = self._check_global_streak(state, today, yesterday)
        self._check_habits(state, today, yesterday, report)
        report.tasks_archived = self._archive_completed_tasks(state, today)
        report.tasks_pruned = self._prune_stale_tasks(state)
        report.goals_week_reset = self._reset_weekly_goals(state)
        report.goals_lapsed = self._check_goal_streaks(state, today, yesterday)
        report.goals_rearmed = self._rearm_daily_goals(state, today)
        report.tasks_generated = self._regenerate_tasks(state, today)

        if report.changed:
            logger.info(
                f"🌅 Rollover {today}: архив {report.tasks_archived}, удалено {report.tasks_pruned}, "
                f"создано {report.tasks_generated}, обрывов серий {report.habits_lapsed + report.goals_lapsed}"
            )
        return report

    # ===== STEP 1-2: STREAK LAPSES =====

    def _check_global_streak(self, state: GameState, today: str, yesterday: str) -> bool:
        stats = state.stats
        if stats.streak > 0 and not is_streak_alive(stats.last_active_date, today, yesterday):
            logger.info(f"💔 Общая серия {stats.streak} прервана")
            stats.streak = 0
            return True
        return False

    def _check_habits(self, state: GameState, today: str, yesterday: str,
                      report: RolloverReport) -> None:
        week_start = self.clock.start_of_week()

        for habit in state.habits:
            if habit.streak > 0 and not is_streak_alive(habit.last_completed_date, today, yesterday):
                logger.info(f"💔 Серия привычки \"{habit.title}\" ({habit.streak}) прервана")
                habit.streak = 0
                habit.history.append(HistoryEntry(date=yesterday, value=0))
                report.habits_lapsed += 1

            if not habit.is_daily and habit.last_week_reset != week_start:
                habit.weekly_progress = 0
                habit.last_week_reset = week_start
                report.habits_week_reset += 1

    # ===== STEP 3-4: TASKS =====

    def _archive_completed_tasks(self, state: GameState, today: str) -> int:
        """Перенести выполненные до сегодня задачи в taskHistory"""
        live: List[Task] = []
        archived = 0

        for task in state.tasks:
            if task.completed:
                completed_on = self.clock.date_of_ms(task.completed_at or task.created_at)
                if completed_on < today:
                    history = state.stats.task_history
                    history[completed_on] = history.get(completed_on, 0) + 1
                    archived += 1
                    continue
            live.append(task)

        state.tasks = live
        return archived

    def _prune_stale_tasks(self, state: GameState) -> int:
        """Удалить невыполненные регенерируемые задачи прошлых дней"""
        start_of_today = self.clock.start_of_today_ms()
        before = len(state.tasks)
        state.tasks = [
            task for task in state.tasks
            if task.completed or not task.is_regenerable or task.created_at >= start_of_today
        ]
        return before - len(state.tasks)

    # ===== STEP 5-6: GOALS =====

    def _reset_weekly_goals(self, state: GameState) -> int:
        week_start = self.clock.start_of_week()
        reset = 0

        for goal in state.goals:
            if not isinstance(goal, FrequencyGoal) or goal.params.last_week_reset == week_start:
                continue

            goal.params.weekly_progress = 0
            goal.params.last_week_reset = week_start
            goal.completed = False
            goal.completed_at = None
            goal.rewards_claimed = False
            reset += 1

        return reset

    def _check_goal_streaks(self, state: GameState, today: str, yesterday: str) -> int:
        """
        Значок позора для дневных целей без вклада вчера и сегодня

        streakBrokenDate хранит день обнаружения обрыва (сегодня), а нулевая
        запись истории относится к пропущенному дню (вчера). Сколько дней
        показывать значок, решает интерфейс.
        """
        lapsed = 0

        for goal in state.goals:
            if not goal.tracks_daily_streak or goal.consecutive_days <= 0 or goal.is_terminal:
                continue
            if goal.has_entry_on(today) or goal.has_entry_on(yesterday):
                continue

            logger.info(f"💔 Серия цели \"{goal.title}\" ({goal.consecutive_days}) прервана")
            goal.previous_streak = goal.consecutive_days
            goal.streak_broken_date = today
            goal.consecutive_days = 0
            goal.history.append(HistoryEntry(date=yesterday, value=0))
            lapsed += 1

        return lapsed

    def _rearm_daily_goals(self, state: GameState, today: str) -> int:
        """Дневные частотные цели снимают отметку вчерашнего выполнения"""
        rearmed = 0

        for goal in state.goals:
            if not isinstance(goal, FrequencyGoal) or not goal.is_daily or not goal.completed:
                continue
            if goal.completed_at and self.clock.date_of_ms(goal.completed_at) == today:
                continue

            goal.completed = False
            goal.completed_at = None
            goal.rewards_claimed = False
            rearmed += 1

        return rearmed

    # ===== STEP 7: REGENERATION =====

    def _regenerate_tasks(self, state: GameState, today: str) -> int:
        now_ms = self.clock.now_ms()
        created: List[Task] = []

        for goal in state.goals:
            created.extend(self.goal_tasks_due(state, goal, today))

        for habit in state.habits:
            if not self._habit_needs_tasks(habit, today):
                continue

            for exercise in habit.exercises or [None]:
                exercise_id = exercise.id if exercise else None
                if self._has_live_task(state.tasks, habit.id, exercise_id, False):
                    continue
                created.append(generate_habit_task(habit, now_ms, exercise))

        state.tasks = created + state.tasks
        return len(created)

    def goal_tasks_due(self, state: GameState, goal: Goal, today: str) -> List[Task]:
        """
        Недостающие задачи цели на сегодня

        Дневная частотная цель получает следующую задачу по упражнению,
        как только предыдущая выполнена, пока дневная цель не достигнута.
        """
        if not self._goal_needs_tasks(goal, today):
            return []

        repeatable = isinstance(goal, FrequencyGoal) and goal.is_daily
        targets = goal.exercises if goal.exercises and goal.goal_type != GoalType.ACCUMULATOR else [None]
        now_ms = self.clock.now_ms()
        created = []

        for exercise in targets:
            exercise_id = exercise.id if exercise else None
            if self._has_live_task(state.tasks, goal.id, exercise_id, repeatable):
                continue
            if isinstance(goal, FrequencyGoal) and not goal.awaits_exercise(exercise_id, today):
                continue
            task = generate_goal_task(goal, now_ms, exercise, today)
            if task:
                created.append(task)
        return created

    @staticmethod
    def _goal_needs_tasks(goal: Goal, today: str) -> bool:
        if goal.is_terminal:
            return False
        if isinstance(goal, FrequencyGoal):
            return not goal.is_target_met(today)
        return True

    @staticmethod
    def _habit_needs_tasks(habit: Habit, today: str) -> bool:
        if habit.is_completed_on(today):
            return False
        if habit.frequency == Frequency.WEEKLY.value:
            return habit.weekly_progress < habit.period_target
        return True

    @staticmethod
    def _has_live_task(tasks: List[Task], owner_id: str, exercise_id, repeatable: bool) -> bool:
        """
        Есть ли уже задача дня для владельца (и упражнения)

        Прошлые задачи к этому моменту уже заархивированы или удалены,
        поэтому любая оставшаяся задача относится к сегодняшнему дню.
        Для повторяемых задач (дневная цель N раз в день) считаются
        только невыполненные.
        """
        for task in tasks:
            if not task.belongs_to(owner_id, exercise_id):
                continue
            if repeatable and task.completed:
                continue
            return True
        return False
