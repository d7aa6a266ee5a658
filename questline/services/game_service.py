#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Questline - Game Service
API мутаций и read-only геттеры поверх одного GameState

Каждая мутация полностью применяется под блокировкой, после чего
снимок сохраняется целиком. Ошибка сохранения логируется и не
откатывает изменение в памяти. Некорректные операции (нет задачи,
повторное выполнение, повторная отметка порока) ничего не меняют и
возвращают нулевой результат.

Версия: 1.0.0
"""

import math
import threading
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Any, Callable

from questline.core.economy import (
    League, VICE_CLEAN_DAY_XP, ACCUMULATOR_CONTRIBUTION_XP,
    DAILY_XP_WINDOW_DAYS, level_from_total_xp, xp_for_next_level, level_progress,
    league_for_monthly_xp, league_progress, LeagueProgress
)
from questline.core.models import (
    GameState, Task, Goal, Habit, Vice, Exercise, GoalParams, HistoryEntry,
    AccumulatorGoal, FrequencyGoal, GoalType, GoalTemplate, ExerciseUnit,
    Frequency, ViceStatus, ValidationError, new_id,
    validate_text, validate_enum_value, validate_amounts
)
from questline.core.database import StateStore
from questline.services.progression import (
    apply_overload, overclock_bonus, fast_track, advance_daily_streak
)
from questline.services.rollover import RolloverScheduler, RolloverReport
from questline.services.task_generator import generate_goal_tasks, generate_habit_tasks
from questline.utils.datetime_utils import Clock, add_days, days_between
from questline.utils.decorators import synchronized

logger = logging.getLogger(__name__)

# ===== RESULTS =====

@dataclass
class MutationResult:
    """Результат мутации для обратной связи в интерфейсе"""
    xp: int = 0
    leveled_up: bool = False
    new_level: int = 1
    bonus_xp: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'xp': self.xp,
            'leveledUp': self.leveled_up,
            'newLevel': self.new_level
        }
        if self.bonus_xp:
            data['bonusXP'] = self.bonus_xp
        return data

@dataclass
class OverclockResult:
    """Результат перевыполнения (бонус включает награду за цель, если она завершилась)"""
    bonus_xp: int = 0
    leveled_up: bool = False
    new_level: int = 1
    goal_completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'bonusXP': self.bonus_xp,
            'leveledUp': self.leveled_up,
            'newLevel': self.new_level,
            'goalCompleted': self.goal_completed
        }

# ===== SERVICE =====

class GameService:
    """
    Единственный писатель состояния движка

    Владеет GameState, часами и (опционально) хранилищем. Тесты
    создают независимые экземпляры со своими часами.
    """

    def __init__(self, state: Optional[GameState] = None, clock: Optional[Clock] = None,
                 store: Optional[StateStore] = None):
        self.state = state or GameState()
        self.clock = clock or Clock()
        self.store = store
        self.rollover = RolloverScheduler(self.clock)
        self._lock = threading.RLock()

        # Дневное правило прогресса по типу цели
        self._goal_steps: Dict[GoalType, Callable[[Goal, Task, Optional[int], str], None]] = {
            GoalType.PROGRESSIVE: self._progressive_step,
            GoalType.FREQUENCY: self._frequency_step,
        }

    @classmethod
    def from_store(cls, store: StateStore, timezone: str = "UTC",
                   now_func: Optional[Callable] = None) -> "GameService":
        """Загрузка состояния и смещения даты из хранилища"""
        clock = Clock(timezone=timezone, offset_days=store.load_offset(), now_func=now_func)
        return cls(state=store.load(), clock=clock, store=store)

    # ===== INTERNAL HELPERS =====

    def _commit(self) -> bool:
        """Сохранить снимок; ошибка не откатывает состояние"""
        if self.store is None:
            return True
        saved = self.store.save(self.state)
        if not saved:
            logger.warning("⚠️ Изменение применено, но состояние не сохранено")
        return saved

    def _result(self, level_before: int, xp: int, bonus_xp: int = 0) -> MutationResult:
        level = self.state.stats.level
        return MutationResult(
            xp=xp,
            leveled_up=level > level_before,
            new_level=level,
            bonus_xp=bonus_xp
        )

    def _zero(self) -> MutationResult:
        return MutationResult(new_level=self.state.stats.level)

    def _award_xp(self, amount: int, register_activity: bool = True) -> int:
        """Единая точка начисления XP: итог, дневной журнал, уровень"""
        if amount <= 0:
            return 0

        stats = self.state.stats
        today = self.clock.today()

        stats.total_lifetime_xp += amount
        stats.current_xp += amount
        stats.add_to_ledger(today, amount)
        stats.prune_ledger(add_days(today, -DAILY_XP_WINDOW_DAYS))

        level_before = stats.level
        stats.level = level_from_total_xp(stats.total_lifetime_xp)
        if stats.level > level_before:
            logger.info(f"🎉 Новый уровень: {stats.level}")

        # Реальное изменение XP снимает отладочную лигу
        self.state.debug_league_override = None

        if register_activity:
            self._register_activity(today)
        return amount

    def _register_activity(self, today: str) -> None:
        """Глобальная серия: двигается первым действием дня"""
        stats = self.state.stats
        stats.streak, _ = advance_daily_streak(
            stats.last_active_date, today, self.clock.yesterday(), stats.streak
        )
        stats.longest_streak = max(stats.longest_streak, stats.streak)
        stats.last_active_date = today

    def _complete_goal(self, goal: Goal) -> int:
        """Отметить цель выполненной и выплатить бонус; возвращает бонус"""
        goal.mark_completed(self.clock.now_ms())
        bonus = self._award_xp(goal.completion_bonus)
        goal.rewards_claimed = True
        logger.info(f"🏆 Цель \"{goal.title}\" выполнена, бонус {bonus} XP")
        return bonus

    def _add_tasks(self, tasks: List[Task]) -> None:
        self.state.tasks = list(tasks) + self.state.tasks

    @synchronized
    def grant_xp(self, amount: int, register_activity: bool = True) -> MutationResult:
        """Начислить XP вне задач (без активности не двигает серию)"""
        level_before = self.state.stats.level
        awarded = self._award_xp(amount, register_activity=register_activity)
        self._commit()
        return self._result(level_before, awarded)

    # ===== TASKS =====

    @synchronized
    def add_task(self, title: str, difficulty: str = "medium",
                 timer_minutes: Optional[int] = None) -> Task:
        """Создать разовую задачу (таймер только для hard/boss)"""
        task = Task.create(title, difficulty, self.clock.now_ms(), timer_minutes)
        self._add_tasks([task])
        self._commit()
        logger.info(f"➕ Задача \"{task.title}\" ({task.difficulty}) создана")
        return task

    @synchronized
    def start_timer(self, task_id: str) -> bool:
        task = self.state.find_task(task_id)
        if not task or task.completed:
            return False
        task.timer_started_at = self.clock.now_ms()
        self._commit()
        return True

    @synchronized
    def complete_timer(self, task_id: str) -> bool:
        task = self.state.find_task(task_id)
        if not task or task.completed:
            return False
        task.timer_completed = True
        self._commit()
        return True

    @synchronized
    def complete_task(self, task_id: str) -> MutationResult:
        result = self._complete_task(self.state.find_task(task_id))
        if result.xp:
            self._commit()
        return result

    def _complete_task(self, task: Optional[Task]) -> MutationResult:
        if task is None or task.completed:
            return self._zero()

        level_before = self.state.stats.level
        xp = self._award_xp(task.xp)
        task.completed = True
        task.completed_at = self.clock.now_ms()
        return self._result(level_before, xp)

    @synchronized
    def delete_task(self, task_id: str) -> bool:
        task = self.state.find_task(task_id)
        if task is None:
            return False
        self.state.tasks.remove(task)
        self._commit()
        return True

    # ===== GOALS =====

    def _build_exercises(self, exercises: Optional[List[Dict[str, Any]]],
                         atomic: bool = False) -> List[Exercise]:
        built = []
        for item in exercises or []:
            name = validate_text(item.get('name', ''), field_name="name")
            start = int(item.get('start_amount') or 0)
            target = item.get('target_amount')
            unit = item.get('unit') or ExerciseUnit.REPS.value

            validate_amounts(start, target, name, atomic=atomic)
            built.append(Exercise.create(name, start, int(target), unit, atomic=atomic))
        return built

    @synchronized
    def add_goal(self, goal_type: str, title: str,
                 exercises: Optional[List[Dict[str, Any]]] = None,
                 template: str = GoalTemplate.CUSTOM.value,
                 frequency: str = Frequency.DAILY.value,
                 weekly_target: Optional[int] = None,
                 daily_target: Optional[int] = None,
                 target_value: Optional[int] = None,
                 unit: Optional[str] = None,
                 deadline: Optional[str] = None) -> Goal:
        """
        Создать цель и ее задачи на сегодня

        Args:
            goal_type: progressive / accumulator / frequency
            exercises: список {'name', 'start_amount', 'target_amount', 'unit'}
            target_value: цель накопительной цели
        """
        goal_type = validate_enum_value(goal_type, GoalType, "type")
        template = validate_enum_value(template, GoalTemplate, "template")
        frequency = validate_enum_value(frequency, Frequency, "frequency")

        # Медитация в минутах стартует по правилу двух минут
        atomic = template == GoalTemplate.MEDITATION.value and all(
            (e.get('unit') or ExerciseUnit.REPS.value) == ExerciseUnit.MINUTES.value
            for e in exercises or []
        )
        built = self._build_exercises(exercises, atomic=atomic)

        if goal_type == GoalType.PROGRESSIVE.value and not built:
            raise ValidationError("Прогрессивная цель требует хотя бы одно упражнение")
        if goal_type == GoalType.ACCUMULATOR.value and (not target_value or target_value <= 0):
            raise ValidationError("Накопительная цель требует targetValue больше 0")

        params = GoalParams(
            frequency=frequency,
            weekly_target=weekly_target,
            daily_target=daily_target,
            target_value=target_value,
            unit=validate_enum_value(unit, ExerciseUnit, "unit") if unit else None,
            deadline=deadline,
            last_week_reset=self.clock.start_of_week()
        )
        goal = Goal.create(
            goal_type, title, self.clock.now_ms(),
            template=template, exercises=built, params=params
        )

        self.state.goals.insert(0, goal)
        self._add_tasks(generate_goal_tasks(goal, self.clock.now_ms(), self.clock.today()))
        self._commit()
        logger.info(f"🎯 Цель \"{goal.title}\" ({goal.type}) создана")
        return goal

    @synchronized
    def delete_goal(self, goal_id: str) -> bool:
        goal = self.state.find_goal(goal_id)
        if goal is None:
            return False
        self.state.goals.remove(goal)
        removed = self.state.remove_tasks_of(goal_id)
        self._commit()
        logger.info(f"🗑️ Цель \"{goal.title}\" удалена вместе с {removed} задачами")
        return True

    def _advance_goal_streak(self, goal: Goal, today: str) -> None:
        """consecutiveDays растет не чаще раза в день"""
        if not goal.has_entry_on(today):
            goal.consecutive_days += 1

    def _progressive_step(self, goal: Goal, task: Task, actual_amount: Optional[int], today: str) -> None:
        self._advance_goal_streak(goal, today)
        exercise = goal.find_exercise(task.exercise_id)
        if exercise:
            apply_overload(exercise)
        goal.history.append(HistoryEntry(
            date=today,
            value=actual_amount or task.required_amount or 0,
            exercise_id=task.exercise_id
        ))

    def _frequency_step(self, goal: Goal, task: Task, actual_amount: Optional[int], today: str) -> None:
        """Подход засчитывается за день, когда выполнены все упражнения"""
        self._advance_goal_streak(goal, today)
        sessions_before = goal.sessions_on(today)
        goal.history.append(HistoryEntry(date=today, value=1, exercise_id=task.exercise_id))
        if sessions_before == 0 and goal.sessions_on(today) > 0:
            goal.params.weekly_progress += 1

    @synchronized
    def complete_goal_task(self, task_id: str, actual_amount: Optional[int] = None) -> MutationResult:
        """Выполнить задачу цели: базовый XP, шаг прогресса, бонус за завершение"""
        task = self.state.find_task(task_id)
        if task is None or task.goal_id is None or task.completed:
            return self._zero()

        goal = self.state.find_goal(task.goal_id)

        if isinstance(goal, AccumulatorGoal):
            if not actual_amount:
                return self._zero()
            return self.update_accumulator_progress(task_id, actual_amount)

        level_before = self.state.stats.level
        base = self._complete_task(task)
        if actual_amount:
            task.actual_amount = actual_amount

        bonus = 0
        if isinstance(goal, FrequencyGoal):
            # Нагрузка растет за каждое выполненное упражнение
            exercise = goal.find_exercise(task.exercise_id)
            if exercise:
                apply_overload(exercise)

        if goal is not None and not goal.completed:
            today = self.clock.today()
            self._goal_steps[goal.goal_type](goal, task, actual_amount, today)
            if goal.is_target_met(today):
                bonus = self._complete_goal(goal)
            elif isinstance(goal, FrequencyGoal) and goal.is_daily:
                self._add_tasks(self.rollover.goal_tasks_due(self.state, goal, today))

        self._commit()
        return self._result(level_before, base.xp + bonus, bonus)

    @synchronized
    def overclock_task(self, task_id: str, actual_amount: int) -> OverclockResult:
        """Бонус за перевыполнение выполненной задачи прогрессивной/частотной цели"""
        task = self.state.find_task(task_id)
        zero = OverclockResult(new_level=self.state.stats.level)

        if task is None or task.goal_id is None or not task.completed or task.overclocked:
            return zero
        if not task.required_amount:
            return zero

        goal = self.state.find_goal(task.goal_id)
        if goal is None or goal.goal_type not in (GoalType.PROGRESSIVE, GoalType.FREQUENCY):
            return zero

        bonus = overclock_bonus(task.required_amount, actual_amount)
        if bonus <= 0:
            return zero

        level_before = self.state.stats.level
        self._award_xp(bonus)
        task.overclocked = True
        task.actual_amount = actual_amount

        goal_bonus = 0
        if goal.goal_type == GoalType.PROGRESSIVE:
            exercise = goal.find_exercise(task.exercise_id)
            if exercise:
                boost = fast_track(exercise, actual_amount - task.required_amount)
                logger.info(f"⚡ Разгон \"{exercise.name}\": +{boost}")
            if not goal.completed and goal.is_target_met(self.clock.today()):
                goal_bonus = self._complete_goal(goal)

        self._commit()
        level = self.state.stats.level
        return OverclockResult(
            bonus_xp=bonus + goal_bonus,
            leveled_up=level > level_before,
            new_level=level,
            goal_completed=goal_bonus > 0
        )

    @synchronized
    def update_accumulator_progress(self, task_id: str, amount: int) -> MutationResult:
        """
        Вклад в накопительную цель

        Задача остается активной до достижения цели. Каждый вклад дает
        ACCUMULATOR_CONTRIBUTION_XP; вклад, достигающий цели, вместо
        этого выполняет задачу (medium XP) и платит бонус за цель.
        """
        task = self.state.find_task(task_id)
        if task is None or task.completed or not amount or amount <= 0:
            return self._zero()

        goal = self.state.find_goal(task.goal_id)
        if not isinstance(goal, AccumulatorGoal) or goal.completed:
            return self._zero()

        today = self.clock.today()
        level_before = self.state.stats.level

        self._advance_goal_streak(goal, today)
        goal.params.total_completed = goal.total_completed + amount
        goal.history.append(HistoryEntry(date=today, value=amount))

        task.title = f"{goal.title} ({goal.total_completed}/{goal.target_value} {goal.unit})"
        task.current_progress = goal.total_completed

        bonus = 0
        if goal.is_target_met(today):
            xp = self._complete_task(task).xp
            bonus = self._complete_goal(goal)
            xp += bonus
        else:
            xp = self._award_xp(ACCUMULATOR_CONTRIBUTION_XP)

        self._commit()
        return self._result(level_before, xp, bonus)

    @synchronized
    def claim_goal_rewards(self, goal_id: str) -> MutationResult:
        """Однократная выплата бонуса за выполненную цель"""
        goal = self.state.find_goal(goal_id)
        if goal is None or not goal.completed or goal.rewards_claimed or goal.completion_bonus <= 0:
            return self._zero()

        level_before = self.state.stats.level
        bonus = self._award_xp(goal.completion_bonus)
        goal.rewards_claimed = True
        self._commit()
        return self._result(level_before, bonus, bonus)

    @synchronized
    def move_goal_to_habit(self, goal_id: str) -> Optional[Habit]:
        """Превратить выполненную цель в привычку на уровне финальной цели"""
        goal = self.state.find_goal(goal_id)
        if goal is None or not goal.completed:
            return None

        habit = Habit(
            id=new_id(),
            title=goal.title,
            origin_goal_id=goal.id,
            exercises=[
                replace(e, current_amount=e.target_amount, days_at_current_target=0)
                for e in goal.exercises
            ],
            frequency=goal.params.frequency,
            weekly_target=goal.params.weekly_target,
            last_week_reset=self.clock.start_of_week(),
            created_at=self.clock.now_ms()
        )

        self.state.goals.remove(goal)
        self.state.remove_tasks_of(goal.id)
        self.state.habits.insert(0, habit)
        self._add_tasks(generate_habit_tasks(habit, self.clock.now_ms()))
        self._commit()
        logger.info(f"🔁 Цель \"{goal.title}\" стала привычкой")
        return habit

    # ===== HABITS =====

    @synchronized
    def add_habit(self, title: str, exercises: Optional[List[Dict[str, Any]]] = None,
                  frequency: str = Frequency.DAILY.value,
                  weekly_target: Optional[int] = None,
                  atomic: bool = False) -> Habit:
        """Создать привычку; атомарная стартует с 2 единиц"""
        habit = Habit(
            id=new_id(),
            title=validate_text(title),
            exercises=self._build_exercises(exercises, atomic=atomic),
            frequency=validate_enum_value(frequency, Frequency, "frequency"),
            weekly_target=weekly_target,
            last_week_reset=self.clock.start_of_week(),
            created_at=self.clock.now_ms()
        )

        self.state.habits.insert(0, habit)
        self._add_tasks(generate_habit_tasks(habit, self.clock.now_ms()))
        self._commit()
        logger.info(f"🔁 Привычка \"{habit.title}\" создана")
        return habit

    @synchronized
    def delete_habit(self, habit_id: str) -> bool:
        habit = self.state.find_habit(habit_id)
        if habit is None:
            return False
        self.state.habits.remove(habit)
        self.state.remove_tasks_of(habit_id)
        self._commit()
        return True

    def _habit_step(self, habit: Habit, task: Task, today: str) -> None:
        if not habit.is_completed_on(today):
            habit.streak, _ = advance_daily_streak(
                habit.last_completed_date, today, self.clock.yesterday(), habit.streak
            )
            habit.longest_streak = max(habit.longest_streak, habit.streak)
            habit.weekly_progress += 1
            habit.last_completed_date = today

        habit.history.append(HistoryEntry(
            date=today,
            value=task.actual_amount or task.required_amount or 1,
            exercise_id=task.exercise_id
        ))

        exercise = habit.find_exercise(task.exercise_id)
        if exercise:
            apply_overload(exercise)

    def _complete_habit_task(self, task: Optional[Task]) -> MutationResult:
        if task is None or task.habit_id is None or task.completed:
            return self._zero()

        habit = self.state.find_habit(task.habit_id)
        if habit is None:
            return self._zero()

        result = self._complete_task(task)
        self._habit_step(habit, task, self.clock.today())
        return result

    @synchronized
    def complete_habit_task(self, task_id: str) -> MutationResult:
        result = self._complete_habit_task(self.state.find_task(task_id))
        if result.xp:
            self._commit()
        return result

    @synchronized
    def complete_habit(self, habit_id: str) -> MutationResult:
        """Выполнить привычку целиком (все открытые задачи дня)"""
        habit = self.state.find_habit(habit_id)
        today = self.clock.today()
        if habit is None:
            return self._zero()

        open_tasks = [t for t in self.state.tasks_for_habit(habit_id) if not t.completed]
        if not open_tasks:
            if habit.is_completed_on(today):
                return self._zero()
            open_tasks = generate_habit_tasks(habit, self.clock.now_ms())
            self._add_tasks(open_tasks)

        level_before = self.state.stats.level
        xp = sum(self._complete_habit_task(task).xp for task in open_tasks)
        self._commit()
        return self._result(level_before, xp)

    # ===== VICES =====

    @synchronized
    def add_vice(self, title: str, template: str = "custom") -> Vice:
        vice = Vice(
            id=new_id(),
            title=validate_text(title),
            template=template or "custom",
            created_at=self.clock.now_ms()
        )
        self.state.vices.insert(0, vice)
        self._commit()
        logger.info(f"🚫 Порок \"{vice.title}\" добавлен")
        return vice

    @synchronized
    def delete_vice(self, vice_id: str) -> bool:
        vice = self.state.find_vice(vice_id)
        if vice is None:
            return False
        self.state.vices.remove(vice)
        self._commit()
        return True

    def _backfill_vice(self, vice: Vice, today: str) -> int:
        """Пропущенные дни между последней отметкой и сегодня считаются срывом"""
        if not vice.last_check_in:
            return 0

        gap = days_between(vice.last_check_in, today)
        if gap <= 1:
            return 0

        filled = 0
        for offset in range(1, gap):
            day = add_days(vice.last_check_in, offset)
            if day not in vice.history:
                vice.history[day] = ViceStatus.RELAPSED.value
                filled += 1

        vice.current_streak = 0
        if filled:
            logger.info(f"📅 Порок \"{vice.title}\": {filled} пропущенных дней отмечены как срыв")
        return filled

    @synchronized
    def check_missed_vice_days(self) -> int:
        today = self.clock.today()
        filled = sum(self._backfill_vice(vice, today) for vice in self.state.vices)
        if filled:
            self._commit()
        return filled

    @synchronized
    def check_in_vice(self, vice_id: str, status: str) -> MutationResult:
        """Одна отметка в день: clean +1 к серии и 50 XP, relapsed обнуляет серию"""
        status = validate_enum_value(status, ViceStatus, "status")
        vice = self.state.find_vice(vice_id)
        if vice is None:
            return self._zero()

        today = self.clock.today()
        self._backfill_vice(vice, today)

        if vice.status_on(today) is not None or vice.last_check_in == today:
            return self._zero()

        level_before = self.state.stats.level
        vice.history[today] = status
        vice.last_check_in = today

        xp = 0
        if status == ViceStatus.CLEAN.value:
            vice.current_streak += 1
            vice.longest_streak = max(vice.longest_streak, vice.current_streak)
            xp = self._award_xp(VICE_CLEAN_DAY_XP)
        else:
            vice.current_streak = 0
            self._register_activity(today)

        self._commit()
        return self._result(level_before, xp)

    # ===== SESSION =====

    @synchronized
    def start_session(self) -> RolloverReport:
        """Rollover для текущего "сегодня" (при старте и после сдвига даты)"""
        report = self.rollover.run(self.state)
        self._commit()
        return report

    @synchronized
    def replace_state(self, state: GameState) -> None:
        self.state = state
        self._commit()

    # ===== READ-ONLY GETTERS =====

    def get_xp_for_next_level(self) -> int:
        return xp_for_next_level(self.state.stats.level)

    def get_current_level_progress(self) -> float:
        stats = self.state.stats
        return level_progress(stats.total_lifetime_xp, stats.level)

    def get_monthly_xp(self) -> int:
        month_days = set(self.clock.current_month_days())
        return sum(xp for day, xp in self.state.stats.daily_xp.items() if day in month_days)

    def get_weekly_average_xp(self) -> int:
        stats = self.state.stats
        total = sum(stats.xp_on(day) for day in self.clock.last_7_days())
        return int(math.floor(total / 7 + 0.5))

    def get_league(self) -> League:
        """Отладочное переопределение всегда побеждает"""
        override = self.state.debug_league_override
        if override:
            return League(override)
        return league_for_monthly_xp(self.get_monthly_xp())

    def get_league_progress(self) -> LeagueProgress:
        return league_progress(self.get_monthly_xp(), self.get_league())

    def get_goal_tasks(self) -> List[Task]:
        return [t for t in self.state.tasks if t.is_goal_task]

    def get_custom_tasks(self) -> List[Task]:
        return [t for t in self.state.tasks if not t.is_goal_task and not t.is_habit_task]

    def get_habit_tasks(self) -> List[Task]:
        return [t for t in self.state.tasks if t.is_habit_task]

    def get_tasks_for_goal(self, goal_id: str) -> List[Task]:
        return self.state.tasks_for_goal(goal_id)

    def get_tasks_for_habit(self, habit_id: str) -> List[Task]:
        return self.state.tasks_for_habit(habit_id)

    def get_task_history(self) -> Dict[str, int]:
        """Архив выполненных задач плюс живые выполненные задачи, по датам"""
        history = dict(self.state.stats.task_history)
        for task in self.state.tasks:
            if task.completed and task.completed_at:
                day = self.clock.date_of_ms(task.completed_at)
                history[day] = history.get(day, 0) + 1
        return dict(sorted(history.items()))

    def get_snapshot(self) -> Dict[str, Any]:
        """Полный снимок состояния и производных значений"""
        with self._lock:
            stats = self.state.stats
            return {
                **self.state.to_dict(),
                'derived': {
                    'today': self.clock.today(),
                    'debugDateOffset': self.clock.debug_date_offset,
                    'level': stats.level,
                    'xpForNextLevel': self.get_xp_for_next_level(),
                    'levelProgress': self.get_current_level_progress(),
                    'league': self.get_league().value,
                    'leagueProgress': self.get_league_progress().to_dict(),
                    'monthlyXP': self.get_monthly_xp(),
                    'weeklyAverageXP': self.get_weekly_average_xp()
                }
            }
