#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Questline - Core Data Models
Модели данных движка прогресса: задачи, цели, привычки, пороки, статистика

Ключи сериализации совпадают с сохраненным состоянием (camelCase),
поэтому состояние загружается и сохраняется без преобразований схемы.

Версия: 1.0.0
"""

import uuid
import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Dict, List, Optional, Any, ClassVar, Type

from questline.core.economy import (
    Difficulty, XP_VALUES, GOAL_COMPLETION_BONUS, WEEKLY_FREQUENCY_BONUS,
    level_from_total_xp
)

logger = logging.getLogger(__name__)

# ===== ENUMS =====

class ExerciseUnit(Enum):
    """Единицы измерения упражнений"""
    REPS = "reps"
    MINUTES = "minutes"
    PAGES = "pages"
    SESSIONS = "sessions"
    BOOKS = "books"
    ITEMS = "items"

class GoalType(Enum):
    """Типы целей"""
    PROGRESSIVE = "progressive"
    ACCUMULATOR = "accumulator"
    FREQUENCY = "frequency"

class GoalTemplate(Enum):
    """Шаблоны целей"""
    FITNESS = "fitness"
    MEDITATION = "meditation"
    READING = "reading"
    CUSTOM = "custom"

class Frequency(Enum):
    """Период цели или привычки"""
    DAILY = "daily"
    WEEKLY = "weekly"

class ViceStatus(Enum):
    """Итог дня для порока"""
    CLEAN = "clean"
    RELAPSED = "relapsed"

# Правило двух минут: атомарные привычки стартуют с 2 единиц
ATOMIC_START_AMOUNT = 2

DEFAULT_WEEKLY_TARGET = 3
DEFAULT_DAILY_TARGET = 1

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

def validate_text(text: str, min_length: int = 1, max_length: int = 200, field_name: str = "title") -> str:
    """Валидация текстовых полей"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} должен быть строкой")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} должен содержать минимум {min_length} символов")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} должен содержать максимум {max_length} символов")

    return text

def validate_enum_value(value: str, enum_class: type, field_name: str = "value") -> str:
    """Валидация значений enum"""
    try:
        return enum_class(value).value
    except ValueError:
        valid_values = [e.value for e in enum_class]
        raise ValidationError(f"{field_name} должен быть одним из: {valid_values}")

def validate_amounts(start_amount: int, target_amount: int, name: str = "exercise",
                     atomic: bool = False) -> None:
    """Цель должна быть положительной и больше стартового значения"""
    if target_amount is None or target_amount <= 0:
        raise ValidationError(f"Цель для \"{name}\" обязательна и должна быть больше 0")

    if not atomic and target_amount <= start_amount:
        raise ValidationError(
            f"Цель для \"{name}\" должна быть больше стартового значения ({start_amount})"
        )

# ===== SERIALIZATION HELPERS =====

_KEY_OVERRIDES = {
    'current_xp': 'currentXP',
    'total_lifetime_xp': 'totalLifetimeXP',
    'daily_xp': 'dailyXP',
}

def _camel(name: str) -> str:
    if name in _KEY_OVERRIDES:
        return _KEY_OVERRIDES[name]
    head, *tail = name.split('_')
    return head + ''.join(part.capitalize() for part in tail)

def _plain_fields(obj, skip=()) -> Dict[str, Any]:
    """Простые поля dataclass в camelCase, без None"""
    result = {}
    for f in fields(obj):
        if f.name in skip:
            continue
        value = getattr(obj, f.name)
        if value is not None:
            result[_camel(f.name)] = value
    return result

def _kwargs_from(cls, data: Dict[str, Any], skip=()) -> Dict[str, Any]:
    kwargs = {}
    for f in fields(cls):
        key = _camel(f.name)
        if f.name not in skip and key in data:
            kwargs[f.name] = data[key]
    return kwargs

def new_id() -> str:
    return str(uuid.uuid4())

# ===== CORE MODELS =====

@dataclass
class HistoryEntry:
    """Датированный вклад в цель или привычку"""
    date: str
    value: float
    exercise_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _plain_fields(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(**_kwargs_from(cls, data))

@dataclass
class Exercise:
    """Упражнение внутри цели или привычки"""
    id: str
    name: str
    target_amount: int
    start_amount: int
    current_amount: int
    unit: str = ExerciseUnit.REPS.value
    days_at_current_target: int = 0

    @property
    def gap(self) -> int:
        """Сколько осталось до финальной цели"""
        return self.target_amount - self.current_amount

    @property
    def at_target(self) -> bool:
        return self.current_amount >= self.target_amount

    def to_dict(self) -> Dict[str, Any]:
        return _plain_fields(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Exercise":
        return cls(**_kwargs_from(cls, data))

    @classmethod
    def create(cls, name: str, start_amount: int, target_amount: int,
               unit: str = ExerciseUnit.REPS.value, atomic: bool = False) -> "Exercise":
        """Создание упражнения; атомарные стартуют с ATOMIC_START_AMOUNT"""
        return cls(
            id=new_id(),
            name=validate_text(name, field_name="name"),
            target_amount=target_amount,
            start_amount=start_amount,
            current_amount=ATOMIC_START_AMOUNT if atomic else start_amount,
            unit=validate_enum_value(unit, ExerciseUnit, "unit"),
        )

@dataclass
class Task:
    """
    Единица работы

    Принадлежит ровно одному владельцу: цели (goal_id), привычке
    (habit_id) или никому (разовая задача). Владельцы не хранят ссылки
    на свои задачи, принадлежность вычисляется фильтром.
    """
    id: str
    title: str
    difficulty: str = Difficulty.MEDIUM.value
    xp: int = XP_VALUES[Difficulty.MEDIUM]
    completed: bool = False
    completed_at: Optional[int] = None
    created_at: int = 0

    # Таймер для hard/boss задач
    timer_enabled: bool = False
    timer_duration: Optional[int] = None  # в секундах
    timer_started_at: Optional[int] = None
    timer_completed: bool = False

    # Поля целей
    goal_id: Optional[str] = None
    is_goal_task: bool = False
    goal_type: Optional[str] = None
    due_date: Optional[str] = None  # daily / weekly
    required_amount: Optional[int] = None
    actual_amount: Optional[int] = None
    overclocked: bool = False
    unit: Optional[str] = None
    exercise_id: Optional[str] = None
    goal_title: Optional[str] = None
    exercise_name: Optional[str] = None
    final_goal: Optional[int] = None
    current_progress: Optional[int] = None

    # Поля привычек
    habit_id: Optional[str] = None
    is_habit_task: bool = False

    @property
    def is_ad_hoc(self) -> bool:
        return self.goal_id is None and self.habit_id is None

    @property
    def is_regenerable(self) -> bool:
        """Задача пересоздается планировщиком каждый день"""
        return not self.is_ad_hoc or self.due_date == Frequency.DAILY.value

    @property
    def is_timer_locked(self) -> bool:
        return self.timer_enabled and not self.timer_completed

    def belongs_to(self, owner_id: str, exercise_id: Optional[str] = None) -> bool:
        if owner_id not in (self.goal_id, self.habit_id):
            return False
        return exercise_id is None or self.exercise_id == exercise_id

    def to_dict(self) -> Dict[str, Any]:
        return _plain_fields(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(**_kwargs_from(cls, data))

    @classmethod
    def create(cls, title: str, difficulty: str, created_at: int,
               timer_minutes: Optional[int] = None) -> "Task":
        """Создание разовой задачи"""
        difficulty = validate_enum_value(difficulty, Difficulty, "difficulty")
        needs_timer = (
            difficulty in (Difficulty.HARD.value, Difficulty.BOSS.value)
            and bool(timer_minutes) and timer_minutes > 0
        )
        return cls(
            id=new_id(),
            title=validate_text(title),
            difficulty=difficulty,
            xp=XP_VALUES[Difficulty(difficulty)],
            created_at=created_at,
            timer_enabled=needs_timer,
            timer_duration=timer_minutes * 60 if needs_timer else None,
        )

@dataclass
class GoalParams:
    """Параметры цели, зависящие от типа"""
    frequency: str = Frequency.DAILY.value

    # Частотные цели
    weekly_target: Optional[int] = None
    weekly_progress: int = 0
    last_week_reset: Optional[str] = None
    daily_target: Optional[int] = None

    # Накопительные цели
    total_completed: int = 0
    target_value: Optional[int] = None
    deadline: Optional[str] = None
    unit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _plain_fields(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GoalParams":
        return cls(**_kwargs_from(cls, data))

@dataclass
class Goal:
    """
    Цель: базовый класс размеченного объединения по полю type

    Конкретные правила завершения живут в подклассах, Goal.from_dict
    выбирает подкласс по тегу.
    """
    id: str
    title: str
    template: str = GoalTemplate.CUSTOM.value
    exercises: List[Exercise] = field(default_factory=list)
    params: GoalParams = field(default_factory=GoalParams)
    consecutive_days: int = 0
    history: List[HistoryEntry] = field(default_factory=list)
    created_at: int = 0
    completed_at: Optional[int] = None
    completed: bool = False
    rewards_claimed: bool = False

    # Значок позора: дата обрыва серии и серия до обрыва
    streak_broken_date: Optional[str] = None
    previous_streak: Optional[int] = None

    TYPE: ClassVar[GoalType]
    _registry: ClassVar[Dict[str, Type["Goal"]]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        Goal._registry[cls.TYPE.value] = cls

    # ===== PROPERTIES =====

    @property
    def type(self) -> str:
        return self.TYPE.value

    @property
    def goal_type(self) -> GoalType:
        return self.TYPE

    @property
    def frequency(self) -> str:
        return self.params.frequency

    @property
    def is_daily(self) -> bool:
        return self.params.frequency == Frequency.DAILY.value

    @property
    def is_terminal(self) -> bool:
        """Завершенная цель больше не генерирует задачи"""
        return self.completed

    @property
    def tracks_daily_streak(self) -> bool:
        return False

    @property
    def completion_bonus(self) -> int:
        return GOAL_COMPLETION_BONUS

    # ===== METHODS =====

    def find_exercise(self, exercise_id: Optional[str]) -> Optional[Exercise]:
        for exercise in self.exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    def entries_on(self, date_str: str) -> int:
        """Количество реальных вкладов за день (нулевые записи пропусков не считаются)"""
        return sum(1 for entry in self.history if entry.date == date_str and entry.value > 0)

    def has_entry_on(self, date_str: str) -> bool:
        return self.entries_on(date_str) > 0

    def is_target_met(self, today: str) -> bool:
        raise NotImplementedError

    def mark_completed(self, timestamp_ms: int) -> None:
        self.completed = True
        self.completed_at = timestamp_ms
        self.streak_broken_date = None
        self.previous_streak = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type}
        data.update(_plain_fields(self, skip=('exercises', 'params', 'history')))
        data['exercises'] = [e.to_dict() for e in self.exercises]
        data['params'] = self.params.to_dict()
        data['history'] = [h.to_dict() for h in self.history]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        goal_cls = Goal._registry.get(data.get('type'))
        if goal_cls is None:
            raise ValidationError(f"Неизвестный тип цели: {data.get('type')}")

        kwargs = _kwargs_from(goal_cls, data, skip=('exercises', 'params', 'history'))
        kwargs['exercises'] = [Exercise.from_dict(e) for e in data.get('exercises', [])]
        kwargs['params'] = GoalParams.from_dict(data.get('params', {}))
        kwargs['history'] = [HistoryEntry.from_dict(h) for h in data.get('history', [])]
        return goal_cls(**kwargs)

    @classmethod
    def create(cls, goal_type: str, title: str, created_at: int, **kwargs) -> "Goal":
        goal_type = validate_enum_value(goal_type, GoalType, "type")
        return Goal._registry[goal_type](
            id=new_id(),
            title=validate_text(title),
            created_at=created_at,
            **kwargs
        )

@dataclass
class ProgressiveGoal(Goal):
    """Цель с нарастающей нагрузкой: все упражнения должны дойти до цели"""
    TYPE: ClassVar[GoalType] = GoalType.PROGRESSIVE

    @property
    def tracks_daily_streak(self) -> bool:
        return self.is_daily

    def is_target_met(self, today: str) -> bool:
        return bool(self.exercises) and all(e.at_target for e in self.exercises)

@dataclass
class AccumulatorGoal(Goal):
    """Накопительная цель: один счетчик против целевого значения"""
    TYPE: ClassVar[GoalType] = GoalType.ACCUMULATOR

    @property
    def target_value(self) -> int:
        return self.params.target_value or 0

    @property
    def total_completed(self) -> int:
        return self.params.total_completed or 0

    @property
    def unit(self) -> str:
        return self.params.unit or ExerciseUnit.ITEMS.value

    def is_target_met(self, today: str) -> bool:
        return self.total_completed >= self.target_value

@dataclass
class FrequencyGoal(Goal):
    """
    Частотная цель: N раз в день или в неделю

    Не терминальная: дневные сбрасываются при rollover каждый день,
    недельные на границе недели.
    """
    TYPE: ClassVar[GoalType] = GoalType.FREQUENCY

    @property
    def is_terminal(self) -> bool:
        return False

    @property
    def tracks_daily_streak(self) -> bool:
        return self.is_daily

    @property
    def completion_bonus(self) -> int:
        return 0 if self.is_daily else WEEKLY_FREQUENCY_BONUS

    @property
    def period_target(self) -> int:
        if self.is_daily:
            return self.params.daily_target or DEFAULT_DAILY_TARGET
        return self.params.weekly_target or DEFAULT_WEEKLY_TARGET

    def exercise_entries_on(self, exercise_id: Optional[str], date_str: str) -> int:
        return sum(
            1 for entry in self.history
            if entry.date == date_str and entry.value > 0 and entry.exercise_id == exercise_id
        )

    def sessions_on(self, date_str: str) -> int:
        """
        Завершенные за день подходы

        Подход с упражнениями засчитывается, когда выполнено каждое
        упражнение, поэтому число подходов равно минимуму по упражнениям.
        """
        if not self.exercises:
            return self.entries_on(date_str)
        return min(self.exercise_entries_on(e.id, date_str) for e in self.exercises)

    def period_progress(self, today: str) -> int:
        if self.is_daily:
            return self.sessions_on(today)
        return self.params.weekly_progress

    def awaits_exercise(self, exercise_id: Optional[str], today: str) -> bool:
        """Нужна ли еще задача по упражнению в текущем периоде"""
        if self.is_target_met(today):
            return False
        if exercise_id is None or not self.is_daily:
            return True
        # Упражнение не опережает незавершенный подход
        return self.exercise_entries_on(exercise_id, today) <= self.sessions_on(today)

    def is_target_met(self, today: str) -> bool:
        return self.period_progress(today) >= self.period_target

@dataclass
class Habit:
    """Привычка: повторяющийся ритуал, никогда не завершается"""
    id: str
    title: str
    origin_goal_id: Optional[str] = None
    exercises: List[Exercise] = field(default_factory=list)
    frequency: str = Frequency.DAILY.value
    weekly_target: Optional[int] = None
    weekly_progress: int = 0
    last_week_reset: Optional[str] = None
    streak: int = 0
    longest_streak: int = 0
    last_completed_date: Optional[str] = None
    history: List[HistoryEntry] = field(default_factory=list)
    created_at: int = 0

    @property
    def is_daily(self) -> bool:
        return self.frequency == Frequency.DAILY.value

    @property
    def period_target(self) -> int:
        return self.weekly_target or DEFAULT_WEEKLY_TARGET

    def find_exercise(self, exercise_id: Optional[str]) -> Optional[Exercise]:
        for exercise in self.exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    def is_completed_on(self, date_str: str) -> bool:
        return self.last_completed_date == date_str

    def to_dict(self) -> Dict[str, Any]:
        data = _plain_fields(self, skip=('exercises', 'history'))
        data['exercises'] = [e.to_dict() for e in self.exercises]
        data['history'] = [h.to_dict() for h in self.history]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        kwargs = _kwargs_from(cls, data, skip=('exercises', 'history'))
        kwargs['exercises'] = [Exercise.from_dict(e) for e in data.get('exercises', [])]
        kwargs['history'] = [HistoryEntry.from_dict(h) for h in data.get('history', [])]
        return cls(**kwargs)

@dataclass
class Vice:
    """Порок: серия воздержания с одной отметкой в день"""
    id: str
    title: str
    template: str = "custom"
    history: Dict[str, str] = field(default_factory=dict)
    current_streak: int = 0
    longest_streak: int = 0
    last_check_in: Optional[str] = None
    created_at: int = 0

    def status_on(self, date_str: str) -> Optional[str]:
        return self.history.get(date_str)

    def to_dict(self) -> Dict[str, Any]:
        data = _plain_fields(self, skip=('history',))
        data['history'] = dict(sorted(self.history.items()))
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vice":
        kwargs = _kwargs_from(cls, data, skip=('history',))
        kwargs['history'] = dict(data.get('history', {}))
        return cls(**kwargs)

@dataclass
class UserStats:
    """Агрегированная статистика пользователя"""
    current_xp: int = 0
    total_lifetime_xp: int = 0
    level: int = 1
    streak: int = 0
    longest_streak: int = 0
    last_active_date: Optional[str] = None
    daily_xp: Dict[str, int] = field(default_factory=dict)
    task_history: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        """Нормализация после создания объекта"""
        self.current_xp = max(0, self.current_xp)
        self.total_lifetime_xp = max(0, self.total_lifetime_xp)
        self.streak = max(0, self.streak)
        self.longest_streak = max(self.longest_streak, self.streak)
        # Уровень всегда выводится из накопленного XP
        self.level = level_from_total_xp(self.total_lifetime_xp)

    def xp_on(self, date_str: str) -> int:
        return self.daily_xp.get(date_str, 0)

    def add_to_ledger(self, date_str: str, amount: int) -> None:
        self.daily_xp[date_str] = self.daily_xp.get(date_str, 0) + amount

    def prune_ledger(self, cutoff_date: str) -> None:
        """Удалить записи старше cutoff_date (скользящее окно)"""
        self.daily_xp = {d: xp for d, xp in self.daily_xp.items() if d >= cutoff_date}

    def to_dict(self) -> Dict[str, Any]:
        data = _plain_fields(self, skip=('daily_xp', 'task_history'))
        data['dailyXP'] = [{'date': d, 'xp': xp} for d, xp in sorted(self.daily_xp.items())]
        data['taskHistory'] = dict(sorted(self.task_history.items()))
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserStats":
        kwargs = _kwargs_from(cls, data, skip=('daily_xp', 'task_history'))

        raw_daily = data.get('dailyXP', [])
        if isinstance(raw_daily, dict):
            daily_xp = {d: int(xp) for d, xp in raw_daily.items()}
        else:
            daily_xp = {}
            for entry in raw_daily:
                daily_xp[entry['date']] = daily_xp.get(entry['date'], 0) + int(entry['xp'])

        kwargs['daily_xp'] = daily_xp
        kwargs['task_history'] = {d: int(c) for d, c in data.get('taskHistory', {}).items()}
        return cls(**kwargs)

@dataclass
class GameState:
    """Полный снимок состояния движка"""
    tasks: List[Task] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)
    habits: List[Habit] = field(default_factory=list)
    vices: List[Vice] = field(default_factory=list)
    stats: UserStats = field(default_factory=UserStats)
    debug_league_override: Optional[str] = None

    # ===== LOOKUPS =====

    def find_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def find_goal(self, goal_id: Optional[str]) -> Optional[Goal]:
        return next((g for g in self.goals if g.id == goal_id), None)

    def find_habit(self, habit_id: Optional[str]) -> Optional[Habit]:
        return next((h for h in self.habits if h.id == habit_id), None)

    def find_vice(self, vice_id: str) -> Optional[Vice]:
        return next((v for v in self.vices if v.id == vice_id), None)

    def tasks_for_goal(self, goal_id: str) -> List[Task]:
        return [t for t in self.tasks if t.goal_id == goal_id]

    def tasks_for_habit(self, habit_id: str) -> List[Task]:
        return [t for t in self.tasks if t.habit_id == habit_id]

    def remove_tasks_of(self, owner_id: str) -> int:
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if owner_id not in (t.goal_id, t.habit_id)]
        return before - len(self.tasks)

    # ===== SERIALIZATION =====

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'tasks': [t.to_dict() for t in self.tasks],
            'goals': [g.to_dict() for g in self.goals],
            'habits': [h.to_dict() for h in self.habits],
            'vices': [v.to_dict() for v in self.vices],
            'stats': self.stats.to_dict(),
        }
        if self.debug_league_override:
            data['debugLeagueOverride'] = self.debug_league_override
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameState":
        try:
            return cls(
                tasks=[Task.from_dict(t) for t in data.get('tasks', [])],
                goals=[Goal.from_dict(g) for g in data.get('goals', [])],
                habits=[Habit.from_dict(h) for h in data.get('habits', [])],
                vices=[Vice.from_dict(v) for v in data.get('vices', [])],
                stats=UserStats.from_dict(data['stats']),
                debug_league_override=data.get('debugLeagueOverride'),
            )
        except ValidationError:
            raise
        except Exception as e:
            logger.error(f"Ошибка десериализации состояния: {e}")
            raise ValidationError(f"Не удалось загрузить состояние: {e}")
