# questline/services/task_generator.py

"""
Генератор задач для целей и привычек

Задача показывает текущую (адаптивную) нагрузку упражнения на момент
создания и не меняется при последующей эскалации.
"""

import uuid
import logging
from typing import List, Optional

from questline.core.economy import Difficulty, XP_VALUES
from questline.core.models import (
    Task, Goal, Habit, Exercise, GoalType, Frequency, ExerciseUnit
)

logger = logging.getLogger(__name__)

# Пороги сложности по количеству: (easy, medium, hard), дальше boss
_DIFFICULTY_STEPS = {
    ExerciseUnit.REPS.value: (20, 50, 80),
    ExerciseUnit.PAGES.value: (20, 50, 80),
    ExerciseUnit.MINUTES.value: (10, 30, 60),
}

def difficulty_for_amount(amount: int, unit: str) -> Difficulty:
    """Автоматическая сложность по требуемому количеству и единице"""
    if unit == ExerciseUnit.BOOKS.value:
        return Difficulty.HARD

    steps = _DIFFICULTY_STEPS.get(unit)
    if steps is None:
        return Difficulty.MEDIUM

    easy, medium, hard = steps
    if amount < easy:
        return Difficulty.EASY
    if amount < medium:
        return Difficulty.MEDIUM
    if amount < hard:
        return Difficulty.HARD
    return Difficulty.BOSS

def _task_id(prefix: str, owner_id: str, exercise: Optional[Exercise] = None) -> str:
    parts = [prefix, owner_id]
    if exercise is not None:
        parts.append(exercise.id)
    parts.append(uuid.uuid4().hex[:8])
    return "-".join(parts)

def _exercise_task(task_id: str, exercise: Exercise, created_at: int, **extra) -> Task:
    difficulty = difficulty_for_amount(exercise.current_amount, exercise.unit)
    return Task(
        id=task_id,
        title=f"Do {exercise.current_amount} {exercise.name.lower()}",
        difficulty=difficulty.value,
        xp=XP_VALUES[difficulty],
        created_at=created_at,
        required_amount=exercise.current_amount,
        unit=exercise.unit,
        exercise_id=exercise.id,
        exercise_name=exercise.name,
        **extra
    )

# ===== GOAL TASKS =====

def generate_goal_task(goal: Goal, created_at: int, exercise: Optional[Exercise] = None,
                       today: Optional[str] = None) -> Optional[Task]:
    """Одна задача цели (для упражнения или для цели целиком)"""
    goal_type = goal.goal_type

    if goal_type == GoalType.PROGRESSIVE:
        if exercise is None:
            return None
        return _exercise_task(
            _task_id("goal-task", goal.id, exercise), exercise, created_at,
            goal_id=goal.id,
            is_goal_task=True,
            goal_type=goal.type,
            due_date=Frequency.DAILY.value,
            goal_title=goal.title,
            final_goal=exercise.target_amount,
        )

    if goal_type == GoalType.ACCUMULATOR:
        return Task(
            id=_task_id("goal-task", goal.id),
            title=f"{goal.title} ({goal.total_completed}/{goal.target_value} {goal.unit})",
            difficulty=Difficulty.MEDIUM.value,
            xp=XP_VALUES[Difficulty.MEDIUM],
            created_at=created_at,
            goal_id=goal.id,
            is_goal_task=True,
            goal_type=goal.type,
            due_date=goal.frequency,
            unit=goal.unit,
            goal_title=goal.title,
            final_goal=goal.target_value,
            current_progress=goal.total_completed,
        )

    if goal_type == GoalType.FREQUENCY:
        progress = goal.period_progress(today) if today else goal.params.weekly_progress
        counter = f"({progress + 1}/{goal.period_target})"

        if exercise is not None:
            return _exercise_task(
                _task_id("goal-task", goal.id, exercise), exercise, created_at,
                goal_id=goal.id,
                is_goal_task=True,
                goal_type=goal.type,
                due_date=goal.frequency,
                goal_title=f"{goal.title} {counter}",
                final_goal=exercise.target_amount,
            )

        return Task(
            id=_task_id("goal-task", goal.id),
            title=f"{goal.title} {counter}",
            difficulty=Difficulty.MEDIUM.value,
            xp=XP_VALUES[Difficulty.MEDIUM],
            created_at=created_at,
            goal_id=goal.id,
            is_goal_task=True,
            goal_type=goal.type,
            due_date=goal.frequency,
            goal_title=goal.title,
        )

    return None

def generate_goal_tasks(goal: Goal, created_at: int, today: Optional[str] = None) -> List[Task]:
    """Задачи цели: по одной на упражнение, либо одна на цель"""
    if goal.goal_type != GoalType.ACCUMULATOR and goal.exercises:
        tasks = [generate_goal_task(goal, created_at, exercise, today) for exercise in goal.exercises]
    else:
        tasks = [generate_goal_task(goal, created_at, today=today)]
    tasks = [task for task in tasks if task is not None]
    logger.debug(f"📝 Цель \"{goal.title}\": создано задач {len(tasks)}")
    return tasks

# ===== HABIT TASKS =====

def generate_habit_task(habit: Habit, created_at: int, exercise: Optional[Exercise] = None) -> Task:
    if exercise is not None:
        return _exercise_task(
            _task_id("habit-task", habit.id, exercise), exercise, created_at,
            habit_id=habit.id,
            is_habit_task=True,
            due_date=Frequency.DAILY.value,
            goal_title=habit.title,
            final_goal=exercise.current_amount,
        )

    return Task(
        id=_task_id("habit-task", habit.id),
        title=habit.title,
        difficulty=Difficulty.MEDIUM.value,
        xp=XP_VALUES[Difficulty.MEDIUM],
        created_at=created_at,
        habit_id=habit.id,
        is_habit_task=True,
        due_date=Frequency.DAILY.value,
        goal_title=habit.title,
    )

def generate_habit_tasks(habit: Habit, created_at: int) -> List[Task]:
    if habit.exercises:
        return [generate_habit_task(habit, created_at, exercise) for exercise in habit.exercises]
    return [generate_habit_task(habit, created_at)]
