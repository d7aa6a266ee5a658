# questline/services/progression.py

"""
Движок прогресса: адаптивная перегрузка, разгон (overclock) и серии

Все функции изменяют переданные объекты на месте и ничего не сохраняют.
"""

import math
import logging
from typing import Optional, Tuple

from questline.core.models import Exercise

logger = logging.getLogger(__name__)

# ===== CONSTANTS =====

OVERLOAD_DAYS = 3
OVERLOAD_RATIO = 0.10
OVERLOAD_MIN_STEP = 2

OVERCLOCK_XP_PER_UNIT = 2
OVERCLOCK_MAX_BONUS = 100
OVERCLOCK_FAST_TRACK_RATIO = 0.5

# ===== ADAPTIVE OVERLOAD =====

def overload_increment(exercise: Exercise) -> int:
    """Шаг эскалации: 10% оставшегося разрыва, но не меньше 2"""
    gap = exercise.gap
    if gap <= 0:
        return 0
    return max(math.ceil(gap * OVERLOAD_RATIO), OVERLOAD_MIN_STEP)

def apply_overload(exercise: Exercise) -> bool:
    """
    Зачесть одно успешное выполнение упражнения

    После OVERLOAD_DAYS выполнений на текущей нагрузке нагрузка растет
    на overload_increment(), но никогда не превышает финальную цель.

    Returns:
        True, если нагрузка выросла
    """
    exercise.days_at_current_target += 1
    if exercise.days_at_current_target < OVERLOAD_DAYS:
        return False

    increment = overload_increment(exercise)
    exercise.days_at_current_target = 0
    if increment == 0:
        return False

    previous = exercise.current_amount
    exercise.current_amount = min(exercise.current_amount + increment, exercise.target_amount)
    logger.debug(f"📈 {exercise.name}: {previous} → {exercise.current_amount}")
    return True

# ===== OVERCLOCK =====

def overclock_bonus(required_amount: int, actual_amount: int) -> int:
    """Бонус за перевыполнение: 2 XP за единицу сверх нормы, максимум 100"""
    excess = actual_amount - required_amount
    if excess <= 0:
        return 0
    return min(excess * OVERCLOCK_XP_PER_UNIT, OVERCLOCK_MAX_BONUS)

def fast_track(exercise: Exercise, excess: int) -> int:
    """Ускоренный рост нагрузки после перевыполнения; возвращает прирост"""
    boost = math.ceil(excess * OVERCLOCK_FAST_TRACK_RATIO)
    previous = exercise.current_amount
    exercise.current_amount = min(exercise.target_amount, exercise.current_amount + boost)
    exercise.days_at_current_target = 0
    return exercise.current_amount - previous

# ===== STREAKS =====

def advance_daily_streak(last_date: Optional[str], today: str, yesterday: str,
                         streak: int) -> Tuple[int, bool]:
    """
    Правило дневной серии (общее для глобальной серии, целей и привычек)

    Returns:
        (новая серия, изменилась ли серия)
    """
    if last_date == today:
        return streak, False
    if last_date == yesterday:
        return streak + 1, True
    return 1, True

def is_streak_alive(last_date: Optional[str], today: str, yesterday: str) -> bool:
    return last_date in (today, yesterday)
