# questline/dashboard/schemas.py

"""
Схемы входных данных API

Проверка выполняется до вызова движка: непустые названия,
допустимые перечисления, цель больше нуля и больше старта
(кроме атомарных привычек). Принимаются и snake_case, и camelCase ключи.
"""

from typing import List, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Difficulty = Literal["trivial", "easy", "medium", "hard", "boss"]
Unit = Literal["reps", "minutes", "pages", "sessions", "books", "items"]
FrequencyValue = Literal["daily", "weekly"]
LeagueValue = Literal[
    "bronze", "silver", "gold", "platinum", "diamond",
    "master", "grandmaster", "champion", "legend", "immortal"
]

class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True
    )

# ===== TASKS =====

class TaskCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=200)
    difficulty: Difficulty = "medium"
    timer_minutes: Optional[int] = Field(None, ge=1, le=600)

# ===== GOALS / HABITS =====

class ExerciseIn(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    start_amount: int = Field(0, ge=0)
    target_amount: int = Field(..., gt=0)
    unit: Unit = "reps"

def _check_targets(exercises: List[ExerciseIn]) -> None:
    for exercise in exercises:
        if exercise.target_amount <= exercise.start_amount:
            raise ValueError(
                f"Цель для \"{exercise.name}\" должна быть больше стартового значения"
            )

class GoalCreate(ApiModel):
    type: Literal["progressive", "accumulator", "frequency"]
    title: str = Field(..., min_length=1, max_length=200)
    template: Literal["fitness", "meditation", "reading", "custom"] = "custom"
    exercises: List[ExerciseIn] = Field(default_factory=list)
    frequency: FrequencyValue = "daily"
    weekly_target: Optional[int] = Field(None, ge=1, le=7)
    daily_target: Optional[int] = Field(None, ge=1, le=20)
    target_value: Optional[int] = Field(None, gt=0)
    unit: Optional[Unit] = None
    deadline: Optional[str] = None

    @model_validator(mode="after")
    def check_goal(self):
        if self.type == "progressive" and not self.exercises:
            raise ValueError("Прогрессивная цель требует хотя бы одно упражнение")
        if self.type == "accumulator" and self.target_value is None:
            raise ValueError("Накопительная цель требует targetValue")
        if self.template != "meditation":
            _check_targets(self.exercises)
        return self

class HabitCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=200)
    exercises: List[ExerciseIn] = Field(default_factory=list)
    frequency: FrequencyValue = "daily"
    weekly_target: Optional[int] = Field(None, ge=1, le=7)
    atomic: bool = False

    @model_validator(mode="after")
    def check_habit(self):
        if not self.atomic:
            _check_targets(self.exercises)
        return self

class GoalTaskComplete(ApiModel):
    actual_amount: Optional[int] = Field(None, gt=0)

class OverclockRequest(ApiModel):
    actual_amount: int = Field(..., gt=0)

class AccumulatorProgress(ApiModel):
    amount: int = Field(..., gt=0)

# ===== VICES =====

class ViceCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=200)
    template: str = Field("custom", min_length=1, max_length=50)

class ViceCheckIn(ApiModel):
    status: Literal["clean", "relapsed"]

# ===== DEBUG =====

class AdvanceDay(ApiModel):
    days: int = Field(1, ge=1, le=365)

class AddXP(ApiModel):
    amount: int = Field(..., gt=0, le=1_000_000)

class IncreaseStreak(ApiModel):
    days: int = Field(1, ge=-3650, le=3650)

class CycleLeague(ApiModel):
    direction: Literal["next", "prev"] = "next"

class SetLeague(ApiModel):
    league: LeagueValue
