# questline/dashboard/api/habits.py

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from questline.services import GameService
from ..dependencies import get_game_service, require_task, not_found
from ..schemas import HabitCreate

router = APIRouter(prefix="/api/habits", tags=["habits"])

@router.get("", response_model=Dict[str, Any])
def list_habits(service: GameService = Depends(get_game_service)):
    habits = service.state.habits
    return {"habits": [h.to_dict() for h in habits], "total": len(habits)}

@router.post("", status_code=status.HTTP_201_CREATED)
def create_habit(payload: HabitCreate, service: GameService = Depends(get_game_service)):
    habit = service.add_habit(
        payload.title,
        exercises=[e.model_dump() for e in payload.exercises],
        frequency=payload.frequency,
        weekly_target=payload.weekly_target,
        atomic=payload.atomic
    )
    return {
        "habit": habit.to_dict(),
        "tasks": [t.to_dict() for t in service.get_tasks_for_habit(habit.id)]
    }

@router.delete("/{habit_id}")
def delete_habit(habit_id: str, service: GameService = Depends(get_game_service)):
    if not service.delete_habit(habit_id):
        raise not_found("Привычка", habit_id)
    return {"deleted": True}

@router.get("/{habit_id}/tasks")
def habit_tasks(habit_id: str, service: GameService = Depends(get_game_service)):
    if service.state.find_habit(habit_id) is None:
        raise not_found("Привычка", habit_id)
    return {"tasks": [t.to_dict() for t in service.get_tasks_for_habit(habit_id)]}

@router.post("/{habit_id}/complete")
def complete_habit(habit_id: str, service: GameService = Depends(get_game_service)):
    """Выполнить все задачи привычки на сегодня"""
    if service.state.find_habit(habit_id) is None:
        raise not_found("Привычка", habit_id)
    return service.complete_habit(habit_id).to_dict()

@router.post("/tasks/{task_id}/complete")
def complete_habit_task(task_id: str, service: GameService = Depends(get_game_service)):
    require_task(service, task_id)
    return service.complete_habit_task(task_id).to_dict()
