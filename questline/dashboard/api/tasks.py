# questline/dashboard/api/tasks.py

from typing import Any, Dict, Literal

from fastapi import APIRouter, Depends, Query, status

from questline.services import GameService
from ..dependencies import get_game_service, require_task
from ..schemas import TaskCreate

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

@router.get("", response_model=Dict[str, Any])
def list_tasks(
    kind: Literal["all", "custom", "goal", "habit"] = Query("all"),
    service: GameService = Depends(get_game_service)
):
    """Список задач с фильтром по владельцу"""
    getters = {
        "all": lambda: service.state.tasks,
        "custom": service.get_custom_tasks,
        "goal": service.get_goal_tasks,
        "habit": service.get_habit_tasks,
    }
    tasks = getters[kind]()
    return {"tasks": [t.to_dict() for t in tasks], "total": len(tasks)}

@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(payload: TaskCreate, service: GameService = Depends(get_game_service)):
    task = service.add_task(payload.title, payload.difficulty, payload.timer_minutes)
    return task.to_dict()

@router.get("/history", response_model=Dict[str, int])
def task_history(service: GameService = Depends(get_game_service)):
    """Количество выполненных задач по датам"""
    return service.get_task_history()

@router.post("/{task_id}/complete")
def complete_task(task_id: str, service: GameService = Depends(get_game_service)):
    require_task(service, task_id)
    return service.complete_task(task_id).to_dict()

@router.post("/{task_id}/timer/start")
def start_timer(task_id: str, service: GameService = Depends(get_game_service)):
    require_task(service, task_id)
    return {"started": service.start_timer(task_id)}

@router.post("/{task_id}/timer/complete")
def complete_timer(task_id: str, service: GameService = Depends(get_game_service)):
    require_task(service, task_id)
    return {"completed": service.complete_timer(task_id)}

@router.delete("/{task_id}")
def delete_task(task_id: str, service: GameService = Depends(get_game_service)):
    require_task(service, task_id)
    return {"deleted": service.delete_task(task_id)}
