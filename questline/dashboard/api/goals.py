# questline/dashboard/api/goals.py

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from questline.services import GameService
from ..dependencies import get_game_service, require_task, not_found
from ..schemas import GoalCreate, GoalTaskComplete, OverclockRequest, AccumulatorProgress

router = APIRouter(prefix="/api/goals", tags=["goals"])

@router.get("", response_model=Dict[str, Any])
def list_goals(service: GameService = Depends(get_game_service)):
    goals = service.state.goals
    return {"goals": [g.to_dict() for g in goals], "total": len(goals)}

@router.post("", status_code=status.HTTP_201_CREATED)
def create_goal(payload: GoalCreate, service: GameService = Depends(get_game_service)):
    """Создать цель; задачи на сегодня генерируются сразу"""
    goal = service.add_goal(
        payload.type,
        payload.title,
        exercises=[e.model_dump() for e in payload.exercises],
        template=payload.template,
        frequency=payload.frequency,
        weekly_target=payload.weekly_target,
        daily_target=payload.daily_target,
        target_value=payload.target_value,
        unit=payload.unit,
        deadline=payload.deadline
    )
    return {
        "goal": goal.to_dict(),
        "tasks": [t.to_dict() for t in service.get_tasks_for_goal(goal.id)]
    }

@router.get("/{goal_id}")
def get_goal(goal_id: str, service: GameService = Depends(get_game_service)):
    goal = service.state.find_goal(goal_id)
    if goal is None:
        raise not_found("Цель", goal_id)
    return goal.to_dict()

@router.delete("/{goal_id}")
def delete_goal(goal_id: str, service: GameService = Depends(get_game_service)):
    if not service.delete_goal(goal_id):
        raise not_found("Цель", goal_id)
    return {"deleted": True}

@router.get("/{goal_id}/tasks")
def goal_tasks(goal_id: str, service: GameService = Depends(get_game_service)):
    if service.state.find_goal(goal_id) is None:
        raise not_found("Цель", goal_id)
    return {"tasks": [t.to_dict() for t in service.get_tasks_for_goal(goal_id)]}

@router.post("/tasks/{task_id}/complete")
def complete_goal_task(task_id: str, payload: GoalTaskComplete = GoalTaskComplete(),
                       service: GameService = Depends(get_game_service)):
    require_task(service, task_id)
    return service.complete_goal_task(task_id, payload.actual_amount).to_dict()

@router.post("/tasks/{task_id}/overclock")
def overclock_task(task_id: str, payload: OverclockRequest,
                   service: GameService = Depends(get_game_service)):
    require_task(service, task_id)
    return service.overclock_task(task_id, payload.actual_amount).to_dict()

@router.post("/tasks/{task_id}/progress")
def accumulator_progress(task_id: str, payload: AccumulatorProgress,
                         service: GameService = Depends(get_game_service)):
    """Вклад в накопительную цель"""
    require_task(service, task_id)
    return service.update_accumulator_progress(task_id, payload.amount).to_dict()

@router.post("/{goal_id}/claim")
def claim_rewards(goal_id: str, service: GameService = Depends(get_game_service)):
    if service.state.find_goal(goal_id) is None:
        raise not_found("Цель", goal_id)
    return service.claim_goal_rewards(goal_id).to_dict()

@router.post("/{goal_id}/to-habit", status_code=status.HTTP_201_CREATED)
def move_to_habit(goal_id: str, service: GameService = Depends(get_game_service)):
    if service.state.find_goal(goal_id) is None:
        raise not_found("Цель", goal_id)
    habit = service.move_goal_to_habit(goal_id)
    if habit is None:
        raise HTTPException(status_code=409, detail="Цель еще не выполнена")
    return habit.to_dict()
