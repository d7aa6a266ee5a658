# questline/dashboard/dependencies.py

"""
Провайдеры зависимостей FastAPI
"""

from fastapi import HTTPException, Request, status

from questline.core.models import Task
from questline.services import ServiceManager, GameService, DebugTools

def get_service_manager(request: Request) -> ServiceManager:
    manager = getattr(request.app.state, "service_manager", None)
    if manager is None or not manager.initialized:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Сервисы не инициализированы"
        )
    return manager

def get_game_service(request: Request) -> GameService:
    return get_service_manager(request).game_service

def get_debug_tools(request: Request) -> DebugTools:
    return get_service_manager(request).debug_tools

def require_task(service: GameService, task_id: str) -> Task:
    """Задача или 404"""
    task = service.state.find_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Задача {task_id} не найдена")
    return task

def not_found(entity: str, entity_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{entity} {entity_id} не найден(а)")
