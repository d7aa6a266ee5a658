# questline/dashboard/api/vices.py

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from questline.services import GameService
from ..dependencies import get_game_service, not_found
from ..schemas import ViceCreate, ViceCheckIn

router = APIRouter(prefix="/api/vices", tags=["vices"])

@router.get("", response_model=Dict[str, Any])
def list_vices(service: GameService = Depends(get_game_service)):
    """Список пороков; пропущенные дни дозаполняются перед ответом"""
    filled = service.check_missed_vice_days()
    vices = service.state.vices
    return {"vices": [v.to_dict() for v in vices], "total": len(vices), "backfilled": filled}

@router.post("", status_code=status.HTTP_201_CREATED)
def create_vice(payload: ViceCreate, service: GameService = Depends(get_game_service)):
    return service.add_vice(payload.title, payload.template).to_dict()

@router.delete("/{vice_id}")
def delete_vice(vice_id: str, service: GameService = Depends(get_game_service)):
    if not service.delete_vice(vice_id):
        raise not_found("Порок", vice_id)
    return {"deleted": True}

@router.post("/{vice_id}/check-in")
def check_in(vice_id: str, payload: ViceCheckIn, service: GameService = Depends(get_game_service)):
    if service.state.find_vice(vice_id) is None:
        raise not_found("Порок", vice_id)
    return service.check_in_vice(vice_id, payload.status).to_dict()
