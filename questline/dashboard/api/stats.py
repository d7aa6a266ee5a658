# questline/dashboard/api/stats.py

from typing import Any, Dict

from fastapi import APIRouter, Depends

from questline.core.economy import next_league
from questline.services import GameService
from ..dependencies import get_game_service

router = APIRouter(prefix="/api", tags=["stats"])

@router.get("/stats", response_model=Dict[str, Any])
def get_stats(service: GameService = Depends(get_game_service)):
    """Статистика игрока и производные показатели"""
    stats = service.state.stats
    return {
        **stats.to_dict(),
        "today": service.clock.today(),
        "monthlyXP": service.get_monthly_xp(),
        "weeklyAverageXP": service.get_weekly_average_xp(),
        "league": service.get_league().value,
    }

@router.get("/stats/level")
def get_level(service: GameService = Depends(get_game_service)):
    stats = service.state.stats
    return {
        "level": stats.level,
        "totalLifetimeXP": stats.total_lifetime_xp,
        "xpForNextLevel": service.get_xp_for_next_level(),
        "progress": service.get_current_level_progress(),
    }

@router.get("/stats/league")
def get_league(service: GameService = Depends(get_game_service)):
    league = service.get_league()
    upcoming = next_league(league)
    return {
        "league": league.value,
        "nextLeague": upcoming.value if upcoming else None,
        "monthlyXP": service.get_monthly_xp(),
        "progress": service.get_league_progress().to_dict(),
    }

@router.get("/snapshot")
def get_snapshot(service: GameService = Depends(get_game_service)):
    return service.get_snapshot()

@router.post("/session")
def start_session(service: GameService = Depends(get_game_service)):
    """Повторный запуск rollover для текущего дня (идемпотентен)"""
    return service.start_session().to_dict()
