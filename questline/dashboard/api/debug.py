# questline/dashboard/api/debug.py

from fastapi import APIRouter, Depends

from questline.services import DebugTools
from ..dependencies import get_debug_tools
from ..schemas import AdvanceDay, AddXP, IncreaseStreak, CycleLeague, SetLeague

router = APIRouter(prefix="/api/debug", tags=["debug"])

@router.post("/advance-day")
def advance_day(payload: AdvanceDay = AdvanceDay(), tools: DebugTools = Depends(get_debug_tools)):
    report = tools.advance_day(payload.days)
    return {
        "today": tools.service.clock.today(),
        "debugDateOffset": tools.service.clock.debug_date_offset,
        "rollover": report.to_dict(),
    }

@router.post("/xp")
def add_xp(payload: AddXP, tools: DebugTools = Depends(get_debug_tools)):
    return tools.add_xp(payload.amount)

@router.post("/streak")
def increase_streak(payload: IncreaseStreak = IncreaseStreak(),
                    tools: DebugTools = Depends(get_debug_tools)):
    return {"streak": tools.increase_streak(payload.days)}

@router.post("/league/cycle")
def cycle_league(payload: CycleLeague = CycleLeague(), tools: DebugTools = Depends(get_debug_tools)):
    return {"league": tools.cycle_league(payload.direction).value}

@router.put("/league")
def set_league(payload: SetLeague, tools: DebugTools = Depends(get_debug_tools)):
    return {"league": tools.set_league_override(payload.league).value}

@router.post("/reset")
def reset_all(tools: DebugTools = Depends(get_debug_tools)):
    """Полный сброс состояния"""
    tools.reset_all()
    return {"reset": True, "debugDateOffset": tools.service.clock.debug_date_offset}
