# questline/services/debug_tools.py

"""
Отладочные инструменты: сдвиг даты, ручной XP, серия и лига

Отделены от GameService, чтобы основной API мутаций оставался чистым.
"""

import logging
from typing import Dict, Any

from questline.core.economy import League, cycle_league
from questline.core.models import GameState, validate_enum_value
from questline.services.game_service import GameService
from questline.services.rollover import RolloverReport

logger = logging.getLogger(__name__)

class DebugTools:
    """
    Тестовый интерфейс поверх GameService

    Мутации без публичного аналога в GameService выполняются под его
    блокировкой _lock и завершаются его _commit, как и любая мутация сервиса.
    """

    def __init__(self, service: GameService):
        self.service = service

    @property
    def _store(self):
        return self.service.store

    def advance_day(self, days: int = 1) -> RolloverReport:
        """Сдвинуть отладочную дату и выполнить rollover нового дня"""
        with self.service._lock:
            offset = self.service.clock.advance(days)
            if self._store is not None:
                self._store.save_offset(offset)
            logger.info(f"⏩ Отладочная дата сдвинута: смещение {offset}, сегодня {self.service.clock.today()}")
            return self.service.start_session()

    def add_xp(self, amount: int) -> Dict[str, Any]:
        return self.service.grant_xp(amount, register_activity=False).to_dict()

    def increase_streak(self, days: int = 1) -> int:
        with self.service._lock:
            stats = self.service.state.stats
            stats.streak = max(0, stats.streak + days)
            stats.longest_streak = max(stats.longest_streak, stats.streak)
            self.service._commit()
            return stats.streak

    def cycle_league(self, direction: str = "next") -> League:
        """Показать следующую/предыдущую лигу без изменения XP"""
        with self.service._lock:
            league = cycle_league(self.service.get_league(), direction)
            self.service.state.debug_league_override = league.value
            self.service._commit()
            return league

    def set_league_override(self, league: str) -> League:
        with self.service._lock:
            value = validate_enum_value(league, League, "league")
            self.service.state.debug_league_override = value
            self.service._commit()
            return League(value)

    def reset_all(self) -> None:
        """Полный сброс состояния (смещение даты сохраняется)"""
        with self.service._lock:
            if self._store is not None:
                self._store.create_backup()
            self.service.replace_state(GameState())
            logger.warning("🧨 Состояние полностью сброшено")
