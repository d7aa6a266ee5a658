# questline/services/__init__.py

"""
Модуль сервисов Questline

Связывает хранилище, часы, сервис мутаций и отладочные инструменты.
"""

import logging
from typing import Optional, Callable

from questline.config import QuestlineConfig, config as default_config
from questline.core.database import StateStore
from .game_service import GameService, MutationResult, OverclockResult
from .debug_tools import DebugTools
from .rollover import RolloverScheduler, RolloverReport

logger = logging.getLogger(__name__)

class ServiceManager:
    """
    Менеджер сервисов движка

    Обеспечивает:
    - Загрузку состояния и смещения даты из хранилища
    - Rollover при старте сессии
    - Доступ к отладочным инструментам, если они разрешены
    """

    def __init__(self, cfg: Optional[QuestlineConfig] = None):
        self.config = cfg or default_config
        self.store: Optional[StateStore] = None
        self.game_service: Optional[GameService] = None
        self.debug_tools: Optional[DebugTools] = None
        self.initialized = False

    @classmethod
    def from_service(cls, service: GameService,
                     cfg: Optional[QuestlineConfig] = None) -> "ServiceManager":
        """Менеджер поверх уже готового GameService"""
        manager = cls(cfg)
        manager.game_service = service
        manager.store = service.store
        manager.debug_tools = DebugTools(service)
        manager.initialized = True
        return manager

    def initialize_services(self, now_func: Optional[Callable] = None) -> bool:
        """Инициализация всех сервисов"""
        try:
            logger.info("🔧 Инициализация сервисов Questline...")
            self.config.ensure_directories()

            self.store = StateStore.from_config(self.config.storage)
            self.game_service = GameService.from_store(
                self.store, timezone=self.config.clock.timezone, now_func=now_func
            )
            self.debug_tools = DebugTools(self.game_service)

            report = self.game_service.start_session()
            self.game_service.check_missed_vice_days()

            self.initialized = True
            logger.info(f"✅ Сервисы инициализированы, сегодня {report.date}")
            return True

        except Exception as e:
            logger.error(f"❌ Ошибка инициализации сервисов: {e}")
            self.close_services()
            return False

    def health_check(self) -> dict:
        """Проверка состояния сервисов"""
        health = {
            "status": "healthy" if self.initialized else "error",
            "services": {}
        }

        if self.game_service:
            health["services"]["game_service"] = {
                "status": "healthy",
                "today": self.game_service.clock.today(),
                "debug_date_offset": self.game_service.clock.debug_date_offset
            }

        if self.store:
            store_health = self.store.get_health_status()
            health["services"]["store"] = store_health
            if not store_health["healthy"]:
                health["status"] = "warning"

        return health

    def close_services(self):
        """Закрытие сервисов с финальным сохранением"""
        if self.game_service and self.store:
            self.store.save(self.game_service.state)
        self.game_service = None
        self.debug_tools = None
        self.store = None
        self.initialized = False
        logger.info("🛑 Сервисы закрыты")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_services()

__all__ = [
    'GameService',
    'MutationResult',
    'OverclockResult',
    'DebugTools',
    'RolloverScheduler',
    'RolloverReport',
    'ServiceManager'
]
