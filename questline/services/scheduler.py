# questline/services/scheduler.py

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from questline.config import SchedulerConfig
from questline.services.game_service import GameService

logger = logging.getLogger(__name__)

class RolloverJob:
    """Ежедневный rollover по cron, пока работает HTTP сервис"""

    JOB_ID = 'daily_rollover'

    def __init__(self, service: GameService, settings: Optional[SchedulerConfig] = None):
        self.service = service
        self.settings = settings or SchedulerConfig()
        self.scheduler: Optional[AsyncIOScheduler] = None

    def start(self) -> None:
        """Запуск планировщика (нужен работающий event loop)"""
        if not self.settings.enabled:
            logger.info("⏸️ Ежедневный rollover отключен")
            return

        self.scheduler = AsyncIOScheduler(timezone=self.service.clock.tz)
        self.scheduler.add_job(
            self.run,
            CronTrigger(hour=self.settings.hour, minute=self.settings.minute,
                        timezone=self.service.clock.tz),
            id=self.JOB_ID,
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"📅 Rollover запланирован на {self.settings.hour:02d}:{self.settings.minute:02d}")

    def run(self) -> None:
        """Новый день: rollover, пропущенные дни пороков, резервная копия"""
        try:
            report = self.service.start_session()
            filled = self.service.check_missed_vice_days()
            if self.service.store is not None:
                self.service.store.create_backup()
            logger.info(f"🌅 Плановый rollover {report.date}: создано {report.tasks_generated} задач, "
                        f"пропусков пороков {filled}")
        except Exception as e:
            logger.error(f"❌ Ошибка планового rollover: {e}")

    def shutdown(self) -> None:
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("🛑 Планировщик остановлен")
        self.scheduler = None

    @property
    def next_run_time(self) -> Optional[str]:
        if not self.scheduler:
            return None
        job = self.scheduler.get_job(self.JOB_ID)
        if job is None or job.next_run_time is None:
            return None
        return job.next_run_time.isoformat()
