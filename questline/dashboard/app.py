#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Questline - FastAPI Application
HTTP интерфейс движка прогресса: задачи, цели, привычки, пороки, статистика

Версия: 1.0.0
"""

import time
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from questline import __version__
from questline.config import QuestlineConfig, config as default_config
from questline.core.database import DatabaseError
from questline.core.models import ValidationError
from questline.services import ServiceManager
from questline.services.scheduler import RolloverJob
from .api import tasks, goals, habits, vices, stats, debug

logger = logging.getLogger(__name__)

def create_app(manager: Optional[ServiceManager] = None,
               cfg: Optional[QuestlineConfig] = None,
               enable_scheduler: Optional[bool] = None,
               debug_tools: Optional[bool] = None) -> FastAPI:
    """
    Фабрика приложения

    Args:
        manager: готовый менеджер сервисов (в тестах); иначе создается из конфигурации
        enable_scheduler: запускать ли ежедневный rollover (по умолчанию из конфигурации)
        debug_tools: подключать ли /api/debug (по умолчанию из конфигурации)
    """
    cfg = cfg or (manager.config if manager else default_config)
    if enable_scheduler is None:
        enable_scheduler = cfg.scheduler.enabled
    if debug_tools is None:
        debug_tools = cfg.server.debug_tools_enabled

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом приложения"""
        logger.info("🚀 Запуск Questline API...")
        service_manager = app.state.service_manager

        if not service_manager.initialized and not service_manager.initialize_services():
            raise RuntimeError("Не удалось инициализировать сервисы")

        job = None
        if enable_scheduler:
            job = RolloverJob(service_manager.game_service, cfg.scheduler)
            job.start()
        app.state.rollover_job = job

        logger.info(f"✅ Questline готов, сегодня {service_manager.game_service.clock.today()}")

        yield

        logger.info("🛑 Остановка Questline API...")
        if job:
            job.shutdown()
        service_manager.close_services()

    app = FastAPI(
        title="Questline",
        description="Движок прогресса: XP, уровни, лиги, серии и ежедневный rollover",
        version=__version__,
        docs_url="/api/docs" if cfg.server.debug_mode else None,
        redoc_url=None,
        lifespan=lifespan
    )
    app.state.service_manager = manager or ServiceManager(cfg)
    app.state.rollover_job = None

    # ===== MIDDLEWARE =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Логирование запросов и времени обработки"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            f"{request.method} {request.url.path} "
            f"- {response.status_code} "
            f"- {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response

    # ===== ОБРАБОТЧИКИ ОШИБОК =====

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning(f"⚠️ Отклонен запрос {request.url.path}: {exc}")
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        logger.error(f"❌ Ошибка хранилища: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Ошибка хранилища состояния"})

    # ===== ROUTES =====

    for module in (tasks, goals, habits, vices, stats):
        app.include_router(module.router)

    if debug_tools:
        app.include_router(debug.router)
        logger.info("🔧 Отладочные инструменты подключены: /api/debug")

    @app.get("/health")
    async def health_check(request: Request):
        """Проверка состояния сервиса"""
        health = request.app.state.service_manager.health_check()
        job = request.app.state.rollover_job
        health["version"] = __version__
        health["next_rollover"] = job.next_run_time if job else None
        status_code = 200 if health["status"] != "error" else 503
        return JSONResponse(status_code=status_code, content=health)

    return app
