#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Questline - Configuration
Централизованная конфигурация движка прогресса с валидацией

Версия: 1.0.0
"""

import os
import sys
import logging
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz

class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"

class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

@dataclass
class StorageConfig:
    """Конфигурация хранилища состояния"""
    data_dir: Path
    backup_dir: Path
    state_file: str = "questline_state.json"
    offset_file: str = "debug_date_offset.json"
    max_backups: int = 10
    auto_backup: bool = True

    @property
    def state_path(self) -> Path:
        return self.data_dir / self.state_file

    @property
    def offset_path(self) -> Path:
        return self.data_dir / self.offset_file

@dataclass
class ClockConfig:
    """Конфигурация часов"""
    timezone: str = "UTC"

@dataclass
class ServerConfig:
    """Конфигурация HTTP сервера"""
    host: str = "127.0.0.1"
    port: int = 8080
    debug_mode: bool = False
    debug_tools_enabled: bool = False

@dataclass
class SchedulerConfig:
    """Конфигурация ежедневного rollover"""
    enabled: bool = True
    hour: int = 0
    minute: int = 0

def _env_flag(key: str, default: str) -> bool:
    return os.getenv(key, default).lower() == 'true'

class QuestlineConfig:
    """Главный класс конфигурации"""

    def __init__(self):
        self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""

        # Директории
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.backup_dir = Path(os.getenv('BACKUP_DIR', 'backups'))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        self.storage = StorageConfig(
            data_dir=self.data_dir,
            backup_dir=self.backup_dir,
            max_backups=int(os.getenv('MAX_BACKUPS', 10)),
            auto_backup=_env_flag('AUTO_BACKUP', 'true')
        )

        self.clock = ClockConfig(
            timezone=os.getenv('TIMEZONE', 'UTC')
        )

        self.server = ServerConfig(
            host=os.getenv('HOST', '127.0.0.1'),
            port=int(os.getenv('PORT', 8080)),
            debug_mode=_env_flag('DEBUG_MODE', 'false'),
            debug_tools_enabled=_env_flag(
                'DEBUG_TOOLS_ENABLED',
                'true' if self.environment != Environment.PRODUCTION else 'false'
            )
        )

        self.scheduler = SchedulerConfig(
            enabled=_env_flag('ROLLOVER_ENABLED', 'true'),
            hour=int(os.getenv('ROLLOVER_HOUR', 0)),
            minute=int(os.getenv('ROLLOVER_MINUTE', 0))
        )

        # Логирование
        self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
        self.log_to_file = _env_flag('LOG_TO_FILE', 'false')
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = []

        if self.clock.timezone not in pytz.all_timezones_set:
            errors.append(f"Неизвестный часовой пояс: {self.clock.timezone}")

        if not 1 <= self.server.port <= 65535:
            errors.append(f"Порт {self.server.port} вне допустимого диапазона (1-65535)")

        if not 0 <= self.scheduler.hour <= 23:
            errors.append("ROLLOVER_HOUR должен быть от 0 до 23")

        if not 0 <= self.scheduler.minute <= 59:
            errors.append("ROLLOVER_MINUTE должен быть от 0 до 59")

        if self.storage.max_backups < 0:
            errors.append("MAX_BACKUPS не может быть отрицательным")

        if self.server.debug_tools_enabled and self.is_production():
            logging.warning("⚠️ DEBUG_TOOLS_ENABLED включен в production")

        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    def ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [self.data_dir, self.backup_dir]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        logging_config = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'stream': sys.stdout
                }
            },
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'apscheduler': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
                'uvicorn.access': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.log_to_file:
            logging_config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"questline_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return logging_config

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь"""
        return {
            'environment': self.environment.value,
            'storage': {
                'state_path': str(self.storage.state_path),
                'backup_dir': str(self.storage.backup_dir),
                'max_backups': self.storage.max_backups,
                'auto_backup': self.storage.auto_backup
            },
            'timezone': self.clock.timezone,
            'server': {
                'host': self.server.host,
                'port': self.server.port,
                'debug_mode': self.server.debug_mode,
                'debug_tools_enabled': self.server.debug_tools_enabled
            },
            'scheduler': {
                'enabled': self.scheduler.enabled,
                'hour': self.scheduler.hour,
                'minute': self.scheduler.minute
            },
            'log_level': self.log_level.value
        }

# Глобальный экземпляр конфигурации
config = QuestlineConfig()

__all__ = [
    'config',
    'QuestlineConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
    'ClockConfig',
    'ServerConfig',
    'SchedulerConfig'
]
