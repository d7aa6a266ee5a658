#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Questline - State Store
Хранение снимка состояния в JSON с атомарной записью и резервными копиями

Версия: 1.0.0
"""

import os
import json
import gzip
import shutil
import threading
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass

from questline.core.models import GameState, ValidationError

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class DatabaseError(Exception):
    """Базовое исключение для ошибок хранилища"""
    pass

class DatabaseCorruptionError(DatabaseError):
    """Ошибка повреждения данных"""
    pass

# ===== HELPER CLASSES =====

@dataclass
class StoreStats:
    """Статистика хранилища"""
    save_count: int = 0
    load_count: int = 0
    error_count: int = 0
    corruption_count: int = 0
    last_save: Optional[str] = None
    last_backup: Optional[str] = None
    state_size_kb: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'save_count': self.save_count,
            'load_count': self.load_count,
            'error_count': self.error_count,
            'corruption_count': self.corruption_count,
            'last_save': self.last_save,
            'last_backup': self.last_backup,
            'state_size_kb': round(self.state_size_kb, 2)
        }

class BackupManager:
    """Менеджер резервных копий"""

    def __init__(self, backup_dir: Path, max_backups: int = 10):
        self.backup_dir = Path(backup_dir)
        self.max_backups = max_backups
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def create_backup(self, source_file: Path, compressed: bool = True) -> Optional[Path]:
        """Создать резервную копию"""
        try:
            if not source_file.exists():
                logger.warning(f"Нет файла {source_file} для резервной копии")
                return None

            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
            backup_name = f"backup_{timestamp}.json"

            if compressed:
                backup_name += ".gz"
                backup_path = self.backup_dir / backup_name

                with open(source_file, 'rb') as f_in:
                    with gzip.open(backup_path, 'wb') as f_out:
                        shutil.copyfileobj(f_in, f_out)
            else:
                backup_path = self.backup_dir / backup_name
                shutil.copy2(source_file, backup_path)

            logger.info(f"💾 Резервная копия создана: {backup_path}")
            self._cleanup_old_backups()
            return backup_path

        except OSError as e:
            logger.error(f"❌ Не удалось создать резервную копию: {e}")
            return None

    def restore_backup(self, backup_path: Path, target_file: Path) -> bool:
        """Восстановить из резервной копии"""
        try:
            if not backup_path.exists():
                logger.error(f"Резервная копия {backup_path} не найдена")
                return False

            if backup_path.name.endswith('.gz'):
                with gzip.open(backup_path, 'rb') as f_in:
                    with open(target_file, 'wb') as f_out:
                        shutil.copyfileobj(f_in, f_out)
            else:
                shutil.copy2(backup_path, target_file)

            logger.info(f"♻️ Состояние восстановлено из {backup_path}")
            return True

        except OSError as e:
            logger.error(f"❌ Не удалось восстановить резервную копию: {e}")
            return False

    def list_backups(self) -> List[Dict[str, Any]]:
        """Список резервных копий, новые первыми"""
        backups = []

        for backup_file in self.backup_dir.glob("backup_*.json*"):
            stat = backup_file.stat()
            backups.append({
                'name': backup_file.name,
                'path': str(backup_file),
                'size_kb': round(stat.st_size / 1024, 2),
                'created': datetime.fromtimestamp(stat.st_mtime).isoformat(),
                'compressed': backup_file.name.endswith('.gz')
            })

        # Имя содержит метку времени с микросекундами
        return sorted(backups, key=lambda x: x['name'], reverse=True)

    def _cleanup_old_backups(self) -> None:
        """Удалить старые резервные копии"""
        backups = sorted(self.backup_dir.glob("backup_*.json*"), key=lambda p: p.name, reverse=True)

        for backup in backups[self.max_backups:]:
            try:
                backup.unlink()
                logger.debug(f"Удалена старая резервная копия: {backup}")
            except OSError as e:
                logger.warning(f"Не удалось удалить {backup}: {e}")

# ===== STATE STORE =====

class StateStore:
    """
    Хранилище снимка состояния

    Весь GameState пишется одним JSON объектом после каждой мутации.
    Смещение отладочной даты живет в отдельном файле и переживает сброс.
    """

    def __init__(self, state_file: Path, offset_file: Path,
                 backup_manager: Optional[BackupManager] = None,
                 auto_backup: bool = True):
        self.state_file = Path(state_file)
        self.offset_file = Path(offset_file)
        self.backup_manager = backup_manager
        self.auto_backup = auto_backup and backup_manager is not None
        self.stats = StoreStats()
        self.file_lock = threading.RLock()
        self._last_backup_day: Optional[str] = None

        self.state_file.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(cls, storage) -> "StateStore":
        """Создание хранилища из StorageConfig"""
        return cls(
            state_file=storage.state_path,
            offset_file=storage.offset_path,
            backup_manager=BackupManager(storage.backup_dir, storage.max_backups),
            auto_backup=storage.auto_backup
        )

    # ===== STATE =====

    def load(self) -> GameState:
        """Загрузка состояния; поврежденный файл откладывается в сторону"""
        with self.file_lock:
            if not self.state_file.exists():
                logger.info("Файл состояния не найден, начинаем с пустого состояния")
                self.stats.load_count += 1
                return GameState()

            try:
                state = self._read_state()
            except DatabaseCorruptionError as e:
                logger.error(f"❌ Состояние повреждено: {e}")
                self._handle_corruption()
                return GameState()
            except OSError as e:
                self.stats.error_count += 1
                raise DatabaseError(f"Не удалось прочитать состояние: {e}")

            self.stats.load_count += 1
            self._update_size()
            logger.info(
                f"✅ Состояние загружено: {len(state.tasks)} задач, {len(state.goals)} целей, "
                f"{len(state.habits)} привычек, {len(state.vices)} пороков"
            )
            return state

    def _read_state(self) -> GameState:
        with open(self.state_file, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise DatabaseCorruptionError(f"некорректный JSON: {e}")

        if not isinstance(data, dict):
            raise DatabaseCorruptionError("ожидался JSON объект")

        try:
            return GameState.from_dict(data)
        except ValidationError as e:
            raise DatabaseCorruptionError(str(e))

    def _handle_corruption(self) -> Optional[Path]:
        """Переименовать поврежденный файл, чтобы начать с чистого состояния"""
        self.stats.corruption_count += 1
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        corrupted = self.state_file.with_name(f"corrupted_backup_{timestamp}.json")

        try:
            shutil.move(str(self.state_file), str(corrupted))
            logger.warning(f"⚠️ Поврежденное состояние сохранено как {corrupted}, начинаем заново")
            return corrupted
        except OSError as e:
            self.stats.error_count += 1
            logger.error(f"❌ Не удалось отложить поврежденный файл: {e}")
            return None

    def save(self, state: GameState) -> bool:
        """Атомарное сохранение через временный файл"""
        with self.file_lock:
            temp_file = self.state_file.with_suffix('.tmp')

            try:
                data = state.to_dict()
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)

                self._maybe_backup()
                os.replace(temp_file, self.state_file)

                self.stats.save_count += 1
                self.stats.last_save = datetime.now().isoformat()
                self._update_size()
                return True

            except (OSError, TypeError, ValueError) as e:
                self.stats.error_count += 1
                logger.error(f"❌ Ошибка сохранения состояния: {e}")
                if temp_file.exists():
                    temp_file.unlink()
                return False

    def _maybe_backup(self) -> None:
        """Автоматическая резервная копия не чаще раза в день"""
        if not self.auto_backup or not self.state_file.exists():
            return

        day = datetime.now().strftime('%Y-%m-%d')
        if self._last_backup_day == day:
            return

        if self.create_backup():
            self._last_backup_day = day

    def create_backup(self) -> Optional[Path]:
        if self.backup_manager is None:
            return None

        with self.file_lock:
            path = self.backup_manager.create_backup(self.state_file)
            if path:
                self.stats.last_backup = datetime.now().isoformat()
            return path

    def list_backups(self) -> List[Dict[str, Any]]:
        if self.backup_manager is None:
            return []
        return self.backup_manager.list_backups()

    def restore_backup(self, name: Optional[str] = None) -> Optional[Path]:
        """Восстановить файл состояния из копии по имени (по умолчанию самой свежей)"""
        backups = self.list_backups()
        if name is not None:
            backups = [b for b in backups if b['name'] == name]
        if not backups:
            logger.error(f"Резервная копия {name or '(последняя)'} не найдена")
            return None

        backup_path = Path(backups[0]['path'])
        with self.file_lock:
            if not self.backup_manager.restore_backup(backup_path, self.state_file):
                return None
            self._update_size()
        return backup_path

    def delete_state(self) -> None:
        """Удалить файл состояния (смещение даты сохраняется)"""
        with self.file_lock:
            if self.state_file.exists():
                self.state_file.unlink()
                logger.info("🗑️ Файл состояния удален")

    def _update_size(self) -> None:
        if self.state_file.exists():
            self.stats.state_size_kb = self.state_file.stat().st_size / 1024

    # ===== DEBUG DATE OFFSET =====

    def load_offset(self) -> int:
        """Смещение отладочной даты в днях (0, если файла нет)"""
        if not self.offset_file.exists():
            return 0

        try:
            with open(self.offset_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return int(data.get('debugDateOffset', 0))
        except (OSError, json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"⚠️ Не удалось прочитать смещение даты, используем 0: {e}")
            return 0

    def save_offset(self, offset: int) -> bool:
        try:
            temp_file = self.offset_file.with_suffix('.tmp')
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump({'debugDateOffset': int(offset)}, f)
            os.replace(temp_file, self.offset_file)
            return True
        except OSError as e:
            self.stats.error_count += 1
            logger.error(f"❌ Ошибка сохранения смещения даты: {e}")
            return False

    def get_health_status(self) -> Dict[str, Any]:
        return {
            'state_file': str(self.state_file),
            'exists': self.state_file.exists(),
            'healthy': self.stats.error_count == 0,
            **self.stats.to_dict()
        }
