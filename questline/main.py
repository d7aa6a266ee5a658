#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Questline - Entry Point
Запуск HTTP сервиса и служебные команды движка прогресса

Версия: 1.0.0
"""

import sys
import json
import logging
import argparse

import uvicorn

from questline.config import config
from questline.core.database import StateStore
from questline.services import ServiceManager
from questline.utils import setup_logging

logger = logging.getLogger(__name__)

def cmd_serve(args) -> int:
    from questline.dashboard import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    app = create_app(cfg=config, debug_tools=True if args.debug_tools else None)

    logger.info(f"🚀 Запуск Questline на http://{host}:{port}")
    try:
        uvicorn.run(app, host=host, port=port, log_level="info", access_log=False)
    except KeyboardInterrupt:
        logger.info("👋 Сервер остановлен пользователем")
    return 0

def cmd_rollover(manager: ServiceManager, args) -> int:
    """Rollover выполняется при инициализации; повторный запуск ничего не меняет"""
    report = manager.game_service.start_session()
    print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    return 0

def cmd_advance_day(manager: ServiceManager, args) -> int:
    report = manager.debug_tools.advance_day(args.days)
    print(f"Сегодня: {manager.game_service.clock.today()}")
    print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
    return 0

def cmd_status(manager: ServiceManager, args) -> int:
    service = manager.game_service
    stats = service.state.stats
    print(f"📅 Сегодня: {service.clock.today()} (смещение {service.clock.debug_date_offset})")
    print(f"⭐ Уровень {stats.level}, всего XP {stats.total_lifetime_xp}, "
          f"до следующего {service.get_xp_for_next_level()}")
    print(f"🏆 Лига: {service.get_league().value}, XP за месяц {service.get_monthly_xp()}")
    print(f"🔥 Серия: {stats.streak} (рекорд {stats.longest_streak})")
    print(f"📝 Задач: {len(service.state.tasks)}, целей: {len(service.state.goals)}, "
          f"привычек: {len(service.state.habits)}, пороков: {len(service.state.vices)}")
    return 0

def cmd_reset(manager: ServiceManager, args) -> int:
    if not args.yes:
        print("Сброс удалит весь прогресс. Повторите с --yes для подтверждения.")
        return 1
    manager.debug_tools.reset_all()
    print("Состояние сброшено")
    return 0

def cmd_backups(store: StateStore, args) -> int:
    backups = store.list_backups()
    if not backups:
        print("Резервных копий нет")
        return 0
    for backup in backups:
        print(f"{backup['name']}  {backup['size_kb']} KB  {backup['created']}")
    return 0

def cmd_restore(store: StateStore, args) -> int:
    """Восстановление идет до загрузки состояния сервисами"""
    restored = store.restore_backup(args.name)
    if restored is None:
        print("Не удалось восстановить состояние")
        return 1
    print(f"Состояние восстановлено из {restored.name}")
    return 0

# Команды хранилища работают без загрузки состояния и rollover
STORE_COMMANDS = {
    'backups': cmd_backups,
    'restore': cmd_restore,
}

COMMANDS = {
    'rollover': cmd_rollover,
    'advance-day': cmd_advance_day,
    'status': cmd_status,
    'reset': cmd_reset,
}

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='questline', description='Движок прогресса Questline')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Запустить HTTP сервис')
    serve.add_argument('--host', default=None, help='Хост сервера')
    serve.add_argument('--port', type=int, default=None, help='Порт сервера')
    serve.add_argument('--debug-tools', action='store_true', help='Подключить /api/debug')

    sub.add_parser('rollover', help='Выполнить rollover текущего дня')

    advance = sub.add_parser('advance-day', help='Сдвинуть отладочную дату')
    advance.add_argument('--days', type=int, default=1)

    sub.add_parser('status', help='Показать сводку прогресса')

    reset = sub.add_parser('reset', help='Сбросить состояние')
    reset.add_argument('--yes', action='store_true', help='Подтвердить сброс')

    sub.add_parser('backups', help='Список резервных копий')

    restore = sub.add_parser('restore', help='Восстановить состояние из резервной копии')
    restore.add_argument('--name', default=None, help='Имя копии (по умолчанию самая свежая)')
    return parser

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(config)

    if args.command == 'serve':
        return cmd_serve(args)

    if args.command in STORE_COMMANDS:
        config.ensure_directories()
        return STORE_COMMANDS[args.command](StateStore.from_config(config.storage), args)

    with ServiceManager(config) as manager:
        if not manager.initialize_services():
            logger.error("💥 Не удалось инициализировать сервисы")
            return 1
        return COMMANDS[args.command](manager, args)

if __name__ == "__main__":
    sys.exit(main())
