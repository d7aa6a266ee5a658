# questline/utils/datetime_utils.py

import calendar
from datetime import datetime, date, time, timedelta
from typing import Callable, List, Optional

import pytz

DATE_FORMAT = "%Y-%m-%d"

def parse_date(date_str: str, fmt: str = DATE_FORMAT) -> date:
    return datetime.strptime(date_str, fmt).date()

def add_days(date_str: str, days: int) -> str:
    return (parse_date(date_str) + timedelta(days=days)).isoformat()

def days_between(start: str, end: str) -> int:
    """Количество дней от start до end (end - start)"""
    return (parse_date(end) - parse_date(start)).days

class Clock:
    """
    Часы движка: "сегодня" как строка даты с учетом смещения отладки

    Все значения выводятся из реального времени в заданном часовом поясе
    плюс целое смещение debug_date_offset в днях. Смещение на +1 день
    эквивалентно реально прошедшим суткам.
    """

    def __init__(self, timezone: str = "UTC", offset_days: int = 0,
                 now_func: Optional[Callable[[], datetime]] = None):
        self.tz = pytz.timezone(timezone)
        self.debug_date_offset = int(offset_days)
        self._now_func = now_func

    def _wall_now(self) -> datetime:
        if self._now_func is None:
            return datetime.now(self.tz)
        now = self._now_func()
        if now.tzinfo is None:
            return self.tz.localize(now)
        return now.astimezone(self.tz)

    def now(self) -> datetime:
        """Текущий момент со смещением отладки"""
        return self.tz.normalize(self._wall_now() + timedelta(days=self.debug_date_offset))

    def now_ms(self) -> int:
        return int(self.now().timestamp() * 1000)

    def today_date(self) -> date:
        return self.now().date()

    def today(self) -> str:
        return self.today_date().isoformat()

    def yesterday(self) -> str:
        return (self.today_date() - timedelta(days=1)).isoformat()

    def start_of_week(self) -> str:
        """Начало недели (воскресенье)"""
        today = self.today_date()
        return (today - timedelta(days=(today.weekday() + 1) % 7)).isoformat()

    def start_of_today_ms(self) -> int:
        midnight = self.tz.localize(datetime.combine(self.today_date(), time.min))
        return int(midnight.timestamp() * 1000)

    def date_of_ms(self, timestamp_ms: int) -> str:
        """Календарная дата метки времени (мс) в часовом поясе часов"""
        return datetime.fromtimestamp(timestamp_ms / 1000, self.tz).date().isoformat()

    def last_7_days(self) -> List[str]:
        today = self.today_date()
        return [(today - timedelta(days=i)).isoformat() for i in range(7)]

    def current_month_days(self) -> List[str]:
        """Все прошедшие дни текущего месяца, включая сегодня"""
        today = self.today_date()
        return [today.replace(day=d).isoformat() for d in range(1, today.day + 1)]

    def days_in_current_month(self) -> int:
        today = self.today_date()
        return calendar.monthrange(today.year, today.month)[1]

    def is_current_month(self, date_str: str) -> bool:
        return date_str[:7] == self.today()[:7]

    def advance(self, days: int = 1) -> int:
        """Сдвинуть смещение отладки"""
        self.debug_date_offset += days
        return self.debug_date_offset
