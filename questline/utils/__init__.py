# questline/utils/__init__.py

from .datetime_utils import Clock, parse_date, add_days
from .logger import setup_logging
from .decorators import synchronized

__all__ = ['Clock', 'parse_date', 'add_days', 'setup_logging', 'synchronized']
