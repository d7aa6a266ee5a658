# questline/dashboard/api/__init__.py

from . import tasks, goals, habits, vices, stats, debug

__all__ = ['tasks', 'goals', 'habits', 'vices', 'stats', 'debug']
