# questline/dashboard/__init__.py

"""HTTP интерфейс движка Questline"""

from .app import create_app

__all__ = ['create_app']
