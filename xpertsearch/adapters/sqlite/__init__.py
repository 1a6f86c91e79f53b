"""
SQLite Adapter - Product catalogue store.
"""

from .repository import SQLiteProductStore

__all__ = ["SQLiteProductStore"]
