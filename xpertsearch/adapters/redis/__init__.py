"""
Redis Adapter - Shared cache backend.
"""

from .client import RedisCacheBackend

__all__ = ["RedisCacheBackend"]
