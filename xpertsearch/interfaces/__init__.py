"""
Interfaces - User-facing applications.

- api: FastAPI REST API
"""

__all__ = ["api"]
