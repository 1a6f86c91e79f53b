"""
API Interface - FastAPI REST API for storefront search.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
