"""
FastAPI Main Application - Search API entry point.

Run with: uvicorn xpertsearch.interfaces.api.main:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from xpertsearch import __version__
from xpertsearch.config import get_settings

from .deps import ServiceContainer
from .middleware import (
    ErrorHandlerMiddleware,
    RateLimitMiddleware,
    RequestContextMiddleware,
)
from .routes import health, search

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the API process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info("Starting XpertSearch API...")
    logger.info("  Database: %s", settings.db_path)
    logger.info("  Default strategy: %s (fallback %s)", settings.search_strategy, settings.fallback_strategy)

    app.state.services = await ServiceContainer.create(settings)
    logger.info("  Services initialized")

    yield

    logger.info("Shutting down XpertSearch API...")
    await app.state.services.close()


def create_app() -> FastAPI:
    """Create FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="XpertSearch API",
        description="AI-assisted product search for e-commerce storefronts",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.api_debug,
    )

    # Add middleware (order matters - first added = innermost)
    app.add_middleware(RateLimitMiddleware, requests_per_minute=settings.rate_limit_rpm)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestContextMiddleware)

    # Storefront widgets call the API cross-origin without credentials
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(search.router, prefix="/api/search", tags=["Search"])

    return app


# Create app instance
app = create_app()


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "xpertsearch.interfaces.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )


if __name__ == "__main__":
    run()
