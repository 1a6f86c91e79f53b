"""
Health Routes - System health and status endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends

from xpertsearch import __version__
from xpertsearch.domains.cache import SearchCache
from xpertsearch.interfaces.api.deps import get_search_cache

router = APIRouter()


@router.get("/health")
async def health_check(cache: SearchCache = Depends(get_search_cache)) -> dict[str, str]:
    """Health check endpoint. An unreachable cache degrades but does not fail search."""
    cache_status = await cache.health()
    return {
        "status": "degraded" if cache_status == "unavailable" else "healthy",
        "service": "xpertsearch",
        "cache": cache_status,
    }


@router.get("/api")
async def api_info() -> dict[str, Any]:
    """API info endpoint."""
    return {
        "name": "XpertSearch API",
        "version": __version__,
        "description": "AI-assisted product search for e-commerce storefronts",
        "docs": "/docs",
        "endpoints": {
            "search": "POST /api/search",
            "popular": "GET /api/search/popular?shop_id=",
            "clear_cache": "DELETE /api/search/cache/{shop_id}",
        },
    }
