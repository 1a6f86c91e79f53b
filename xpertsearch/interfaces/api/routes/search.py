"""
Search Routes - Storefront search, popular queries and cache invalidation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from xpertsearch.config import SearchError
from xpertsearch.domains.cache import PopularQuery, SearchCache
from xpertsearch.domains.search import SearchRequest, SearchResult
from xpertsearch.domains.search.orchestrator import SearchOrchestrator
from xpertsearch.interfaces.api.deps import get_orchestrator, get_search_cache

router = APIRouter()


class PopularQueriesResponse(BaseModel):
    """Most frequent cached queries for a shop."""

    shop_id: str
    queries: list[PopularQuery]


class CacheClearedResponse(BaseModel):
    """Result of a shop cache invalidation."""

    shop_id: str
    cleared: int


@router.post("", response_model=SearchResult)
async def search(
    body: SearchRequest,
    request: Request,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SearchResult:
    """
    Search a shop's catalogue.

    - **query**: Shopper search text
    - **shop_id**: Tenant identifier
    - **limit** / **offset**: Page window (limit 1-100)
    - **sort_by**: relevance, price_asc, price_desc, newest or title
    - **filters**: price_min, price_max, vendor, product_type, tags, available
    - **strategy**: ai, hybrid, vector or keyword (defaults to shop config)
    - **include_facets**: Attach facets computed over the unfiltered query
    """
    request.state.shop_id = body.shop_id
    if not body.query.strip():
        raise SearchError("Query must not be blank", {"query": body.query})

    if body.user_agent is None:
        body = body.model_copy(update={"user_agent": request.headers.get("user-agent")})

    result = await orchestrator.search(body)
    request.state.search_method = result.search_method.value
    return result


@router.get("/popular", response_model=PopularQueriesResponse)
async def popular_queries(
    shop_id: str = Query(..., min_length=1),
    limit: int = Query(default=10, ge=1, le=50),
    cache: SearchCache = Depends(get_search_cache),
) -> PopularQueriesResponse:
    """Most searched queries for a shop, most frequent first."""
    queries = await cache.popular_queries(shop_id, limit=limit)
    return PopularQueriesResponse(shop_id=shop_id, queries=queries)


@router.delete("/cache/{shop_id}", response_model=CacheClearedResponse)
async def clear_cache(
    shop_id: str,
    cache: SearchCache = Depends(get_search_cache),
) -> CacheClearedResponse:
    """Drop every cached result for a shop, e.g. after a catalogue sync."""
    cleared = await cache.clear_shop(shop_id)
    return CacheClearedResponse(shop_id=shop_id, cleared=cleared)
