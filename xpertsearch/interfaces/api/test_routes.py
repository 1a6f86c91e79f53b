"""Tests for API Routes."""

import logging
from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from xpertsearch.domains.cache import InMemoryCacheBackend, PopularQuery
from xpertsearch.domains.ranking import RankingEngine
from xpertsearch.domains.retrieval import RetrievalResult
from xpertsearch.domains.search import (
    Candidate,
    QueryInfo,
    SearchResult,
    SearchStrategy,
)
from xpertsearch.domains.search.orchestrator import SearchOrchestrator
from xpertsearch.domains.search.shop_config import StaticConfigProvider

from .deps import build_cache_backend, get_orchestrator, get_search_cache
from .main import create_app


@pytest.fixture
def mock_orchestrator() -> AsyncMock:
    """Create a mock search orchestrator."""
    mock = AsyncMock()
    mock.search.return_value = SearchResult(
        query_info=QueryInfo(original_query="lamp", search_method=SearchStrategy.HYBRID),
        search_id="hybrid-1700000000000",
    )
    return mock


@pytest.fixture
def mock_cache() -> AsyncMock:
    """Create a mock search cache."""
    mock = AsyncMock()
    mock.popular_queries.return_value = [PopularQuery(query="lamp", count=4)]
    mock.clear_shop.return_value = 3
    mock.health.return_value = "ok"
    return mock


@pytest.fixture
def client(
    mock_orchestrator: AsyncMock, mock_cache: AsyncMock
) -> Generator[TestClient, None, None]:
    """Create a test client with mocked dependencies."""
    app = create_app()

    app.dependency_overrides[get_orchestrator] = lambda: mock_orchestrator
    app.dependency_overrides[get_search_cache] = lambda: mock_cache

    yield TestClient(app)

    app.dependency_overrides.clear()


def test_health_endpoint(client: TestClient) -> None:
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "xpertsearch", "cache": "ok"}


def test_health_reports_unreachable_cache(client: TestClient, mock_cache: AsyncMock) -> None:
    """Test an unreachable cache degrades health without failing it."""
    mock_cache.health.return_value = "unavailable"

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"


def test_api_info(client: TestClient) -> None:
    """Test the API info endpoint lists the search routes."""
    data = client.get("/api").json()
    assert data["name"] == "XpertSearch API"
    assert "search" in data["endpoints"]


def test_search_endpoint_basic(client: TestClient, mock_orchestrator: AsyncMock) -> None:
    """Test the request body reaches the orchestrator."""
    response = client.post(
        "/api/search",
        json={
            "query": "lamp",
            "shop_id": "shop-1",
            "filters": {"vendor": "Acme", "color": "red"},
        },
        headers={"User-Agent": "pytest-agent"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["search_id"] == "hybrid-1700000000000"
    assert data["query_info"]["search_method"] == "hybrid"

    request = mock_orchestrator.search.await_args.args[0]
    assert request.filters.vendor == "Acme"
    assert request.user_agent == "pytest-agent"


def test_search_access_log_names_shop_and_method(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    """Test the access log line attributes the request to a shop and strategy."""
    caplog.set_level(logging.INFO, logger="xpertsearch.interfaces.api.middleware")

    client.post("/api/search", json={"query": "lamp", "shop_id": "shop-1"})

    access = [r.getMessage() for r in caplog.records if "latency_ms" in r.getMessage()]
    assert access
    assert "shop=shop-1 method=hybrid" in access[-1]


def test_search_endpoint_empty_query(client: TestClient) -> None:
    """Test empty query is rejected by validation."""
    response = client.post("/api/search", json={"query": "", "shop_id": "shop-1"})
    assert response.status_code == 422


def test_search_endpoint_blank_query(client: TestClient) -> None:
    """Test whitespace-only query maps to the taxonomy error."""
    response = client.post("/api/search", json={"query": "   ", "shop_id": "shop-1"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "SEARCH_INVALID_QUERY"


def test_search_endpoint_limit_validation(client: TestClient) -> None:
    """Test limit must be 1-100."""
    response = client.post(
        "/api/search", json={"query": "lamp", "shop_id": "shop-1", "limit": 101}
    )
    assert response.status_code == 422


def test_popular_queries(client: TestClient, mock_cache: AsyncMock) -> None:
    """Test popular queries for a shop."""
    response = client.get("/api/search/popular", params={"shop_id": "shop-1"})

    assert response.status_code == 200
    assert response.json() == {"shop_id": "shop-1", "queries": [{"query": "lamp", "count": 4}]}
    mock_cache.popular_queries.assert_awaited_once_with("shop-1", limit=10)


def test_popular_queries_requires_shop(client: TestClient) -> None:
    """Test shop_id is mandatory."""
    assert client.get("/api/search/popular").status_code == 422


def test_clear_cache(client: TestClient, mock_cache: AsyncMock) -> None:
    """Test shop cache invalidation."""
    response = client.delete("/api/search/cache/shop-1")

    assert response.status_code == 200
    assert response.json() == {"shop_id": "shop-1", "cleared": 3}


def test_request_id_header(client: TestClient) -> None:
    """Test request IDs are echoed back."""
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"
    assert "X-Response-Time-Ms" in response.headers


def test_404_for_unknown_routes(client: TestClient) -> None:
    """Test unknown routes return 404."""
    assert client.get("/api/nope").status_code == 404


def test_search_end_to_end_with_real_orchestrator() -> None:
    """Test a full request through the orchestrator with stubbed retrievers."""
    candidates = [
        Candidate(id=str(i), shopify_product_id=i, title=f"Lamp {i}", similarity_score=0.9)
        for i in range(3)
    ]
    vector = AsyncMock()
    vector.retrieve.return_value = RetrievalResult(source="vector", candidates=candidates)
    keyword = AsyncMock()
    keyword.retrieve.return_value = RetrievalResult(source="keyword", candidates=candidates[:1])
    orchestrator = SearchOrchestrator(
        vector,
        keyword,
        RankingEngine([]),
        config_provider=StaticConfigProvider(),
    )

    app = create_app()
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator

    response = TestClient(app).post(
        "/api/search",
        json={
            "query": "lamp",
            "shop_id": "shop-1",
            "strategy": "hybrid",
            "limit": 2,
            "use_cache": False,
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_count"] == 3
    assert data["has_more"] is True
    assert [p["id"] for p in data["products"]][0] == "0"
    assert data["ranking_info"]["model_used"] == "heuristic"


@pytest.mark.parametrize(
    "backend, expected",
    [("memory", InMemoryCacheBackend), ("none", type(None)), ("redis", type(None))],
)
def test_build_cache_backend(backend: str, expected: type) -> None:
    """Test backend selection; redis without a URL disables caching."""
    from xpertsearch.config import Settings

    settings = Settings(_env_file=None, cache_backend=backend, redis_url=None)
    assert isinstance(build_cache_backend(settings), expected)
