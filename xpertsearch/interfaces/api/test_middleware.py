"""Tests for API middleware."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from xpertsearch.config.errors import ErrorCode, StrategyError

from .middleware import (
    ErrorHandlerMiddleware,
    FixedWindowLimiter,
    RateLimitMiddleware,
    RequestContextMiddleware,
)


@pytest.fixture
def app() -> FastAPI:
    """Create a bare app with the production middleware stack."""
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, requests_per_minute=2)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestContextMiddleware)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/api/search/ok")
    async def ok() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/search/slow")
    async def slow() -> dict[str, str]:
        raise StrategyError("AI search exceeded 5000ms", code=ErrorCode.SEARCH_TIMEOUT)

    @app.get("/api/search/broken")
    async def broken() -> dict[str, str]:
        raise RuntimeError("boom")

    return app


# --- FixedWindowLimiter Tests ---


def test_limiter_counts_per_key_and_resets() -> None:
    """Test the limit applies per key and resets with the next window."""
    now = [120.0]
    limiter = FixedWindowLimiter(2, window_seconds=60, clock=lambda: now[0])

    assert limiter.hit("1.1.1.1") == (True, 1, 60)
    assert limiter.hit("1.1.1.1") == (True, 0, 60)
    now[0] = 150.0
    assert limiter.hit("1.1.1.1") == (False, 0, 30)
    assert limiter.hit("2.2.2.2")[0] is True

    now[0] = 181.0
    assert limiter.hit("1.1.1.1")[0] is True


# --- Middleware Stack Tests ---


def test_search_routes_are_rate_limited(app: FastAPI) -> None:
    """Test the third search call in a window is rejected with Retry-After."""
    client = TestClient(app)

    assert client.get("/api/search/ok").headers["X-RateLimit-Remaining"] == "1"
    client.get("/api/search/ok")
    response = client.get("/api/search/ok", headers={"X-Request-ID": "req-9"})

    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) >= 1
    body = response.json()
    assert body["error"]["code"] == "SECURITY_RATE_LIMITED"
    assert body["request_id"] == "req-9"


def test_health_is_not_rate_limited(app: FastAPI) -> None:
    """Test routes outside the search API bypass the limiter."""
    client = TestClient(app)
    statuses = {client.get("/health").status_code for _ in range(5)}
    assert statuses == {200}


def test_search_errors_use_mapped_status(app: FastAPI) -> None:
    """Test a pipeline timeout is reported as 504 in the error envelope."""
    response = TestClient(app).get("/api/search/slow")

    assert response.status_code == 504
    assert response.json()["error"] == {
        "code": "SEARCH_TIMEOUT",
        "message": "AI search exceeded 5000ms",
        "details": {},
    }
    assert "X-Response-Time-Ms" in response.headers


def test_unhandled_errors_are_internal(app: FastAPI) -> None:
    """Test unexpected exceptions become a generic 500 without leaking detail."""
    response = TestClient(app).get("/api/search/broken")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL_ERROR"
    assert "boom" not in response.text
