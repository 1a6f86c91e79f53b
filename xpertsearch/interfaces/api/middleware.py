"""
API Middleware - Request context, search access log, error envelopes, rate limiting.

Search routes record ``shop_id`` and ``search_method`` on ``request.state``
so the access log line can attribute latency to a tenant and a strategy.
Every error leaves the API in the same envelope::

    {"error": {"code": ..., "message": ..., "details": {...}}, "request_id": ...}
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from xpertsearch.config.errors import ErrorCode, XpertSearchError

logger = logging.getLogger(__name__)

__all__ = [
    "ErrorHandlerMiddleware",
    "FixedWindowLimiter",
    "RateLimitMiddleware",
    "RequestContextMiddleware",
    "error_response",
]

Dispatch = Callable[[Request], Awaitable[Response]]

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.SEARCH_INVALID_QUERY: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.LLM_AUTH_FAILED: 401,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.SECURITY_RATE_LIMITED: 429,
    ErrorCode.LLM_RATE_LIMITED: 429,
    ErrorCode.LLM_UNAVAILABLE: 503,
    ErrorCode.CACHE_UNAVAILABLE: 503,
    ErrorCode.STORAGE_CONNECTION_FAILED: 503,
    ErrorCode.STORAGE_READ_FAILED: 503,
    ErrorCode.SEARCH_TIMEOUT: 504,
}


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def error_response(
    request: Request,
    code: ErrorCode,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render an error in the API envelope with its mapped status code."""
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(code, 500),
        content={
            "error": {"code": code.value, "message": message, "details": details or {}},
            "request_id": _request_id(request),
        },
        headers=headers,
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign the request ID, time the request and write one access log line."""

    async def dispatch(self, request: Request, call_next: Dispatch) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"

        logger.info(
            "%s %s status=%d latency_ms=%.2f shop=%s method=%s request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            getattr(request.state, "shop_id", "-"),
            getattr(request.state, "search_method", "-"),
            request_id,
        )
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn raised errors into enveloped JSON. Unknown failures become 500s."""

    async def dispatch(self, request: Request, call_next: Dispatch) -> Response:
        try:
            return await call_next(request)
        except XpertSearchError as e:
            status = STATUS_BY_CODE.get(e.code, 500)
            log = logger.error if status >= 500 else logger.warning
            log(
                "%s %s failed with %s: %s shop=%s request_id=%s",
                request.method,
                request.url.path,
                e.code.value,
                e.message,
                getattr(request.state, "shop_id", "-"),
                _request_id(request),
            )
            return error_response(request, e.code, e.message, e.details)
        except Exception:
            logger.exception(
                "Unhandled error on %s %s request_id=%s",
                request.method,
                request.url.path,
                _request_id(request),
            )
            return error_response(request, ErrorCode.INTERNAL_ERROR, "Internal server error")


class FixedWindowLimiter:
    """
    Per-key request counter over fixed windows.

    All counters reset when a new window starts, so memory is bounded by
    the number of distinct keys seen within one window.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._window = -1
        self._counts: dict[str, int] = {}

    def hit(self, key: str) -> tuple[bool, int, int]:
        """
        Count one request for ``key``.

        Returns:
            (allowed, remaining requests, seconds until the window resets)
        """
        now = self._clock()
        window = int(now // self.window_seconds)
        if window != self._window:
            self._window = window
            self._counts.clear()

        reset_in = max(1, int((window + 1) * self.window_seconds - now))
        used = self._counts.get(key, 0)
        if used >= self.limit:
            return False, 0, reset_in

        self._counts[key] = used + 1
        return True, self.limit - used - 1, reset_in


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client limits on the search API. Health and docs routes are not limited."""

    def __init__(
        self,
        app: ASGIApp,
        requests_per_minute: int = 100,
        limited_prefixes: tuple[str, ...] = ("/api/search",),
    ) -> None:
        super().__init__(app)
        self.limiter = FixedWindowLimiter(requests_per_minute)
        self.limited_prefixes = limited_prefixes

    async def dispatch(self, request: Request, call_next: Dispatch) -> Response:
        if not request.url.path.startswith(self.limited_prefixes):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        allowed, remaining, retry_after = self.limiter.hit(client_ip)

        if not allowed:
            logger.warning(
                "Rate limit exceeded for %s on %s request_id=%s",
                client_ip,
                request.url.path,
                _request_id(request),
            )
            return error_response(
                request,
                ErrorCode.SECURITY_RATE_LIMITED,
                f"Too many search requests. Retry in {retry_after} seconds.",
                {"retry_after": retry_after},
                headers={"Retry-After": str(retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limiter.limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
