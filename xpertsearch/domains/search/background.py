"""
Best-Effort Runner - Bounded background side effects.

Cache writes and analytics logging run here. They never affect the
response that triggered them: each task is bounded by a timeout and its
failure is logged, not raised.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable

logger = logging.getLogger(__name__)

__all__ = ["BestEffortRunner"]


class BestEffortRunner:
    """
    Tracks fire-and-forget coroutines so they can be drained on shutdown.

    Example:
        >>> runner = BestEffortRunner(timeout=2.0)
        >>> runner.submit(cache.set(...), name="cache-write")
        >>> await runner.drain()
    """

    def __init__(self, timeout: float = 2.0) -> None:
        self._timeout = timeout
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, coro: Awaitable, name: str = "side-effect") -> asyncio.Task:
        """Schedule ``coro`` without awaiting it."""
        task = asyncio.create_task(self._guard(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guard(self, coro: Awaitable, name: str) -> None:
        try:
            await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Best-effort task %s timed out after %.1fs", name, self._timeout)
        except asyncio.CancelledError:
            logger.debug("Best-effort task %s cancelled", name)
        except Exception as e:
            logger.warning("Best-effort task %s failed: %s", name, e)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding tasks, cancelling any still running after ``timeout``."""
        if not self._tasks:
            return

        tasks = list(self._tasks)
        done, pending = await asyncio.wait(tasks, timeout=timeout or self._timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        logger.info("Drained %d background tasks (%d cancelled)", len(done), len(pending))
