"""
Concurrency-Limited Scheduler
=============================

Runs one coroutine per route with at most ``max_concurrent`` in flight.
Queued routes are admitted in input order as soon as a slot frees up, and
results come back in input order regardless of completion order.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

from route_prerenderer.config.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ConcurrencyLimitedScheduler:
    """Sliding-window scheduler; ``max_concurrent == 0`` means unbounded."""

    def __init__(self, max_concurrent: int = 0):
        if max_concurrent < 0:
            raise ValueError("max_concurrent must be >= 0")
        self.max_concurrent = max_concurrent
        self.in_flight = 0
        self.peak_in_flight = 0
        self.logger: Any = logger.bind(component="scheduler")

    async def run(self, items: Sequence[str], worker: Callable[[str], Awaitable[T]]) -> List[T]:
        """
        Run ``worker`` for every item and join on all of them.

        The join waits until every invocation has settled. If any failed, the
        first failure in input order is raised and no results are returned.
        """
        semaphore: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(self.max_concurrent) if self.max_concurrent > 0 else None
        )
        results: List[Any] = [None] * len(items)

        async def admit(index: int, item: str) -> None:
            if semaphore is None:
                results[index] = await self._track(worker, item)
                return
            async with semaphore:
                results[index] = await self._track(worker, item)

        self.logger.info(
            "Scheduling routes", routes=len(items), max_concurrent=self.max_concurrent or None
        )
        outcomes = await asyncio.gather(
            *(admit(index, item) for index, item in enumerate(items)), return_exceptions=True
        )

        failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
        if failures:
            self.logger.error("Route batch failed", failed=len(failures), routes=len(items))
            raise failures[0]

        return results

    async def _track(self, worker: Callable[[str], Awaitable[T]], item: str) -> T:
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            return await worker(item)
        finally:
            self.in_flight -= 1
