"""
Model Call Throttling

Bounded-concurrency gate used to keep model-provider calls within rate
limits. The orchestrator uses a limit of one.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar('T')


class SerialExecutor:
    """
    Runs coroutines with at most ``limit`` in flight.

    ``max_in_flight`` records the highest concurrency observed, which lets
    callers verify the limit was respected.
    """

    def __init__(self, limit: int = 1):
        if limit < 1:
            raise ValueError("Limit must be at least 1")
        self.limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self.in_flight = 0
        self.max_in_flight = 0
        self.completed = 0

    async def run(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        async with self._semaphore:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                return await func(*args, **kwargs)
            finally:
                self.in_flight -= 1
                self.completed += 1
