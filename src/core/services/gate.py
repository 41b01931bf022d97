"""Admission control for concurrent fetches.

The gate is an explicit handle that the pipeline receives (or builds from
settings); it is never module-level state. Permits are taken with
`async with gate.slot():`, which releases on every exit path, including
exceptions and cancellation.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ConcurrencyGate:
    """Counting gate bounding how many operations are in flight at once."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = capacity
        self._semaphore = asyncio.Semaphore(capacity)
        self._in_flight = 0
        self._peak = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def available(self) -> int:
        return self._capacity - self._in_flight

    @property
    def peak(self) -> int:
        """Highest `in_flight` value observed since construction."""

        return self._peak

    async def acquire(self) -> None:
        await self._semaphore.acquire()
        self._in_flight += 1
        if self._in_flight > self._peak:
            self._peak = self._in_flight

    def release(self) -> None:
        if self._in_flight <= 0:
            raise RuntimeError("release() called without a matching acquire()")
        self._in_flight -= 1
        self._semaphore.release()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    def __repr__(self) -> str:
        return f"ConcurrencyGate(capacity={self._capacity}, in_flight={self._in_flight})"
