"""
Read/write admission for request work.

Work is grouped by resource family (e.g. "users", "beds"). Within a family,
exclusive (write) tasks never overlap any other task, shared (read) tasks run
concurrently with each other. Once a writer is waiting, new readers queue
behind it so writes cannot starve.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class _ReadWriteLock:
    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writing = False
        self._writers_waiting = 0

    async def acquire_shared(self) -> None:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writing and self._writers_waiting == 0)
            self._readers += 1

    async def release_shared(self) -> None:
        async with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    async def acquire_exclusive(self) -> None:
        async with self._cond:
            self._writers_waiting += 1
            try:
                await self._cond.wait_for(lambda: not self._writing and self._readers == 0)
            finally:
                self._writers_waiting -= 1
            self._writing = True

    async def release_exclusive(self) -> None:
        async with self._cond:
            self._writing = False
            self._cond.notify_all()

    @property
    def idle(self) -> bool:
        return self._readers == 0 and not self._writing and self._writers_waiting == 0


class ReadWriteScheduler:
    def __init__(self) -> None:
        self._locks: dict[str, _ReadWriteLock] = {}

    def _lock_for(self, family: str) -> _ReadWriteLock:
        lock = self._locks.get(family)
        if lock is None:
            lock = _ReadWriteLock()
            self._locks[family] = lock
        return lock

    async def submit(
        self,
        task: Callable[[], Awaitable[T]],
        *,
        exclusive: bool,
        family: str = "default",
    ) -> T:
        """
        Run `task` once admitted and return its result (or raise its error).
        """
        lock = self._lock_for(family)
        if exclusive:
            await lock.acquire_exclusive()
            try:
                return await task()
            finally:
                await lock.release_exclusive()

        await lock.acquire_shared()
        try:
            return await task()
        finally:
            await lock.release_shared()

    def pending_families(self) -> list[str]:
        return sorted(name for name, lock in self._locks.items() if not lock.idle)


# Process-wide instance used by the routers.
scheduler = ReadWriteScheduler()
