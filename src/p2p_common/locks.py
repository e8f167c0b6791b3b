"""Keyed in-process locks.

Every lifecycle mutation of an Order, its Responses and its Deal is reachable
only through the Order's identity, so one lock per order id serializes all of
them inside this process. The database row lock (SELECT ... FOR UPDATE) taken
inside the same critical section is what serializes across processes.

An entry lives only while someone holds or waits for its key.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import asyncio


class KeyedLocks:
    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    def in_use(self) -> int:
        """Number of keys currently held or awaited."""
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]


_order_locks: KeyedLocks | None = None


def get_order_locks() -> KeyedLocks:
    """Process-wide lock registry shared by every service that mutates orders."""
    global _order_locks  # noqa: PLW0603
    if _order_locks is None:
        _order_locks = KeyedLocks()
    return _order_locks
