"""
Keyed query cache with staleness, invalidation and shared in-flight fetches
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
Listener = Callable[[Any], None]


@dataclass
class CacheEntry:
    value: Any = None
    fetched_at: Optional[float] = None
    invalidated: bool = False


class QueryCache:
    """
    Maps a query key to its last fetched value.

    An entry older than the caller's stale time is served as-is while a
    background refresh runs. An invalidated entry is never served: the next
    read waits for a fresh fetch. Concurrent fetches of one key share a task.

    Each key carries a generation that ``invalidate`` bumps. A fetch started
    before an invalidation is never joined afterwards and its result is not
    stored, so a mutation followed by a read always sees a newer answer.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, Tuple[asyncio.Task, int]] = {}
        self._generations: Dict[str, int] = {}
        self._listeners: Dict[str, List[Listener]] = {}

    def peek(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())
        for listener in list(self._listeners.get(key, ())):
            listener(value)

    def invalidate(self, key: str) -> None:
        """Mark ``key`` stale so the next read re-fetches"""
        self._generations[key] = self._generation(key) + 1
        entry = self._entries.get(key)
        if entry is not None:
            entry.invalidated = True

    def is_stale(self, key: str, stale_time: float) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.invalidated or entry.fetched_at is None:
            return True
        return self._clock() - entry.fetched_at >= stale_time

    def is_fetching(self, key: str) -> bool:
        return key in self._in_flight

    def subscribe(self, key: str, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with every new value for ``key``; returns an unsubscribe function"""
        self._listeners.setdefault(key, []).append(listener)

        def unsubscribe():
            listeners = self._listeners.get(key, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def _generation(self, key: str) -> int:
        return self._generations.get(key, 0)

    def _start(self, key: str, fetcher: Fetcher) -> asyncio.Task:
        generation = self._generation(key)
        running = self._in_flight.get(key)
        if running is not None and running[1] == generation:
            return running[0]
        task = asyncio.ensure_future(self._run(key, fetcher, generation))
        self._in_flight[key] = (task, generation)
        return task

    async def _run(self, key: str, fetcher: Fetcher, generation: int) -> Any:
        try:
            value = await fetcher()
        finally:
            running = self._in_flight.get(key)
            if running is not None and running[0] is asyncio.current_task():
                del self._in_flight[key]
        if generation == self._generation(key):
            self.set(key, value)
        else:
            logger.debug("Dropping %s result fetched before invalidation", key)
        return value

    async def fetch(self, key: str, fetcher: Fetcher) -> Any:
        """Fetch now regardless of staleness, joining a fetch of the current generation"""
        while True:
            generation = self._generation(key)
            # shield: one waiter being cancelled must not cancel the shared fetch
            value = await asyncio.shield(self._start(key, fetcher))
            if generation == self._generation(key):
                return value

    def refresh_in_background(self, key: str, fetcher: Fetcher) -> asyncio.Task:
        task = self._start(key, fetcher)
        task.add_done_callback(_log_background_failure)
        return task

    async def get_or_fetch(self, key: str, fetcher: Fetcher, stale_time: float) -> Any:
        entry = self._entries.get(key)
        if entry is None or entry.invalidated or entry.fetched_at is None:
            return await self.fetch(key, fetcher)
        if self._clock() - entry.fetched_at >= stale_time:
            self.refresh_in_background(key, fetcher)
        return entry.value


def _log_background_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Background refresh failed: %s", exc)
