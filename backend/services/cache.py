"""Simple in-memory TTL cache. No Redis needed.

Expired entries are dropped lazily on read, and a background sweep task
removes entries that are written once and never read again. Each uvicorn
worker has its own cache instance.
"""

import asyncio
import logging
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_MS = 5 * 60 * 1000


class TTLCache:
    def __init__(
        self,
        sweep_interval_ms: int = DEFAULT_SWEEP_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store: dict[str, tuple[float, Any]] = {}
        self._sweep_interval = sweep_interval_ms / 1000
        self._clock = clock
        self._sweep_task: asyncio.Task | None = None

    def __len__(self) -> int:
        return len(self._store)

    def get(self, key: str) -> Any | None:
        if key in self._store:
            expires_at, value = self._store[key]
            if self._clock() < expires_at:
                return value
            del self._store[key]
        return None

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        if isinstance(ttl_ms, bool) or not isinstance(ttl_ms, int) or ttl_ms < 0:
            raise ValueError(f"ttl_ms must be a non-negative integer, got {ttl_ms!r}")
        self._store[key] = (self._clock() + ttl_ms / 1000, value)

    def clear(self) -> None:
        self._store.clear()

    def sweep(self) -> int:
        """Delete every expired entry. Returns the number removed."""
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._store.items() if now >= expires_at]
        for key in expired:
            del self._store[key]
        if expired:
            logger.debug("Cache sweep removed %d expired entries", len(expired))
        return len(expired)

    @property
    def running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def start(self) -> None:
        """Schedule the periodic sweep on the running event loop."""
        if self.running:
            return
        self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_loop())

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it to finish."""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()
