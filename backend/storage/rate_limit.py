from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from .time_utils import epoch_ms

logger = logging.getLogger(__name__)


@dataclass
class RateLimitEntry:
    count: int
    reset_at: int


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int


class RateLimiter:
    """Fixed-window admission counter keyed by an opaque string.

    A new window starts on the first admission after the previous one expired,
    so a burst straddling a window boundary can admit up to twice the limit.
    State is in-process only: it resets on restart and is not shared between
    instances.
    """

    def __init__(self, *, clock: Callable[[], int] = epoch_ms, sweep_interval_ms: int = 60_000) -> None:
        self._clock = clock
        self._sweep_interval_ms = sweep_interval_ms
        self._entries: dict[str, RateLimitEntry] = {}
        self._last_sweep = clock()

    def admit(self, key: str, limit: int, window_ms: int = 60_000) -> RateLimitDecision:
        self.sweep()
        now = self._clock()
        entry = self._entries.get(key)

        if entry is None or now > entry.reset_at:
            self._entries[key] = RateLimitEntry(count=1, reset_at=now + window_ms)
            return RateLimitDecision(allowed=True, remaining=limit - 1)

        if entry.count >= limit:
            return RateLimitDecision(allowed=False, remaining=0)

        entry.count += 1
        return RateLimitDecision(allowed=True, remaining=limit - entry.count)

    def sweep(self, *, force: bool = False) -> int:
        now = self._clock()
        if not force and now - self._last_sweep < self._sweep_interval_ms:
            return 0
        self._last_sweep = now
        expired = [key for key, entry in self._entries.items() if now > entry.reset_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def entry(self, key: str) -> RateLimitEntry | None:
        return self._entries.get(key)

    def __len__(self) -> int:
        return len(self._entries)

    async def run_periodic_sweep(self) -> None:
        interval = self._sweep_interval_ms / 1000
        while True:
            await asyncio.sleep(interval)
            removed = self.sweep(force=True)
            if removed:
                logger.debug("rate limiter swept %d expired entries", removed)
