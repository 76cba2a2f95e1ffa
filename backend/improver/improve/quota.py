"""
Per-client daily AI quota.

Each client key gets a bucket {count, reset_at}. A bucket whose reset time has
passed reads as fresh, but reads never write: the reset is only persisted by
the next consume(). consume() is only called after a successful AI call, so
failed calls never cost a slot.

Buckets live behind a QuotaStore (get + compare-and-swap). Only an in-memory
store ships; it is per process and lost on restart.
"""

import asyncio
import logging
import threading
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Callable, Optional, Protocol

from improver.config import get_settings

logger = logging.getLogger(__name__)

DAILY_LIMIT = 10
WINDOW = timedelta(hours=24)
CAS_ATTEMPTS = 5


class QuotaExhausted(Exception):
    def __init__(self, reset_at: int):
        super().__init__(f"Daily AI limit reached, resets at {reset_at}")
        self.reset_at = reset_at


class QuotaConflict(Exception):
    """The store kept changing under consume(); the slot was not recorded."""


@dataclass(frozen=True)
class QuotaBucket:
    count: int
    reset_at: int  # epoch ms


@dataclass(frozen=True)
class QuotaStatus:
    allowed: bool
    remaining: int
    reset_at: int  # epoch ms


class QuotaStore(Protocol):
    def get(self, key: str) -> Optional[QuotaBucket]: ...

    def compare_and_swap(
        self, key: str, expected: Optional[QuotaBucket], new: QuotaBucket
    ) -> bool:
        """Write `new` only if the stored bucket still equals `expected`."""
        ...


class InMemoryQuotaStore:
    def __init__(self):
        self._buckets: dict[str, QuotaBucket] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[QuotaBucket]:
        with self._lock:
            return self._buckets.get(key)

    def compare_and_swap(
        self, key: str, expected: Optional[QuotaBucket], new: QuotaBucket
    ) -> bool:
        with self._lock:
            if self._buckets.get(key) != expected:
                return False
            self._buckets[key] = new
            return True


class QuotaTracker:
    def __init__(
        self,
        store: QuotaStore,
        limit: int = DAILY_LIMIT,
        window: timedelta = WINDOW,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.limit = limit
        self.window_ms = int(window.total_seconds() * 1000)
        self._clock = clock
        # key -> (lock, holders + waiters); entries are dropped once unused
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _current(self, key: str) -> tuple[Optional[QuotaBucket], QuotaBucket]:
        """Return (stored, effective). Effective is a fresh bucket once expired."""
        stored = self.store.get(key)
        now = self._now_ms()
        if stored is None or now > stored.reset_at:
            return stored, QuotaBucket(count=0, reset_at=now + self.window_ms)
        return stored, stored

    @asynccontextmanager
    async def lock(self, key: str):
        """Per-key lock held across check -> AI call -> consume."""
        lock, users = self._locks.get(key, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            _, users = self._locks[key]
            if users == 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    def check_eligible(self, key: str) -> QuotaStatus:
        _, bucket = self._current(key)
        if bucket.count >= self.limit:
            return QuotaStatus(allowed=False, remaining=0, reset_at=bucket.reset_at)
        return QuotaStatus(
            allowed=True, remaining=self.limit - bucket.count, reset_at=bucket.reset_at
        )

    def consume(self, key: str) -> QuotaStatus:
        for _ in range(CAS_ATTEMPTS):
            stored, bucket = self._current(key)
            if bucket.count >= self.limit:
                raise QuotaExhausted(bucket.reset_at)
            updated = QuotaBucket(count=bucket.count + 1, reset_at=bucket.reset_at)
            if self.store.compare_and_swap(key, stored, updated):
                remaining = self.limit - updated.count
                return QuotaStatus(
                    allowed=remaining > 0, remaining=remaining, reset_at=updated.reset_at
                )
            logger.debug(f"Quota CAS conflict for {key}, retrying")
        raise QuotaConflict(f"Could not update quota bucket for {key} after {CAS_ATTEMPTS} attempts")


@lru_cache
def get_quota_tracker() -> QuotaTracker:
    return QuotaTracker(InMemoryQuotaStore(), limit=get_settings().ai_daily_limit)
