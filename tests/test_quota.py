"""
Tests for the per-client daily AI quota.
"""

import asyncio

import pytest

from improver.improve.quota import (
    DAILY_LIMIT,
    InMemoryQuotaStore,
    QuotaBucket,
    QuotaConflict,
    QuotaExhausted,
    QuotaTracker,
)

DAY = 24 * 60 * 60


def test_fresh_key_is_eligible_with_full_quota(tracker, clock):
    status = tracker.check_eligible("1.2.3.4")

    assert status.allowed is True
    assert status.remaining == DAILY_LIMIT
    assert status.reset_at == int((clock.now + DAY) * 1000)


def test_check_does_not_create_bucket(tracker, store):
    tracker.check_eligible("1.2.3.4")
    assert store.get("1.2.3.4") is None


def test_consume_decrements_remaining(tracker):
    first = tracker.consume("1.2.3.4")
    second = tracker.consume("1.2.3.4")

    assert first.remaining == DAILY_LIMIT - 1
    assert second.remaining == DAILY_LIMIT - 2
    assert second.reset_at == first.reset_at
    assert tracker.check_eligible("1.2.3.4").remaining == DAILY_LIMIT - 2


def test_limit_reached_after_daily_limit_consumptions(tracker):
    for _ in range(DAILY_LIMIT):
        assert tracker.check_eligible("1.2.3.4").allowed
        tracker.consume("1.2.3.4")

    status = tracker.check_eligible("1.2.3.4")
    assert status.allowed is False
    assert status.remaining == 0


def test_consume_past_limit_raises(tracker, store):
    for _ in range(DAILY_LIMIT):
        tracker.consume("1.2.3.4")

    with pytest.raises(QuotaExhausted):
        tracker.consume("1.2.3.4")
    assert store.get("1.2.3.4").count == DAILY_LIMIT


def test_keys_are_independent(tracker):
    for _ in range(DAILY_LIMIT):
        tracker.consume("1.2.3.4")

    assert tracker.check_eligible("5.6.7.8").remaining == DAILY_LIMIT


def test_window_resets_after_reset_time(tracker, clock):
    for _ in range(DAILY_LIMIT):
        tracker.consume("1.2.3.4")

    clock.advance(DAY + 1)
    status = tracker.check_eligible("1.2.3.4")

    assert status.allowed is True
    assert status.remaining == DAILY_LIMIT
    assert status.reset_at == int((clock.now + DAY) * 1000)


def test_reset_is_not_persisted_by_check(tracker, store, clock):
    tracker.consume("1.2.3.4")
    stale = store.get("1.2.3.4")

    clock.advance(DAY + 1)
    tracker.check_eligible("1.2.3.4")

    assert store.get("1.2.3.4") == stale


def test_consume_after_reset_starts_new_window(tracker, store, clock):
    for _ in range(3):
        tracker.consume("1.2.3.4")

    clock.advance(DAY + 1)
    status = tracker.consume("1.2.3.4")

    assert status.remaining == DAILY_LIMIT - 1
    assert store.get("1.2.3.4") == QuotaBucket(count=1, reset_at=int((clock.now + DAY) * 1000))


def test_exactly_at_reset_time_is_still_old_window(tracker, clock):
    tracker.consume("1.2.3.4")
    clock.advance(DAY)

    assert tracker.check_eligible("1.2.3.4").remaining == DAILY_LIMIT - 1


def test_custom_limit(store, clock):
    tracker = QuotaTracker(store, limit=2, clock=clock)
    tracker.consume("k")
    tracker.consume("k")

    assert tracker.check_eligible("k").allowed is False


def test_store_compare_and_swap():
    store = InMemoryQuotaStore()
    first = QuotaBucket(count=1, reset_at=1000)

    assert store.compare_and_swap("k", None, first) is True
    assert store.compare_and_swap("k", None, QuotaBucket(count=5, reset_at=1000)) is False
    assert store.get("k") == first


def test_consume_retries_on_cas_conflict(clock):
    class RacyStore(InMemoryQuotaStore):
        """Sneaks in a concurrent write before the first swap."""

        def __init__(self):
            super().__init__()
            self.raced = False

        def compare_and_swap(self, key, expected, new):
            if not self.raced:
                self.raced = True
                super().compare_and_swap(key, expected, QuotaBucket(count=1, reset_at=new.reset_at))
            return super().compare_and_swap(key, expected, new)

    store = RacyStore()
    tracker = QuotaTracker(store, clock=clock)

    status = tracker.consume("k")

    assert status.remaining == DAILY_LIMIT - 2
    assert store.get("k").count == 2


def test_locks_are_dropped_once_released(tracker):
    async def main():
        async with tracker.lock("a"):
            assert set(tracker._locks) == {"a"}
            async with tracker.lock("b"):
                assert set(tracker._locks) == {"a", "b"}

    asyncio.run(main())
    assert tracker._locks == {}


def test_lock_entry_survives_while_others_wait(tracker):
    seen = []

    async def holder(name):
        async with tracker.lock("k"):
            await asyncio.sleep(0)
            seen.append((name, tracker._locks["k"][1]))

    async def main():
        await asyncio.gather(holder("first"), holder("second"))

    asyncio.run(main())
    # second was already waiting while first held the lock
    assert seen == [("first", 2), ("second", 1)]
    assert tracker._locks == {}


def test_lock_released_on_error(tracker):
    async def main():
        async with tracker.lock("k"):
            raise ValueError("boom")

    with pytest.raises(ValueError):
        asyncio.run(main())
    assert tracker._locks == {}


def test_consume_gives_up_after_repeated_conflicts(clock):
    class BusyStore(InMemoryQuotaStore):
        def compare_and_swap(self, key, expected, new):
            return False

    tracker = QuotaTracker(BusyStore(), clock=clock)

    with pytest.raises(QuotaConflict):
        tracker.consume("k")
    assert tracker.store.get("k") is None


def test_lock_serializes_check_and_consume(tracker):
    tracker = QuotaTracker(tracker.store, limit=1, clock=tracker._clock)
    served = []

    async def request():
        async with tracker.lock("k"):
            if not tracker.check_eligible("k").allowed:
                return
            await asyncio.sleep(0)
            tracker.consume("k")
            served.append(True)

    async def main():
        await asyncio.gather(request(), request(), request())

    asyncio.run(main())
    assert len(served) == 1
