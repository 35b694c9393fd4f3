"""Tests for the sliding-window rate limit store."""

import threading

import pytest

from rag_router.common.rate_limiter import SlidingWindowRateLimitStore

pytestmark = pytest.mark.unit


def test_allows_up_to_limit_within_window(fake_clock):
    store = SlidingWindowRateLimitStore(clock=fake_clock)

    assert [store.hit("alice", 3, 60_000) for _ in range(4)] == [True, True, True, False]


def test_window_is_in_milliseconds(fake_clock):
    """A 1000 ms window frees the slot one second later."""
    store = SlidingWindowRateLimitStore(clock=fake_clock)
    store.hit("alice", 1, 1000)

    fake_clock.advance(0.5)
    assert store.hit("alice", 1, 1000) is False

    fake_clock.advance(1.5)
    assert store.hit("alice", 1, 1000) is True


def test_window_slides(fake_clock):
    store = SlidingWindowRateLimitStore(clock=fake_clock)
    store.hit("alice", 2, 10_000)
    fake_clock.advance(5)
    store.hit("alice", 2, 10_000)

    assert store.hit("alice", 2, 10_000) is False

    # First request leaves the window exactly at its boundary
    fake_clock.advance(5)
    assert store.hit("alice", 2, 10_000) is True
    assert store.hit("alice", 2, 10_000) is False


def test_rejected_requests_are_not_recorded(fake_clock):
    store = SlidingWindowRateLimitStore(clock=fake_clock)
    store.hit("alice", 1, 10_000)
    for _ in range(5):
        store.hit("alice", 1, 10_000)

    fake_clock.advance(10)
    assert store.hit("alice", 1, 10_000) is True


def test_zero_limit_rejects_everything(fake_clock):
    store = SlidingWindowRateLimitStore(clock=fake_clock)

    assert store.hit("alice", 0, 1000) is False
    assert store.active_keys() == 0


def test_keys_are_independent(fake_clock):
    store = SlidingWindowRateLimitStore(clock=fake_clock)
    store.hit("alice", 1, 60_000)

    assert store.hit("alice", 1, 60_000) is False
    assert store.hit("bob", 1, 60_000) is True
    assert store.active_keys() == 2


def test_expired_keys_are_swept(fake_clock):
    store = SlidingWindowRateLimitStore(clock=fake_clock, sweep_interval=10)
    for i in range(9):
        store.hit(f"user-{i}", 5, 1000)
    assert store.active_keys() == 9

    fake_clock.advance(2)
    store.hit("fresh", 5, 1000)

    assert store.active_keys() == 1


def test_sweep_keeps_keys_inside_window(fake_clock):
    store = SlidingWindowRateLimitStore(clock=fake_clock, sweep_interval=1)
    store.hit("alice", 5, 1000)
    fake_clock.advance(0.5)
    store.hit("bob", 5, 1000)

    assert store.active_keys() == 2


def test_reset_and_clear(fake_clock):
    store = SlidingWindowRateLimitStore(clock=fake_clock)
    store.hit("alice", 1, 60_000)
    store.hit("bob", 1, 60_000)

    store.reset("alice")
    assert store.hit("alice", 1, 60_000) is True

    store.clear()
    assert store.active_keys() == 0


def test_concurrent_hits_never_exceed_limit():
    store = SlidingWindowRateLimitStore()
    accepted = []
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            if store.hit("shared", 100, 3_600_000):
                with lock:
                    accepted.append(1)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(accepted) == 100
