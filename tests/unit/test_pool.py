"""Tests for the worker pool."""

import threading

from fontsync.core.pool import WorkerPool


def test_map_returns_one_result_per_item():
    """Test every item yields a result, keyed by the item."""
    results = WorkerPool(3).map(lambda n: n * 2, range(10))

    assert sorted((r.item, r.value) for r in results) == [(n, n * 2) for n in range(10)]
    assert all(r.ok for r in results)


def test_map_isolates_failures():
    """Test one failing item does not abort the others."""

    def work(n):
        if n == 3:
            raise ValueError("bad item")
        return n

    results = WorkerPool(2).map(work, range(5))
    failures = WorkerPool.failures(results)

    assert len(results) == 5
    assert [r.item for r in failures] == [3]
    assert isinstance(failures[0].error, ValueError)


def test_map_bounds_concurrency():
    """Test no more than `parallel` items run at once."""
    lock = threading.Lock()
    running = 0
    peak = 0
    release = threading.Event()

    def work(_):
        nonlocal running, peak
        with lock:
            running += 1
            peak = max(peak, running)
            if running == 2:
                release.set()
        release.wait(timeout=1)
        with lock:
            running -= 1

    WorkerPool(2).map(work, range(8))

    assert peak == 2


def test_parallel_is_clamped():
    """Test a non-positive parallelism still runs items."""
    assert WorkerPool(0).parallel == 1
    assert [r.value for r in WorkerPool(0).map(str, [1])] == ["1"]


def test_map_empty():
    """Test an empty item list returns no results."""
    assert WorkerPool(4).map(str, []) == []
