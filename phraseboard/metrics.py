from __future__ import annotations

import time
from contextlib import contextmanager


class Counter:
    def __init__(self) -> None:
        self.value = 0

    def inc(self, n: int = 1) -> None:
        self.value += n


class Gauge:
    def __init__(self) -> None:
        self.value = 0

    def set(self, v: int) -> None:
        self.value = v


class Timer:
    def __init__(self) -> None:
        self.last_ms: float | None = None
        self._start: float | None = None

    def start(self) -> None:
        self._start = time.perf_counter()

    def stop(self) -> float | None:
        if self._start is None:
            return None
        end = time.perf_counter()
        self.last_ms = (end - self._start) * 1000
        self._start = None
        return self.last_ms

    @contextmanager
    def time(self):  # noqa: ANN201 (to keep it lightweight)
        self.start()
        try:
            yield
        finally:
            self.stop()


# Storage activity
storage_writes_total = Counter()
storage_write_failures_total = Counter()
storage_read_failures_total = Counter()
storage_write_ms = Timer()

# Store sizes after the last mutation
recents_depth = Gauge()
favorites_count = Gauge()
categories_count = Gauge()


def snapshot() -> dict[str, float | None]:
    """Current values of the module metrics, keyed by name."""

    values: dict[str, float | None] = {}
    for name, metric in globals().items():
        if isinstance(metric, (Counter, Gauge)):
            values[name] = metric.value
        elif isinstance(metric, Timer):
            values[name] = metric.last_ms
    return values
