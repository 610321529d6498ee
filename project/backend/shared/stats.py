"""
Stats collection.

Request-scoped counters and timings, injected into the pipeline instead of
module-level mutable counters.
"""

import time
from contextlib import contextmanager
from typing import Dict, Iterator, List


class StatsCollector:
    """Interface for pipeline stats sinks."""

    def incr(self, name: str, value: int = 1) -> None:
        raise NotImplementedError

    def timing(self, name: str, seconds: float) -> None:
        raise NotImplementedError

    def snapshot(self) -> dict:
        raise NotImplementedError

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """Record the wall time of the enclosed block under `name`."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.timing(name, time.perf_counter() - start)


class NullStatsCollector(StatsCollector):
    """Discards everything."""

    def incr(self, name: str, value: int = 1) -> None:
        pass

    def timing(self, name: str, seconds: float) -> None:
        pass

    def snapshot(self) -> dict:
        return {"counters": {}, "timings": {}}


class InMemoryStatsCollector(StatsCollector):
    """Keeps counters and timings for the lifetime of one request."""

    def __init__(self):
        self.counters: Dict[str, int] = {}
        self.timings: Dict[str, List[float]] = {}

    def incr(self, name: str, value: int = 1) -> None:
        self.counters[name] = self.counters.get(name, 0) + value

    def timing(self, name: str, seconds: float) -> None:
        self.timings.setdefault(name, []).append(seconds)

    def snapshot(self) -> dict:
        return {
            "counters": dict(self.counters),
            "timings": {name: round(sum(values), 3) for name, values in self.timings.items()},
        }
