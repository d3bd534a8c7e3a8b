import threading
from collections import defaultdict
from typing import Protocol

Labels = dict[str, str]


class MetricsHook(Protocol):
    """Sink for client metrics. Names live in ``groqai.observability.names``.

    Implementations are called from request tasks and must not block.
    """

    def record_latency(
        self, name: str, value_ms: float, labels: Labels | None = None
    ) -> None: ...

    def increment(
        self, name: str, value: int = 1, labels: Labels | None = None
    ) -> None: ...


class NoOpMetricsHook:
    def record_latency(
        self, name: str, value_ms: float, labels: Labels | None = None
    ) -> None:
        pass

    def increment(
        self, name: str, value: int = 1, labels: Labels | None = None
    ) -> None:
        pass


class InMemoryMetricsHook:
    """Keeps counters and latency samples in process.

    Keys are ``(name, sorted label items)``. Handy for debugging and for
    exporting to a backend on a schedule.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.counters: dict[tuple, int] = defaultdict(int)
        self.latencies: dict[tuple, list[float]] = defaultdict(list)

    def record_latency(
        self, name: str, value_ms: float, labels: Labels | None = None
    ) -> None:
        with self._lock:
            self.latencies[self._key(name, labels)].append(value_ms)

    def increment(
        self, name: str, value: int = 1, labels: Labels | None = None
    ) -> None:
        with self._lock:
            self.counters[self._key(name, labels)] += value

    def count(self, name: str, labels: Labels | None = None) -> int:
        """Counter value for ``name``.

        Summed over all label sets when ``labels`` is None.
        """
        with self._lock:
            if labels is not None:
                return self.counters.get(self._key(name, labels), 0)
            return sum(v for (n, _), v in self.counters.items() if n == name)

    @staticmethod
    def _key(name: str, labels: Labels | None) -> tuple:
        return name, tuple(sorted((labels or {}).items()))
