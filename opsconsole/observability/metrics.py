"""In-process counters and latency summaries for the console. Exported at GET /metrics."""

import math
import threading
from collections import deque
from typing import Any, Deque, Mapping, Optional

LabelSet = tuple[tuple[str, str], ...]

# Recent observations kept per latency series for percentiles.
LATENCY_WINDOW = 1024


def _labelset(labels: Optional[Mapping[str, str]]) -> LabelSet:
    return tuple(sorted((labels or {}).items()))


def _series_key(name: str, labelset: LabelSet) -> str:
    return name + ":" + ",".join(f"{k}={v}" for k, v in labelset)


def _percentile(ordered: list[float], q: float) -> float:
    if not ordered:
        return 0.0
    rank = max(0, math.ceil(q * len(ordered)) - 1)
    return ordered[rank]


class _LatencySeries:
    __slots__ = ("count", "total", "peak", "recent")

    def __init__(self) -> None:
        self.count = 0
        self.total = 0.0
        self.peak = 0.0
        self.recent: Deque[float] = deque(maxlen=LATENCY_WINDOW)

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.peak = max(self.peak, value)
        self.recent.append(value)

    def summary(self) -> dict[str, float]:
        ordered = sorted(self.recent)
        return {
            "count": self.count,
            "sum": self.total,
            "max": self.peak,
            "p50": _percentile(ordered, 0.50),
            "p95": _percentile(ordered, 0.95),
        }


class MetricsCollector:
    """
    Counters, optionally labelled (resource, action, outcome), and latency series keyed by route.
    Safe to share between requests; every mutation takes the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[tuple[str, LabelSet], float] = {}
        self._latency: dict[str, _LatencySeries] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        labels: Optional[Mapping[str, str]] = None,
    ) -> None:
        key = (name, _labelset(labels))
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + value

    def observe_latency(
        self,
        name: str,
        latency_ms: float,
        *,
        route: Optional[str] = None,
    ) -> None:
        series_name = name if route is None else f"{name}:route={route}"
        with self._lock:
            self._latency.setdefault(series_name, _LatencySeries()).add(latency_ms)

    def export_metrics(self) -> dict[str, Any]:
        """Unlabelled counters, labelled counters grouped by metric name, latency summaries."""
        with self._lock:
            plain: dict[str, float] = {}
            labelled: dict[str, dict[str, float]] = {}
            for (name, labelset), value in self._counters.items():
                if labelset:
                    labelled.setdefault(name, {})[_series_key(name, labelset)] = value
                else:
                    plain[name] = value
            return {
                "counters": plain,
                "counters_by_labels": labelled,
                "histograms": {name: s.summary() for name, s in self._latency.items()},
            }

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._latency.clear()
