"""In-process conversion metrics.

Two kinds of series are kept: call timings (count, total, max, running mean
and standard deviation) and plain counters such as unresolved lookups per
composite key. ``/health`` reports a summary; nothing is exported.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from functools import wraps
from math import sqrt
from time import perf_counter
from typing import Any, Callable, Dict, TypeVar, cast

from normconv.core.config import settings as _settings

_F = TypeVar("_F", bound=Callable[..., Any])


@dataclass(slots=True)
class TimingStats:
    """Running aggregates for one timing label (Welford variance)."""

    count: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0
    avg_ms: float = 0.0
    _m2: float = 0.0

    def add(self, elapsed_ms: float) -> None:
        self.count += 1
        self.total_ms += elapsed_ms
        self.max_ms = max(self.max_ms, elapsed_ms)
        delta = elapsed_ms - self.avg_ms
        self.avg_ms += delta / self.count
        self._m2 += delta * (elapsed_ms - self.avg_ms)

    @property
    def stddev_ms(self) -> float:
        if self.count < 2:
            return 0.0
        return sqrt(max(self._m2 / (self.count - 1), 0.0))

    def as_dict(self) -> Dict[str, float]:
        return {
            "count": float(self.count),
            "total_ms": self.total_ms,
            "max_ms": self.max_ms,
            "avg_ms": self.avg_ms,
            "stddev_ms": self.stddev_ms,
        }


class _MetricsRegistry:
    """Thread-safe store of timings and counters, keyed by dotted label."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._timings: Dict[str, TimingStats] = {}
        self._counters: Dict[str, float] = {}

    def record(self, label: str, elapsed_ms: float) -> None:
        if not label:
            return
        with self._lock:
            self._timings.setdefault(label, TimingStats()).add(float(elapsed_ms))

    def inc(self, label: str, amount: float = 1.0) -> None:
        if not label:
            return
        with self._lock:
            self._counters[label] = self._counters.get(label, 0.0) + float(amount)

    def timings(self, reset: bool = False) -> Dict[str, Dict[str, float]]:
        with self._lock:
            data = {label: stats.as_dict() for label, stats in self._timings.items()}
            if reset:
                self._timings.clear()
            return data

    def counters(self, reset: bool = False) -> Dict[str, float]:
        with self._lock:
            data = dict(self._counters)
            if reset:
                self._counters.clear()
            return data

    def reset(self) -> None:
        with self._lock:
            self._timings.clear()
            self._counters.clear()


metrics_registry = _MetricsRegistry()

_INSTRUMENTATION_ENABLED: bool = bool(_settings.instrumentation_enabled)


def set_instrumentation_enabled(enabled: bool) -> None:
    global _INSTRUMENTATION_ENABLED
    _INSTRUMENTATION_ENABLED = bool(enabled)


def instrumentation_enabled() -> bool:
    return _INSTRUMENTATION_ENABLED


def measure_time(label: str) -> Callable[[_F], _F]:
    """Decorator recording the wrapped call's duration under ``label``."""

    def _wrap(func: _F) -> _F:
        @wraps(func)
        def _inner(*args: Any, **kwargs: Any):
            if not instrumentation_enabled():
                return func(*args, **kwargs)
            started = perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                metrics_registry.record(label, (perf_counter() - started) * 1000.0)

        return cast(_F, _inner)

    return _wrap


def count_calls(label: str) -> Callable[[_F], _F]:
    """Decorator incrementing ``label`` on every call."""

    def _wrap(func: _F) -> _F:
        @wraps(func)
        def _inner(*args: Any, **kwargs: Any):
            if instrumentation_enabled():
                metrics_registry.inc(label)
            return func(*args, **kwargs)

        return cast(_F, _inner)

    return _wrap


def inc_counter(label: str, amount: float = 1.0) -> None:
    if instrumentation_enabled():
        metrics_registry.inc(label, amount)


def get_metrics(reset: bool = False) -> Dict[str, Dict[str, float]]:
    return metrics_registry.timings(reset=reset)


def get_counters(reset: bool = False) -> Dict[str, float]:
    return metrics_registry.counters(reset=reset)


__all__ = [
    "measure_time",
    "count_calls",
    "inc_counter",
    "get_metrics",
    "get_counters",
    "metrics_registry",
    "set_instrumentation_enabled",
    "instrumentation_enabled",
]
