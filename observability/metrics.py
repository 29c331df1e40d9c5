"""Metrics client abstraction and implementations.

This module provides:
- MetricsClient: Abstract base class for metrics emission
- NullMetricsClient: No-op implementation (default)
- StdoutMetricsClient: JSON output for debugging
- InMemoryMetricsClient: In-process counters and samples, useful in tests

To print metrics while coding a batch of cases:
    DXCODER_METRICS_BACKEND=stdout
"""

from __future__ import annotations

import json
import os
import sys
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any


class MetricsClient(ABC):
    """Abstract base class for metrics emission."""

    @abstractmethod
    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        """Increment a counter metric."""
        ...

    @abstractmethod
    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        """Record an observation for a histogram/summary metric."""
        ...

    @abstractmethod
    def timing(self, name: str, value_ms: float, tags: dict[str, str] | None = None) -> None:
        """Record a timing metric in milliseconds."""
        ...


class StdoutMetricsClient(MetricsClient):
    """Metrics client that writes JSON lines to stdout for debugging."""

    def __init__(self, prefix: str = "dxcoder"):
        self.prefix = prefix

    def _emit(self, metric_type: str, name: str, value: Any, tags: dict[str, str] | None) -> None:
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "type": metric_type,
            "name": f"{self.prefix}.{name}",
            "value": value,
            "tags": tags or {},
        }
        print(json.dumps(record), file=sys.stdout)

    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        self._emit("counter", name, value, tags)

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self._emit("histogram", name, value, tags)

    def timing(self, name: str, value_ms: float, tags: dict[str, str] | None = None) -> None:
        self._emit("timing", name, value_ms, tags)


class NullMetricsClient(MetricsClient):
    """No-op metrics client (default)."""

    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        pass

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        pass

    def timing(self, name: str, value_ms: float, tags: dict[str, str] | None = None) -> None:
        pass


def _series_key(name: str, tags: dict[str, str] | None) -> str:
    if not tags:
        return name
    labels = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
    return f"{name}{{{labels}}}"


class InMemoryMetricsClient(MetricsClient):
    """Thread-safe in-process metrics store.

    Counters are summed per (name, tags) series; observations and timings are
    kept as raw samples.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, int] = defaultdict(int)
        self._samples: dict[str, list[float]] = defaultdict(list)

    def incr(self, name: str, tags: dict[str, str] | None = None, value: int = 1) -> None:
        with self._lock:
            self._counters[_series_key(name, tags)] += value

    def observe(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        with self._lock:
            self._samples[_series_key(name, tags)].append(value)

    def timing(self, name: str, value_ms: float, tags: dict[str, str] | None = None) -> None:
        self.observe(name, value_ms, tags)

    def counter(self, name: str, tags: dict[str, str] | None = None) -> int:
        with self._lock:
            return self._counters.get(_series_key(name, tags), 0)

    def samples(self, name: str, tags: dict[str, str] | None = None) -> list[float]:
        with self._lock:
            return list(self._samples.get(_series_key(name, tags), []))

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._counters.clear()
            self._samples.clear()


# Global singleton
_metrics_client: MetricsClient | None = None


def get_metrics_client() -> MetricsClient:
    """Get the global metrics client, initializing if needed.

    The client type is determined by the DXCODER_METRICS_BACKEND environment variable:
    - "memory": InMemoryMetricsClient
    - "stdout": StdoutMetricsClient (for debugging)
    - "null" or not set: NullMetricsClient (no-op, default)

    Returns:
        The configured MetricsClient instance.
    """
    global _metrics_client
    if _metrics_client is None:
        backend = os.getenv("DXCODER_METRICS_BACKEND", "null").lower()
        if backend == "memory":
            _metrics_client = InMemoryMetricsClient()
        elif backend == "stdout":
            _metrics_client = StdoutMetricsClient()
        else:
            _metrics_client = NullMetricsClient()
    return _metrics_client


def set_metrics_client(client: MetricsClient) -> None:
    """Set the global metrics client."""
    global _metrics_client
    _metrics_client = client


def reset_metrics_client() -> None:
    """Reset the global metrics client to None.

    The next call to get_metrics_client() will re-initialize based on env vars.
    Useful for testing.
    """
    global _metrics_client
    _metrics_client = None
