"""Timing utilities for pipeline stage measurement."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Generator

from .metrics import get_metrics_client


class TimingContext:
    """Context manager that times a block and emits it as a metric.

    The emitted tags carry ``outcome=error`` when the block raised, so slow
    failures can be told apart from slow successes.
    """

    def __init__(self, name: str, tags: dict[str, str] | None = None, emit_metric: bool = True):
        self.name = name
        self.tags = tags or {}
        self.emit_metric = emit_metric
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self) -> "TimingContext":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000
        if self.emit_metric:
            tags = {**self.tags, "outcome": "error" if exc_type else "ok"}
            get_metrics_client().timing(self.name, self.elapsed_ms, tags)


@contextmanager
def timed(
    name: str, tags: dict[str, str] | None = None, emit_metric: bool = True
) -> Generator[TimingContext, None, None]:
    """Time a pipeline stage.

    Usage:
        with timed("dxcoder.extract") as t:
            result = extract_context(text)
        logger.debug("extraction took %.2fms", t.elapsed_ms)
    """
    ctx = TimingContext(name, tags, emit_metric)
    with ctx:
        yield ctx
