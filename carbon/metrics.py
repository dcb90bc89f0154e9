"""Pluggable event counters.

Backends: ``noop`` (default), ``log`` (see metrics_logging) and ``memory``
(in-process counts, handy in tests and the health endpoint).
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from typing import Protocol


class Metrics(Protocol):
    def increment(self, name: str, tags: Mapping[str, str] | None = None) -> None: ...  # pragma: no cover - interface only


class _NoopMetrics:
    def increment(self, name: str, tags: Mapping[str, str] | None = None) -> None:  # pragma: no cover - noop
        return


class MemoryMetrics:
    def __init__(self) -> None:
        self.counts: Counter[str] = Counter()

    def increment(self, name: str, tags: Mapping[str, str] | None = None) -> None:
        self.counts[name] += 1


_metrics: Metrics = _NoopMetrics()


def set_metrics(m: Metrics) -> None:
    global _metrics
    _metrics = m


def get_metrics() -> Metrics:
    return _metrics


def configure_metrics(backend: str | None) -> Metrics:
    """Install the backend named by METRICS_BACKEND; unknown names fall back to noop."""
    name = (backend or "noop").strip().lower()
    if name == "log":
        from .metrics_logging import LoggingMetrics

        set_metrics(LoggingMetrics())
    elif name == "memory":
        set_metrics(MemoryMetrics())
    else:
        set_metrics(_NoopMetrics())
    return _metrics


def increment(name: str, tags: Mapping[str, str] | None = None) -> None:
    _metrics.increment(name, tags)
