"""Prometheus metrics instrumentation."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

REGISTRY = CollectorRegistry()

RUN_COUNT = Counter(
    "umlx_runs_total",
    "Indexing runs by final status",
    labelnames=("status",),
    registry=REGISTRY,
)

BLOCK_COUNT = Counter(
    "umlx_blocks_total",
    "Candidate blocks by outcome",
    labelnames=("outcome",),
    registry=REGISTRY,
)

EVICTED_RECORDS = Counter(
    "umlx_evicted_records_total",
    "Stale records deleted before re-indexing an origin",
    registry=REGISTRY,
)

RUN_DURATION = Histogram(
    "umlx_run_duration_seconds",
    "Duration of a single indexing run",
    registry=REGISTRY,
)


def metrics_text() -> str:
    """Return the registry in the Prometheus text exposition format."""
    return generate_latest(REGISTRY).decode("utf-8")


__all__ = [
    "REGISTRY",
    "RUN_COUNT",
    "BLOCK_COUNT",
    "EVICTED_RECORDS",
    "RUN_DURATION",
    "metrics_text",
]
