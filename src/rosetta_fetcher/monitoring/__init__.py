"""Prometheus instrumentation for the Rosetta fetcher."""

from rosetta_fetcher.monitoring.metrics import (
    assertion_failures_total,
    blocks_fetched_total,
    other_transactions_fetched_total,
    request_latency_seconds,
    requests_total,
    retries_total,
    retry_exhausted_total,
)

__all__ = [
    "assertion_failures_total",
    "blocks_fetched_total",
    "other_transactions_fetched_total",
    "request_latency_seconds",
    "requests_total",
    "retries_total",
    "retry_exhausted_total",
]
