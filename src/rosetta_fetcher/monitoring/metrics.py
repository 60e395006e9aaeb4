"""Prometheus metrics for the Rosetta fetcher.

Collectors are registered on the default registry at import time; the host
application decides whether and where to expose them. Useful alerts:
- fetcher_retry_exhausted_total (server unreachable or overloaded)
- fetcher_assertion_failures_total (server returning non-conforming data)
- fetcher_retries_total rate (transient instability)
"""

from prometheus_client import Counter, Histogram

# === Request Metrics ===

requests_total = Counter(
    "fetcher_requests_total",
    "Rosetta API requests by endpoint and outcome",
    ["endpoint", "outcome"],
)
"""
Request attempts counter.

Labels:
- endpoint: /network/list, /network/status, /block, /block/transaction, ...
- outcome: success, transient_error, terminal_error
"""

request_latency_seconds = Histogram(
    "fetcher_request_latency_seconds",
    "Rosetta API request latency in seconds",
    ["endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# === Retry Metrics ===

retries_total = Counter(
    "fetcher_retries_total",
    "Retry attempts scheduled after a transient failure",
    ["operation"],
)

retry_exhausted_total = Counter(
    "fetcher_retry_exhausted_total",
    "Operations that spent their whole retry budget",
    ["operation"],
)

# === Validation Metrics ===

assertion_failures_total = Counter(
    "fetcher_assertion_failures_total",
    "Responses rejected by the asserter",
    ["check"],
)
"""
Asserter rejections by check.

Labels:
- check: network_status, network_options, block, transaction, account_balance, mempool
"""

# === Block Metrics ===

blocks_fetched_total = Counter(
    "fetcher_blocks_fetched_total",
    "Blocks fetched, assembled and validated",
)

other_transactions_fetched_total = Counter(
    "fetcher_other_transactions_fetched_total",
    "Transactions fetched separately from /block/transaction",
)
