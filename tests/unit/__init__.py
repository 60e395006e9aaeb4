"""
Unit tests for the Rosetta fetcher.

Test individual components in isolation:
- Retry policy and engine (backoff, budgets, classification, cancellation)
- HTTP client (error classification via httpx.MockTransport)
- Asserter (network, block, transaction rules)
- Rate limiter
- Fetcher (initialization, block assembly, range orchestration)
"""
