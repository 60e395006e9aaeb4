"""
Integration tests for the Rosetta fetcher.

Test components together:
- Fetcher + RosettaHttpClient over an httpx.MockTransport Rosetta server
- A live Rosetta server (skipped unless ROSETTA_SERVER_URL is reachable)
"""
