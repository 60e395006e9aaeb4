"""
Configuration settings for the Rosetta fetcher.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

from rosetta_fetcher.retry.policy import RetryPolicy


class Settings(BaseSettings):
    """Fetcher settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "rosetta-fetcher"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Rosetta Server ===
    SERVER_URL: str = "http://localhost:8080"
    HTTP_TIMEOUT: float = 10.0  # seconds, per request
    MAX_CONNECTIONS: int = 16  # httpx connection pool size

    # === Retry & Backoff ===
    MAX_RETRIES: int = 10
    RETRY_ELAPSED_TIME: float = 60.0  # seconds, per logical request
    RETRY_INITIAL_DELAY: float = 0.5
    RETRY_BACKOFF_MULTIPLIER: float = 2.0
    RETRY_JITTER: float = 0.5  # fraction of the computed delay
    RETRY_MAX_DELAY: float = 10.0

    # === Concurrency ===
    BLOCK_CONCURRENCY: int = 8  # parallel block fetches in a range
    TRANSACTION_CONCURRENCY: int = 8  # parallel other-transaction fetches per block

    # === Rate Limiting ===
    RATE_LIMIT_PER_SECOND: float = 0.0  # 0 disables the limiter
    RATE_LIMIT_BURST: int = 10

    # === Primary Network Selection ===
    # Both must be set to pin a network; otherwise the first listed network wins
    PRIMARY_BLOCKCHAIN: Optional[str] = None
    PRIMARY_NETWORK: Optional[str] = None

    def retry_policy(self) -> RetryPolicy:
        """Build the RetryPolicy described by these settings."""
        return RetryPolicy(
            max_attempts=self.MAX_RETRIES,
            max_elapsed=self.RETRY_ELAPSED_TIME,
            initial_delay=self.RETRY_INITIAL_DELAY,
            multiplier=self.RETRY_BACKOFF_MULTIPLIER,
            jitter=self.RETRY_JITTER,
            max_delay=self.RETRY_MAX_DELAY,
        )

    def preferred_network(self) -> tuple[str, str] | None:
        if self.PRIMARY_BLOCKCHAIN and self.PRIMARY_NETWORK:
            return (self.PRIMARY_BLOCKCHAIN, self.PRIMARY_NETWORK)
        return None


# Global settings instance
settings = Settings()
