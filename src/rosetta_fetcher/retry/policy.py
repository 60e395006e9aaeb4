"""
Retry policy: attempt/elapsed budget and backoff schedule.
"""

import math
import random
from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class RetryPolicy:
    """
    Immutable retry budget and backoff schedule for one logical request.

    The delay before attempt ``n + 1`` (after ``n`` failures) is
    ``min(max_delay, initial_delay * multiplier ** (n - 1))`` scaled by a
    random factor in ``[1 - jitter, 1 + jitter]`` and clamped to
    ``[0, max_delay]``.

    Attributes:
        max_attempts: Maximum number of attempts (None = unbounded)
        max_elapsed: Maximum wall-clock seconds including the next sleep (None = unbounded)
        initial_delay: Delay after the first failure (seconds)
        multiplier: Growth factor between consecutive delays
        jitter: Relative jitter bound, 0 disables jitter
        max_delay: Cap on any single delay (seconds)
    """

    max_attempts: Optional[int] = 10
    max_elapsed: Optional[float] = 60.0
    initial_delay: float = 0.5
    multiplier: float = 2.0
    jitter: float = 0.5
    max_delay: float = 10.0

    def __post_init__(self) -> None:
        """Validate policy invariants."""
        if self.max_attempts is None and self.max_elapsed is None:
            raise ValueError("at least one of max_attempts or max_elapsed must be set")

        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        if self.max_elapsed is not None and self.max_elapsed < 0:
            raise ValueError("max_elapsed must be >= 0")

        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")

        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")

        if not 0 <= self.jitter <= 1:
            raise ValueError("jitter must be within [0, 1]")

    def backoff(self, failures: int, rng: random.Random | None = None) -> float:
        """
        Delay to wait after ``failures`` consecutive transient failures.

        Args:
            failures: Number of failed attempts so far (>= 1)
            rng: Random source for jitter (module-level random if None)
        """
        delay = self._base_delay(max(failures - 1, 0))

        if self.jitter:
            rng = rng or random
            delay *= rng.uniform(1 - self.jitter, 1 + self.jitter)

        return min(self.max_delay, max(0.0, delay))

    def _base_delay(self, exponent: int) -> float:
        """Un-jittered delay, capped before exponentiation so it never overflows."""
        if self.initial_delay == 0 or self.max_delay == 0:
            return 0.0
        if self.multiplier == 1 or exponent == 0:
            return min(self.max_delay, self.initial_delay)
        # exponent above which initial_delay * multiplier ** exponent >= max_delay
        ceiling = (math.log(self.max_delay) - math.log(self.initial_delay)) / math.log(self.multiplier)
        if exponent >= ceiling:
            return self.max_delay
        return min(self.max_delay, self.initial_delay * self.multiplier ** exponent)

    def exhausted(self, attempts: int, elapsed: float) -> bool:
        """
        Whether the budget forbids another attempt.

        Args:
            attempts: Attempts made so far
            elapsed: Seconds spent so far plus the delay before the next attempt
        """
        if self.max_attempts is not None and attempts >= self.max_attempts:
            return True
        if self.max_elapsed is not None and elapsed > self.max_elapsed:
            return True
        return False
