"""Retry and backoff policy for managed-store side effects."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and exponential backoff schedule.

    ``max_attempts`` counts the first try. The delay before retry ``n`` is
    ``initial_delay * multiplier ** (n - 1)``, capped at ``max_delay``.
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 5.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1.")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be >= 0.")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1.")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay.")

    def should_retry(self, attempt: int) -> bool:
        """Whether another attempt is permitted after ``attempt`` attempts."""
        return attempt < self.max_attempts

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        if attempt < 1:
            raise ValueError("attempt must be >= 1.")
        return min(self.initial_delay * self.multiplier ** (attempt - 1), self.max_delay)
