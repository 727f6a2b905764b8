"""Cleanup settings model."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MAX_RETRIES = 5
DEFAULT_INITIAL_DELAY_MS = 2000
DEFAULT_BATCH_SIZE = 4


@dataclass(frozen=True)
class CleanupSettings:
    """Retry and concurrency settings shared by every cleanup phase.

    Attributes:
        max_retries: Maximum delete attempts per resource when rate limited
        initial_delay_ms: Delay before the first retry, doubled after each one
        batch_size: Number of deletes in flight at once
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> bool:
        """Validate settings.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any setting is out of range
        """
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if self.initial_delay_ms < 0:
            raise ValueError("initial_delay_ms cannot be negative")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        return True

    @property
    def worst_case_delay_ms(self) -> int:
        """Total backoff time for a resource that is rate limited on every attempt."""
        return self.initial_delay_ms * (2 ** (self.max_retries - 1) - 1)
