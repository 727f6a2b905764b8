"""Delete result model.

Typed outcome of a single delete attempt, used by the retry executor to decide
whether to retry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DeleteStatus(Enum):
    """Outcome of one delete attempt."""

    SUCCEEDED = "succeeded"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


@dataclass
class DeleteResult:
    """Result of a delete attempt.

    Attributes:
        status: Attempt outcome
        error: Provider error for rate_limited/failed outcomes
        attempts: Number of attempts made so far (filled in by the retry executor)
    """

    status: DeleteStatus
    error: Optional[Exception] = None
    attempts: int = 1

    @classmethod
    def success(cls) -> DeleteResult:
        return cls(status=DeleteStatus.SUCCEEDED)

    @classmethod
    def rate_limited(cls, error: Exception) -> DeleteResult:
        return cls(status=DeleteStatus.RATE_LIMITED, error=error)

    @classmethod
    def failure(cls, error: Exception) -> DeleteResult:
        return cls(status=DeleteStatus.FAILED, error=error)

    @property
    def succeeded(self) -> bool:
        return self.status == DeleteStatus.SUCCEEDED

    def __post_init__(self) -> None:
        if self.status != DeleteStatus.SUCCEEDED and self.error is None:
            raise ValueError(f"{self.status.value} result requires an error")
