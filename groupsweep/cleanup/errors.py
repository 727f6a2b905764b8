"""Deletion error hierarchy."""

from __future__ import annotations

from typing import Any, Optional


class DeleteError(Exception):
    """Base class for resource deletion errors.

    Attributes:
        resource: The resource the error relates to (optional)
        error_code: Provider error code (optional)
        attempts: Delete attempts made before the error surfaced (0 if unknown)
    """

    def __init__(
        self, message: str, resource: Any = None, error_code: Optional[str] = None, attempts: int = 0
    ) -> None:
        super().__init__(message)
        self.resource = resource
        self.error_code = error_code
        self.attempts = attempts


class RateLimitedError(DeleteError):
    """The provider throttled the request. Retried with backoff."""


class TerminalDeleteError(DeleteError):
    """A deletion failure that is not retried."""


class RetriesExhaustedError(TerminalDeleteError):
    """The provider kept throttling until the retry budget ran out."""
