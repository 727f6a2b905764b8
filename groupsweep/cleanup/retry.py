"""Retry executor for rate-limited deletes.

Runs one asynchronous delete operation and absorbs provider throttling with
exponential backoff. Only rate-limit results are retried; any other failure is
raised on the first attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

from groupsweep.cleanup.errors import DeleteError, RetriesExhaustedError
from groupsweep.models.cleanup_settings import DEFAULT_INITIAL_DELAY_MS, DEFAULT_MAX_RETRIES, CleanupSettings
from groupsweep.models.delete_result import DeleteResult, DeleteStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

DeleteOperation = Callable[[T], Awaitable[DeleteResult]]
Sleeper = Callable[[float], Awaitable[None]]


async def execute_with_retry(
    item: T,
    delete_op: DeleteOperation,
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS,
    *,
    describe: Callable[[T], str] = str,
    sleep: Sleeper = asyncio.sleep,
) -> DeleteResult:
    """Delete an item, retrying while the provider rate limits us.

    The delay starts at initial_delay_ms and doubles after every rate-limited
    attempt. No sleep follows the final attempt.

    Args:
        item: Resource to delete
        delete_op: Async callable performing one delete attempt
        max_retries: Maximum number of attempts
        initial_delay_ms: Delay before the second attempt, in milliseconds
        describe: Produces the display name used in log messages
        sleep: Async sleep taking seconds (injectable for tests)

    Returns:
        The successful DeleteResult, with attempts set

    Raises:
        RetriesExhaustedError: If every attempt was rate limited. The last
            RateLimitedError is attached as __cause__.
        Exception: The result's error for any non rate-limit failure, unchanged
            apart from its attempts count when it is a DeleteError
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    name = describe(item)
    attempts = 0
    delay_ms = initial_delay_ms

    while True:
        logger.info(f"Removing {name}")
        result = await delete_op(item)
        attempts += 1
        result.attempts = attempts

        if result.status == DeleteStatus.SUCCEEDED:
            logger.info(f"Removed {name}")
            return result

        if result.status == DeleteStatus.FAILED:
            logger.error(f"Failed to delete {name}: {result.error}")
            if isinstance(result.error, DeleteError):
                result.error.attempts = attempts
            raise result.error  # type: ignore[misc]

        if attempts >= max_retries:
            logger.error(f"Failed to delete {name} after {max_retries} retries")
            raise RetriesExhaustedError(
                f"Rate limited deleting {name} after {attempts} attempts",
                resource=item,
                error_code=getattr(result.error, "error_code", None),
                attempts=attempts,
            ) from result.error

        logger.warning(f"Rate limit hit while deleting {name}. Retrying in {delay_ms / 1000:g} seconds...")
        await sleep(delay_ms / 1000)
        delay_ms *= 2


class RetryExecutor(Generic[T]):
    """Binds a delete operation to shared cleanup settings.

    Instances are callable, so one can be handed directly to
    process_in_batches as the per-item action.
    """

    def __init__(
        self,
        delete_op: DeleteOperation,
        settings: CleanupSettings,
        describe: Callable[[T], str] = str,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.delete_op = delete_op
        self.settings = settings
        self.describe = describe
        self.sleep = sleep

    async def __call__(self, item: T) -> DeleteResult:
        return await execute_with_retry(
            item,
            self.delete_op,
            max_retries=self.settings.max_retries,
            initial_delay_ms=self.settings.initial_delay_ms,
            describe=self.describe,
            sleep=self.sleep,
        )
