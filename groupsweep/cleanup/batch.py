"""Batch scheduler for concurrent deletions.

Processes items in fixed-size batches. Every item in a batch runs concurrently,
and the next batch starts only after the whole batch has settled, so at most
batch_size requests are outstanding at any time.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterator, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most size items, in order."""
    if size < 1:
        raise ValueError("batch_size must be at least 1")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


async def process_in_batches(
    items: Sequence[T],
    op: Callable[[T], Awaitable[R]],
    batch_size: int,
) -> list[R]:
    """Run op over items, batch_size items at a time.

    If any item in a batch fails, the remaining items in that batch still run
    to completion. The first failure (in input order) is then raised unchanged
    and later batches are not started.

    Args:
        items: Items to process (may be empty)
        op: Async action applied to each item
        batch_size: Maximum number of concurrent actions

    Returns:
        Results of op, in input order

    Raises:
        ValueError: If batch_size is less than 1
        Exception: The first failure of the first batch that had one
    """
    batches = list(chunked(items, batch_size))
    results: list[R] = []

    if not batches:
        logger.debug("Nothing to process")
        return results

    logger.debug(f"Processing {len(items)} item(s) in {len(batches)} batch(es) of up to {batch_size}")

    for batch_num, batch in enumerate(batches, start=1):
        logger.debug(f"Starting batch {batch_num}/{len(batches)}: {len(batch)} item(s)")

        outcomes = await asyncio.gather(*(op(item) for item in batch), return_exceptions=True)

        errors = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
        if errors:
            for extra in errors[1:]:
                logger.error(f"Additional failure in batch {batch_num}: {extra}")
            logger.error(f"Batch {batch_num} had {len(errors)} failure(s); skipping remaining batches")
            raise errors[0]

        results.extend(outcomes)  # type: ignore[arg-type]
        logger.debug(f"Batch {batch_num} complete")

    return results
