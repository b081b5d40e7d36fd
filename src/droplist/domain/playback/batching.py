"""
Batched background work.

Runs an async worker over items a few at a time, pausing between
batches. Batch size is the only backpressure: it caps how many audio or
image resources are materialized at once.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Iterable, Optional, TypeVar, Union

from loguru import logger

T = TypeVar("T")
R = TypeVar("R")

BatchCallback = Callable[[list[tuple[T, R]]], Union[None, Awaitable[None]]]


async def run_in_batches(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int = 3,
    delay: float = 0.1,
    on_batch: Optional[BatchCallback] = None,
) -> list[tuple[T, R]]:
    """
    Run `worker` over items in concurrent batches.

    A worker that raises is logged and left out of the results; it never
    aborts its batch or the remaining batches.

    Args:
        items: Work items
        worker: Async function applied to each item
        batch_size: Items processed concurrently
        delay: Seconds to wait between batches
        on_batch: Called with (item, result) pairs after each batch completes;
            awaited before the next batch when it returns an awaitable

    Returns:
        All successful (item, result) pairs, in item order
    """
    pending = list(items)
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    completed: list[tuple[T, R]] = []
    for start in range(0, len(pending), batch_size):
        batch = pending[start : start + batch_size]
        results = await asyncio.gather(*(worker(item) for item in batch), return_exceptions=True)

        batch_pairs = []
        for item, result in zip(batch, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.opt(exception=result).warning(f"Background task failed for {item!r}")
                continue
            batch_pairs.append((item, result))

        completed.extend(batch_pairs)
        if on_batch is not None:
            outcome = on_batch(batch_pairs)
            if inspect.isawaitable(outcome):
                await outcome

        if delay > 0 and start + batch_size < len(pending):
            await asyncio.sleep(delay)

    return completed
