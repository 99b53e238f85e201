"""
Utility functions for the generation nodes.

These are small helpers that don't fit in other modules.
"""
import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_IMAGE_CONCURRENCY = 4


def resolve_concurrency(value: Optional[str], default: int = DEFAULT_IMAGE_CONCURRENCY) -> int:
    """Parse a concurrency setting. Missing or unparsable -> default; anything below 1 -> 1."""
    if value is None or str(value).strip() == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.warning("invalid_concurrency_setting", value=value, default=default)
        return default
    return max(1, parsed)


def is_blank(text: Optional[str]) -> bool:
    return text is None or not text.strip()


async def gather_in_order(
    factories: Sequence[Callable[[], Awaitable[T]]],
    max_concurrency: int = DEFAULT_IMAGE_CONCURRENCY,
    on_done: Optional[Callable[[int], None]] = None,
) -> List[T]:
    """
    Run awaitables concurrently and return their results by input index.

    At most `max_concurrency` run at once. All-or-nothing: on the first
    failure the remaining tasks are cancelled and that exception is raised
    unchanged, so no partial list ever reaches the caller.

    Args:
        factories: zero-arg callables, each producing one awaitable
        max_concurrency: cap on simultaneous awaitables (values < 1 act as 1)
        on_done: called with the input index each time one finishes successfully
    """
    if not factories:
        return []

    semaphore = asyncio.Semaphore(max(1, max_concurrency))
    results: List[Optional[T]] = [None] * len(factories)

    async def run(index: int) -> None:
        async with semaphore:
            results[index] = await factories[index]()
        if on_done is not None:
            on_done(index)

    tasks = [asyncio.ensure_future(run(i)) for i in range(len(factories))]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    failed = [task for task in tasks if task in done and not task.cancelled() and task.exception()]
    if failed:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        # Mark the other failures as retrieved so asyncio doesn't warn about them
        for task in failed[1:]:
            task.exception()
        raise failed[0].exception()

    return results  # type: ignore[return-value]
