"""
Bounded-concurrency worker pool for independent async jobs.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")


async def run_bounded(
    items: Sequence[T],
    limit: int,
    handler: Callable[[T, int], Awaitable[None]],
) -> None:
    """
    Run ``handler(item, index)`` for every item with at most ``limit`` in flight.

    Workers pull the next unclaimed index from a shared cursor, so items are
    claimed in ascending order while completion order is unspecified. The
    claim happens between awaits, which keeps it atomic on the event loop.
    Handlers are expected to deal with their own failures; an exception from
    a handler propagates out of this call.
    """
    if not items:
        return

    concurrency = max(1, min(limit, len(items)))
    cursor = 0

    async def worker() -> None:
        nonlocal cursor
        while True:
            index = cursor
            cursor += 1
            if index >= len(items):
                return
            await handler(items[index], index)

    await asyncio.gather(*(worker() for _ in range(concurrency)))
