"""Bounded-concurrency async mapping"""

import asyncio
from typing import Any, Awaitable, Callable, List, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def gather_or_cancel(*aws: Awaitable[Any]) -> List[Any]:
    """
    Like asyncio.gather, but the first failure cancels the siblings still running.

    Cancelled siblings are awaited before the exception propagates, so no task
    outlives the call and no sibling exception goes unretrieved.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def map_with_concurrency(
    items: Sequence[T],
    concurrency: int,
    mapper: Callable[[T, int], Awaitable[R]],
) -> List[R]:
    """
    Map an async function over items with at most `concurrency` calls in flight.

    Results keep input order regardless of completion order. min(concurrency, len(items))
    workers each claim the next unclaimed index; the claim and the increment happen with
    no await in between, so no two workers can take the same index.

    If any mapper call raises, the remaining workers are cancelled and the exception
    propagates unchanged.
    """
    if not items:
        return []

    limit = max(1, concurrency)
    results: List[R] = [None] * len(items)  # type: ignore[list-item]
    next_index = 0

    async def worker() -> None:
        nonlocal next_index
        while True:
            index = next_index
            next_index += 1
            if index >= len(items):
                return
            results[index] = await mapper(items[index], index)

    await gather_or_cancel(*(worker() for _ in range(min(limit, len(items)))))
    return results
