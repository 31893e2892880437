"""
Concurrent fan-out helper for retriever sub-searches.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, List, Sequence, TypeVar, Union

T = TypeVar("T")


async def gather_settled(awaitables: Sequence[Awaitable[T]]) -> List[Union[T, BaseException]]:
    """
    Run awaitables concurrently and return each result or exception, in order.

    One failure does not stop the others. If the caller is cancelled, every
    task still running is cancelled before the CancelledError propagates, so
    no embedding or store call outlives the request. A child that was itself
    cancelled re-raises CancelledError.
    """
    tasks = [asyncio.ensure_future(a) for a in awaitables]
    if not tasks:
        return []
    try:
        results = await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        pending = [t for t in tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
    for r in results:
        if isinstance(r, asyncio.CancelledError):
            raise r
    return list(results)
