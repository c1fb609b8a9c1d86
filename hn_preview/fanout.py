from __future__ import annotations

import asyncio
from typing import Awaitable, Sequence, TypeVar

from hn_preview.errors import FetchError
from hn_preview.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def gather_successful(tasks: Sequence[Awaitable[T]]) -> list[T]:
    """
    Run all tasks concurrently and keep the ones that succeeded.

    Every task is scheduled before any is awaited. Results keep the order
    of `tasks`; entries that raised a FetchError are dropped. Any other
    exception is re-raised.
    """
    if not tasks:
        return []
    results = await asyncio.gather(*tasks, return_exceptions=True)
    survivors: list[T] = []
    for res in results:
        if isinstance(res, FetchError):
            logger.debug("fanout_entry_dropped", path=res.path, error=str(res))
            continue
        if isinstance(res, BaseException):
            raise res
        survivors.append(res)
    return survivors
