import asyncio
from typing import Awaitable, TypeVar

from hr_portal.core.errors import OperationTimeout

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], seconds: float, operation: str) -> T:
    """
    Await `awaitable` for at most `seconds`.

    On expiry the awaited operation is cancelled and OperationTimeout is raised,
    so a late result can never be observed by the caller.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as exc:
        raise OperationTimeout(operation, seconds) from exc
