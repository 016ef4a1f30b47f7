import asyncio
from typing import Any, Callable

_CLOSED = object()


class AuthEventChannel:
    """
    Auth events for one subscriber.

    Consume with `async for event in channel` and call `task_done()` once each
    event is handled; `join()` then waits for everything published so far.
    `close()` ends iteration and detaches the channel from its publisher.
    """

    def __init__(self, on_close: Callable[["AuthEventChannel"], Any] | None = None):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._on_close = on_close

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event) -> None:
        if not self._closed:
            self._queue.put_nowait(event)

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        await self._queue.join()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        if self._on_close is not None:
            self._on_close(self)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.task_done()
            raise StopAsyncIteration
        return item
