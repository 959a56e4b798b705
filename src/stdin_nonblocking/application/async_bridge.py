"""AsyncStdinStream — asyncio hand-off for a background stdin reader."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import TYPE_CHECKING

from stdin_nonblocking.domain.enums import ReadMode
from stdin_nonblocking.domain.errors import StreamClosedError
from stdin_nonblocking.infrastructure.adapters.background_reader import StdinStream, spawn_stream
from stdin_nonblocking.infrastructure.adapters.terminal_probe import is_interactive

if TYPE_CHECKING:
    from stdin_nonblocking.domain.models import ReaderConfig
    from stdin_nonblocking.domain.ports import AsyncUnitReader, InputSource, TerminalProbe
    from stdin_nonblocking.domain.types import InputUnit

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 10

_END = object()


class AsyncStdinStream:
    """Expose a StdinStream to a running event loop.

    A forwarder thread pulls units off the blocking stream and puts them on a
    bounded ``asyncio.Queue`` through ``run_coroutine_threadsafe``, so a slow
    consumer applies back-pressure to the forwarder. Supports ``async for``
    and a ``read(timeout)`` that returns None on timeout or end-of-stream.

    Must be constructed from inside a running event loop.
    """

    if TYPE_CHECKING:
        _protocol_check: AsyncUnitReader

    def __init__(self, stream: StdinStream, maxsize: int = DEFAULT_BUFFER_SIZE) -> None:
        if maxsize < 1:
            raise ValueError(f"maxsize must be >= 1, got {maxsize}")
        self._stream = stream
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize)
        self._done = False
        self._pending: concurrent.futures.Future[None] | None = None
        self._forwarder = threading.Thread(target=self._forward, name="stdin-forwarder", daemon=True)
        self._forwarder.start()

    @property
    def mode(self) -> ReadMode:
        return self._stream.mode

    async def read(self, timeout: float | None = None) -> InputUnit | None:
        """Return the next unit, or None on timeout or end-of-stream."""
        if self._done:
            return None
        try:
            item = await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except TimeoutError:
            return None
        if item is _END:
            self._done = True
            return None
        return item  # type: ignore[return-value]

    async def aclose(self) -> None:
        """Drop the underlying stream; pending and future reads return None."""
        self._done = True
        self._stream.close()
        pending = self._pending
        if pending is not None:
            pending.cancel()
        # Replace whatever is queued with the end marker so waiting reads wake.
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_END)

    def __aiter__(self) -> AsyncStdinStream:
        return self

    async def __anext__(self) -> InputUnit:
        unit = await self.read()
        if unit is None:
            raise StopAsyncIteration
        return unit

    async def __aenter__(self) -> AsyncStdinStream:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _forward(self) -> None:
        """Forwarder thread body."""
        try:
            for unit in self._stream:
                if not self._hand_off(unit):
                    return
        except StreamClosedError:
            logger.debug("Stream closed by consumer — stopping forwarder")
        self._hand_off(_END)

    def _hand_off(self, item: object) -> bool:
        """Put *item* on the queue, waiting for room. False once forwarding must stop."""
        if self._done:
            return False
        if self._loop.is_closed():
            logger.debug("Event loop closed — closing stdin stream")
            self._stream.close()
            return False

        put = self._queue.put(item)
        try:
            future = asyncio.run_coroutine_threadsafe(put, self._loop)
        except RuntimeError:
            put.close()
            logger.debug("Event loop gone — closing stdin stream")
            self._stream.close()
            return False

        self._pending = future
        # aclose may have run between the check above and the assignment.
        if self._done:
            future.cancel()
        try:
            future.result()
        except (RuntimeError, concurrent.futures.CancelledError):
            if not self._done:
                logger.debug("Event loop gone — closing stdin stream")
            self._stream.close()
            return False
        finally:
            self._pending = None
        return True


def open_async_stream(
    mode: ReadMode = ReadMode.BINARY,
    *,
    source: InputSource | None = None,
    config: ReaderConfig | None = None,
    probe: TerminalProbe = is_interactive,
    maxsize: int = DEFAULT_BUFFER_SIZE,
) -> AsyncStdinStream:
    """Spawn a background reader and wrap it for the running event loop."""
    stream = spawn_stream(mode, source=source, config=config, probe=probe)
    return AsyncStdinStream(stream, maxsize=maxsize)
