"""BackgroundReader — a worker thread that turns blocking stdin into a pollable stream.

The worker owns the input source exclusively for the lifetime of the
stream. Units travel to the caller over a ``queue.SimpleQueue``; the
caller's ``StdinStream`` handle is the only consumer. Closing (or simply
dropping) the handle sets a flag the worker checks before every push, so
the worker winds down on its next produce attempt rather than immediately.
A consumer already blocked in ``next`` is woken by the close.
"""

from __future__ import annotations

import logging
import queue
import sys
import threading
import weakref
from collections.abc import Iterator
from typing import TYPE_CHECKING

from stdin_nonblocking.domain.enums import ReadMode
from stdin_nonblocking.domain.errors import DecodeError, StreamClosedError
from stdin_nonblocking.domain.models import ReaderConfig
from stdin_nonblocking.infrastructure.adapters.terminal_probe import is_interactive

if TYPE_CHECKING:
    from stdin_nonblocking.domain.ports import InputSource, TerminalProbe, UnitStream
    from stdin_nonblocking.domain.types import InputUnit

logger = logging.getLogger(__name__)

# End-of-stream marker, pushed exactly once by the worker.
_EOF = object()


class _Channel:
    """Producer/consumer hand-off shared by the worker and one StdinStream."""

    def __init__(self) -> None:
        self.units: queue.SimpleQueue[object] = queue.SimpleQueue()
        self.consumer_closed = threading.Event()
        self.error: Exception | None = None
        self.decode_errors = 0

    def push(self, unit: InputUnit) -> bool:
        """Queue a unit. Returns False once the consumer has gone away."""
        if self.consumer_closed.is_set():
            return False
        self.units.put(unit)
        return True

    def finish(self) -> None:
        self.units.put(_EOF)

    def close_consumer(self) -> None:
        """Mark the consumer gone and wake a ``next`` blocked on the queue."""
        self.consumer_closed.set()
        self.units.put(_EOF)


class StdinStream:
    """Consumer handle for one background reader.

    ``try_next`` and ``drain`` never block. ``next`` blocks until a unit
    arrives, the stream ends, or *timeout* elapses. All three return None
    when nothing is available; check ``closed`` to tell "not yet" from
    "never again".
    """

    if TYPE_CHECKING:
        _protocol_check: UnitStream

    def __init__(
        self,
        mode: ReadMode,
        channel: _Channel,
        worker: threading.Thread | None = None,
        *,
        exhausted: bool = False,
    ) -> None:
        self._mode = mode
        self._channel = channel
        self._worker = worker
        self._eof = exhausted
        # Must not reference self, or the handle could never be collected.
        self._finalizer = weakref.finalize(self, channel.close_consumer)

    @classmethod
    def already_closed(cls, mode: ReadMode) -> StdinStream:
        """Return an empty stream that is already closed (no worker)."""
        channel = _Channel()
        channel.finish()
        return cls(mode, channel, exhausted=True)

    @property
    def mode(self) -> ReadMode:
        return self._mode

    @property
    def closed(self) -> bool:
        """True once end-of-stream was observed or the consumer closed the stream."""
        return self._eof or not self._finalizer.alive

    @property
    def error(self) -> Exception | None:
        """The read error that ended the stream, if any."""
        return self._channel.error

    @property
    def decode_errors(self) -> int:
        """Number of text lines skipped because they were not valid UTF-8."""
        return self._channel.decode_errors

    def try_next(self) -> InputUnit | None:
        """Return the next queued unit without blocking, or None (always None once closed)."""
        if self._eof or not self._finalizer.alive:
            return None
        try:
            item = self._channel.units.get_nowait()
        except queue.Empty:
            return None
        return self._accept(item)

    def next(self, timeout: float | None = None) -> InputUnit | None:  # noqa: A003
        """Block until the next unit, end-of-stream, or *timeout*; None unless a unit arrived.

        Raises StreamClosedError if the consumer end was already closed,
        since the worker stops producing at that point. A call that is
        blocked when another thread closes the stream returns None.
        """
        if not self._finalizer.alive:
            raise StreamClosedError(f"{self._mode.value} stream was closed by its consumer")
        if self._eof:
            return None
        try:
            item = self._channel.units.get(timeout=timeout)
        except queue.Empty:
            return None
        return self._accept(item)

    def drain(self) -> list[InputUnit]:
        """Return every unit currently queued, in arrival order."""
        units: list[InputUnit] = []
        while (unit := self.try_next()) is not None:
            units.append(unit)
        return units

    def close(self) -> None:
        """Drop the consumer end. Idempotent."""
        self._finalizer()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker thread to exit. Returns True if it has."""
        if self._worker is None:
            return True
        self._worker.join(timeout)
        return not self._worker.is_alive()

    def _accept(self, item: object) -> InputUnit | None:
        if item is _EOF:
            self._eof = True
            return None
        return item  # type: ignore[return-value]

    def __iter__(self) -> Iterator[InputUnit]:
        while (unit := self.next()) is not None:
            yield unit

    def __enter__(self) -> StdinStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"StdinStream(mode={self._mode.value}, {state})"


def spawn_stream(
    mode: ReadMode = ReadMode.TEXT,
    *,
    source: InputSource | None = None,
    config: ReaderConfig | None = None,
    probe: TerminalProbe = is_interactive,
) -> StdinStream:
    """Start a background reader on *source* (default ``sys.stdin``).

    Interactive sources get an already-closed stream and no worker, so no
    read is ever attempted against them. Otherwise exactly one daemon
    thread is started; it reads lines (TEXT), chunks of
    ``config.chunk_size`` bytes (BINARY), or the whole input at once
    (BINARY with ``chunk_size=None``).

    Text sources are read through their binary ``buffer``. Anything the
    host already pulled into a ``TextIOWrapper`` (for example by an
    earlier ``sys.stdin.readline()``) sits in the wrapper's own buffer and
    is not seen by the worker.
    """
    config = config or ReaderConfig()

    if probe(source):
        logger.debug("stdin is interactive — returning closed %s stream", mode.value)
        return StdinStream.already_closed(mode)

    if source is None:
        source = sys.stdin
    if source is None:
        logger.debug("No stdin attached — returning closed %s stream", mode.value)
        return StdinStream.already_closed(mode)

    channel = _Channel()
    worker = threading.Thread(
        target=_reader_loop,
        args=(channel, getattr(source, "buffer", source), mode, config.chunk_size),
        name=config.thread_name,
        daemon=True,
    )
    stream = StdinStream(mode, channel, worker)
    worker.start()
    logger.debug("Started %s reader thread %s", mode.value, worker.name)
    return stream


def _reader_loop(channel: _Channel, source: InputSource, mode: ReadMode, chunk_size: int | None) -> None:
    """Worker body: pump units until EOF, a read error, or the consumer leaves."""
    try:
        if mode is ReadMode.TEXT:
            _pump_lines(channel, source)
        elif chunk_size is None:
            _pump_whole(channel, source)
        else:
            _pump_chunks(channel, source, chunk_size)
    except (OSError, ValueError) as exc:
        channel.error = exc
        logger.warning("stdin read failed — treating as end-of-stream: %s", exc)
    channel.finish()


def _pump_lines(channel: _Channel, source: InputSource) -> None:
    while raw := source.readline():
        try:
            line = decode_line(raw)
        except DecodeError as exc:
            channel.decode_errors += 1
            logger.warning("Skipping stdin line: %s", exc.message)
            continue
        if not channel.push(line):
            logger.debug("Consumer closed — stopping line reader")
            return


def _pump_chunks(channel: _Channel, source: InputSource, chunk_size: int) -> None:
    # read1 returns whatever is buffered instead of waiting for a full chunk.
    read = getattr(source, "read1", source.read)
    while chunk := read(chunk_size):
        if not channel.push(_as_bytes(chunk)):
            logger.debug("Consumer closed — stopping chunk reader")
            return


def _pump_whole(channel: _Channel, source: InputSource) -> None:
    data = source.read()
    if data and not channel.push(_as_bytes(data)):
        logger.debug("Consumer closed before whole-buffer delivery")


def decode_line(raw: bytes | str) -> str:
    """Strip one trailing line terminator and decode UTF-8 strictly."""
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"invalid UTF-8 at byte {exc.start}: {exc.reason}") from exc
    else:
        text = raw

    if text.endswith("\n"):
        text = text[:-1]
        if text.endswith("\r"):
            text = text[:-1]
    return text


def _as_bytes(data: bytes | str) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else data
