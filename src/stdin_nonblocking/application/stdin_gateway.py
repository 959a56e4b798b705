"""StdinGateway — poll, bounded-wait and blocking access to stdin with fallbacks."""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import TYPE_CHECKING

from stdin_nonblocking.domain.enums import ReadMode, ResultSource
from stdin_nonblocking.domain.models import ReaderConfig, ReadResult
from stdin_nonblocking.infrastructure.adapters.background_reader import StdinStream, spawn_stream
from stdin_nonblocking.infrastructure.adapters.terminal_probe import is_interactive

if TYPE_CHECKING:
    from stdin_nonblocking.domain.ports import InputSource, TerminalProbe
    from stdin_nonblocking.domain.types import InputUnit, UnitT

logger = logging.getLogger(__name__)


class StdinGateway:
    """Consumer-facing access patterns layered over one background reader per call.

    - ``stream`` hands out the raw stream for callers that poll it themselves.
    - ``read_*_or_default`` waits ``settle_delay_seconds`` once, then takes
      whatever has arrived. Blank input counts as no input.
    - ``read_*_blocking_or_default`` waits for the first unit or end-of-stream.
      Binary blocking reads use the whole-buffer strategy, so the first unit
      is all of stdin.

    Every pattern returns the fallback at once, without reading or sleeping,
    when stdin is an interactive terminal. A fallback of None yields None,
    which keeps "no input" apart from any real value.
    """

    def __init__(
        self,
        source: InputSource | None = None,
        config: ReaderConfig | None = None,
        probe: TerminalProbe = is_interactive,
    ) -> None:
        self._source = source
        self._config = config or ReaderConfig()
        self._probe = probe

    def stream(self, mode: ReadMode = ReadMode.TEXT) -> StdinStream:
        """Start a background reader and return its consumer handle."""
        return spawn_stream(mode, source=self._source, config=self._config, probe=self._probe)

    def read_or_default(self, default: str | None = None) -> str | None:
        """Bounded read of text lines joined with newlines, or *default*."""
        return self.read_result(default).value

    def read_bytes_or_default(self, default: bytes | None = None) -> bytes | None:
        """Bounded read of raw bytes, or *default*."""
        return self.read_bytes_result(default).value

    def read_blocking_or_default(self, default: str | None = None) -> str | None:
        """Block for the first line of redirected input, or *default* on empty input."""
        return self.read_result(default, blocking=True).value

    def read_bytes_blocking_or_default(self, default: bytes | None = None) -> bytes | None:
        """Block until all redirected bytes are read, or *default* on empty input."""
        return self.read_bytes_result(default, blocking=True).value

    def read_result(self, default: str | None = None, *, blocking: bool = False) -> ReadResult[str]:
        """Text read tagged with whether the value came from input or the fallback."""
        if blocking:
            return _resolve(self._first_unit(ReadMode.TEXT), default, blank_is_absent=False)
        units = self._settle_and_drain(ReadMode.TEXT)
        return _resolve("\n".join(units) if units else None, default, blank_is_absent=True)

    def read_bytes_result(self, default: bytes | None = None, *, blocking: bool = False) -> ReadResult[bytes]:
        """Binary read tagged with whether the value came from input or the fallback."""
        if blocking:
            return _resolve(self._first_unit(ReadMode.BINARY), default, blank_is_absent=False)
        units = self._settle_and_drain(ReadMode.BINARY)
        return _resolve(b"".join(units) if units else None, default, blank_is_absent=True)

    def _settle_and_drain(self, mode: ReadMode) -> list[InputUnit]:
        with self.stream(mode) as stream:
            # Interactive or detached stdin: closed before any wait.
            if stream.closed:
                return []
            time.sleep(self._config.settle_delay_seconds)
            units = stream.drain()
        logger.debug("Bounded %s read drained %d unit(s)", mode.value, len(units))
        return units

    def _first_unit(self, mode: ReadMode) -> InputUnit | None:
        config = self._config
        if mode is ReadMode.BINARY:
            config = dataclasses.replace(config, chunk_size=None)
        with spawn_stream(mode, source=self._source, config=config, probe=self._probe) as stream:
            return stream.next()


def _resolve(value: UnitT | None, default: UnitT | None, *, blank_is_absent: bool) -> ReadResult[UnitT]:
    """Apply the fallback policy to what was read."""
    if value is not None and not (blank_is_absent and not value.strip()):
        return ReadResult(value, ResultSource.INPUT)
    if default is None:
        logger.debug("No stdin input and no fallback")
        return ReadResult(None, ResultSource.NONE)
    logger.debug("No usable stdin input — using fallback")
    return ReadResult(default, ResultSource.FALLBACK)


def read_or_default(default: str | None = None) -> str | None:
    """Bounded-wait read of ``sys.stdin`` as text, or *default*."""
    return StdinGateway().read_or_default(default)


def read_bytes_or_default(default: bytes | None = None) -> bytes | None:
    """Bounded-wait read of ``sys.stdin`` as raw bytes, or *default*."""
    return StdinGateway().read_bytes_or_default(default)


def read_blocking_or_default(default: str | None = None) -> str | None:
    """First line of redirected ``sys.stdin``, or *default*."""
    return StdinGateway().read_blocking_or_default(default)


def read_bytes_blocking_or_default(default: bytes | None = None) -> bytes | None:
    """All of redirected ``sys.stdin`` as bytes, or *default*."""
    return StdinGateway().read_bytes_blocking_or_default(default)
