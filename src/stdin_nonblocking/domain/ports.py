"""Domain ports — Protocol interfaces for the input source and its consumers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from stdin_nonblocking.domain.enums import ReadMode
from stdin_nonblocking.domain.types import InputUnit


@runtime_checkable
class InputSource(Protocol):
    """A readable byte source such as ``sys.stdin`` or ``sys.stdin.buffer``."""

    def isatty(self) -> bool: ...

    def readline(self, size: int = -1, /) -> bytes | str: ...

    def read(self, size: int = -1, /) -> bytes | str: ...


@runtime_checkable
class TerminalProbe(Protocol):
    """Answer whether an input source is attached to an interactive device."""

    def __call__(self, source: InputSource | None = None) -> bool: ...


@runtime_checkable
class UnitStream(Protocol):
    """Consumer end of a background reader channel."""

    @property
    def mode(self) -> ReadMode: ...

    @property
    def closed(self) -> bool: ...

    def try_next(self) -> InputUnit | None: ...

    def next(self, timeout: float | None = None) -> InputUnit | None: ...  # noqa: A003

    def drain(self) -> list[InputUnit]: ...

    def close(self) -> None: ...


@runtime_checkable
class AsyncUnitReader(Protocol):
    """Awaitable access to a unit stream for asyncio callers."""

    async def read(self, timeout: float | None = None) -> InputUnit | None: ...

    async def aclose(self) -> None: ...
