"""Domain models — frozen dataclasses for reader configuration and results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic

from stdin_nonblocking.domain.enums import ResultSource
from stdin_nonblocking.domain.types import UnitT

DEFAULT_SETTLE_DELAY_SECONDS = 0.05
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_THREAD_NAME = "stdin-reader"


@dataclass(frozen=True)
class ReaderConfig:
    """Tuning knobs for the background reader and the bounded-wait façade.

    ``chunk_size`` of None selects the whole-buffer binary strategy: the
    worker reads to end-of-stream once and emits a single unit.
    """

    settle_delay_seconds: float = DEFAULT_SETTLE_DELAY_SECONDS
    chunk_size: int | None = DEFAULT_CHUNK_SIZE
    thread_name: str = DEFAULT_THREAD_NAME

    def __post_init__(self) -> None:
        if self.settle_delay_seconds < 0:
            raise ValueError(f"settle_delay_seconds must be non-negative, got {self.settle_delay_seconds}")
        if self.chunk_size is not None and self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if not self.thread_name:
            raise ValueError("thread_name must not be empty")


@dataclass(frozen=True)
class ReadResult(Generic[UnitT]):
    """A façade result tagged with its origin.

    ``value`` is None only when ``source`` is ``ResultSource.NONE``.
    """

    value: UnitT | None
    source: ResultSource

    def __post_init__(self) -> None:
        if (self.value is None) != (self.source is ResultSource.NONE):
            raise ValueError(f"value {self.value!r} is inconsistent with source {self.source.value}")

    @property
    def from_input(self) -> bool:
        """True when the value was read from the input source."""
        return self.source is ResultSource.INPUT
