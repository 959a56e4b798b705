"""Shared test fixtures for the stdin reader test suite."""

from __future__ import annotations

import io
import os
from collections.abc import Callable, Iterator
from typing import BinaryIO

import pytest

from stdin_nonblocking.domain.models import ReaderConfig


@pytest.fixture
def pipe() -> Iterator[tuple[BinaryIO, BinaryIO]]:
    """A real OS pipe as (read_end, write_end) binary file objects.

    The write end is closed first on teardown so a worker blocked on the
    read end sees EOF and releases the reader before it is closed.
    """
    read_fd, write_fd = os.pipe()
    reader = os.fdopen(read_fd, "rb")
    writer = os.fdopen(write_fd, "wb", buffering=0)
    yield reader, writer
    if not writer.closed:
        writer.close()
    reader.close()


@pytest.fixture
def bytes_source() -> Callable[[bytes], io.BufferedReader]:
    """Factory for an in-memory, already-complete binary input source."""

    def _make(data: bytes) -> io.BufferedReader:
        return io.BufferedReader(io.BytesIO(data))

    return _make


@pytest.fixture
def redirected() -> Callable[..., bool]:
    """Terminal probe that always reports redirected (non-interactive) input."""

    def _probe(source: object = None) -> bool:
        return False

    return _probe


@pytest.fixture
def interactive() -> Callable[..., bool]:
    """Terminal probe that always reports an interactive terminal."""

    def _probe(source: object = None) -> bool:
        return True

    return _probe


@pytest.fixture
def settled_config() -> ReaderConfig:
    """Reader config with a settle delay generous enough for in-memory sources."""
    return ReaderConfig(settle_delay_seconds=0.2)
