"""Tests for AsyncStdinStream — asyncio hand-off, timeouts, EOF, close."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from stdin_nonblocking.application.async_bridge import AsyncStdinStream, open_async_stream
from stdin_nonblocking.domain.enums import ReadMode
from stdin_nonblocking.domain.models import ReaderConfig
from stdin_nonblocking.infrastructure.adapters.background_reader import StdinStream, spawn_stream

WAIT = 2.0


class TestAsyncIteration:
    @pytest.mark.asyncio
    async def test_yields_lines_in_order(self, bytes_source, redirected) -> None:
        reader = open_async_stream(ReadMode.TEXT, source=bytes_source(b"a\nb\nc\n"), probe=redirected)
        assert [line async for line in reader] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_binary_fidelity(self, bytes_source, redirected) -> None:
        reader = open_async_stream(
            source=bytes_source(b"\xde\xad\xbe\xef"), config=ReaderConfig(chunk_size=1), probe=redirected
        )
        chunks = [chunk async for chunk in reader]
        assert chunks == [b"\xde", b"\xad", b"\xbe", b"\xef"]

    @pytest.mark.asyncio
    async def test_small_buffer_applies_back_pressure(self, bytes_source, redirected) -> None:
        """A queue of one still delivers every unit in order."""
        data = b"".join(f"{i}\n".encode() for i in range(50))
        reader = open_async_stream(ReadMode.TEXT, source=bytes_source(data), probe=redirected, maxsize=1)

        lines = []
        async for line in reader:
            lines.append(line)
            await asyncio.sleep(0)

        assert lines == [str(i) for i in range(50)]

    @pytest.mark.asyncio
    async def test_interactive_yields_nothing(self, interactive) -> None:
        reader = open_async_stream(ReadMode.BINARY, probe=interactive)
        assert [chunk async for chunk in reader] == []
        assert reader.mode is ReadMode.BINARY


class TestRead:
    @pytest.mark.asyncio
    async def test_streams_before_eof(self, pipe, redirected) -> None:
        reader_end, writer = pipe
        reader = AsyncStdinStream(spawn_stream(ReadMode.BINARY, source=reader_end, probe=redirected))

        writer.write(b"chunk")
        assert await reader.read(timeout=WAIT) == b"chunk"

        writer.close()
        assert await reader.read(timeout=WAIT) is None

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self, pipe, redirected) -> None:
        reader_end, _writer = pipe
        reader = AsyncStdinStream(spawn_stream(ReadMode.TEXT, source=reader_end, probe=redirected))

        assert await reader.read(timeout=0.05) is None
        await reader.aclose()

    @pytest.mark.asyncio
    async def test_read_after_eof_returns_none(self, bytes_source, redirected) -> None:
        reader = open_async_stream(ReadMode.TEXT, source=bytes_source(b"x\n"), probe=redirected)
        assert await reader.read(timeout=WAIT) == "x"
        assert await reader.read(timeout=WAIT) is None
        assert await reader.read(timeout=WAIT) is None


class TestClose:
    @pytest.mark.asyncio
    async def test_aclose_closes_underlying_stream(self, pipe, redirected) -> None:
        reader_end, _writer = pipe
        stream = spawn_stream(ReadMode.TEXT, source=reader_end, probe=redirected)

        async with AsyncStdinStream(stream) as reader:
            pass

        assert stream.closed is True
        assert await reader.read() is None

    @pytest.mark.asyncio
    async def test_aclose_wakes_pending_read(self, pipe, redirected) -> None:
        """A read waiting on a silent pipe returns None once the stream is closed."""
        reader_end, _writer = pipe
        reader = AsyncStdinStream(spawn_stream(ReadMode.TEXT, source=reader_end, probe=redirected))
        pending = asyncio.ensure_future(reader.read())
        await asyncio.sleep(0.05)

        await reader.aclose()

        assert await asyncio.wait_for(pending, WAIT) is None
        await asyncio.to_thread(reader._forwarder.join, WAIT)
        assert not reader._forwarder.is_alive()

    @pytest.mark.asyncio
    async def test_forwarder_stops_when_queue_full_at_close(self, pipe, redirected) -> None:
        reader_end, writer = pipe
        reader = AsyncStdinStream(spawn_stream(ReadMode.TEXT, source=reader_end, probe=redirected), maxsize=1)
        writer.write(b"a\nb\nc\n")
        await asyncio.sleep(0.2)

        await reader.aclose()
        writer.close()

        await asyncio.to_thread(reader._forwarder.join, WAIT)
        assert not reader._forwarder.is_alive()
        assert await reader.read() is None

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self, bytes_source, redirected) -> None:
        reader = open_async_stream(ReadMode.TEXT, source=bytes_source(b"x\n"), probe=redirected)
        await reader.aclose()
        await reader.aclose()
        assert await reader.read(timeout=WAIT) is None

    @pytest.mark.asyncio
    async def test_invalid_maxsize(self) -> None:
        with pytest.raises(ValueError, match="maxsize"):
            AsyncStdinStream(StdinStream.already_closed(ReadMode.TEXT), maxsize=0)


class TestRequiresRunningLoop:
    def test_outside_loop_raises(self) -> None:
        with pytest.raises(RuntimeError):
            AsyncStdinStream(StdinStream.already_closed(ReadMode.TEXT))


class TestLoopGone:
    def test_forwarder_exits_after_loop_closed(self, pipe, redirected) -> None:
        reader_end, writer = pipe
        stream = spawn_stream(ReadMode.TEXT, source=reader_end, probe=redirected)

        async def _open() -> AsyncStdinStream:
            return AsyncStdinStream(stream)

        loop = asyncio.new_event_loop()
        reader = loop.run_until_complete(_open())
        loop.close()

        writer.write(b"late\n")
        reader._forwarder.join(WAIT)

        assert not reader._forwarder.is_alive()
        assert stream.closed is True

    @pytest.mark.asyncio
    async def test_unscheduled_put_is_closed(self) -> None:
        """A put the loop refuses is closed rather than left un-awaited."""
        reader = AsyncStdinStream(StdinStream.already_closed(ReadMode.TEXT))
        await asyncio.to_thread(reader._forwarder.join, WAIT)
        refused = []

        def _refuse(coro, loop):
            refused.append(coro)
            raise RuntimeError("loop shutting down")

        with patch("asyncio.run_coroutine_threadsafe", side_effect=_refuse):
            assert reader._hand_off("x") is False

        assert refused[0].cr_frame is None
