"""Tests for BatchBuffer ordering and flush triggers."""

import asyncio
from unittest.mock import MagicMock

import pytest
from hypothesis import given

from remote_logger import LogEntry
from remote_logger.buffer import BatchBuffer
from tests.strategies import buffer_sizes, log_calls


def make_entry(message: str) -> LogEntry:
    return LogEntry.create("info", message)


class TestBatchBufferOrdering:
    """FIFO behaviour of append/drain."""

    @given(log_calls, buffer_sizes)
    def test_drain_preserves_append_order(self, calls, size):
        drained: list[LogEntry] = []
        buffer: BatchBuffer

        def on_flush():
            drained.extend(buffer.drain_for_flush())

        buffer = BatchBuffer(buffer_size=size, flush_interval=60.0, on_flush_requested=on_flush)
        entries = [LogEntry.create(level, message) for level, message in calls]
        for entry in entries:
            buffer.append(entry)
        drained.extend(buffer.drain_for_flush())

        assert drained == entries

    def test_drain_empties_buffer(self):
        buffer = BatchBuffer(buffer_size=10, flush_interval=60.0, on_flush_requested=MagicMock())
        buffer.append(make_entry("a"))
        buffer.append(make_entry("b"))

        batch = buffer.drain_for_flush()

        assert [e.message for e in batch] == ["a", "b"]
        assert len(buffer) == 0

    def test_drain_on_empty_buffer_is_noop(self):
        buffer = BatchBuffer(buffer_size=10, flush_interval=60.0, on_flush_requested=MagicMock())
        assert buffer.drain_for_flush() == []


class TestBatchBufferTriggers:
    """Size threshold and timer policy."""

    def test_threshold_requests_flush_synchronously(self):
        on_flush = MagicMock()
        buffer = BatchBuffer(buffer_size=3, flush_interval=60.0, on_flush_requested=on_flush)

        buffer.append(make_entry("1"))
        buffer.append(make_entry("2"))
        on_flush.assert_not_called()

        buffer.append(make_entry("3"))
        on_flush.assert_called_once_with()

    def test_no_timer_without_running_loop(self):
        buffer = BatchBuffer(buffer_size=3, flush_interval=60.0, on_flush_requested=MagicMock())
        buffer.append(make_entry("1"))
        assert buffer.timer_pending is False
        assert len(buffer) == 1

    @pytest.mark.asyncio
    async def test_single_timer_is_armed(self):
        buffer = BatchBuffer(buffer_size=10, flush_interval=60.0, on_flush_requested=MagicMock())

        buffer.append(make_entry("1"))
        first = buffer._timer
        buffer.append(make_entry("2"))
        buffer.append(make_entry("3"))

        assert buffer.timer_pending is True
        assert buffer._timer is first
        buffer.cancel_timer()

    @pytest.mark.asyncio
    async def test_timer_requests_flush(self):
        on_flush = MagicMock()
        buffer = BatchBuffer(buffer_size=10, flush_interval=0.01, on_flush_requested=on_flush)

        buffer.append(make_entry("1"))
        await asyncio.sleep(0.05)

        on_flush.assert_called_once_with()
        assert buffer.timer_pending is False

    @pytest.mark.asyncio
    async def test_drain_cancels_timer(self):
        on_flush = MagicMock()
        buffer = BatchBuffer(buffer_size=10, flush_interval=0.01, on_flush_requested=on_flush)

        buffer.append(make_entry("1"))
        buffer.drain_for_flush()
        await asyncio.sleep(0.05)

        assert buffer.timer_pending is False
        on_flush.assert_not_called()

    @pytest.mark.asyncio
    async def test_timer_rearms_after_firing(self):
        on_flush = MagicMock()
        buffer = BatchBuffer(buffer_size=10, flush_interval=0.01, on_flush_requested=on_flush)

        buffer.append(make_entry("1"))
        await asyncio.sleep(0.05)
        buffer.append(make_entry("2"))

        assert buffer.timer_pending is True
        buffer.cancel_timer()


class TestBatchBufferCap:
    """Optional drop-oldest cap."""

    def test_unbounded_by_default(self):
        buffer = BatchBuffer(buffer_size=1000, flush_interval=60.0, on_flush_requested=MagicMock())
        for i in range(500):
            buffer.append(make_entry(str(i)))
        assert len(buffer) == 500
        assert buffer.dropped_count == 0

    def test_drops_oldest_when_full(self):
        # Flush requests are ignored, as when waiting for a token
        buffer = BatchBuffer(buffer_size=2, flush_interval=60.0, on_flush_requested=MagicMock(), max_items=3)
        for message in "abcde":
            buffer.append(make_entry(message))

        assert [e.message for e in buffer.drain_for_flush()] == ["c", "d", "e"]
        assert buffer.dropped_count == 2
