"""
Batch buffer: ordered accumulation of entries plus the flush-trigger policy.

A flush is requested synchronously when the buffer reaches ``buffer_size``;
otherwise a single timer is armed to request one after ``flush_interval``.
"""

import asyncio
import logging
from collections import deque
from collections.abc import Callable

from .entry import LogEntry

logger = logging.getLogger(__name__)


class BatchBuffer:
    """FIFO of pending entries with size and time flush triggers."""

    def __init__(
        self,
        buffer_size: int,
        flush_interval: float,
        on_flush_requested: Callable[[], None],
        max_items: int | None = None,
    ):
        """
        Args:
            buffer_size: Entries that trigger an immediate flush request
            flush_interval: Seconds before a timed flush request
            on_flush_requested: Called (synchronously) whenever a flush is due
            max_items: Optional cap; the oldest entry is dropped when full
        """
        self.buffer_size = buffer_size
        self.flush_interval = flush_interval
        self.max_items = max_items
        self.dropped_count = 0
        self._on_flush_requested = on_flush_requested
        self._entries: deque[LogEntry] = deque()
        self._timer: asyncio.TimerHandle | None = None

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None

    def append(self, entry: LogEntry):
        """Add an entry at the tail and request a flush if one is due."""
        if self.max_items is not None and len(self._entries) >= self.max_items:
            self._entries.popleft()
            self.dropped_count += 1

        self._entries.append(entry)

        if len(self._entries) >= self.buffer_size:
            self._on_flush_requested()
        elif self._timer is None:
            self._arm_timer()

    def drain_for_flush(self) -> list[LogEntry]:
        """
        Take every buffered entry and leave an empty buffer behind.

        Cancels the pending timer. On an empty buffer this returns an empty
        list and changes nothing.
        """
        if not self._entries:
            return []
        batch, self._entries = self._entries, deque()
        self.cancel_timer()
        return list(batch)

    def cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _arm_timer(self):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to schedule on; the next in-loop trigger picks the entries up
            logger.debug("[RemoteLogger] No running event loop, flush timer not armed")
            return
        self._timer = loop.call_later(self.flush_interval, self._on_timer)

    def _on_timer(self):
        self._timer = None
        self._on_flush_requested()
