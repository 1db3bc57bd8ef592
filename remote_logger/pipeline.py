"""
Delivery pipeline: gates, performs, and interprets flush attempts.

Delivery is at-most-once. A drained batch is never put back: success,
rejection, transport fault and 401 all end the batch's life. A 401 also
clears the token and schedules a fresh handshake without waiting for it.
"""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any

from .buffer import BatchBuffer
from .entry import LogEntry
from .errors import DeliveryRejected, DeliveryTransportFault, DeliveryUnauthorized
from .session import AuthSession
from .transport import IngestClient

logger = logging.getLogger(__name__)


@dataclass
class DeliveryStats:
    """Counters for monitoring delivery behaviour."""

    sent_count: int = 0
    dropped_count: int = 0  # Entries lost with failed batches
    error_count: int = 0
    skipped_flushes: int = 0  # Flushes deferred while waiting for a token
    last_error: str | None = None


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class DeliveryPipeline:
    """Couples an AuthSession and a BatchBuffer to the ingest client."""

    def __init__(
        self,
        session: AuthSession,
        client: IngestClient,
        buffer_size: int,
        flush_interval: float,
        max_buffer_items: int | None = None,
    ):
        self.session = session
        self.client = client
        self.stats = DeliveryStats()
        self.buffer = BatchBuffer(
            buffer_size=buffer_size,
            flush_interval=flush_interval,
            on_flush_requested=self.request_flush,
            max_items=max_buffer_items,
        )
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def request_flush(self) -> asyncio.Task | None:
        """
        Start a flush from a synchronous trigger (size threshold or timer).

        The buffer is drained before this returns; only the network call
        runs in the background. Returns the delivery task, or None when the
        flush was gated out.
        """
        if _running_loop() is None:
            return None
        batch = self._take_batch()
        if batch is None:
            return None
        return self.spawn(self._deliver(*batch))

    async def flush(self):
        """Run one flush attempt to completion."""
        batch = self._take_batch()
        if batch is None:
            return
        await self._deliver(*batch)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run a coroutine in the background, keeping a reference until it ends."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self):
        """Wait for every in-flight delivery and reauth task."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _take_batch(self) -> tuple[list[LogEntry], str | None] | None:
        if self.session.disabled or not self.buffer:
            return None

        if self.session.requires_token and not self.session.token:
            # Still connecting; keep the entries for the next trigger
            self.stats.skipped_flushes += 1
            logger.debug(f"[RemoteLogger] No token yet, deferring {len(self.buffer)} entries")
            return None

        return self.buffer.drain_for_flush(), self.session.token

    async def _deliver(self, entries: list[LogEntry], token: str | None):
        try:
            await self.client.submit(entries, token)
        except DeliveryUnauthorized as e:
            self._record_failure(entries, e)
            logger.warning(f"[RemoteLogger] Failed to send logs: {e.detail}")
            self.session.invalidate_token()
            self.spawn(self.session.authenticate())
        except DeliveryRejected as e:
            self._record_failure(entries, e)
            logger.warning(f"[RemoteLogger] Failed to send logs: {e}")
        except DeliveryTransportFault as e:
            self._record_failure(entries, e)
            logger.error(f"[RemoteLogger] Network error sending logs: {e}")
        except Exception as e:
            self._record_failure(entries, e)
            logger.error(f"[RemoteLogger] Unexpected error sending logs: {e}", exc_info=True)
        else:
            self.stats.sent_count += len(entries)

    def _record_failure(self, entries: list[LogEntry], error: Exception):
        self.stats.error_count += 1
        self.stats.dropped_count += len(entries)
        self.stats.last_error = str(error)
