"""
RemoteLogger - the caller-facing facade.

Usage:
    from remote_logger import RemoteLogger

    async with RemoteLogger(package_name="com.demo.app", password="secret") as log:
        log.info("Service started")
        log.error("Payment failed", {"user_id": "u123"})

``log()`` and the level shorthands never raise and never block; entries are
buffered and shipped in batches from the running event loop. Calls from other
threads are handed over to that loop once the logger has started.
"""

import asyncio
import logging
from typing import Any

import httpx

from .config import RemoteLoggerConfig
from .entry import LogEntry, LogLevel
from .handler import override_console
from .pipeline import DeliveryPipeline, _running_loop
from .session import AuthSession, SessionState
from .transport import IngestClient

logger = logging.getLogger(__name__)


class RemoteLogger:
    """Buffered, batched log shipping to the remote ingest service."""

    def __init__(
        self,
        config: RemoteLoggerConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        **options: Any,
    ):
        """
        Initialize the logger.

        Args:
            config: Complete configuration; mutually exclusive with options
            client: Optional pre-built httpx.AsyncClient (left open on close)
            **options: RemoteLoggerConfig fields, e.g. package_name, password,
                is_new_account, table_name, buffer_size, flush_interval
        """
        if config is None:
            config = RemoteLoggerConfig(**options)
        elif options:
            raise TypeError("Pass either a config object or keyword options, not both")

        self.config = config
        self._ingest = IngestClient(config.ingest_url, timeout=config.request_timeout, client=client)
        self._session = AuthSession(
            self._ingest,
            package_name=config.package_name,
            password=config.password,
            is_new_account=config.is_new_account,
        )
        self._pipeline = DeliveryPipeline(
            self._session,
            self._ingest,
            buffer_size=config.buffer_size,
            flush_interval=config.flush_interval_seconds,
            max_buffer_items=config.max_buffer_items,
        )
        self._started = False
        self._closed = False
        self._loop: asyncio.AbstractEventLoop | None = None

        # Kick off the initial handshake right away when constructed inside a loop
        self.start()

    async def __aenter__(self) -> "RemoteLogger":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def package_name(self) -> str:
        return self.config.package_name

    @property
    def table_name(self) -> str | None:
        return self.config.table_name

    @property
    def disabled(self) -> bool:
        return self._session.disabled

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def session(self) -> AuthSession:
        return self._session

    @property
    def pipeline(self) -> DeliveryPipeline:
        return self._pipeline

    def start(self) -> bool:
        """
        Schedule the initial auth handshake on the running loop.

        Safe to call repeatedly. Returns False when no loop is running yet,
        in which case the next in-loop ``log()`` starts the logger.
        """
        if self._started:
            return True
        loop = _running_loop()
        if loop is None:
            return False
        self._loop = loop
        self._started = True
        if self._session.requires_token:
            self._pipeline.spawn(self._session.authenticate())
        return True

    def log(self, level: LogLevel | str, message: str, meta: Any = None):
        """Buffer one entry; a no-op once the session is disabled or closed."""
        if self._session.disabled or self._closed:
            return
        try:
            entry = LogEntry.create(level, message, meta)
        except Exception as e:
            logger.warning(f"[RemoteLogger] Dropping entry: {type(e).__name__}: {e}")
            return

        loop = self._loop
        if loop is not None and not loop.is_closed() and _running_loop() is not loop:
            # Buffer and timer belong to the loop thread
            try:
                loop.call_soon_threadsafe(self._append, entry)
                return
            except RuntimeError:
                pass  # Loop closed meanwhile; nothing will flush from there
        self._append(entry)

    def _append(self, entry: LogEntry):
        if self._session.disabled or self._closed:
            return
        self.start()
        self._pipeline.buffer.append(entry)

    def info(self, message: str, meta: Any = None):
        self.log(LogLevel.INFO, message, meta)

    def warn(self, message: str, meta: Any = None):
        self.log(LogLevel.WARN, message, meta)

    warning = warn

    def error(self, message: str, meta: Any = None):
        self.log(LogLevel.ERROR, message, meta)

    def debug(self, message: str, meta: Any = None):
        self.log(LogLevel.DEBUG, message, meta)

    async def flush(self):
        """Attempt to ship whatever is buffered now."""
        self.start()
        await self._pipeline.flush()

    async def wait_idle(self):
        """Wait until no delivery or auth task is in flight."""
        await self._pipeline.wait_idle()

    async def close(self):
        """Final flush, wait for in-flight work, release the HTTP client."""
        if self._closed:
            return
        await self._pipeline.wait_idle()
        await self._pipeline.flush()
        await self._pipeline.wait_idle()
        self._closed = True
        self._pipeline.buffer.cancel_timer()
        if len(self._pipeline.buffer):
            logger.warning(
                f"[RemoteLogger] Closing with {len(self._pipeline.buffer)} undelivered entries"
            )
        await self._ingest.aclose()

    def get_stats(self) -> dict:
        """Get shipping statistics."""
        stats = self._pipeline.stats
        return {
            "sent_count": stats.sent_count,
            "dropped_count": stats.dropped_count,
            "overflow_count": self._pipeline.buffer.dropped_count,
            "error_count": stats.error_count,
            "skipped_flushes": stats.skipped_flushes,
            "buffer_size": len(self._pipeline.buffer),
            "timer_pending": self._pipeline.buffer.timer_pending,
            "last_error": stats.last_error,
            "session_state": self._session.state.value,
        }

    def override_console(self):
        """Mirror ``print`` output into this logger. Returns a restore callable."""
        return override_console(self)
