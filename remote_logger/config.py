"""
Configuration for the remote logger.

Options can be given directly or read from ``REMOTE_LOGGER_*`` environment
variables via :func:`from_env`.
"""

import os
from dataclasses import dataclass
from urllib.parse import urlparse

# Default ingest host
DEFAULT_INGEST_URL = "https://remote-logger-dashboard.vercel.app"

DEFAULT_BUFFER_SIZE = 10
DEFAULT_FLUSH_INTERVAL_MS = 5000

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class RemoteLoggerConfig:
    """Construction-time settings; immutable once built."""

    package_name: str
    password: str | None = None
    is_new_account: bool = False
    table_name: str | None = None
    buffer_size: int = DEFAULT_BUFFER_SIZE
    flush_interval: float = DEFAULT_FLUSH_INTERVAL_MS  # milliseconds
    ingest_url: str = DEFAULT_INGEST_URL
    request_timeout: float | None = None  # seconds, None = no timeout
    max_buffer_items: int | None = None  # None = unbounded

    def __post_init__(self):
        if not self.package_name:
            raise ValueError("package_name is required")
        if self.buffer_size < 1:
            raise ValueError(f"buffer_size must be >= 1, got {self.buffer_size}")
        if self.flush_interval <= 0:
            raise ValueError(f"flush_interval must be positive, got {self.flush_interval}")
        if self.max_buffer_items is not None and self.max_buffer_items < self.buffer_size:
            raise ValueError(
                f"max_buffer_items ({self.max_buffer_items}) must be >= buffer_size ({self.buffer_size})"
            )
        parsed = urlparse(self.ingest_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid ingest_url '{self.ingest_url}', expected an http(s) URL")

    @property
    def flush_interval_seconds(self) -> float:
        return self.flush_interval / 1000.0

    @property
    def authenticated_mode(self) -> bool:
        """True when a password is configured and a token is required to ship."""
        return bool(self.password)


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def from_env(package_name: str | None = None) -> RemoteLoggerConfig:
    """
    Build a config from environment variables.

    Environment variables:
        REMOTE_LOGGER_PACKAGE_NAME: Log stream identifier (required if not passed)
        REMOTE_LOGGER_PASSWORD: Enables authenticated mode
        REMOTE_LOGGER_NEW_ACCOUNT: Ask the auth endpoint to provision the account
        REMOTE_LOGGER_TABLE_NAME: Destination label
        REMOTE_LOGGER_BUFFER_SIZE: Entries per batch
        REMOTE_LOGGER_FLUSH_INTERVAL: Milliseconds between timed flushes
        REMOTE_LOGGER_INGEST_URL: Ingest host
        REMOTE_LOGGER_MAX_BUFFER_ITEMS: Cap on buffered entries (drop oldest)

    Args:
        package_name: Override the package name from env

    Returns:
        Validated RemoteLoggerConfig
    """
    name = package_name or os.environ.get("REMOTE_LOGGER_PACKAGE_NAME")
    if not name:
        raise ValueError("package_name required or set REMOTE_LOGGER_PACKAGE_NAME")

    options: dict = {
        "package_name": name,
        "password": os.environ.get("REMOTE_LOGGER_PASSWORD") or None,
        "is_new_account": os.environ.get("REMOTE_LOGGER_NEW_ACCOUNT", "").strip().lower() in _TRUTHY,
        "table_name": os.environ.get("REMOTE_LOGGER_TABLE_NAME") or None,
        "ingest_url": os.environ.get("REMOTE_LOGGER_INGEST_URL", DEFAULT_INGEST_URL),
        "max_buffer_items": _env_int("REMOTE_LOGGER_MAX_BUFFER_ITEMS"),
    }
    buffer_size = _env_int("REMOTE_LOGGER_BUFFER_SIZE")
    if buffer_size is not None:
        options["buffer_size"] = buffer_size
    flush_interval = _env_int("REMOTE_LOGGER_FLUSH_INTERVAL")
    if flush_interval is not None:
        options["flush_interval"] = flush_interval

    return RemoteLoggerConfig(**options)
