"""
remote_logger - Client-side log shipping to a remote ingest service.

This package provides:
- RemoteLogger: Buffered, batched log shipping with bearer-token auth
- setup_logging / RemoteLoggerHandler: Route standard logging into a RemoteLogger
- override_console: Mirror print() output into a RemoteLogger

Usage:
    from remote_logger import RemoteLogger

    async with RemoteLogger(
        package_name="com.demo.app",
        password="secure-password-123",
        is_new_account=True,
        buffer_size=1,
    ) as log:
        log.info("Hello from remote logger")
        log.warn("This is a warning", {"code": 123})
"""

from .config import DEFAULT_INGEST_URL, RemoteLoggerConfig, from_env
from .entry import LogEntry, LogLevel
from .errors import (
    AuthError,
    AuthRejected,
    AuthTransportFault,
    DeliveryError,
    DeliveryRejected,
    DeliveryTransportFault,
    DeliveryUnauthorized,
    RemoteLoggerError,
)
from .handler import RemoteLoggerHandler, override_console, setup_logging
from .logger import RemoteLogger
from .session import SessionState

__all__ = [
    # Logger
    "RemoteLogger",
    "RemoteLoggerConfig",
    "from_env",
    "DEFAULT_INGEST_URL",
    "LogEntry",
    "LogLevel",
    "SessionState",
    # Capture
    "RemoteLoggerHandler",
    "setup_logging",
    "override_console",
    # Errors
    "RemoteLoggerError",
    "AuthError",
    "AuthRejected",
    "AuthTransportFault",
    "DeliveryError",
    "DeliveryUnauthorized",
    "DeliveryRejected",
    "DeliveryTransportFault",
]

__version__ = "1.0.0"
