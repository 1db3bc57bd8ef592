"""
Capture helpers: a ``logging`` handler and a ``print`` override that feed
a RemoteLogger.

Usage:
    from remote_logger import setup_logging

    remote = setup_logging(package_name="com.demo.app", password="secret")

    import logging
    logging.getLogger(__name__).info("Payment processed", extra={"user_id": "u123"})
"""

import builtins
import json
import logging
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .entry import LogLevel
from .transport import in_ingest_call

if TYPE_CHECKING:
    from .logger import RemoteLogger

# Attributes present on every LogRecord; everything else came in via ``extra``
_RESERVED_ATTRS = frozenset(
    (
        "name", "msg", "args", "created", "filename", "funcName", "levelname",
        "levelno", "lineno", "module", "msecs", "pathname", "process",
        "processName", "relativeCreated", "stack_info", "exc_info", "exc_text",
        "thread", "threadName", "taskName", "message", "asctime",
    )
)

# Our own diagnostics and the HTTP stack's request logs must not loop back
# into the pipeline
_IGNORED_LOGGERS = ("remote_logger", "httpx", "httpcore")


def _is_ignored(name: str) -> bool:
    return any(name == prefix or name.startswith(prefix + ".") for prefix in _IGNORED_LOGGERS)


def level_for(levelno: int) -> LogLevel:
    """Map a stdlib level number onto the ingest levels."""
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARN
    if levelno >= logging.INFO:
        return LogLevel.INFO
    return LogLevel.DEBUG


class RemoteLoggerHandler(logging.Handler):
    """
    Python logging handler that ships records through a RemoteLogger.

    Integrates with standard Python logging so existing code
    works without modification.
    """

    def __init__(self, remote_logger: "RemoteLogger", min_level: int = logging.INFO):
        super().__init__(level=min_level)
        self.remote_logger = remote_logger

    def emit(self, record: logging.LogRecord):
        if _is_ignored(record.name) or in_ingest_call():
            return
        try:
            meta: dict[str, Any] = {}
            for key, value in record.__dict__.items():
                if key in _RESERVED_ATTRS or key.startswith("_"):
                    continue
                # Only include serializable values
                if isinstance(value, str | int | float | bool | type(None)):
                    meta[key] = value
                elif isinstance(value, list | dict):
                    try:
                        json.dumps(value)
                        meta[key] = value
                    except (TypeError, ValueError):
                        pass
            meta["logger"] = record.name

            self.remote_logger.log(level_for(record.levelno), self.format(record), meta)
        except Exception:
            self.handleError(record)


def setup_logging(
    min_level: int = logging.INFO,
    also_console: bool = True,
    **logger_options: Any,
) -> "RemoteLogger":
    """
    Set up Python logging to ship records to the ingest service.

    Args:
        min_level: Minimum log level to ship
        also_console: Also log to console (default: True)
        **logger_options: Passed to RemoteLogger (package_name, password, ...)

    Returns:
        RemoteLogger instance (for stats/flush/close)
    """
    from .logger import RemoteLogger

    remote = RemoteLogger(**logger_options)

    handler = RemoteLoggerHandler(remote, min_level=min_level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    if also_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root_logger.addHandler(console_handler)

    if root_logger.level == logging.NOTSET or root_logger.level > min_level:
        root_logger.setLevel(min_level)

    return remote


def override_console(remote_logger: "RemoteLogger") -> Callable[[], None]:
    """
    Replace ``builtins.print`` with a version that also logs remotely.

    Output still goes to the original ``print``. Writes to stderr are
    logged as errors, everything else as info. When more than one argument
    is printed, the arguments themselves travel as ``meta``.

    Returns:
        Callable that restores the original ``print``
    """
    original_print = builtins.print

    def remote_print(*args, **kwargs):
        level = LogLevel.ERROR if kwargs.get("file") is sys.stderr else LogLevel.INFO
        sep = kwargs.get("sep")
        message = (" " if sep is None else sep).join(str(a) for a in args)
        remote_logger.log(level, message, list(args) if len(args) > 1 else None)
        original_print(*args, **kwargs)

    builtins.print = remote_print

    def restore():
        if builtins.print is remote_print:
            builtins.print = original_print

    return restore
