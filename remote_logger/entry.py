"""
Log entry model for the remote logger.

An entry is created once, stamped with its creation time, and never
mutated afterwards.
"""

import copy
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class LogLevel(str, Enum):
    """Levels accepted by the ingest service."""

    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    DEBUG = "debug"

    @classmethod
    def coerce(cls, value: "LogLevel | str") -> "LogLevel":
        """Accept an enum member or a level name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        name = _LEVEL_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown log level: {value!r}") from None


_LEVEL_ALIASES = {
    "warning": "warn",
    "critical": "error",
    "fatal": "error",
}


def utc_timestamp() -> str:
    """Current time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class LogEntry:
    """One log event as shipped to the ingest service."""

    level: LogLevel
    message: str
    timestamp: str
    meta: Any = None

    @classmethod
    def create(cls, level: LogLevel | str, message: str, meta: Any = None) -> "LogEntry":
        # Detach from the caller's container so later edits don't reach the wire
        if isinstance(meta, dict | list):
            meta = copy.copy(meta)
        return cls(
            level=LogLevel.coerce(level),
            message=str(message),
            timestamp=utc_timestamp(),
            meta=meta,
        )

    def to_dict(self) -> dict[str, Any]:
        """Wire representation; ``meta`` is left out when absent."""
        data: dict[str, Any] = {
            "level": self.level.value,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.meta is not None:
            data["meta"] = self.meta
        return data
