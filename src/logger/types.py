"""Types and constants for structured logging."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Level(str, Enum):
    """Log level, ordered from the most verbose to the most severe."""

    TRACE = "trace"  # Per-lookup noise (adapter probes during startup)
    DEBUG = "debug"  # Which source answered a key
    INFO = "info"  # Override writes, bootstrap milestones
    WARN = "warn"  # A source could not be read, resolution continued
    ERROR = "error"  # Recursion in the lookup chain, failed writes
    FATAL = "fatal"  # Service cannot start
    PANIC = "panic"

    @property
    def severity(self) -> int:
        """Numeric rank used for level filtering."""
        return _SEVERITY[self]

    @classmethod
    def parse(cls, value: str | None) -> "Level":
        """Parse a LOG_LEVEL value, accepting 'warning' as an alias of 'warn'."""
        if not value:
            return cls.DEBUG
        normalized = value.strip().lower()
        if normalized == "warning":
            normalized = "warn"
        try:
            return cls(normalized)
        except ValueError:
            return cls.DEBUG


_SEVERITY: dict[Level, int] = {
    Level.TRACE: 0,
    Level.DEBUG: 10,
    Level.INFO: 20,
    Level.WARN: 30,
    Level.ERROR: 40,
    Level.FATAL: 50,
    Level.PANIC: 60,
}


class Category(str, Enum):
    """Category groups log events by the subsystem that produced them."""

    DATABASE = "database"  # Override table in PostgreSQL
    CACHE = "cache"  # Volatile store (Redis)
    CONFIGURATION = "configuration"  # Resolution and aggregation
    ENVIRONMENT = "environment"  # Process env, system properties, base file
    ADMINISTRATION = "administration"  # Override CRUD


@dataclass
class LogEntry:
    """LogEntry is a single log record destined for the logs table."""

    timestamp: datetime
    service_name: str
    instance_id: str
    environment: str
    level: Level
    message: str
    ingestion_time: datetime = field(default_factory=datetime.utcnow)
    category: Category | None = None
    function_name: str | None = None
    file_path: str | None = None
    line_number: int | None = None
    error_message: str | None = None
    stack_trace: str | None = None
    context: dict[str, Any] | None = None


@dataclass
class Field:
    """Field carries one piece of structured data attached to a record."""

    key: str
    value: Any


def category(cat: Category) -> Field:
    """Override the logger category for a single record."""
    return Field(key="_category", value=cat)


def param(key: str, value: Any) -> Field:
    """Generic structured parameter."""
    return Field(key=key, value=value)

