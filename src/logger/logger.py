"""Structured logger used across the configuration resolver."""

import asyncio
import inspect
import os
import sys
import traceback
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from src.logger.postgres_writer import PostgresWriter
from src.logger.types import Category, Field, Level, LogEntry


class Logger:
    """Logger emitting structured records to PostgreSQL (or stdout without a writer)."""

    def __init__(
        self,
        service_name: str,
        environment: str,
        writer: PostgresWriter | None = None,
        min_level: Level = Level.DEBUG,
    ) -> None:
        """
        Initialize Logger.

        Args:
            service_name: Service name stamped on every record
            environment: Environment (dev, stage, prod)
            writer: PostgresWriter for persisting records
            min_level: Records below this level are dropped
        """
        self.service_name = service_name
        self.environment = environment
        self.writer = writer
        self.min_level = min_level
        self.instance_id = self._get_instance_id()

        self._fields: dict[str, Any] = {}
        self._category: Category | None = None

    def trace(self, msg: str, *fields: Field) -> None:
        self._log(Level.TRACE, msg, None, *fields)

    def debug(self, msg: str, *fields: Field) -> None:
        self._log(Level.DEBUG, msg, None, *fields)

    def info(self, msg: str, *fields: Field) -> None:
        self._log(Level.INFO, msg, None, *fields)

    def warn(self, msg: str, *fields: Field) -> None:
        self._log(Level.WARN, msg, None, *fields)

    def error(self, msg: str, err: BaseException | None = None, *fields: Field) -> None:
        self._log(Level.ERROR, msg, err, *fields)

    def fatal(self, msg: str, err: BaseException | None = None, *fields: Field) -> None:
        """Log fatal level message and exit."""
        self._log(Level.FATAL, msg, err, *fields)
        raise SystemExit(1)

    def panic(self, msg: str, err: BaseException | None = None, *fields: Field) -> None:
        """Log panic level message and raise."""
        self._log(Level.PANIC, msg, err, *fields)
        raise RuntimeError(msg)

    def is_enabled(self, level: Level) -> bool:
        """Check whether a record of this level would be emitted."""
        return level.severity >= self.min_level.severity

    def _log(
        self,
        level: Level,
        msg: str,
        err: BaseException | None,
        *fields: Field,
    ) -> None:
        if not self.is_enabled(level):
            return

        frame = inspect.currentframe()
        caller_frame = frame.f_back.f_back if frame and frame.f_back else None

        context: dict[str, Any] = dict(self._fields)
        record_category = self._category
        for field in fields:
            if field.key == "_category":
                if isinstance(field.value, Category):
                    record_category = field.value
                continue
            context[field.key] = field.value

        entry = LogEntry(
            timestamp=datetime.utcnow(),
            service_name=self.service_name,
            instance_id=self.instance_id,
            environment=self.environment,
            level=level,
            category=record_category,
            message=msg,
            context=context or None,
        )
        if caller_frame:
            entry.function_name = caller_frame.f_code.co_name
            entry.file_path = self._clean_file_path(caller_frame.f_code.co_filename)
            entry.line_number = caller_frame.f_lineno

        if err is not None:
            entry.error_message = str(err)
            # Stack trace only for error and above
            if level.severity >= Level.ERROR.severity:
                entry.stack_trace = "".join(
                    traceback.format_exception(type(err), err, err.__traceback__)
                )

        self._emit(entry)

    def _emit(self, entry: LogEntry) -> None:
        if self.writer is None:
            category_name = entry.category.value if entry.category else "-"
            suffix = f" {entry.context}" if entry.context else ""
            if entry.error_message:
                suffix += f" error={entry.error_message}"
            print(f"[{entry.level.value}] {category_name}: {entry.message}{suffix}")
            return

        try:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                # No running loop: write synchronously into the buffer
                asyncio.run(self.writer.write(entry))
            else:
                self.writer.submit(entry)
        except Exception as write_err:
            print(f"[LOGGER ERROR] Failed to write log: {write_err}", file=sys.stderr)

    def with_category(self, category: Category) -> "Logger":
        """Return a derived logger bound to the given category."""
        new_logger = self._copy()
        new_logger._category = category
        return new_logger

    def with_fields(self, *fields: Field) -> "Logger":
        """Return a derived logger carrying extra fields on every record."""
        new_logger = self._copy()
        for field in fields:
            new_logger._fields[field.key] = field.value
        return new_logger

    def _copy(self) -> "Logger":
        new_logger = Logger(
            self.service_name, self.environment, self.writer, self.min_level
        )
        new_logger.instance_id = self.instance_id
        new_logger._fields = dict(self._fields)
        new_logger._category = self._category
        return new_logger

    @staticmethod
    def _get_instance_id() -> str:
        """Pod/container name from env, or a random id for local runs."""
        if hostname := os.getenv("HOSTNAME"):
            return hostname
        if container_id := os.getenv("CONTAINER_ID"):
            return container_id
        return str(uuid.uuid4())

    @staticmethod
    def _clean_file_path(file_path: str) -> str:
        """Strip the absolute prefix up to the src/ directory."""
        path = Path(file_path)
        parts = path.parts
        if "src" in parts:
            idx = parts.index("src")
            return str(Path(*parts[idx:]))
        return path.name


_global_logger: Logger | None = None


def get_logger() -> Logger:
    """Return the global logger instance."""
    if _global_logger is None:
        raise RuntimeError("Logger not initialized. Call init_logger() first.")
    return _global_logger


def init_logger(
    service_name: str,
    environment: str,
    writer: PostgresWriter | None = None,
    level: str | None = None,
) -> Logger:
    """
    Initialize the global logger.

    Args:
        service_name: Service name
        environment: Environment (dev, stage, prod)
        writer: PostgresWriter for persisting records
        level: Minimum level name (LOG_LEVEL), debug when omitted

    Returns:
        Logger instance
    """
    global _global_logger
    _global_logger = Logger(service_name, environment, writer, Level.parse(level))
    return _global_logger
