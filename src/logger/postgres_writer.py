"""Batched PostgreSQL writer for log records."""

import asyncio
import contextlib
import json
import sys
from typing import Any

import psycopg2
import psycopg2.extras
from psycopg2.extensions import connection as Connection

from src.logger.types import LogEntry


class PostgresWriter:
    """PostgresWriter buffers log records and flushes them in batches."""

    def __init__(
        self,
        dsn: str,
        batch_size: int = 100,
        flush_interval: float = 5.0,
        table_name: str = "logs",
    ) -> None:
        """
        Initialize PostgresWriter.

        Args:
            dsn: PostgreSQL connection string
            batch_size: Buffer size that triggers a flush
            flush_interval: Background flush interval in seconds
            table_name: Target table for log records
        """
        self.dsn = dsn
        self.batch_size = batch_size
        self.flush_interval = flush_interval
        self.table_name = table_name
        self.buffer: list[LogEntry] = []
        self._lock = asyncio.Lock()
        self._conn: Connection | None = None
        self._flush_task: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[None]] = set()
        self._closed = False

    async def connect(self) -> None:
        try:
            self._conn = psycopg2.connect(self.dsn)
            self._conn.set_session(autocommit=False)
            self._flush_task = asyncio.create_task(self._background_flush())
        except Exception as e:
            print(
                f"[LOGGER ERROR] Failed to connect to PostgreSQL: {e}",
                file=sys.stderr,
            )
            raise

    def submit(self, entry: LogEntry) -> None:
        """Schedule a write on the running loop; close() waits for it to land."""
        task = asyncio.get_running_loop().create_task(self.write(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def write(self, entry: LogEntry) -> None:
        """Append a record to the buffer."""
        if self._closed:
            return

        async with self._lock:
            self.buffer.append(entry)
            if len(self.buffer) >= self.batch_size:
                await self._flush_locked()

    async def flush(self) -> None:
        async with self._lock:
            await self._flush_locked()

    async def _flush_locked(self) -> None:
        """Write the buffer out (caller holds the lock)."""
        if not self.buffer or not self._conn:
            return

        query = f"""
            INSERT INTO {self.table_name} (
                timestamp, service_name, instance_id, environment,
                level, category, function_name, file_path, line_number,
                message, error_message, stack_trace, context, ingestion_time
            ) VALUES %s
        """
        values = [self._to_row(entry) for entry in self.buffer]

        try:
            with self._conn.cursor() as cursor:
                psycopg2.extras.execute_values(
                    cursor, query, values, page_size=self.batch_size
                )
            self._conn.commit()
            self.buffer.clear()
        except Exception as e:
            print(
                f"[LOGGER ERROR] Failed to insert logs into PostgreSQL: {e}",
                file=sys.stderr,
            )
            self._conn.rollback()
            self._fallback_to_stderr()

    @staticmethod
    def _to_row(entry: LogEntry) -> tuple[Any, ...]:
        return (
            entry.timestamp,
            entry.service_name,
            entry.instance_id,
            entry.environment,
            entry.level.value,
            entry.category.value if entry.category else None,
            entry.function_name,
            entry.file_path,
            entry.line_number,
            entry.message,
            entry.error_message,
            entry.stack_trace,
            json.dumps(entry.context, default=str) if entry.context is not None else None,
            entry.ingestion_time,
        )

    def _fallback_to_stderr(self) -> None:
        """Dump buffered records as JSON lines when PostgreSQL is unavailable."""
        for entry in self.buffer:
            data: dict[str, Any] = {
                "timestamp": entry.timestamp.isoformat(),
                "level": entry.level.value,
                "category": entry.category.value if entry.category else None,
                "message": entry.message,
                "service_name": entry.service_name,
            }
            if entry.error_message:
                data["error"] = entry.error_message
            if entry.context:
                data["context"] = entry.context
            print(json.dumps(data, default=str), file=sys.stderr)
        self.buffer.clear()

    async def _background_flush(self) -> None:
        while not self._closed:
            try:
                await asyncio.sleep(self.flush_interval)
                await self.flush()
            except asyncio.CancelledError:
                break
            except Exception as e:
                print(f"[LOGGER ERROR] Background flush failed: {e}", file=sys.stderr)

    async def close(self) -> None:
        """Stop background flushing, flush what is left, close the connection."""
        # Records logged right before close are still queued as tasks
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        self._closed = True

        if self._flush_task:
            self._flush_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._flush_task

        await self.flush()

        if self._conn:
            self._conn.close()
            self._conn = None

