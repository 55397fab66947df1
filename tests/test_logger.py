"""Tests for the structured logger."""

import asyncio
import json
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from src.logger.logger import Logger
from src.logger.postgres_writer import PostgresWriter
from src.logger.types import Category, Level, LogEntry, category, param


class CollectingWriter:
    def __init__(self):
        self.entries = []

    async def write(self, entry):
        self.entries.append(entry)


@pytest.fixture
def writer() -> CollectingWriter:
    return CollectingWriter()


@pytest.mark.parametrize(
    "value,expected",
    [
        ("info", Level.INFO),
        (" WARNING ", Level.WARN),
        ("trace", Level.TRACE),
        (None, Level.DEBUG),
        ("verbose", Level.DEBUG),
    ],
)
def test_level_parse(value, expected):
    assert Level.parse(value) is expected


def test_records_below_min_level_are_dropped(writer):
    logger = Logger("svc", "test", writer, Level.WARN)

    logger.debug("hidden")
    logger.info("hidden")
    logger.warn("shown")

    assert [entry.message for entry in writer.entries] == ["shown"]


def test_fields_and_category(writer):
    logger = Logger("svc", "test", writer).with_category(Category.CACHE).with_fields(param("component", "redis"))

    logger.info("connected", param("port", 6379))
    logger.info("override", category(Category.DATABASE))

    first, second = writer.entries
    assert first.category is Category.CACHE
    assert first.context == {"component": "redis", "port": 6379}
    assert first.function_name == "test_fields_and_category"
    assert second.category is Category.DATABASE
    assert "_category" not in second.context


def test_error_carries_stack_trace(writer):
    logger = Logger("svc", "test", writer)
    try:
        raise ValueError("boom")
    except ValueError as e:
        logger.error("failed", e, param("key", "a.b"))

    entry = writer.entries[0]
    assert entry.level is Level.ERROR
    assert entry.error_message == "boom"
    assert "ValueError: boom" in entry.stack_trace


def test_derived_loggers_do_not_share_fields(writer):
    base = Logger("svc", "test", writer)
    derived = base.with_fields(param("a", 1))

    base.info("plain")
    derived.info("rich")

    assert writer.entries[0].context is None
    assert writer.entries[1].context == {"a": 1}
    assert derived.instance_id == base.instance_id


def test_stdout_without_writer(capsys):
    Logger("svc", "test").with_category(Category.CONFIGURATION).info("hello", param("k", "v"))

    assert "[info] configuration: hello {'k': 'v'}" in capsys.readouterr().out


def make_entry(**overrides) -> LogEntry:
    data = dict(
        timestamp=datetime(2024, 5, 1, 12, 0, 0),
        service_name="svc",
        instance_id="pod-1",
        environment="test",
        level=Level.WARN,
        message="volatile store unreachable",
        category=Category.CACHE,
        context={"key": "a.b"},
    )
    data.update(overrides)
    return LogEntry(**data)


def test_writer_row_layout():
    row = PostgresWriter._to_row(make_entry())

    assert row[4] == "warn"
    assert row[5] == "cache"
    assert row[9] == "volatile store unreachable"
    assert json.loads(row[12]) == {"key": "a.b"}


def test_writer_insert_failure_falls_back_to_stderr(capsys):
    writer = PostgresWriter("dsn", batch_size=2)
    writer._conn = MagicMock()
    writer._conn.cursor.side_effect = RuntimeError("db down")

    async def scenario():
        await writer.write(make_entry())
        await writer.write(make_entry(message="second"))

    asyncio.run(scenario())

    err = capsys.readouterr().err
    assert "Failed to insert logs" in err
    assert '"message": "second"' in err
    assert writer.buffer == []
    writer._conn.rollback.assert_called_once()


def test_writer_ignores_records_after_close():
    writer = PostgresWriter("dsn")

    asyncio.run(writer.close())
    asyncio.run(writer.write(make_entry()))

    assert writer.buffer == []


def test_close_waits_for_records_logged_in_the_loop():
    writer = PostgresWriter("dsn")
    logger = Logger("svc", "test", writer)

    async def scenario():
        logger.info("starting")
        logger.info("snapshot")
        await writer.close()

    asyncio.run(scenario())

    # No connection, so the final flush keeps the records in the buffer
    assert [entry.message for entry in writer.buffer] == ["starting", "snapshot"]
