"""Structured logging for the configuration resolver."""

from src.logger.logger import Logger, get_logger, init_logger
from src.logger.postgres_writer import PostgresWriter
from src.logger.types import Category, Field, Level, LogEntry, param

__all__ = [
    "Logger",
    "get_logger",
    "init_logger",
    "PostgresWriter",
    "Category",
    "Level",
    "LogEntry",
    "Field",
    "param",
]
