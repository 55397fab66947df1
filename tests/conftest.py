"""
Pytest configuration and shared fakes.

Puts the repo root on sys.path so that 'import src...' works, initialises the
global logger without a writer and provides in-memory stand-ins for the
PostgreSQL override table and the Redis volatile store.
"""

import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import pytest

repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from src.domain.override import Override  # noqa: E402
from src.environment.base_config import BaseConfigProvider  # noqa: E402
from src.environment.process import ProcessEnvironment  # noqa: E402
from src.logger.logger import init_logger  # noqa: E402
from src.resolver.resolver import Resolver  # noqa: E402


class InMemoryOverrideStore:
    """Override table with one row per key; returns copies like a real store."""

    def __init__(self) -> None:
        self.rows: dict[str, Override] = {}
        self.unavailable = False
        self.fail_writes = False
        self.saves = 0
        self._next_id = 1

    def _check(self) -> None:
        if self.unavailable:
            raise ConnectionError("override store unreachable")

    def find_active_by_key(self, key: str) -> Override | None:
        self._check()
        row = self.rows.get(key)
        return replace(row) if row and row.is_active else None

    def find_by_key(self, key: str) -> Override | None:
        self._check()
        row = self.rows.get(key)
        return replace(row) if row else None

    def find_all_active(self) -> list[Override]:
        self._check()
        return [replace(row) for row in self.rows.values() if row.is_active]

    def find_active_by_category(self, category: str) -> list[Override]:
        return [row for row in self.find_all_active() if row.category == category]

    def find_distinct_categories(self) -> list[str]:
        return sorted({row.category for row in self.find_all_active() if row.category})

    def save(self, override: Override) -> Override:
        self._check()
        if self.fail_writes:
            raise ConnectionError("write rejected")
        now = datetime.utcnow()
        stored = replace(override)
        existing = self.rows.get(stored.key)
        if existing is None:
            stored.id = self._next_id
            self._next_id += 1
            stored.created_at = now
        else:
            stored.id = existing.id
            stored.created_at = existing.created_at
        stored.updated_at = now
        self.rows[stored.key] = stored
        self.saves += 1
        return replace(stored)

    def deactivate_all(self, updated_by: str) -> int:
        self._check()
        if self.fail_writes:
            raise ConnectionError("write rejected")
        now = datetime.utcnow()
        count = 0
        for row in self.rows.values():
            if row.is_active:
                row.deactivate()
                row.updated_by = updated_by
                row.updated_at = now
                count += 1
        return count

    def add(self, key: str, value: str, **kwargs) -> Override:
        return self.save(Override.create(key, value, **kwargs))


class InMemoryVolatileStore:
    """Flat key/value store with prefix scan."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})
        self.unavailable = False

    def _check(self) -> None:
        if self.unavailable:
            raise ConnectionError("redis unreachable")

    def get(self, key: str) -> str | None:
        self._check()
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self._check()
        self.data[key] = value

    def delete(self, key: str) -> None:
        self._check()
        self.data.pop(key, None)

    def scan(self, prefix: str) -> list[str]:
        self._check()
        return [key for key in self.data if key.startswith(prefix)]


class RecordingBaseConfig(BaseConfigProvider):
    """Base configuration that records every key it was asked for."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        super().__init__(values)
        self.requested: list[str] = []

    def get(self, key: str) -> str | None:
        self.requested.append(key)
        return super().get(key)

    def put(self, key: str, value: str) -> None:
        self._values[key] = value


@pytest.fixture(autouse=True, scope="session")
def logger():
    return init_logger("config-resolver-test", "test", writer=None, level="trace")


@pytest.fixture
def override_store() -> InMemoryOverrideStore:
    return InMemoryOverrideStore()


@pytest.fixture
def volatile_store() -> InMemoryVolatileStore:
    return InMemoryVolatileStore()


@pytest.fixture
def environ() -> dict[str, str]:
    return {}


@pytest.fixture
def system_properties() -> dict[str, str]:
    return {}


@pytest.fixture
def process(environ, system_properties) -> ProcessEnvironment:
    return ProcessEnvironment(environ, system_properties)


@pytest.fixture
def base_config() -> RecordingBaseConfig:
    return RecordingBaseConfig()


@pytest.fixture
def resolver(override_store, volatile_store, process, base_config) -> Resolver:
    """Resolver without a host chain: step 5 reads the base config directly."""
    return Resolver(override_store, volatile_store, process, base_config=base_config)
