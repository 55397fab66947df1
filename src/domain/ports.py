"""Interfaces of the stores and providers the resolver depends on."""

from collections.abc import Iterable, Mapping
from typing import Protocol

from src.domain.override import Override


class OverrideStore(Protocol):
    """Persisted override rows, one per key."""

    def find_active_by_key(self, key: str) -> Override | None: ...

    def find_by_key(self, key: str) -> Override | None: ...

    def find_all_active(self) -> list[Override]: ...

    def find_active_by_category(self, category: str) -> list[Override]: ...

    def find_distinct_categories(self) -> list[str]: ...

    def save(self, override: Override) -> Override: ...

    def deactivate_all(self, updated_by: str) -> int: ...


class VolatileStore(Protocol):
    """Flat key/value store with prefix scan (raw keys, no namespace applied)."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def scan(self, prefix: str) -> Iterable[str]: ...


class EnvironmentProvider(Protocol):
    """Read-only process environment and system properties."""

    def getenv(self, name: str) -> str | None: ...

    def get_system_property(self, key: str) -> str | None: ...


class BaseConfigProvider(Protocol):
    """Packaged default configuration loaded once at start."""

    def get(self, key: str) -> str | None: ...

    def items(self) -> Mapping[str, str]: ...


class HostPropertyLookup(Protocol):
    """The host's generic property lookup chain."""

    def get_property(self, key: str, depth: int = 0) -> str | None: ...
