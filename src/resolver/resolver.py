"""Priority-ordered resolution of a single configuration key."""

from collections.abc import Callable
from typing import TypeVar

from src.domain.effective import Priority
from src.domain.ports import (
    BaseConfigProvider,
    EnvironmentProvider,
    HostPropertyLookup,
    OverrideStore,
    VolatileStore,
)
from src.environment.process import env_var_name
from src.logger.logger import get_logger
from src.logger.types import Category, param

T = TypeVar("T")

VOLATILE_PREFIX = "config:"


def volatile_key(key: str) -> str:
    """Volatile store key for a configuration key."""
    return f"{VOLATILE_PREFIX}{key}"


class Resolver:
    """
    Answers "what is the effective value of key K right now?".

    Sources, first present value wins:
        1. active override row (an empty value still wins)
        2. volatile store, "config:<key>"
        3. environment variable, "a.b.c" -> "A_B_C"
        4. system property, raw key
        5. host lookup chain (base configuration), unless skip_host_lookup

    Nothing is cached; every call queries every source it reaches. A failing
    source is logged and treated as having no answer, so resolve() returns a
    value or the default and never raises.
    """

    def __init__(
        self,
        override_store: OverrideStore,
        volatile_store: VolatileStore,
        environment: EnvironmentProvider,
        host: HostPropertyLookup | None = None,
        base_config: BaseConfigProvider | None = None,
    ) -> None:
        """
        Initialize Resolver.

        Args:
            override_store: Persisted overrides
            volatile_store: Redis-like key/value store
            environment: Process environment and system properties
            host: Generic lookup chain used for step 5
            base_config: Used for step 5 when no host chain is attached
        """
        self.override_store = override_store
        self.volatile_store = volatile_store
        self.environment = environment
        self.host = host
        self.base_config = base_config
        self.logger = get_logger().with_category(Category.CONFIGURATION)

    def attach_host(self, host: HostPropertyLookup) -> None:
        self.host = host

    def resolve(
        self,
        key: str,
        default: str | None = None,
        skip_host_lookup: bool = False,
        *,
        depth: int = 0,
    ) -> str | None:
        """
        Resolve key against all sources.

        Args:
            key: Configuration key
            default: Returned when no source has a value
            skip_host_lookup: Skip step 5; required when called from inside
                the host lookup chain, which would otherwise re-enter itself
            depth: Host chain re-entry depth of this call

        Returns:
            Effective value or default
        """
        found = self._lookup(key, skip_host_lookup, depth)
        if found is None:
            self.logger.debug(f"Configuration '{key}' not found, using default", param("key", key))
            return default
        value, priority = found
        self.logger.debug(
            f"Configuration '{key}' resolved",
            param("key", key),
            param("source", priority.value),
        )
        return value

    def _lookup(self, key: str, skip_host_lookup: bool, depth: int) -> tuple[str, Priority] | None:
        override = self._read(key, "database override", lambda: self.override_store.find_active_by_key(key))
        if override is not None:
            return override.value, Priority.OVERRIDE

        value = self._read(key, "volatile store", lambda: self.volatile_store.get(volatile_key(key)))
        if value:
            return value, Priority.VOLATILE

        value = self._read(key, "environment variable", lambda: self.environment.getenv(env_var_name(key)))
        if value:
            return value, Priority.ENVIRONMENT

        value = self._read(key, "system property", lambda: self.environment.get_system_property(key))
        if value:
            return value, Priority.SYSTEM_PROPERTY

        if skip_host_lookup:
            return None

        value = self._read_host(key, depth)
        if value:
            return value, Priority.BASE_FILE
        return None

    def _read(self, key: str, source: str, read: Callable[[], T]) -> T | None:
        try:
            return read()
        except Exception as e:
            self.logger.warn(
                f"Error reading {source} for '{key}'",
                param("key", key),
                param("source", source),
                param("error", str(e)),
            )
            return None

    def _read_host(self, key: str, depth: int) -> str | None:
        try:
            if self.host is not None:
                return self.host.get_property(key, depth + 1)
            if self.base_config is not None:
                return self.base_config.get(key)
            return None
        except RecursionError as e:
            self.logger.error(
                f"Circular property lookup for '{key}'",
                e,
                param("key", key),
                param("depth", depth),
            )
            return None
        except Exception as e:
            self.logger.warn(
                f"Error reading property '{key}' from host configuration",
                param("key", key),
                param("error", str(e)),
            )
            return None
