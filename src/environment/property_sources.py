"""Ordered property-source chain: the process-wide "get config value" lookup."""

from abc import ABC, abstractmethod

from src.domain.errors import LookupDepthExceededError
from src.environment.base_config import BaseConfigProvider
from src.environment.process import ProcessEnvironment, env_var_name

SYSTEM_PROPERTIES = "systemProperties"
SYSTEM_ENVIRONMENT = "systemEnvironment"
BASE_CONFIG = "baseConfig"


class PropertySource(ABC):
    """
    A named participant of the lookup chain.

    depth counts how many times the chain has been re-entered on the way to
    this call; sources that call back into the chain must pass depth + 1.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def get_property(self, key: str, depth: int = 0) -> str | None: ...

    def contains_property(self, key: str, depth: int = 0) -> bool:
        return self.get_property(key, depth) is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class SystemPropertiesSource(PropertySource):
    def __init__(self, process: ProcessEnvironment, name: str = SYSTEM_PROPERTIES) -> None:
        super().__init__(name)
        self.process = process

    def get_property(self, key: str, depth: int = 0) -> str | None:
        return self.process.get_system_property(key)


class SystemEnvironmentSource(PropertySource):
    """Environment variables, by exact name first, then as UPPER_SNAKE."""

    def __init__(self, process: ProcessEnvironment, name: str = SYSTEM_ENVIRONMENT) -> None:
        super().__init__(name)
        self.process = process

    def get_property(self, key: str, depth: int = 0) -> str | None:
        value = self.process.getenv(key)
        if value is None:
            value = self.process.getenv(env_var_name(key))
        return value


class BaseConfigSource(PropertySource):
    def __init__(self, provider: BaseConfigProvider, name: str = BASE_CONFIG) -> None:
        super().__init__(name)
        self.provider = provider

    def get_property(self, key: str, depth: int = 0) -> str | None:
        return self.provider.get(key)


class PropertySources:
    """
    Ordered chain of property sources, first non-None answer wins.

    The chain enforces a hard depth ceiling: a lookup entered with a depth
    above max_depth raises LookupDepthExceededError instead of descending.
    """

    def __init__(self, max_depth: int = 16) -> None:
        self.max_depth = max_depth
        self._sources: list[PropertySource] = []

    @classmethod
    def standard(
        cls,
        process: ProcessEnvironment,
        base_config: BaseConfigProvider,
        max_depth: int = 16,
    ) -> "PropertySources":
        """System properties, then environment, then packaged defaults."""
        chain = cls(max_depth=max_depth)
        chain.add_last(SystemPropertiesSource(process))
        chain.add_last(SystemEnvironmentSource(process))
        chain.add_last(BaseConfigSource(base_config))
        return chain

    def names(self) -> list[str]:
        return [source.name for source in self._sources]

    def contains(self, name: str) -> bool:
        return any(source.name == name for source in self._sources)

    def get(self, name: str) -> PropertySource | None:
        for source in self._sources:
            if source.name == name:
                return source
        return None

    def add_first(self, source: PropertySource) -> None:
        self._remove(source.name)
        self._sources.insert(0, source)

    def add_last(self, source: PropertySource) -> None:
        self._remove(source.name)
        self._sources.append(source)

    def add_after(self, relative_name: str, source: PropertySource) -> None:
        self._remove(source.name)
        self._sources.insert(self._index_of(relative_name) + 1, source)

    def add_before(self, relative_name: str, source: PropertySource) -> None:
        self._remove(source.name)
        self._sources.insert(self._index_of(relative_name), source)

    def get_property(self, key: str, depth: int = 0) -> str | None:
        """
        Walk the chain for key.

        Raises:
            LookupDepthExceededError: If depth is above max_depth
        """
        if depth > self.max_depth:
            raise LookupDepthExceededError(key, depth, self.max_depth)
        for source in list(self._sources):
            value = source.get_property(key, depth)
            if value is not None:
                return value
        return None

    def contains_property(self, key: str, depth: int = 0) -> bool:
        return self.get_property(key, depth) is not None

    def _index_of(self, name: str) -> int:
        for index, source in enumerate(self._sources):
            if source.name == name:
                return index
        raise KeyError(f"Property source '{name}' does not exist")

    def _remove(self, name: str) -> None:
        self._sources = [source for source in self._sources if source.name != name]
