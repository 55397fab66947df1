"""Exposes resolver overrides to the process-wide property lookup chain."""

from src.environment.property_sources import (
    SYSTEM_ENVIRONMENT,
    SYSTEM_PROPERTIES,
    PropertySource,
    PropertySources,
)
from src.logger.logger import get_logger
from src.logger.types import Category, param
from src.resolver.resolver import Resolver

OVERRIDE_SOURCE_NAME = "configurationOverrides"


class OverridePropertySource(PropertySource):
    """
    Property source backed by the Resolver.

    Only override, volatile, environment and system property steps are
    consulted (skip_host_lookup=True): the host step would walk the chain
    this source is part of and come straight back here.
    """

    def __init__(self, resolver: Resolver, name: str = OVERRIDE_SOURCE_NAME) -> None:
        super().__init__(name)
        self.resolver = resolver
        self.logger = get_logger().with_category(Category.CONFIGURATION)

    def get_property(self, key: str, depth: int = 0) -> str | None:
        try:
            value = self.resolver.resolve(key, None, True, depth=depth)
        except RecursionError as e:
            self.logger.error(
                f"Circular dependency in property resolution for '{key}'",
                e,
                param("key", key),
                param("depth", depth),
            )
            return None
        except Exception as e:
            # Stores may not be ready yet during startup
            self.logger.trace(
                f"Error getting property '{key}' from resolver",
                param("key", key),
                param("error", str(e)),
            )
            return None

        if value is not None:
            self.logger.trace(f"Property '{key}' resolved from overrides", param("key", key))
        return value

    def contains_property(self, key: str, depth: int = 0) -> bool:
        return self.get_property(key, depth) is not None


def register_property_source(
    sources: PropertySources, property_source: OverridePropertySource
) -> OverridePropertySource:
    """
    Insert the override source into the chain.

    It goes right after the native system property / environment sources
    and therefore ahead of any file-backed defaults. Without native sources
    it becomes the first source.
    """
    logger = get_logger().with_category(Category.CONFIGURATION)

    natives = [
        name for name in sources.names() if name in (SYSTEM_PROPERTIES, SYSTEM_ENVIRONMENT)
    ]
    if not natives:
        sources.add_first(property_source)
        logger.info(f"{property_source.name} registered as first property source")
    else:
        sources.add_after(natives[-1], property_source)
        logger.info(
            f"{property_source.name} registered after {natives[-1]}",
            param("order", sources.names()),
        )
    return property_source
