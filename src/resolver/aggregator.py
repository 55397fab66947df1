"""Merged view of every known configuration key."""

from src.domain.effective import EffectiveEntry, Priority
from src.domain.override import derive_category
from src.domain.ports import BaseConfigProvider, OverrideStore, VolatileStore
from src.logger.logger import get_logger
from src.logger.types import Category, param
from src.resolver.resolver import VOLATILE_PREFIX


class Aggregator:
    """
    Builds the unified key -> EffectiveEntry view for listing callers.

    Three passes, each allowed to overwrite the previous one:
        1. base configuration (non-blank values)
        2. volatile store keys under "config:"
        3. active overrides

    A failing pass is logged and skipped; whatever was collected so far is
    still returned.
    """

    def __init__(
        self,
        override_store: OverrideStore,
        volatile_store: VolatileStore,
        base_config: BaseConfigProvider,
    ) -> None:
        self.override_store = override_store
        self.volatile_store = volatile_store
        self.base_config = base_config
        self.logger = get_logger().with_category(Category.CONFIGURATION)

    def list_all(self) -> dict[str, EffectiveEntry]:
        entries: dict[str, EffectiveEntry] = {}

        try:
            for key, value in self.base_config.items().items():
                if value is not None and value.strip():
                    entries[key] = EffectiveEntry(value, Priority.BASE_FILE, derive_category(key))
        except Exception as e:
            self.logger.warn("Error reading base configuration", param("error", str(e)))

        try:
            for raw_key in self.volatile_store.scan(VOLATILE_PREFIX):
                key = raw_key[len(VOLATILE_PREFIX):]
                existing = entries.get(key)
                if existing is not None and existing.priority is not Priority.BASE_FILE:
                    continue
                value = self.volatile_store.get(raw_key)
                if value is not None:
                    entries[key] = EffectiveEntry(value, Priority.VOLATILE, derive_category(key))
        except Exception as e:
            self.logger.warn("Error reading from volatile store", param("error", str(e)))

        try:
            for override in self.override_store.find_all_active():
                entries[override.key] = EffectiveEntry(
                    override.value,
                    Priority.OVERRIDE,
                    override.effective_category,
                    override.description,
                )
        except Exception as e:
            self.logger.warn("Error reading database overrides", param("error", str(e)))

        return entries

    def values_by_category(self, category: str) -> dict[str, str]:
        """
        Override and volatile values of one category.

        Overrides come first; volatile keys stored as "config:<category>:<name>"
        are added only when the key is not already present.
        """
        values: dict[str, str] = {}

        try:
            for override in self.override_store.find_active_by_category(category):
                values[override.key] = override.value
        except Exception as e:
            self.logger.warn(
                "Error reading database overrides for category",
                param("category", category),
                param("error", str(e)),
            )

        try:
            for raw_key in self.volatile_store.scan(f"{VOLATILE_PREFIX}{category}:"):
                key = raw_key[len(VOLATILE_PREFIX):]
                if key in values:
                    continue
                value = self.volatile_store.get(raw_key)
                if value is not None:
                    values[key] = value
        except Exception as e:
            self.logger.warn(
                "Error reading volatile store for category",
                param("category", category),
                param("error", str(e)),
            )

        return values
