"""Administration surface consumed by the UI/API layer."""

from src.domain.effective import ConfigurationView
from src.domain.errors import PersistenceError
from src.domain.override import GENERAL_CATEGORY, Override
from src.domain.ports import VolatileStore
from src.logger.logger import get_logger
from src.logger.types import Category, param
from src.resolver.aggregator import Aggregator
from src.resolver.resolver import Resolver, volatile_key
from src.services.override_administration import OverrideAdministration


class ConfigurationService:
    """
    One entry point for every configuration administration operation.

    Reads go through Resolver/Aggregator and never raise. Writes (overrides
    and volatile values) report failures as PersistenceError.
    """

    def __init__(
        self,
        resolver: Resolver,
        aggregator: Aggregator,
        administration: OverrideAdministration,
        volatile_store: VolatileStore,
    ) -> None:
        self.resolver = resolver
        self.aggregator = aggregator
        self.administration = administration
        self.volatile_store = volatile_store
        self.logger = get_logger().with_category(Category.ADMINISTRATION)

    def list_effective(self, category: str | None = None) -> dict[str, list[ConfigurationView]]:
        """
        Effective configuration grouped by category.

        Args:
            category: Only return this category when given

        Returns:
            Category -> views sorted by key; categories in sorted order
        """
        grouped: dict[str, list[ConfigurationView]] = {}
        for key, entry in self.aggregator.list_all().items():
            entry_category = entry.category or GENERAL_CATEGORY
            if category is not None and category != entry_category:
                continue
            grouped.setdefault(entry_category, []).append(
                ConfigurationView.from_entry(key, entry, entry_category)
            )

        return {
            name: sorted(grouped[name], key=lambda view: view.key)
            for name in sorted(grouped)
        }

    def get_effective_value(self, key: str) -> dict[str, str]:
        value = self.resolver.resolve(key)
        return {"key": key, "value": value if value is not None else ""}

    def values_by_category(self, category: str) -> dict[str, str]:
        return self.aggregator.values_by_category(category)

    def save_override(
        self,
        key: str,
        value: str,
        category: str | None = None,
        description: str | None = None,
        updated_by: str | None = None,
    ) -> Override:
        return self.administration.save(key, value, category, description, updated_by)

    def delete_override(self, key: str) -> None:
        self.administration.delete(key)

    def delete_all_overrides(self) -> int:
        return self.administration.delete_all()

    def save_to_volatile(self, key: str, value: str) -> None:
        """
        Store a value in the volatile layer ("config:<key>").

        Raises:
            PersistenceError: If the volatile store rejects the write
        """
        try:
            self.volatile_store.set(volatile_key(key), value)
        except Exception as e:
            self.logger.error("Failed to save configuration to volatile store", e, param("key", key))
            raise PersistenceError("save volatile value", key, e) from e
        self.logger.info(f"Configuration saved to volatile store: {key}", param("key", key))

    def delete_from_volatile(self, key: str) -> None:
        try:
            self.volatile_store.delete(volatile_key(key))
        except Exception as e:
            self.logger.error(
                "Failed to delete configuration from volatile store", e, param("key", key)
            )
            raise PersistenceError("delete volatile value", key, e) from e
        self.logger.info(f"Configuration deleted from volatile store: {key}", param("key", key))

    def list_categories(self) -> list[str]:
        return self.administration.list_categories()

    def active_override_count(self) -> int:
        return self.administration.active_count()
