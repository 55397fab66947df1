"""CRUD over persisted configuration overrides."""

from collections.abc import Sequence

from src.domain.override import Override
from src.domain.ports import OverrideStore
from src.logger.logger import get_logger
from src.logger.types import Category, param


class OverrideAdministration:
    """
    Create, update and soft-delete configuration overrides.

    Rows are never removed: delete clears is_active, and saving a key that
    was deleted earlier reactivates the same row. Writes are not serialized
    here; concurrent saves of one key race in the store, last writer wins.
    Write failures propagate as PersistenceError.
    """

    def __init__(
        self,
        override_store: OverrideStore,
        default_categories: Sequence[str],
        default_updated_by: str = "system",
    ) -> None:
        """
        Initialize OverrideAdministration.

        Args:
            override_store: Persisted overrides
            default_categories: Returned by list_categories() while no
                active override carries a category
            default_updated_by: Attribution used when the caller gives none
        """
        if not default_categories:
            raise ValueError("default_categories must not be empty")
        self.store = override_store
        self.default_categories = list(default_categories)
        self.default_updated_by = default_updated_by
        self.logger = get_logger().with_category(Category.ADMINISTRATION)

    def save(
        self,
        key: str,
        value: str,
        category: str | None = None,
        description: str | None = None,
        updated_by: str | None = None,
    ) -> Override:
        """
        Create or update the override for key and make it active.

        Args:
            key: Configuration key
            value: New value, may be an empty string
            category: Category, derived from the key when omitted
            description: Free text shown in listings
            updated_by: Attribution, default identity when omitted

        Returns:
            Stored override

        Raises:
            ValueError: If key is blank or value is None
            PersistenceError: If the store rejects the write
        """
        if not key or not key.strip():
            raise ValueError("Configuration key must not be blank")
        if value is None:
            raise ValueError(f"Value for '{key}' must not be None")

        author = updated_by or self.default_updated_by
        override = self.store.find_by_key(key)
        if override is not None:
            override.apply(value, category, description, author)
        else:
            override = Override.create(key, value, category, description, author)

        saved = self.store.save(override)
        self.logger.info(
            f"Configuration override saved: {key}",
            param("key", key),
            param("category", saved.category),
            param("updated_by", author),
        )
        return saved

    def delete(self, key: str) -> None:
        """Soft-delete the override for key; unknown keys are ignored."""
        override = self.store.find_by_key(key)
        if override is None:
            self.logger.debug(f"No configuration override to delete: {key}", param("key", key))
            return

        override.deactivate()
        self.store.save(override)
        self.logger.info(f"Configuration override deleted: {key}", param("key", key))

    def delete_all(self) -> int:
        """
        Soft-delete every active override in one write, all or nothing.

        Returns:
            Number of overrides deactivated

        Raises:
            PersistenceError: If the store rejects the write; no row changed
        """
        count = self.store.deactivate_all(self.default_updated_by)

        self.logger.info(
            f"Deleted {count} configuration overrides, all keys back to defaults",
            param("count", count),
        )
        return count

    def list_categories(self) -> list[str]:
        """Distinct categories of active overrides, or the default list."""
        try:
            categories = self.store.find_distinct_categories()
        except Exception as e:
            self.logger.warn("Error reading override categories", param("error", str(e)))
            categories = []

        if not categories:
            return list(self.default_categories)
        # Ordered and de-duplicated
        return list(dict.fromkeys(categories))

    def active_count(self) -> int:
        try:
            return len(self.store.find_all_active())
        except Exception as e:
            self.logger.warn("Error counting overrides", param("error", str(e)))
            return 0
