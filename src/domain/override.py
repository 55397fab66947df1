"""Configuration override domain model."""

from dataclasses import dataclass
from datetime import datetime

GENERAL_CATEGORY = "general"


def derive_category(key: str) -> str:
    """
    Derive the category of a configuration key.

    The category is the segment before the first dot; keys without a dot
    belong to the "general" category.

    Args:
        key: Dot-segmented configuration key (e.g. "database.port")

    Returns:
        Category name
    """
    head, sep, _ = key.partition(".")
    return head if sep else GENERAL_CATEGORY


@dataclass
class Override:
    """
    Administrator-set configuration override.

    One row per key: deleting an override only clears is_active, and saving
    the same key again reactivates that row instead of inserting a new one.
    """

    key: str
    value: str
    description: str | None = None
    category: str | None = None
    is_active: bool = True
    created_at: datetime | None = None  # Set by database
    updated_at: datetime | None = None  # Set by database
    updated_by: str = "system"
    id: int | None = None  # Set by database

    @property
    def effective_category(self) -> str:
        """Stored category, or the one derived from the key."""
        return self.category or derive_category(self.key)

    def apply(
        self,
        value: str,
        category: str | None,
        description: str | None,
        updated_by: str,
    ) -> None:
        """Overwrite the editable fields in place and reactivate the row."""
        self.value = value
        self.category = category or derive_category(self.key)
        self.description = description
        self.updated_by = updated_by
        self.is_active = True

    def deactivate(self) -> None:
        self.is_active = False

    @classmethod
    def create(
        cls,
        key: str,
        value: str,
        category: str | None = None,
        description: str | None = None,
        updated_by: str = "system",
    ) -> "Override":
        """Create a new active override that has not been persisted yet."""
        return cls(
            key=key,
            value=value,
            category=category or derive_category(key),
            description=description,
            updated_by=updated_by,
        )

