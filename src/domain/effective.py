"""Effective (merged) configuration view models."""

from dataclasses import dataclass
from enum import Enum


class Priority(str, Enum):
    """Source that supplied the winning value, highest priority first."""

    OVERRIDE = "OVERRIDE"
    VOLATILE = "VOLATILE"
    ENVIRONMENT = "ENVIRONMENT"
    SYSTEM_PROPERTY = "SYSTEM_PROPERTY"
    BASE_FILE = "BASE_FILE"


@dataclass(frozen=True)
class EffectiveEntry:
    """
    One key of the merged configuration view.

    Computed on every aggregation call and never stored. The priority tag is
    provenance metadata only.
    """

    value: str
    priority: Priority
    category: str
    description: str | None = None


@dataclass
class ConfigurationView:
    """Row of the administration listing."""

    key: str
    value: str
    current_value: str
    category: str
    source: str
    description: str | None = None

    @classmethod
    def from_entry(cls, key: str, entry: EffectiveEntry, category: str) -> "ConfigurationView":
        return cls(
            key=key,
            value=entry.value,
            current_value=entry.value,
            category=category,
            source=entry.priority.value,
            description=entry.description,
        )
