"""Packaged default configuration (YAML file, flattened to dotted keys)."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from src.logger.logger import get_logger
from src.logger.types import Category, param


class BaseConfigProvider:
    """
    Read-only default configuration loaded once at process start.

    Nested YAML mappings become dot-segmented keys:

        database:
          port: 5432        ->  "database.port" = "5432"

    Scalars are kept as text; booleans are written the way they appear in
    property files ("true"/"false"), lists are joined with commas.
    """

    def __init__(self, values: Mapping[str, str] | None = None, source: str | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})
        self.source = source

    @classmethod
    def from_file(cls, path: str | Path) -> "BaseConfigProvider":
        """
        Load defaults from a YAML file.

        A missing file yields an empty provider; a malformed one raises.

        Raises:
            yaml.YAMLError: If the file is not valid YAML
            ValueError: If the top level is not a mapping
        """
        logger = get_logger().with_category(Category.ENVIRONMENT)
        file_path = Path(path)
        if not file_path.exists():
            logger.warn("Base configuration file not found", param("path", str(file_path)))
            return cls(source=str(file_path))

        with open(file_path, encoding="utf-8") as f:
            document = yaml.safe_load(f)

        provider = cls.from_mapping(document or {}, source=str(file_path))
        logger.info(
            "Base configuration loaded",
            param("path", str(file_path)),
            param("keys", len(provider.items())),
        )
        return provider

    @classmethod
    def from_mapping(cls, document: Any, source: str | None = None) -> "BaseConfigProvider":
        if not isinstance(document, Mapping):
            raise ValueError(
                f"Base configuration must be a mapping, got {type(document).__name__}"
            )
        values: dict[str, str] = {}
        _flatten(document, "", values)
        return cls(values, source=source)

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def items(self) -> Mapping[str, str]:
        return dict(self._values)


def _flatten(node: Mapping[Any, Any], prefix: str, out: dict[str, str]) -> None:
    for raw_key, value in node.items():
        key = f"{prefix}.{raw_key}" if prefix else str(raw_key)
        if isinstance(value, Mapping):
            _flatten(value, key, out)
        else:
            out[key] = _to_text(value)


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_to_text(item) for item in value)
    return str(value)
