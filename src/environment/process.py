"""Process environment variables and process-level system properties."""

import os
from collections.abc import Iterable, Mapping, MutableMapping


class ProcessEnvironment:
    """
    Read access to environment variables plus a process-wide property table.

    System properties are the Python stand-in for -D style process settings:
    set once at start (see main.py) or by bootstrap code, read everywhere.
    Tests pass their own mappings instead of touching os.environ.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        system_properties: MutableMapping[str, str] | None = None,
    ) -> None:
        self._environ = environ if environ is not None else os.environ
        self._properties: MutableMapping[str, str] = (
            system_properties if system_properties is not None else {}
        )

    def getenv(self, name: str) -> str | None:
        return self._environ.get(name)

    def get_system_property(self, key: str) -> str | None:
        return self._properties.get(key)

    def set_system_property(self, key: str, value: str) -> None:
        self._properties[key] = value

    def clear_system_property(self, key: str) -> None:
        self._properties.pop(key, None)

    def system_properties(self) -> Mapping[str, str]:
        return dict(self._properties)

    def load_defines(self, defines: Iterable[str]) -> None:
        """
        Load "key=value" definitions into the system properties.

        Raises:
            ValueError: If a definition has no "=" or an empty key
        """
        for define in defines:
            key, sep, value = define.partition("=")
            key = key.strip()
            if not sep or not key:
                raise ValueError(f"Invalid system property definition: {define!r}")
            self._properties[key] = value


def env_var_name(key: str) -> str:
    """Environment variable name for a key: "database.port" -> "DATABASE_PORT"."""
    return key.replace(".", "_").upper()
