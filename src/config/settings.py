"""Settings module for the configuration resolver service."""

import os

from src.database.postgres import PostgresConfig

DEFAULT_CATEGORIES: tuple[str, ...] = (
    "database",
    "redis",
    "messaging",
    "cache",
    "server",
    "common",
    "autopilot",
)


def read_secret(name: str, env_var: str, default: str | None = None) -> str | None:
    """Read a value from a Docker secret, falling back to the environment."""
    secret_path = f"/run/secrets/{name}"
    try:
        with open(secret_path) as f:
            return f.read().strip()
    except FileNotFoundError:
        return os.getenv(env_var, default)


class RedisConfig:
    """Redis configuration for the volatile config layer."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        db: int | None = None,
        password: str | None = None,
    ) -> None:
        self.host = host or os.getenv("REDIS_HOST", "localhost")
        self.port = port or int(os.getenv("REDIS_PORT", "6379"))
        self.db = db if db is not None else int(os.getenv("REDIS_DB", "0"))
        self.password = password or read_secret("redis_password", "REDIS_PASSWORD")
        self.connect_retries = int(os.getenv("REDIS_CONNECT_RETRIES", "10"))
        self.socket_timeout = float(os.getenv("REDIS_SOCKET_TIMEOUT", "5"))


class ConfigurationSettings:
    """Settings of the resolution core itself."""

    def __init__(self) -> None:
        self.base_file = os.getenv("CONFIG_BASE_FILE", "config/application.yaml")
        self.updated_by = os.getenv("CONFIG_UPDATED_BY", "system")
        self.max_lookup_depth = int(os.getenv("CONFIG_MAX_LOOKUP_DEPTH", "16"))

        # Bootstrap list for the UI when no override carries a category yet
        self.default_categories: list[str] = list(DEFAULT_CATEGORIES)


class Settings:
    """Application settings."""

    def __init__(self) -> None:
        self.environment = os.getenv("ENVIRONMENT", "dev")
        self.service_name = os.getenv("SERVICE_NAME", "config-resolver")
        self.service_version = os.getenv("SERVICE_VERSION", "0.1.0")
        self.log_level = os.getenv("LOG_LEVEL", "debug")

        self.postgres = PostgresConfig()
        self.redis = RedisConfig()
        self.configuration = ConfigurationSettings()
