"""PostgreSQL client holding the configuration override table."""

import os
from typing import Any

from psycopg2.extensions import connection as Connection
from psycopg2.pool import ThreadedConnectionPool


class PostgresConfig:
    """PostgreSQL connection configuration."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        table_prefix: str | None = None,
        min_conn: int = 1,
        max_conn: int = 10,
    ) -> None:
        self.host = host or os.getenv("DB_HOST", "localhost")
        self.port = port or int(os.getenv("DB_PORT", "5432"))
        self.database = database or os.getenv("DB_NAME", "autopilot")
        self.user = user or os.getenv("DB_USER", "autopilot")
        self.password = password or self._read_password()
        self.table_prefix = (
            table_prefix if table_prefix is not None else os.getenv("DB_TABLE_PREFIX", "OA_")
        )
        self.min_conn = min_conn
        self.max_conn = max_conn

    @staticmethod
    def _read_password() -> str:
        """Read password from Docker secret or env."""
        secret_file = "/run/secrets/db_password"
        if os.path.exists(secret_file):
            with open(secret_file) as f:
                return f.read().strip()
        return os.getenv("DB_PASSWORD", "autopilot")

    def table_name(self, name: str) -> str:
        """Physical table name with the deployment prefix applied once."""
        if not self.table_prefix or name.startswith(self.table_prefix):
            return name
        return f"{self.table_prefix}{name}"

    @property
    def dsn(self) -> str:
        return (
            f"host={self.host} "
            f"port={self.port} "
            f"dbname={self.database} "
            f"user={self.user} "
            f"password={self.password}"
        )


class PostgresClient:
    """PostgreSQL client with connection pooling."""

    def __init__(self, config: PostgresConfig | dict[str, Any] | None) -> None:
        """
        Initialize PostgreSQL client.

        Args:
            config: PostgresConfig or config dict
        """
        if isinstance(config, dict):
            self.config = PostgresConfig(**config)
        elif config is None:
            self.config = PostgresConfig()
        else:
            self.config = config

        self.pool: ThreadedConnectionPool | None = None

    async def connect(self) -> None:
        """Create the connection pool."""
        try:
            self.pool = ThreadedConnectionPool(
                minconn=self.config.min_conn,
                maxconn=self.config.max_conn,
                dsn=self.config.dsn,
            )
        except Exception as e:
            raise ConnectionError(f"Failed to create connection pool: {e}") from e

    async def close(self) -> None:
        if self.pool:
            self.pool.closeall()
            self.pool = None

    def get_connection(self) -> Connection:
        if not self.pool:
            raise RuntimeError("Connection pool not initialized. Call connect() first.")
        return self.pool.getconn()  # type: ignore[no-any-return]

    def put_connection(self, conn: Connection) -> None:
        if self.pool:
            self.pool.putconn(conn)
