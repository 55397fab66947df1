"""Configuration override repository for PostgreSQL."""

from typing import Any

from psycopg2.extras import RealDictCursor

from src.database.postgres import PostgresClient
from src.domain.errors import PersistenceError
from src.domain.override import Override
from src.logger.logger import get_logger
from src.logger.types import Category, param

_COLUMNS = """
    id, config_key, config_value, description, category,
    is_active, created_at, updated_at, updated_by
"""


class OverrideRepository:
    """
    Repository for configuration overrides in PostgreSQL.

    The table holds a single row per key. Rows are never physically deleted:
    is_active is the liveness flag and every active-only query filters on it.
    """

    TABLE_NAME = "configuration_override"

    def __init__(self, postgres_client: PostgresClient) -> None:
        """
        Initialize OverrideRepository.

        Args:
            postgres_client: PostgreSQL client instance
        """
        self.postgres = postgres_client
        self.table = postgres_client.config.table_name(self.TABLE_NAME)
        self.logger = get_logger().with_category(Category.DATABASE)

    def find_active_by_key(self, key: str) -> Override | None:
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM {self.table} WHERE config_key = %s AND is_active",
            (key,),
        )

    def find_by_key(self, key: str) -> Override | None:
        """Find the row for key regardless of its active flag."""
        return self._fetch_one(
            f"SELECT {_COLUMNS} FROM {self.table} WHERE config_key = %s",
            (key,),
        )

    def exists_by_key(self, key: str) -> bool:
        return self.find_by_key(key) is not None

    def find_all_active(self) -> list[Override]:
        return self._fetch_all(
            f"SELECT {_COLUMNS} FROM {self.table} WHERE is_active ORDER BY config_key",
            (),
        )

    def find_active_by_category(self, category: str) -> list[Override]:
        return self._fetch_all(
            f"""
            SELECT {_COLUMNS} FROM {self.table}
            WHERE category = %s AND is_active
            ORDER BY config_key
            """,
            (category,),
        )

    def find_distinct_categories(self) -> list[str]:
        """Distinct non-null categories among active rows, sorted."""
        conn = self.postgres.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT DISTINCT category FROM {self.table}
                    WHERE is_active AND category IS NOT NULL
                    ORDER BY category
                    """
                )
                return [row[0] for row in cur.fetchall()]
        finally:
            self._release_read(conn)

    def save(self, override: Override) -> Override:
        """
        Insert a new row or update the existing one and return the stored row.

        New rows go through ON CONFLICT (config_key) so that two concurrent
        creates of the same key still end up as one row (last writer wins).

        Raises:
            PersistenceError: If the write fails
        """
        if override.id is None:
            query = f"""
                INSERT INTO {self.table} (
                    config_key, config_value, description, category,
                    is_active, created_at, updated_at, updated_by
                ) VALUES (%s, %s, %s, %s, %s, NOW(), NOW(), %s)
                ON CONFLICT (config_key) DO UPDATE SET
                    config_value = EXCLUDED.config_value,
                    description = EXCLUDED.description,
                    category = EXCLUDED.category,
                    is_active = EXCLUDED.is_active,
                    updated_at = NOW(),
                    updated_by = EXCLUDED.updated_by
                RETURNING {_COLUMNS}
            """
            params: tuple[Any, ...] = (
                override.key,
                override.value,
                override.description,
                override.category,
                override.is_active,
                override.updated_by,
            )
        else:
            query = f"""
                UPDATE {self.table} SET
                    config_value = %s,
                    description = %s,
                    category = %s,
                    is_active = %s,
                    updated_at = NOW(),
                    updated_by = %s
                WHERE id = %s
                RETURNING {_COLUMNS}
            """
            params = (
                override.value,
                override.description,
                override.category,
                override.is_active,
                override.updated_by,
                override.id,
            )

        conn = self.postgres.get_connection()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
            conn.commit()
        except Exception as e:
            conn.rollback()
            self.logger.error(
                "Failed to save configuration override",
                e,
                param("key", override.key),
            )
            raise PersistenceError("save override", override.key, e) from e
        finally:
            self.postgres.put_connection(conn)

        if row is None:
            # UPDATE matched nothing: the row vanished underneath us
            raise PersistenceError(
                "save override", override.key, LookupError(f"no row with id {override.id}")
            )
        return self._row_to_override(row)

    def deactivate_all(self, updated_by: str) -> int:
        """
        Clear is_active on every active row in a single transaction.

        Returns:
            Number of rows deactivated

        Raises:
            PersistenceError: If the update fails (nothing is changed)
        """
        conn = self.postgres.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    UPDATE {self.table} SET
                        is_active = FALSE,
                        updated_at = NOW(),
                        updated_by = %s
                    WHERE is_active
                    """,
                    (updated_by,),
                )
                count = cur.rowcount
            conn.commit()
        except Exception as e:
            conn.rollback()
            self.logger.error("Failed to deactivate configuration overrides", e)
            raise PersistenceError("deactivate all overrides", None, e) from e
        finally:
            self.postgres.put_connection(conn)

        return count

    def ensure_table_exists(self) -> bool:
        """
        Create the override table if it does not exist.

        Returns:
            True if the table exists or was created
        """
        ddl = f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                id BIGSERIAL PRIMARY KEY,
                config_key VARCHAR(255) NOT NULL UNIQUE,
                config_value TEXT,
                description TEXT,
                category VARCHAR(100),
                is_active BOOLEAN NOT NULL DEFAULT TRUE,
                created_at TIMESTAMP NOT NULL DEFAULT NOW(),
                updated_at TIMESTAMP,
                updated_by VARCHAR(100)
            )
        """
        conn = self.postgres.get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(ddl)
            conn.commit()
            self.logger.info(f"Table {self.table} is ready")
            return True
        except Exception as e:
            conn.rollback()
            self.logger.error(f"Failed to ensure {self.table} exists", e)
            return False
        finally:
            self.postgres.put_connection(conn)

    def _fetch_one(self, query: str, params: tuple[Any, ...]) -> Override | None:
        conn = self.postgres.get_connection()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
            return self._row_to_override(row) if row else None
        finally:
            self._release_read(conn)

    def _fetch_all(self, query: str, params: tuple[Any, ...]) -> list[Override]:
        conn = self.postgres.get_connection()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
            return [self._row_to_override(row) for row in rows]
        finally:
            self._release_read(conn)

    def _release_read(self, conn: Any) -> None:
        # End the implicit read transaction before the connection goes back
        try:
            conn.rollback()
        finally:
            self.postgres.put_connection(conn)

    @staticmethod
    def _row_to_override(row: dict[str, Any]) -> Override:
        """Convert database row to Override domain object."""
        return Override(
            id=row["id"],
            key=row["config_key"],
            value=row["config_value"] if row["config_value"] is not None else "",
            description=row["description"],
            category=row["category"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            updated_by=row["updated_by"] or "system",
        )
