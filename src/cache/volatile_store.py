"""Redis-backed volatile store for restart-free configuration edits."""

from collections.abc import Iterator

from src.cache.client import RedisClient


class RedisVolatileStore:
    """
    Thin key/value facade over Redis.

    Keys are used as given; namespacing (the "config:" prefix) belongs to the
    callers. Every call goes to Redis, nothing is cached here.
    """

    def __init__(self, redis_client: RedisClient, scan_count: int = 500) -> None:
        self.redis_client = redis_client
        self.scan_count = scan_count

    def get(self, key: str) -> str | None:
        return self.redis_client.get_redis().get(key)  # type: ignore[return-value]

    def set(self, key: str, value: str) -> None:
        self.redis_client.get_redis().set(key, value)

    def delete(self, key: str) -> None:
        self.redis_client.get_redis().delete(key)

    def scan(self, prefix: str) -> Iterator[str]:
        """Iterate over keys starting with prefix (SCAN, not KEYS)."""
        pattern = f"{self._escape(prefix)}*"
        return self.redis_client.get_redis().scan_iter(match=pattern, count=self.scan_count)  # type: ignore[return-value]

    @staticmethod
    def _escape(prefix: str) -> str:
        # Glob metacharacters in keys must not widen the match
        for char in ("\\", "*", "?", "[", "]"):
            prefix = prefix.replace(char, f"\\{char}")
        return prefix
