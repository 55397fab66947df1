"""Redis client for the volatile configuration layer."""

import asyncio
from typing import TYPE_CHECKING

import redis

from src.logger.logger import get_logger
from src.logger.types import Category, param

if TYPE_CHECKING:
    from src.config.settings import RedisConfig


class RedisClient:
    """Redis client; lookups are blocking, connection setup retries with backoff."""

    def __init__(self, config: "RedisConfig") -> None:
        """
        Initialize Redis client.

        Args:
            config: Redis configuration with host, port, db
        """
        self.config = config
        self.redis: redis.Redis | None = None

    async def connect(self, max_retries: int | None = None, initial_delay: float = 1.0) -> None:
        """
        Connect to Redis with retry logic.

        Args:
            max_retries: Maximum connection attempts (config value by default)
            initial_delay: Initial delay between retries in seconds

        Raises:
            ConnectionError: If unable to connect after max_retries
        """
        logger = get_logger().with_category(Category.CACHE)
        attempts = max_retries or self.config.connect_retries
        delay = initial_delay
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                client = redis.Redis(
                    host=self.config.host,
                    port=self.config.port,
                    db=self.config.db,
                    password=self.config.password,
                    decode_responses=True,
                    socket_keepalive=True,
                    socket_connect_timeout=self.config.socket_timeout,
                    socket_timeout=self.config.socket_timeout,
                    retry_on_timeout=True,
                )
                await asyncio.to_thread(client.ping)
                self.redis = client
                return
            except Exception as e:
                last_error = e
                if attempt < attempts:
                    logger.warn(
                        f"Redis connection attempt {attempt}/{attempts} failed, retrying...",
                        param("host", self.config.host),
                        param("port", self.config.port),
                        param("delay", delay),
                        param("error", str(e)),
                    )
                    await asyncio.sleep(delay)
                    delay = min(delay * 2, 30.0)

        logger.error(
            f"Failed to connect to Redis after {attempts} attempts",
            last_error,
            param("host", self.config.host),
            param("port", self.config.port),
        )
        raise ConnectionError(
            f"Failed to connect to Redis at {self.config.host}:{self.config.port} "
            f"after {attempts} attempts"
        )

    async def close(self) -> None:
        if self.redis:
            self.redis.close()
            self.redis = None

    def get_redis(self) -> redis.Redis:
        """
        Get Redis client instance.

        Raises:
            RuntimeError: If not connected
        """
        if self.redis is None:
            raise RuntimeError("RedisClient not connected. Call connect() first.")
        return self.redis
