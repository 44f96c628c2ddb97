"""Redis read-through cache for short code lookups."""

import logging
from typing import Optional

import redis.asyncio as redis


class RedisCache:
    """Redis cache of code -> original URL.

    Mappings never change once created, so a cached entry can only go stale
    by expiring. Cache failures are logged and treated as misses; the store
    remains the source of truth.
    """

    KEY_PREFIX = "shortlinks:url:"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        ttl_seconds: int = 3600,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            ttl_seconds: TTL for cached entries
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None

        if self.enabled:
            self.logger.info(f"Redis cache enabled with TTL={ttl_seconds}s")

    async def connect(self) -> None:
        """Connect to Redis, disabling the cache if the server is unreachable."""
        if not self.enabled:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis")
        except redis.RedisError as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.enabled = False

    def get_cache_key(self, code: str) -> str:
        return f"{self.KEY_PREFIX}{code}"

    async def get(self, code: str) -> Optional[str]:
        """Get the cached original URL for a code."""
        if not self.enabled or not self.client:
            return None

        try:
            return await self.client.get(self.get_cache_key(code))
        except redis.RedisError as e:
            self.logger.error(f"Cache get error: {e}")
            return None

    async def set(self, code: str, original_url: str) -> bool:
        """Cache the original URL for a code.

        Returns:
            True if successful
        """
        if not self.enabled or not self.client:
            return False

        try:
            await self.client.setex(self.get_cache_key(code), self.ttl_seconds, original_url)
            return True
        except redis.RedisError as e:
            self.logger.error(f"Cache set error: {e}")
            return False

    async def ping(self) -> bool:
        if not self.enabled or not self.client:
            return False
        try:
            return bool(await self.client.ping())
        except redis.RedisError as e:
            self.logger.error(f"Cache ping error: {e}")
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.logger.info("Redis connection closed")
