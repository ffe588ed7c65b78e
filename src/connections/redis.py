"""
Redis Connection Module.

Manages the Redis connection backing the embedding cache.
"""

import json
from typing import Optional

import redis.asyncio as redis
from loguru import logger

from config.settings import get_settings

redis_log = logger.bind(module="Redis")


class RedisConnection:
    """Redis connection manager."""

    def __init__(self):
        """Initialize Redis connection."""
        self.settings = get_settings().redis
        self._client: Optional[redis.Redis] = None

    async def connect(self) -> None:
        """Connect to Redis."""
        redis_log.info(f"Connecting to Redis at {self.settings.host}:{self.settings.port}")
        self._client = redis.Redis(
            host=self.settings.host,
            port=self.settings.port,
            db=self.settings.db,
            password=self.settings.password or None,
            decode_responses=True,
        )
        # Test connection
        try:
            await self._client.ping()
        except Exception:
            await self._client.aclose()
            self._client = None
            raise
        redis_log.info("Redis connected successfully")

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            redis_log.info("Redis connection closed")

    @property
    def client(self) -> redis.Redis:
        """Get Redis client."""
        if not self._client:
            raise RuntimeError("Redis not connected. Call connect() first.")
        return self._client

    async def healthcheck(self) -> bool:
        """Return True if Redis answers a ping."""
        try:
            return bool(await self.client.ping())
        except Exception as e:
            redis_log.warning(f"Redis health check failed: {e}")
            return False

    # ========== Embedding Cache Operations ==========

    async def get_embedding_entry(self, key: str) -> Optional[dict]:
        """
        Get a cached embedding entry.

        Args:
            key: Cache key (embedding:<hash>)

        Returns:
            {"embedding": [...], "updated_at": "..."} or None if not found
        """
        data = await self.client.get(key)
        if data:
            return json.loads(data)
        return None

    async def save_embedding_entry(self, key: str, entry: dict, ttl_seconds: int) -> None:
        """
        Upsert a cached embedding entry with TTL.

        Args:
            key: Cache key
            entry: Entry with embedding and updated_at
            ttl_seconds: Expiry for the key
        """
        await self.client.set(key, json.dumps(entry), ex=ttl_seconds)
        redis_log.debug(f"Saved embedding entry {key}")


# Singleton instance
_redis: Optional[RedisConnection] = None


async def get_redis() -> RedisConnection:
    """Get Redis connection singleton."""
    global _redis
    if _redis is None:
        connection = RedisConnection()
        await connection.connect()
        _redis = connection
    return _redis


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.close()
        _redis = None
