"""
Content-addressed embedding cache.

Embeddings are keyed by a hash of the text and reused for a week. On a
miss the provider is retried with exponential backoff; if it still fails
(or nothing is configured) a zero vector is returned instead of raising.
"""

import asyncio
import hashlib
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from loguru import logger

from src.matching.vector_math import zero_vector
from src.providers.base import EmbeddingProvider

cache_log = logger.bind(module="EmbeddingCache")

KEY_PREFIX = "embedding:"


class EmbeddingStore(Protocol):
    """Key/value store for cache entries (RedisConnection implements it)."""

    async def get_embedding_entry(self, key: str) -> Optional[dict]: ...

    async def save_embedding_entry(self, key: str, entry: dict, ttl_seconds: int) -> None: ...


def cache_key(text: str) -> str:
    """Deterministic cache key for a text (trimmed before hashing)."""
    digest = hashlib.sha256(text.strip().encode("utf-8")).hexdigest()
    return f"{KEY_PREFIX}{digest}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmbeddingCache:
    """Embedding lookup with TTL cache, retry and zero-vector fallback."""

    def __init__(
        self,
        provider: EmbeddingProvider | None,
        store: EmbeddingStore | None,
        dimensions: int = 1536,
        ttl: timedelta = timedelta(days=7),
        max_attempts: int = 3,
        base_delay: float = 0.5,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize cache.

        Args:
            provider: Embedding provider, None if not configured
            store: Entry store, None if not configured
            dimensions: Length of the zero vector returned on failure
            ttl: Age after which an entry is a miss
            max_attempts: Provider attempts per miss
            base_delay: First backoff delay in seconds (doubled per retry)
            clock: Current-time source
        """
        self._provider = provider
        self._store = store
        self.dimensions = dimensions
        self.ttl = ttl
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._clock = clock

    @property
    def available(self) -> bool:
        """True if both the provider and the store are configured."""
        return self._provider is not None and self._store is not None

    async def get_embedding(self, text: str) -> list[float]:
        """
        Get the embedding for text, computing and caching it on a miss.

        Args:
            text: Input text

        Returns:
            Embedding vector, or a zero vector if it cannot be obtained
        """
        if not self.available:
            cache_log.warning("Embedding provider or cache store not configured; returning zero vector")
            return zero_vector(self.dimensions)

        key = cache_key(text)
        cached = await self._read(key)
        if cached is not None:
            return cached

        for attempt in range(self.max_attempts):
            try:
                embedding = await self._provider.embed(text.strip())
            except Exception as e:
                if attempt < self.max_attempts - 1:
                    wait_time = self.base_delay * (2 ** attempt)
                    cache_log.warning(
                        f"Embedding failed (attempt {attempt + 1}/{self.max_attempts}): {e}. "
                        f"Retrying in {wait_time}s..."
                    )
                    await asyncio.sleep(wait_time)
                else:
                    cache_log.error(
                        f"Embedding failed after {self.max_attempts} attempts: {e}. "
                        f"Returning zero vector."
                    )
                continue

            await self._write(key, embedding)
            return embedding

        return zero_vector(self.dimensions)

    async def _read(self, key: str) -> list[float] | None:
        """Return a fresh cached vector, or None on miss/stale/unreadable."""
        try:
            entry = await self._store.get_embedding_entry(key)
        except Exception as e:
            cache_log.warning(f"Cache read failed for {key}: {e}")
            return None
        if not entry:
            return None

        embedding = entry.get("embedding")
        try:
            updated_at = datetime.fromisoformat(entry["updated_at"])
        except (KeyError, TypeError, ValueError):
            return None
        if updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=timezone.utc)

        if not isinstance(embedding, list) or updated_at + self.ttl <= self._clock():
            cache_log.debug(f"Cache entry {key} missing or stale")
            return None
        return embedding

    async def _write(self, key: str, embedding: list[float]) -> None:
        """Persist an entry; failures are logged and absorbed."""
        entry = {"embedding": embedding, "updated_at": self._clock().isoformat()}
        try:
            await self._store.save_embedding_entry(
                key, entry, ttl_seconds=int(self.ttl.total_seconds())
            )
        except Exception as e:
            cache_log.warning(f"Cache write failed for {key}: {e}")
