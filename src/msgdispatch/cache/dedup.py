"""Redis-backed record of fully sent messages."""

import logging
from datetime import UTC, datetime
from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from msgdispatch.config import Settings

logger = logging.getLogger(__name__)


class DedupCacheError(Exception):
    """Writing to the dedup cache failed."""


class DedupCache(Protocol):
    async def record(self, provider_message_id: str) -> None: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


class RedisDedupCache:
    """Marks provider message ids as sent for a fixed retention window.

    Entries are written with ``SET key <timestamp> EX ttl``; nothing in the
    dispatch pipeline reads them back.
    """

    def __init__(
        self,
        client: redis.Redis,
        ttl_seconds: int = 3600,
        key_prefix: str = "msgdispatch:sent:",
    ):
        self._client = client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisDedupCache":
        client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
        )
        return cls(
            client,
            ttl_seconds=settings.dedup_ttl_seconds,
            key_prefix=settings.dedup_key_prefix,
        )

    def key_for(self, provider_message_id: str) -> str:
        return f"{self.key_prefix}{provider_message_id}"

    async def record(self, provider_message_id: str) -> None:
        """Record a provider message id with the current UTC time.

        Raises:
            DedupCacheError: If the Redis write fails.
        """
        value = datetime.now(UTC).isoformat()
        try:
            await self._client.set(
                self.key_for(provider_message_id),
                value,
                ex=self.ttl_seconds,
            )
        except RedisError as e:
            raise DedupCacheError(f"Caching message id {provider_message_id} failed: {e}") from e

    async def ping(self) -> bool:
        """Check connectivity; raises the underlying Redis error when unreachable."""
        return bool(await self._client.ping())

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()
