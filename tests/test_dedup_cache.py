"""Tests for the Redis dedup cache."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from msgdispatch.cache.dedup import DedupCacheError, RedisDedupCache
from msgdispatch.config import Settings


@pytest.fixture
def redis_client() -> AsyncMock:
    client = AsyncMock()
    client.ping.return_value = True
    return client


@pytest.fixture
def cache(redis_client: AsyncMock) -> RedisDedupCache:
    return RedisDedupCache(redis_client, ttl_seconds=3600, key_prefix="msgdispatch:sent:")


class TestRedisDedupCache:
    """Tests for RedisDedupCache."""

    @pytest.mark.asyncio
    async def test_record_sets_key_with_ttl(self, cache: RedisDedupCache, redis_client: AsyncMock):
        await cache.record("msg-1")

        redis_client.set.assert_awaited_once()
        key, value = redis_client.set.await_args.args
        assert key == "msgdispatch:sent:msg-1"
        assert redis_client.set.await_args.kwargs == {"ex": 3600}
        # Value is an ISO-8601 timestamp
        assert datetime.fromisoformat(value).tzinfo is not None

    @pytest.mark.asyncio
    async def test_record_wraps_redis_errors(self, cache: RedisDedupCache, redis_client: AsyncMock):
        redis_client.set.side_effect = RedisConnectionError("refused")

        with pytest.raises(DedupCacheError, match="msg-1"):
            await cache.record("msg-1")

    @pytest.mark.asyncio
    async def test_ping(self, cache: RedisDedupCache):
        assert await cache.ping() is True

    @pytest.mark.asyncio
    async def test_close(self, cache: RedisDedupCache, redis_client: AsyncMock):
        await cache.close()
        redis_client.aclose.assert_awaited_once()

    def test_key_for(self, cache: RedisDedupCache):
        assert cache.key_for("abc") == "msgdispatch:sent:abc"

    def test_from_settings(self, test_settings: Settings):
        settings = test_settings.model_copy(
            update={"dedup_ttl_seconds": 60, "dedup_key_prefix": "test:"}
        )

        cache = RedisDedupCache.from_settings(settings)

        assert cache.ttl_seconds == 60
        assert cache.key_for("x") == "test:x"
