"""Tests for the local cache adapters"""
from unittest.mock import AsyncMock

import pytest

from storefront.cache import InMemoryCache, RedisCache
from storefront.config import TTL


@pytest.mark.asyncio
async def test_in_memory_cache():
    cache = InMemoryCache({"cart": "[]"})

    assert await cache.get("cart") == "[]"
    await cache.set("wishlist", "[1]")
    assert await cache.get("wishlist") == "[1]"
    await cache.delete("wishlist")
    assert await cache.get("wishlist") is None


@pytest.fixture
def redis_client():
    """Mock Upstash async client"""
    client = AsyncMock()
    client.get = AsyncMock(return_value='[{"k": 1}]')
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    return client


@pytest.mark.asyncio
async def test_redis_cache_namespaces_keys(redis_client):
    cache = RedisCache(redis_client, namespace="user-7")

    value = await cache.get("cart")

    redis_client.get.assert_awaited_once_with("storefront:user-7:cart")
    assert value == '[{"k": 1}]'


@pytest.mark.asyncio
async def test_redis_cache_default_ttl(redis_client):
    cache = RedisCache(redis_client)

    await cache.set("cart", "[]")
    await cache.set("sessionId", "session_1", ex=60)

    redis_client.set.assert_any_await("storefront:default:cart", "[]", ex=TTL.LIST_SNAPSHOT)
    redis_client.set.assert_any_await("storefront:default:sessionId", "session_1", ex=60)


@pytest.mark.asyncio
async def test_redis_cache_missing_key(redis_client):
    redis_client.get.return_value = None
    cache = RedisCache(redis_client)

    assert await cache.get("cart") is None
    await cache.delete("cart")
    redis_client.delete.assert_awaited_once_with("storefront:default:cart")
