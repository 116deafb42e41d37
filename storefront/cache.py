"""
Local cache - advisory key-value store for list snapshots.

Provides:
- LocalCache protocol (async get/set/delete of string values)
- InMemoryCache for tests and cacheless sessions
- RedisCache backed by Upstash Redis, so a snapshot survives restarts
"""

from typing import Optional, Protocol

from upstash_redis.asyncio import Redis as AsyncRedis

from storefront.config import TTL, UPSTASH_REDIS_REST_TOKEN, UPSTASH_REDIS_REST_URL


class LocalCache(Protocol):
    """What the state managers need from a cache."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemoryCache:
    """Dict-backed cache. Expiry is ignored."""

    def __init__(self, initial: Optional[dict] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class RedisCache:
    """
    Cache records in Upstash Redis.

    Keys are namespaced per shopper so several sessions can share one
    database: ``storefront:{namespace}:{key}``.
    """

    def __init__(self, client: AsyncRedis, namespace: str = "default", default_ttl: int = TTL.LIST_SNAPSHOT):
        self.client = client
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        return f"storefront:{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[str]:
        value = await self.client.get(self._key(key))
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> None:
        await self.client.set(self._key(key), value, ex=ex or self.default_ttl)

    async def delete(self, key: str) -> None:
        await self.client.delete(self._key(key))


def get_redis() -> AsyncRedis:
    """
    Build an async Upstash Redis client from the environment.

    Uses the standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
        raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
    return AsyncRedis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)
