"""
Cache store adapters.

``RedisCacheStore`` absorbs every Redis fault and degrades to a miss or a
no-op. ``NullCacheStore`` is used when caching is disabled or Redis was not
reachable at startup, so callers never branch on cache availability.
"""

from typing import Optional, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError
from structlog import get_logger

logger = get_logger()


class CacheStore(Protocol):
    async def get(self, key: str) -> Optional[bytes]: ...

    async def set(self, key: str, value: bytes, ttl: int) -> None: ...

    async def delete(self, *keys: str) -> None: ...

    async def keys(self, prefix: str) -> list[str]: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


class NullCacheStore:
    async def get(self, key: str) -> Optional[bytes]:
        return None

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        return None

    async def delete(self, *keys: str) -> None:
        return None

    async def keys(self, prefix: str) -> list[str]:
        return []

    async def ping(self) -> bool:
        return False

    async def close(self) -> None:
        return None


class RedisCacheStore:
    def __init__(self, client: Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str, timeout: float) -> "RedisCacheStore":
        client = Redis.from_url(
            url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        return cls(client)

    async def get(self, key: str) -> Optional[bytes]:
        try:
            return await self._client.get(key)
        except (RedisError, OSError) as e:
            logger.warning("cache_get_failed", key=key, error=str(e))
            return None

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl)
        except (RedisError, OSError) as e:
            logger.warning("cache_set_failed", key=key, error=str(e))

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self._client.delete(*keys)
        except (RedisError, OSError) as e:
            logger.warning("cache_delete_failed", keys=len(keys), error=str(e))

    async def keys(self, prefix: str) -> list[str]:
        # SCAN, not KEYS
        found = []
        try:
            async for key in self._client.scan_iter(match=f"{prefix}*", count=500):
                found.append(key.decode() if isinstance(key, bytes) else key)
        except (RedisError, OSError) as e:
            logger.warning("cache_scan_failed", prefix=prefix, error=str(e))
        return found

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except (RedisError, OSError):
            return False

    async def close(self) -> None:
        await self._client.aclose()


async def connect_cache(url: str, timeout: float) -> CacheStore:
    """Returns a Redis-backed store if ``url`` is set and reachable, else a no-op store."""
    if not url:
        logger.info("cache_disabled")
        return NullCacheStore()
    store = RedisCacheStore.from_url(url, timeout)
    if await store.ping():
        logger.info("cache_connected")
        return store
    logger.warning("cache_unavailable", detail="running without cache")
    await store.close()
    return NullCacheStore()
