import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

from property_listing.cache import NullCacheStore, RedisCacheStore, connect_cache
from property_listing.services.listings import ListingService

from conftest import FakePropertyRepository


class BrokenRedis:
    """Every command fails the way an unreachable server does."""

    async def get(self, key):
        raise RedisConnectionError("connection refused")

    async def set(self, key, value, ex=None):
        raise RedisTimeoutError("timed out")

    async def delete(self, *keys):
        raise RedisConnectionError("connection refused")

    async def scan_iter(self, match=None, count=None):
        raise RedisConnectionError("connection refused")
        yield  # pragma: no cover

    async def ping(self):
        raise RedisConnectionError("connection refused")

    async def aclose(self):
        pass


class DictRedis:
    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)

    async def scan_iter(self, match=None, count=None):
        prefix = match.rstrip("*")
        for key in list(self.data):
            if key.startswith(prefix):
                yield key.encode()

    async def ping(self):
        return True

    async def aclose(self):
        pass


@pytest.mark.asyncio
async def test_redis_faults_degrade_to_miss_and_noop():
    store = RedisCacheStore(BrokenRedis())
    assert await store.get("k") is None
    await store.set("k", b"v", 60)
    await store.delete("k")
    assert await store.keys("properties:list:") == []
    assert await store.ping() is False


@pytest.mark.asyncio
async def test_keys_are_decoded_and_prefix_scoped():
    client = DictRedis()
    client.data = {"properties:list:abc": b"[]", "property:1": b"{}"}
    store = RedisCacheStore(client)
    assert await store.keys("properties:list:") == ["properties:list:abc"]
    await store.delete(*await store.keys("properties:list:"))
    assert list(client.data) == ["property:1"]


@pytest.mark.asyncio
async def test_listing_survives_broken_cache():
    properties = FakePropertyRepository()
    properties.seed()
    service = ListingService(properties, RedisCacheStore(BrokenRedis()))
    assert len(await service.list_properties("")) == 1
    assert len(await service.list_properties("")) == 1
    assert properties.calls["find"] == 2


@pytest.mark.asyncio
async def test_connect_cache_without_url_is_null_store():
    assert isinstance(await connect_cache("", 0.1), NullCacheStore)


@pytest.mark.asyncio
async def test_connect_cache_falls_back_when_unreachable(monkeypatch):
    monkeypatch.setattr(RedisCacheStore, "from_url", classmethod(lambda cls, url, timeout: cls(BrokenRedis())))
    assert isinstance(await connect_cache("redis://nowhere:6379/0", 0.1), NullCacheStore)


@pytest.mark.asyncio
async def test_null_store_is_inert():
    store = NullCacheStore()
    await store.set("k", b"v", 10)
    assert await store.get("k") is None
    assert await store.keys("") == []
