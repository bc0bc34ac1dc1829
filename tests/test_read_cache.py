from unittest.mock import AsyncMock, MagicMock, patch

from landdesk.infra.cache.cache_backend import CacheBackend, MemoryCacheBackend
from landdesk.infra.cache.read_cache import ReadCache
from landdesk.infra.cache.redis_cache_backend import RedisCacheBackend
from landdesk.infra.redis.base_redis_client import BaseRedisClient


class BrokenBackend(CacheBackend):
    async def get(self, key):
        raise ConnectionError("cache down")

    async def set(self, key, value, ttl):
        raise ConnectionError("cache down")

    async def clear(self):
        raise ConnectionError("cache down")


def counting(value):
    calls = {"n": 0}

    async def compute():
        calls["n"] += 1
        return value
    return compute, calls


def test_build_key_is_order_independent():
    a = ReadCache.build_key("property:list", page=1, limit=9, search=None, filters={"tenure": "Premium", "district": "Surat"})
    b = ReadCache.build_key("property:list", filters={"district": "Surat", "tenure": "Premium"}, search=None, limit=9, page=1)

    assert a == b
    assert "search=all" in a
    assert ReadCache.build_key("property:list", page=2, limit=9) != ReadCache.build_key("property:list", page=1, limit=9)


async def test_get_or_compute_caches_until_invalidated(cache):
    compute, calls = counting({"items": []})

    assert await cache.get_or_compute("k", 60, compute) == {"items": []}
    assert await cache.get_or_compute("k", 60, compute) == {"items": []}
    assert calls["n"] == 1

    await cache.invalidate_all()
    await cache.get_or_compute("k", 60, compute)
    assert calls["n"] == 2


async def test_entries_expire_after_ttl():
    cache = ReadCache(MemoryCacheBackend(), default_ttl=300)
    compute, calls = counting("v")

    with patch("landdesk.infra.cache.cache_backend.time.monotonic", return_value=1000.0):
        await cache.get_or_compute("k", 10, compute)
    with patch("landdesk.infra.cache.cache_backend.time.monotonic", return_value=1005.0):
        await cache.get_or_compute("k", 10, compute)
    assert calls["n"] == 1

    with patch("landdesk.infra.cache.cache_backend.time.monotonic", return_value=1011.0):
        await cache.get_or_compute("k", 10, compute)
    assert calls["n"] == 2


async def test_backend_errors_fall_back_to_fresh_data():
    cache = ReadCache(BrokenBackend())
    compute, calls = counting(42)

    assert await cache.get_or_compute("k", 10, compute) == 42
    assert await cache.get_or_compute("k", 10, compute) == 42
    assert calls["n"] == 2

    await cache.invalidate_all()


async def test_redis_backend_namespaces_and_clears_only_its_keys():
    async def scan(match, count):
        for key in ["landdesk:cache:a", "landdesk:cache:b"]:
            yield key

    redis = MagicMock()
    redis.get = AsyncMock(return_value=b'{"total": 3}')
    redis.set = AsyncMock()
    redis.delete = AsyncMock(return_value=2)
    redis.scan_iter = scan

    backend = RedisCacheBackend(BaseRedisClient(redis), namespace="landdesk")

    await backend.set("property:list", {"total": 3}, ttl=30)
    redis.set.assert_awaited_once_with(name="landdesk:cache:property:list", value='{"total": 3}', ex=30)

    assert await backend.get("property:list") == {"total": 3}
    redis.get.assert_awaited_once_with(name="landdesk:cache:property:list")

    await backend.clear()
    redis.delete.assert_awaited_once_with("landdesk:cache:a", "landdesk:cache:b")
