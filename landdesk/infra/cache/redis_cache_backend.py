from typing import Any, Optional

from landdesk.infra.cache.cache_backend import CacheBackend
from landdesk.infra.redis.base_redis_client import BaseRedisClient
from landdesk.infra.redis.redis_factory import RedisFactory


class RedisCacheBackend(CacheBackend):
    """
    Redis 读缓存：所有 key 带命名空间前缀，清空时只删除本命名空间的 key。
    """

    def __init__(self, client: BaseRedisClient, namespace: str, factory: Optional[RedisFactory] = None):
        self.client = client
        self.namespace = namespace
        self._factory = factory

    def _key(self, key: str) -> str:
        return f"{self.namespace}:cache:{key}"

    async def get(self, key: str) -> Optional[Any]:
        return await self.client.get_obj(self._key(key))

    async def set(self, key: str, value: Any, ttl: int) -> None:
        await self.client.set_obj(self._key(key), value, ex=ttl)

    async def clear(self) -> None:
        batch = []
        async for key in self.client.scan_iter(match=self._key("*")):
            batch.append(key)
            if len(batch) >= 500:
                await self.client.delete(*batch)
                batch = []
        if batch:
            await self.client.delete(*batch)

    async def close(self) -> None:
        if self._factory is not None:
            await self._factory.close_clients()
