# landdesk/infra/redis/base_redis_client.py

import json
import pickle
from typing import Any, AsyncIterator, Optional

from redis.asyncio.client import Redis as AsyncRedis

from landdesk.core.logger import logger

SERIALIZERS = {
    "json": (json.dumps, json.loads, (json.JSONDecodeError, TypeError)),
    "pickle": (pickle.dumps, pickle.loads, (pickle.UnpicklingError, TypeError)),
}


class BaseRedisClient:
    """
    在已建立的 redis 连接上做对象读写。
    连接的创建与释放由 RedisFactory 负责。
    """

    def __init__(self, client: AsyncRedis, serializer: str = "json"):
        if serializer not in SERIALIZERS:
            raise ValueError(f"Unsupported serializer: {serializer}")
        self._client = client
        self._dumps, self._loads, self._decode_errors = SERIALIZERS[serializer]

    async def set_obj(self, key: str, obj: Any, ex: int = 3600):
        await self._client.set(name=key, value=self._dumps(obj), ex=ex)

    async def get_obj(self, key: str) -> Optional[Any]:
        raw = await self._client.get(name=key)
        if not raw:
            return None
        try:
            return self._loads(raw)
        except self._decode_errors as e:
            # 损坏的缓存项按未命中处理
            logger.warning(f"Redis value for '{key}' could not be decoded: {e}")
            return None

    async def delete(self, *keys: str) -> int:
        return await self._client.delete(*keys) if keys else 0

    async def scan_iter(self, match: str, count: int = 500) -> AsyncIterator:
        async for key in self._client.scan_iter(match=match, count=count):
            yield key
