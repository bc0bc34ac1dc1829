# landdesk/infra/cache/read_cache.py

from typing import Any, Awaitable, Callable, Optional

from landdesk.core.logger import get_logger
from landdesk.infra.cache.cache_backend import CacheBackend

logger = get_logger(__name__)


class ReadCache:
    """
    列表与详情查询的短期缓存。
    任何写操作之后都会调用 invalidate_all() 整体清空；
    后端异常只记录日志，读取退化为直接计算。
    """

    def __init__(self, backend: CacheBackend, default_ttl: int = 300):
        self.backend = backend
        self.default_ttl = default_ttl

    @staticmethod
    def build_key(operation: str, **params: Any) -> str:
        """operation 加上按名称排序的全部参数，None 记为 all。"""
        parts = [operation]
        for name in sorted(params):
            value = params[name]
            if isinstance(value, dict):
                value = ",".join(f"{k}={value[k]}" for k in sorted(value))
            parts.append(f"{name}={'all' if value is None else value}")
        return ":".join(parts)

    async def get_or_compute(
        self,
        key: str,
        ttl: Optional[int],
        compute_fn: Callable[[], Awaitable[Any]],
    ) -> Any:
        try:
            cached = await self.backend.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for '{key}': {e}")
            cached = None

        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        value = await compute_fn()

        try:
            await self.backend.set(key, value, ttl or self.default_ttl)
        except Exception as e:
            logger.warning(f"Cache write failed for '{key}': {e}")
        return value

    async def invalidate_all(self) -> None:
        try:
            await self.backend.clear()
            logger.debug("Read cache flushed")
        except Exception as e:
            logger.warning(f"Cache flush failed: {e}")

    async def close(self) -> None:
        await self.backend.close()
