# landdesk/infra/redis/redis_factory.py

from typing import Dict

import redis.asyncio as aioredis

from landdesk.config.config_settings.config_schema import RedisConfig
from landdesk.core.logger import logger


class RedisFactory:
    """
    管理所有命名 Redis 客户端连接的工厂。
    在应用启动的 lifespan 中初始化，关闭时统一释放连接。
    """
    def __init__(self, config: RedisConfig):
        self._config = config
        self._clients: Dict[str, aioredis.Redis] = {}

    async def init_client(self, name: str = "default") -> aioredis.Redis:
        if name in self._clients:
            return self._clients[name]

        client_config = self._config.clients.get(name)
        if client_config is None:
            raise RuntimeError(f"❌ Redis client '{name}' is not configured.")

        try:
            pool = aioredis.ConnectionPool.from_url(
                client_config.final_url,
                max_connections=client_config.max_connections,
                socket_timeout=client_config.socket_timeout,
                socket_connect_timeout=client_config.socket_connect_timeout,
                retry_on_timeout=True,
            )
            client = aioredis.Redis(connection_pool=pool)
            await client.ping()
        except Exception as e:
            logger.error(f"❌ Failed to initialize Redis client '{name}': {e}")
            raise RuntimeError(f"Could not connect to Redis client '{name}'") from e

        self._clients[name] = client
        logger.info(f"✅ Redis client '{name}' connected successfully.")
        return client

    def get_serializer(self, name: str = 'default') -> str:
        return self._config.clients[name].serializer

    async def close_clients(self):
        for name, client in self._clients.items():
            await client.aclose()
            await client.connection_pool.disconnect()
            logger.info(f"🔌 Redis client '{name}' connection closed.")
        self._clients.clear()
