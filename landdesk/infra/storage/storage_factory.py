import threading
from typing import Dict

from landdesk.config.config_settings.config_schema import AppConfig, StorageProfileConfig
from landdesk.core.logger import logger
from landdesk.infra.storage.s3_client import S3CompatibleClient
from landdesk.infra.storage.storage_interface import StorageClientInterface


class StorageFactory:
    """
    存储客户端工厂。

    根据配置中的 `storage_clients` 创建客户端实例，业务层通过
    `get_client_by_profile()` 传入存储策略名称（如 'properties'）获取对应客户端。
    客户端在首次被请求时才创建，导入模块不会触发任何网络连接。
    """

    def __init__(self, config: AppConfig):
        self._client_configs = config.storage_clients
        self._profiles: Dict[str, StorageProfileConfig] = config.storage_profiles
        self._clients: Dict[str, StorageClientInterface] = {}
        self._lock = threading.Lock()

    def get_client(self, client_name: str) -> StorageClientInterface:
        with self._lock:
            client = self._clients.get(client_name)
            if client is not None:
                return client

            client_config = self._client_configs.get(client_name)
            if client_config is None:
                logger.error(f"Attempted to access non-existent storage client: '{client_name}'")
                raise KeyError(
                    f"Storage client '{client_name}' is not available. Check your configuration.")

            logger.debug(f"Initializing storage client: '{client_name}' of type '{client_config.type}'...")
            client = S3CompatibleClient(config=client_config)
            self._clients[client_name] = client
            logger.info(f"Successfully initialized client: '{client_name}'.")
            return client

    def get_profile_config(self, profile_name: str) -> StorageProfileConfig:
        if profile_name not in self._profiles:
            raise ValueError(f"Storage profile '{profile_name}' is not defined in the configuration.")
        return self._profiles[profile_name]

    def get_client_by_profile(self, profile_name: str) -> StorageClientInterface:
        """
        根据业务场景 (Profile) 名称获取对应的客户端实例。

        Raises:
            ValueError: Profile 未在配置中定义。
            KeyError: Profile 对应的客户端不存在。
        """
        profile_config = self.get_profile_config(profile_name)
        logger.debug(f"Request for profile '{profile_name}' maps to client '{profile_config.client}'.")
        return self.get_client(profile_config.client)
