# landdesk/core/container.py

from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from landdesk.config.config_settings.config_schema import AppConfig
from landdesk.core.logger import logger
from landdesk.core.storage.object_store import ObjectStoreInterface
from landdesk.core.storage.record_store import RecordStoreInterface
from landdesk.domain.record_kinds import RECORD_KINDS, RecordKindSpec
from landdesk.infra.cache.cache_backend import MemoryCacheBackend
from landdesk.infra.cache.read_cache import ReadCache
from landdesk.infra.tasks.runner import BackgroundTaskRunner
from landdesk.services.records.record_service import RecordService
from landdesk.services.uploads.status_reporter import UploadStatusReporter
from landdesk.services.uploads.upload_coordinator import UploadCoordinator


class AppContainer:
    """
    进程级的共享组件：读缓存、后台任务执行器，以及每种记录的 Record Store 与对象存储。
    服务对象按需创建，所有请求与后台任务共享同一份缓存与执行器。
    """

    def __init__(
        self,
        config: AppConfig,
        cache: ReadCache,
        runner: BackgroundTaskRunner,
        record_stores: Dict[str, RecordStoreInterface],
        object_stores: Dict[str, ObjectStoreInterface],
        engine: Optional[AsyncEngine] = None,
    ):
        self.config = config
        self.cache = cache
        self.runner = runner
        self.record_stores = record_stores
        self.object_stores = object_stores
        self.engine = engine

    @classmethod
    async def from_config(cls, config: AppConfig) -> "AppContainer":
        from landdesk.db.session import build_engine, build_session_factory, create_db_and_tables
        from landdesk.infra.storage.s3_object_store import S3ObjectStore
        from landdesk.infra.storage.storage_factory import StorageFactory
        from landdesk.repo.crud.common.base_repo import SqlRecordStore

        engine = build_engine(config.database)
        await create_db_and_tables(engine)
        session_factory = build_session_factory(engine)

        storage_factory = StorageFactory(config)
        record_stores: Dict[str, RecordStoreInterface] = {}
        object_stores: Dict[str, ObjectStoreInterface] = {}
        for name, kind in RECORD_KINDS.items():
            record_stores[name] = SqlRecordStore(session_factory, kind.model)
            profile = storage_factory.get_profile_config(kind.storage_profile)
            object_stores[name] = S3ObjectStore(
                client=storage_factory.get_client_by_profile(kind.storage_profile),
                folder=profile.default_folder,
            )

        return cls(
            config=config,
            cache=await build_read_cache(config),
            runner=BackgroundTaskRunner(worker_count=config.tasks.worker_count),
            record_stores=record_stores,
            object_stores=object_stores,
            engine=engine,
        )

    # ==========================
    # 服务构建
    # ==========================

    def kind(self, name: str) -> RecordKindSpec:
        return RECORD_KINDS[name]

    def upload_coordinator(self, name: str) -> UploadCoordinator:
        return UploadCoordinator(
            kind=self.kind(name),
            record_store=self.record_stores[name],
            object_store=self.object_stores[name],
            cache=self.cache,
            runner=self.runner,
        )

    def status_reporter(self, name: str) -> UploadStatusReporter:
        return UploadStatusReporter(kind=self.kind(name), record_store=self.record_stores[name])

    def record_service(self, name: str) -> RecordService:
        return RecordService(
            kind=self.kind(name),
            record_store=self.record_stores[name],
            cache=self.cache,
            cache_ttl=self.config.cache.ttl_seconds,
            recent_activity_window_seconds=self.config.cache.recent_activity_window_seconds,
        )

    # ==========================
    # 生命周期
    # ==========================

    async def start(self) -> None:
        await self.runner.start()

    async def close(self) -> None:
        await self.runner.stop()
        await self.cache.close()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("🛑 Container resources released")


async def build_read_cache(config: AppConfig) -> ReadCache:
    cache_cfg = config.cache
    if cache_cfg.backend == "redis":
        from landdesk.infra.cache.redis_cache_backend import RedisCacheBackend
        from landdesk.infra.redis.base_redis_client import BaseRedisClient
        from landdesk.infra.redis.redis_factory import RedisFactory

        factory = RedisFactory(config.redis)
        raw_client = await factory.init_client(cache_cfg.redis_client)
        client = BaseRedisClient(client=raw_client, serializer=factory.get_serializer(cache_cfg.redis_client))
        backend = RedisCacheBackend(client, namespace=cache_cfg.namespace, factory=factory)
        logger.info(f"🗄️ Read cache backed by redis client '{cache_cfg.redis_client}'")
    else:
        backend = MemoryCacheBackend()
        logger.info("🗄️ Read cache backed by process memory")
    return ReadCache(backend, default_ttl=cache_cfg.ttl_seconds)
