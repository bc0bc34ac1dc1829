from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from landdesk.config.config_settings.config_schema import DatabaseConfig
import landdesk.models  # noqa: F401  注册所有表到 SQLModel.metadata


def build_engine(db_config: DatabaseConfig) -> AsyncEngine:
    if db_config.url.startswith("sqlite") and ":memory:" in db_config.url:
        # 内存库只在单个连接内存在
        return create_async_engine(
            db_config.url,
            echo=db_config.echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(db_config.url, echo=db_config.echo, pool_pre_ping=True)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# 初始化数据库（启动时调用）
async def create_db_and_tables(engine: AsyncEngine):
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
