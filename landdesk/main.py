from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from landdesk.api.router import api_router
from landdesk.config.settings import settings
from landdesk.core.container import AppContainer
from landdesk.core.global_exception import register_exception_handlers
from landdesk.core.logger import logger, setup_file_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 应用启动中，正在初始化资源...")

    if settings.logging.enable_file:
        setup_file_logging(
            settings.logging.log_dir,
            rotation=settings.logging.rotation,
            retention=settings.logging.retention,
        )

    # 测试可以预先注入自己的容器
    container = getattr(app.state, "container", None)
    if container is None:
        container = await AppContainer.from_config(settings)
        app.state.container = container

    await container.start()
    logger.info("✅ 所有资源初始化完成")

    yield

    await container.close()
    logger.info("🛑 应用已关闭，后台任务已结束")


def create_app() -> FastAPI:
    app = FastAPI(title="LandDesk", lifespan=lifespan)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix=settings.server.api_prefix)
    return app


app = create_app()


def main() -> None:
    """本地启动入口：`landdesk` 命令或 `python -m landdesk.main`。"""
    logger.info(f"Starting LandDesk on {settings.server.host}:{settings.server.port}")
    uvicorn.run(
        "landdesk.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.server.log_level,
    )


if __name__ == "__main__":
    main()
