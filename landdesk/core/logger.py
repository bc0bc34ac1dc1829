# landdesk/core/logger.py
from loguru import logger
import sys
import os
from pathlib import Path

# 获取运行环境
ENV = os.getenv("ENV", "development").lower()

# 清除默认 handler
logger.remove()

# 控制台输出
logger.add(
    sys.stderr,
    level="DEBUG" if ENV in ("development", "config", "dev") else "INFO",
    colorize=True,
    backtrace=True,
    diagnose=True,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level: <8}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>"
)

_file_sinks_installed = False


def setup_file_logging(log_dir: str, rotation: str, retention: str) -> None:
    """
    按配置追加文件日志 (普通文本 + JSON 结构化)。
    配置加载完成后调用一次即可，重复调用会被忽略。
    """
    global _file_sinks_installed
    if _file_sinks_installed:
        return

    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)

    # 普通文本日志输出到文件
    logger.add(
        directory / "landdesk.log",
        level="DEBUG",
        rotation=rotation,
        retention=retention,
        encoding="utf-8",
        enqueue=True,
        backtrace=True,
        diagnose=True
    )

    # JSON 结构化日志输出
    logger.add(
        directory / "landdesk.json",
        level="WARNING",  # 只记录警告及以上
        rotation=rotation,
        retention=retention,
        serialize=True,
        encoding="utf-8",
        enqueue=True
    )
    _file_sinks_installed = True
    logger.debug(f"File logging enabled at {directory.resolve()}")


def get_logger(name: str = None):
    """仿 logging.getLogger() 实现的 loguru logger 工厂方法"""
    if name:
        return logger.bind(module=name)
    return logger


logger.debug(f"Log system initialized in {ENV} mode.")
