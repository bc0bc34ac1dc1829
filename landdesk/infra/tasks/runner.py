# landdesk/infra/tasks/runner.py

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from landdesk.core.logger import get_logger

logger = get_logger(__name__)

JobFactory = Callable[[], Awaitable[Any]]


class BackgroundTaskRunner:
    """
    进程内的后台任务执行器：一个 asyncio.Queue 加上 N 个 worker。
    submit() 立即返回；任务异常只记录日志与计数，不会传播给提交方。
    """

    def __init__(self, worker_count: int = 4):
        self.worker_count = worker_count
        self._queue: Optional[asyncio.Queue] = None
        self._workers: List[asyncio.Task] = []
        self._stats = {"submitted": 0, "succeeded": 0, "failed": 0}

    @property
    def running(self) -> bool:
        return bool(self._workers)

    @property
    def stats(self) -> Dict[str, int]:
        pending = self._queue.qsize() if self._queue is not None else 0
        return {**self._stats, "pending": pending}

    async def start(self) -> None:
        if self.running:
            return
        self._queue = asyncio.Queue()
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"upload-worker-{i}")
            for i in range(self.worker_count)
        ]
        logger.info(f"🚀 Background runner started with {self.worker_count} workers")

    def submit(self, name: str, job_factory: JobFactory) -> None:
        if self._queue is None:
            raise RuntimeError("BackgroundTaskRunner is not started")
        self._queue.put_nowait((name, job_factory))
        self._stats["submitted"] += 1
        logger.debug(f"Job queued: {name}")

    async def join(self) -> None:
        """等待队列中已提交的任务全部执行完。"""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self) -> None:
        if not self.running:
            return
        await self.join()
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
        logger.info(f"🛑 Background runner stopped | stats: {self._stats}")

    async def _worker(self, index: int) -> None:
        while True:
            item: Tuple[str, JobFactory] = await self._queue.get()
            name, job_factory = item
            try:
                await job_factory()
                self._stats["succeeded"] += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._stats["failed"] += 1
                logger.opt(exception=e).error(f"Background job '{name}' failed on worker {index}: {e}")
            finally:
                self._queue.task_done()
