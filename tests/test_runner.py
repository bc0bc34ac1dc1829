import asyncio

import pytest

from landdesk.infra.tasks.runner import BackgroundTaskRunner


async def test_jobs_run_after_submit_returns(runner):
    done = []

    async def job():
        await asyncio.sleep(0)
        done.append("ok")

    runner.submit("job", job)
    assert done == []

    await runner.join()
    assert done == ["ok"]
    assert runner.stats == {"submitted": 1, "succeeded": 1, "failed": 0, "pending": 0}


async def test_failing_job_is_counted_not_raised(runner):
    async def boom():
        raise RuntimeError("object store exploded")

    async def fine():
        return None

    runner.submit("boom", boom)
    runner.submit("fine", fine)
    await runner.join()

    assert runner.stats["failed"] == 1
    assert runner.stats["succeeded"] == 1


async def test_stop_drains_queue_first():
    runner = BackgroundTaskRunner(worker_count=1)
    await runner.start()
    done = []

    for i in range(3):
        async def job(i=i):
            await asyncio.sleep(0)
            done.append(i)
        runner.submit(f"job-{i}", job)

    await runner.stop()

    assert done == [0, 1, 2]
    assert runner.running is False


def test_submit_requires_started_runner():
    runner = BackgroundTaskRunner()
    with pytest.raises(RuntimeError):
        runner.submit("x", lambda: None)
