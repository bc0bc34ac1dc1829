import os

# 必须在导入 landdesk 之前设置，配置加载会读取 landdesk/config/test.yaml
os.environ["ENV"] = "test"

import pytest

from landdesk.domain.record_kinds import MAPS_KIND, PROPERTY_KIND, WALLET_PROPERTY_KIND
from landdesk.infra.cache.cache_backend import MemoryCacheBackend
from landdesk.infra.cache.read_cache import ReadCache
from landdesk.infra.tasks.runner import BackgroundTaskRunner
from tests.fakes import InMemoryRecordStore, ScriptedObjectStore


@pytest.fixture
def cache():
    return ReadCache(MemoryCacheBackend(), default_ttl=300)


@pytest.fixture
async def runner():
    runner = BackgroundTaskRunner(worker_count=2)
    await runner.start()
    yield runner
    await runner.stop()


@pytest.fixture
def property_store():
    return InMemoryRecordStore(PROPERTY_KIND.model)


@pytest.fixture
def wallet_store():
    return InMemoryRecordStore(WALLET_PROPERTY_KIND.model)


@pytest.fixture
def maps_store():
    return InMemoryRecordStore(MAPS_KIND.model)


@pytest.fixture
def object_store():
    return ScriptedObjectStore()


@pytest.fixture
def property_draft():
    return {
        "file_type": "Title Clear Lands",
        "land_type": "Agriculture",
        "tenure": "Old Tenure",
        "person_who_shared": "Ramesh Patel",
        "contact_number": "9876543210",
        "village": "Bopal",
        "district": "Ahmedabad",
        "sr_rate": 1250.5,
    }
