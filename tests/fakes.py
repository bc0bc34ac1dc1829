"""测试用的内存 Record Store 与可编排失败的对象存储。"""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from landdesk.core.exceptions import DeleteException, UploadException
from landdesk.core.storage.object_store import ObjectStoreInterface
from landdesk.core.storage.record_store import RecordStoreInterface
from landdesk.enums.upload_enums import AttachmentKind
from landdesk.schemas.uploads.upload_schemas import AttachmentRef


def _matches(row: Dict[str, Any], key: str, value: Any) -> bool:
    field, _, op = key.partition("__")
    op = op or "eq"
    current = row.get(field)
    if op == "eq":
        return current == value
    if op == "ne":
        return current != value
    if op == "in":
        return current in value
    if op == "ge":
        return current is not None and current >= value
    if op == "le":
        return current is not None and current <= value
    if op == "ilike":
        return current is not None and str(value).lower() in str(current).lower()
    raise ValueError(f"unsupported operator in fake store: {op}")


class InMemoryRecordStore(RecordStoreInterface):
    def __init__(self, model):
        self.model = model
        self.rows: Dict[uuid.UUID, Dict[str, Any]] = {}
        self.calls: List[str] = []

    def _to_model(self, row: Dict[str, Any]):
        return self.model(**copy.deepcopy(row))

    def _filter(self, filters: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        filters = dict(filters or {})
        or_filters = filters.pop("__or__", {})
        result = []
        for row in self.rows.values():
            if not all(_matches(row, k, v) for k, v in filters.items() if v is not None):
                continue
            if or_filters and not any(_matches(row, k, v) for k, v in or_filters.items()):
                continue
            result.append(row)
        return result

    async def create(self, data: Dict[str, Any]):
        self.calls.append("create")
        now = datetime.now(timezone.utc)
        obj = self.model(**copy.deepcopy(data))
        row = obj.model_dump()
        row.setdefault("id", uuid.uuid4())
        row["created_at"] = now
        row["updated_at"] = now
        self.rows[row["id"]] = row
        return self._to_model(row)

    async def get_by_id(self, record_id: Any):
        self.calls.append("get_by_id")
        row = self.rows.get(uuid.UUID(str(record_id)))
        return self._to_model(row) if row else None

    async def update_by_id(self, record_id: Any, data: Dict[str, Any], return_updated: bool = True):
        self.calls.append("update_by_id")
        row = self.rows.get(uuid.UUID(str(record_id)))
        if row is None:
            return None
        row.update(copy.deepcopy(data))
        row["updated_at"] = datetime.now(timezone.utc)
        return self._to_model(row) if return_updated else None

    async def delete_by_id(self, record_id: Any):
        self.calls.append("delete_by_id")
        row = self.rows.pop(uuid.UUID(str(record_id)), None)
        return self._to_model(row) if row else None

    async def find(self, filters=None, sort_by=None, skip: int = 0, limit: Optional[int] = None):
        self.calls.append("find")
        rows = sorted(self._filter(filters), key=lambda r: r["created_at"], reverse=True)
        rows = rows[skip:]
        if limit is not None:
            rows = rows[:limit]
        return [self._to_model(r) for r in rows]

    async def count(self, filters=None) -> int:
        self.calls.append("count")
        return len(self._filter(filters))

    async def aggregate_group_count(self, field: str, filters=None):
        self.calls.append("aggregate_group_count")
        counts: Dict[Any, int] = {}
        for row in self._filter(filters):
            counts[row.get(field)] = counts.get(row.get(field), 0) + 1
        return [{"key": k, "count": v} for k, v in counts.items()]


class ScriptedObjectStore(ObjectStoreInterface):
    """按文件名或 storage_id 预设失败的对象存储替身。"""

    def __init__(self, fail_uploads=(), fail_deletes=()):
        self.fail_uploads = set(fail_uploads)
        self.fail_deletes = set(fail_deletes)
        self.uploaded: List[AttachmentRef] = []
        self.deleted: List[str] = []

    async def upload(self, data: bytes, filename: str, kind: AttachmentKind) -> AttachmentRef:
        if filename in self.fail_uploads:
            raise UploadException(filename=filename)
        storage_id = f"test/{kind.folder}/{uuid.uuid4().hex}-{filename}"
        ref = AttachmentRef(
            url=f"https://cdn.example.com/{storage_id}",
            storage_id=storage_id,
            original_name=filename,
        )
        self.uploaded.append(ref)
        return ref

    async def delete(self, storage_id: str, kind: AttachmentKind) -> None:
        if storage_id in self.fail_deletes:
            raise DeleteException(storage_id=storage_id)
        self.deleted.append(storage_id)
