from typing import Any

from landdesk.core.exceptions import NotFoundException
from landdesk.core.storage.record_store import RecordStoreInterface
from landdesk.domain.record_kinds import RecordKindSpec
from landdesk.enums.upload_enums import UploadStatus
from landdesk.schemas.uploads.upload_schemas import UploadStatusRead


def progress_percent(uploaded: int, total: int) -> int:
    """uploaded / total 的百分比，四舍五入 (0.5 向上)；没有文件时视为 100。"""
    if total <= 0:
        return 100
    return (uploaded * 200 + total) // (2 * total)


class UploadStatusReporter:
    """上传进度查询，总是直接读 Record Store，不经过读缓存。"""

    def __init__(self, kind: RecordKindSpec, record_store: RecordStoreInterface):
        self.kind = kind
        self.record_store = record_store

    async def get_status(self, record_id: Any) -> UploadStatusRead:
        record = await self.record_store.get_by_id(record_id)
        if record is None:
            raise NotFoundException(f"{self.kind.name} not found")

        return UploadStatusRead(
            upload_status=UploadStatus(record.upload_status),
            total_files=record.total_files,
            uploaded_files=record.uploaded_files,
            progress_percent=progress_percent(record.uploaded_files, record.total_files),
        )
