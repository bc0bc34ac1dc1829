from abc import ABC, abstractmethod

from landdesk.enums.upload_enums import AttachmentKind
from landdesk.schemas.uploads.upload_schemas import AttachmentRef


class ObjectStoreInterface(ABC):
    """附件对象存储的最小接口：上传返回引用，按 storage_id 删除。"""

    @abstractmethod
    async def upload(self, data: bytes, filename: str, kind: AttachmentKind) -> AttachmentRef:
        """上传失败抛出 UploadException。"""
        pass

    @abstractmethod
    async def delete(self, storage_id: str, kind: AttachmentKind) -> None:
        """删除失败抛出 DeleteException。"""
        pass
