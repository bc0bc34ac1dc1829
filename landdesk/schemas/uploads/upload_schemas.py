# landdesk/schemas/uploads/upload_schemas.py

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from landdesk.enums.upload_enums import UploadStatus


class AttachmentRef(BaseModel):
    """对象存储中的单个附件引用。"""
    url: Optional[str] = None
    storage_id: str = Field(..., description="对象存储中的唯一标识 (对象 key)")
    original_name: Optional[str] = None

    model_config = {"frozen": True}


class FileBlob(BaseModel):
    """请求中读取出来的完整文件内容，交给后台阶段上传。"""
    filename: str
    content_type: Optional[str] = None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class UploadBatch(BaseModel):
    images: List[FileBlob] = Field(default_factory=list)
    pdfs: List[FileBlob] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.images) + len(self.pdfs)


class UploadStatusRead(BaseModel):
    upload_status: UploadStatus
    total_files: int
    uploaded_files: int
    progress_percent: int


class SubmitResult(BaseModel):
    """submit / resubmit 的即时返回：记录本身加上本次请求后的上传状态。"""
    record: Any
    upload_status: UploadStatus
    immediate: bool = True

    model_config = {"arbitrary_types_allowed": True}
