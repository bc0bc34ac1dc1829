# landdesk/models/base/attachment_mixin.py
from typing import Any, Dict, List

from sqlalchemy import JSON
from sqlmodel import SQLModel, Field

from landdesk.enums.upload_enums import UploadStatus


class AttachmentTrackingMixin(SQLModel):
    """
    所有带附件的记录共享的字段：附件列表与上传进度计数。
    images / pdfs 中每一项都是 AttachmentRef 的 dict 形式 {url, storage_id, original_name}。
    """
    images: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    pdfs: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)

    upload_status: str = Field(default=UploadStatus.PENDING.value, index=True)
    total_files: int = Field(default=0, ge=0)
    uploaded_files: int = Field(default=0, ge=0)
