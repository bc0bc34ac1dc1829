from typing import Optional

from landdesk.core.exceptions.base_exception import BaseBusinessException
from landdesk.core.response_codes import ResponseCodeEnum


class UploadException(BaseBusinessException):
    """单个文件上传到对象存储失败。后台阶段只记录日志，不会抛给调用方。"""
    def __init__(self, message: str = "文件上传失败", filename: Optional[str] = None):
        super().__init__(
            ResponseCodeEnum.UPLOAD_FAILED,
            status_code=502,
            message=message,
            extra={"filename": filename} if filename else None,
        )


class DeleteException(BaseBusinessException):
    """对象存储删除失败 (尽力而为的清理)。"""
    def __init__(self, message: str = "文件删除失败", storage_id: Optional[str] = None):
        super().__init__(
            ResponseCodeEnum.DELETE_FAILED,
            status_code=502,
            message=message,
            extra={"storage_id": storage_id} if storage_id else None,
        )
