from enum import Enum


class UploadStatus(str, Enum):
    """记录附件批次的上传生命周期。"""
    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"


# 近期活动判断所用的“进行中”状态集合
IN_FLIGHT_STATUSES = (UploadStatus.PENDING, UploadStatus.UPLOADING)


class AttachmentKind(str, Enum):
    """
    附件的逻辑分组。
    继承 (str, Enum) 允许路由参数 "image"/"pdf" 直接校验为枚举成员。
    """
    IMAGE = "image"
    PDF = "pdf"

    @property
    def list_field(self) -> str:
        """记录上保存该类附件的字段名。"""
        return "images" if self is AttachmentKind.IMAGE else "pdfs"

    @property
    def folder(self) -> str:
        return "images" if self is AttachmentKind.IMAGE else "pdfs"
