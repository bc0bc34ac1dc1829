from enum import Enum


class ResponseCodeEnum(Enum):

    # === 通用响应码 ===
    SUCCESS = (0, "请求成功")
    CREATED = (201, "资源创建成功")
    VALIDATION_ERROR = (40001, "参数验证失败")
    NOT_FOUND = (40400, "资源不存在")
    SERVER_ERROR = (50000, "服务器内部错误")

    # === 文件 / 上传相关 ===
    FILE_NOT_FOUND = (40401, "文件不存在")
    FILE_TOO_LARGE = (40002, "文件大小超出限制")
    UPLOAD_FAILED = (50010, "文件上传失败")
    DELETE_FAILED = (50011, "文件删除失败")

    # === 持久化 ===
    PERSISTENCE_ERROR = (50300, "数据存储不可用")

    def __init__(self, code: int, message: str):
        self._code = code
        self._message = message

    @property
    def code(self):
        return self._code

    @property
    def message(self):
        return self._message
