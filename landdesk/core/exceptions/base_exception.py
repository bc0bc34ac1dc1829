# landdesk/core/exceptions/base_exception.py

from typing import Optional

from landdesk.core.response_codes import ResponseCodeEnum


class BaseBusinessException(Exception):
    def __init__(
            self,
            code_enum: Optional[ResponseCodeEnum] = None,
            code: Optional[int] = None,
            status_code: int = 400,
            message: Optional[str] = None,
            extra: Optional[dict] = None,
    ):
        code_enum = code_enum or ResponseCodeEnum.SERVER_ERROR
        self.code = code if code is not None else code_enum.code
        self.message = message or code_enum.message
        self.status_code = status_code
        self.extra = extra or {}
        super().__init__(self.message)

    def __str__(self):
        return f"[{self.code}] {self.message}"


class NotFoundException(BaseBusinessException):
    """
    当请求的资源在数据库中不存在时抛出。
    """
    def __init__(self, message: str = "资源不存在", code_enum: ResponseCodeEnum = ResponseCodeEnum.NOT_FOUND):
        super().__init__(code_enum, status_code=404, message=message)


class ValidationException(BaseBusinessException):
    """
    必填字段缺失、字段取值非法或文件超限时抛出，同步返回给调用方。
    """
    def __init__(
            self,
            message: str = "参数验证失败",
            extra: Optional[dict] = None,
            code_enum: ResponseCodeEnum = ResponseCodeEnum.VALIDATION_ERROR,
    ):
        super().__init__(code_enum, status_code=400, message=message, extra=extra)


class PersistenceException(BaseBusinessException):
    """
    数据库不可达或写入失败。
    """
    def __init__(self, message: str = "数据存储不可用"):
        super().__init__(ResponseCodeEnum.PERSISTENCE_ERROR, status_code=503, message=message)
