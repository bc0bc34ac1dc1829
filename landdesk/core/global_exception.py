# landdesk/core/global_exception.py

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from landdesk.core.api_response import response_error
from landdesk.core.exceptions import BaseBusinessException
from landdesk.core.logger import logger
from landdesk.core.response_codes import ResponseCodeEnum


def register_exception_handlers(app: FastAPI) -> None:
    """把业务异常、参数校验异常与未处理异常统一转换为标准响应结构。"""

    @app.exception_handler(BaseBusinessException)
    async def business_exception_handler(request: Request, exc: BaseBusinessException):
        logger.warning(f"Business Exception | code: {exc.code}, message: {exc.message}, path: {request.url.path}")
        return response_error(
            code=ResponseCodeEnum.SERVER_ERROR,
            code_value=exc.code,
            http_status=exc.status_code,
            message=exc.message,
            data=exc.extra or None,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return response_error(
            code=ResponseCodeEnum.VALIDATION_ERROR,
            http_status=400,
            data={"errors": [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(f"Unhandled Exception | {repr(exc)} | path: {request.url.path}")
        return response_error(
            code=ResponseCodeEnum.SERVER_ERROR,
            http_status=500,
        )
