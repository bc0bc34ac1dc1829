from typing import Any, Generic, Optional, TypeVar

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlmodel import SQLModel

from landdesk.core.logger import logger
from landdesk.core.response_codes import ResponseCodeEnum

DataT = TypeVar("DataT")


class StandardResponse(BaseModel, Generic[DataT]):
    """所有接口统一的 {code, message, data} 信封，仅用于 OpenAPI 文档。"""
    code: int
    message: str
    data: Optional[DataT] = None

    model_config = {
        "arbitrary_types_allowed": True,
        "json_schema_extra": {
            "example": {"code": 0, "message": "请求成功", "data": {}}
        },
    }


def to_json_compatible(data: Any) -> Any:
    # 记录模型与响应 schema 先转成 dict，剩下的 datetime / UUID 交给 jsonable_encoder
    if isinstance(data, (BaseModel, SQLModel)):
        return data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [to_json_compatible(item) for item in data]
    if isinstance(data, dict):
        return {k: to_json_compatible(v) for k, v in data.items()}
    return data


def _envelope(http_status: int, code: int, message: str, data: Any) -> JSONResponse:
    return JSONResponse(
        status_code=http_status,
        content={
            "code": code,
            "message": message,
            "data": jsonable_encoder(to_json_compatible(data)) if data is not None else None,
        },
    )


def response_success(
    data: Any = None,
    code: ResponseCodeEnum = ResponseCodeEnum.SUCCESS,
    http_status: int = 200,
    message: Optional[str] = None,
) -> JSONResponse:
    final_message = message or code.message
    logger.debug(f"Response Success | code: {code.code}, message: {final_message}")
    return _envelope(http_status, code.code, final_message, data)


def response_error(
    code: ResponseCodeEnum,
    http_status: int = 400,
    message: Optional[str] = None,
    code_value: Optional[int] = None,
    data: Any = None,
) -> JSONResponse:
    """code_value 用于业务异常携带的自定义数字码，优先于枚举自带的 code。"""
    final_message = message or code.message
    final_code = code_value if code_value is not None else code.code
    logger.warning(f"Response Error | http_status: {http_status}, code: {final_code}, message: {final_message}")
    return _envelope(http_status, final_code, final_message, data)
