# landdesk/api/_base/form_parsing.py

from typing import Any, Dict, List, Tuple, Type

from fastapi import Request
from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile

from landdesk.core.exceptions import ValidationException
from landdesk.core.response_codes import ResponseCodeEnum
from landdesk.schemas.uploads.upload_schemas import FileBlob, UploadBatch

FILE_FIELDS = ("images", "pdfs")


async def _read_files(uploads: List[Any], max_bytes: int) -> List[FileBlob]:
    blobs = []
    for upload in uploads:
        # 未选择文件的表单项会以空字符串提交
        if not isinstance(upload, UploadFile) or not upload.filename:
            continue
        data = await upload.read()
        await upload.close()
        if len(data) > max_bytes:
            raise ValidationException(
                message=f"File '{upload.filename}' exceeds the {max_bytes // (1024 * 1024)}MB limit",
                extra={"filename": upload.filename},
                code_enum=ResponseCodeEnum.FILE_TOO_LARGE,
            )
        blobs.append(FileBlob(filename=upload.filename, content_type=upload.content_type, data=data))
    return blobs


async def parse_record_form(
    request: Request,
    schema: Type[BaseModel],
    max_file_size_mb: int,
    partial: bool = False,
) -> Tuple[Dict[str, Any], UploadBatch]:
    """
    解析 multipart 表单：普通字段交给 schema 校验，images / pdfs 文件完整读入内存。
    partial=True 时只返回调用方实际提交的字段 (用于更新)。
    """
    form = await request.form()
    max_bytes = max_file_size_mb * 1024 * 1024

    fields = {
        key: value
        for key, value in form.multi_items()
        if key not in FILE_FIELDS and isinstance(value, str)
    }
    try:
        validated = schema.model_validate(fields)
    except ValidationError as e:
        raise ValidationException(
            message="Invalid or missing fields",
            extra={"errors": e.errors(include_context=False, include_url=False)},
        ) from e

    files = UploadBatch(
        images=await _read_files(form.getlist("images"), max_bytes),
        pdfs=await _read_files(form.getlist("pdfs"), max_bytes),
    )
    return validated.model_dump(mode="json", exclude_unset=partial), files
