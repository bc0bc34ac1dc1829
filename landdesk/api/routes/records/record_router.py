# landdesk/api/routes/records/record_router.py

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel

from landdesk.api._base.form_parsing import parse_record_form
from landdesk.api.dependencies.services import (
    get_container,
    record_service_getter,
    status_reporter_getter,
    upload_coordinator_getter,
)
from landdesk.core.api_response import StandardResponse, response_success
from landdesk.core.container import AppContainer
from landdesk.core.response_codes import ResponseCodeEnum
from landdesk.domain.record_kinds import RecordKindSpec
from landdesk.enums.upload_enums import AttachmentKind
from landdesk.schemas.common.page_schemas import RecordPage
from landdesk.schemas.maps.land_map_schemas import FlagPayload
from landdesk.schemas.uploads.upload_schemas import SubmitResult, UploadStatusRead
from landdesk.services.records.record_service import RecordService
from landdesk.services.uploads.status_reporter import UploadStatusReporter
from landdesk.services.uploads.upload_coordinator import UploadCoordinator

# 可切换的布尔标记及其 URL 片段
FLAG_ROUTES = {
    "on_board": "onboard",
    "recycle_bin": "recycle-bin",
}


def _submit_payload(kind: RecordKindSpec, result: SubmitResult) -> Dict[str, Any]:
    return {
        "record": kind.read_schema.model_validate(result.record),
        "upload_status": result.upload_status.value,
        "immediate": result.immediate,
    }


def build_record_router(kind: RecordKindSpec) -> APIRouter:
    """为一种记录类型生成完整的 CRUD + 附件路由。"""
    router = APIRouter()

    get_coordinator = upload_coordinator_getter(kind.name)
    get_reporter = status_reporter_getter(kind.name)
    get_service = record_service_getter(kind.name)
    read_schema = kind.read_schema
    label = kind.name.replace("_", " ")

    @router.post(
        "/",
        response_model=StandardResponse[Dict[str, Any]],
        status_code=status.HTTP_201_CREATED,
        summary=f"创建 {label} (附件后台上传)",
    )
    async def create_record(
        request: Request,
        container: AppContainer = Depends(get_container),
        coordinator: UploadCoordinator = Depends(get_coordinator),
    ):
        """
        multipart 表单提交；立即返回已创建的记录，images / pdfs 在后台上传。
        """
        draft, files = await parse_record_form(
            request, kind.create_schema, container.config.upload.max_file_size_mb
        )
        result = await coordinator.submit(draft, files)
        return response_success(
            data=_submit_payload(kind, result),
            code=ResponseCodeEnum.CREATED,
            http_status=status.HTTP_201_CREATED,
            message=f"{label.capitalize()} created successfully",
        )

    @router.get(
        "/",
        response_model=StandardResponse[RecordPage[read_schema]],
        summary=f"分页查询 {label}",
    )
    async def list_records(
        page: int = Query(1, ge=1, description="页码"),
        limit: int = Query(9, ge=1, le=100, description="每页数量"),
        search: Optional[str] = Query(None, description="关键字 (不区分大小写)"),
        bypass_cache: bool = Query(False, description="跳过读缓存"),
        filter_params: BaseModel = Depends(kind.filter_schema),
        service: RecordService = Depends(get_service),
    ):
        filters = filter_params.model_dump(exclude_none=True, mode="json")
        page_data = await service.list_records(
            page=page, limit=limit, filters=filters, search=search, bypass_cache=bypass_cache
        )
        return response_success(data=page_data)

    @router.get(
        "/{record_id}",
        response_model=StandardResponse[read_schema],
        summary=f"获取单个 {label}",
    )
    async def get_record(record_id: UUID, service: RecordService = Depends(get_service)):
        return response_success(data=await service.get_record(record_id))

    @router.put(
        "/{record_id}",
        response_model=StandardResponse[Dict[str, Any]],
        summary=f"更新 {label} 并追加附件",
    )
    async def update_record(
        record_id: UUID,
        request: Request,
        container: AppContainer = Depends(get_container),
        coordinator: UploadCoordinator = Depends(get_coordinator),
    ):
        """
        只更新表单中提交的字段；新附件追加到已有列表之后，total_files 累加。
        """
        update_fields, files = await parse_record_form(
            request, kind.update_schema, container.config.upload.max_file_size_mb, partial=True
        )
        result = await coordinator.resubmit(record_id, update_fields, files)
        return response_success(
            data=_submit_payload(kind, result),
            message=f"{label.capitalize()} updated successfully",
        )

    @router.delete(
        "/{record_id}",
        response_model=StandardResponse[read_schema],
        summary=f"删除 {label} 及其全部附件",
    )
    async def delete_record(record_id: UUID, coordinator: UploadCoordinator = Depends(get_coordinator)):
        deleted = await coordinator.delete_record(record_id)
        return response_success(
            data=read_schema.model_validate(deleted),
            message=f"{label.capitalize()} and associated files deleted successfully",
        )

    @router.delete(
        "/{record_id}/files/{file_kind}/{storage_id:path}",
        response_model=StandardResponse[read_schema],
        summary="删除单个附件",
    )
    async def delete_attachment(
        record_id: UUID,
        file_kind: AttachmentKind,
        storage_id: str,
        coordinator: UploadCoordinator = Depends(get_coordinator),
    ):
        updated = await coordinator.delete_attachment(record_id, file_kind, storage_id)
        return response_success(
            data=read_schema.model_validate(updated),
            message="File deleted successfully",
        )

    @router.get(
        "/{record_id}/upload-status",
        response_model=StandardResponse[UploadStatusRead],
        summary="查询附件上传进度 (不走缓存)",
    )
    async def get_upload_status(record_id: UUID, reporter: UploadStatusReporter = Depends(get_reporter)):
        return response_success(data=await reporter.get_status(record_id))

    for field in kind.flag_fields:
        _add_flag_route(router, kind, field, get_service)

    return router


def _add_flag_route(router: APIRouter, kind: RecordKindSpec, field: str, get_service) -> None:
    @router.patch(
        f"/{{record_id}}/{FLAG_ROUTES[field]}",
        response_model=StandardResponse[kind.read_schema],
        summary=f"切换 {field} 标记",
        name=f"toggle_{kind.name}_{field}",
    )
    async def toggle_flag(
        record_id: UUID,
        payload: FlagPayload,
        service: RecordService = Depends(get_service),
    ):
        record = await service.set_flag(record_id, field, payload.value)
        return response_success(data=record, message=f"{field} set to {payload.value}")
