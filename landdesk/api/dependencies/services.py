# landdesk/api/dependencies/services.py

from typing import Callable

from fastapi import Depends, Request

from landdesk.core.container import AppContainer
from landdesk.services.records.record_service import RecordService
from landdesk.services.uploads.status_reporter import UploadStatusReporter
from landdesk.services.uploads.upload_coordinator import UploadCoordinator


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def upload_coordinator_getter(kind_name: str) -> Callable[..., UploadCoordinator]:
    def get_upload_coordinator(container: AppContainer = Depends(get_container)) -> UploadCoordinator:
        return container.upload_coordinator(kind_name)
    return get_upload_coordinator


def status_reporter_getter(kind_name: str) -> Callable[..., UploadStatusReporter]:
    def get_status_reporter(container: AppContainer = Depends(get_container)) -> UploadStatusReporter:
        return container.status_reporter(kind_name)
    return get_status_reporter


def record_service_getter(kind_name: str) -> Callable[..., RecordService]:
    def get_record_service(container: AppContainer = Depends(get_container)) -> RecordService:
        return container.record_service(kind_name)
    return get_record_service
