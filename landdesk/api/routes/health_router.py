from fastapi import APIRouter, Depends

from landdesk.api.dependencies.services import get_container
from landdesk.core.api_response import response_success
from landdesk.core.container import AppContainer

router = APIRouter()


@router.get("", summary="存活检查")
async def health(container: AppContainer = Depends(get_container)):
    return response_success(data={"status": "ok", "runner": container.runner.stats})
