from fastapi import APIRouter

from landdesk.api.routes import health_router
from landdesk.api.routes.records.record_router import build_record_router
from landdesk.domain.record_kinds import MAPS_KIND, PROPERTY_KIND, WALLET_PROPERTY_KIND

api_router = APIRouter()

# 每个元素都是一个包含 router, prefix, 和 tags 的字典
routers_to_include = [
    # record routers
    {"router": build_record_router(PROPERTY_KIND), "prefix": PROPERTY_KIND.url_prefix, "tags": ["properties"]},
    {"router": build_record_router(WALLET_PROPERTY_KIND), "prefix": WALLET_PROPERTY_KIND.url_prefix, "tags": ["wallet-properties"]},
    {"router": build_record_router(MAPS_KIND), "prefix": MAPS_KIND.url_prefix, "tags": ["maps"]},

    # system routers
    {"router": health_router.router, "prefix": "/health", "tags": ["health"]},
]

for route_config in routers_to_include:
    api_router.include_router(**route_config)
