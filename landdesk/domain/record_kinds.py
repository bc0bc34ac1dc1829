# landdesk/domain/record_kinds.py

from typing import Dict, Optional, Tuple, Type

from pydantic import BaseModel
from sqlmodel import SQLModel

from landdesk.enums.listing_enums import FileType
from landdesk.models import LandMap, Property, WalletProperty
from landdesk.schemas.listings.property_schemas import (
    PropertyCreate,
    PropertyFilterParams,
    PropertyRead,
    PropertyUpdate,
)
from landdesk.schemas.listings.wallet_property_schemas import (
    WalletPropertyCreate,
    WalletPropertyFilterParams,
    WalletPropertyRead,
    WalletPropertyUpdate,
)
from landdesk.schemas.maps.land_map_schemas import (
    LandMapCreate,
    LandMapFilterParams,
    LandMapRead,
    LandMapUpdate,
)


class RecordKindSpec(BaseModel):
    """
    描述一种“带附件的记录”：模型、各类 schema、查询规则与存储策略。
    上传协调器、查询服务与路由工厂都只依赖这个描述。
    """
    name: str
    url_prefix: str
    model: Type[SQLModel]
    create_schema: Type[BaseModel]
    update_schema: Type[BaseModel]
    read_schema: Type[BaseModel]
    filter_schema: Type[BaseModel]

    search_fields: Tuple[str, ...] = ()
    ilike_fields: Tuple[str, ...] = ()
    group_count_field: Optional[str] = None
    group_count_values: Tuple[str, ...] = ()
    # 为 True 时 counts["all"] 只统计 recycle_bin 过滤范围内的记录
    count_within_recycle_scope: bool = False
    flag_fields: Tuple[str, ...] = ()

    storage_profile: str

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @property
    def cache_prefix(self) -> str:
        return self.name

    def build_filters(self, params: BaseModel) -> Dict:
        """把过滤参数模型转换成 Record Store 的 field__op 过滤字典。"""
        filters = {}
        for field, value in params.model_dump(exclude_none=True, mode="json").items():
            if field in self.ilike_fields:
                filters[f"{field}__ilike"] = value
            else:
                filters[f"{field}__eq"] = value
        return filters

    def build_search(self, search: Optional[str]) -> Dict:
        if not search or not search.strip() or not self.search_fields:
            return {}
        term = search.strip()
        return {"__or__": {f"{field}__ilike": term for field in self.search_fields}}


LISTING_SEARCH_FIELDS = ("person_who_shared", "village", "district", "near_by_landmark")
FILE_TYPE_VALUES = tuple(ft.value for ft in FileType)

PROPERTY_KIND = RecordKindSpec(
    name="property",
    url_prefix="/properties",
    model=Property,
    create_schema=PropertyCreate,
    update_schema=PropertyUpdate,
    read_schema=PropertyRead,
    filter_schema=PropertyFilterParams,
    search_fields=LISTING_SEARCH_FIELDS,
    ilike_fields=("village", "district"),
    group_count_field="file_type",
    group_count_values=FILE_TYPE_VALUES,
    storage_profile="properties",
)

WALLET_PROPERTY_KIND = RecordKindSpec(
    name="wallet_property",
    url_prefix="/wallet-properties",
    model=WalletProperty,
    create_schema=WalletPropertyCreate,
    update_schema=WalletPropertyUpdate,
    read_schema=WalletPropertyRead,
    filter_schema=WalletPropertyFilterParams,
    search_fields=LISTING_SEARCH_FIELDS,
    ilike_fields=("village", "district"),
    group_count_field="file_type",
    group_count_values=FILE_TYPE_VALUES,
    storage_profile="wallet_properties",
)

MAPS_KIND = RecordKindSpec(
    name="maps",
    url_prefix="/maps",
    model=LandMap,
    create_schema=LandMapCreate,
    update_schema=LandMapUpdate,
    read_schema=LandMapRead,
    filter_schema=LandMapFilterParams,
    search_fields=("area", "notes"),
    count_within_recycle_scope=True,
    flag_fields=("on_board", "recycle_bin"),
    storage_profile="maps",
)

RECORD_KINDS: Dict[str, RecordKindSpec] = {
    kind.name: kind for kind in (PROPERTY_KIND, WALLET_PROPERTY_KIND, MAPS_KIND)
}
