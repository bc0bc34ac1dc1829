# landdesk/schemas/listings/property_schemas.py

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, create_model, field_validator

from landdesk.enums.listing_enums import FileType, LandType, Tenure
from landdesk.enums.upload_enums import UploadStatus
from landdesk.schemas.uploads.upload_schemas import AttachmentRef


def _blank_to_none(value):
    # 表单里未填写的数字字段会以空字符串提交
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ListingBase(BaseModel):
    village: Optional[str] = Field(None, max_length=200)
    taluko: Optional[str] = Field(None, max_length=200)
    district: Optional[str] = Field(None, max_length=200)
    ser_no_new: Optional[str] = None
    ser_no_old: Optional[str] = None
    fp_no: Optional[str] = None
    tp: Optional[str] = None
    zone: Optional[str] = None
    sr_area: Optional[str] = None
    fp_area: Optional[str] = None
    sr_rate: Optional[float] = Field(None, ge=0)
    fp_rate: Optional[float] = Field(None, ge=0)
    mtr_road: Optional[str] = None
    near_by_landmark: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=5000)
    map_link: Optional[str] = None

    @field_validator("sr_rate", "fp_rate", mode="before")
    @classmethod
    def empty_rate_is_none(cls, v):
        return _blank_to_none(v)


class PropertyCreate(ListingBase):
    file_type: FileType
    land_type: LandType
    tenure: Tenure
    person_who_shared: str = Field(..., min_length=1, max_length=200)
    contact_number: str = Field(..., min_length=1, max_length=50)


def make_optional(model: type[BaseModel]) -> type[BaseModel]:
    fields = model.model_fields
    optional_fields = {
        name: (Optional[field.annotation], None) for name, field in fields.items()
    }
    return create_model(f'{model.__name__}Optional', __base__=ListingBase, **optional_fields)


# 更新时所有字段均可选, 只写入调用方显式提交的字段
PropertyUpdate = make_optional(PropertyCreate)


class AttachmentTrackingRead(BaseModel):
    id: UUID
    images: List[AttachmentRef] = []
    pdfs: List[AttachmentRef] = []
    upload_status: UploadStatus
    total_files: int
    uploaded_files: int
    created_at: datetime
    updated_at: datetime


class PropertyRead(ListingBase, AttachmentTrackingRead):
    file_type: FileType
    land_type: LandType
    tenure: Tenure
    person_who_shared: str
    contact_number: str

    model_config = {"from_attributes": True}


class PropertyFilterParams(BaseModel):
    """列表接口的查询过滤参数。"""
    file_type: Optional[FileType] = None
    land_type: Optional[LandType] = None
    tenure: Optional[Tenure] = None
    village: Optional[str] = Field(None, description="村庄名 (模糊匹配)")
    district: Optional[str] = Field(None, description="地区名 (模糊匹配)")
