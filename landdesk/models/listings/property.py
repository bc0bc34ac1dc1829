from typing import Optional

from sqlmodel import Field

from landdesk.models.base.base_model import BaseModel


class ListingFieldsMixin(BaseModel):
    """土地房源的公共字段 (普通房源与钱包房源共用)。"""
    __abstract__ = True

    file_type: str = Field(index=True, description="文件类型, e.g., 'Title Clear Lands'")
    land_type: str = Field(description="土地类型")
    tenure: str = Field(description="产权年限类型")
    person_who_shared: str = Field(index=True, description="信息分享人")
    contact_number: str

    village: Optional[str] = Field(default=None, index=True)
    taluko: Optional[str] = None
    district: Optional[str] = Field(default=None, index=True)
    ser_no_new: Optional[str] = None
    ser_no_old: Optional[str] = None
    fp_no: Optional[str] = None
    tp: Optional[str] = None
    zone: Optional[str] = None
    sr_area: Optional[str] = None
    fp_area: Optional[str] = None
    sr_rate: Optional[float] = None
    fp_rate: Optional[float] = None
    mtr_road: Optional[str] = None
    near_by_landmark: Optional[str] = None
    notes: Optional[str] = None
    map_link: Optional[str] = None


class Property(ListingFieldsMixin, table=True):
    pass
