# landdesk/schemas/maps/land_map_schemas.py

from typing import Optional

from pydantic import BaseModel, Field, StrictBool, field_validator

from landdesk.schemas.listings.property_schemas import AttachmentTrackingRead


class LandMapCreate(BaseModel):
    area: str = Field(..., max_length=300)
    notes: str = Field("", max_length=5000)

    @field_validator("area")
    @classmethod
    def area_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Area is required")
        return v


class LandMapUpdate(BaseModel):
    area: Optional[str] = Field(None, max_length=300)
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("area")
    @classmethod
    def area_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Area cannot be empty")
        return v


class LandMapRead(AttachmentTrackingRead):
    area: str
    notes: str = ""
    on_board: bool = False
    recycle_bin: bool = False

    model_config = {"from_attributes": True}


class LandMapFilterParams(BaseModel):
    on_board: Optional[bool] = None
    recycle_bin: Optional[bool] = Field(None, description="true 只看回收站, false 排除回收站")


class FlagPayload(BaseModel):
    value: StrictBool
