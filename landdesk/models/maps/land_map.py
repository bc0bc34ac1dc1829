from sqlmodel import Field

from landdesk.models.base.base_model import BaseModel


class LandMap(BaseModel, table=True):
    """区域地图，附带图片与 PDF。"""
    area: str = Field(index=True)
    notes: str = Field(default="")
    on_board: bool = Field(default=False, index=True)
    recycle_bin: bool = Field(default=False, index=True)
