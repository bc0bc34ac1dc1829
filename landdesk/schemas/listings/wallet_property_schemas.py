from typing import Optional

from pydantic import Field

from landdesk.schemas.listings.property_schemas import (
    PropertyCreate,
    PropertyFilterParams,
    PropertyRead,
    make_optional,
)


class WalletPropertyCreate(PropertyCreate):
    property_category: str = Field(..., min_length=1, max_length=200)


WalletPropertyUpdate = make_optional(WalletPropertyCreate)


class WalletPropertyRead(PropertyRead):
    property_category: str


class WalletPropertyFilterParams(PropertyFilterParams):
    property_category: Optional[str] = None
