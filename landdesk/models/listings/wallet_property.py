from sqlmodel import Field

from landdesk.models.listings.property import ListingFieldsMixin


class WalletProperty(ListingFieldsMixin, table=True):
    property_category: str = Field(index=True, description="钱包房源分类")
