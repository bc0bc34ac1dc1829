# landdesk/models/__init__.py

# === 房源模块 ===
from landdesk.models.listings.property import Property
from landdesk.models.listings.wallet_property import WalletProperty

# === 地图模块 ===
from landdesk.models.maps.land_map import LandMap

__all__ = ["Property", "WalletProperty", "LandMap"]
