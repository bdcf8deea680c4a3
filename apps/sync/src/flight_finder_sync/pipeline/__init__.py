from .discovery import DestinationDiscovery
from .refresh import PriceRefresh
from .store import DestinationRecord, PriceCacheStore, PriceRecord

__all__ = [
    "DestinationDiscovery",
    "DestinationRecord",
    "PriceCacheStore",
    "PriceRecord",
    "PriceRefresh",
]
