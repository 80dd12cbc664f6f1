"""Bundleman protocols."""

from bundleman.protocols.catalog import ListingCatalog, ListingInfo, ListingStatus
from bundleman.protocols.gateway import BundleGateway

__all__ = [
    "BundleGateway",
    "ListingCatalog",
    "ListingInfo",
    "ListingStatus",
]
