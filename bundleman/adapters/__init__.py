"""Bundleman adapters."""

from bundleman.adapters.catalog_backend import DjangoListingCatalog
from bundleman.adapters.gateway import DjangoBundleGateway
from bundleman.adapters.memory import InMemoryBundleGateway, InMemoryListingCatalog

__all__ = [
    "DjangoBundleGateway",
    "DjangoListingCatalog",
    "InMemoryBundleGateway",
    "InMemoryListingCatalog",
]
