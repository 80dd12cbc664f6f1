"""Bundleman models."""

from bundleman.models.bundle import Bundle, BundleItem
from bundleman.models.listing import Listing

__all__ = [
    "Bundle",
    "BundleItem",
    "Listing",
]
