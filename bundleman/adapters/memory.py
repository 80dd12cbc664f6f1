"""
In-memory ListingCatalog and BundleGateway.

For tests and for embedding the bundle core without a database.

Usage in settings.py:
    BUNDLEMAN = {
        "CATALOG_BACKEND": "bundleman.adapters.memory.InMemoryListingCatalog",
        "BUNDLE_GATEWAY": "bundleman.adapters.memory.InMemoryBundleGateway",
    }
"""

from __future__ import annotations

import uuid as uuid_lib
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Sequence

from django.utils import timezone

from bundleman.conf import bundleman_settings
from bundleman.draft import BundleDraft
from bundleman.exceptions import BundleError
from bundleman.items import BundleItem, BundleItemSet, unavailable_listing
from bundleman.protocols import BundleGateway, ListingCatalog, ListingInfo


class InMemoryListingCatalog:
    """ListingCatalog over a dict of ListingInfo."""

    def __init__(self, listings: Iterable[ListingInfo] = ()):
        self.listings: dict[str, ListingInfo] = {listing.id: listing for listing in listings}

    def put(self, listing: ListingInfo) -> ListingInfo:
        self.listings[listing.id] = listing
        return listing

    def update(self, listing_id: str, **changes) -> ListingInfo:
        """Change a stored listing (e.g. stock or status) and return the new snapshot."""
        return self.put(replace(self.listings[listing_id], **changes))

    def remove(self, listing_id: str) -> None:
        self.listings.pop(listing_id, None)

    def get_listing(self, listing_id: str) -> ListingInfo | None:
        return self.listings.get(listing_id)

    def get_listings(self, listing_ids: Iterable[str]) -> dict[str, ListingInfo]:
        return {
            listing_id: self.listings[listing_id]
            for listing_id in listing_ids
            if listing_id in self.listings
        }


@dataclass
class StoredHeader:
    id: str
    seller_id: str
    title: str
    description: str
    discount_driver: str
    discount_value: Decimal
    is_active: bool
    version: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class StoredItem:
    id: str
    listing_id: str
    quantity: int
    position: int


class InMemoryBundleGateway:
    """BundleGateway over plain dicts. Item rows keep only listing ids, like the tables."""

    def __init__(self, catalog: InMemoryListingCatalog | None = None):
        self.catalog = catalog if catalog is not None else InMemoryListingCatalog()
        self.headers: dict[str, StoredHeader] = {}
        self.items: dict[str, list[StoredItem]] = {}

    def stored_items(self, bundle_id: str) -> list[StoredItem]:
        return list(self.items.get(bundle_id, []))

    def upsert_header(self, bundle: BundleDraft) -> str:
        now = timezone.now()
        if bundle.id is None:
            bundle_id = str(uuid_lib.uuid4())
            self.headers[bundle_id] = self._header(bundle, bundle_id, 1, now, now)
            self.items[bundle_id] = []
            return bundle_id

        stored = self.headers.get(bundle.id)
        if stored is None:
            raise BundleError("BUNDLE_NOT_FOUND", bundle_id=bundle.id)
        if bundleman_settings.OPTIMISTIC_LOCKING and stored.version != bundle.version:
            raise BundleError(
                "STALE_BUNDLE",
                bundle_id=bundle.id,
                expected_version=bundle.version,
                stored_version=stored.version,
            )
        self.headers[bundle.id] = self._header(
            bundle, bundle.id, stored.version + 1, stored.created_at, now
        )
        return bundle.id

    def replace_items(self, bundle_id: str, items: Sequence[BundleItem]) -> None:
        if bundle_id not in self.headers:
            raise BundleError("BUNDLE_NOT_FOUND", bundle_id=bundle_id)
        self.items[bundle_id] = [
            StoredItem(
                id=item.id,
                listing_id=item.listing_id,
                quantity=item.quantity,
                position=item.position,
            )
            for item in items
        ]

    def load_bundle(self, bundle_id: str) -> BundleDraft | None:
        header = self.headers.get(bundle_id)
        if header is None:
            return None
        rows = self.items.get(bundle_id, [])
        listings = self.catalog.get_listings([row.listing_id for row in rows])
        items = [
            BundleItem(
                id=row.id,
                listing_id=row.listing_id,
                listing=listings.get(row.listing_id) or unavailable_listing(row.listing_id),
                quantity=row.quantity,
                position=row.position,
            )
            for row in rows
        ]
        return BundleDraft(
            id=header.id,
            seller_id=header.seller_id,
            title=header.title,
            description=header.description,
            items=BundleItemSet(items),
            discount_driver=header.discount_driver,
            discount_value=header.discount_value,
            is_active=header.is_active,
            version=header.version,
            created_at=header.created_at,
            updated_at=header.updated_at,
        )

    def delete_bundle(self, bundle_id: str) -> bool:
        self.items.pop(bundle_id, None)
        return self.headers.pop(bundle_id, None) is not None

    def list_bundles(self, seller_id: str) -> list[BundleDraft]:
        # Dicts keep insertion order, so reversed() is newest first.
        return [
            self.load_bundle(header.id)
            for header in reversed(list(self.headers.values()))
            if header.seller_id == seller_id
        ]

    def _header(self, bundle, bundle_id, version, created_at, updated_at) -> StoredHeader:
        return StoredHeader(
            id=bundle_id,
            seller_id=bundle.seller_id,
            title=bundle.title,
            description=bundle.description,
            discount_driver=bundle.discount_driver,
            discount_value=bundle.discount_value,
            is_active=bundle.is_active,
            version=version,
            created_at=created_at,
            updated_at=updated_at,
        )


# Verify protocol compliance at import time.
if not isinstance(InMemoryListingCatalog(), ListingCatalog):
    raise TypeError("InMemoryListingCatalog does not implement ListingCatalog protocol")
if not isinstance(InMemoryBundleGateway(), BundleGateway):
    raise TypeError("InMemoryBundleGateway does not implement BundleGateway protocol")
