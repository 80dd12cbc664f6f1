"""ListingCatalog implementation backed by the Listing model."""

import uuid as uuid_lib
from typing import Iterable

from bundleman.protocols import ListingCatalog, ListingInfo


class DjangoListingCatalog:
    """
    ListingCatalog implementation using the bundleman Listing model.

    Swap it for an adapter over your own catalog app via
    BUNDLEMAN["CATALOG_BACKEND"].
    """

    def get_listing(self, listing_id: str) -> ListingInfo | None:
        """Return listing by id."""
        return self.get_listings([listing_id]).get(str(listing_id))

    def get_listings(self, listing_ids: Iterable[str]) -> dict[str, ListingInfo]:
        """Return found listings keyed by id. Malformed ids are treated as missing."""
        from bundleman.models import Listing

        ids = _uuid_strings(listing_ids)
        if not ids:
            return {}
        return {str(listing.pk): to_listing_info(listing) for listing in Listing.objects.filter(pk__in=ids)}


def _uuid_strings(values: Iterable[str]) -> list[str]:
    result = []
    for value in values:
        try:
            result.append(str(uuid_lib.UUID(str(value))))
        except ValueError:
            continue
    return result


def to_listing_info(listing) -> ListingInfo:
    return ListingInfo(
        id=str(listing.pk),
        title=listing.title,
        unit_price_q=listing.unit_price_q,
        available_quantity=listing.available_quantity,
        status=listing.status,
        images=tuple(listing.images or ()),
    )


# Verify implementation at import time
if not isinstance(DjangoListingCatalog(), ListingCatalog):
    raise TypeError("DjangoListingCatalog does not implement ListingCatalog protocol")
