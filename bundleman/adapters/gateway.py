"""
BundleGateway implementation backed by the Django ORM.

upsert_header and replace_items are separate calls with separate
transactions. replace_items deletes and re-inserts inside one atomic block,
so a failure there leaves the previously stored items in place.
"""

import logging
from decimal import Decimal
from typing import Sequence

from django.core.exceptions import ValidationError
from django.db import transaction

from bundleman.conf import bundleman_settings, get_catalog_backend
from bundleman.draft import BundleDraft
from bundleman.exceptions import BundleError
from bundleman.items import BundleItem, BundleItemSet, unavailable_listing
from bundleman.protocols import BundleGateway

logger = logging.getLogger(__name__)

PERCENT_PLACES = Decimal("0.0001")


class DjangoBundleGateway:
    """Stores bundles in the Bundle and BundleItem tables."""

    def __init__(self, catalog=None):
        self._catalog = catalog

    @property
    def catalog(self):
        if self._catalog is None:
            self._catalog = get_catalog_backend()
        return self._catalog

    def upsert_header(self, bundle: BundleDraft) -> str:
        """
        Create or update the header row.

        Raises:
            BundleError: BUNDLE_NOT_FOUND if the bundle was deleted,
                STALE_BUNDLE if OPTIMISTIC_LOCKING is on and the stored
                version differs from bundle.version.
        """
        from bundleman.models import Bundle

        if bundle.id is None:
            header = Bundle(seller_id=bundle.seller_id)
            self._apply_header(header, bundle)
            header.version = 1
            header.save()
            return str(header.pk)

        with transaction.atomic():
            header = self._locked_header(bundle.id)
            if header is None:
                raise BundleError("BUNDLE_NOT_FOUND", bundle_id=bundle.id)
            if bundleman_settings.OPTIMISTIC_LOCKING and header.version != bundle.version:
                raise BundleError(
                    "STALE_BUNDLE",
                    bundle_id=bundle.id,
                    expected_version=bundle.version,
                    stored_version=header.version,
                )
            self._apply_header(header, bundle)
            header.version += 1
            header.save()
        return str(header.pk)

    def replace_items(self, bundle_id: str, items: Sequence[BundleItem]) -> None:
        from bundleman.models import BundleItem as BundleItemRow

        with transaction.atomic():
            BundleItemRow.objects.filter(bundle_id=bundle_id).delete()
            BundleItemRow.objects.bulk_create(
                [
                    BundleItemRow(
                        id=item.id,
                        bundle_id=bundle_id,
                        listing_id=item.listing_id,
                        quantity=item.quantity,
                        position=item.position,
                    )
                    for item in items
                ]
            )

    def load_bundle(self, bundle_id: str) -> BundleDraft | None:
        from bundleman.models import Bundle

        try:
            header = Bundle.objects.prefetch_related("items").filter(pk=bundle_id).first()
        except ValidationError:
            return None
        if header is None:
            return None
        return self._to_drafts([header])[0]

    def delete_bundle(self, bundle_id: str) -> bool:
        from bundleman.models import Bundle

        try:
            deleted, _ = Bundle.objects.filter(pk=bundle_id).delete()
        except ValidationError:
            return False
        return deleted > 0

    def list_bundles(self, seller_id: str) -> list[BundleDraft]:
        from bundleman.models import Bundle

        headers = list(
            Bundle.objects.for_seller(seller_id).prefetch_related("items").order_by("-created_at")
        )
        return self._to_drafts(headers)

    # ======================================================================
    # INTERNALS
    # ======================================================================

    def _locked_header(self, bundle_id: str):
        from bundleman.models import Bundle

        try:
            return Bundle.objects.select_for_update().filter(pk=bundle_id).first()
        except ValidationError:
            return None

    def _apply_header(self, header, bundle: BundleDraft) -> None:
        pricing = bundle.pricing
        header.title = bundle.title
        header.description = bundle.description
        header.discount_driver = bundle.discount_driver
        header.discount_value = bundle.discount_value
        header.effective_price_q = pricing.effective_price_q
        header.discount_amount_q = pricing.discount_amount_q
        header.discount_percentage = pricing.discount_percentage.quantize(PERCENT_PLACES)
        header.is_active = bundle.is_active

    def _to_drafts(self, headers) -> list[BundleDraft]:
        """Join listing snapshots for all headers with a single catalog read."""
        rows_by_header = {header.pk: list(header.items.all()) for header in headers}
        listing_ids = {row.listing_id for rows in rows_by_header.values() for row in rows}
        listings = self.catalog.get_listings(listing_ids) if listing_ids else {}

        drafts = []
        for header in headers:
            items = []
            for row in rows_by_header[header.pk]:
                listing = listings.get(row.listing_id)
                if listing is None:
                    logger.warning(
                        "Listing %s of bundle %s not found in catalog", row.listing_id, header.pk
                    )
                    listing = unavailable_listing(row.listing_id)
                items.append(
                    BundleItem(
                        id=str(row.pk),
                        listing_id=row.listing_id,
                        listing=listing,
                        quantity=row.quantity,
                        position=row.position,
                    )
                )
            drafts.append(
                BundleDraft(
                    id=str(header.pk),
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
            )
        return drafts


# Verify implementation at import time
if not isinstance(DjangoBundleGateway(), BundleGateway):
    raise TypeError("DjangoBundleGateway does not implement BundleGateway protocol")
