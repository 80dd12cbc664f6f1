"""Tests for the Django ORM catalog and gateway adapters."""

import logging
from decimal import Decimal

import pytest

from bundleman.adapters import DjangoBundleGateway, DjangoListingCatalog
from bundleman.composer import BundleComposer, ComposerState, FailureKind
from bundleman.exceptions import BundleError
from bundleman.models import Bundle, BundleItem
from bundleman.protocols import ListingStatus


pytestmark = pytest.mark.django_db


@pytest.fixture
def db_catalog():
    return DjangoListingCatalog()


@pytest.fixture
def db_gateway(db_catalog):
    return DjangoBundleGateway(catalog=db_catalog)


@pytest.fixture
def db_composer(db_gateway, db_catalog, db_mug, db_vase):
    """Unsaved bundle: mug x1 + vase x2 from the database."""
    composer = BundleComposer.create(
        seller_id="seller-1",
        title="Tea Time Set",
        gateway=db_gateway,
        catalog=db_catalog,
    )
    composer.add_listing(str(db_mug.pk))
    composer.add_listing(str(db_vase.pk), quantity=2)
    return composer


class TestDjangoListingCatalog:
    """Tests for DjangoListingCatalog."""

    def test_get_listing(self, db_catalog, db_vase):
        listing = db_catalog.get_listing(str(db_vase.pk))

        assert listing.id == str(db_vase.pk)
        assert listing.title == "Stoneware Vase"
        assert listing.unit_price == Decimal("50")
        assert listing.available_quantity == 3
        assert listing.images == ("https://cdn.example.com/vase.jpg",)
        assert listing.is_active is True

    def test_get_listing_missing(self, db_catalog):
        assert db_catalog.get_listing("00000000-0000-0000-0000-000000000000") is None

    def test_get_listing_malformed_id(self, db_catalog):
        assert db_catalog.get_listing("not-a-uuid") is None

    def test_get_listings_omits_missing(self, db_catalog, db_mug, db_vase):
        listings = db_catalog.get_listings([str(db_mug.pk), "not-a-uuid", str(db_vase.pk)])

        assert set(listings) == {str(db_mug.pk), str(db_vase.pk)}

    def test_get_listings_empty(self, db_catalog):
        assert db_catalog.get_listings([]) == {}

    def test_inactive_listing_returned(self, db_catalog, db_mug):
        db_mug.status = ListingStatus.INACTIVE
        db_mug.save()

        assert db_catalog.get_listing(str(db_mug.pk)).is_active is False


class TestDjangoBundleGateway:
    """Tests for DjangoBundleGateway through the composer."""

    def test_save_creates_rows(self, db_composer):
        outcome = db_composer.save()

        assert outcome.ok is True
        bundle = Bundle.objects.get(pk=outcome.bundle_id)
        assert bundle.title == "Tea Time Set"
        assert bundle.effective_price_q == 13000
        assert bundle.version == 1
        assert list(bundle.items.values_list("quantity", "position")) == [(1, 0), (2, 1)]

    def test_snapshot_fields(self, db_composer):
        """Derived prices are stored in cents and 4-place percentage."""
        db_composer.set_discount_amount(40)
        bundle_id = db_composer.save().bundle_id

        bundle = Bundle.objects.get(pk=bundle_id)
        assert bundle.discount_driver == "amount"
        assert bundle.discount_value == Decimal("40")
        assert bundle.effective_price_q == 9000
        assert bundle.discount_amount_q == 4000
        assert bundle.discount_percentage == Decimal("30.7692")

    def test_item_ids_preserved(self, db_composer):
        item_ids = [item.id for item in db_composer.draft.items]
        bundle_id = db_composer.save().bundle_id

        stored = BundleItem.objects.filter(bundle_id=bundle_id).order_by("position")
        assert [str(row.pk) for row in stored] == item_ids

    def test_load_round_trip(self, db_composer, db_gateway, db_catalog):
        db_composer.set_discount_percentage(20)
        bundle_id = db_composer.save().bundle_id

        reopened = BundleComposer.open(bundle_id, gateway=db_gateway, catalog=db_catalog)

        draft = reopened.draft
        assert reopened.state == ComposerState.SAVED
        assert [item.quantity for item in draft.items] == [1, 2]
        assert draft.effective_price == Decimal("104.0")
        assert draft.discount_percentage == Decimal("20")
        assert draft.created_at is not None

    def test_reload_prices_like_memory(self, db_composer, db_gateway, db_catalog):
        """A discount with more than 4 places reloads to the same price."""
        db_composer.set_discount_percentage("33.333333")
        bundle_id = db_composer.save().bundle_id

        reopened = BundleComposer.open(bundle_id, gateway=db_gateway, catalog=db_catalog)

        assert reopened.draft.discount_value == db_composer.draft.discount_value
        assert reopened.draft.effective_price == db_composer.draft.effective_price

    def test_sub_cent_price_not_stored(self, db_composer):
        db_composer.set_discount_percentage("99.999")

        outcome = db_composer.save()

        assert [v.code for v in outcome.violations] == ["NON_POSITIVE_PRICE"]
        assert not Bundle.objects.exists()

    def test_update_replaces_items(self, db_composer, db_candle):
        bundle_id = db_composer.save().bundle_id
        db_composer.remove(db_composer.draft.items[0].id)
        db_composer.add_listing(str(db_candle.pk), quantity=4)

        outcome = db_composer.save()

        assert outcome.ok is True
        rows = BundleItem.objects.filter(bundle_id=bundle_id).order_by("position")
        assert [row.listing_id for row in rows] == [
            str(db_composer.draft.items[0].listing_id),
            str(db_candle.pk),
        ]
        assert Bundle.objects.get(pk=bundle_id).version == 2

    def test_stale_version(self, db_composer, db_gateway, db_catalog):
        bundle_id = db_composer.save().bundle_id
        other = BundleComposer.open(bundle_id, gateway=db_gateway, catalog=db_catalog)

        db_composer.update_details(title="First Editor")
        db_composer.save()
        other.update_details(title="Second Editor")
        outcome = other.save()

        assert outcome.failure.kind == FailureKind.HEADER_WRITE_FAILED
        assert outcome.failure.code == "STALE_BUNDLE"
        assert Bundle.objects.get(pk=bundle_id).title == "First Editor"

    def test_upsert_deleted_bundle(self, db_composer, db_gateway):
        bundle_id = db_composer.save().bundle_id
        Bundle.objects.filter(pk=bundle_id).delete()

        with pytest.raises(BundleError) as exc:
            db_gateway.upsert_header(db_composer.draft)
        assert exc.value.code == "BUNDLE_NOT_FOUND"

    def test_load_missing(self, db_gateway):
        assert db_gateway.load_bundle("00000000-0000-0000-0000-000000000000") is None
        assert db_gateway.load_bundle("not-a-uuid") is None

    def test_load_with_deleted_listing(self, db_composer, db_gateway, db_mug, caplog):
        bundle_id = db_composer.save().bundle_id
        listing_id = str(db_mug.pk)
        db_mug.delete()

        with caplog.at_level(logging.WARNING, logger="bundleman.adapters.gateway"):
            draft = db_gateway.load_bundle(bundle_id)

        item = draft.items.find(listing_id)
        assert item is not None
        assert item.listing.is_active is False
        assert "not found in catalog" in caplog.text

    def test_delete_cascades(self, db_composer):
        bundle_id = db_composer.save().bundle_id

        assert db_composer.delete() is True
        assert not Bundle.objects.filter(pk=bundle_id).exists()
        assert not BundleItem.objects.filter(bundle_id=bundle_id).exists()

    def test_delete_missing(self, db_gateway):
        assert db_gateway.delete_bundle("00000000-0000-0000-0000-000000000000") is False
        assert db_gateway.delete_bundle("not-a-uuid") is False

    def test_list_bundles(self, db_gateway, db_catalog, db_mug, db_vase, db_candle):
        for title, listings in (("First", [db_mug, db_vase]), ("Second", [db_vase, db_candle])):
            composer = BundleComposer.create(
                "seller-1", title, gateway=db_gateway, catalog=db_catalog
            )
            for listing in listings:
                composer.add_listing(str(listing.pk))
            assert composer.save().ok

        bundles = BundleComposer.for_seller("seller-1", gateway=db_gateway)

        assert sorted(bundle.title for bundle in bundles) == ["First", "Second"]
        assert all(len(bundle.items) == 2 for bundle in bundles)
        assert BundleComposer.for_seller("seller-2", gateway=db_gateway) == []
