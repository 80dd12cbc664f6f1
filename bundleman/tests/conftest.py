"""Pytest fixtures for Bundleman tests."""

import pytest

from bundleman.adapters.memory import InMemoryBundleGateway, InMemoryListingCatalog
from bundleman.composer import BundleComposer
from bundleman.conf import reset_backends
from bundleman.draft import BundleDraft
from bundleman.items import BundleItemSet
from bundleman.models import Listing
from bundleman.protocols import ListingInfo, ListingStatus


def make_listing(
    listing_id: str,
    price_q: int,
    available: int = 10,
    status: str = ListingStatus.ACTIVE,
    title: str | None = None,
) -> ListingInfo:
    return ListingInfo(
        id=listing_id,
        title=title or listing_id.replace("-", " ").title(),
        unit_price_q=price_q,
        available_quantity=available,
        status=status,
    )


@pytest.fixture(autouse=True)
def _reset_backends():
    reset_backends()
    yield
    reset_backends()


# ═══════════════════════════════════════════════════════════════════
# Catalog snapshots
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def mug():
    """Ceramic mug, 30.00."""
    return make_listing("mug", 3000, available=5, title="Ceramic Mug")


@pytest.fixture
def vase():
    """Stoneware vase, 50.00."""
    return make_listing("vase", 5000, available=3, title="Stoneware Vase")


@pytest.fixture
def candle():
    """Beeswax candle, 12.50."""
    return make_listing("candle", 1250, available=20, title="Beeswax Candle")


@pytest.fixture
def retired_scarf():
    """Inactive listing."""
    return make_listing("scarf", 4000, status=ListingStatus.INACTIVE, title="Wool Scarf")


@pytest.fixture
def item_set():
    return BundleItemSet()


@pytest.fixture
def catalog(mug, vase, candle, retired_scarf):
    return InMemoryListingCatalog([mug, vase, candle, retired_scarf])


@pytest.fixture
def gateway(catalog):
    return InMemoryBundleGateway(catalog)


@pytest.fixture
def composer(gateway, catalog):
    """Unsaved bundle with a title and no items."""
    return BundleComposer.create(
        seller_id="seller-1",
        title="Tea Time Set",
        gateway=gateway,
        catalog=catalog,
    )


@pytest.fixture
def gift_set(composer, mug, vase):
    """Composer holding mug x1 + vase x2 (gross 130.00)."""
    composer.add(mug)
    composer.add(vase, quantity=2)
    return composer


@pytest.fixture
def draft(mug, vase):
    """Standalone draft with mug x1 + vase x2."""
    bundle = BundleDraft(seller_id="seller-1", title="Tea Time Set")
    bundle.items.add(mug)
    bundle.items.add(vase, quantity=2)
    bundle.reprice()
    return bundle


# ═══════════════════════════════════════════════════════════════════
# Database listings
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def db_mug(db):
    return Listing.objects.create(
        seller_id="seller-1",
        title="Ceramic Mug",
        unit_price_q=3000,
        available_quantity=5,
    )


@pytest.fixture
def db_vase(db):
    return Listing.objects.create(
        seller_id="seller-1",
        title="Stoneware Vase",
        unit_price_q=5000,
        available_quantity=3,
        images=["https://cdn.example.com/vase.jpg"],
    )


@pytest.fixture
def db_candle(db):
    return Listing.objects.create(
        seller_id="seller-1",
        title="Beeswax Candle",
        unit_price_q=1250,
        available_quantity=20,
    )
