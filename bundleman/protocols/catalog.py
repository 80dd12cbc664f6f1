"""Listing catalog protocols."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Protocol, runtime_checkable

from django.db import models
from django.utils.translation import gettext_lazy as _


class ListingStatus(models.TextChoices):
    """Listing status. Only active listings can join a bundle."""

    ACTIVE = "active", _("Active")
    INACTIVE = "inactive", _("Inactive")


@dataclass(frozen=True)
class ListingInfo:
    """Read-only listing snapshot taken from the catalog.

    Prices are kept in cents (unit_price_q); unit_price gives currency units.
    """

    id: str
    title: str
    unit_price_q: int
    available_quantity: int
    status: str = ListingStatus.ACTIVE
    images: tuple[str, ...] = ()

    @property
    def unit_price(self) -> Decimal:
        """Unit price in currency units."""
        return Decimal(self.unit_price_q) / 100

    @property
    def is_active(self) -> bool:
        return self.status == ListingStatus.ACTIVE


@runtime_checkable
class ListingCatalog(Protocol):
    """Interface for catalog reads. The bundle core never writes listings."""

    def get_listing(self, listing_id: str) -> ListingInfo | None:
        """Return listing by id."""
        ...

    def get_listings(self, listing_ids: Iterable[str]) -> dict[str, ListingInfo]:
        """Return found listings keyed by id. Missing ids are omitted."""
        ...
