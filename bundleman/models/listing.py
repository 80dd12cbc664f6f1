"""Listing model."""

import uuid as uuid_lib
from decimal import ROUND_HALF_UP, Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from bundleman.protocols.catalog import ListingStatus


class ListingQuerySet(models.QuerySet):
    def active(self):
        """Listings that can be added to a bundle."""
        return self.filter(status=ListingStatus.ACTIVE)


class Listing(models.Model):
    """
    Sellable handmade item.

    The bundle core only reads listings, through the ListingCatalog protocol.
    """

    id = models.UUIDField(primary_key=True, default=uuid_lib.uuid4, editable=False)
    seller_id = models.CharField(_("seller"), max_length=64, db_index=True)
    title = models.CharField(_("title"), max_length=200)

    # Price (in cents)
    unit_price_q = models.BigIntegerField(
        _("unit price"),
        default=0,
        validators=[MinValueValidator(0)],
        help_text=_("Unit price in cents"),
    )
    available_quantity = models.PositiveIntegerField(_("available quantity"), default=0)
    images = models.JSONField(_("images"), default=list, blank=True)
    status = models.CharField(
        _("status"),
        max_length=20,
        choices=ListingStatus.choices,
        default=ListingStatus.ACTIVE,
        db_index=True,
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    objects = ListingQuerySet.as_manager()

    class Meta:
        verbose_name = _("listing")
        verbose_name_plural = _("listings")
        ordering = ["title"]

    def __str__(self):
        return self.title

    @property
    def unit_price(self) -> Decimal:
        """Unit price in currency units."""
        return Decimal(self.unit_price_q) / 100

    @unit_price.setter
    def unit_price(self, value: Decimal):
        self.unit_price_q = int((Decimal(str(value)) * 100).to_integral_value(rounding=ROUND_HALF_UP))
