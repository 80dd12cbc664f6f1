"""Bundle and BundleItem models."""

import uuid as uuid_lib
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

from bundleman.pricing import DiscountDriver


class BundleQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def for_seller(self, seller_id: str):
        return self.filter(seller_id=seller_id)


class Bundle(models.Model):
    """
    Stored bundle header.

    discount_driver and discount_value are the source of truth for pricing.
    effective_price_q, discount_amount_q and discount_percentage are a derived
    snapshot written on save for querying; they are recomputed on load.
    """

    id = models.UUIDField(primary_key=True, default=uuid_lib.uuid4, editable=False)
    seller_id = models.CharField(_("seller"), max_length=64, db_index=True)
    title = models.CharField(_("title"), max_length=100)
    description = models.TextField(_("description"), blank=True)

    # Discount driver
    discount_driver = models.CharField(
        _("discount driver"),
        max_length=20,
        choices=DiscountDriver.choices,
        default=DiscountDriver.NONE,
    )
    discount_value = models.DecimalField(
        _("discount value"),
        max_digits=12,
        decimal_places=4,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Percentage or currency amount, depending on the driver"),
    )

    # Derived snapshot
    effective_price_q = models.BigIntegerField(
        _("effective price"),
        default=0,
        help_text=_("Price after discount, in cents"),
    )
    discount_amount_q = models.BigIntegerField(
        _("discount amount"),
        default=0,
        help_text=_("Discount in cents"),
    )
    discount_percentage = models.DecimalField(
        _("discount percentage"),
        max_digits=7,
        decimal_places=4,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )

    is_active = models.BooleanField(_("active"), default=True, db_index=True)

    # Optimistic concurrency token
    version = models.PositiveIntegerField(_("version"), default=1)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    # History tracking (price changes audit)
    history = HistoricalRecords()

    objects = BundleQuerySet.as_manager()

    class Meta:
        verbose_name = _("bundle")
        verbose_name_plural = _("bundles")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["seller_id", "is_active"], name="bundle_seller_active_idx"),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        old_price_q = None
        if not self._state.adding:
            old = Bundle.objects.filter(pk=self.pk).values_list("effective_price_q", flat=True).first()
            if old is not None and old != self.effective_price_q:
                old_price_q = old
        super().save(*args, **kwargs)
        if old_price_q is not None:
            from bundleman.signals import bundle_price_changed

            bundle_price_changed.send(
                sender=self.__class__,
                instance=self,
                old_price_q=old_price_q,
                new_price_q=self.effective_price_q,
            )

    @property
    def effective_price(self) -> Decimal:
        return Decimal(self.effective_price_q) / 100


class BundleItem(models.Model):
    """
    Listing in a bundle.

    listing_id refers to the catalog by convention (loose coupling); listing
    details are joined from the catalog at read time.
    """

    id = models.UUIDField(primary_key=True, default=uuid_lib.uuid4, editable=False)
    bundle = models.ForeignKey(
        Bundle,
        on_delete=models.CASCADE,
        related_name="items",
        verbose_name=_("bundle"),
    )
    listing_id = models.CharField(_("listing"), max_length=64)
    quantity = models.PositiveIntegerField(
        _("quantity"),
        default=1,
        validators=[MinValueValidator(1)],
    )
    position = models.PositiveIntegerField(_("position"), default=0)

    class Meta:
        verbose_name = _("bundle item")
        verbose_name_plural = _("bundle items")
        constraints = [
            models.UniqueConstraint(
                fields=["bundle", "listing_id"],
                name="unique_bundle_listing",
            ),
        ]
        ordering = ["bundle", "position"]

    def __str__(self):
        return f"{self.quantity}x {self.listing_id} in {self.bundle_id}"
