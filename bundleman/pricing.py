"""
Bundle pricing.

Single-driver model: the seller sets either a discount amount or a discount
percentage, and the other field is derived from it. The driver and its value
are the only stored inputs; everything else is recomputed from scratch on
every call.

When the item set changes, the same driver is re-applied to the new gross:
"20% off" stays 20% off, while "40 off" is capped at the new gross.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from django.db import models
from django.utils.translation import gettext_lazy as _

from bundleman.exceptions import BundleError
from bundleman.items import BundleItem

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Matches Bundle.discount_value (12 digits, 4 places).
DISCOUNT_PLACES = Decimal("0.0001")
MAX_DISCOUNT_VALUE = Decimal("99999999.9999")


class DiscountDriver(models.TextChoices):
    """Which discount field the seller set explicitly."""

    NONE = "none", _("No discount")
    AMOUNT = "amount", _("Fixed amount")
    PERCENTAGE = "percentage", _("Percentage")


@dataclass(frozen=True)
class Pricing:
    """Reconciled bundle price. All values in currency units."""

    gross: Decimal
    effective_price: Decimal
    discount_amount: Decimal
    discount_percentage: Decimal
    driver: str = DiscountDriver.NONE

    @property
    def effective_price_q(self) -> int:
        return to_cents(self.effective_price)

    @property
    def discount_amount_q(self) -> int:
        return to_cents(self.discount_amount)


def to_cents(value: Decimal) -> int:
    """Currency units to cents, rounding half up."""
    return int((value * 100).to_integral_value(rounding=ROUND_HALF_UP))


def coerce_discount(driver: str, value) -> Decimal:
    """
    Parse, range-check and quantize a discount value to 4 places, so the
    value priced in memory is the one that is stored.

    Raises:
        BundleError: INVALID_DISCOUNT for non-numeric input, negative values,
            amounts too large to store, or a percentage above 100.
    """
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise BundleError("INVALID_DISCOUNT", driver=driver, value=str(value)) from None

    if not amount.is_finite() or amount < 0:
        raise BundleError("INVALID_DISCOUNT", driver=driver, value=str(value))
    if amount > MAX_DISCOUNT_VALUE:
        raise BundleError(
            "INVALID_DISCOUNT",
            "Discount is too large",
            driver=driver,
            value=str(value),
        )
    if driver == DiscountDriver.PERCENTAGE and amount > HUNDRED:
        raise BundleError(
            "INVALID_DISCOUNT",
            "Discount percentage must be between 0 and 100",
            driver=driver,
            value=str(value),
        )
    return amount.quantize(DISCOUNT_PLACES, rounding=ROUND_HALF_UP)


class PricingReconciler:
    """
    Pure pricing functions.

    Uses @classmethod for extensibility.
    """

    @classmethod
    def gross(cls, items: Iterable[BundleItem]) -> Decimal:
        """Sum of unit price x quantity over all items."""
        return sum((item.line_total for item in items), ZERO)

    @classmethod
    def reconcile(
        cls,
        items: Iterable[BundleItem],
        driver: str = DiscountDriver.NONE,
        value: Decimal = ZERO,
    ) -> Pricing:
        """
        Compute effective price and both discount fields.

        Args:
            items: Current bundle items
            driver: DiscountDriver of the field the seller set last
            value: Value of that field (percentage or currency amount)

        Returns:
            Pricing with effective_price = gross - discount_amount
        """
        gross = cls.gross(items)
        value = Decimal(value)

        if driver == DiscountDriver.PERCENTAGE and value > 0:
            return cls.from_percentage(gross, value)
        if driver == DiscountDriver.AMOUNT and value > 0:
            return cls.from_amount(gross, value)
        return Pricing(
            gross=gross,
            effective_price=gross,
            discount_amount=ZERO,
            discount_percentage=ZERO,
            driver=driver,
        )

    @classmethod
    def from_percentage(cls, gross: Decimal, percentage: Decimal) -> Pricing:
        effective = gross * (1 - percentage / HUNDRED)
        return Pricing(
            gross=gross,
            effective_price=effective,
            discount_amount=max(ZERO, gross - effective),
            discount_percentage=percentage if gross > 0 else ZERO,
            driver=DiscountDriver.PERCENTAGE,
        )

    @classmethod
    def from_amount(cls, gross: Decimal, amount: Decimal) -> Pricing:
        capped = min(amount, gross)
        effective = max(ZERO, gross - capped)
        return Pricing(
            gross=gross,
            effective_price=effective,
            discount_amount=gross - effective,
            discount_percentage=(gross - effective) / gross * HUNDRED if gross > 0 else ZERO,
            driver=DiscountDriver.AMOUNT,
        )
