"""In-memory bundle being composed."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from bundleman.items import BundleItemSet
from bundleman.pricing import ZERO, DiscountDriver, Pricing, PricingReconciler, coerce_discount


@dataclass
class BundleDraft:
    """
    A bundle under edit.

    Price fields are read-only: they come from the last reprice() call, which
    reconciles the items against the stored discount driver. Callers change
    the discount with set_discount().
    """

    seller_id: str
    title: str = ""
    description: str = ""
    items: BundleItemSet = field(default_factory=BundleItemSet)
    discount_driver: str = DiscountDriver.NONE
    discount_value: Decimal = ZERO
    is_active: bool = True
    id: str | None = None
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pricing: Pricing = field(init=False, repr=False)

    def __post_init__(self):
        self.reprice()

    def __str__(self):
        return f"{self.title or '(untitled)'} [{self.id or 'unsaved'}]"

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def set_discount(self, driver: str, value) -> Pricing:
        """
        Make driver the driving discount field and reprice.

        A value of 0 resets the discount (no driver).

        Raises:
            BundleError: INVALID_DISCOUNT if value is out of range.
        """
        if driver == DiscountDriver.NONE:
            amount = ZERO
        else:
            amount = coerce_discount(driver, value)
        if amount == 0:
            driver = DiscountDriver.NONE
        self.discount_driver = driver
        self.discount_value = amount
        return self.reprice()

    def reprice(self) -> Pricing:
        self.pricing = PricingReconciler.reconcile(
            self.items, self.discount_driver, self.discount_value
        )
        return self.pricing

    @property
    def gross(self) -> Decimal:
        return self.pricing.gross

    @property
    def effective_price(self) -> Decimal:
        return self.pricing.effective_price

    @property
    def discount_amount(self) -> Decimal:
        return self.pricing.discount_amount

    @property
    def discount_percentage(self) -> Decimal:
        return self.pricing.discount_percentage
