"""
Bundle validation.

Collects every reason a bundle cannot be saved, in a fixed order:
title and description, item count, price, then one entry per offending item.
Never raises for an invalid bundle.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from bundleman.conf import bundleman_settings

if TYPE_CHECKING:
    from bundleman.draft import BundleDraft
    from bundleman.items import BundleItem


@dataclass(frozen=True)
class Violation:
    """One human-readable reason a bundle is not save-eligible."""

    code: str
    message: str
    item_id: str | None = None
    listing_id: str | None = None

    def __str__(self):
        return self.message


class BundleValidator:
    """
    Save-eligibility checks.

    validate(bundle) returns an empty list iff the bundle can be saved.
    """

    @classmethod
    def validate(cls, bundle: "BundleDraft") -> list[Violation]:
        violations = []
        violations.extend(cls._check_details(bundle))
        violations.extend(cls._check_item_count(bundle))
        violations.extend(cls._check_price(bundle))
        for item in bundle.items:
            violations.extend(cls._check_item(item))
        return violations

    @classmethod
    def is_valid(cls, bundle: "BundleDraft") -> bool:
        return not cls.validate(bundle)

    @classmethod
    def _check_details(cls, bundle: "BundleDraft") -> list[Violation]:
        violations = []
        title = (bundle.title or "").strip()
        max_title = bundleman_settings.TITLE_MAX_LENGTH
        max_description = bundleman_settings.DESCRIPTION_MAX_LENGTH

        if not title:
            violations.append(Violation("TITLE_REQUIRED", "Bundle title is required"))
        elif len(title) > max_title:
            violations.append(
                Violation("TITLE_TOO_LONG", f"Bundle title must be at most {max_title} characters")
            )
        if len(bundle.description or "") > max_description:
            violations.append(
                Violation(
                    "DESCRIPTION_TOO_LONG",
                    f"Bundle description must be at most {max_description} characters",
                )
            )
        return violations

    @classmethod
    def _check_item_count(cls, bundle: "BundleDraft") -> list[Violation]:
        count = len(bundle.items)
        min_items = bundleman_settings.MIN_ITEMS
        max_items = bundleman_settings.MAX_ITEMS

        if count < min_items:
            return [
                Violation(
                    "TOO_FEW_ITEMS",
                    f"A bundle must contain at least {min_items} items ({count} added)",
                )
            ]
        if max_items is not None and count > max_items:
            return [
                Violation(
                    "TOO_MANY_ITEMS",
                    f"A bundle can contain at most {max_items} items ({count} added)",
                )
            ]
        return []

    @classmethod
    def _check_price(cls, bundle: "BundleDraft") -> list[Violation]:
        # Sub-cent prices are stored as 0 cents.
        if bundle.pricing.effective_price_q <= 0:
            return [Violation("NON_POSITIVE_PRICE", "Bundle price must be greater than zero")]
        return []

    @classmethod
    def _check_item(cls, item: "BundleItem") -> list[Violation]:
        listing = item.listing
        violations = []
        if not listing.is_active:
            violations.append(
                Violation(
                    "LISTING_INACTIVE",
                    f"'{listing.title}' is no longer available",
                    item_id=item.id,
                    listing_id=item.listing_id,
                )
            )
        elif item.quantity > listing.available_quantity:
            violations.append(
                Violation(
                    "INSUFFICIENT_STOCK",
                    f"'{listing.title}' has only {listing.available_quantity} available "
                    f"({item.quantity} requested)",
                    item_id=item.id,
                    listing_id=item.listing_id,
                )
            )
        return violations
