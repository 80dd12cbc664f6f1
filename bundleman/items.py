"""
Bundle item set.

Ordered, deduplicated list of (listing, quantity) pairs. Positions are always
dense and zero-based: every mutation renumbers them.

Expected failures (unknown item, inactive listing, bad index) come back as
ItemOutcome values and leave the set untouched.
"""

import logging
import uuid as uuid_lib
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Iterator, Mapping, Sequence, TypeVar

from bundleman.protocols.catalog import ListingInfo, ListingStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


OUTCOME_MESSAGES = {
    "ITEM_NOT_FOUND": "Item not found in bundle",
    "LISTING_INACTIVE": "Listing is not active",
    "LISTING_NOT_FOUND": "Listing not found",
    "INVALID_QUANTITY": "Quantity must be at least 1",
    "INVALID_INDEX": "Position out of range",
}


@dataclass
class BundleItem:
    """One line of a bundle. listing is a snapshot taken when the item was added."""

    id: str
    listing_id: str
    listing: ListingInfo
    quantity: int = 1
    position: int = 0

    @property
    def line_total(self) -> Decimal:
        return self.listing.unit_price * self.quantity


@dataclass(frozen=True)
class ItemOutcome:
    """Result of an item set operation."""

    ok: bool
    code: str | None = None
    item_id: str | None = None
    message: str | None = None

    @classmethod
    def success(cls, item_id: str | None = None) -> "ItemOutcome":
        return cls(ok=True, item_id=item_id)

    @classmethod
    def failure(cls, code: str, item_id: str | None = None) -> "ItemOutcome":
        logger.debug("Item operation skipped: %s (item=%s)", code, item_id)
        return cls(ok=False, code=code, item_id=item_id, message=OUTCOME_MESSAGES.get(code, code))


def move_element(seq: Sequence[T], from_index: int, to_index: int) -> list[T]:
    """Return a copy of seq with the element at from_index moved to to_index."""
    result = list(seq)
    result.insert(to_index, result.pop(from_index))
    return result


class BundleItemSet:
    """
    Ordered item list of a bundle.

    add(listing, qty)          - Append, or merge into the item with the same listing
    remove(item_id)            - Remove and renumber
    set_quantity(item_id, qty) - Set quantity (< 1 removes)
    reorder(from, to)          - Move one item, renumber all
    """

    def __init__(self, items: Iterable[BundleItem] = ()):
        self._items: list[BundleItem] = sorted(items, key=lambda item: item.position)
        self._renumber()

    def __iter__(self) -> Iterator[BundleItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> BundleItem:
        return self._items[index]

    def __repr__(self) -> str:
        return f"BundleItemSet({self._items!r})"

    def get(self, item_id: str) -> BundleItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def find(self, listing_id: str) -> BundleItem | None:
        return next((item for item in self._items if item.listing_id == listing_id), None)

    def listing_ids(self) -> list[str]:
        return [item.listing_id for item in self._items]

    # ======================================================================
    # MUTATIONS
    # ======================================================================

    def add(self, listing: ListingInfo, quantity: int = 1) -> ItemOutcome:
        """
        Add a listing to the bundle.

        A listing already in the bundle gets its quantity increased instead of
        a second row.
        """
        if not listing.is_active:
            return ItemOutcome.failure("LISTING_INACTIVE")
        if quantity < 1:
            return ItemOutcome.failure("INVALID_QUANTITY")

        existing = self.find(listing.id)
        if existing is not None:
            existing.quantity += quantity
            existing.listing = listing
            return ItemOutcome.success(existing.id)

        item = BundleItem(
            id=str(uuid_lib.uuid4()),
            listing_id=listing.id,
            listing=listing,
            quantity=quantity,
            position=len(self._items),
        )
        self._items.append(item)
        return ItemOutcome.success(item.id)

    def remove(self, item_id: str) -> ItemOutcome:
        item = self.get(item_id)
        if item is None:
            return ItemOutcome.failure("ITEM_NOT_FOUND", item_id)
        self._items.remove(item)
        self._renumber()
        return ItemOutcome.success(item_id)

    def set_quantity(self, item_id: str, quantity: int) -> ItemOutcome:
        """Set quantity. Inventory is not checked here, only at validation time."""
        if quantity < 1:
            return self.remove(item_id)
        item = self.get(item_id)
        if item is None:
            return ItemOutcome.failure("ITEM_NOT_FOUND", item_id)
        item.quantity = quantity
        return ItemOutcome.success(item_id)

    def reorder(self, from_index: int, to_index: int) -> ItemOutcome:
        last = len(self._items) - 1
        if not (0 <= from_index <= last and 0 <= to_index <= last):
            return ItemOutcome.failure("INVALID_INDEX")
        self._items = move_element(self._items, from_index, to_index)
        self._renumber()
        return ItemOutcome.success(self._items[to_index].id)

    def refresh(self, listings: Mapping[str, ListingInfo]) -> list[str]:
        """
        Replace listing snapshots with fresh catalog data.

        Items whose listing is missing from the catalog keep their last price
        but become inactive with zero stock, so validation flags them.

        Returns:
            Listing ids that were missing from the catalog.
        """
        missing = []
        for item in self._items:
            fresh = listings.get(item.listing_id)
            if fresh is None:
                missing.append(item.listing_id)
                item.listing = replace(
                    item.listing, status=ListingStatus.INACTIVE, available_quantity=0
                )
            else:
                item.listing = fresh
        return missing

    def _renumber(self) -> None:
        for position, item in enumerate(self._items):
            item.position = position


def unavailable_listing(listing_id: str, title: str = "") -> ListingInfo:
    """Placeholder snapshot for a listing the catalog no longer returns."""
    return ListingInfo(
        id=listing_id,
        title=title or listing_id,
        unit_price_q=0,
        available_quantity=0,
        status=ListingStatus.INACTIVE,
    )
