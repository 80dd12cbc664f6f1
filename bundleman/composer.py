"""
Bundle composer.

Owns one bundle under edit and drives its lifecycle:

    draft ──save()──> validating ──> saving ──> saved
                          │             │
                          └──> error <──┘

error always remembers the state it came from and the next edit or save
resumes it. Edits of a saved bundle make it a draft again. partially_saved is
only ever recorded as the origin of an error: the header is stored, the items
are not, and resuming it gives a draft.

save() writes the header first and the items second, never in parallel. When
the header succeeds and the items fail, the bundle is left partially saved:
retry_items() re-runs the item write alone.

Usage:
    composer = BundleComposer.create(seller_id="seller-1", title="Gift Set")
    composer.add_listing(mug_id)
    composer.add_listing(candle_id, quantity=2)
    composer.set_discount_percentage(10)

    outcome = composer.save()
    if outcome.violations:
        show(outcome.violations)
    elif outcome.partial:
        composer.retry_items()
"""

import logging
from dataclasses import dataclass

from django.db import models
from django.utils.translation import gettext_lazy as _

from bundleman.conf import get_bundle_gateway, get_catalog_backend
from bundleman.draft import BundleDraft
from bundleman.exceptions import BundleError
from bundleman.items import ItemOutcome
from bundleman.pricing import DiscountDriver, Pricing
from bundleman.protocols.catalog import ListingInfo
from bundleman.signals import bundle_deleted, bundle_items_write_failed, bundle_saved
from bundleman.validation import BundleValidator, Violation

logger = logging.getLogger(__name__)


class ComposerState(models.TextChoices):
    DRAFT = "draft", _("Draft")
    VALIDATING = "validating", _("Validating")
    SAVING = "saving", _("Saving")
    SAVED = "saved", _("Saved")
    PARTIALLY_SAVED = "partially_saved", _("Partially saved")
    ERROR = "error", _("Error")


class FailureKind(models.TextChoices):
    """Which persistence step failed."""

    HEADER_WRITE_FAILED = "header_write_failed", _("Header write failed")
    ITEMS_WRITE_FAILED = "items_write_failed", _("Items write failed")


@dataclass(frozen=True)
class SaveFailure:
    """
    Persistence failure.

    HEADER_WRITE_FAILED: nothing changed beyond the previous saved state.
    ITEMS_WRITE_FAILED: the header is written but stored items may be empty
    or stale; retry with BundleComposer.retry_items().
    """

    kind: str
    error: str
    code: str | None = None


@dataclass(frozen=True)
class ComposerError:
    previous: str
    violations: tuple[Violation, ...] = ()
    failure: SaveFailure | None = None


@dataclass(frozen=True)
class SaveOutcome:
    """Result of save() / retry_items()."""

    state: str
    bundle_id: str | None = None
    violations: tuple[Violation, ...] = ()
    failure: SaveFailure | None = None

    @property
    def ok(self) -> bool:
        return self.state == ComposerState.SAVED

    @property
    def partial(self) -> bool:
        return self.failure is not None and self.failure.kind == FailureKind.ITEMS_WRITE_FAILED


class BundleComposer:
    """
    Create/edit/save lifecycle of a single bundle.

    One composer per bundle under edit; it is not shared between editors.
    Gateway and catalog default to the BUNDLEMAN settings.
    """

    def __init__(self, draft: BundleDraft, gateway=None, catalog=None):
        self.draft = draft
        self._gateway = gateway
        self._catalog = catalog
        self.state: str = ComposerState.SAVED if draft.is_persisted else ComposerState.DRAFT
        self.error: ComposerError | None = None
        self.items_pending = False
        self.header_dirty = False

    def __repr__(self):
        return f"<BundleComposer {self.draft} state={self.state}>"

    @property
    def gateway(self):
        if self._gateway is None:
            self._gateway = get_bundle_gateway()
        return self._gateway

    @property
    def catalog(self):
        if self._catalog is None:
            self._catalog = get_catalog_backend()
        return self._catalog

    # ======================================================================
    # CONSTRUCTION
    # ======================================================================

    @classmethod
    def create(
        cls,
        seller_id: str,
        title: str = "",
        description: str = "",
        gateway=None,
        catalog=None,
    ) -> "BundleComposer":
        """Start a new, unsaved bundle."""
        draft = BundleDraft(seller_id=seller_id, title=title, description=description)
        return cls(draft, gateway=gateway, catalog=catalog)

    @classmethod
    def open(cls, bundle_id: str, gateway=None, catalog=None) -> "BundleComposer":
        """
        Load a stored bundle for editing.

        Raises:
            BundleError: BUNDLE_NOT_FOUND
        """
        gateway = gateway or get_bundle_gateway()
        draft = gateway.load_bundle(bundle_id)
        if draft is None:
            raise BundleError("BUNDLE_NOT_FOUND", bundle_id=bundle_id)
        return cls(draft, gateway=gateway, catalog=catalog)

    @classmethod
    def for_seller(cls, seller_id: str, gateway=None) -> list[BundleDraft]:
        """Seller's stored bundles, newest first."""
        gateway = gateway or get_bundle_gateway()
        return gateway.list_bundles(seller_id)

    # ======================================================================
    # EDITING
    # ======================================================================

    def add(self, listing: ListingInfo, quantity: int = 1) -> ItemOutcome:
        return self._after_edit(self.draft.items.add(listing, quantity))

    def add_listing(self, listing_id: str, quantity: int = 1) -> ItemOutcome:
        """Look the listing up in the catalog, then add it."""
        listing = self.catalog.get_listing(listing_id)
        if listing is None:
            return ItemOutcome.failure("LISTING_NOT_FOUND")
        return self.add(listing, quantity)

    def remove(self, item_id: str) -> ItemOutcome:
        return self._after_edit(self.draft.items.remove(item_id))

    def set_quantity(self, item_id: str, quantity: int) -> ItemOutcome:
        return self._after_edit(self.draft.items.set_quantity(item_id, quantity))

    def reorder(self, from_index: int, to_index: int) -> ItemOutcome:
        return self._after_edit(self.draft.items.reorder(from_index, to_index))

    def set_discount_percentage(self, percentage) -> Pricing:
        return self._set_discount(DiscountDriver.PERCENTAGE, percentage)

    def set_discount_amount(self, amount) -> Pricing:
        return self._set_discount(DiscountDriver.AMOUNT, amount)

    def clear_discount(self) -> Pricing:
        return self._set_discount(DiscountDriver.NONE, 0)

    def update_details(
        self,
        title: str | None = None,
        description: str | None = None,
        is_active: bool | None = None,
    ) -> None:
        """Change header fields. Length limits are checked by validate()."""
        if title is not None:
            self.draft.title = title
        if description is not None:
            self.draft.description = description
        if is_active is not None:
            self.draft.is_active = is_active
        self._mark_dirty()

    def refresh_listings(self) -> list[str]:
        """
        Re-read listing snapshots from the catalog.

        Inventory and status can change between add and save, so save()
        calls this before validating.

        Returns:
            Listing ids the catalog no longer returns.
        """
        catalog = self.catalog
        if catalog is None or not len(self.draft.items):
            return []
        listings = catalog.get_listings(self.draft.items.listing_ids())
        missing = self.draft.items.refresh(listings)
        if missing:
            logger.warning("Bundle %s references missing listings: %s", self.draft, missing)
        self.draft.reprice()
        return missing

    def validate(self) -> list[Violation]:
        return BundleValidator.validate(self.draft)

    # ======================================================================
    # PERSISTENCE
    # ======================================================================

    def save(self) -> SaveOutcome:
        """
        Validate, then write header and items.

        Violations stop the save before any gateway call. A failed header
        write leaves the bundle id and version untouched. A failed item
        write keeps the new id and flags items_pending.
        """
        self._resume()
        previous = self.state
        self.state = ComposerState.VALIDATING

        try:
            self.refresh_listings()
        except Exception:
            self.state = previous
            raise

        violations = self.validate()
        if violations:
            return self._fail(previous, violations=tuple(violations))

        self.state = ComposerState.SAVING
        try:
            bundle_id = self.gateway.upsert_header(self.draft)
        except Exception as exc:
            logger.exception("Header write failed for bundle %s", self.draft)
            failure = SaveFailure(
                kind=FailureKind.HEADER_WRITE_FAILED,
                error=str(exc),
                code=getattr(exc, "code", None),
            )
            return self._fail(previous, failure=failure)

        self.draft.id = bundle_id
        self.draft.version += 1
        self.header_dirty = False
        return self._write_items()

    def retry_items(self) -> SaveOutcome:
        """
        Re-run the item write after an ITEMS_WRITE_FAILED save.

        If the bundle was edited since its header was written, the stored
        header is stale too and a full save() runs instead.

        Raises:
            BundleError: NO_PENDING_ITEMS if there is nothing to retry.
        """
        if not self.items_pending:
            raise BundleError("NO_PENDING_ITEMS", bundle_id=self.draft.id)
        if self.header_dirty:
            logger.info("Bundle %s edited since header write; retrying full save", self.draft)
            return self.save()

        self._resume()
        previous = self.state
        self.state = ComposerState.VALIDATING
        violations = self.validate()
        if violations:
            return self._fail(previous, violations=tuple(violations))

        self.state = ComposerState.SAVING
        return self._write_items()

    def delete(self) -> bool:
        """Delete the stored bundle. The draft stays in memory as unsaved."""
        bundle_id = self.draft.id
        if bundle_id is None:
            return False

        deleted = self.gateway.delete_bundle(bundle_id)
        self.draft.id = None
        self.draft.version = 0
        self.state = ComposerState.DRAFT
        self.error = None
        self.items_pending = False
        self.header_dirty = False
        if deleted:
            logger.info("Bundle %s deleted", bundle_id)
            bundle_deleted.send(sender=self.__class__, bundle_id=bundle_id)
        return deleted

    # ======================================================================
    # INTERNALS
    # ======================================================================

    def _write_items(self) -> SaveOutcome:
        bundle_id = self.draft.id
        try:
            self.gateway.replace_items(bundle_id, list(self.draft.items))
        except Exception as exc:
            logger.exception("Items write failed for bundle %s; header already saved", bundle_id)
            self.items_pending = True
            bundle_items_write_failed.send(
                sender=self.__class__, bundle_id=bundle_id, error=str(exc)
            )
            failure = SaveFailure(
                kind=FailureKind.ITEMS_WRITE_FAILED,
                error=str(exc),
                code=getattr(exc, "code", None),
            )
            return self._fail(ComposerState.PARTIALLY_SAVED, failure=failure)

        self.items_pending = False
        self.state = ComposerState.SAVED
        self.error = None
        logger.info("Bundle %s saved (%d items)", bundle_id, len(self.draft.items))
        bundle_saved.send(sender=self.__class__, bundle_id=bundle_id, draft=self.draft)
        return SaveOutcome(state=self.state, bundle_id=bundle_id)

    def _fail(
        self,
        previous: str,
        violations: tuple[Violation, ...] = (),
        failure: SaveFailure | None = None,
    ) -> SaveOutcome:
        self.state = ComposerState.ERROR
        self.error = ComposerError(previous=previous, violations=violations, failure=failure)
        return SaveOutcome(
            state=self.state,
            bundle_id=self.draft.id,
            violations=violations,
            failure=failure,
        )

    def _resume(self) -> None:
        """Leave the error state for the stable state it came from."""
        if self.state == ComposerState.ERROR and self.error is not None:
            previous = self.error.previous
            if previous == ComposerState.PARTIALLY_SAVED:
                previous = ComposerState.DRAFT
            self.state = previous

    def _set_discount(self, driver: str, value) -> Pricing:
        pricing = self.draft.set_discount(driver, value)
        self._mark_dirty()
        return pricing

    def _after_edit(self, outcome: ItemOutcome) -> ItemOutcome:
        if outcome.ok:
            self._mark_dirty()
        return outcome

    def _mark_dirty(self) -> None:
        # Item edits change the stored price snapshot, so they dirty the header too.
        self.header_dirty = True
        self.draft.reprice()
        self._resume()
        if self.state == ComposerState.SAVED:
            self.state = ComposerState.DRAFT
