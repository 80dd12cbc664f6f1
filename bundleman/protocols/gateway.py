"""
BundleGateway protocol.

The storage collaborator that persists bundles. The header and the item list
are written by two separate calls; a caller must be ready for the header write
to succeed and the item write to fail.

Usage:
    # In settings.py
    BUNDLEMAN = {
        "BUNDLE_GATEWAY": "bundleman.adapters.gateway.DjangoBundleGateway",
    }
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from bundleman.draft import BundleDraft
    from bundleman.items import BundleItem


@runtime_checkable
class BundleGateway(Protocol):
    """Interface for bundle storage."""

    def upsert_header(self, bundle: BundleDraft) -> str:
        """
        Create or update the bundle's scalar fields. Items are not touched.

        Args:
            bundle: Draft to write. bundle.id is None for a new bundle.

        Returns:
            Persisted bundle id.

        Raises:
            BundleError: STALE_BUNDLE when the stored version moved on,
                BUNDLE_NOT_FOUND when updating a deleted bundle.
        """
        ...

    def replace_items(self, bundle_id: str, items: Sequence[BundleItem]) -> None:
        """Delete every stored item of the bundle, then insert the given set."""
        ...

    def load_bundle(self, bundle_id: str) -> BundleDraft | None:
        """Rebuild a full draft (header, items, listing snapshots) for editing."""
        ...

    def delete_bundle(self, bundle_id: str) -> bool:
        """Delete the header; items go with it. Returns False if nothing was deleted."""
        ...

    def list_bundles(self, seller_id: str) -> list[BundleDraft]:
        """Return the seller's bundles, newest first."""
        ...
