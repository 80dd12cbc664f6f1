"""
Bundleman exceptions.

Only caller misuse and storage conflicts raise. Everything a seller can fix
while composing comes back as a value instead: ItemOutcome for item edits,
Violation for save eligibility, SaveFailure for failed writes.
"""

from typing import Any


ERROR_MESSAGES = {
    "BUNDLE_NOT_FOUND": "Bundle not found",
    "STALE_BUNDLE": "Bundle was changed by someone else",
    "INVALID_DISCOUNT": "Invalid discount",
    "NO_PENDING_ITEMS": "No pending item write to retry",
    "LISTING_NOT_FOUND": "Listing not found",
}

# Codes that a fresh load of the bundle resolves.
RELOAD_CODES = frozenset({"STALE_BUNDLE", "BUNDLE_NOT_FOUND"})


class BundleError(Exception):
    """
    Error raised by the composer, the pricing input checks and the gateways.

    data carries the context of the code, e.g. STALE_BUNDLE has bundle_id,
    expected_version and stored_version; INVALID_DISCOUNT has driver and value.

    Usage:
        try:
            composer = BundleComposer.open(bundle_id)
        except BundleError as e:
            if e.needs_reload:
                return redirect("bundle-list")
            raise
    """

    def __init__(self, code: str, message: str = "", **data: Any) -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    @property
    def bundle_id(self) -> str | None:
        return self.data.get("bundle_id")

    @property
    def needs_reload(self) -> bool:
        """The caller's copy of the bundle is out of date or gone."""
        return self.code in RELOAD_CODES

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }
