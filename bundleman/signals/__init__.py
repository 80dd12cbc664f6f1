"""
Bundleman signals.

Signals:
    bundle_saved:
        Sent by BundleComposer after header and items were both written.

        Kwargs:
            sender: BundleComposer class
            bundle_id: str
            draft: BundleDraft that was saved

    bundle_items_write_failed:
        Sent by BundleComposer when the header was written but replacing the
        items failed. Stored items may be empty or stale until
        BundleComposer.retry_items() succeeds.

        Kwargs:
            sender: BundleComposer class
            bundle_id: str
            error: str

        Example handler::

            from bundleman.signals import bundle_items_write_failed

            def on_items_failed(sender, bundle_id, error, **kwargs):
                logger.error("Bundle %s has stale items: %s", bundle_id, error)

            bundle_items_write_failed.connect(on_items_failed)

    bundle_deleted:
        Sent by BundleComposer after a bundle was deleted.

        Kwargs:
            sender: BundleComposer class
            bundle_id: str

    bundle_price_changed:
        Sent after a stored Bundle's effective_price_q changes.

        Kwargs:
            sender: Bundle class
            instance: The Bundle instance
            old_price_q: int — previous effective price in cents
            new_price_q: int — new effective price in cents
"""

from django.dispatch import Signal

bundle_saved = Signal()
bundle_items_write_failed = Signal()
bundle_deleted = Signal()
bundle_price_changed = Signal()
