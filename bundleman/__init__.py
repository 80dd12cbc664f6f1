"""
Django Bundleman - Multi-item bundle composition and pricing.

Usage:
    from bundleman import BundleComposer, BundleError

    composer = BundleComposer.create(seller_id="seller-1", title="Holiday Gift Set")
    composer.add_listing(mug_id)
    composer.add_listing(candle_id, quantity=2)
    composer.set_discount_percentage(15)
    outcome = composer.save()
"""


def __getattr__(name):
    if name == "BundleComposer":
        from bundleman.composer import BundleComposer

        return BundleComposer
    elif name == "BundleError":
        from bundleman.exceptions import BundleError

        return BundleError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["BundleComposer", "BundleError"]
__version__ = "0.1.0"
