"""
Bundleman configuration.

Usage in settings.py:
    BUNDLEMAN = {
        "MIN_ITEMS": 2,
        "MAX_ITEMS": None,
        "OPTIMISTIC_LOCKING": True,
        "CATALOG_BACKEND": "bundleman.adapters.catalog_backend.DjangoListingCatalog",
        "BUNDLE_GATEWAY": "bundleman.adapters.gateway.DjangoBundleGateway",
    }
"""

import importlib
import threading
from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class BundlemanSettings:
    """Bundleman configuration settings."""

    MIN_ITEMS: int = 2
    MAX_ITEMS: int | None = None
    TITLE_MAX_LENGTH: int = 100
    DESCRIPTION_MAX_LENGTH: int = 1000
    OPTIMISTIC_LOCKING: bool = True
    CATALOG_BACKEND: str | None = "bundleman.adapters.catalog_backend.DjangoListingCatalog"
    BUNDLE_GATEWAY: str | None = "bundleman.adapters.gateway.DjangoBundleGateway"


def get_bundleman_settings() -> BundlemanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "BUNDLEMAN", {})
    return BundlemanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_bundleman_settings(), name)


bundleman_settings = _LazySettings()


def _import_string(dotted_path: str):
    module_path, cls_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, cls_name)


# Backend singletons
_backend_lock = threading.Lock()
_catalog_backend_instance = None
_bundle_gateway_instance = None


def get_catalog_backend():
    """
    Return the configured ListingCatalog instance, or None.

    Loads from BUNDLEMAN["CATALOG_BACKEND"] setting (dotted path).
    If _catalog_backend_instance was set directly (e.g. in tests), returns it as-is.
    """
    global _catalog_backend_instance
    if _catalog_backend_instance is not None:
        return _catalog_backend_instance
    backend_path = bundleman_settings.CATALOG_BACKEND
    if not backend_path:
        return None
    with _backend_lock:
        if _catalog_backend_instance is None:
            _catalog_backend_instance = _import_string(backend_path)()
    return _catalog_backend_instance


def get_bundle_gateway():
    """
    Return the configured BundleGateway instance, or None.

    Loads from BUNDLEMAN["BUNDLE_GATEWAY"] setting (dotted path).
    """
    global _bundle_gateway_instance
    if _bundle_gateway_instance is not None:
        return _bundle_gateway_instance
    gateway_path = bundleman_settings.BUNDLE_GATEWAY
    if not gateway_path:
        return None
    with _backend_lock:
        if _bundle_gateway_instance is None:
            _bundle_gateway_instance = _import_string(gateway_path)()
    return _bundle_gateway_instance


def reset_backends():
    """Reset backend singletons (for tests)."""
    global _catalog_backend_instance, _bundle_gateway_instance
    _catalog_backend_instance = None
    _bundle_gateway_instance = None
