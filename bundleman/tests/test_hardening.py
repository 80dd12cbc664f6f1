"""
Bundleman hardening tests.

Tests for:
- BundleError structure and messages
- Settings loading and defaults
- Backend singletons loaded from dotted paths
- Protocol compliance of the shipped adapters
"""

import pytest

from bundleman import conf
from bundleman.adapters import (
    DjangoBundleGateway,
    DjangoListingCatalog,
    InMemoryBundleGateway,
    InMemoryListingCatalog,
)
from bundleman.composer import BundleComposer
from bundleman.exceptions import ERROR_MESSAGES, BundleError
from bundleman.protocols import BundleGateway, ListingCatalog


# ═══════════════════════════════════════════════════════════════════
# BundleError
# ═══════════════════════════════════════════════════════════════════


class TestBundleError:
    def test_default_message(self):
        error = BundleError("BUNDLE_NOT_FOUND", bundle_id="b-1")

        assert error.message == ERROR_MESSAGES["BUNDLE_NOT_FOUND"]
        assert error.bundle_id == "b-1"
        assert str(error) == "[BUNDLE_NOT_FOUND] Bundle not found"

    def test_custom_message(self):
        error = BundleError("STALE_BUNDLE", "Reload and try again")
        assert error.message == "Reload and try again"

    def test_unknown_code_uses_code_as_message(self):
        assert BundleError("SOMETHING_ELSE").message == "SOMETHING_ELSE"

    def test_as_dict(self):
        error = BundleError("STALE_BUNDLE", bundle_id="b-1", expected_version=1, stored_version=2)

        assert error.as_dict() == {
            "code": "STALE_BUNDLE",
            "message": "Bundle was changed by someone else",
            "data": {"bundle_id": "b-1", "expected_version": 1, "stored_version": 2},
        }

    def test_bundle_id_absent(self):
        assert BundleError("INVALID_DISCOUNT").bundle_id is None

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("STALE_BUNDLE", True),
            ("BUNDLE_NOT_FOUND", True),
            ("INVALID_DISCOUNT", False),
            ("NO_PENDING_ITEMS", False),
        ],
    )
    def test_needs_reload(self, code, expected):
        assert BundleError(code).needs_reload is expected


# ═══════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════


class TestSettings:
    def test_defaults(self, settings):
        settings.BUNDLEMAN = {}

        assert conf.bundleman_settings.MIN_ITEMS == 2
        assert conf.bundleman_settings.MAX_ITEMS is None
        assert conf.bundleman_settings.TITLE_MAX_LENGTH == 100
        assert conf.bundleman_settings.DESCRIPTION_MAX_LENGTH == 1000
        assert conf.bundleman_settings.OPTIMISTIC_LOCKING is True

    def test_missing_setting_uses_defaults(self, settings):
        del settings.BUNDLEMAN
        assert conf.get_bundleman_settings().MIN_ITEMS == 2

    def test_overrides_read_lazily(self, settings):
        settings.BUNDLEMAN = {"MIN_ITEMS": 3}
        assert conf.bundleman_settings.MIN_ITEMS == 3

        settings.BUNDLEMAN = {"MIN_ITEMS": 4}
        assert conf.bundleman_settings.MIN_ITEMS == 4

    def test_unknown_setting_rejected(self, settings):
        settings.BUNDLEMAN = {"NOT_A_SETTING": 1}

        with pytest.raises(TypeError):
            conf.get_bundleman_settings()


# ═══════════════════════════════════════════════════════════════════
# Backends
# ═══════════════════════════════════════════════════════════════════


class TestBackends:
    def test_default_backends(self, settings):
        settings.BUNDLEMAN = {}

        assert isinstance(conf.get_catalog_backend(), DjangoListingCatalog)
        assert isinstance(conf.get_bundle_gateway(), DjangoBundleGateway)

    def test_backends_from_dotted_paths(self, settings):
        settings.BUNDLEMAN = {
            "CATALOG_BACKEND": "bundleman.adapters.memory.InMemoryListingCatalog",
            "BUNDLE_GATEWAY": "bundleman.adapters.memory.InMemoryBundleGateway",
        }

        assert isinstance(conf.get_catalog_backend(), InMemoryListingCatalog)
        assert isinstance(conf.get_bundle_gateway(), InMemoryBundleGateway)

    def test_backend_is_singleton(self, settings):
        settings.BUNDLEMAN = {"BUNDLE_GATEWAY": "bundleman.adapters.memory.InMemoryBundleGateway"}
        assert conf.get_bundle_gateway() is conf.get_bundle_gateway()

    def test_reset_backends(self, settings):
        settings.BUNDLEMAN = {"BUNDLE_GATEWAY": "bundleman.adapters.memory.InMemoryBundleGateway"}
        first = conf.get_bundle_gateway()

        conf.reset_backends()

        assert conf.get_bundle_gateway() is not first

    def test_empty_path_disables_backend(self, settings):
        settings.BUNDLEMAN = {"CATALOG_BACKEND": None, "BUNDLE_GATEWAY": ""}

        assert conf.get_catalog_backend() is None
        assert conf.get_bundle_gateway() is None

    def test_invalid_path_raises(self, settings):
        settings.BUNDLEMAN = {"BUNDLE_GATEWAY": "bundleman.adapters.memory.NoSuchGateway"}

        with pytest.raises(AttributeError):
            conf.get_bundle_gateway()

    def test_composer_uses_configured_backends(self, settings):
        settings.BUNDLEMAN = {
            "CATALOG_BACKEND": "bundleman.adapters.memory.InMemoryListingCatalog",
            "BUNDLE_GATEWAY": "bundleman.adapters.memory.InMemoryBundleGateway",
        }

        composer = BundleComposer.create("seller-1", "Gift Set")

        assert composer.gateway is conf.get_bundle_gateway()
        assert composer.catalog is conf.get_catalog_backend()

    def test_refresh_skipped_without_catalog(self, settings, mug, vase):
        settings.BUNDLEMAN = {"CATALOG_BACKEND": None}
        composer = BundleComposer.create("seller-1", "Gift Set", gateway=InMemoryBundleGateway())
        composer.add(mug)
        composer.add(vase)

        assert composer.refresh_listings() == []
        assert composer.save().ok is True


class TestProtocolCompliance:
    @pytest.mark.parametrize(
        "adapter", [DjangoListingCatalog(), InMemoryListingCatalog()], ids=["django", "memory"]
    )
    def test_catalogs(self, adapter):
        assert isinstance(adapter, ListingCatalog)

    @pytest.mark.parametrize(
        "adapter", [DjangoBundleGateway(), InMemoryBundleGateway()], ids=["django", "memory"]
    )
    def test_gateways(self, adapter):
        assert isinstance(adapter, BundleGateway)


class TestPackage:
    def test_lazy_exports(self):
        import bundleman

        assert bundleman.BundleComposer is BundleComposer
        assert bundleman.BundleError is BundleError
