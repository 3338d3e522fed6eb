"""
Tests for PackageManager.

Covers the install/remove transitions, the order of precondition checks,
platform gating, and failure atomicity.
"""

import pytest
from pathlib import Path
from unittest.mock import patch

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from unixpackage.common.exceptions import (
    AlreadyInstalledError, CorruptStateError, NotInstalledError,
    PackageNotFoundError, PlatformUnsupportedError, StorageError,
)
from unixpackage.config import PackageConfig
from unixpackage.distribution import DistributionKind
from unixpackage.manager import PackageInfo, PackageManager
from unixpackage.package_store import InstallationStore
from unixpackage.platforms import Platform


def _manager(catalog, store, platform, **kwargs):
    return PackageManager(catalog=catalog, store=store, platform=platform, **kwargs)


# ---------------------------------------------------------------------------
# Tests: install
# ---------------------------------------------------------------------------

class TestInstall:
    """Tests for PackageManager.install."""

    @pytest.mark.unit
    def test_install_returns_record(self, linux_manager, fixed_time):
        record = linux_manager.install("curl")

        assert record.name == "curl"
        assert record.version == "8.7.1"
        assert record.distribution == DistributionKind.REPOSITORY_BUNDLE
        assert record.install_location == "/usr/local/Cellar/curl"
        assert record.installed_at == fixed_time

    @pytest.mark.unit
    def test_install_trims_and_ignores_case(self, linux_manager):
        record = linux_manager.install("  CURL\n")
        assert record.name == "curl"
        assert linux_manager.store.contains("curl")

    @pytest.mark.unit
    def test_install_location_per_distribution(self, linux_manager):
        record = linux_manager.install("digit-tool")
        assert record.install_location == "/usr/local/opt/digit-tool"

    @pytest.mark.unit
    def test_install_uses_configured_root(self, sample_catalog, store):
        manager = _manager(sample_catalog, store, Platform.LINUX, install_root="/opt/homebrew/")
        assert manager.install("curl").install_location == "/opt/homebrew/Cellar/curl"

    @pytest.mark.unit
    def test_install_twice_any_casing(self, linux_manager):
        linux_manager.install("curl")

        with pytest.raises(AlreadyInstalledError) as exc_info:
            linux_manager.install("Curl")

        assert exc_info.value.code == "ALREADY_INSTALLED"
        assert len(linux_manager.list()) == 1

    @pytest.mark.unit
    def test_reinstall_after_remove(self, linux_manager):
        linux_manager.install("curl")
        linux_manager.remove("curl")

        assert linux_manager.install("curl").name == "curl"

    @pytest.mark.unit
    def test_unknown_package_on_empty_store(self, linux_manager):
        with pytest.raises(PackageNotFoundError) as exc_info:
            linux_manager.install("nonexistent-pkg")

        assert exc_info.value.code == "PACKAGE_NOT_FOUND"
        assert "nonexistent-pkg" in exc_info.value.message

    @pytest.mark.unit
    def test_not_found_checked_before_platform(self, sample_catalog, store):
        manager = _manager(sample_catalog, store, Platform.SOLARIS)
        with pytest.raises(PackageNotFoundError):
            manager.install("nonexistent-pkg")

    @pytest.mark.unit
    def test_already_installed_checked_before_platform(self, sample_catalog, store, make_record):
        store.insert(make_record("MacOnly", "2.0"))
        manager = _manager(sample_catalog, store, Platform.LINUX)

        with pytest.raises(AlreadyInstalledError):
            manager.install("maconly")

    @pytest.mark.unit
    def test_platform_unsupported_leaves_store_unchanged(self, linux_manager, store_path):
        linux_manager.install("curl")
        before = linux_manager.list()
        file_before = store_path.read_text()

        with pytest.raises(PlatformUnsupportedError) as exc_info:
            linux_manager.install("MacOnly")

        assert exc_info.value.details == {"name": "MacOnly", "platform": "Linux"}
        assert "MacOnly is not available for Linux." == exc_info.value.message
        assert linux_manager.list() == before
        assert store_path.read_text() == file_before

    @pytest.mark.unit
    def test_unknown_platform_fails_open(self, sample_catalog, store):
        manager = _manager(sample_catalog, store, None)
        assert manager.install("MacOnly").name == "MacOnly"

    @pytest.mark.unit
    def test_unknown_platform_strict_fails_closed(self, sample_catalog, store):
        manager = _manager(sample_catalog, store, None, strict_platform=True)

        with pytest.raises(PlatformUnsupportedError) as exc_info:
            manager.install("curl")

        assert exc_info.value.details["platform"] == "unknown platform"
        assert not store.contains("curl")

    @pytest.mark.unit
    def test_write_failure_is_storage_error_and_not_installed(self, linux_manager):
        with patch(
            "unixpackage.package_store.atomic_write_json",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(StorageError) as exc_info:
                linux_manager.install("curl")

        assert "disk full" in exc_info.value.message
        assert not linux_manager.store.contains("curl")
        assert linux_manager.list() == []

    @pytest.mark.unit
    def test_unexpected_store_fault_wrapped(self, linux_manager):
        with patch.object(linux_manager.store, "insert", side_effect=OSError("boom")):
            with pytest.raises(StorageError):
                linux_manager.install("curl")


# ---------------------------------------------------------------------------
# Tests: remove
# ---------------------------------------------------------------------------

class TestRemove:
    """Tests for PackageManager.remove."""

    @pytest.mark.unit
    def test_curl_scenario(self, linux_manager):
        installed = linux_manager.install("curl")
        assert [r.name for r in linux_manager.list()] == ["curl"]

        removed = linux_manager.remove("curl")
        assert removed == installed
        assert linux_manager.list() == []

        with pytest.raises(NotInstalledError) as exc_info:
            linux_manager.remove("curl")
        assert exc_info.value.code == "NOT_INSTALLED"

    @pytest.mark.unit
    def test_remove_ignores_case_and_whitespace(self, linux_manager):
        linux_manager.install("git")
        assert linux_manager.remove(" GIT ").name == "git"

    @pytest.mark.unit
    def test_remove_not_in_catalog(self, linux_manager):
        with pytest.raises(NotInstalledError):
            linux_manager.remove("nonexistent-pkg")

    @pytest.mark.unit
    def test_remove_write_failure_keeps_record(self, linux_manager):
        linux_manager.install("curl")

        with patch(
            "unixpackage.package_store.atomic_write_json",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(StorageError):
                linux_manager.remove("curl")

        assert linux_manager.store.contains("curl")

    @pytest.mark.unit
    def test_remove_unexpected_fault_wrapped(self, linux_manager):
        with patch.object(linux_manager.store, "delete", side_effect=OSError("boom")):
            with pytest.raises(StorageError):
                linux_manager.remove("curl")


# ---------------------------------------------------------------------------
# Tests: queries
# ---------------------------------------------------------------------------

class TestQueries:
    """list/search/info/install_steps."""

    @pytest.mark.unit
    def test_list_sorted(self, linux_manager):
        for name in ("git", "digit-tool", "curl"):
            linux_manager.install(name)

        assert [r.name for r in linux_manager.list()] == ["curl", "digit-tool", "git"]

    @pytest.mark.unit
    def test_search_delegates_to_catalog(self, linux_manager):
        assert [e.name for e in linux_manager.search("git")] == ["digit-tool", "git"]

    @pytest.mark.unit
    def test_info_both_present(self, linux_manager):
        linux_manager.install("curl")
        info = linux_manager.info("CURL")

        assert isinstance(info, PackageInfo)
        assert info.available.name == "curl"
        assert info.installed.name == "curl"

    @pytest.mark.unit
    def test_info_available_only(self, linux_manager):
        available, installed = linux_manager.info("git")
        assert available is not None
        assert installed is None

    @pytest.mark.unit
    def test_info_installed_only(self, sample_catalog, store, make_record):
        store.insert(make_record("retired-tool", "0.1"))
        manager = _manager(sample_catalog, store, Platform.LINUX)

        available, installed = manager.info("retired-tool")
        assert available is None
        assert installed.version == "0.1"

    @pytest.mark.unit
    def test_info_neither(self, linux_manager):
        assert linux_manager.info("nonexistent-pkg") == PackageInfo(None, None)

    @pytest.mark.unit
    def test_install_steps(self, linux_manager):
        steps = linux_manager.install_steps("MacOnly")
        assert steps[-2] == "Copy MacOnly.app to /Applications/MacOnly.app"

    @pytest.mark.unit
    def test_install_steps_unknown(self, linux_manager):
        with pytest.raises(PackageNotFoundError):
            linux_manager.install_steps("nonexistent-pkg")


# ---------------------------------------------------------------------------
# Tests: construction from configuration
# ---------------------------------------------------------------------------

class TestFromConfig:
    """PackageManager.from_config."""

    @pytest.mark.unit
    def test_from_config_uses_store_path(self, tmp_path):
        config = PackageConfig(data_dir=tmp_path / "state", platform=Platform.LINUX)
        manager = PackageManager.from_config(config)

        assert manager.store.path == tmp_path / "state" / "packages.json"
        assert manager.platform == Platform.LINUX
        assert manager.install("curl").version == "8.7.1"

    @pytest.mark.unit
    def test_state_survives_new_manager(self, tmp_path):
        config = PackageConfig(data_dir=tmp_path / "state", platform=Platform.LINUX)
        PackageManager.from_config(config).install("git")

        assert [r.name for r in PackageManager.from_config(config).list()] == ["git"]

    @pytest.mark.unit
    def test_corrupt_store_stops_construction(self, tmp_path):
        state = tmp_path / "state"
        state.mkdir()
        (state / "packages.json").write_text("not json at all")

        with pytest.raises(CorruptStateError):
            PackageManager.from_config(PackageConfig(data_dir=state))

    @pytest.mark.unit
    def test_default_catalog_is_seed(self, tmp_path):
        manager = PackageManager.from_config(PackageConfig(data_dir=tmp_path))
        assert manager.catalog.lookup("iterm2") is not None
        assert isinstance(manager.store, InstallationStore)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
