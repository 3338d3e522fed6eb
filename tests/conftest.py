"""
Pytest configuration and shared fixtures for UNIXPackage tests.

Every test runs with a private HOME and without UNIXPACKAGE_* overrides,
so nothing touches the real package store.
"""

import logging
import logging.handlers
import os
import pytest
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

FIXED_TIME = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)


# ============ Environment Fixtures ============

@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch) -> Generator[Path, None, None]:
    """Point HOME at a temp directory and drop configuration overrides."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("UNIXPACKAGE_") or key == "XDG_DATA_HOME":
            monkeypatch.delenv(key, raising=False)
    yield home


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.handlers.RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def fixed_time() -> datetime:
    """Timestamp used by the fixed manager clock."""
    return FIXED_TIME


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """Location of a not-yet-created store file."""
    return tmp_path / "data" / "packages.json"


# ============ Catalog Fixtures ============

@pytest.fixture
def sample_entries():
    """Small catalog covering every distribution kind."""
    from unixpackage.catalog import CatalogEntry, ALL_PLATFORMS
    from unixpackage.distribution import DistributionKind
    from unixpackage.platforms import Platform

    return [
        CatalogEntry(
            name="curl",
            version="8.7.1",
            description="Command-line tool for transferring data with URL syntax.",
            homepage="https://curl.se",
            supported_platforms=ALL_PLATFORMS,
        ),
        CatalogEntry(
            name="git",
            version="2.45.1",
            description="Distributed version control system.",
            homepage="https://git-scm.com",
            supported_platforms=frozenset({Platform.MACOS, Platform.LINUX}),
        ),
        CatalogEntry(
            name="digit-tool",
            version="1.0.0",
            description="Counts digits in text streams.",
            homepage="https://example.org/digit-tool",
            supported_platforms=frozenset({Platform.LINUX}),
            distribution=DistributionKind.INSTALLER_PACKAGE,
        ),
        CatalogEntry(
            name="MacOnly",
            version="2.0",
            description="Desktop app shipped on a disk image.",
            homepage="https://example.org/maconly",
            supported_platforms=frozenset({Platform.MACOS}),
            distribution=DistributionKind.DISK_IMAGE_APP,
        ),
    ]


@pytest.fixture
def sample_catalog(sample_entries):
    from unixpackage.catalog import PackageCatalog

    return PackageCatalog(sample_entries)


# ============ Store / Manager Fixtures ============

@pytest.fixture
def make_record():
    """Factory for InstalledRecord with sensible defaults."""
    from unixpackage.distribution import DistributionKind
    from unixpackage.package_store import InstalledRecord

    def _make(name="curl", version="8.7.1", **overrides):
        fields = dict(
            name=name,
            version=version,
            description=f"{name} description",
            homepage=f"https://example.org/{name}",
            distribution=DistributionKind.REPOSITORY_BUNDLE,
            install_location=f"/usr/local/Cellar/{name}",
            installed_at=FIXED_TIME,
        )
        fields.update(overrides)
        return InstalledRecord(**fields)

    return _make


@pytest.fixture
def store(store_path):
    from unixpackage.package_store import InstallationStore

    return InstallationStore(store_path)


@pytest.fixture
def linux_manager(sample_catalog, store):
    """Manager on a Linux host with a fixed clock."""
    from unixpackage.manager import PackageManager
    from unixpackage.platforms import Platform

    return PackageManager(
        catalog=sample_catalog,
        store=store,
        platform=Platform.LINUX,
        clock=lambda: FIXED_TIME,
    )


# ============ Marker Configuration ============

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "unit: fast unit tests with no external deps"
    )
    config.addinivalue_line(
        "markers", "integration: tests that drive the CLI end to end"
    )
