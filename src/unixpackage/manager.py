"""
Package Manager - install, remove and query packages.

Combines the catalog, the platform check and the installation store.
A package name is either absent or installed; ``install`` and ``remove``
are the only transitions and both check their precondition first.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional

from .catalog import CatalogEntry, PackageCatalog
from .common.exceptions import (
    AlreadyInstalledError,
    NotInstalledError,
    PackageNotFoundError,
    PlatformUnsupportedError,
    StorageError,
    UnixPackageError,
)
from .config import PackageConfig
from .distribution import DEFAULT_INSTALL_ROOT, install_location, install_steps
from .package_store import InstallationStore, InstalledRecord
from .platforms import Platform, platform_label, supports_platform

logger = logging.getLogger(__name__)


class PackageInfo(NamedTuple):
    """Catalog and install state for one name; either may be None."""
    available: Optional[CatalogEntry]
    installed: Optional[InstalledRecord]


class PackageManager:
    """
    Main package manager.

    Args:
        catalog: Packages that can be installed
        store: Durable record of installed packages
        platform: Host platform resolved at startup, None if unknown
        install_root: Prefix used to derive install locations
        strict_platform: Reject installs when ``platform`` is None
        clock: Returns the install timestamp (default: current UTC time)
    """

    def __init__(
        self,
        catalog: PackageCatalog,
        store: InstallationStore,
        platform: Optional[Platform],
        install_root: str = DEFAULT_INSTALL_ROOT,
        strict_platform: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.catalog = catalog
        self.store = store
        self.platform = platform
        self.install_root = install_root
        self.strict_platform = strict_platform
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: PackageConfig,
        catalog: Optional[PackageCatalog] = None,
    ) -> "PackageManager":
        """
        Open the store described by ``config``.

        Raises:
            StorageError: The store directory or file cannot be created or read.
            CorruptStateError: The store file exists but cannot be parsed.
        """
        store = InstallationStore(config.store_path)
        return cls(
            catalog=catalog or PackageCatalog(),
            store=store,
            platform=config.platform,
            install_root=config.install_root,
            strict_platform=config.strict_platform,
        )

    def install(self, name: str) -> InstalledRecord:
        """
        Install a package by name.

        Checks run in a fixed order: catalog, then install state, then
        platform, so an unknown name is always reported as not found.

        Raises:
            PackageNotFoundError: No catalog entry has this name.
            AlreadyInstalledError: The package is already installed.
            PlatformUnsupportedError: The host platform is not supported.
            StorageError: The store could not be updated.
        """
        normalized = name.strip()
        entry = self.catalog.lookup(normalized)
        if entry is None:
            raise PackageNotFoundError(normalized)

        if self.store.contains(entry.name):
            raise AlreadyInstalledError(entry.name)

        if not supports_platform(entry, self.platform, strict=self.strict_platform):
            raise PlatformUnsupportedError(entry.name, platform_label(self.platform))

        location = install_location(entry.distribution, entry.name, self.install_root)
        # Persisted timestamps have second precision
        installed_at = self._clock().replace(microsecond=0) if self._clock else None
        record = InstalledRecord.from_entry(entry, location, installed_at)

        try:
            self.store.insert(record)
        except StorageError:
            raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(str(e), str(self.store.path), cause=e) from e

        logger.info(f"Installed {record.name} {record.version} at {record.install_location}")
        return record

    def remove(self, name: str) -> InstalledRecord:
        """
        Remove an installed package by name.

        Raises:
            NotInstalledError: The package is not installed.
            StorageError: The store could not be updated.
        """
        normalized = name.strip()
        try:
            removed = self.store.delete(normalized)
        except UnixPackageError:
            raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(str(e), str(self.store.path), cause=e) from e

        if removed is None:
            raise NotInstalledError(normalized)

        logger.info(f"Removed {removed.name} {removed.version}")
        return removed

    def list(self) -> List[InstalledRecord]:
        """Installed packages sorted by name."""
        return self.store.list()

    def search(self, query: str = "") -> List[CatalogEntry]:
        """Search the catalog by name or description."""
        return self.catalog.search(query)

    def info(self, name: str) -> PackageInfo:
        """Look up a name in both the catalog and the store."""
        normalized = name.strip()
        return PackageInfo(
            available=self.catalog.lookup(normalized),
            installed=self.store.get(normalized),
        )

    def install_steps(self, name: str) -> List[str]:
        """
        Describe how a catalog package would be installed.

        Raises:
            PackageNotFoundError: No catalog entry has this name.
        """
        normalized = name.strip()
        entry = self.catalog.lookup(normalized)
        if entry is None:
            raise PackageNotFoundError(normalized)
        return install_steps(
            entry.distribution,
            entry.name,
            entry.version,
            entry.homepage,
            self.install_root,
        )
