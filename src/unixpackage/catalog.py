"""
Package Catalog - the fixed table of installable packages.

The catalog is built once per process from a seed list and never
changes afterwards. Lookups and searches are case-insensitive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Dict

from .distribution import DistributionKind
from .platforms import Platform

logger = logging.getLogger(__name__)

ALL_PLATFORMS: FrozenSet[Platform] = frozenset(Platform)


@dataclass(frozen=True)
class CatalogEntry:
    """A package available from the default repository."""
    name: str
    version: str
    description: str
    homepage: str
    supported_platforms: FrozenSet[Platform]
    distribution: DistributionKind = DistributionKind.REPOSITORY_BUNDLE

    @property
    def key(self) -> str:
        return self.name.lower()

    def platform_names(self) -> List[str]:
        """Display names of supported platforms, in enum order."""
        return [p.display_name for p in Platform if p in self.supported_platforms]


def _entry(
    name: str,
    version: str,
    description: str,
    homepage: str,
    platforms: Iterable[Platform],
    distribution: DistributionKind = DistributionKind.REPOSITORY_BUNDLE,
) -> CatalogEntry:
    return CatalogEntry(
        name=name,
        version=version,
        description=description,
        homepage=homepage,
        supported_platforms=frozenset(platforms),
        distribution=distribution,
    )


SEED_PACKAGES: List[CatalogEntry] = [
    _entry(
        "curl", "8.7.1",
        "Command-line tool for transferring data with URL syntax.",
        "https://curl.se",
        ALL_PLATFORMS,
    ),
    _entry(
        "wget", "1.24.5",
        "Non-interactive network downloader supporting HTTP, HTTPS, and FTP.",
        "https://www.gnu.org/software/wget/",
        [Platform.MACOS, Platform.LINUX, Platform.FREEBSD],
    ),
    _entry(
        "git", "2.45.1",
        "Distributed version control system.",
        "https://git-scm.com",
        [Platform.MACOS, Platform.LINUX, Platform.FREEBSD, Platform.OPENBSD],
    ),
    _entry(
        "openssl", "3.2.1",
        "Toolkit for TLS and general-purpose cryptography.",
        "https://www.openssl.org",
        [Platform.MACOS, Platform.LINUX, Platform.FREEBSD, Platform.OPENBSD, Platform.SOLARIS],
    ),
    _entry(
        "python", "3.12.3",
        "High-level programming language focused on readability.",
        "https://www.python.org",
        [Platform.MACOS, Platform.LINUX, Platform.FREEBSD],
        DistributionKind.INSTALLER_PACKAGE,
    ),
    _entry(
        "node", "22.2.0",
        "JavaScript runtime built on Chrome's V8 engine.",
        "https://nodejs.org",
        [Platform.MACOS, Platform.LINUX],
        DistributionKind.INSTALLER_PACKAGE,
    ),
    _entry(
        "neovim", "0.9.5",
        "Refactor-friendly fork of Vim with modern features.",
        "https://neovim.io",
        [Platform.MACOS, Platform.LINUX, Platform.FREEBSD],
    ),
    _entry(
        "htop", "3.3.0",
        "Interactive process viewer for Unix systems.",
        "https://htop.dev",
        [Platform.MACOS, Platform.LINUX, Platform.FREEBSD],
    ),
    _entry(
        "iterm2", "3.5.0",
        "Terminal emulator for macOS.",
        "https://iterm2.com",
        [Platform.MACOS],
        DistributionKind.DISK_IMAGE_APP,
    ),
]


def _sorted(entries: Iterable[CatalogEntry]) -> List[CatalogEntry]:
    return sorted(entries, key=lambda e: e.key)


class PackageCatalog:
    """
    Read-only package catalog.

    Args:
        entries: Catalog entries (default: the built-in seed list)

    Raises:
        ValueError: If two entries share a name, ignoring case.
    """

    def __init__(self, entries: Optional[Iterable[CatalogEntry]] = None):
        self._entries: Dict[str, CatalogEntry] = {}
        for entry in (SEED_PACKAGES if entries is None else entries):
            if entry.key in self._entries:
                raise ValueError(f"Duplicate catalog entry: {entry.name}")
            self._entries[entry.key] = entry
        logger.debug(f"Catalog ready with {len(self._entries)} packages")

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, name: str) -> Optional[CatalogEntry]:
        """Get a package by exact name, ignoring case."""
        return self._entries.get(name.lower())

    def all(self) -> List[CatalogEntry]:
        """Get all packages sorted by name."""
        return _sorted(self._entries.values())

    def search(self, query: str = "") -> List[CatalogEntry]:
        """
        Search the catalog.

        Args:
            query: Substring matched against name and description,
                ignoring case. Empty returns every package.

        Returns:
            Matching packages sorted by name.
        """
        if not query:
            return self.all()

        query_lower = query.lower()
        return _sorted(
            entry for entry in self._entries.values()
            if query_lower in entry.name.lower()
            or query_lower in entry.description.lower()
        )
