"""
UNIXPackage

Local package-installation tracker: a fixed catalog, platform checks and
a durable record of installed packages.
"""

__version__ = "0.1.0"

from .catalog import CatalogEntry, PackageCatalog
from .distribution import DistributionKind
from .manager import PackageInfo, PackageManager
from .package_store import InstallationStore, InstalledRecord
from .platforms import Platform

__all__ = [
    "CatalogEntry",
    "PackageCatalog",
    "DistributionKind",
    "PackageInfo",
    "PackageManager",
    "InstallationStore",
    "InstalledRecord",
    "Platform",
]
