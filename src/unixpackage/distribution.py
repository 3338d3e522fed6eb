"""
Distribution strategies - how a package would be delivered.

Nothing here touches the filesystem. Each distribution kind maps to a
strategy that derives an install location and a list of descriptive
install steps for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

DEFAULT_INSTALL_ROOT = "/usr/local"
APPLICATIONS_DIR = "/Applications"


class DistributionKind(Enum):
    """How a package is delivered."""
    REPOSITORY_BUNDLE = "repository_bundle"   # Bottle/tarball from the default repository
    INSTALLER_PACKAGE = "installer_package"   # Signed vendor installer package
    DISK_IMAGE_APP = "disk_image_app"         # Application bundle on a disk image


@dataclass(frozen=True)
class DistributionStrategy:
    """
    Presentation data for one distribution kind.

    Templates are formatted with ``name``, ``version``, ``homepage``,
    ``root`` and ``applications``.
    """
    display_name: str
    location_template: str
    steps: Tuple[str, ...]


STRATEGIES: Dict[DistributionKind, DistributionStrategy] = {
    DistributionKind.REPOSITORY_BUNDLE: DistributionStrategy(
        display_name="Repository bundle",
        location_template="{root}/Cellar/{name}",
        steps=(
            "Download {name}-{version} bundle from the default repository",
            "Extract bundle into {location}",
            "Link executables into {root}/bin",
        ),
    ),
    DistributionKind.INSTALLER_PACKAGE: DistributionStrategy(
        display_name="Signed installer package",
        location_template="{root}/opt/{name}",
        steps=(
            "Download {name}-{version} installer package from {homepage}",
            "Verify the installer signature",
            "Run the installer with target {location}",
        ),
    ),
    DistributionKind.DISK_IMAGE_APP: DistributionStrategy(
        display_name="Disk image application",
        location_template="{applications}/{name}.app",
        steps=(
            "Download {name}-{version} disk image from {homepage}",
            "Mount the disk image",
            "Copy {name}.app to {location}",
            "Unmount the disk image",
        ),
    ),
}


def strategy_for(kind: DistributionKind) -> DistributionStrategy:
    """Return the strategy for a distribution kind."""
    return STRATEGIES[kind]


def install_location(
    kind: DistributionKind,
    name: str,
    install_root: str = DEFAULT_INSTALL_ROOT,
) -> str:
    """
    Derive the install location for a package.

    Args:
        kind: Distribution kind of the package
        name: Package name as listed in the catalog
        install_root: Prefix for repository bundles and installer packages

    Returns:
        Path string; deterministic for the same arguments.
    """
    return strategy_for(kind).location_template.format(
        root=install_root.rstrip("/"),
        applications=APPLICATIONS_DIR,
        name=name,
    )


def install_steps(
    kind: DistributionKind,
    name: str,
    version: str,
    homepage: str,
    install_root: str = DEFAULT_INSTALL_ROOT,
) -> List[str]:
    """Describe the steps a real install of this package would take."""
    root = install_root.rstrip("/")
    location = install_location(kind, name, install_root)
    return [
        step.format(
            name=name,
            version=version,
            homepage=homepage,
            root=root,
            location=location,
        )
        for step in strategy_for(kind).steps
    ]
