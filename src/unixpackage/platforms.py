"""
Platform detection and compatibility checks.

The host platform is detected once at startup and passed around as a
value. Everything else in this module is a pure function of that value.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .catalog import CatalogEntry

logger = logging.getLogger(__name__)

UNKNOWN_PLATFORM_LABEL = "unknown platform"


class Platform(Enum):
    """Operating systems a catalog entry can support."""
    MACOS = "macOS"
    LINUX = "Linux"
    FREEBSD = "FreeBSD"
    OPENBSD = "OpenBSD"
    SOLARIS = "Solaris"

    @property
    def display_name(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "Platform":
        """
        Parse a platform name case-insensitively.

        Accepts either the display value ("FreeBSD") or the member
        name ("FREEBSD").

        Raises:
            ValueError: If the name matches no platform.
        """
        wanted = value.strip().lower()
        for platform in cls:
            if wanted in (platform.value.lower(), platform.name.lower()):
                return platform
        raise ValueError(f"Unknown platform: {value}")


# sys.platform prefixes, checked in order
_SYS_PLATFORM_PREFIXES = (
    ("darwin", Platform.MACOS),
    ("linux", Platform.LINUX),
    ("freebsd", Platform.FREEBSD),
    ("openbsd", Platform.OPENBSD),
    ("sunos", Platform.SOLARIS),
)


def detect_platform(sys_platform: Optional[str] = None) -> Optional[Platform]:
    """
    Map ``sys.platform`` to a Platform.

    Args:
        sys_platform: Override for testing (default: ``sys.platform``)

    Returns:
        The detected platform, or None for unrecognized hosts.
    """
    value = sys_platform if sys_platform is not None else sys.platform
    for prefix, platform in _SYS_PLATFORM_PREFIXES:
        if value.startswith(prefix):
            return platform

    logger.debug(f"Unrecognized host platform: {value}")
    return None


def supports_platform(
    entry: "CatalogEntry",
    platform: Optional[Platform],
    strict: bool = False,
) -> bool:
    """
    Check whether a catalog entry can be installed on ``platform``.

    An undetermined platform (None) is accepted unless ``strict`` is set.
    """
    if platform is None:
        return not strict
    return platform in entry.supported_platforms


def platform_label(platform: Optional[Platform]) -> str:
    """Human-readable label for a possibly unknown platform."""
    if platform is None:
        return UNKNOWN_PLATFORM_LABEL
    return platform.display_name
