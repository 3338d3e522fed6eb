"""
UNIXPackage Common Utilities

Exceptions and logging shared by every UNIXPackage module.
"""

from .exceptions import (
    UnixPackageError, PackageStateError, PackageNotFoundError,
    AlreadyInstalledError, NotInstalledError, PlatformUnsupportedError,
    StorageError, CorruptStateError, ConfigError, InvalidConfigError,
)
from .logging_config import setup_logging, LogContext, JSONFormatter, ColoredFormatter

__all__ = [
    # Exceptions
    "UnixPackageError", "PackageStateError", "PackageNotFoundError",
    "AlreadyInstalledError", "NotInstalledError", "PlatformUnsupportedError",
    "StorageError", "CorruptStateError", "ConfigError", "InvalidConfigError",
    # Logging
    "setup_logging", "LogContext", "JSONFormatter", "ColoredFormatter",
]
