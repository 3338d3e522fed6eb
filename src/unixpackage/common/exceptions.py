"""
UNIXPackage Exception Hierarchy

Every failure the package manager can report is one of the classes
below. Each carries a machine-readable code and structured details so the
CLI can render a message and tests can assert on the exact condition.
"""

from typing import Optional, Dict, Any


class UnixPackageError(Exception):
    """
    Base exception for all UNIXPackage errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional context as key-value pairs
        cause: Original exception that caused this error
        recoverable: Whether the next invocation can proceed normally
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        self.recoverable = recoverable

    def __str__(self):
        s = f"[{self.code}] {self.message}"
        if self.details:
            s += f" (details: {self.details})"
        if self.cause:
            s += f" caused by: {self.cause}"
        return s

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Package state errors
# =============================================================================

class PackageStateError(UnixPackageError):
    """Base for errors about a package's install state."""
    pass


class PackageNotFoundError(PackageStateError):
    """The catalog has no package with this name."""
    def __init__(self, name: str):
        super().__init__(
            f"No package named {name} in the default repository.",
            code="PACKAGE_NOT_FOUND",
            details={"name": name},
        )


class AlreadyInstalledError(PackageStateError):
    """The package already has an installed record."""
    def __init__(self, name: str):
        super().__init__(
            f"{name} is already installed.",
            code="ALREADY_INSTALLED",
            details={"name": name},
        )


class NotInstalledError(PackageStateError):
    """Removal requested for a package with no installed record."""
    def __init__(self, name: str):
        super().__init__(
            f"{name} is not installed.",
            code="NOT_INSTALLED",
            details={"name": name},
        )


class PlatformUnsupportedError(PackageStateError):
    """The package does not list the host platform."""
    def __init__(self, name: str, platform: str):
        super().__init__(
            f"{name} is not available for {platform}.",
            code="PLATFORM_UNSUPPORTED",
            details={"name": name, "platform": platform},
        )


# =============================================================================
# Storage errors
# =============================================================================

class StorageError(UnixPackageError):
    """Reading or writing the local package store failed."""
    def __init__(self, reason: str, path: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(
            f"Unable to update local package store: {reason}",
            code="STORAGE_FAILURE",
            details={"path": path} if path else None,
            cause=cause,
        )
        self.reason = reason


class CorruptStateError(UnixPackageError):
    """The store file exists but its contents cannot be trusted."""
    def __init__(self, path: str, reason: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"Package store {path} is corrupt: {reason}",
            code="CORRUPT_STATE",
            details={"path": path, "reason": reason},
            cause=cause,
            recoverable=False,
        )


# =============================================================================
# Configuration errors
# =============================================================================

class ConfigError(UnixPackageError):
    """Base for configuration errors."""
    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration."""
    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration: {field}={value}: {reason}",
            code="INVALID_CONFIG",
            details={"field": field, "value": str(value), "reason": reason},
        )
