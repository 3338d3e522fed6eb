"""
Runtime configuration for UNIXPackage.

Configuration is resolved once per invocation, from built-in defaults
overridden by environment variables, and then passed explicitly to the
components that need it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .common.exceptions import InvalidConfigError
from .distribution import DEFAULT_INSTALL_ROOT
from .package_store import STORE_FILENAME
from .platforms import Platform, detect_platform

ENV_HOME = "UNIXPACKAGE_HOME"
ENV_PLATFORM = "UNIXPACKAGE_PLATFORM"
ENV_STRICT_PLATFORM = "UNIXPACKAGE_STRICT_PLATFORM"
ENV_PREFIX = "UNIXPACKAGE_PREFIX"
ENV_LOG_FILE = "UNIXPACKAGE_LOG_FILE"
ENV_LOG_JSON = "UNIXPACKAGE_LOG_JSON"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("", "0", "false", "no", "off")


def default_data_dir(
    platform: Optional[Platform],
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Per-user application data directory for the store file.

    macOS uses ``~/Library/Application Support/UNIXPackage``; every other
    platform uses ``$XDG_DATA_HOME/unixpackage``, falling back to
    ``~/.local/share/unixpackage``.
    """
    env = os.environ if env is None else env
    home = home or Path.home()

    if platform is Platform.MACOS:
        return home / "Library" / "Application Support" / "UNIXPackage"

    xdg_data_home = env.get("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home) / "unixpackage"
    return home / ".local" / "share" / "unixpackage"


def _parse_bool(field: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InvalidConfigError(field, value, "expected one of 1/0, true/false, yes/no, on/off")


@dataclass
class PackageConfig:
    """
    Resolved configuration for one invocation.

    Attributes:
        data_dir: Directory holding the store file
        platform: Host platform, or None when it cannot be determined
        strict_platform: Reject installs when the platform is unknown
        install_root: Prefix used to derive install locations
        log_file: Optional rotating log file
        log_json: Write the log file as JSON lines
    """
    data_dir: Path
    platform: Optional[Platform] = None
    strict_platform: bool = False
    install_root: str = DEFAULT_INSTALL_ROOT
    log_file: Optional[Path] = None
    log_json: bool = False

    @property
    def store_path(self) -> Path:
        return self.data_dir / STORE_FILENAME

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        sys_platform: Optional[str] = None,
    ) -> "PackageConfig":
        """
        Build configuration from defaults and environment overrides.

        Args:
            env: Environment mapping (default: ``os.environ``)
            sys_platform: Override for host detection (default: ``sys.platform``)

        Raises:
            InvalidConfigError: An override has an unusable value.
        """
        env = os.environ if env is None else env

        platform_override = env.get(ENV_PLATFORM)
        if platform_override:
            try:
                platform = Platform.parse(platform_override)
            except ValueError as e:
                raise InvalidConfigError(
                    ENV_PLATFORM,
                    platform_override,
                    f"expected one of {', '.join(p.value for p in Platform)}",
                ) from e
        else:
            platform = detect_platform(sys_platform)

        home_override = env.get(ENV_HOME)
        data_dir = Path(home_override).expanduser() if home_override else default_data_dir(platform, env=env)

        install_root = env.get(ENV_PREFIX) or DEFAULT_INSTALL_ROOT
        if not install_root.startswith("/"):
            raise InvalidConfigError(ENV_PREFIX, install_root, "must be an absolute path")

        log_file = env.get(ENV_LOG_FILE)

        return cls(
            data_dir=data_dir,
            platform=platform,
            strict_platform=_parse_bool(ENV_STRICT_PLATFORM, env.get(ENV_STRICT_PLATFORM, "")),
            install_root=install_root,
            log_file=Path(log_file).expanduser() if log_file else None,
            log_json=_parse_bool(ENV_LOG_JSON, env.get(ENV_LOG_JSON, "")),
        )
