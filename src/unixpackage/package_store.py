"""
Installation Store - durable record of installed packages.

The store keeps one InstalledRecord per package name (ignoring case) and
mirrors the whole collection into a single JSON file. Every mutation
rewrites that file atomically before returning, and a failed write undoes
the in-memory change so memory and disk never disagree.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .catalog import CatalogEntry
from .common.exceptions import CorruptStateError, StorageError
from .distribution import DEFAULT_INSTALL_ROOT, DistributionKind, install_location
from .utils.atomic_write import atomic_write_json, atomic_write_text

logger = logging.getLogger(__name__)

STORE_FILENAME = "packages.json"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(value: datetime) -> str:
    """Render a datetime as ISO 8601 UTC with second precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp into an aware UTC datetime.

    A trailing ``Z`` and explicit offsets are both accepted; naive values
    are taken as UTC. Fractional seconds are dropped, matching what
    ``format_timestamp`` writes back.

    Raises:
        TypeError: If value is not a string.
        ValueError: If value is not ISO 8601.
    """
    if not isinstance(value, str):
        raise TypeError(f"timestamp must be a string, got {type(value).__name__}")
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).replace(microsecond=0)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def _require_str(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"field '{key}' must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class InstalledRecord:
    """A package recorded as installed, snapshotted at install time."""
    name: str
    version: str
    description: str
    homepage: str
    distribution: DistributionKind
    install_location: str
    installed_at: datetime

    @property
    def key(self) -> str:
        return self.name.lower()

    @property
    def formatted_install_date(self) -> str:
        return format_timestamp(self.installed_at)

    @classmethod
    def from_entry(
        cls,
        entry: CatalogEntry,
        location: str,
        installed_at: Optional[datetime] = None,
    ) -> "InstalledRecord":
        """Create a record for a freshly installed catalog entry."""
        return cls(
            name=entry.name,
            version=entry.version,
            description=entry.description,
            homepage=entry.homepage,
            distribution=entry.distribution,
            install_location=location,
            installed_at=installed_at or _utcnow(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted JSON object."""
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "homepage": self.homepage,
            "installedAt": format_timestamp(self.installed_at),
            "distribution": self.distribution.value,
            "installLocation": self.install_location,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstalledRecord":
        """
        Create from a persisted JSON object.

        Records written before distribution tracking existed have no
        ``distribution`` or ``installLocation``; they load as repository
        bundles under the default install root.

        Raises:
            KeyError: A required field is missing.
            TypeError: A field has the wrong type.
            ValueError: A field has an invalid value.
        """
        name = _require_str(data, "name")
        if not name.strip():
            raise ValueError("field 'name' is empty")

        distribution = DistributionKind(data.get("distribution", DistributionKind.REPOSITORY_BUNDLE.value))
        if "installLocation" in data:
            location = _require_str(data, "installLocation")
        else:
            location = install_location(distribution, name, DEFAULT_INSTALL_ROOT)

        return cls(
            name=name,
            version=_require_str(data, "version"),
            description=_require_str(data, "description"),
            homepage=_require_str(data, "homepage"),
            distribution=distribution,
            install_location=location,
            installed_at=parse_timestamp(data["installedAt"]),
        )


class InstallationStore:
    """
    File-backed mapping from package name to InstalledRecord.

    The backing file and its directory are created on first use. The
    file is read once at construction; a file that cannot be parsed
    stops construction with CorruptStateError and is left untouched.

    Example::

        store = InstallationStore(Path("~/.local/share/unixpackage/packages.json").expanduser())
        if not store.contains("curl"):
            store.insert(record)
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._records: Dict[str, InstalledRecord] = {}
        self._prepare()
        self.load()

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._records)

    def _prepare(self) -> None:
        """Create the store directory and an empty store file if missing."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if not self._path.exists():
                atomic_write_text(self._path, "[]\n")
                logger.info(f"Created package store at {self._path}")
        except OSError as e:
            raise StorageError(
                f"cannot initialize {self._path}: {e}", str(self._path), cause=e
            ) from e

    def load(self) -> Dict[str, InstalledRecord]:
        """
        Read the store file and replace the in-memory mapping.

        Returns:
            A copy of the loaded mapping, keyed by lowercased name.

        Raises:
            StorageError: The file cannot be read.
            CorruptStateError: The file is not a valid record list.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CorruptStateError(str(self._path), "not valid UTF-8", cause=e) from e
        except OSError as e:
            raise StorageError(
                f"cannot read {self._path}: {e}", str(self._path), cause=e
            ) from e

        if not text.strip():
            records: Dict[str, InstalledRecord] = {}
        else:
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise CorruptStateError(str(self._path), f"invalid JSON: {e}", cause=e) from e
            records = self._decode(data)

        self._records = records
        logger.debug(f"Loaded {len(records)} installed package(s) from {self._path}")
        return dict(records)

    def _decode(self, data: Any) -> Dict[str, InstalledRecord]:
        if not isinstance(data, list):
            raise CorruptStateError(
                str(self._path), f"expected a list of records, got {type(data).__name__}"
            )

        records: Dict[str, InstalledRecord] = {}
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                raise CorruptStateError(str(self._path), f"record {index} is not an object")
            try:
                record = InstalledRecord.from_dict(item)
            except (KeyError, TypeError, ValueError) as e:
                raise CorruptStateError(
                    str(self._path), f"record {index} is invalid: {e!r}", cause=e
                ) from e
            if record.key in records:
                raise CorruptStateError(
                    str(self._path), f"duplicate record for {record.name}"
                )
            records[record.key] = record
        return records

    def contains(self, name: str) -> bool:
        """Check whether a package is installed, ignoring case."""
        return name.lower() in self._records

    def get(self, name: str) -> Optional[InstalledRecord]:
        """Get the installed record for a package, ignoring case."""
        return self._records.get(name.lower())

    def list(self) -> List[InstalledRecord]:
        """All installed records sorted by name."""
        return [self._records[key] for key in sorted(self._records)]

    def insert(self, record: InstalledRecord) -> None:
        """
        Add or replace a record and persist the store.

        Raises:
            StorageError: The store file could not be written. The
                in-memory mapping is restored before raising.
        """
        previous = self._records.get(record.key)
        self._records[record.key] = record
        try:
            self._persist()
        except StorageError:
            if previous is None:
                del self._records[record.key]
            else:
                self._records[record.key] = previous
            raise

    def delete(self, name: str) -> Optional[InstalledRecord]:
        """
        Remove a record and persist the store.

        Returns:
            The removed record, or None if nothing matched. Nothing is
            written when nothing matched.

        Raises:
            StorageError: The store file could not be written. The
                record is put back before raising.
        """
        key = name.lower()
        removed = self._records.pop(key, None)
        if removed is None:
            return None

        try:
            self._persist()
        except StorageError:
            self._records[key] = removed
            raise
        return removed

    def _persist(self) -> None:
        payload = [record.to_dict() for record in self.list()]
        try:
            atomic_write_json(self._path, payload)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write package store {self._path}: {e}")
            raise StorageError(str(e), str(self._path), cause=e) from e
        logger.debug(f"Saved {len(payload)} installed package(s) to {self._path}")
