# File: apimodel/versioning.py
"""
apimodel - Schema Version Store
=================================
File-system history of OpenAPI documents, one directory per schema name::

    {storage_path}/
        petstore/
            2026-01-01_10-00-00.json         # document content, verbatim
            2026-01-01_10-00-00.meta.json    # VersionMetadata sidecar
            CURRENT                          # active version id

Version ids default to the ``version_format`` timestamp; a numeric
suffix (``_1``, ``_2``, ...) is appended when that id is taken.  Every
stored document must be JSON containing an ``openapi`` or ``swagger`` key.

Comparison strategies:
    - ``hash``       sha256 equality of the stored bytes
    - ``content``    structural diff with dotted paths (added/removed/changed)
    - ``timestamp``  creation order only (``newer_version``)

Migration strategies:
    - ``backup_and_replace``  back up the source version, activate the target
    - ``merge``               shallow merge (target keys win) stored as a new version
    - ``manual``              no change; returns the comparison and instructions
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from apimodel.exceptions import SchemaVersionError
from apimodel.models import (
    CompareStrategy,
    MigrationResult,
    MigrationStrategy,
    VersionComparison,
    VersionDifference,
    VersioningConfig,
    VersionMetadata,
)
from apimodel.utils import ensure_directory, sha256_hex, write_file, write_json

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.versioning")

ACTIVE_POINTER: str = "CURRENT"
_META_SUFFIX: str = ".meta.json"

_MANUAL_INSTRUCTIONS: List[str] = [
    "Review the differences between versions",
    "Manually update your schema configuration",
    "Test the changes in a development environment",
    "Apply changes to production when ready",
]


@dataclass(frozen=True, slots=True)
class StoredVersion:
    version: str
    content: str
    metadata: VersionMetadata
    path: Path


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _check_segment(value: str, what: str) -> str:
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise SchemaVersionError(f"Invalid {what}: {value!r}", identifier=value)
    return value


def find_differences(old: Any, new: Any, path: str = "") -> List[VersionDifference]:
    """
    Structural diff of two JSON values.

    Mappings and lists are descended into (list items keyed by index);
    anything else is compared by value.
    """
    if isinstance(old, list) and isinstance(new, list):
        old = {str(i): v for i, v in enumerate(old)}
        new = {str(i): v for i, v in enumerate(new)}
    if not (isinstance(old, dict) and isinstance(new, dict)):
        if old == new:
            return []
        return [VersionDifference(type="changed", path=path, old_value=old, new_value=new)]

    differences: List[VersionDifference] = []
    for key, value in old.items():
        current: str = f"{path}.{key}" if path else str(key)
        if key not in new:
            differences.append(VersionDifference(type="removed", path=current, old_value=value))
        elif isinstance(value, (dict, list)) and isinstance(new[key], type(value)):
            differences.extend(find_differences(value, new[key], current))
        elif value != new[key]:
            differences.append(
                VersionDifference(type="changed", path=current, old_value=value, new_value=new[key])
            )
    for key, value in new.items():
        if key not in old:
            current = f"{path}.{key}" if path else str(key)
            differences.append(VersionDifference(type="added", path=current, new_value=value))
    return differences


class SchemaVersionManager:
    """
    Create, inspect, compare and migrate stored schema versions.

    Args:
        config: Storage location, id format and strategies.
        clock: Returns the current aware ``datetime``; injectable for tests.
    """

    def __init__(
        self,
        config: Optional[VersioningConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config: VersioningConfig = config or VersioningConfig()
        self._clock: Callable[[], datetime] = clock or _utc_now
        self.storage_path: Path = Path(self.config.storage_path)

    # -- Paths --------------------------------------------------------------

    def schema_directory(self, schema_name: str) -> Path:
        return self.storage_path / _check_segment(schema_name, "schema name")

    def version_path(self, schema_name: str, version: str) -> Path:
        return self.schema_directory(schema_name) / f"{_check_segment(version, 'version')}.json"

    def metadata_path(self, schema_name: str, version: str) -> Path:
        return self.schema_directory(schema_name) / f"{_check_segment(version, 'version')}{_META_SUFFIX}"

    # -- Creation -----------------------------------------------------------

    def create_version(
        self,
        schema_name: str,
        content: Union[str, Dict[str, Any]],
        version: Optional[str] = None,
    ) -> str:
        """
        Store *content* as a new version and return its id.

        Raises:
            SchemaVersionError: when versioning is disabled, the content
                is not an OpenAPI JSON document, or an explicit *version*
                already exists.
        """
        self._require_enabled()
        text: str = content if isinstance(content, str) else json.dumps(content, indent=2)
        self.validate_content(text)

        directory: Path = self.schema_directory(schema_name)
        ensure_directory(directory)
        if version is None:
            version = self._next_version_id(schema_name)
        elif self.version_path(schema_name, version).exists():
            raise SchemaVersionError(
                f"Version {version} of {schema_name} already exists", identifier=version
            )

        from apimodel import __version__

        metadata: VersionMetadata = VersionMetadata(
            version=version,
            schema_name=schema_name,
            created_at=self._clock().isoformat(),
            size=len(text.encode("utf-8")),
            hash=sha256_hex(text),
            generator_version=__version__,
        )
        write_file(self.version_path(schema_name, version), text)
        write_json(self.metadata_path(schema_name, version), metadata.model_dump(mode="json"))
        logger.info("Created schema version %s/%s (%d bytes)", schema_name, version, metadata.size)

        self.cleanup_old_versions(schema_name)
        return version

    def _next_version_id(self, schema_name: str) -> str:
        base: str = self._clock().strftime(self.config.version_format)
        candidate: str = base
        counter: int = 1
        while self.version_path(schema_name, candidate).exists():
            candidate = f"{base}_{counter}"
            counter += 1
        return candidate

    # -- Reading ------------------------------------------------------------

    def get_version(self, schema_name: str, version: str) -> Optional[str]:
        path: Path = self.version_path(schema_name, version)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def get_metadata(self, schema_name: str, version: str) -> Optional[VersionMetadata]:
        """Sidecar metadata; rebuilt from the file itself if the sidecar is gone."""
        path: Path = self.version_path(schema_name, version)
        if not path.is_file():
            return None
        meta_path: Path = self.metadata_path(schema_name, version)
        if meta_path.is_file():
            try:
                return VersionMetadata.model_validate_json(meta_path.read_text(encoding="utf-8"))
            except ValidationError as exc:
                logger.warning("Ignoring unreadable metadata %s: %s", meta_path, exc)

        content: str = path.read_text(encoding="utf-8")
        from apimodel import __version__

        return VersionMetadata(
            version=version,
            schema_name=schema_name,
            created_at=datetime.fromtimestamp(path.stat().st_mtime, timezone.utc).isoformat(),
            size=len(content.encode("utf-8")),
            hash=sha256_hex(content),
            generator_version=__version__,
        )

    def list_versions(self, schema_name: str) -> List[VersionMetadata]:
        """All versions of *schema_name*, oldest first."""
        directory: Path = self.schema_directory(schema_name)
        if not directory.is_dir():
            return []
        versions: List[VersionMetadata] = []
        for path in sorted(directory.glob("*.json")):
            if path.name.endswith(_META_SUFFIX):
                continue
            metadata: Optional[VersionMetadata] = self.get_metadata(schema_name, path.stem)
            if metadata is not None:
                versions.append(metadata)
        versions.sort(key=lambda m: (m.created_at, m.version))
        return versions

    def get_latest_version(self, schema_name: str) -> Optional[StoredVersion]:
        versions: List[VersionMetadata] = self.list_versions(schema_name)
        if not versions:
            return None
        latest: VersionMetadata = versions[-1]
        return StoredVersion(
            version=latest.version,
            content=self.get_version(schema_name, latest.version) or "",
            metadata=latest,
            path=self.version_path(schema_name, latest.version),
        )

    def get_active_version(self, schema_name: str) -> Optional[str]:
        pointer: Path = self.schema_directory(schema_name) / ACTIVE_POINTER
        if not pointer.is_file():
            return None
        return pointer.read_text(encoding="utf-8").strip() or None

    # -- Comparison ---------------------------------------------------------

    def compare_versions(
        self,
        schema_name: str,
        version1: str,
        version2: str,
        strategy: Optional[str] = None,
    ) -> VersionComparison:
        content1: Optional[str] = self.get_version(schema_name, version1)
        content2: Optional[str] = self.get_version(schema_name, version2)
        if content1 is None or content2 is None:
            missing: str = version1 if content1 is None else version2
            raise SchemaVersionError(
                f"Schema version not found: {schema_name}/{missing}", identifier=missing
            )

        chosen: str = strategy or self.config.compare_strategy
        hash1: str = sha256_hex(content1)
        hash2: str = sha256_hex(content2)

        if chosen == CompareStrategy.HASH:
            return VersionComparison(
                strategy=CompareStrategy.HASH,
                version1=version1,
                version2=version2,
                identical=hash1 == hash2,
                hash1=hash1,
                hash2=hash2,
            )
        if chosen == CompareStrategy.CONTENT:
            differences: List[VersionDifference] = find_differences(
                self._decode(content1, version1), self._decode(content2, version2)
            )
            return VersionComparison(
                strategy=CompareStrategy.CONTENT,
                version1=version1,
                version2=version2,
                identical=not differences,
                hash1=hash1,
                hash2=hash2,
                differences=differences,
            )
        if chosen == CompareStrategy.TIMESTAMP:
            meta1: Optional[VersionMetadata] = self.get_metadata(schema_name, version1)
            meta2: Optional[VersionMetadata] = self.get_metadata(schema_name, version2)
            newer: Optional[str] = None
            if meta1 is not None and meta2 is not None:
                time1: datetime = datetime.fromisoformat(meta1.created_at)
                time2: datetime = datetime.fromisoformat(meta2.created_at)
                newer = version1 if time1 > time2 else version2
            return VersionComparison(
                strategy=CompareStrategy.TIMESTAMP,
                version1=version1,
                version2=version2,
                identical=hash1 == hash2,
                hash1=hash1,
                hash2=hash2,
                newer_version=newer,
            )
        raise SchemaVersionError(f"Invalid compare strategy: {chosen}", identifier=str(chosen))

    # -- Migration ----------------------------------------------------------

    def migrate(
        self,
        schema_name: str,
        from_version: str,
        to_version: str,
        strategy: Optional[str] = None,
    ) -> MigrationResult:
        self._require_enabled()
        chosen: str = strategy or self.config.migration_strategy
        if chosen == MigrationStrategy.BACKUP_AND_REPLACE:
            return self._migrate_backup_and_replace(schema_name, from_version, to_version)
        if chosen == MigrationStrategy.MERGE:
            return self._migrate_merge(schema_name, from_version, to_version)
        if chosen == MigrationStrategy.MANUAL:
            return MigrationResult(
                strategy=MigrationStrategy.MANUAL,
                success=False,
                message="Manual migration required",
                instructions=list(_MANUAL_INSTRUCTIONS),
                comparison=self.compare_versions(schema_name, from_version, to_version),
            )
        raise SchemaVersionError(f"Invalid migration strategy: {chosen}", identifier=str(chosen))

    def _migrate_backup_and_replace(
        self, schema_name: str, from_version: str, to_version: str
    ) -> MigrationResult:
        content: Optional[str] = self.get_version(schema_name, to_version)
        if content is None:
            raise SchemaVersionError(
                f"Target version {to_version} not found", identifier=to_version
            )
        self.validate_content(content)

        backup: Optional[str] = None
        if self.config.backup_enabled:
            backup = self.create_backup(schema_name, from_version)
        self._activate(schema_name, to_version)
        logger.info(
            "Migrated %s from %s to %s (backup: %s)", schema_name, from_version, to_version, backup
        )
        return MigrationResult(
            strategy=MigrationStrategy.BACKUP_AND_REPLACE,
            message=f"Activated {to_version}",
            backup_version=backup,
            new_version=to_version,
        )

    def _migrate_merge(self, schema_name: str, from_version: str, to_version: str) -> MigrationResult:
        old_content: Optional[str] = self.get_version(schema_name, from_version)
        new_content: Optional[str] = self.get_version(schema_name, to_version)
        if old_content is None or new_content is None:
            raise SchemaVersionError("Source or target version not found", identifier=schema_name)

        merged: Dict[str, Any] = {
            **self._decode(old_content, from_version),
            **self._decode(new_content, to_version),
        }
        merged_version: str = self.create_version(
            schema_name,
            json.dumps(merged, indent=2),
            self._next_version_id(schema_name) + "_merged",
        )
        logger.info("Merged %s and %s into %s", from_version, to_version, merged_version)
        return MigrationResult(
            strategy=MigrationStrategy.MERGE,
            message=f"Merged into {merged_version}",
            new_version=merged_version,
        )

    # -- Backups ------------------------------------------------------------

    def create_backup(self, schema_name: str, version: str) -> str:
        if not self.config.backup_enabled:
            raise SchemaVersionError("Schema backup is disabled", identifier=schema_name)
        content: Optional[str] = self.get_version(schema_name, version)
        if content is None:
            raise SchemaVersionError(f"Version {version} not found for backup", identifier=version)
        stamp: str = self._clock().strftime(self.config.version_format)
        backup: str = f"{version}_backup_{stamp}"
        counter: int = 1
        while self.version_path(schema_name, backup).exists():
            backup = f"{version}_backup_{stamp}_{counter}"
            counter += 1
        return self.create_version(schema_name, content, backup)

    def restore_from_backup(self, schema_name: str, backup_version: str) -> MigrationResult:
        content: Optional[str] = self.get_version(schema_name, backup_version)
        if content is None:
            raise SchemaVersionError(
                f"Backup version {backup_version} not found", identifier=backup_version
            )
        self.validate_content(content)
        self._activate(schema_name, backup_version)
        logger.info("Restored %s from backup %s", schema_name, backup_version)
        return MigrationResult(
            strategy=MigrationStrategy.BACKUP_AND_REPLACE,
            message=f"Restored from {backup_version}",
            new_version=backup_version,
        )

    # -- Deletion -----------------------------------------------------------

    def delete_version(self, schema_name: str, version: str) -> bool:
        path: Path = self.version_path(schema_name, version)
        meta_path: Path = self.metadata_path(schema_name, version)
        deleted: bool = False
        if path.is_file():
            path.unlink()
            deleted = True
        if meta_path.is_file():
            meta_path.unlink()
        if deleted:
            logger.debug("Deleted schema version %s/%s", schema_name, version)
        return deleted

    def cleanup_old_versions(self, schema_name: str) -> int:
        """
        Delete versions older than ``backup_retention_days``.

        Skipped when backups are disabled or retention is 0.  The active
        version is never deleted.
        """
        if not self.config.backup_enabled or self.config.backup_retention_days == 0:
            return 0
        cutoff: datetime = self._clock() - timedelta(days=self.config.backup_retention_days)
        active: Optional[str] = self.get_active_version(schema_name)
        deleted: int = 0
        for metadata in self.list_versions(schema_name):
            if metadata.version == active:
                continue
            if datetime.fromisoformat(metadata.created_at) < cutoff:
                if self.delete_version(schema_name, metadata.version):
                    deleted += 1
        if deleted:
            logger.info(
                "Cleaned up %d old versions of %s (retention %d days)",
                deleted,
                schema_name,
                self.config.backup_retention_days,
            )
        return deleted

    # -- Helpers ------------------------------------------------------------

    @staticmethod
    def validate_content(content: str) -> Dict[str, Any]:
        """Decode *content* and require an ``openapi`` or ``swagger`` key."""
        try:
            decoded: Any = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SchemaVersionError(f"Schema validation failed: invalid JSON: {exc}") from exc
        if not isinstance(decoded, dict) or not ("openapi" in decoded or "swagger" in decoded):
            raise SchemaVersionError("Schema validation failed: not an OpenAPI/Swagger document")
        return decoded

    def _decode(self, content: str, version: str) -> Dict[str, Any]:
        try:
            return self.validate_content(content)
        except SchemaVersionError as exc:
            raise SchemaVersionError(
                f"Invalid stored content in version {version}: {exc.message}", identifier=version
            ) from exc

    def _activate(self, schema_name: str, version: str) -> None:
        write_file(self.schema_directory(schema_name) / ACTIVE_POINTER, version + "\n")

    def _require_enabled(self) -> None:
        if not self.config.enabled:
            raise SchemaVersionError("Schema versioning is disabled")


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaVersionManager",
    "StoredVersion",
    "find_differences",
    "ACTIVE_POINTER",
]

logger.debug("apimodel.versioning loaded: %d public symbols.", len(__all__))
