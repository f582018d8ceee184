# File: apimodel/exporters.py
"""
apimodel - Source Exporter
============================
Writes the ``relative path → content`` map produced by the code generator
under an output directory.

    1. Every target is checked before anything is written: an existing
       file is only replaced when ``overwrite_existing`` is set, otherwise
       ``WouldOverwriteError`` names it and nothing is touched.
    2. Each file is written atomically (temp file + rename).
    3. ``export_manifest.json`` records size, line count and sha256 of
       every written file.

Write failures after the overwrite check are collected into the
``ExportResult`` rather than raised; files written before the failure
stay intact.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from apimodel.exceptions import WouldOverwriteError
from apimodel.models import GenerationConfig
from apimodel.utils import Timer, count_lines, ensure_directory, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.exporters")

MANIFEST_FILENAME: str = "export_manifest.json"


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """One exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str
    replaced: bool = False


@dataclass(slots=True)
class ExportManifest:
    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
    files: List[FileRecord] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "output_directory": self.output_directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Outcome of ``SourceExporter.export()``."""

    success: bool
    manifest: ExportManifest
    errors: Tuple[str, ...]
    elapsed_seconds: float

    @property
    def written(self) -> List[str]:
        return [f.relative_path for f in self.manifest.files]


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------


class SourceExporter:
    """
    Write generated sources under ``output_dir``.

    Usage::

        exporter = SourceExporter(config)
        result = exporter.export(generator.generate_package(mappings))
        print(result.manifest.to_json())

    Not thread-safe; use one exporter per output directory.
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        output_dir: Optional[Union[str, Path]] = None,
        *,
        generate_manifest: bool = True,
    ) -> None:
        self._config: GenerationConfig = config or GenerationConfig()
        self._output_dir: Path = Path(
            output_dir if output_dir is not None else self._config.output_directory
        ).resolve()
        self._generate_manifest: bool = generate_manifest
        logger.debug(
            "SourceExporter initialised: output_dir=%s, overwrite=%s.",
            self._output_dir,
            self._config.overwrite_existing,
        )

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # -- Public API ---------------------------------------------------------

    def check_targets(self, files: Dict[str, str]) -> List[Path]:
        """
        Existing targets among *files*.

        Raises:
            WouldOverwriteError: for the first existing target when
                ``overwrite_existing`` is off.
        """
        existing: List[Path] = []
        for rel_path in files:
            target: Path = self._output_dir / rel_path
            if target.exists():
                if not self._config.overwrite_existing:
                    raise WouldOverwriteError(str(target))
                existing.append(target)
        return existing

    def export(self, files: Dict[str, str]) -> ExportResult:
        """
        Write *files* (relative path → content).

        Raises:
            WouldOverwriteError: before any write, if a target exists and
                overwriting is disabled.
        """
        existing: List[Path] = self.check_targets(files)
        records: List[FileRecord] = []
        errors: List[str] = []

        with Timer("export") as timer:
            ensure_directory(self._output_dir)
            for rel_path, content in files.items():
                target: Path = self._output_dir / rel_path
                try:
                    records.append(self._write(target, rel_path, content, target in existing))
                except OSError as exc:
                    message: str = f"Failed to write {rel_path}: {type(exc).__name__}: {exc}"
                    errors.append(message)
                    logger.error(message)

            manifest: ExportManifest = self._build_manifest(records)
            if self._generate_manifest and not errors:
                try:
                    write_file(self._output_dir / MANIFEST_FILENAME, manifest.to_json() + "\n")
                except OSError as exc:
                    errors.append(f"Failed to write {MANIFEST_FILENAME}: {exc}")
                    logger.error("Failed to write manifest: %s", exc)

        result: ExportResult = ExportResult(
            success=not errors,
            manifest=manifest,
            errors=tuple(errors),
            elapsed_seconds=timer.elapsed,
        )
        if result.success:
            logger.info(
                "Export completed: %d files, %d bytes in %s (%.3fs).",
                manifest.total_files,
                manifest.total_bytes,
                self._output_dir,
                timer.elapsed,
            )
        else:
            logger.error("Export completed with %d error(s).", len(errors))
        return result

    # -- Internals ----------------------------------------------------------

    def _write(self, target: Path, rel_path: str, content: str, replaced: bool) -> FileRecord:
        size: int = write_file(target, content)
        if replaced:
            logger.info("Replaced existing file: %s", rel_path)
        return FileRecord(
            relative_path=rel_path,
            absolute_path=str(target),
            size_bytes=size,
            line_count=count_lines(content),
            sha256=sha256_hex(content),
            replaced=replaced,
        )

    def _build_manifest(self, records: List[FileRecord]) -> ExportManifest:
        from apimodel import __version__

        return ExportManifest(
            generator_version=__version__,
            export_timestamp=datetime.now(timezone.utc).isoformat(),
            output_directory=str(self._output_dir),
            files=list(records),
        )


def export_sources(
    files: Dict[str, str],
    config: Optional[GenerationConfig] = None,
    output_dir: Optional[Union[str, Path]] = None,
) -> ExportResult:
    return SourceExporter(config, output_dir).export(files)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SourceExporter",
    "ExportManifest",
    "ExportResult",
    "FileRecord",
    "MANIFEST_FILENAME",
    "export_sources",
]

logger.debug("apimodel.exporters loaded: %d public symbols.", len(__all__))
