# File: apimodel/generator.py
"""
apimodel - Generation Pipeline (Orchestrator)
===============================================
Connects the phases end to end::

    Source → Parse (load, resolve, extract, map, rules) → Render → Export

``ModelGenerator`` is the programmatic entry point and the backend of the
CLI.  Every run produces a ``GenerationReport``:

    - input problems (missing file, bad YAML) go to ``input_errors``,
    - document problems (version, structure, references) to
      ``validation_errors``,
    - rendering problems (unknown model, bad generation config) to
      ``generation_errors``,
    - overwrite refusals and write failures to ``export_errors``.

The first failing phase stops the pipeline; the report says which one.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from apimodel.exceptions import (
    APIModelError,
    ExternalReferenceUnsupportedError,
    InvalidDocumentError,
    InvalidModelMappingError,
    MalformedDocumentError,
    SourceError,
    UnresolvableReferenceError,
    UnsupportedVersionError,
    WouldOverwriteError,
)
from apimodel.exporters import ExportManifest, ExportResult, SourceExporter
from apimodel.models import GenerationConfig, GenerationResult, Settings
from apimodel.parser import OpenAPISchemaParser, ParseResult
from apimodel.rules import RuleGenerator, RuleSet
from apimodel.templates import TemplateGenerator
from apimodel.utils import Timer
from apimodel.validators import ValidationResult, validate_generation_config

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.generator")

EXIT_OK: int = 0
EXIT_VALIDATION: int = 1
EXIT_GENERATION: int = 2
EXIT_EXPORT: int = 3
EXIT_INPUT: int = 4

INPUT_ERRORS = (SourceError, MalformedDocumentError)
VALIDATION_ERRORS = (
    UnsupportedVersionError,
    InvalidDocumentError,
    UnresolvableReferenceError,
    ExternalReferenceUnsupportedError,
)


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(slots=True)
class GenerationReport:
    """Outcome of ``ModelGenerator.generate()``."""

    success: bool = False
    source: str = ""
    output_directory: str = ""
    dry_run: bool = False

    total_models: int = 0
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_elapsed_seconds: float = 0.0

    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    input_errors: List[str] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)

    planned_files: List[str] = field(default_factory=list)
    parse_result: Optional[ParseResult] = None
    generation: Optional[GenerationResult] = None
    manifest: Optional[ExportManifest] = None

    @property
    def exit_code(self) -> int:
        """CLI exit code for the first failing phase."""
        if self.input_errors:
            return EXIT_INPUT
        if self.validation_errors:
            return EXIT_VALIDATION
        if self.generation_errors:
            return EXIT_GENERATION
        if self.export_errors:
            return EXIT_EXPORT
        return EXIT_OK

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        if self.dry_run and self.success:
            status += " (dry run)"
        lines.append("=" * 60)
        lines.append("  apimodel - Generation Report")
        lines.append("=" * 60)
        lines.append(f"  Status:           {status}")
        lines.append(f"  Source:           {self.source}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Models:           {self.total_models}")
        lines.append(f"  Files generated:  {self.total_files}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append("─" * 60)

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<22s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        sections = (
            ("Input Errors", self.input_errors, "✗"),
            ("Validation Errors", self.validation_errors, "✗"),
            ("Validation Warnings", self.validation_warnings, "⚠"),
            ("Generation Errors", self.generation_errors, "✗"),
            ("Export Errors", self.export_errors, "✗"),
        )
        for title, items, icon in sections:
            if not items:
                continue
            lines.append("─" * 60)
            lines.append(f"  {title} ({len(items)}):")
            for item in items:
                lines.append(f"    {icon} {item}")

        if self.dry_run and self.planned_files:
            lines.append("─" * 60)
            lines.append(f"  Planned Files ({len(self.planned_files)}):")
            for path in self.planned_files:
                lines.append(f"    • {path}")

        lines.append("=" * 60)
        return "\n".join(lines)


def _describe(exc: APIModelError) -> str:
    return f"{exc.kind}: {exc.message}"


def _file_kind(path: str) -> str:
    if path.endswith("__init__.py"):
        return "package"
    if "/factories/" in path:
        return "factory"
    return "model"


# ---------------------------------------------------------------------------
# ModelGenerator - master orchestrator
# ---------------------------------------------------------------------------


class ModelGenerator:
    """
    Parse an OpenAPI document and write model and factory sources.

    Usage::

        generator = ModelGenerator(settings)
        report = generator.generate("petstore.yaml", Path("./out"))
        print(report.summary())

    Reusable; the parser (and its cache) is shared between runs.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        parser: Optional[OpenAPISchemaParser] = None,
    ) -> None:
        self.settings: Settings = settings or Settings()
        self.parser: OpenAPISchemaParser = parser or OpenAPISchemaParser(self.settings.parser)
        logger.debug(
            "ModelGenerator initialised: namespace=%s, factories=%s.",
            self.generation_config.namespace,
            self.generation_config.generate_factories,
        )

    @property
    def generation_config(self) -> GenerationConfig:
        return self.settings.generation

    # -- Public API -----------------------------------------------------------

    def render(
        self, parsed: ParseResult, only: Optional[Sequence[str]] = None
    ) -> GenerationResult:
        """
        Render sources for *parsed* without touching the filesystem.

        Raises:
            InvalidModelMappingError: *only* names an unknown model.
        """
        config: GenerationConfig = self.generation_config
        templates: TemplateGenerator = TemplateGenerator(config)
        rules: RuleGenerator = RuleGenerator()
        model_rules: Dict[str, RuleSet] = {
            name: rules.attribute_rules(mapping.attributes)
            for name, mapping in parsed.model_mappings.items()
        }

        result: GenerationResult = GenerationResult(
            config=config,
            source=parsed.source,
            model_names=list(only) if only is not None else parsed.get_model_names(),
        )
        files: Dict[str, str] = templates.generate_package(parsed.model_mappings, model_rules, only)
        for path, content in files.items():
            result.add_file(path, content, kind=_file_kind(path))
        result.finished_at = datetime.now(timezone.utc)
        return result

    def generate(
        self,
        source: str,
        output_dir: Optional[Union[str, Path]] = None,
        *,
        only: Optional[Sequence[str]] = None,
        dry_run: bool = False,
    ) -> GenerationReport:
        """Full pipeline: parse → render → export (skipped on ``dry_run``)."""
        target: Path = Path(
            output_dir if output_dir is not None else self.generation_config.output_directory
        )
        report: GenerationReport = GenerationReport(
            source=source,
            output_directory=str(target.resolve()),
            dry_run=dry_run,
        )
        pipeline_start: float = time.perf_counter()

        parsed: Optional[ParseResult] = self._step_parse(source, report)
        if parsed is None:
            return self._finalise_report(report, pipeline_start)

        if not self._step_check_config(report):
            return self._finalise_report(report, pipeline_start)

        generation: Optional[GenerationResult] = self._step_render(parsed, only, report)
        if generation is None:
            return self._finalise_report(report, pipeline_start)

        if dry_run:
            logger.info("Dry run: %d files not written.", generation.total_files)
        else:
            self._step_export(generation, target, report)

        return self._finalise_report(report, pipeline_start)

    # -- Pipeline steps -------------------------------------------------------

    def _step_parse(self, source: str, report: GenerationReport) -> Optional[ParseResult]:
        with Timer("parse") as t:
            try:
                parsed: ParseResult = self.parser.parse(source)
            except INPUT_ERRORS as exc:
                report.input_errors.append(_describe(exc))
                parsed = None
            except VALIDATION_ERRORS as exc:
                report.validation_errors.append(_describe(exc))
                parsed = None

        if parsed is None:
            report.step_metrics.append(
                GenerationStepMetric("Parse Document", False, t.elapsed, "failed")
            )
            return None

        report.parse_result = parsed
        report.total_models = len(parsed.model_mappings)
        # Structure errors only reach this point when strict checking is off.
        report.validation_warnings.extend(str(e) for e in parsed.structure.all_items)
        report.step_metrics.append(
            GenerationStepMetric(
                "Parse Document",
                True,
                t.elapsed,
                f"{len(parsed.endpoints)} endpoints, {len(parsed.model_mappings)} models",
            )
        )
        return parsed

    def _step_check_config(self, report: GenerationReport) -> bool:
        with Timer("config_check") as t:
            result: ValidationResult = validate_generation_config(self.generation_config)
        report.generation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)
        report.step_metrics.append(
            GenerationStepMetric(
                "Check Config",
                result.is_valid,
                t.elapsed,
                "ok" if result.is_valid else f"{result.error_count} error(s)",
            )
        )
        return result.is_valid

    def _step_render(
        self, parsed: ParseResult, only: Optional[Sequence[str]], report: GenerationReport
    ) -> Optional[GenerationResult]:
        with Timer("render") as t:
            try:
                generation: GenerationResult = self.render(parsed, only)
            except InvalidModelMappingError as exc:
                report.generation_errors.append(_describe(exc))
                report.step_metrics.append(
                    GenerationStepMetric("Render Sources", False, t.elapsed, "failed")
                )
                return None

        report.generation = generation
        report.planned_files = [f.path for f in generation.files]
        report.total_files = generation.total_files
        report.total_lines = generation.total_lines
        report.total_bytes = sum(f.size_bytes for f in generation.files)
        report.step_metrics.append(
            GenerationStepMetric(
                "Render Sources",
                True,
                t.elapsed,
                f"{generation.total_files} files, ~{generation.total_lines:,} lines",
            )
        )
        return generation

    def _step_export(
        self, generation: GenerationResult, target: Path, report: GenerationReport
    ) -> None:
        with Timer("export") as t:
            exporter: SourceExporter = SourceExporter(self.generation_config, target)
            try:
                export_result: ExportResult = exporter.export(generation.as_mapping())
            except WouldOverwriteError as exc:
                report.export_errors.append(_describe(exc))
                report.step_metrics.append(
                    GenerationStepMetric("Export Files", False, t.elapsed, "refused")
                )
                return

        report.manifest = export_result.manifest
        report.export_errors.extend(export_result.errors)
        report.total_files = export_result.manifest.total_files
        report.total_bytes = export_result.manifest.total_bytes
        report.total_lines = export_result.manifest.total_lines
        report.step_metrics.append(
            GenerationStepMetric(
                "Export Files",
                export_result.success,
                t.elapsed,
                f"{export_result.manifest.total_files} files, "
                f"{export_result.manifest.total_bytes:,} bytes",
            )
        )

    def _finalise_report(self, report: GenerationReport, started: float) -> GenerationReport:
        report.total_elapsed_seconds = time.perf_counter() - started
        report.success = report.exit_code == EXIT_OK
        if report.success:
            logger.info("Generation finished in %.3fs.", report.total_elapsed_seconds)
        else:
            logger.error("Generation failed (exit code %d).", report.exit_code)
        return report


def generate(
    source: str,
    output_dir: Optional[Union[str, Path]] = None,
    settings: Optional[Settings] = None,
    **kwargs: Any,
) -> GenerationReport:
    return ModelGenerator(settings).generate(source, output_dir, **kwargs)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ModelGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "generate",
    "INPUT_ERRORS",
    "VALIDATION_ERRORS",
    "EXIT_OK",
    "EXIT_VALIDATION",
    "EXIT_GENERATION",
    "EXIT_EXPORT",
    "EXIT_INPUT",
]

logger.debug("apimodel.generator loaded: %d public symbols.", len(__all__))
