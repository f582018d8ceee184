# File: apimodel/cli.py
"""
apimodel - Command-Line Interface
===================================
Built on the standard-library ``argparse`` module.

Usage examples::

    # Generate models and factories
    apimodel -s petstore.yaml -o ./out

    # Remote document, verbose, replace existing files
    apimodel -s https://example.com/openapi.json -o ./out -vv --force

    # Only check the document
    apimodel -s petstore.yaml --validate-only

    # Dump endpoints and model mappings, or the validation rules, as JSON
    apimodel -s petstore.yaml --inspect
    apimodel -s petstore.yaml --rules

    # Keep a versioned copy of the document
    apimodel -s petstore.yaml --snapshot petstore --validate-only

Exit codes:
    0 - success
    1 - validation error
    2 - generation error
    3 - export error
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, NoReturn, Optional, Sequence, Tuple

from apimodel.exceptions import APIModelError, SchemaVersionError
from apimodel.generator import (
    INPUT_ERRORS,
    VALIDATION_ERRORS,
    EXIT_EXPORT,
    EXIT_INPUT,
    EXIT_OK,
    EXIT_VALIDATION,
    GenerationReport,
    ModelGenerator,
)
from apimodel.models import NamingConvention, Settings, load_settings
from apimodel.parser import OpenAPISchemaParser, ParseResult
from apimodel.versioning import SchemaVersionManager

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel")


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``apimodel`` logger.

    Args:
        verbosity: -1 = silent, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity < 0:
        level = logging.CRITICAL + 1
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root_logger: logging.Logger = logging.getLogger("apimodel")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    from apimodel import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="apimodel",
        description=(
            "apimodel - OpenAPI 3 schema parser and model generator.\n\n"
            "Reads an OpenAPI 3.0/3.1 document (file or URL), resolves every "
            "$ref, maps endpoints to resource models and writes model classes, "
            "validation rules and test-data factories."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s petstore.yaml -o ./out\n"
            "  %(prog)s -s petstore.yaml --validate-only\n"
            "  %(prog)s -s petstore.yaml --inspect\n"
            "  %(prog)s -s petstore.yaml -o ./out --models Pet Order --force\n"
        ),
    )

    parser.add_argument("--version", action="version", version=f"apimodel v{__version__}")

    parser.add_argument(
        "-s", "--source",
        type=str,
        default=None,
        metavar="PATH_OR_URL",
        help="OpenAPI document (JSON or YAML file, or http(s) URL). "
        "Defaults to default_source from --config.",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory (defaults to generation.output_directory).",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="FILE",
        help="Settings file (YAML or JSON).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    modes = mode_group.add_mutually_exclusive_group()
    modes.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Parse and check the document without generating code.",
    )
    modes.add_argument(
        "--inspect",
        action="store_true",
        default=False,
        help="Print endpoints and model mappings as JSON.",
    )
    modes.add_argument(
        "--rules",
        action="store_true",
        default=False,
        help="Print the generated validation rules as JSON.",
    )
    modes.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the whole pipeline but do not write any file.",
    )
    mode_group.add_argument(
        "--snapshot",
        type=str,
        default=None,
        metavar="NAME",
        help="Store the loaded document as a new version under NAME.",
    )

    # --- Generation overrides ---
    config_group = parser.add_argument_group("generation overrides")
    config_group.add_argument(
        "--naming",
        type=str,
        default=None,
        choices=[c.value for c in NamingConvention],
        help="Naming convention of generated attributes.",
    )
    config_group.add_argument("--prefix", type=str, default=None, help="Class name prefix.")
    config_group.add_argument("--suffix", type=str, default=None, help="Class name suffix.")
    config_group.add_argument(
        "--namespace",
        type=str,
        default=None,
        metavar="PACKAGE",
        help="Dotted package of the generated code (e.g. 'app.models').",
    )
    config_group.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Overwrite existing files.",
    )
    config_group.add_argument(
        "--no-factories",
        action="store_true",
        default=False,
        help="Skip factory generation.",
    )
    config_group.add_argument(
        "--models",
        nargs="+",
        default=None,
        metavar="MODEL",
        help="Generate only these models.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress log output.",
    )

    return parser


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def _build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Generation config overrides from CLI arguments."""
    overrides: Dict[str, Any] = {}
    if args.naming is not None:
        overrides["naming_convention"] = args.naming
    if args.prefix is not None:
        overrides["prefix"] = args.prefix
    if args.suffix is not None:
        overrides["suffix"] = args.suffix
    if args.namespace is not None:
        overrides["namespace"] = args.namespace
    if args.force:
        overrides["overwrite_existing"] = True
    if args.no_factories:
        overrides["generate_factories"] = False
    return overrides


def _load_settings(args: argparse.Namespace) -> Settings:
    """
    Raises:
        OSError: the settings file cannot be read.
        ValueError: invalid settings or overrides (pydantic errors included).
    """
    settings: Settings = load_settings(args.config) if args.config else Settings()
    for key, value in _build_overrides(args).items():
        setattr(settings.generation, key, value)
    return settings


def _fail(message: str, code: int) -> int:
    print(f"error: {message}", file=sys.stderr)
    return code


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


def _parse(parser: OpenAPISchemaParser, source: str) -> Tuple[Optional[ParseResult], int]:
    try:
        return parser.parse(source), EXIT_OK
    except INPUT_ERRORS as exc:
        return None, _fail(f"{exc.kind}: {exc.message}", EXIT_INPUT)
    except VALIDATION_ERRORS as exc:
        return None, _fail(f"{exc.kind}: {exc.message}", EXIT_VALIDATION)


def _snapshot(settings: Settings, name: str, result: ParseResult) -> int:
    try:
        version: str = SchemaVersionManager(settings.versioning).create_version(
            name, result.graph.document
        )
    except SchemaVersionError as exc:
        return _fail(f"{exc.kind}: {exc.message}", EXIT_EXPORT)
    logger.info("Stored %s as version %s", name, version)
    print(f"Snapshot stored: {name} {version}")
    return EXIT_OK


def _print_validation(result: ParseResult) -> int:
    structure = result.structure
    print("=" * 50)
    print("  OpenAPI Document Check")
    print("=" * 50)
    print(f"  Source:     {result.source}")
    print(f"  OpenAPI:    {result.openapi}")
    print(f"  Schemas:    {len(result.schemas)}")
    print(f"  Endpoints:  {len(result.endpoints)}")
    print(f"  Models:     {len(result.model_mappings)}")
    print(f"  Valid:      {'Yes' if structure.is_valid else 'No'}")
    if len(structure):
        print()
        print(structure.format_report())
    elif structure.is_valid:
        print("\n  ✅ All checks passed!")
    print("=" * 50)
    return EXIT_OK if structure.is_valid else EXIT_VALIDATION


def _print_json(data: Any) -> int:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))
    return EXIT_OK


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI and return the exit code."""
    arg_parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = arg_parser.parse_args(argv)

    _setup_logging(-1 if args.quiet else args.verbose)

    try:
        settings: Settings = _load_settings(args)
    except (OSError, ValueError) as exc:
        return _fail(f"invalid settings: {exc}", EXIT_INPUT)

    source: Optional[str] = args.source or settings.default_source
    if not source:
        arg_parser.print_usage(sys.stderr)
        return _fail("no source given; use -s/--source or default_source in --config", EXIT_INPUT)

    logger.info("Source:  %s", source)
    parser: OpenAPISchemaParser = OpenAPISchemaParser(settings.parser)

    if args.validate_only or args.inspect or args.rules:
        result, code = _parse(parser, source)
        if result is None:
            return code
        if args.snapshot:
            code = _snapshot(settings, args.snapshot, result)
            if code != EXIT_OK:
                return code
        if args.inspect:
            return _print_json(result.inspect())
        if args.rules:
            return _print_json(result.validation_rules)
        return _print_validation(result)

    generator: ModelGenerator = ModelGenerator(settings, parser)
    report: GenerationReport = generator.generate(
        source, args.output, only=args.models, dry_run=args.dry_run
    )
    print(report.summary())

    if args.snapshot and report.parse_result is not None:
        snapshot_code: int = _snapshot(settings, args.snapshot, report.parse_result)
        if report.success:
            return snapshot_code

    if report.success:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", report.exit_code)
    return report.exit_code


def main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """Console script entry point."""
    try:
        code: int = run(argv)
    except APIModelError as exc:
        code = _fail(f"{exc.kind}: {exc.message}", EXIT_INPUT)
    sys.exit(code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "main",
    "run",
]

logger.debug("apimodel.cli loaded: %d public symbols.", len(__all__))
