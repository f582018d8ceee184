# File: apimodel/validators.py
"""
apimodel - Document & Configuration Validators
================================================
Lightweight structural checks run on the raw document before reference
resolution, plus sanity checks on ``GenerationConfig``.

The parser only relies on the shape these checks guarantee; it does not
try to be a full OpenAPI validator.

Errors (make the document unusable):
    - ``MISSING_INFO_VERSION``     ``info.version`` absent or empty
    - ``INVALID_PATHS``            ``paths`` absent or not a mapping
    - ``OPERATION_NO_RESPONSES``   an operation without ``responses``

Warnings:
    - ``DUPLICATE_OPERATION_ID``   the same ``operationId`` used twice
    - ``UNDECLARED_PATH_PARAM``    ``{name}`` in a path template with no
      matching ``in: path`` parameter
    - ``NO_COMPONENT_SCHEMAS``     ``components.schemas`` missing or empty

Every issue carries a JSON Pointer to the offending node, so callers can
report "/paths/~1pets/post/responses" instead of a bare message.

Usage::

    result = validate_document(raw)
    for issue in result.issues_at("/paths"):
        print(issue.pointer, issue.message)
    result.raise_for_errors("api.yaml")
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Tuple

from apimodel.exceptions import InvalidDocumentError
from apimodel.models import HTTP_METHODS, GenerationConfig
from apimodel.utils import escape_pointer_token, split_ref, walk_pointer

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class DocumentIssue:
    """
    One structural problem, located by a JSON Pointer.

    ``pointer`` addresses the offending node of the checked document
    (``/paths/~1pets/post/responses``) or, for configuration checks, the
    offending field (``/base_module``).  An empty pointer means the whole
    document.
    """

    __slots__ = ("severity", "code", "message", "pointer", "context")

    def __init__(
        self,
        severity: str,
        code: str,
        message: str,
        pointer: str = "",
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.severity: str = severity  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.pointer: str = pointer
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    @property
    def is_warning(self) -> bool:
        return self.severity == "warning"

    def __repr__(self) -> str:
        where: str = f" ({self.pointer})" if self.pointer else ""
        return f"[{self.severity.upper()}] {self.code}{where}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "pointer": self.pointer,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates ``DocumentIssue`` items from the individual checks."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[DocumentIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        pointer: str = "",
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(DocumentIssue("error", code, message, pointer, context))

    def add_warning(
        self,
        code: str,
        message: str,
        pointer: str = "",
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(DocumentIssue("warning", code, message, pointer, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[DocumentIssue]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[DocumentIssue]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[DocumentIssue]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    def issues_at(self, pointer: str) -> List[DocumentIssue]:
        """Issues located at *pointer* or anywhere below it."""
        prefix: str = pointer.rstrip("/")
        return [
            e
            for e in self._items
            if e.pointer == prefix or e.pointer.startswith(prefix + "/")
        ]

    def raise_for_errors(self, source: str) -> None:
        """
        Raises:
            InvalidDocumentError: when any error was recorded.
        """
        if self.has_errors:
            raise InvalidDocumentError(source, self)

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s)."
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [e.to_dict() for e in self.warnings],
        }

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are no errors."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            prefix: str = "❌" if item.is_error else "⚠️"
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            if item.pointer:
                lines.append(f"       at: {item.pointer}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PATH_TEMPLATE_RE: re.Pattern[str] = re.compile(r"\{([^}/]+)\}")
_DOTTED_IDENTIFIER_RE: re.Pattern[str] = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$"
)
_IDENTIFIER_CHARS_RE: re.Pattern[str] = re.compile(r"^[A-Za-z0-9_]*$")


def _operations(
    document: Dict[str, Any],
) -> Iterator[Tuple[str, str, Dict[str, Any], Dict[str, Any]]]:
    """Yield ``(path, method, operation, path_item)`` for mapping-shaped items."""
    paths: Any = document.get("paths")
    if not isinstance(paths, dict):
        return
    for path, item in paths.items():
        if not isinstance(item, dict):
            continue
        for method in HTTP_METHODS:
            operation: Any = item.get(method)
            if isinstance(operation, dict):
                yield str(path), method, operation, item


def _operation_pointer(path: str, method: str, *tail: str) -> str:
    """JSON Pointer of an operation (or a member of it)."""
    tokens: List[str] = ["paths", path, method, *tail]
    return "/" + "/".join(escape_pointer_token(t) for t in tokens)


def _local_target(document: Dict[str, Any], value: Any) -> Any:
    """Follow one same-document ``$ref``; anything else is returned as is."""
    if isinstance(value, dict) and isinstance(value.get("$ref"), str):
        doc, fragment = split_ref(value["$ref"])
        if doc:
            return None
        try:
            return walk_pointer(document, fragment)
        except LookupError:
            return None
    return value


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def validate_info(document: Dict[str, Any]) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    info: Any = document.get("info")
    if not isinstance(info, dict) or not info.get("version"):
        result.add_error(
            "MISSING_INFO_VERSION",
            "OpenAPI document is missing required info.version.",
            "/info/version",
        )
    return result


def validate_paths(document: Dict[str, Any]) -> ValidationResult:
    """``paths`` must be a mapping and every operation must declare ``responses``."""
    result: ValidationResult = ValidationResult()
    if not isinstance(document.get("paths"), dict):
        result.add_error(
            "INVALID_PATHS", "OpenAPI document is missing or has invalid paths.", "/paths"
        )
        return result

    for path, method, operation, _ in _operations(document):
        if not operation.get("responses"):
            result.add_error(
                "OPERATION_NO_RESPONSES",
                f"Operation {method.upper()} {path} has no responses.",
                _operation_pointer(path, method, "responses"),
                {"path": path, "method": method},
            )
    return result


def validate_operation_ids(document: Dict[str, Any]) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    seen: Dict[str, str] = {}
    for path, method, operation, _ in _operations(document):
        op_id: Any = operation.get("operationId")
        if not op_id:
            continue
        where: str = f"{method.upper()} {path}"
        if op_id in seen:
            result.add_warning(
                "DUPLICATE_OPERATION_ID",
                f"operationId '{op_id}' is used by {seen[op_id]} and {where}.",
                _operation_pointer(path, method, "operationId"),
                {"operation_id": op_id},
            )
        else:
            seen[op_id] = where
    return result


def validate_path_parameters(document: Dict[str, Any]) -> ValidationResult:
    """Every ``{name}`` in a path template should be declared ``in: path``."""
    result: ValidationResult = ValidationResult()
    for path, method, operation, item in _operations(document):
        template: List[str] = _PATH_TEMPLATE_RE.findall(path)
        if not template:
            continue
        declared: Set[str] = set()
        for raw in list(item.get("parameters") or []) + list(operation.get("parameters") or []):
            param: Any = _local_target(document, raw)
            if isinstance(param, dict) and param.get("in") == "path":
                declared.add(str(param.get("name")))
        for name in template:
            if name not in declared:
                result.add_warning(
                    "UNDECLARED_PATH_PARAM",
                    f"Path parameter '{name}' of {method.upper()} {path} is not declared.",
                    _operation_pointer(path, method, "parameters"),
                    {"path": path, "method": method, "parameter": name},
                )
    return result


def validate_components(document: Dict[str, Any]) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    components: Any = document.get("components")
    schemas: Any = components.get("schemas") if isinstance(components, dict) else None
    if not schemas:
        result.add_warning(
            "NO_COMPONENT_SCHEMAS",
            "No component schemas defined; models are built from inline schemas only.",
            "/components/schemas",
        )
    return result


def validate_generation_config(config: GenerationConfig) -> ValidationResult:
    """Checks pydantic cannot express on single fields."""
    result: ValidationResult = ValidationResult()
    for name in ("base_module", "factory_base_module"):
        value: str = getattr(config, name)
        if not _DOTTED_IDENTIFIER_RE.match(value):
            result.add_error(
                "INVALID_MODULE_PATH",
                f"{name} '{value}' is not a dotted Python module path.",
                f"/{name}",
                {"field": name},
            )
    for name in ("base_class", "factory_base_class"):
        value = getattr(config, name)
        if not value.isidentifier():
            result.add_error(
                "INVALID_CLASS_NAME",
                f"{name} '{value}' is not a valid class name.",
                f"/{name}",
                {"field": name},
            )
    for name in ("prefix", "suffix"):
        value = getattr(config, name)
        if not _IDENTIFIER_CHARS_RE.match(value):
            result.add_warning(
                "CLASS_AFFIX_SANITISED",
                f"{name} '{value}' contains characters that will be replaced by '_'.",
                f"/{name}",
                {"field": name},
            )
    return result


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

_DOCUMENT_CHECKS: List[Callable[[Dict[str, Any]], ValidationResult]] = [
    validate_info,
    validate_paths,
    validate_operation_ids,
    validate_path_parameters,
    validate_components,
]


def validate_document(document: Dict[str, Any]) -> ValidationResult:
    """Run every structural check on a raw document."""
    result: ValidationResult = ValidationResult()
    for check in _DOCUMENT_CHECKS:
        logger.debug("Running check: %s", check.__name__)
        result.merge(check(document))

    if result.has_errors:
        logger.warning("Structure check found problems. %s", result.summary())
    else:
        logger.info("Structure check passed. %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DocumentIssue",
    "ValidationResult",
    "validate_info",
    "validate_paths",
    "validate_operation_ids",
    "validate_path_parameters",
    "validate_components",
    "validate_generation_config",
    "validate_document",
]

logger.debug("apimodel.validators loaded: %d public symbols.", len(__all__))
