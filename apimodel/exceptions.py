# File: apimodel/exceptions.py
"""
apimodel - Error Taxonomy
===========================
Every failure raised by the pipeline derives from ``APIModelError``.

Each error carries a short ``message`` and the ``identifier`` that caused
it (a path, URL, JSON pointer, version string or model name) so callers
can render ``kind + message + identifier`` instead of a stack trace::

    try:
        parser.parse("petstore.yaml")
    except APIModelError as exc:
        print(exc.to_dict())

Families:
    - Source errors (Document Loader): ``SourceNotFoundError``,
      ``SourceUnreadableError``, ``SourceTooLargeError``.
    - Document errors: ``MalformedDocumentError``,
      ``UnsupportedVersionError``, ``InvalidDocumentError``.
    - Reference errors: ``UnresolvableReferenceError``,
      ``ExternalReferenceUnsupportedError``.
    - Generation errors: ``WouldOverwriteError``,
      ``InvalidModelMappingError``.
    - Storage errors: ``SchemaVersionError``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.exceptions")


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------


class APIModelError(Exception):
    """
    Base class for all apimodel errors.

    Examples:
        >>> err = APIModelError("boom", identifier="petstore.yaml")
        >>> err.kind
        'APIModelError'
        >>> str(err)
        'boom'
    """

    def __init__(self, message: str, *, identifier: Optional[str] = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.identifier: Optional[str] = identifier

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Structured form used by the CLI and health-check style callers."""
        return {
            "kind": self.kind,
            "message": self.message,
            "identifier": self.identifier,
        }

    def __repr__(self) -> str:
        return f"<{self.kind} {self.identifier!r}: {self.message}>"


# ---------------------------------------------------------------------------
# Document Loader
# ---------------------------------------------------------------------------


class SourceError(APIModelError):
    """A schema source could not be fetched."""

    def __init__(self, message: str, source: str) -> None:
        super().__init__(message, identifier=source)
        self.source: str = source


class SourceNotFoundError(SourceError):
    """The local path does not exist."""


class SourceUnreadableError(SourceError):
    """The source exists but cannot be read (permissions, HTTP failure, timeout)."""


class SourceTooLargeError(SourceError):
    """The source exceeds the configured maximum byte size."""

    def __init__(self, source: str, size: int, limit: int) -> None:
        super().__init__(
            f"Schema source too large: {size} bytes exceeds limit of {limit} bytes",
            source,
        )
        self.size: int = size
        self.limit: int = limit


# ---------------------------------------------------------------------------
# Document content
# ---------------------------------------------------------------------------


class MalformedDocumentError(APIModelError):
    """The document is neither valid JSON nor valid YAML."""

    def __init__(
        self,
        source: str,
        diagnostics: Sequence[str],
    ) -> None:
        self.diagnostics: List[str] = list(diagnostics)
        detail: str = "; ".join(self.diagnostics) or "no diagnostic available"
        super().__init__(f"Malformed document: {detail}", identifier=source)


class UnsupportedVersionError(APIModelError):
    """The ``openapi``/``swagger`` version is not in the supported list."""

    def __init__(self, version: str, supported: Sequence[str]) -> None:
        self.version: str = version
        self.supported: List[str] = list(supported)
        super().__init__(
            f"Unsupported OpenAPI version: {version!r}. "
            f"Supported: {', '.join(self.supported)}",
            identifier=version,
        )


class InvalidDocumentError(APIModelError):
    """Structural validation failed while strict structure checks are on."""

    def __init__(self, source: str, result: Any) -> None:
        self.result: Any = result
        messages: List[str] = [e.message for e in result.errors]
        super().__init__(
            f"Invalid OpenAPI document: {'; '.join(messages)}",
            identifier=source,
        )


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class UnresolvableReferenceError(APIModelError):
    """A ``$ref`` pointer has no matching target."""

    def __init__(self, pointer: str, detail: str = "") -> None:
        self.pointer: str = pointer
        message: str = f"Unresolvable reference: {pointer}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, identifier=pointer)


class ExternalReferenceUnsupportedError(APIModelError):
    """A ``$ref`` points to another document and external resolution is off."""

    def __init__(self, pointer: str) -> None:
        self.pointer: str = pointer
        super().__init__(
            f"External reference not supported: {pointer} "
            "(enable allow_external_refs to resolve it)",
            identifier=pointer,
        )


# ---------------------------------------------------------------------------
# Code generation
# ---------------------------------------------------------------------------


class WouldOverwriteError(APIModelError):
    """A generated file would replace an existing one without permission."""

    def __init__(self, path: str) -> None:
        self.path: str = path
        super().__init__(
            f"Refusing to overwrite existing file: {path} "
            "(set overwrite_existing to replace it)",
            identifier=path,
        )


class InvalidModelMappingError(APIModelError):
    """Code generation was requested for a model absent from the mapping table."""

    def __init__(self, model_name: str, available: Sequence[str] = ()) -> None:
        self.model_name: str = model_name
        self.available: List[str] = list(available)
        message: str = f"Model mapping not found for: {model_name}"
        if self.available:
            message = f"{message}. Available: {', '.join(self.available)}"
        super().__init__(message, identifier=model_name)


# ---------------------------------------------------------------------------
# Versioning store
# ---------------------------------------------------------------------------


class SchemaVersionError(APIModelError):
    """A schema version store operation failed."""


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "APIModelError",
    "SourceError",
    "SourceNotFoundError",
    "SourceUnreadableError",
    "SourceTooLargeError",
    "MalformedDocumentError",
    "UnsupportedVersionError",
    "InvalidDocumentError",
    "UnresolvableReferenceError",
    "ExternalReferenceUnsupportedError",
    "WouldOverwriteError",
    "InvalidModelMappingError",
    "SchemaVersionError",
]

logger.debug("apimodel.exceptions loaded: %d public symbols.", len(__all__))
