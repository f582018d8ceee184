# File: apimodel/resolver.py
"""
apimodel - Reference Resolver
===============================
Turns a raw document into a ``SchemaGraph``: every component schema
normalized into a ``SchemaNode`` and every ``$ref`` replaced by a
reference node bound to a shared ``SchemaRegistry``.

Resolution runs in three passes:

1. Register the component table (``components.schemas`` name → pointer)
   so forward references are known before any body is built.
2. Normalize each component body.  A ``$ref`` met on the way materializes
   its target on demand; a target that is already *in progress* (a cycle)
   is not re-entered, the reference node simply points at the registry
   key and is looked up lazily.  Every other ``$ref`` in ``paths`` and
   ``components`` is checked for a target as well.
3. Closure check: every reference node in the registry has a target.

The in-progress set, the registry and the external-document cache all
belong to a single ``resolve()`` call.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from apimodel.exceptions import (
    ExternalReferenceUnsupportedError,
    MalformedDocumentError,
    UnresolvableReferenceError,
)
from apimodel.loader import DocumentLoader, resolve_relative
from apimodel.models import ParserConfig, SchemaKind, SchemaNode, SchemaRegistry
from apimodel.normalizer import RefFactory, SchemaNormalizer
from apimodel.utils import (
    Timer,
    escape_pointer_token,
    pointer_tokens,
    split_ref,
    walk_pointer,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.resolver")

ROOT_DOCUMENT: str = ""
COMPONENT_SCHEMAS_PREFIX: str = "#/components/schemas/"

# Keys whose values are example payloads, not schema objects.
_OPAQUE_KEYS = frozenset({"example", "examples"})


def schema_key(name: str) -> str:
    """Registry key of a component schema of the root document."""
    return COMPONENT_SCHEMAS_PREFIX + escape_pointer_token(name)


# ---------------------------------------------------------------------------
# Per-call resolution state
# ---------------------------------------------------------------------------


class _Resolution:
    """State of one ``resolve()`` call."""

    def __init__(
        self,
        document: Dict[str, Any],
        source: str,
        config: ParserConfig,
        loader: Optional[DocumentLoader],
    ) -> None:
        self.source: str = source
        self.config: ParserConfig = config
        self.loader: Optional[DocumentLoader] = loader
        self.registry: SchemaRegistry = SchemaRegistry()
        self.in_progress: Set[str] = set()
        self.checked: Set[str] = set()
        self.documents: Dict[str, Dict[str, Any]] = {ROOT_DOCUMENT: document}
        self.component_table: Dict[str, str] = {}

    # -- Pointers -----------------------------------------------------------

    def canonical(self, ref: str, doc_key: str) -> Tuple[str, str, str]:
        """
        Return ``(registry_key, document_key, fragment)`` for *ref* read in
        document *doc_key*.
        """
        doc_part, fragment = split_ref(ref)
        if doc_part:
            if not self.config.allow_external_refs:
                raise ExternalReferenceUnsupportedError(ref)
            base: str = doc_key or self.source
            target_doc: str = resolve_relative(base, doc_part)
        else:
            target_doc = doc_key

        tokens: List[str] = pointer_tokens(fragment)
        canonical_fragment: str = "".join(f"/{escape_pointer_token(t)}" for t in tokens)
        return f"{target_doc}#{canonical_fragment}", target_doc, canonical_fragment

    def document(self, doc_key: str, ref: str) -> Dict[str, Any]:
        cached: Optional[Dict[str, Any]] = self.documents.get(doc_key)
        if cached is not None:
            return cached
        if self.loader is None:
            raise UnresolvableReferenceError(ref, "no loader available for external documents")
        logger.info("Loading external document %s", doc_key)
        loaded: Dict[str, Any] = self.loader.load(doc_key)
        self.documents[doc_key] = loaded
        return loaded

    def locate(self, ref: str, doc_key: str) -> Tuple[str, str, Any]:
        """Return ``(registry_key, document_key, raw_target)``."""
        key, target_doc, fragment = self.canonical(ref, doc_key)
        document: Dict[str, Any] = self.document(target_doc, ref)
        try:
            target: Any = walk_pointer(document, fragment)
        except LookupError as exc:
            raise UnresolvableReferenceError(ref, str(exc)) from exc
        return key, target_doc, target

    # -- Schema materialization --------------------------------------------

    def factory_for(self, doc_key: str) -> RefFactory:
        def _factory(ref: str, location: str) -> SchemaNode:
            return self.reference(ref, doc_key)

        return _factory

    def reference(self, ref: str, doc_key: str) -> SchemaNode:
        key, target_doc, fragment = self.canonical(ref, doc_key)
        if key not in self.registry and key not in self.in_progress:
            self.materialize(ref, doc_key)
        elif key in self.in_progress:
            logger.debug("Cycle detected at %s; emitting lazy reference.", key)
        node: SchemaNode = SchemaNode(kind=SchemaKind.REFERENCE, ref=ref, target=key)
        node.bind(self.registry)
        return node

    def materialize(self, ref: str, doc_key: str) -> SchemaNode:
        key, target_doc, raw = self.locate(ref, doc_key)
        existing: Optional[SchemaNode] = self.registry.get(key)
        if existing is not None:
            return existing
        self.in_progress.add(key)
        try:
            node: SchemaNode = SchemaNormalizer(self.factory_for(target_doc)).normalize(
                raw, location=key
            )
        finally:
            self.in_progress.discard(key)
        self.registry.register(key, node)
        logger.debug("Registered schema %s (%s)", key, node.kind)
        return node

    def normalize(self, raw: Any, location: str, doc_key: str) -> SchemaNode:
        return SchemaNormalizer(self.factory_for(doc_key)).normalize(raw, location=location)

    # -- Non-schema references ---------------------------------------------

    def scan(self, obj: Any, doc_key: str) -> None:
        """Check every ``$ref`` under *obj* has a target, recursing into targets."""
        stack: List[Tuple[Any, str]] = [(obj, doc_key)]
        while stack:
            current, current_doc = stack.pop()
            if isinstance(current, list):
                stack.extend((item, current_doc) for item in current)
                continue
            if not isinstance(current, dict):
                continue
            ref: Any = current.get("$ref")
            if isinstance(ref, str):
                key, target_doc, _ = self.canonical(ref, current_doc)
                if key not in self.checked and key not in self.registry:
                    self.checked.add(key)
                    _, _, target = self.locate(ref, current_doc)
                    stack.append((target, target_doc))
            for name, value in current.items():
                if name == "$ref" or name in _OPAQUE_KEYS or str(name).startswith("x-"):
                    continue
                stack.append((value, current_doc))

    def deref(self, obj: Any, doc_key: str) -> Tuple[Any, str]:
        """Follow a chain of ``$ref`` objects to the concrete object."""
        seen: Set[str] = set()
        current: Any = obj
        current_doc: str = doc_key
        while isinstance(current, dict) and isinstance(current.get("$ref"), str):
            ref: str = current["$ref"]
            key, current_doc, current = self.locate(ref, current_doc)
            if key in seen:
                raise UnresolvableReferenceError(ref, "circular reference chain")
            seen.add(key)
        return current, current_doc


# ---------------------------------------------------------------------------
# Schema graph
# ---------------------------------------------------------------------------


class SchemaGraph:
    """
    Resolved view of one document.

    ``schemas`` maps component names to their nodes in document order;
    ``registry`` holds every materialized schema (components plus any
    other pointer target, external ones included).
    """

    def __init__(self, resolution: _Resolution, schemas: Dict[str, SchemaNode]) -> None:
        self._resolution: _Resolution = resolution
        self.schemas: Dict[str, SchemaNode] = schemas

    @property
    def document(self) -> Dict[str, Any]:
        return self._resolution.documents[ROOT_DOCUMENT]

    @property
    def source(self) -> str:
        return self._resolution.source

    @property
    def registry(self) -> SchemaRegistry:
        return self._resolution.registry

    def get(self, name: str) -> Optional[SchemaNode]:
        return self.schemas.get(name)

    def names(self) -> List[str]:
        return list(self.schemas)

    def name_for_key(self, key: str) -> Optional[str]:
        """Component name for a registry key of the root document."""
        if key.startswith(COMPONENT_SCHEMAS_PREFIX):
            tokens: List[str] = pointer_tokens(key[1:])
            if len(tokens) == 3:
                return tokens[2]
        return None

    def normalize(self, raw: Any, location: str = "#", doc_key: str = ROOT_DOCUMENT) -> SchemaNode:
        """Normalize a schema found outside ``components.schemas``."""
        return self._resolution.normalize(raw, location, doc_key)

    def deref(self, obj: Any, doc_key: str = ROOT_DOCUMENT) -> Tuple[Any, str]:
        """
        Dereference a parameter, request body, response or header object.

        Returns the concrete object and the key of the document it lives in
        (needed to normalize schemas nested inside an external target).
        """
        return self._resolution.deref(obj, doc_key)

    def iter_references(self) -> Iterator[SchemaNode]:
        for _, node in self.registry.items():
            for child in node.walk():
                if child.kind == SchemaKind.REFERENCE:
                    yield child

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SchemaGraph):
            return NotImplemented
        return self.schemas == other.schemas and self.registry == other.registry

    def __repr__(self) -> str:
        return f"<SchemaGraph {len(self.schemas)} components, {len(self.registry)} registered>"


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class ReferenceResolver:
    """
    Resolve every ``$ref`` of a raw document.

    Args:
        config: ``allow_external_refs`` gates cross-document references.
        loader: Used to fetch external documents; defaults to a
            ``DocumentLoader`` built from *config*.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        loader: Optional[DocumentLoader] = None,
    ) -> None:
        self.config: ParserConfig = config or ParserConfig()
        self.loader: DocumentLoader = loader or DocumentLoader(self.config)

    def resolve(self, document: Dict[str, Any], source: str = "<memory>") -> SchemaGraph:
        """
        Build the ``SchemaGraph`` of *document*.

        Raises:
            UnresolvableReferenceError: a pointer has no target.
            ExternalReferenceUnsupportedError: a cross-document pointer
                was found while external references are disabled.
        """
        run: _Resolution = _Resolution(document, source, self.config, self.loader)

        with Timer("resolve references"):
            components: Any = document.get("components") or {}
            if not isinstance(components, dict):
                raise MalformedDocumentError(source, ["'components' must be a mapping"])
            raw_schemas: Any = components.get("schemas") or {}
            if not isinstance(raw_schemas, dict):
                raise MalformedDocumentError(source, ["'components.schemas' must be a mapping"])

            # Pass 1: component table
            for name in raw_schemas:
                run.component_table[str(name)] = schema_key(str(name))
            logger.debug("Registered %d component names", len(run.component_table))

            # Pass 2: bodies, then every other pointer
            schemas: Dict[str, SchemaNode] = {}
            for name, key in run.component_table.items():
                node: Optional[SchemaNode] = run.registry.get(key)
                if node is None:
                    node = run.materialize(key, ROOT_DOCUMENT)
                schemas[name] = node

            run.scan(document.get("paths") or {}, ROOT_DOCUMENT)
            run.scan(
                {k: v for k, v in components.items() if k != "schemas"},
                ROOT_DOCUMENT,
            )

            # Pass 3: closure
            graph: SchemaGraph = SchemaGraph(run, schemas)
            self._check_closure(graph)

        logger.info(
            "Resolved %d component schemas (%d registered, %d external documents)",
            len(schemas),
            len(run.registry),
            len(run.documents) - 1,
        )
        return graph

    @staticmethod
    def _check_closure(graph: SchemaGraph) -> None:
        for ref_node in graph.iter_references():
            if ref_node.resolved is None:
                raise UnresolvableReferenceError(ref_node.ref or "", "target never materialized")


def resolve_document(
    document: Dict[str, Any],
    source: str = "<memory>",
    config: Optional[ParserConfig] = None,
) -> SchemaGraph:
    return ReferenceResolver(config).resolve(document, source)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ReferenceResolver",
    "SchemaGraph",
    "resolve_document",
    "schema_key",
    "COMPONENT_SCHEMAS_PREFIX",
    "ROOT_DOCUMENT",
]

logger.debug("apimodel.resolver loaded: %d public symbols.", len(__all__))
