# File: apimodel/utils.py
"""
apimodel - Utility Functions & Helpers
========================================
String transformation, JSON-pointer, hashing and file I/O helpers used
throughout the pipeline.

- Naming helpers are wrapped in ``@lru_cache(maxsize=None)``; the mapper
  and the code generator call them for every property of every schema.
- File writes are atomic (temp file + rename).
"""

from __future__ import annotations

import functools
import hashlib
import json
import logging
import os
import re
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple
from urllib.parse import unquote

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_CAMEL_TO_SNAKE_RE1: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_TO_SNAKE_RE2: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")
_LEADING_TRAILING_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)

_PYTHON_KEYWORDS: FrozenSet[str] = frozenset({
    "False", "None", "True", "and", "as", "assert", "async", "await",
    "break", "class", "continue", "def", "del", "elif", "else",
    "except", "finally", "for", "from", "global", "if", "import",
    "in", "is", "lambda", "nonlocal", "not", "or", "pass", "raise",
    "return", "try", "while", "with", "yield",
})

# Names that would shadow members of generated model classes
_RESERVED_FIELD_NAMES: FrozenSet[str] = frozenset({
    "base_endpoint", "fillable", "casts", "validation_rules", "operations",
    "model_config", "model_fields", "belongs_to", "has_many", "get_attribute",
})

_IRREGULAR_PLURALS: Dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "datum": "data",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    "axis": "axes",
    "crisis": "crises",
    "analysis": "analyses",
    "status": "statuses",
    "address": "addresses",
}

_IRREGULAR_SINGULARS: Dict[str, str] = {v: k for k, v in _IRREGULAR_PLURALS.items()}

_UNCOUNTABLE: FrozenSet[str] = frozenset({
    "equipment", "information", "money", "news", "series", "species",
    "metadata", "settings", "media",
})


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert any string to snake_case.

    Examples:
        >>> to_snake_case("PetOwner")
        'pet_owner'
        >>> to_snake_case("getHTTPResponse")
        'get_http_response'
        >>> to_snake_case("already_snake")
        'already_snake'
    """
    if not name:
        return ""
    s: str = _CAMEL_TO_SNAKE_RE1.sub(r"\1_\2", name)
    s = _CAMEL_TO_SNAKE_RE2.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    s = _LEADING_TRAILING_UNDERSCORE_RE.sub("", s)
    return s.lower()


@functools.lru_cache(maxsize=None)
def to_pascal_case(name: str) -> str:
    """
    Convert any string to PascalCase ("studly" case).

    Examples:
        >>> to_pascal_case("pet_owner")
        'PetOwner'
        >>> to_pascal_case("pet store")
        'PetStore'
    """
    if not name:
        return ""
    words: Tuple[str, ...] = _extract_words(name)
    return "".join(word.capitalize() for word in words)


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert any string to camelCase.

    Examples:
        >>> to_camel_case("owner_address")
        'ownerAddress'
        >>> to_camel_case("HTTPResponse")
        'httpResponse'
    """
    if not name:
        return ""
    words: Tuple[str, ...] = _extract_words(name)
    if not words:
        return ""
    return words[0].lower() + "".join(w.capitalize() for w in words[1:])


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """Naive English pluralisation, enough for resource names."""
    if not name:
        return ""

    lower: str = name.lower()
    if lower in _UNCOUNTABLE:
        return name
    if lower in _IRREGULAR_PLURALS:
        plural: str = _IRREGULAR_PLURALS[lower]
        return plural[0].upper() + plural[1:] if name[0].isupper() else plural
    if lower.endswith(("sh", "ch", "x", "z", "ss", "us")):
        return name + "es"
    if lower.endswith("y") and len(name) > 1 and lower[-2] not in "aeiou":
        return name[:-1] + "ies"
    if lower.endswith("fe"):
        return name[:-2] + "ves"
    if lower.endswith("f"):
        return name[:-1] + "ves"
    if lower.endswith("o") and len(name) > 1 and lower[-2] not in "aeiou":
        return name + "es"
    if lower.endswith("s"):
        return name

    return name + "s"


@functools.lru_cache(maxsize=None)
def to_singular(name: str) -> str:
    """
    Naive English singularisation (reverse of ``to_plural``).

    Examples:
        >>> to_singular("pets")
        'pet'
        >>> to_singular("Categories")
        'Category'
        >>> to_singular("status")
        'status'
    """
    if not name:
        return ""

    lower: str = name.lower()
    if lower in _UNCOUNTABLE or lower in _IRREGULAR_PLURALS:
        return name
    if lower in _IRREGULAR_SINGULARS:
        singular: str = _IRREGULAR_SINGULARS[lower]
        return singular[0].upper() + singular[1:] if name[0].isupper() else singular

    if lower.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if lower.endswith("ves") and len(name) > 3:
        return name[:-3] + "f"
    if lower.endswith("oes") and len(name) > 3:
        return name[:-2]
    if lower.endswith(("sses", "shes", "ches", "xes", "zes")):
        return name[:-2]
    if lower.endswith(("ss", "us", "is")):
        return name
    if lower.endswith("s") and len(name) > 1:
        return name[:-1]

    return name


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    """Split any casing style into lowercase words (tuple for hashing)."""
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    words: List[str] = _SPLIT_WORDS_RE.findall(cleaned)
    return tuple(w.lower() for w in words if w)


@functools.lru_cache(maxsize=None)
def convert_case(name: str, convention: str) -> str:
    """Apply a ``NamingConvention`` value (``pascal_case`` etc.) to *name*."""
    if convention == "pascal_case":
        return to_pascal_case(name)
    if convention == "camel_case":
        return to_camel_case(name)
    if convention == "snake_case":
        return to_snake_case(name)
    raise ValueError(f"Unknown naming convention: {convention!r}")


@functools.lru_cache(maxsize=None)
def safe_identifier(name: str) -> str:
    """
    Make *name* usable as a Python attribute.

    Leading digits get an underscore prefix; keywords and names reserved
    by generated model classes get an underscore suffix.
    """
    result: str = _NON_ALPHANUM_RE.sub("_", name).strip("_") if name else ""
    if not result:
        return "_unnamed"
    if result[0].isdigit():
        result = f"_{result}"
    if result in _PYTHON_KEYWORDS or result in _RESERVED_FIELD_NAMES:
        result = f"{result}_"
    return result


@functools.lru_cache(maxsize=None)
def model_name_from_label(label: str) -> str:
    """Singularised PascalCase model name from a tag or path segment."""
    return to_pascal_case(to_singular(to_snake_case(label)))


@functools.lru_cache(maxsize=None)
def synthesize_operation_id(method: str, path: str) -> str:
    """
    Operation id for operations that lack one.

    Examples:
        >>> synthesize_operation_id("GET", "/pets/{petId}")
        'get_pets__petId'
    """
    return f"{method.lower()}_{_NON_ALPHANUM_RE.sub('_', path).strip('_')}"


# ---------------------------------------------------------------------------
# JSON pointer helpers
# ---------------------------------------------------------------------------


def unescape_pointer_token(token: str) -> str:
    """Decode one RFC 6901 reference token (percent-encoding, ``~1``, ``~0``)."""
    return unquote(token).replace("~1", "/").replace("~0", "~")


def escape_pointer_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def split_ref(ref: str) -> Tuple[str, str]:
    """
    Split a ``$ref`` into ``(document, fragment)``.

    Examples:
        >>> split_ref("#/components/schemas/Pet")
        ('', '/components/schemas/Pet')
        >>> split_ref("common.yaml#/Error")
        ('common.yaml', '/Error')
    """
    document, _, fragment = ref.partition("#")
    return document, fragment


def pointer_tokens(fragment: str) -> List[str]:
    """Decoded tokens of a JSON pointer fragment (``/a/b`` → ``['a', 'b']``)."""
    if not fragment or fragment == "/":
        return []
    return [unescape_pointer_token(t) for t in fragment.lstrip("/").split("/")]


def walk_pointer(document: Any, fragment: str) -> Any:
    """
    Follow *fragment* inside *document*.

    Raises:
        LookupError: if any token has no match.
    """
    current: Any = document
    for token in pointer_tokens(fragment):
        if isinstance(current, dict) and token in current:
            current = current[token]
        elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
            current = current[int(token)]
        else:
            raise LookupError(f"pointer token {token!r} not found")
    return current


# ---------------------------------------------------------------------------
# Literal helpers
# ---------------------------------------------------------------------------


def python_literal(value: Any) -> str:
    """Render a JSON-compatible value as Python source."""
    if value is None or isinstance(value, (bool, int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(python_literal(v) for v in value) + "]"
    if isinstance(value, dict):
        return "{" + ", ".join(
            f"{python_literal(str(k))}: {python_literal(v)}" for k, v in value.items()
        ) + "}"
    return repr(str(value))


def build_import_block(imports: Dict[str, Set[str]]) -> str:
    """
    Sorted, de-duplicated ``from x import y`` block.

    Example:
        >>> build_import_block({"typing": {"List", "Optional"}, "datetime": {"datetime"}})
        'from datetime import datetime\\nfrom typing import List, Optional'
    """
    lines: List[str] = []
    for module in sorted(imports.keys()):
        names: List[str] = sorted(imports[module])
        if names:
            lines.append(f"from {module} import {', '.join(names)}")
        else:
            lines.append(f"import {module}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*; returns the number of bytes written.

    With *atomic* the bytes go to a temporary sibling first, which is
    then renamed over the target.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")
    byte_count: int = len(encoded)

    if atomic:
        fd: int
        tmp_path: str
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(encoded)
            shutil.move(tmp_path, str(path))
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", byte_count, path)
    return byte_count


def write_json(path: Path, data: Any) -> int:
    return write_file(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for pipeline stages.

    Usage:
        with Timer("resolve references") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.info("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_snake_case",
    "to_pascal_case",
    "to_camel_case",
    "to_plural",
    "to_singular",
    "convert_case",
    "safe_identifier",
    "model_name_from_label",
    "synthesize_operation_id",
    "unescape_pointer_token",
    "escape_pointer_token",
    "split_ref",
    "pointer_tokens",
    "walk_pointer",
    "python_literal",
    "build_import_block",
    "ensure_directory",
    "write_file",
    "write_json",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("apimodel.utils loaded: %d public symbols.", len(__all__))
