# File: apimodel/loader.py
"""
apimodel - Document Loader
============================
Fetches schema bytes from a local path or an ``http(s)`` URL and
deserialises them into a plain ``dict`` tree (the raw document).

JSON is tried first, YAML second.  Size limits are enforced before a
body is fully buffered: a local file is checked with ``stat`` and a
remote body is streamed and abandoned as soon as it crosses
``max_file_size``.  The loader never caches; callers decide that.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin, urlparse

import httpx
import yaml

from apimodel.exceptions import (
    MalformedDocumentError,
    SourceNotFoundError,
    SourceTooLargeError,
    SourceUnreadableError,
)
from apimodel.models import ParserConfig

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.loader")

_REMOTE_SCHEMES = frozenset({"http", "https"})


def is_remote(source: str) -> bool:
    """True for absolute ``http``/``https`` URLs."""
    parsed = urlparse(source)
    return parsed.scheme.lower() in _REMOTE_SCHEMES and bool(parsed.netloc)


def resolve_relative(base: str, reference: str) -> str:
    """
    Locate *reference* (a document named in a ``$ref``) relative to *base*.

    Examples:
        >>> resolve_relative("https://x.test/api/root.yaml", "common.yaml")
        'https://x.test/api/common.yaml'
    """
    if is_remote(reference) or not base:
        return reference
    if is_remote(base):
        return urljoin(base, reference)
    ref_path: Path = Path(reference)
    if ref_path.is_absolute():
        return str(ref_path)
    return str(Path(base).parent / ref_path)


class DocumentLoader:
    """
    Load a raw OpenAPI document.

    Args:
        config: Supplies ``remote_timeout`` and ``max_file_size``.
        client: Optional pre-built ``httpx.Client``; when omitted a
            short-lived client is created per remote fetch.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.config: ParserConfig = config or ParserConfig()
        self._client: Optional[httpx.Client] = client

    # -- Public API ---------------------------------------------------------

    def load(self, source: str) -> Dict[str, Any]:
        """Fetch and parse *source*."""
        return self.parse_text(self.fetch(source), source)

    def fetch(self, source: str) -> str:
        """Return the decoded text of *source* without parsing it."""
        if is_remote(source):
            return self._fetch_remote(source)
        return self._fetch_local(source)

    def parse_text(self, text: str, source: str = "<memory>") -> Dict[str, Any]:
        """
        Deserialise *text*: JSON first, then YAML.

        Raises:
            MalformedDocumentError: neither parser accepts the text, or the
                root is not a mapping.
        """
        diagnostics: List[str] = []
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as json_exc:
            diagnostics.append(f"JSON: {json_exc}")
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as yaml_exc:
                diagnostics.append(f"YAML: {yaml_exc}")
                raise MalformedDocumentError(source, diagnostics) from yaml_exc
            logger.debug("Parsed %s as YAML", source)
        else:
            logger.debug("Parsed %s as JSON", source)

        if not isinstance(data, dict):
            diagnostics.append(
                f"document root must be a mapping, got {type(data).__name__}"
            )
            raise MalformedDocumentError(source, diagnostics)
        return data

    # -- Local files --------------------------------------------------------

    def _fetch_local(self, source: str) -> str:
        path: Path = Path(source)
        if not path.exists():
            raise SourceNotFoundError(f"Schema file not found: {source}", source)
        if not path.is_file():
            raise SourceUnreadableError(f"Schema source is not a file: {source}", source)

        limit: int = self.config.max_file_size
        try:
            size: int = path.stat().st_size
            if size > limit:
                raise SourceTooLargeError(source, size, limit)
            text: str = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceUnreadableError(
                f"Schema file not readable: {source} ({exc})", source
            ) from exc

        logger.info("Loaded schema file %s (%d bytes)", source, size)
        return text

    # -- Remote documents ---------------------------------------------------

    def _fetch_remote(self, url: str) -> str:
        if self._client is not None:
            return self._stream(self._client, url)
        with httpx.Client(
            timeout=self.config.remote_timeout, follow_redirects=True
        ) as client:
            return self._stream(client, url)

    def _stream(self, client: httpx.Client, url: str) -> str:
        limit: int = self.config.max_file_size
        chunks: List[bytes] = []
        received: int = 0
        try:
            with client.stream("GET", url, timeout=self.config.remote_timeout) as response:
                if response.status_code >= 400:
                    raise SourceUnreadableError(
                        f"Failed to fetch schema from URL: {url} "
                        f"(HTTP {response.status_code})",
                        url,
                    )
                declared: Optional[str] = response.headers.get("content-length")
                if declared is not None and declared.isdigit() and int(declared) > limit:
                    raise SourceTooLargeError(url, int(declared), limit)

                for chunk in response.iter_bytes():
                    received += len(chunk)
                    if received > limit:
                        raise SourceTooLargeError(url, received, limit)
                    chunks.append(chunk)
                encoding: str = response.encoding or "utf-8"
        except httpx.TimeoutException as exc:
            raise SourceUnreadableError(
                f"Timed out fetching schema from URL: {url}", url
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnreadableError(
                f"Failed to fetch schema from URL: {url} ({exc})", url
            ) from exc

        body: bytes = b"".join(chunks)
        try:
            text: str = body.decode(encoding)
        except (LookupError, UnicodeDecodeError) as exc:
            raise SourceUnreadableError(
                f"Schema at {url} is not valid {encoding} text", url
            ) from exc
        logger.info("Fetched schema from %s (%d bytes)", url, received)
        return text


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DocumentLoader",
    "is_remote",
    "resolve_relative",
]

logger.debug("apimodel.loader loaded: %d public symbols.", len(__all__))
