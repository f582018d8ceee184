# File: apimodel/endpoints.py
"""
apimodel - Endpoint Extractor
===============================
Walks ``paths`` and builds one ``EndpointRecord`` per path × method.

Order is the document's path order crossed with the fixed method list
``get, post, put, patch, delete, head, options, trace``, so output is
reproducible for an unchanged document.  Parameter, request body and
response objects given as ``$ref`` are dereferenced through the
``SchemaGraph``; every schema found on the way is normalized into ISR.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from apimodel.exceptions import MalformedDocumentError
from apimodel.models import (
    HTTP_METHODS,
    EndpointRecord,
    ParameterRecord,
    RequestBodyRecord,
    ResponseRecord,
    SchemaNode,
)
from apimodel.resolver import SchemaGraph
from apimodel.utils import escape_pointer_token, synthesize_operation_id

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.endpoints")


class EndpointExtractor:
    """Build the endpoint catalog of a resolved document."""

    def __init__(self, graph: SchemaGraph) -> None:
        self.graph: SchemaGraph = graph

    # -- Public API ---------------------------------------------------------

    def extract(self) -> List[EndpointRecord]:
        """All operations in document order."""
        paths: Any = self.graph.document.get("paths") or {}
        if not isinstance(paths, dict):
            raise MalformedDocumentError(self.graph.source, ["'paths' must be a mapping"])

        endpoints: List[EndpointRecord] = []
        for raw_path, raw_item in paths.items():
            path: str = str(raw_path)
            item, doc_key = self.graph.deref(raw_item or {})
            if not isinstance(item, dict):
                raise MalformedDocumentError(
                    f"#/paths/{escape_pointer_token(path)}", ["path item must be a mapping"]
                )
            shared: List[ParameterRecord] = self._parameters(
                item.get("parameters") or [],
                f"#/paths/{escape_pointer_token(path)}/parameters",
                doc_key,
            )
            for method in HTTP_METHODS:
                operation: Any = item.get(method)
                if operation is None:
                    continue
                if not isinstance(operation, dict):
                    raise MalformedDocumentError(
                        f"#/paths/{escape_pointer_token(path)}/{method}",
                        ["operation must be a mapping"],
                    )
                endpoints.append(self._endpoint(path, method, operation, shared, doc_key))

        logger.info("Extracted %d endpoints from %d paths", len(endpoints), len(paths))
        return endpoints

    def catalog(self, endpoints: Optional[List[EndpointRecord]] = None) -> Dict[str, EndpointRecord]:
        """
        Endpoints keyed by operation id, in extraction order.

        A repeated operation id replaces the earlier record.
        """
        result: Dict[str, EndpointRecord] = {}
        for endpoint in endpoints if endpoints is not None else self.extract():
            if endpoint.operation_id in result:
                previous: EndpointRecord = result[endpoint.operation_id]
                logger.warning(
                    "Duplicate operationId '%s': %s %s replaces %s %s",
                    endpoint.operation_id,
                    endpoint.method.upper(),
                    endpoint.path,
                    previous.method.upper(),
                    previous.path,
                )
            result[endpoint.operation_id] = endpoint
        return result

    # -- Operations ---------------------------------------------------------

    def _endpoint(
        self,
        path: str,
        method: str,
        operation: Dict[str, Any],
        shared: List[ParameterRecord],
        doc_key: str,
    ) -> EndpointRecord:
        location: str = f"#/paths/{escape_pointer_token(path)}/{method}"
        operation_id: str = operation.get("operationId") or synthesize_operation_id(method, path)

        own: List[ParameterRecord] = self._parameters(
            operation.get("parameters") or [], f"{location}/parameters", doc_key
        )
        parameters: List[ParameterRecord] = _merge_parameters(shared, own)

        request_body: Optional[RequestBodyRecord] = None
        if operation.get("requestBody") is not None:
            request_body = self._request_body(
                operation["requestBody"], f"{location}/requestBody", doc_key
            )

        responses: Dict[str, ResponseRecord] = {}
        for status, raw_response in (operation.get("responses") or {}).items():
            responses[str(status)] = self._response(
                raw_response, f"{location}/responses/{status}", doc_key
            )

        try:
            record: EndpointRecord = EndpointRecord(
                operation_id=str(operation_id),
                path=path,
                method=method,
                summary=operation.get("summary"),
                description=operation.get("description"),
                tags=[str(t) for t in operation.get("tags") or []],
                parameters=parameters,
                request_body=request_body,
                responses=responses,
                deprecated=bool(operation.get("deprecated", False)),
                security=operation.get("security"),
            )
        except ValidationError as exc:
            raise MalformedDocumentError(location, [str(exc)]) from exc

        logger.debug("Endpoint %r", record)
        return record

    def _parameters(self, raw_list: Any, location: str, doc_key: str) -> List[ParameterRecord]:
        if not isinstance(raw_list, list):
            raise MalformedDocumentError(location, ["'parameters' must be a list"])
        records: List[ParameterRecord] = []
        for index, raw in enumerate(raw_list):
            param, param_doc = self.graph.deref(raw, doc_key)
            param_location: str = f"{location}/{index}"
            if not isinstance(param, dict) or "name" not in param or "in" not in param:
                raise MalformedDocumentError(
                    param_location, ["parameter requires 'name' and 'in'"]
                )

            schema: Optional[SchemaNode] = None
            if "schema" in param:
                schema = self.graph.normalize(param["schema"], f"{param_location}/schema", param_doc)
            elif isinstance(param.get("content"), dict) and param["content"]:
                media_type, media = next(iter(param["content"].items()))
                if isinstance(media, dict) and "schema" in media:
                    schema = self.graph.normalize(
                        media["schema"], f"{param_location}/content/{media_type}/schema", param_doc
                    )

            try:
                records.append(
                    ParameterRecord(
                        name=str(param["name"]),
                        location=param["in"],
                        required=bool(param.get("required", False)),
                        schema_node=schema,
                        style=param.get("style"),
                        explode=param.get("explode"),
                        description=param.get("description"),
                        deprecated=bool(param.get("deprecated", False)),
                        example=param.get("example"),
                    )
                )
            except ValidationError as exc:
                raise MalformedDocumentError(param_location, [str(exc)]) from exc
        return records

    def _content(self, raw_content: Any, location: str, doc_key: str) -> Dict[str, Optional[SchemaNode]]:
        content: Dict[str, Optional[SchemaNode]] = {}
        if not isinstance(raw_content, dict):
            return content
        for media_type, media in raw_content.items():
            schema: Optional[SchemaNode] = None
            if isinstance(media, dict) and media.get("schema") is not None:
                schema = self.graph.normalize(
                    media["schema"],
                    f"{location}/content/{escape_pointer_token(str(media_type))}/schema",
                    doc_key,
                )
            content[str(media_type)] = schema
        return content

    def _request_body(self, raw: Any, location: str, doc_key: str) -> RequestBodyRecord:
        body, body_doc = self.graph.deref(raw, doc_key)
        if not isinstance(body, dict):
            raise MalformedDocumentError(location, ["request body must be a mapping"])
        return RequestBodyRecord(
            description=body.get("description"),
            required=bool(body.get("required", False)),
            content=self._content(body.get("content"), location, body_doc),
        )

    def _response(self, raw: Any, location: str, doc_key: str) -> ResponseRecord:
        response, response_doc = self.graph.deref(raw, doc_key)
        if not isinstance(response, dict):
            raise MalformedDocumentError(location, ["response must be a mapping"])
        return ResponseRecord(
            description=response.get("description"),
            content=self._content(response.get("content"), location, response_doc),
            headers=[str(h) for h in (response.get("headers") or {})],
        )


def _merge_parameters(
    shared: List[ParameterRecord], own: List[ParameterRecord]
) -> List[ParameterRecord]:
    """Path-level parameters overridden by operation-level ones (same name + in)."""
    merged: Dict[Tuple[str, str], ParameterRecord] = {
        (p.name, p.location): p for p in shared
    }
    for param in own:
        merged[(param.name, param.location)] = param
    return list(merged.values())


# ---------------------------------------------------------------------------
# Document-level sections
# ---------------------------------------------------------------------------


def extract_info(document: Dict[str, Any]) -> Dict[str, Any]:
    """Summary of ``info``; a missing or malformed section yields empty fields."""
    info: Any = document.get("info")
    if not isinstance(info, dict):
        info = {}
    return {
        "title": info.get("title", ""),
        "description": info.get("description", ""),
        "version": str(info.get("version", "")),
        "terms_of_service": info.get("termsOfService"),
        "contact": info.get("contact") or {},
        "license": info.get("license") or {},
    }


def extract_servers(document: Dict[str, Any]) -> List[Dict[str, Any]]:
    servers: List[Dict[str, Any]] = []
    raw_servers: Any = document.get("servers")
    if not isinstance(raw_servers, list):
        return servers
    for server in raw_servers:
        if not isinstance(server, dict):
            continue
        servers.append(
            {
                "url": server.get("url", ""),
                "description": server.get("description", ""),
                "variables": server.get("variables") or {},
            }
        )
    return servers


def extract_security_schemes(document: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    components: Any = document.get("components")
    raw_schemes: Any = components.get("securitySchemes") if isinstance(components, dict) else None
    schemes: Dict[str, Dict[str, Any]] = {}
    if not isinstance(raw_schemes, dict):
        return schemes
    for name, scheme in raw_schemes.items():
        if not isinstance(scheme, dict):
            continue
        schemes[str(name)] = {
            "type": scheme.get("type"),
            "description": scheme.get("description", ""),
            "name": scheme.get("name"),
            "in": scheme.get("in"),
            "scheme": scheme.get("scheme"),
            "bearerFormat": scheme.get("bearerFormat"),
            "flows": scheme.get("flows") or {},
            "openIdConnectUrl": scheme.get("openIdConnectUrl"),
        }
    return schemes


def extract_endpoints(graph: SchemaGraph) -> List[EndpointRecord]:
    return EndpointExtractor(graph).extract()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "EndpointExtractor",
    "extract_endpoints",
    "extract_info",
    "extract_servers",
    "extract_security_schemes",
]

logger.debug("apimodel.endpoints loaded: %d public symbols.", len(__all__))
