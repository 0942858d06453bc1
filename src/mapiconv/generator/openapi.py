"""Build a best-effort OpenAPI 3.1 document from a parsed MAPI document.

Only capabilities with an ``HTTP <METHOD> <path>`` transport have an
OpenAPI counterpart; ``WS``, ``WEBHOOK`` and ``INTERNAL`` capabilities are
skipped and logged. TypeScript in the *Input*, *Output* and global-types
blocks is read back with :func:`~mapiconv.schema.typescript.parse_typescript_types`,
which understands the common subset and degrades anything else to an
untyped schema.

There is no round-trip guarantee: MAPI carries prose (logic constraints,
errors, auth intention) that has no structured OpenAPI home.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from mapiconv.models import AuthScheme, Capability, ParsedMapiDocument, Schema
from mapiconv.schema.type_mapper import resolve_schema
from mapiconv.schema.typescript import (
    parse_interface_fields,
    parse_typescript_types,
    type_expression_to_schema,
)

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.1.0"

_TRANSPORT_RE = re.compile(r"^HTTP\s+(\w+)\s+(\S+)(\s+\(SSE\))?$", re.IGNORECASE)
_PATH_PARAM_RE = re.compile(r"\{([^}]+)\}")
_QUERY_METHODS = frozenset({"get", "delete", "head"})
_ALIAS_RE = re.compile(r"^\s*(?:export\s+)?type\s+\w+\s*=\s*([^;]+)")


def generate_openapi_from_mapi(doc: ParsedMapiDocument) -> dict[str, Any]:
    """Convert *doc* into an OpenAPI document dict.

    Args:
        doc: The MAPI intermediate model.

    Returns:
        A JSON-serialisable OpenAPI 3.1 document. Paths keep capability
        order; a second capability on an already-used ``method x path`` is
        dropped with a warning.
    """
    schemas = parse_typescript_types(doc.global_types)
    known = set(schemas)

    spec: dict[str, Any] = {
        "openapi": OPENAPI_VERSION,
        "info": _info(doc),
    }
    base_url = doc.meta.get("base_url")
    if base_url:
        spec["servers"] = [{"url": str(base_url)}]

    security_schemes = _security_schemes(doc.meta)
    scheme_name = next(iter(security_schemes), None)
    if scheme_name is not None:
        spec["security"] = [{scheme_name: _scopes(doc.meta)}]

    paths: dict[str, dict[str, Any]] = {}
    for cap in doc.capabilities:
        match = _TRANSPORT_RE.match(cap.meta.transport.strip())
        if match is None:
            logger.info("Skipping capability '%s': transport '%s' has no OpenAPI form", cap.meta.id, cap.meta.transport)
            continue

        method = match.group(1).lower()
        path = match.group(2)
        streaming = match.group(3) is not None

        path_item = paths.setdefault(path, {})
        if method in path_item:
            logger.warning("Skipping capability '%s': %s %s already defined", cap.meta.id, method.upper(), path)
            continue
        path_item[method] = _operation(cap, method, path, streaming, schemas, known)

    spec["paths"] = paths

    components: dict[str, Any] = {}
    if schemas:
        components["schemas"] = schemas
    if security_schemes:
        components["securitySchemes"] = security_schemes
    if components:
        spec["components"] = components

    return spec


def _info(doc: ParsedMapiDocument) -> dict[str, Any]:
    info: dict[str, Any] = {
        "title": doc.title,
        "version": str(doc.meta.get("version") or "1.0.0"),
    }
    if doc.description:
        info["description"] = doc.description
    return info


def _security_schemes(meta: dict[str, Any]) -> dict[str, Any]:
    auth = str(meta.get("auth") or AuthScheme.NONE.value)
    if auth == AuthScheme.BEARER.value:
        return {"bearerAuth": {"type": "http", "scheme": "bearer"}}
    if auth == AuthScheme.API_KEY.value:
        header = str(meta.get("auth_header") or "X-API-Key")
        return {"apiKeyAuth": {"type": "apiKey", "in": "header", "name": header}}
    if auth == AuthScheme.OAUTH2.value:
        flow = str(meta.get("auth_flow") or "clientCredentials")
        scopes = {scope: "" for scope in _scopes(meta)}
        return {"oauth2": {"type": "oauth2", "flows": {flow: {"scopes": scopes}}}}
    if auth != AuthScheme.NONE.value:
        logger.warning("Auth scheme '%s' has no OpenAPI mapping; omitting securitySchemes", auth)
    return {}


def _scopes(meta: dict[str, Any]) -> list[str]:
    scopes = meta.get("auth_scopes") or []
    if not isinstance(scopes, list):
        scopes = [scopes]
    return [str(s) for s in scopes]


def _operation(
    cap: Capability,
    method: str,
    path: str,
    streaming: bool,
    schemas: dict[str, Schema],
    known: set[str],
) -> dict[str, Any]:
    operation: dict[str, Any] = {"operationId": cap.meta.id, "summary": cap.name}
    if cap.intention:
        operation["description"] = cap.intention
    if cap.meta.deprecated:
        operation["deprecated"] = True
    if cap.meta.auth == AuthScheme.NONE.value:
        operation["security"] = []

    path_names = _PATH_PARAM_RE.findall(path)
    parameters: list[dict[str, Any]] = [
        {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}
        for name in path_names
    ]

    input_schema = _input_schema(cap, schemas, known)
    if input_schema is not None:
        properties = {
            name: prop
            for name, prop in (input_schema.get("properties") or {}).items()
            if name not in path_names
        }
        required = [name for name in input_schema.get("required") or [] if name in properties]

        if method in _QUERY_METHODS:
            for name, prop in properties.items():
                param_schema = dict(prop)
                description = param_schema.pop("description", None)
                param: dict[str, Any] = {"name": name, "in": "query", "required": name in required}
                if description:
                    param["description"] = description
                param["schema"] = param_schema
                parameters.append(param)
        elif properties:
            body: Schema = {"type": "object", "properties": properties}
            if required:
                body["required"] = required
            operation["requestBody"] = {
                "required": bool(required),
                "content": {"application/json": {"schema": body}},
            }

    if parameters:
        operation["parameters"] = parameters

    operation["responses"] = {"200": _response(cap, streaming, known)}
    return operation


def _input_schema(cap: Capability, schemas: dict[str, Schema], known: set[str]) -> Optional[Schema]:
    if not cap.input:
        return None
    return resolve_schema(declared_schema(cap.input, known), schemas)


def _response(cap: Capability, streaming: bool, known: set[str]) -> dict[str, Any]:
    response: dict[str, Any] = {"description": "Successful response"}
    if cap.output:
        media_type = "text/event-stream" if streaming else "application/json"
        response["content"] = {media_type: {"schema": declared_schema(cap.output, known)}}
    return response


def declared_schema(text: str, known: set[str]) -> Schema:
    """Return the schema of the first declaration (or bare type) in *text*.

    ``type X = <expr>;`` yields the schema of ``<expr>``; an interface or a
    bare ``{ ... }`` body yields an object schema; a lone type name that is
    a global type yields a ``$ref``.
    """
    alias = _ALIAS_RE.match(text)
    if alias and not alias.group(1).lstrip().startswith("{"):
        return type_expression_to_schema(alias.group(1), known)
    return parse_interface_fields(text, known)
