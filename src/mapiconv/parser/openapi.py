"""Parse decoded OpenAPI 3.x documents into :class:`~mapiconv.models.ParsedOpenApiDocument`.

This module walks an OpenAPI document (after non-schema ``$ref`` inlining by
:func:`~mapiconv.parser.resolver.resolve_refs`) and builds the OpenAPI
intermediate model: document metadata, the document-level auth descriptor,
the named-schema table, and one :class:`~mapiconv.models.OpenApiOperation`
per ``method x path`` combination.

The single public entry point is :func:`parse_openapi`. Internally it
delegates to private helpers that each handle one section of the document:

* ``_extract_auth`` -- ``security`` + ``components/securitySchemes``.
* ``_extract_operations`` -- the ``paths`` object.
* ``_extract_parameters`` / ``_extract_request_body`` /
  ``_extract_responses`` -- the pieces of a single operation.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they
share the same ``name`` and ``in`` values.

Malformed pieces never abort parsing. Non-dict path items and operations
are skipped, and operations without an ``operationId`` receive one derived
from their method and path (see :func:`derive_operation_id`). Sections of
the wrong shape read as empty, and scalar text fields are stringified
before they reach the models.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from mapiconv.models import (
    OpenApiAuth,
    OpenApiOperation,
    OpenApiParameter,
    OpenApiRequestBody,
    OpenApiResponse,
    ParsedOpenApiDocument,
)
from mapiconv.parser.resolver import resolve_refs

logger = logging.getLogger(__name__)

# Order matters: operations are emitted in this order within a path item.
HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

_PARAMETER_LOCATIONS = frozenset({"query", "header", "path", "cookie"})


def parse_openapi(raw_spec: dict[str, Any], openapi_version: str = "3.0.0") -> ParsedOpenApiDocument:
    """Build a :class:`~mapiconv.models.ParsedOpenApiDocument` from a decoded OpenAPI dict.

    Args:
        raw_spec: The decoded OpenAPI document, as returned by
            :func:`~mapiconv.parser.loader.load_openapi`.
        openapi_version: The validated ``openapi`` version string.

    Returns:
        The OpenAPI intermediate model. ``base_url`` comes from the first
        declared server; ``auth`` is ``None`` when no security scheme is
        declared.

    Example::

        raw = load_openapi("petstore.yaml")
        doc = parse_openapi(raw, validate_openapi_version(raw))
        for op in doc.operations:
            print(op.method, op.path, op.operation_id)
    """
    spec = resolve_refs(raw_spec)
    info = _as_dict(spec.get("info"))
    components = _as_dict(spec.get("components"))
    schemas = _as_dict(components.get("schemas"))

    return ParsedOpenApiDocument(
        title=str(info.get("title") or "Untitled API"),
        description=_text(info.get("description")),
        version=_text(info.get("version")),
        base_url=_extract_base_url(spec),
        auth=_extract_auth(spec),
        schemas={str(name): s for name, s in schemas.items() if isinstance(s, dict)},
        operations=_extract_operations(spec),
        openapi_version=openapi_version,
    )


def derive_operation_id(method: str, path: str) -> str:
    """Build a stable identifier for an operation that declares no ``operationId``.

    Path parameters lose their braces and every non-alphanumeric run
    becomes an underscore, so ``GET /users/{id}/posts`` yields
    ``get_users_id_posts``. The root path yields ``<method>_root``.
    """
    segments = [
        re.sub(r"[^A-Za-z0-9]+", "_", segment.strip("{}")).strip("_")
        for segment in path.strip("/").split("/")
    ]
    segments = [s for s in segments if s]
    return "_".join([method.lower(), *(segments or ["root"])])


def _extract_base_url(spec: dict[str, Any]) -> Optional[str]:
    servers = _as_list(spec.get("servers"))
    if servers and isinstance(servers[0], dict) and servers[0].get("url"):
        return str(servers[0]["url"])
    return None


def _extract_auth(spec: dict[str, Any]) -> Optional[OpenApiAuth]:
    """Derive the document-level auth descriptor.

    The first scheme named by the top-level ``security`` requirements wins.
    Without top-level requirements, the first declared scheme is used.
    """
    components = _as_dict(spec.get("components"))
    schemes = _as_dict(components.get("securitySchemes"))
    if not schemes:
        return None

    scheme_name: Optional[str] = None
    scopes: list[str] = []
    for requirement in _as_list(spec.get("security")):
        if isinstance(requirement, dict) and requirement:
            scheme_name, scope_list = next(iter(requirement.items()))
            scopes = [str(s) for s in _as_list(scope_list)]
            break
    if spec.get("security") == []:
        # Explicitly public document.
        return None
    if scheme_name is None:
        scheme_name = next(iter(schemes))

    scheme = schemes.get(scheme_name)
    if not isinstance(scheme, dict):
        logger.warning("Security requirement names unknown scheme '%s'", scheme_name)
        return None

    scheme_type = str(scheme.get("type", ""))
    if scheme_type == "http":
        http_scheme = str(scheme.get("scheme", "")).lower()
        if http_scheme == "bearer":
            return OpenApiAuth(type="bearer", header="Authorization", location="header")
        return OpenApiAuth(type=http_scheme or "http", header="Authorization", location="header")
    if scheme_type == "apiKey":
        return OpenApiAuth(
            type="api_key",
            header=_text(scheme.get("name")),
            location=_text(scheme.get("in")),
        )
    if scheme_type == "oauth2":
        return OpenApiAuth(type="oauth2", flows=_as_dict(scheme.get("flows")) or None, scopes=scopes)
    if scheme_type == "openIdConnect":
        return OpenApiAuth(type="openid_connect", scopes=scopes)
    return OpenApiAuth(type=scheme_type or "unknown")


def _extract_operations(spec: dict[str, Any]) -> list[OpenApiOperation]:
    """Extract all operations from the ``paths`` object, in document order.

    Operations without an ``operationId`` get a derived one; derived ids
    that collide with an earlier operation are suffixed ``_2``, ``_3``...
    """
    paths = _as_dict(spec.get("paths"))
    operations: list[OpenApiOperation] = []
    used_ids: set[str] = set()

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        path_params = _as_list(path_item.get("parameters"))

        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if not isinstance(operation, dict):
                continue

            operation_id = operation.get("operationId")
            if not operation_id:
                operation_id = _unique(derive_operation_id(method, str(path)), used_ids)
                logger.debug("Derived operationId '%s' for %s %s", operation_id, method.upper(), path)
            used_ids.add(str(operation_id))

            merged_params = _merge_parameters(path_params, _as_list(operation.get("parameters")))

            operations.append(
                OpenApiOperation(
                    operation_id=str(operation_id),
                    method=method.upper(),
                    path=str(path),
                    summary=_text(operation.get("summary")),
                    description=_text(operation.get("description")),
                    tags=[str(t) for t in _as_list(operation.get("tags"))],
                    parameters=_extract_parameters(merged_params),
                    request_body=_extract_request_body(operation.get("requestBody")),
                    responses=_extract_responses(operation.get("responses")),
                    security=_extract_security(operation.get("security")),
                    deprecated=bool(operation.get("deprecated", False)),
                )
            )

    return operations


def _unique(candidate: str, used: set[str]) -> str:
    if candidate not in used:
        return candidate
    counter = 2
    while f"{candidate}_{counter}" in used:
        counter += 1
    return f"{candidate}_{counter}"


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _text(value: Any) -> Optional[str]:
    """Return scalar *value* as a non-empty string, or ``None``."""
    if isinstance(value, (str, int, float)):
        return str(value) or None
    return None


def _extract_security(value: Any) -> Optional[list[dict[str, list[str]]]]:
    """Normalize an operation-level ``security`` list.

    ``None`` (no override) is kept distinct from ``[]`` (explicitly public).
    A requirement with no scopes, such as YAML ``bearerAuth:``, gets an
    empty scope list. Non-dict entries are dropped.
    """
    if not isinstance(value, list):
        return None
    return [
        {str(name): [str(s) for s in _as_list(scopes)] for name, scopes in requirement.items()}
        for requirement in value
        if isinstance(requirement, dict)
    ]


def _merge_parameters(
    path_params: list[Any],
    op_params: list[Any],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.
    """
    path_params = [p for p in path_params if isinstance(p, dict)]
    op_params = [p for p in op_params if isinstance(p, dict)]

    op_keys = {_param_key(p) for p in op_params}
    merged = [p for p in path_params if _param_key(p) not in op_keys]
    merged.extend(op_params)
    return merged


def _param_key(param: dict[str, Any]) -> tuple[str, str]:
    return str(param.get("name", "")), str(param.get("in", ""))


def _extract_parameters(params_list: list[dict[str, Any]]) -> list[OpenApiParameter]:
    """Convert raw parameter dicts into :class:`~mapiconv.models.OpenApiParameter` models.

    Path parameters are always required regardless of the ``required``
    field. Parameters without a name or with an unrecognised ``in`` location
    are skipped.
    """
    parameters: list[OpenApiParameter] = []

    for param in params_list:
        name = param.get("name")
        location = param.get("in", "query")
        if not name or not isinstance(location, str) or location not in _PARAMETER_LOCATIONS:
            continue

        schema = param.get("schema")
        required = bool(param.get("required", False)) or location == "path"

        parameters.append(
            OpenApiParameter(
                name=str(name),
                location=location,
                required=required,
                description=_text(param.get("description")),
                schema_=schema if isinstance(schema, dict) else None,
            )
        )

    return parameters


def _extract_request_body(body: Any) -> Optional[OpenApiRequestBody]:
    if not isinstance(body, dict):
        return None

    return OpenApiRequestBody(
        required=bool(body.get("required", False)),
        description=_text(body.get("description")),
        content=_extract_content(body.get("content")),
    )


def _extract_responses(responses: Any) -> dict[str, OpenApiResponse]:
    result: dict[str, OpenApiResponse] = {}
    if not isinstance(responses, dict):
        return result

    for status_code, response in responses.items():
        if not isinstance(response, dict):
            continue
        result[str(status_code)] = OpenApiResponse(
            description=_text(response.get("description")),
            content=_extract_content(response.get("content")),
        )

    return result


def _extract_content(content: Any) -> dict[str, dict[str, Any]]:
    if not isinstance(content, dict):
        return {}
    return {
        str(media_type): media
        for media_type, media in content.items()
        if isinstance(media, dict)
    }
