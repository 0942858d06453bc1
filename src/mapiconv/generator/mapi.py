"""Render an OpenAPI document as MAPI source text.

The output is a complete MAPI document that :func:`~mapiconv.parser.mapi.parse_mapi`
reads back:

* title, description, and a ``~~~meta`` block with ``version``,
  ``base_url``, ``auth`` and, where known, ``auth_header``, ``auth_flow``
  and ``auth_scopes``;
* a ``## Global Types`` section declaring every named schema;
* one ``## Capability: <name>`` block per operation with its own meta
  block, an *Intention*, and TypeScript *Input* / *Output* interfaces.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from mapiconv.generator.naming import normalize_operation_id, pascal_case, unique_id
from mapiconv.generator.skill import json_schema, first_response, request_body_schema
from mapiconv.models import AuthScheme, OpenApiOperation, ParsedOpenApiDocument, Schema
from mapiconv.schema.typescript import render_type_declarations, schema_to_typescript

logger = logging.getLogger(__name__)

_SUCCESS_STATUS_CODES = ("200", "201", "204")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][\w$]*")


def generate_mapi_from_openapi(doc: ParsedOpenApiDocument, api_name: Optional[str] = None) -> str:
    """Render *doc* as a MAPI document.

    Args:
        doc: The OpenAPI intermediate model.
        api_name: Overrides the document title.

    Returns:
        MAPI source text ending with a newline.

    Example::

        doc = load_document("openapi.yaml")
        Path("api.mapi.md").write_text(generate_mapi_from_openapi(doc))
    """
    lines = [f"# {api_name or doc.title}", ""]
    if doc.description:
        lines.extend([doc.description, ""])
    lines.extend(_document_meta(doc))

    if doc.schemas:
        lines.extend(["## Global Types", "", "```typescript"])
        lines.extend(render_type_declarations(doc.schemas))
        lines.extend(["```", ""])

    used_ids: set[str] = set()
    for op in doc.operations:
        capability_id = unique_id(normalize_operation_id(op.operation_id), used_ids)
        used_ids.add(capability_id)
        lines.extend(["---", ""])
        lines.extend(_capability_block(op, doc, capability_id))

    logger.debug("Rendered %d operations as MAPI capabilities", len(doc.operations))
    return "\n".join(lines).rstrip("\n") + "\n"


def _document_meta(doc: ParsedOpenApiDocument) -> list[str]:
    meta = ["~~~meta"]
    if doc.version:
        meta.append(f"version: {doc.version}")
    if doc.base_url:
        meta.append(f"base_url: {doc.base_url}")

    auth = doc.auth
    meta.append(f"auth: {auth.type if auth else AuthScheme.NONE.value}")
    if auth is not None:
        if auth.type == AuthScheme.API_KEY.value and auth.header:
            meta.append(f"auth_header: {auth.header}")
        if auth.type == AuthScheme.OAUTH2.value and auth.flows:
            meta.append(f"auth_flow: {next(iter(auth.flows))}")
        if auth.scopes:
            meta.append(f"auth_scopes: [{', '.join(auth.scopes)}]")

    meta.extend(["~~~", ""])
    return meta


def _capability_block(op: OpenApiOperation, doc: ParsedOpenApiDocument, capability_id: str) -> list[str]:
    lines = [
        f"## Capability: {op.summary or op.operation_id}",
        "",
        "~~~meta",
        f"id: {capability_id}",
        f"transport: HTTP {op.method} {op.path}",
    ]
    if op.security is not None:
        lines.append("auth: required" if op.security else "auth: none")
    if op.deprecated:
        lines.append("deprecated: true")
    lines.extend(["~~~", ""])

    lines.extend([
        "### Intention",
        "",
        op.description or op.summary or f"Performs {op.operation_id} operation.",
        "",
    ])

    input_interface = input_interface_for(op, doc)
    if input_interface is not None:
        lines.extend(["### Input", "", "```typescript", input_interface, "```", ""])

    output_interface = output_interface_for(op, doc)
    if output_interface is not None:
        lines.extend(["### Output", "", "```typescript", output_interface, "```", ""])

    return lines


def input_interface_for(op: OpenApiOperation, doc: ParsedOpenApiDocument) -> Optional[str]:
    """Build the ``<Pascal>Request`` interface, or ``None`` when there is no input.

    Parameters become fields annotated with a ``// in: <location>`` comment
    when they carry no description. An object request body contributes its
    properties inline; any other body becomes a single ``body`` field.
    """
    fields: list[str] = []

    for param in op.parameters:
        ts_type = schema_to_typescript(param.schema_, "", doc.schemas, "  ") if param.schema_ else "string"
        optional = "" if param.required else "?"
        comment = param.description or f"in: {param.location}"
        fields.append(f"  {_field_name(param.name)}{optional}: {ts_type};  // {_one_line(comment)}")

    body = request_body_schema(op)
    if body is not None:
        rendered = schema_to_typescript(body, "Body", doc.schemas)
        if rendered.startswith("interface"):
            fields.extend(rendered.split("\n")[1:-1])
        else:
            optional = "" if op.request_body and op.request_body.required else "?"
            fields.append(f"  body{optional}: {rendered};")

    if not fields:
        return None
    return "\n".join([f"interface {pascal_case(op.operation_id)}Request {{", *fields, "}"])


def output_interface_for(op: OpenApiOperation, doc: ParsedOpenApiDocument) -> Optional[str]:
    """Build the ``<Pascal>Response`` declaration from the first success response."""
    response = first_response(op, _SUCCESS_STATUS_CODES)
    if response is None:
        return None

    name = f"{pascal_case(op.operation_id)}Response"
    schema: Optional[Schema] = json_schema(response.content)
    if schema is None:
        return f"interface {name} {{\n  // {_one_line(response.description or 'Success')}\n}}"

    rendered = schema_to_typescript(schema, name, doc.schemas)
    if rendered.startswith("interface"):
        return rendered
    return f"type {name} = {rendered};"


def _field_name(name: str) -> str:
    return name if _IDENTIFIER_RE.fullmatch(name) else f"'{name}'"


def _one_line(text: str) -> str:
    return " ".join(text.split())
