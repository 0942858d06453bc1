"""Generate a Skill bundle from a parsed MAPI or OpenAPI document.

A Skill bundle is a progressively-loadable documentation set for
language-model agents:

* ``Skill.md`` -- the index: API name, description, a short meta block,
  the common-dependency table, and one row per capability with its intent
  keywords, file, and dependencies.
* ``common/auth.md`` -- how to authenticate (see :mod:`~mapiconv.generator.auth`).
* ``common/schemas/types.md`` -- every shared type as a TypeScript
  declaration.
* ``capabilities/<id>.md`` -- one document per capability.

The two source formats keep separate entry points,
:func:`generate_skill_from_mapi` and :func:`generate_skill_from_openapi`,
because their capability documents and dependency rules differ. Both
converge on the same index renderer.

The only suspension point is the optional external intent provider in
:class:`ConvertOptions`, awaited once per capability in document order.
Everything else is synchronous and deterministic. :func:`generate_skill`
wraps the async entry points for synchronous callers.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from mapiconv.generator.auth import auth_from_mapi_meta, auth_from_openapi, render_auth
from mapiconv.generator.dependencies import (
    determine_mapi_dependencies,
    determine_openapi_dependencies,
)
from mapiconv.generator.naming import normalize_operation_id, unique_id
from mapiconv.generator.templating import render_template
from mapiconv.intent import (
    IntentProvider,
    extract_intent_keywords,
    extract_openapi_intent_keywords,
    request_keywords,
)
from mapiconv.models import (
    Capability,
    CapabilityIndexEntry,
    OpenApiOperation,
    OpenApiResponse,
    ParsedMapiDocument,
    ParsedOpenApiDocument,
    Schema,
    SkillOutput,
)
from mapiconv.schema import describe_type, generate_example
from mapiconv.schema.examples import has_content
from mapiconv.schema.type_mapper import resolve_schema
from mapiconv.schema.typescript import render_type_declarations

logger = logging.getLogger(__name__)

AUTH_FILE = "auth.md"
TYPES_FILE = "schemas/types.md"

_INDEX_META_KEYS = ("version", "base_url", "auth")
_OUTPUT_STATUS_CODES = ("200", "201", "204")
_EXAMPLE_STATUS_CODES = ("200", "201")


@dataclass
class ConvertOptions:
    """Per-run generation options.

    Attributes:
        api_name: Overrides the document title in ``Skill.md``.
        intent_generator: External keyword provider; when set it replaces
            the local heuristic (see :mod:`mapiconv.intent.provider`).
    """

    api_name: Optional[str] = None
    intent_generator: Optional[IntentProvider] = None


ParsedDocument = Union[ParsedMapiDocument, ParsedOpenApiDocument]


# ------------------------------------------------------------------ #
# Entry points
# ------------------------------------------------------------------ #


async def generate_skill_from_mapi(
    doc: ParsedMapiDocument,
    options: Optional[ConvertOptions] = None,
) -> SkillOutput:
    """Convert a parsed MAPI document into a Skill bundle.

    Args:
        doc: The MAPI intermediate model.
        options: Display-name override and optional intent provider.

    Returns:
        The artifact set. Capability files are keyed ``<id>.md`` and their
        bodies reproduce the MAPI sections verbatim.

    Raises:
        Exception: Whatever the external intent provider raises; failures
            are not masked.
    """
    options = options or ConvertOptions()
    api_name = options.api_name or doc.title

    common: dict[str, str] = {}
    descriptor = auth_from_mapi_meta(doc.meta)
    if descriptor is not None:
        common[AUTH_FILE] = render_auth(descriptor)
    if doc.global_types:
        common[TYPES_FILE] = render_types_block(doc.global_types)

    capabilities: dict[str, str] = {}
    index: list[CapabilityIndexEntry] = []

    for cap in doc.capabilities:
        file_name = f"{cap.meta.id}.md"
        capabilities[file_name] = render_mapi_capability(cap)

        if options.intent_generator is not None and cap.intention:
            keywords = await request_keywords(options.intent_generator, cap.meta.id, cap.intention)
        else:
            keywords = extract_intent_keywords(cap.intention or cap.name, cap.meta.id)

        index.append(
            CapabilityIndexEntry(
                id=cap.meta.id,
                intent_keywords=keywords,
                file_path=f"capabilities/{file_name}",
                dependencies=determine_mapi_dependencies(cap, doc),
            )
        )

    skill_md = render_skill_md(api_name, doc.description, doc.meta, index, list(common))
    return SkillOutput(skill_md=skill_md, common=common, capabilities=capabilities, index=index)


async def generate_skill_from_openapi(
    doc: ParsedOpenApiDocument,
    options: Optional[ConvertOptions] = None,
) -> SkillOutput:
    """Convert a parsed OpenAPI document into a Skill bundle.

    Each operation becomes one capability whose id is the normalized
    ``operationId`` (see :func:`~mapiconv.generator.naming.normalize_operation_id`).
    Ids that collide after normalization get ``_2``, ``_3``... suffixes.

    Args:
        doc: The OpenAPI intermediate model.
        options: Display-name override and optional intent provider.

    Returns:
        The artifact set, with field tables and synthesized examples in
        every capability document.
    """
    options = options or ConvertOptions()
    api_name = options.api_name or doc.title

    common: dict[str, str] = {}
    descriptor = auth_from_openapi(doc.auth)
    if descriptor is not None:
        common[AUTH_FILE] = render_auth(descriptor)
    if doc.schemas:
        common[TYPES_FILE] = render_openapi_types(doc.schemas)

    capabilities: dict[str, str] = {}
    index: list[CapabilityIndexEntry] = []
    used_ids: set[str] = set()

    for op in doc.operations:
        normalized = normalize_operation_id(op.operation_id)
        capability_id = unique_id(normalized, used_ids)
        if capability_id != normalized:
            logger.warning(
                "Operation '%s' normalizes to existing id '%s'; using '%s'",
                op.operation_id, normalized, capability_id,
            )
        used_ids.add(capability_id)

        file_name = f"{capability_id}.md"
        capabilities[file_name] = render_openapi_capability(op, doc, capability_id)

        if options.intent_generator is not None:
            description = op.description or op.summary or op.operation_id
            keywords = await request_keywords(options.intent_generator, capability_id, description)
        else:
            keywords = extract_openapi_intent_keywords(op, capability_id)

        index.append(
            CapabilityIndexEntry(
                id=capability_id,
                intent_keywords=keywords,
                file_path=f"capabilities/{file_name}",
                dependencies=determine_openapi_dependencies(op, doc),
            )
        )

    meta = {
        "version": doc.version,
        "base_url": doc.base_url,
        "auth": doc.auth.type if doc.auth else "none",
    }
    skill_md = render_skill_md(api_name, doc.description, meta, index, list(common))
    return SkillOutput(skill_md=skill_md, common=common, capabilities=capabilities, index=index)


async def generate_skill_async(
    doc: ParsedDocument,
    options: Optional[ConvertOptions] = None,
) -> SkillOutput:
    """Dispatch to the entry point matching the type of *doc*."""
    if isinstance(doc, ParsedOpenApiDocument):
        return await generate_skill_from_openapi(doc, options)
    return await generate_skill_from_mapi(doc, options)


def generate_skill(doc: ParsedDocument, options: Optional[ConvertOptions] = None) -> SkillOutput:
    """Synchronous wrapper around :func:`generate_skill_async`.

    Must not be called from inside a running event loop.
    """
    return asyncio.run(generate_skill_async(doc, options))


# ------------------------------------------------------------------ #
# Index and shared documents
# ------------------------------------------------------------------ #


def render_skill_md(
    api_name: str,
    description: Optional[str],
    meta: dict[str, Any],
    index: list[CapabilityIndexEntry],
    common_files: list[str],
) -> str:
    """Render the ``Skill.md`` index.

    Only ``version``, ``base_url`` and ``auth`` are copied from *meta*.
    """
    return render_template(
        "skill.md.j2",
        api_name=api_name,
        description=description,
        meta={key: meta[key] for key in _INDEX_META_KEYS if meta.get(key)},
        common_files=[(name, common_file_label(name)) for name in common_files],
        index=index,
    )


def common_file_label(file_name: str) -> str:
    """Describe a common file by keyword match on its name."""
    if "auth" in file_name:
        return "Authentication setup"
    if "schema" in file_name:
        return "Shared type definitions"
    if "pagination" in file_name:
        return "Pagination conventions"
    return "Common definitions"


def render_types_block(source: str) -> str:
    """Wrap TypeScript *source* in the shared-types document."""
    return "\n".join(["# Shared Types", "", "```typescript", source, "```", ""])


def render_openapi_types(schemas: dict[str, Schema]) -> str:
    """Render every named schema as an interface or a ``type`` alias."""
    declarations = render_type_declarations(schemas)
    return "\n".join(["# Shared Types", "", "```typescript", *declarations, "```", ""])


# ------------------------------------------------------------------ #
# Capability documents
# ------------------------------------------------------------------ #


def render_mapi_capability(cap: Capability) -> str:
    """Render a capability document from a MAPI capability."""
    lines = [f"# Capability: {cap.name}", "", "~~~meta", f"id: {cap.meta.id}", f"transport: {cap.meta.transport}"]
    if cap.meta.auth:
        lines.append(f"auth: {cap.meta.auth}")
    if cap.meta.idempotent is not None:
        lines.append(f"idempotent: {str(cap.meta.idempotent).lower()}")
    if cap.meta.deprecated:
        lines.append("deprecated: true")
    lines.extend(["~~~", ""])

    for heading, body, fenced in (
        ("Intention", cap.intention, False),
        ("Auth Intention", cap.auth_intention, False),
        ("Input", cap.input, True),
        ("Output", cap.output, True),
        ("Logic Constraints", cap.logic_constraints, False),
        ("Errors", cap.errors, False),
        ("Example", cap.example, False),
    ):
        if not body:
            continue
        lines.extend([f"## {heading}", ""])
        if fenced:
            lines.extend(["```typescript", body, "```"])
        else:
            lines.append(body)
        lines.append("")

    return "\n".join(lines)


def render_openapi_capability(
    op: OpenApiOperation,
    doc: ParsedOpenApiDocument,
    capability_id: Optional[str] = None,
) -> str:
    """Render a capability document from an OpenAPI operation.

    Args:
        op: The operation.
        doc: The owning document (for the named-schema table).
        capability_id: The id to print; defaults to the normalized
            ``operationId``.
    """
    capability_id = capability_id or normalize_operation_id(op.operation_id)

    lines = [
        f"# Capability: {op.summary or op.operation_id}",
        "",
        "~~~meta",
        f"id: {capability_id}",
        f"transport: HTTP {op.method} {op.path}",
    ]
    if op.security:
        lines.append("auth: required")
    if op.deprecated:
        lines.append("deprecated: true")
    lines.extend(["~~~", ""])

    lines.extend([
        "## Intention",
        "",
        op.description or op.summary or f"Performs {op.operation_id} operation.",
        "",
    ])

    if op.parameters or op.request_body is not None:
        lines.extend([
            "## Input",
            "",
            "| Field | Type | Required | Description |",
            "|-------|------|----------|-------------|",
        ])
        lines.extend(input_table_rows(op, doc.schemas))
        lines.append("")

    output_schema = response_schema(op, _OUTPUT_STATUS_CODES)
    if output_schema is not None:
        lines.extend([
            "## Output",
            "",
            "| Field | Type | Description |",
            "|-------|------|-------------|",
        ])
        lines.extend(output_table_rows(output_schema, doc.schemas))
        lines.append("")

    example = render_example(op, doc.schemas)
    if example:
        lines.extend(["## Example", "", example, ""])

    return "\n".join(lines)


def input_table_rows(op: OpenApiOperation, schemas: dict[str, Schema]) -> list[str]:
    """Build ``| Field | Type | Required | Description |`` rows.

    Parameters come first, in declaration order, followed by the top-level
    properties of the JSON request body.
    """
    rows: list[str] = []
    for param in op.parameters:
        info = describe_type(param.schema_, schemas)
        description = info.description or param.description or f"Parameter from {param.location}"
        required = "yes" if param.required else "no"
        rows.append(f"| {param.name} | {info.type} | {required} | {_cell(description)} |")

    body_schema = request_body_schema(op)
    if body_schema is not None:
        resolved = resolve_schema(body_schema, schemas)
        required_fields = set(resolved.get("required") or [])
        for name, prop in _properties(resolved).items():
            info = describe_type(prop, schemas)
            description = prop.get("description") or info.description or ""
            required = "yes" if name in required_fields else "no"
            rows.append(f"| {name} | {info.type} | {required} | {_cell(description)} |")
    return rows


def output_table_rows(schema: Schema, schemas: dict[str, Schema]) -> list[str]:
    """Build ``| Field | Type | Description |`` rows from a response schema."""
    rows: list[str] = []
    resolved = resolve_schema(schema, schemas)
    for name, prop in _properties(resolved).items():
        info = describe_type(prop, schemas)
        description = prop.get("description") or info.description or ""
        rows.append(f"| {name} | {info.type} | {_cell(description)} |")
    return rows


def render_example(op: OpenApiOperation, schemas: dict[str, Schema]) -> Optional[str]:
    """Render the request/response example pair, or ``None`` when neither has content."""
    blocks: list[str] = []

    body_schema = request_body_schema(op)
    if body_schema is not None:
        request = generate_example(body_schema, schemas)
        if has_content(request):
            blocks.append("\n".join(["Request:", "```json", _to_json(request), "```"]))

    success_schema = response_schema(op, _EXAMPLE_STATUS_CODES)
    if success_schema is not None:
        response = generate_example(success_schema, schemas)
        if has_content(response):
            blocks.append("\n".join(["Response:", "```json", _to_json(response), "```"]))

    return "\n\n".join(blocks) if blocks else None


def request_body_schema(op: OpenApiOperation) -> Optional[Schema]:
    """Return the JSON schema of the operation's request body, if any."""
    if op.request_body is None:
        return None
    return json_schema(op.request_body.content)


def response_schema(op: OpenApiOperation, status_codes: tuple[str, ...]) -> Optional[Schema]:
    """Return the JSON schema of the first response among *status_codes*.

    Only the first *declared* status counts: a ``200`` without a body hides
    a ``201`` that has one.
    """
    response = first_response(op, status_codes)
    if response is None:
        return None
    return json_schema(response.content)


def first_response(op: OpenApiOperation, status_codes: tuple[str, ...]) -> Optional[OpenApiResponse]:
    for code in status_codes:
        if code in op.responses:
            return op.responses[code]
    return None


def json_schema(content: dict[str, dict[str, Any]]) -> Optional[Schema]:
    """Pick the schema of the JSON media type in *content*.

    ``application/json`` wins; otherwise the first ``*/*+json`` or
    ``*json*`` media type is used.
    """
    media = content.get("application/json")
    if media is None:
        media = next((m for t, m in content.items() if "json" in t.lower()), None)
    if media is None:
        return None
    schema = media.get("schema")
    return schema if isinstance(schema, dict) else None


def _properties(schema: Schema) -> dict[str, Schema]:
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return {}
    return {name: prop for name, prop in properties.items() if isinstance(prop, dict)}


def _cell(text: str) -> str:
    """Collapse whitespace and escape pipes so *text* fits in one table cell."""
    return " ".join(text.split()).replace("|", "\\|")


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)
