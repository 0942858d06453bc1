"""Canonical Pydantic models shared across all mapiconv modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**MAPI intermediate model** -- produced by :func:`~mapiconv.parser.mapi.parse_mapi`:
    :class:`CapabilityMeta`, :class:`Capability`, and
    :class:`ParsedMapiDocument`.

**OpenAPI intermediate model** -- produced by
:func:`~mapiconv.parser.openapi.parse_openapi`:
    :class:`OpenApiParameter`, :class:`OpenApiRequestBody`,
    :class:`OpenApiResponse`, :class:`OpenApiOperation`,
    :class:`OpenApiAuth`, and :class:`ParsedOpenApiDocument`.

**Generator output** -- produced by :mod:`mapiconv.generator.skill`:
    :class:`CapabilityIndexEntry` and :class:`SkillOutput`.

**Configuration** -- resolved by :mod:`mapiconv.config`:
    :class:`IntentConfig` and :class:`ConvertConfig`.

Intermediate models are frozen: a parsed document is created once per
conversion run and only read afterwards. Schema nodes are deliberately kept
as plain ``dict`` objects (the JSON shape of an OpenAPI *Schema Object*) and
the named-schema table is a flat ``name -> schema`` mapping, so that
reference cycles never turn into object cycles.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


Schema = dict[str, Any]
"""A single OpenAPI schema node, kept in its raw JSON shape."""


class AuthScheme(str, enum.Enum):
    """Auth-scheme tags recognised in ``meta.auth``.

    Values outside this set are not rejected; they are carried through
    verbatim and rendered with the generic auth template.
    """

    BEARER = "bearer"
    API_KEY = "api_key"
    OAUTH2 = "oauth2"
    NONE = "none"


class SourceFormat(str, enum.Enum):
    """Source document formats understood by the loader."""

    AUTO = "auto"
    MAPI = "mapi"
    OPENAPI = "openapi"


# --- MAPI intermediate model ---


class CapabilityMeta(BaseModel):
    """The ``~~~meta`` block of a single MAPI capability.

    ``transport`` follows a closed vocabulary: ``HTTP <METHOD> <path>``
    (optionally suffixed ``(SSE)``), ``WS <path>``,
    ``WEBHOOK POST {callback_url}``, or ``INTERNAL``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    transport: str = "INTERNAL"
    auth: Optional[str] = Field(
        default=None, description="Per-capability override: required, optional, none"
    )
    idempotent: Optional[bool] = None
    deprecated: bool = False


class Capability(BaseModel):
    """One documented, invokable operation parsed from a MAPI document.

    Every optional text field is ``None`` when the section is missing or
    whitespace-only, so renderers can tell "nothing to render" apart from
    real content.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    meta: CapabilityMeta
    intention: Optional[str] = None
    auth_intention: Optional[str] = None
    input: Optional[str] = None
    output: Optional[str] = None
    logic_constraints: Optional[str] = None
    errors: Optional[str] = None
    example: Optional[str] = None
    raw_content: str = Field(
        default="", description="Original source fragment, used for text heuristics"
    )


class ParsedMapiDocument(BaseModel):
    """Root of the MAPI intermediate model."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: Optional[str] = None
    meta: dict[str, Any] = Field(default_factory=dict)
    global_types: Optional[str] = None
    capabilities: list[Capability] = Field(default_factory=list)


# --- OpenAPI intermediate model ---


class OpenApiParameter(BaseModel):
    """A single parameter of an OpenAPI operation (path, query, header, or cookie)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    location: str = Field(default="query", alias="in")
    required: bool = False
    description: Optional[str] = None
    schema_: Optional[Schema] = Field(default=None, alias="schema")


class OpenApiRequestBody(BaseModel):
    """An operation's ``requestBody``: media-type keyed content plus the required flag."""

    model_config = ConfigDict(frozen=True)

    required: bool = False
    description: Optional[str] = None
    content: dict[str, dict[str, Any]] = Field(default_factory=dict)


class OpenApiResponse(BaseModel):
    """A single response entry keyed by status code on :class:`OpenApiOperation`."""

    model_config = ConfigDict(frozen=True)

    description: Optional[str] = None
    content: dict[str, dict[str, Any]] = Field(default_factory=dict)


class OpenApiOperation(BaseModel):
    """One ``method x path`` combination taken from an OpenAPI ``paths`` object.

    ``security`` is ``None`` when the operation does not declare its own
    requirements (the document-level scheme applies) and ``[]`` when it
    explicitly opts out of authentication.
    """

    model_config = ConfigDict(frozen=True)

    operation_id: str
    method: str
    path: str
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[OpenApiParameter] = Field(default_factory=list)
    request_body: Optional[OpenApiRequestBody] = None
    responses: dict[str, OpenApiResponse] = Field(default_factory=dict)
    security: Optional[list[dict[str, list[str]]]] = None
    deprecated: bool = False


class OpenApiAuth(BaseModel):
    """Document-level auth descriptor derived from the global security scheme.

    ``type`` is one of the :class:`AuthScheme` tags when the OpenAPI scheme
    maps onto one (``http``/``bearer`` -> ``bearer``, ``apiKey`` ->
    ``api_key``, ``oauth2`` -> ``oauth2``); other schemes pass through as
    ``basic``, ``openid_connect``, or their raw type.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    header: Optional[str] = None
    location: Optional[str] = None
    flows: Optional[dict[str, Any]] = None
    scopes: list[str] = Field(default_factory=list)


class ParsedOpenApiDocument(BaseModel):
    """Root of the OpenAPI intermediate model."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: Optional[str] = None
    version: Optional[str] = None
    base_url: Optional[str] = None
    auth: Optional[OpenApiAuth] = None
    schemas: dict[str, Schema] = Field(default_factory=dict)
    operations: list[OpenApiOperation] = Field(default_factory=list)
    openapi_version: str = "3.0.0"


# --- Generator output ---


class CapabilityIndexEntry(BaseModel):
    """One row of the ``Skill.md`` capability index."""

    id: str
    intent_keywords: list[str] = Field(default_factory=list)
    file_path: str
    dependencies: list[str] = Field(default_factory=list)


class SkillOutput(BaseModel):
    """The artifact set returned by the Skill generator.

    ``common`` and ``capabilities`` map paths relative to ``common/`` and
    ``capabilities/`` onto document bodies. The caller decides how to
    persist them (see :func:`mapiconv.writer.write_skill`).
    """

    skill_md: str
    common: dict[str, str] = Field(default_factory=dict)
    capabilities: dict[str, str] = Field(default_factory=dict)
    index: list[CapabilityIndexEntry] = Field(default_factory=list)


# --- Configuration ---


class IntentConfig(BaseModel):
    """Intent-keyword provider settings stored under ``intent`` in :class:`ConvertConfig`."""

    provider: str = Field(
        default="heuristic", description="Keyword source: heuristic or anthropic"
    )
    model: Optional[str] = Field(
        default=None, description="Model id for LLM-backed providers"
    )
    api_key_source: str = Field(
        default="env:ANTHROPIC_API_KEY",
        description="Credential source: env:VAR or file:/path",
    )
    max_keywords: int = Field(default=8, ge=1)
    timeout: float = Field(default=30.0, gt=0)


class ConvertConfig(BaseModel):
    """Effective conversion settings.

    Loaded from the project-local ``./mapiconv.json`` and layered with
    environment variables and CLI flags by
    :func:`~mapiconv.config.resolve_config`.
    """

    api_name: Optional[str] = None
    intent: IntentConfig = Field(default_factory=IntentConfig)
