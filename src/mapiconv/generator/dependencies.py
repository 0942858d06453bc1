"""Work out which shared artifacts a capability needs loaded before it.

Two artifacts exist: ``auth`` (``common/auth.md``) and ``schemas/types``
(``common/schemas/types.md``). The rules differ per source format on purpose:

* **MAPI** -- shared types are needed only when the capability's raw source
  text mentions a name declared in the global-types block. Names are found
  with a plain pattern over the global-types text and matched as substrings,
  so ``Task`` also matches ``TaskList``. This is a best-effort heuristic, not
  reference tracking, and its false positives are part of the output.
* **OpenAPI** -- shared types are needed whenever the document defines any
  named schema at all, whether or not the operation references one.

Auth follows the same rule for both formats: an explicit per-capability
requirement decides; without one, any document-level scheme other than
``none`` applies.
"""

from __future__ import annotations

import re

from mapiconv.models import (
    AuthScheme,
    Capability,
    OpenApiOperation,
    ParsedMapiDocument,
    ParsedOpenApiDocument,
)

AUTH_DEPENDENCY = "auth"
TYPES_DEPENDENCY = "schemas/types"

_TYPE_DECLARATION_RE = re.compile(r"interface\s+(\w+)|type\s+(\w+)")


def declared_type_names(global_types: str) -> list[str]:
    """Return interface and type-alias names declared in *global_types*, in order."""
    return [iface or alias for iface, alias in _TYPE_DECLARATION_RE.findall(global_types)]


def mapi_requires_auth(capability: Capability, doc: ParsedMapiDocument) -> bool:
    """Return ``True`` if *capability* needs the ``auth`` artifact."""
    if capability.meta.auth is not None:
        return capability.meta.auth == "required"
    doc_auth = doc.meta.get("auth")
    return doc_auth not in (None, "", AuthScheme.NONE.value)


def openapi_requires_auth(operation: OpenApiOperation, doc: ParsedOpenApiDocument) -> bool:
    """Return ``True`` if *operation* needs the ``auth`` artifact.

    An operation-level ``security`` list overrides the document: non-empty
    means required, ``[]`` means public.
    """
    if operation.security is not None:
        return len(operation.security) > 0
    return doc.auth is not None and doc.auth.type != AuthScheme.NONE.value


def determine_mapi_dependencies(capability: Capability, doc: ParsedMapiDocument) -> list[str]:
    """Return the ordered shared-artifact names a MAPI capability depends on."""
    deps: list[str] = []

    if mapi_requires_auth(capability, doc):
        deps.append(AUTH_DEPENDENCY)

    if doc.global_types and capability.raw_content:
        for name in declared_type_names(doc.global_types):
            if name in capability.raw_content:
                deps.append(TYPES_DEPENDENCY)
                break

    return deps


def determine_openapi_dependencies(
    operation: OpenApiOperation,
    doc: ParsedOpenApiDocument,
) -> list[str]:
    """Return the ordered shared-artifact names an OpenAPI operation depends on."""
    deps: list[str] = []

    if openapi_requires_auth(operation, doc):
        deps.append(AUTH_DEPENDENCY)

    # Coarse on purpose: any named schema in the document counts.
    if doc.schemas:
        deps.append(TYPES_DEPENDENCY)

    return deps
