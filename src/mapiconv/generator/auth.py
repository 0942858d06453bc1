"""Render the shared ``common/auth.md`` document.

Both source formats funnel into one :class:`AuthDescriptor` and one
template (``templates/auth.md.j2``) with a branch per scheme:

* ``bearer`` -- the ``Authorization: Bearer {token}`` header snippet.
* ``api_key`` -- the header (or query parameter) carrying the key,
  ``X-API-Key`` when the source does not name one.
* ``oauth2`` -- the flow name (or the list of declared flows) and the
  default scopes.
* anything else -- a one-line note naming the scheme.

The templates describe where a credential goes; they never contain one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from mapiconv.generator.templating import render_template
from mapiconv.models import AuthScheme, OpenApiAuth


@dataclass(frozen=True)
class AuthDescriptor:
    """Format-neutral view of a document's auth scheme."""

    type: str
    header: Optional[str] = None
    location: Optional[str] = None
    flow: Optional[str] = None
    flows: tuple[str, ...] = ()
    scopes: tuple[str, ...] = ()
    docs_url: Optional[str] = None


def auth_from_mapi_meta(meta: dict[str, Any]) -> Optional[AuthDescriptor]:
    """Build a descriptor from MAPI document meta.

    Reads ``auth`` plus the optional ``auth_header``, ``auth_flow``,
    ``auth_scopes`` (a list or a single scope) and ``auth_docs_url`` keys.
    Returns ``None`` when ``auth`` is absent or ``none``.
    """
    auth = meta.get("auth")
    if auth in (None, "") or str(auth) == AuthScheme.NONE.value:
        return None

    scopes = meta.get("auth_scopes") or ()
    if not isinstance(scopes, (list, tuple)):
        scopes = (scopes,)

    return AuthDescriptor(
        type=str(auth),
        header=_optional_str(meta.get("auth_header")),
        flow=_optional_str(meta.get("auth_flow")),
        scopes=tuple(str(s) for s in scopes),
        docs_url=_optional_str(meta.get("auth_docs_url")),
    )


def auth_from_openapi(auth: Optional[OpenApiAuth]) -> Optional[AuthDescriptor]:
    """Build a descriptor from the OpenAPI document-level auth, or ``None``."""
    if auth is None or auth.type == AuthScheme.NONE.value:
        return None
    return AuthDescriptor(
        type=auth.type,
        header=auth.header if auth.type == AuthScheme.API_KEY.value else None,
        location=auth.location,
        flows=tuple(auth.flows or ()),
        scopes=tuple(auth.scopes),
    )


def render_auth(descriptor: AuthDescriptor) -> str:
    """Render ``auth.md`` for *descriptor*."""
    return render_template(
        "auth.md.j2",
        type=descriptor.type,
        header=descriptor.header,
        location=descriptor.location,
        flow=descriptor.flow,
        flows=descriptor.flows,
        scopes=descriptor.scopes,
        docs_url=descriptor.docs_url,
    )


def _optional_str(value: Any) -> Optional[str]:
    if value in (None, ""):
        return None
    return str(value)
