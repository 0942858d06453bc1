"""Inline ``$ref`` pointers in OpenAPI documents, except schema references.

OpenAPI documents commonly use ``$ref`` pointers for shared parameters,
request bodies, and responses (``#/components/parameters/Limit``). This
module performs a recursive deep-copy traversal of the document, replacing
those pointers with the referenced objects so the operation parser sees
plain dicts.

References into ``#/components/schemas/`` are **kept**: the Schema Type
Mapper resolves them lazily, one hop at a time, against the flat
named-schema table. Inlining them here would turn recursive schemas into
infinitely deep trees.

Circular references are detected via a ``seen`` set and left unresolved.
Unresolvable and external references degrade to an empty mapping and are
logged, never raised: a dangling pointer in one operation must not abort
the whole conversion.

The single public function is :func:`resolve_refs`.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"
"""References starting with this prefix are left in place."""

_MISSING = object()


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Inline every non-schema ``$ref`` pointer in *spec*.

    Args:
        spec: The decoded OpenAPI document.

    Returns:
        A **new** dictionary (deep copy) with parameter, request-body,
        response, and other component references replaced by their targets.

    Example::

        raw = load_openapi("petstore.yaml")
        resolved = resolve_refs(raw)
        # resolved["paths"]["/pets"]["get"]["parameters"][0] is now the
        # inlined parameter object instead of a $ref pointer.
    """
    root = copy.deepcopy(spec)
    return _deep_resolve(root, root, seen=None)


def _resolve_ref(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single internal ``$ref`` string against the root document.

    Handles RFC 6901 JSON Pointer escaping (``~0`` for ``~``, ``~1`` for
    ``/``).

    Returns:
        The value found at the referenced path, or ``_MISSING``.
    """
    if not ref.startswith("#/"):
        logger.warning("External $ref not supported, treating as empty: %s", ref)
        return _MISSING

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                logger.warning("Cannot resolve $ref '%s': key '%s' not found", ref, segment)
                return _MISSING
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                logger.warning("Cannot resolve $ref '%s': invalid index '%s'", ref, segment)
                return _MISSING
        else:
            logger.warning(
                "Cannot resolve $ref '%s': cannot navigate into %s",
                ref,
                type(current).__name__,
            )
            return _MISSING

    return current


def _deep_resolve(obj: Any, root: dict[str, Any], seen: set[str] | None = None) -> Any:
    """Recursively inline non-schema ``$ref`` pointers within *obj*.

    A **copy** of ``seen`` is created at each branch so that parallel sibling
    references do not interfere with each other.

    Args:
        obj: The current node -- a dict (potentially a ``$ref``), a list,
            or a scalar value.
        root: The root document, used as the lookup target.
        seen: ``$ref`` strings currently being resolved on this call stack.

    Returns:
        The resolved object. Dicts and lists are new objects; scalars are
        returned as-is.
    """
    if seen is None:
        seen = set()

    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str) and not ref.startswith(SCHEMA_REF_PREFIX):
            if ref in seen:
                return obj
            resolved = _resolve_ref(ref, root)
            if resolved is _MISSING:
                return {}
            return _deep_resolve(resolved, root, seen | {ref})

        return {key: _deep_resolve(value, root, seen) for key, value in obj.items()}

    if isinstance(obj, list):
        return [_deep_resolve(item, root, seen) for item in obj]

    return obj
