"""Resolve an OpenAPI schema node to a short display type.

Used by the capability renderers to fill the *Type* column of field tables.
Resolution is deliberately shallow: a ``$ref`` is looked up one level in the
named-schema table (only to check whether the target is an enumeration), and
arrays descend exactly one schema level per step. Reference cycles among named
schemas are therefore never traversed here.

Resolution order:

1. ``$ref`` -- an enum target reports its primitive kind plus the candidate
   values; any other target reports the referenced name.
2. ``enum`` -- primitive kind plus the candidate values.
3. ``array`` -- ``array of <item type>``, propagating the item's elaboration.
4. ``object`` (explicit or implied by ``properties``) -- ``object``.
5. Anything else -- the declared primitive type, ``string`` when untyped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from mapiconv.models import Schema


@dataclass(frozen=True)
class TypeDescription:
    """Display type for a schema plus an optional human-readable elaboration."""

    type: str
    description: Optional[str] = None


def describe_type(
    schema: Optional[Schema],
    schemas: dict[str, Schema],
) -> TypeDescription:
    """Return the display type of *schema*.

    Args:
        schema: The schema node, or ``None`` when the caller has none.
        schemas: The named-schema table (``components.schemas``).

    Returns:
        A :class:`TypeDescription`. ``description`` is only set for
        enumerations, e.g. ``"One of: `user`, `assistant`"``.

    Example::

        >>> describe_type({"type": "array", "items": {"type": "integer"}}, {})
        TypeDescription(type='array of integer', description=None)
    """
    if not isinstance(schema, dict):
        return TypeDescription(type="string")

    ref = schema.get("$ref")
    if isinstance(ref, str):
        ref_name = ref_to_name(ref) or "object"
        target = schemas.get(ref_name)
        if isinstance(target, dict) and _is_enum(target):
            return _enum_description(target)
        return TypeDescription(type=ref_name)

    if _is_enum(schema):
        return _enum_description(schema)

    schema_type = schema_type_of(schema)
    if schema_type == "array" and isinstance(schema.get("items"), dict):
        item = describe_type(schema["items"], schemas)
        return TypeDescription(type=f"array of {item.type}", description=item.description)

    if schema_type == "object" or "properties" in schema:
        return TypeDescription(type="object")

    return TypeDescription(type=schema_type or "string")


def ref_to_name(ref: str) -> str:
    """Return the last path segment of a ``$ref`` string (``#/components/schemas/Pet`` -> ``Pet``)."""
    return ref.rsplit("/", 1)[-1]


def resolve_schema(schema: Schema, schemas: dict[str, Schema]) -> Schema:
    """Dereference *schema* one level, returning it unchanged if it is not a resolvable ``$ref``."""
    ref = schema.get("$ref")
    if isinstance(ref, str):
        target = schemas.get(ref_to_name(ref))
        if isinstance(target, dict):
            return target
    return schema


def schema_type_of(schema: Schema) -> Optional[str]:
    """Return the declared ``type`` of *schema*.

    Handles OpenAPI 3.1 type arrays (e.g. ``["string", "null"]``) by returning
    the first non-null entry.
    """
    type_value = schema.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else None
    if type_value is None:
        return None
    return str(type_value)


def format_enum_value(value: Any) -> str:
    """Render an enum candidate the way it would appear in JSON, minus string quotes."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_enum(schema: Schema) -> bool:
    return isinstance(schema.get("enum"), list)


def _enum_description(schema: Schema) -> TypeDescription:
    values = ", ".join(f"`{format_enum_value(v)}`" for v in schema["enum"])
    return TypeDescription(
        type=schema_type_of(schema) or "string",
        description=f"One of: {values}",
    )
