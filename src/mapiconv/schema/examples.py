"""Synthesize example payloads from OpenAPI schemas.

:func:`generate_example` walks a schema and produces a plausible JSON value
for the *Example* section of a capability document. The walk is bounded by
:data:`MAX_EXAMPLE_DEPTH`: every ``$ref`` hop, array item, and object property
increments the depth, and anything deeper yields ``None``. That ceiling is what
keeps self-referential and mutually-referential named schemas finite.

Precedence at each node:

1. an explicit ``example`` value,
2. a ``$ref`` (one hop into the named-schema table, depth + 1),
3. the first ``enum`` candidate,
4. an ``array`` -- one item, or an empty list when the item yields nothing,
5. an ``object`` -- every required field, then optional fields until
   :data:`MAX_EXAMPLE_FIELDS` fields are present,
6. a primitive literal (format-aware, then tuned to field names common in
   conversational LLM APIs, then a default per type).
"""

from __future__ import annotations

from typing import Any, Optional

from mapiconv.models import Schema
from mapiconv.schema.type_mapper import ref_to_name, schema_type_of

MAX_EXAMPLE_DEPTH = 3
"""Deepest level (from the synthesis root) at which a value is still produced."""

MAX_EXAMPLE_FIELDS = 5
"""Optional object fields are admitted only while fewer than this many are present."""

_FORMAT_EXAMPLES: dict[str, str] = {
    "date-time": "2024-01-15T12:00:00Z",
    "date": "2024-01-15",
    "email": "user@example.com",
    "uri": "https://example.com",
}

_STRING_NAME_EXAMPLES: dict[str, str] = {
    "role": "user",
    "content": "Hello, how are you?",
    "text": "Hello, how are you?",
    "id": "msg_01XYZ",
    "name": "example",
    "description": "A sample description",
}


def generate_example(
    schema: Optional[Schema],
    schemas: dict[str, Schema],
    depth: int = 0,
    prop_name: Optional[str] = None,
) -> Any:
    """Return an example value for *schema*, or ``None`` when nothing can be produced.

    Args:
        schema: The schema node to synthesize from.
        schemas: The named-schema table used to dereference ``$ref``.
        depth: Current depth below the synthesis root.
        prop_name: Name of the property (or referenced schema) being
            synthesized; drives the name-based primitive heuristics.

    Returns:
        A JSON-compatible value. Unresolvable references yield ``{}``.
    """
    if depth > MAX_EXAMPLE_DEPTH or not isinstance(schema, dict):
        return None

    if "example" in schema:
        return schema["example"]

    ref = schema.get("$ref")
    if isinstance(ref, str):
        ref_name = ref_to_name(ref)
        target = schemas.get(ref_name)
        if isinstance(target, dict):
            return generate_example(target, schemas, depth + 1, ref_name)
        return {}

    enum_values = schema.get("enum")
    if isinstance(enum_values, list) and enum_values:
        return enum_values[0]

    schema_type = schema_type_of(schema)

    if schema_type == "array" and isinstance(schema.get("items"), dict):
        item = generate_example(schema["items"], schemas, depth + 1)
        return [item] if item is not None else []

    if schema_type == "object" or "properties" in schema:
        return _object_example(schema, schemas, depth)

    return _primitive_example(schema, schema_type, prop_name)


def has_content(value: Any) -> bool:
    """Return ``True`` if *value* is worth rendering as an example."""
    if value is None:
        return False
    if isinstance(value, (dict, list, str)):
        return len(value) > 0
    return True


def _object_example(schema: Schema, schemas: dict[str, Schema], depth: int) -> dict[str, Any]:
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return {}

    required = set(schema.get("required") or [])
    values: dict[str, Any] = {}

    # Required fields first, then optional ones while under the cap.
    for name, prop in properties.items():
        if name in required:
            value = generate_example(prop, schemas, depth + 1, name)
            if value is not None:
                values[name] = value
    for name, prop in properties.items():
        if len(values) >= MAX_EXAMPLE_FIELDS:
            break
        if name not in required:
            value = generate_example(prop, schemas, depth + 1, name)
            if value is not None:
                values[name] = value

    # Emit in declaration order.
    return {name: values[name] for name in properties if name in values}


def _primitive_example(schema: Schema, schema_type: Optional[str], prop_name: Optional[str]) -> Any:
    lower = prop_name.lower() if prop_name else ""

    if schema_type == "string":
        fmt = schema.get("format")
        if fmt in _FORMAT_EXAMPLES:
            return _FORMAT_EXAMPLES[fmt]
        if lower in _STRING_NAME_EXAMPLES:
            return _STRING_NAME_EXAMPLES[lower]
        return "string"

    if schema_type == "integer":
        if schema.get("minimum") is not None:
            return schema["minimum"]
        if "token" in lower:
            return 1024
        return 100

    if schema_type == "number":
        if schema.get("minimum") is not None:
            return schema["minimum"]
        if lower == "temperature":
            return 0.7
        return 1.0

    if schema_type == "boolean":
        return True

    return None
