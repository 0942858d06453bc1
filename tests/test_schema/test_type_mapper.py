"""Tests for mapiconv.schema.type_mapper."""

from __future__ import annotations

from typing import Any

import pytest

from mapiconv.schema.type_mapper import (
    TypeDescription,
    describe_type,
    format_enum_value,
    ref_to_name,
    resolve_schema,
    schema_type_of,
)


SCHEMAS: dict[str, Any] = {
    "Role": {"type": "string", "enum": ["user", "assistant"]},
    "Pet": {"type": "object", "properties": {"name": {"type": "string"}}},
    "Node": {
        "type": "object",
        "properties": {"children": {"type": "array", "items": {"$ref": "#/components/schemas/Node"}}},
    },
}


class TestDescribeType:
    """describe_type() resolution order."""

    def test_missing_schema_is_string(self) -> None:
        assert describe_type(None, SCHEMAS) == TypeDescription(type="string")

    def test_untyped_schema_is_string(self) -> None:
        assert describe_type({}, SCHEMAS).type == "string"

    def test_ref_to_plain_schema_reports_name(self) -> None:
        result = describe_type({"$ref": "#/components/schemas/Pet"}, SCHEMAS)
        assert result == TypeDescription(type="Pet")

    def test_ref_to_missing_schema_still_reports_name(self) -> None:
        result = describe_type({"$ref": "#/components/schemas/Ghost"}, SCHEMAS)
        assert result.type == "Ghost"
        assert result.description is None

    def test_ref_to_enum_reports_values(self) -> None:
        result = describe_type({"$ref": "#/components/schemas/Role"}, SCHEMAS)
        assert result.type == "string"
        assert result.description == "One of: `user`, `assistant`"

    def test_inline_enum(self) -> None:
        result = describe_type({"type": "integer", "enum": [1, 2, 3]}, SCHEMAS)
        assert result.type == "integer"
        assert result.description == "One of: `1`, `2`, `3`"

    def test_enum_without_type_defaults_to_string(self) -> None:
        assert describe_type({"enum": ["a"]}, SCHEMAS).type == "string"

    def test_array_of_primitive(self) -> None:
        result = describe_type({"type": "array", "items": {"type": "integer"}}, SCHEMAS)
        assert result == TypeDescription(type="array of integer")

    def test_array_of_ref(self) -> None:
        result = describe_type({"type": "array", "items": {"$ref": "#/components/schemas/Pet"}}, SCHEMAS)
        assert result.type == "array of Pet"

    def test_array_propagates_enum_description(self) -> None:
        result = describe_type({"type": "array", "items": {"$ref": "#/components/schemas/Role"}}, SCHEMAS)
        assert result.type == "array of string"
        assert result.description == "One of: `user`, `assistant`"

    def test_nested_arrays(self) -> None:
        schema = {"type": "array", "items": {"type": "array", "items": {"type": "number"}}}
        assert describe_type(schema, SCHEMAS).type == "array of array of number"

    def test_object_explicit(self) -> None:
        assert describe_type({"type": "object"}, SCHEMAS).type == "object"

    def test_object_implied_by_properties(self) -> None:
        assert describe_type({"properties": {"a": {"type": "string"}}}, SCHEMAS).type == "object"

    @pytest.mark.parametrize("declared", ["string", "integer", "number", "boolean"])
    def test_primitive_types(self, declared: str) -> None:
        assert describe_type({"type": declared}, SCHEMAS).type == declared

    def test_openapi_31_type_array(self) -> None:
        assert describe_type({"type": ["string", "null"]}, SCHEMAS).type == "string"

    def test_self_reference_does_not_recurse(self) -> None:
        node = SCHEMAS["Node"]["properties"]["children"]
        assert describe_type(node, SCHEMAS).type == "array of Node"


class TestHelpers:
    def test_ref_to_name(self) -> None:
        assert ref_to_name("#/components/schemas/Pet") == "Pet"

    def test_resolve_schema_follows_one_hop(self) -> None:
        assert resolve_schema({"$ref": "#/components/schemas/Pet"}, SCHEMAS) is SCHEMAS["Pet"]

    def test_resolve_schema_keeps_unresolvable(self) -> None:
        schema = {"$ref": "#/components/schemas/Ghost"}
        assert resolve_schema(schema, SCHEMAS) is schema

    def test_schema_type_of_null_only(self) -> None:
        assert schema_type_of({"type": ["null"]}) is None

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, "null"), (True, "true"), (False, "false"), (3, "3"), ("x", "x")],
    )
    def test_format_enum_value(self, value: Any, expected: str) -> None:
        assert format_enum_value(value) == expected
