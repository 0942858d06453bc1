"""Tests for mapiconv.schema.examples."""

from __future__ import annotations

from typing import Any

from mapiconv.schema.examples import (
    MAX_EXAMPLE_FIELDS,
    generate_example,
    has_content,
)


REF = "#/components/schemas/"


class TestPrecedence:
    """Explicit examples, refs, enums, arrays, objects, primitives."""

    def test_explicit_example_wins(self) -> None:
        schema = {"type": "string", "example": "claude", "enum": ["a"]}
        assert generate_example(schema, {}) == "claude"

    def test_explicit_falsy_example_is_kept(self) -> None:
        assert generate_example({"type": "integer", "example": 0}, {}) == 0

    def test_ref_follows_target(self) -> None:
        schemas = {"Role": {"type": "string", "enum": ["user", "assistant"]}}
        assert generate_example({"$ref": REF + "Role"}, schemas) == "user"

    def test_unresolvable_ref_is_empty_object(self) -> None:
        assert generate_example({"$ref": REF + "Missing"}, {}) == {}

    def test_enum_uses_first_value(self) -> None:
        assert generate_example({"type": "string", "enum": ["b", "a"]}, {}) == "b"

    def test_array_wraps_single_item(self) -> None:
        assert generate_example({"type": "array", "items": {"type": "boolean"}}, {}) == [True]

    def test_non_dict_schema_is_none(self) -> None:
        assert generate_example(None, {}) is None


class TestPrimitives:
    def test_format_aware_strings(self) -> None:
        assert generate_example({"type": "string", "format": "date-time"}, {}) == "2024-01-15T12:00:00Z"
        assert generate_example({"type": "string", "format": "email"}, {}) == "user@example.com"
        assert generate_example({"type": "string", "format": "uri"}, {}) == "https://example.com"
        assert generate_example({"type": "string", "format": "date"}, {}) == "2024-01-15"

    def test_name_tuned_strings(self) -> None:
        assert generate_example({"type": "string"}, {}, prop_name="role") == "user"
        assert generate_example({"type": "string"}, {}, prop_name="content") == "Hello, how are you?"
        assert generate_example({"type": "string"}, {}, prop_name="ID") == "msg_01XYZ"

    def test_plain_string(self) -> None:
        assert generate_example({"type": "string"}, {}, prop_name="title") == "string"

    def test_integer_minimum_first(self) -> None:
        schema = {"type": "integer", "minimum": 5}
        assert generate_example(schema, {}, prop_name="max_tokens") == 5

    def test_integer_token_names(self) -> None:
        assert generate_example({"type": "integer"}, {}, prop_name="max_tokens") == 1024
        assert generate_example({"type": "integer"}, {}, prop_name="count") == 100

    def test_number(self) -> None:
        assert generate_example({"type": "number"}, {}, prop_name="temperature") == 0.7
        assert generate_example({"type": "number"}, {}, prop_name="score") == 1.0
        assert generate_example({"type": "number", "minimum": 0}, {}, prop_name="temperature") == 0

    def test_boolean(self) -> None:
        assert generate_example({"type": "boolean"}, {}) is True

    def test_unknown_type_is_none(self) -> None:
        assert generate_example({}, {}) is None


class TestObjects:
    def test_required_then_optional_in_declaration_order(self) -> None:
        schema = {
            "type": "object",
            "required": ["b"],
            "properties": {"a": {"type": "boolean"}, "b": {"type": "integer"}},
        }
        result = generate_example(schema, {})
        assert list(result) == ["a", "b"]
        assert result == {"a": True, "b": 100}

    def test_object_without_properties_is_empty(self) -> None:
        assert generate_example({"type": "object"}, {}) == {}

    def test_field_cap_keeps_required_fields(self) -> None:
        """3 required + 10 optional fields yield at most five fields, all required ones present."""
        properties: dict[str, Any] = {f"opt{i}": {"type": "string"} for i in range(10)}
        properties.update({f"req{i}": {"type": "string"} for i in range(3)})
        schema = {
            "type": "object",
            "required": ["req0", "req1", "req2"],
            "properties": properties,
        }

        result = generate_example(schema, {})

        assert len(result) <= MAX_EXAMPLE_FIELDS
        assert {"req0", "req1", "req2"} <= set(result)
        assert len(result) == 5

    def test_more_required_than_cap_keeps_all_required(self) -> None:
        required = [f"r{i}" for i in range(7)]
        schema = {
            "type": "object",
            "required": required,
            "properties": {name: {"type": "boolean"} for name in [*required, "extra"]},
        }
        result = generate_example(schema, {})
        assert list(result) == required


class TestDepthBound:
    def test_self_reference_terminates(self) -> None:
        schemas = {
            "TreeNode": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "children": {"type": "array", "items": {"$ref": REF + "TreeNode"}},
                },
            }
        }
        result = generate_example({"$ref": REF + "TreeNode"}, schemas)
        assert result == {"name": "example", "children": []}

    def test_mutual_reference_terminates(self) -> None:
        schemas = {
            "A": {"type": "object", "required": ["b"], "properties": {"b": {"$ref": REF + "B"}}},
            "B": {"type": "object", "required": ["a"], "properties": {"a": {"$ref": REF + "A"}}},
        }
        result = generate_example({"$ref": REF + "A"}, schemas)
        assert isinstance(result, dict)

    def test_beyond_max_depth_is_none(self) -> None:
        assert generate_example({"type": "string"}, {}, depth=4) is None


class TestHasContent:
    def test_empty_values(self) -> None:
        assert not has_content(None)
        assert not has_content({})
        assert not has_content([])
        assert not has_content("")

    def test_non_empty_values(self) -> None:
        assert has_content({"a": 1})
        assert has_content([0])
        assert has_content("x")
        assert has_content(0)
        assert has_content(False)
