"""Render OpenAPI schemas as TypeScript declarations, and read simple ones back.

MAPI documents describe inputs, outputs, and shared types as TypeScript
snippets inside fenced code blocks. This module bridges that notation and
OpenAPI schema dicts:

* :func:`schema_to_typescript` renders a schema as a TypeScript type
  expression, or as a full ``interface`` when given a name and an object
  schema with properties.
* :func:`parse_typescript_types` is a best-effort reverse pass that extracts
  ``interface`` and ``type`` declarations into schema dicts. It understands
  the subset this module emits (primitive types, arrays, literal unions,
  references, inline objects, ``Record<string, T>``) and maps anything else
  to an untyped schema rather than failing.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from mapiconv.models import Schema
from mapiconv.schema.type_mapper import format_enum_value, ref_to_name, schema_type_of

MAX_INLINE_DEPTH = 5
"""Nested inline object literals deeper than this render as ``object``."""

_PRIMITIVES: dict[str, str] = {
    "string": "string",
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
    "null": "null",
}

_DECLARATION_RE = re.compile(
    r"\b(?:export\s+)?(?:"
    r"(?P<interface>interface)\s+(?P<iname>[A-Za-z_]\w*)[^{;]*\{"
    r"|(?P<alias>type)\s+(?P<tname>[A-Za-z_]\w*)\s*(?:<[^>]*>)?\s*="
    r")",
)
_FIELD_RE = re.compile(
    r"^([A-Za-z_$][\w$]*|'[^']*'|\"[^\"]*\")(\?)?\s*:\s*(.+)$", re.DOTALL
)


# ------------------------------------------------------------------ #
# Schema -> TypeScript
# ------------------------------------------------------------------ #


def schema_to_typescript(
    schema: Optional[Schema],
    name: str,
    schemas: dict[str, Schema],
    indent: str = "",
    _depth: int = 0,
) -> str:
    """Render *schema* as TypeScript.

    When *name* is non-empty and the schema is an object with properties,
    the result is an ``interface <name> { ... }`` declaration. Otherwise it is
    a type expression suitable for the right-hand side of a ``type`` alias or
    a field annotation.

    Args:
        schema: Schema node to render.
        name: Interface name, or ``""`` for an inline expression.
        schemas: Named-schema table (used only to name ``$ref`` targets).
        indent: Prefix applied to every line of a multi-line rendering.

    Returns:
        The TypeScript source text.
    """
    if not isinstance(schema, dict):
        return "unknown"

    ref = schema.get("$ref")
    if isinstance(ref, str):
        return ref_to_name(ref) or "unknown"

    enum_values = schema.get("enum")
    if isinstance(enum_values, list) and enum_values:
        return " | ".join(_literal(v) for v in enum_values)

    for key, joiner in (("allOf", " & "), ("oneOf", " | "), ("anyOf", " | ")):
        members = schema.get(key)
        if isinstance(members, list) and members:
            parts = [
                _wrap(schema_to_typescript(m, "", schemas, indent, _depth + 1))
                for m in members
            ]
            return joiner.join(parts)

    schema_type = schema_type_of(schema)
    nullable = schema.get("nullable") is True or (
        isinstance(schema.get("type"), list) and "null" in schema["type"]
    )

    if schema_type == "array":
        item = schema_to_typescript(schema.get("items"), "", schemas, indent, _depth + 1)
        rendered = f"{_wrap(item)}[]"
    elif schema_type == "object" or "properties" in schema:
        properties = schema.get("properties")
        if isinstance(properties, dict) and properties:
            if name:
                return _interface(name, schema, schemas, indent)
            if _depth >= MAX_INLINE_DEPTH:
                return "object"
            rendered = _inline_object(schema, schemas, indent, _depth)
        else:
            extra = schema.get("additionalProperties")
            if isinstance(extra, dict):
                value = schema_to_typescript(extra, "", schemas, indent, _depth + 1)
                rendered = f"Record<string, {value}>"
            else:
                rendered = "Record<string, unknown>"
    elif schema_type in _PRIMITIVES:
        rendered = _PRIMITIVES[schema_type]
    else:
        rendered = "unknown"

    if nullable and rendered != "unknown":
        return f"{rendered} | null"
    return rendered


def render_type_declarations(schemas: dict[str, Schema]) -> list[str]:
    """Render every named schema as a declaration, each followed by a blank line.

    Object schemas become interfaces; everything else becomes
    ``type Name = <expression>;``.
    """
    lines: list[str] = []
    for name, schema in schemas.items():
        rendered = schema_to_typescript(schema, name, schemas)
        if rendered.startswith("interface"):
            lines.append(rendered)
        else:
            lines.append(f"type {name} = {rendered};")
        lines.append("")
    return lines


def _interface(name: str, schema: Schema, schemas: dict[str, Schema], indent: str) -> str:
    lines = [f"interface {name} {{"]
    lines.extend(_field_lines(schema, schemas, indent + "  ", 0))
    lines.append(f"{indent}}}")
    return "\n".join(lines)


def _inline_object(schema: Schema, schemas: dict[str, Schema], indent: str, depth: int) -> str:
    lines = ["{"]
    lines.extend(_field_lines(schema, schemas, indent + "  ", depth + 1))
    lines.append(f"{indent}}}")
    return "\n".join(lines)


def _field_lines(
    schema: Schema,
    schemas: dict[str, Schema],
    indent: str,
    depth: int,
) -> list[str]:
    required = set(schema.get("required") or [])
    lines: list[str] = []
    for prop_name, prop in schema.get("properties", {}).items():
        optional = "" if prop_name in required else "?"
        ts_type = schema_to_typescript(prop, "", schemas, indent, depth + 1)
        key = prop_name if re.fullmatch(r"[A-Za-z_$][\w$]*", prop_name) else f"'{prop_name}'"
        line = f"{indent}{key}{optional}: {ts_type};"
        description = prop.get("description") if isinstance(prop, dict) else None
        if description:
            line += f"  // {_one_line(description)}"
        lines.append(line)
    return lines


def _literal(value: Any) -> str:
    if isinstance(value, str):
        return "'" + value.replace("'", "\\'") + "'"
    return format_enum_value(value)


def _wrap(expression: str) -> str:
    if (" | " in expression or " & " in expression) and not expression.startswith("{"):
        return f"({expression})"
    return expression


def _one_line(text: str) -> str:
    return " ".join(text.split())


# ------------------------------------------------------------------ #
# TypeScript -> Schema
# ------------------------------------------------------------------ #


def parse_typescript_types(text: Optional[str]) -> dict[str, Schema]:
    """Extract ``interface`` and ``type`` declarations from *text* as schemas.

    References to names declared in the same text become ``$ref`` pointers
    into ``#/components/schemas/``. Unknown identifiers become untyped
    schemas.

    Args:
        text: TypeScript source, typically the contents of a fenced block.

    Returns:
        A mapping of declared name to schema, in declaration order.
    """
    if not text:
        return {}

    declarations: list[tuple[str, str, str]] = []
    pos = 0
    while True:
        match = _DECLARATION_RE.search(text, pos)
        if match is None:
            break
        if match.group("interface"):
            brace = match.end() - 1
            end = _matching_brace(text, brace)
            declarations.append(("interface", match.group("iname"), text[brace + 1:end]))
        else:
            end = _statement_end(text, match.end())
            declarations.append(("type", match.group("tname"), text[match.end():end].strip()))
        pos = end + 1

    known = {name for _, name, _ in declarations}
    result: dict[str, Schema] = {}
    for kind, name, body in declarations:
        if kind == "interface":
            result[name] = _object_schema(body, known)
        else:
            result[name] = type_expression_to_schema(body, known)
    return result


def parse_interface_fields(text: Optional[str], known: frozenset[str] | set[str] = frozenset()) -> Schema:
    """Return an object schema for the first interface (or bare ``{...}`` body) in *text*.

    Used for capability *Input* / *Output* blocks, which usually hold a single
    request or response interface.
    """
    if not text:
        return {"type": "object"}
    brace = text.find("{")
    if brace < 0:
        return type_expression_to_schema(text.strip().rstrip(";"), known)
    end = _matching_brace(text, brace)
    return _object_schema(text[brace + 1:end], known)


def type_expression_to_schema(expression: str, known: frozenset[str] | set[str] = frozenset()) -> Schema:
    """Convert one TypeScript type expression into a schema dict."""
    expr = expression.strip().rstrip(";").strip()
    if not expr:
        return {}

    if expr.startswith("{") and _matching_brace(expr, 0) == len(expr) - 1:
        return _object_schema(expr[1:-1], known)

    members = _split_top_level(expr, "|")
    if len(members) > 1:
        non_null = [m for m in members if m != "null"]
        literals = [_parse_literal(m) for m in non_null]
        if len(non_null) == 1 and literals[0] is _NOT_LITERAL:
            schema = dict(type_expression_to_schema(non_null[0], known))
        elif all(lit is not _NOT_LITERAL for lit in literals):
            schema: Schema = {"enum": literals}
            if all(isinstance(lit, str) for lit in literals):
                schema["type"] = "string"
        else:
            schema = {"oneOf": [type_expression_to_schema(m, known) for m in non_null]}
        if len(non_null) < len(members):
            schema["nullable"] = True
        return schema

    parts = _split_top_level(expr, "&")
    if len(parts) > 1:
        return {"allOf": [type_expression_to_schema(p, known) for p in parts]}

    if expr.startswith("(") and expr.endswith(")"):
        return type_expression_to_schema(expr[1:-1], known)

    if expr.endswith("[]"):
        return {"type": "array", "items": type_expression_to_schema(expr[:-2], known)}

    generic = re.fullmatch(r"(Array|Record)<(.+)>", expr)
    if generic:
        args = _split_top_level(generic.group(2), ",")
        if generic.group(1) == "Array":
            return {"type": "array", "items": type_expression_to_schema(args[0], known)}
        value = args[-1] if len(args) > 1 else "unknown"
        value_schema = type_expression_to_schema(value, known)
        schema = {"type": "object"}
        if value_schema:
            schema["additionalProperties"] = value_schema
        return schema

    literal = _parse_literal(expr)
    if literal is not _NOT_LITERAL:
        return {"enum": [literal]}

    if expr in ("string", "boolean", "number"):
        return {"type": expr}
    if expr in ("integer", "int"):
        return {"type": "integer"}
    if expr in ("object", "Object"):
        return {"type": "object"}
    if expr in ("Date",):
        return {"type": "string", "format": "date-time"}
    if expr in known:
        return {"$ref": f"#/components/schemas/{expr}"}
    return {}


def _object_schema(body: str, known: frozenset[str] | set[str]) -> Schema:
    properties: dict[str, Schema] = {}
    required: list[str] = []

    for member in _split_members(body):
        text, comment = _strip_comment(member)
        field = _FIELD_RE.match(text.strip())
        if field is None:
            continue
        name = field.group(1).strip("'\"")
        optional = field.group(2) == "?"
        prop = type_expression_to_schema(field.group(3), known)
        if comment:
            prop = {**prop, "description": comment}
        properties[name] = prop
        if not optional:
            required.append(name)

    schema: Schema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _split_members(body: str) -> list[str]:
    """Split an object body into member declarations, keeping trailing ``//`` comments attached."""
    members: list[str] = []
    current: list[str] = []
    depth = 0
    same_line = False
    i = 0
    while i < len(body):
        ch = body[i]
        if body.startswith("//", i):
            newline = body.find("\n", i)
            newline = len(body) if newline < 0 else newline
            comment = body[i:newline]
            if "".join(current).strip():
                current.append(comment)
            elif depth == 0 and same_line and members:
                members[-1] += " " + comment
            i = newline
            continue
        if ch in "{<([":
            depth += 1
        elif ch in "}>)]":
            depth -= 1
        if depth == 0 and ch in ";,\n":
            if "".join(current).strip():
                members.append("".join(current))
            current = []
            same_line = ch != "\n"
        else:
            current.append(ch)
        i += 1
    if "".join(current).strip():
        members.append("".join(current))
    return members


def _strip_comment(member: str) -> tuple[str, Optional[str]]:
    depth = 0
    for i, ch in enumerate(member):
        if ch in "{<([":
            depth += 1
        elif ch in "}>)]":
            depth -= 1
        elif depth == 0 and member.startswith("//", i):
            return member[:i], member[i + 2:].strip() or None
    return member, None


def _split_top_level(expr: str, separator: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    quote: Optional[str] = None
    start = 0
    for i, ch in enumerate(expr):
        if quote:
            if ch == quote:
                quote = None
            continue
        if ch in "'\"":
            quote = ch
        elif ch in "{<([":
            depth += 1
        elif ch in "}>)]":
            depth -= 1
        elif ch == separator and depth == 0:
            parts.append(expr[start:i].strip())
            start = i + 1
    parts.append(expr[start:].strip())
    return [p for p in parts if p]


def _matching_brace(text: str, open_index: int) -> int:
    depth = 0
    for i in range(open_index, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return len(text) - 1


def _statement_end(text: str, start: int) -> int:
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch in "{<([":
            depth += 1
        elif ch in "}>)]":
            depth -= 1
        elif ch == ";" and depth == 0:
            return i
        elif ch == "\n" and depth == 0 and _DECLARATION_RE.match(text, i + 1):
            return i
    return len(text)


class _NotLiteral:
    pass


_NOT_LITERAL = _NotLiteral()


def _parse_literal(expr: str) -> Any:
    expr = expr.strip()
    if len(expr) >= 2 and expr[0] == expr[-1] and expr[0] in "'\"":
        return expr[1:-1]
    if expr in ("true", "false"):
        return expr == "true"
    if re.fullmatch(r"-?\d+", expr):
        return int(expr)
    if re.fullmatch(r"-?\d+\.\d+", expr):
        return float(expr)
    return _NOT_LITERAL
