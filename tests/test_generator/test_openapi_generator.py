"""Tests for mapiconv.generator.openapi (MAPI -> OpenAPI)."""

from __future__ import annotations

import logging

import pytest

from mapiconv.generator.openapi import declared_schema, generate_openapi_from_mapi
from mapiconv.models import ParsedMapiDocument
from mapiconv.parser.mapi import parse_mapi


TASK_REF = {"$ref": "#/components/schemas/Task"}


def _mapi(meta: str, *capabilities: str) -> ParsedMapiDocument:
    parts = ["# Sample API", "", "~~~meta", meta, "~~~", ""]
    for capability in capabilities:
        parts.extend(["---", "", capability, ""])
    return parse_mapi("\n".join(parts))


SEARCH_CAPABILITY = """## Capability: Search Items

~~~meta
id: items.search
transport: HTTP GET /items/{kind}
~~~

### Input

```typescript
interface SearchItemsRequest {
  kind: string;
  q: string;  // Query text
  limit?: number;
}
```
"""

STREAM_CAPABILITY = """## Capability: Stream Items

~~~meta
id: items.stream
transport: HTTP POST /items/stream (SSE)
~~~

### Output

```typescript
interface ItemEvent {
  item: string;
}
```
"""


class TestDocument:
    def test_header(self, tasks_doc: ParsedMapiDocument) -> None:
        spec = generate_openapi_from_mapi(tasks_doc)
        assert spec["openapi"] == "3.1.0"
        assert spec["info"] == {
            "title": "Tasks API",
            "version": "1.0.0",
            "description": "Manage a personal task list.",
        }
        assert spec["servers"] == [{"url": "https://tasks.example.com"}]
        assert spec["security"] == [{"bearerAuth": []}]
        assert spec["components"]["securitySchemes"] == {
            "bearerAuth": {"type": "http", "scheme": "bearer"}
        }

    def test_global_types_become_components(self, tasks_doc: ParsedMapiDocument) -> None:
        schemas = generate_openapi_from_mapi(tasks_doc)["components"]["schemas"]
        assert list(schemas) == ["Task", "Priority"]
        assert schemas["Task"]["required"] == ["id", "title", "done"]
        assert schemas["Task"]["properties"]["done"] == {
            "type": "boolean",
            "description": "Completion flag",
        }
        assert schemas["Priority"] == {"enum": ["low", "high"], "type": "string"}

    def test_non_http_capabilities_are_skipped(self, tasks_doc: ParsedMapiDocument) -> None:
        spec = generate_openapi_from_mapi(tasks_doc)
        assert list(spec["paths"]) == ["/tasks", "/tasks/{task_id}", "/health"]
        operation_ids = [op["operationId"] for item in spec["paths"].values() for op in item.values()]
        assert "tasks.events" not in operation_ids

    def test_default_version_and_no_auth(self) -> None:
        spec = generate_openapi_from_mapi(_mapi("auth: none"))
        assert spec["info"] == {"title": "Sample API", "version": "1.0.0"}
        assert "security" not in spec
        assert "components" not in spec
        assert spec["paths"] == {}


class TestOperations:
    def test_post_with_body(self, tasks_doc: ParsedMapiDocument) -> None:
        operation = generate_openapi_from_mapi(tasks_doc)["paths"]["/tasks"]["post"]
        assert operation["operationId"] == "tasks.create"
        assert operation["summary"] == "Create Task"
        assert operation["description"] == "Create a new task with a title and an optional priority."
        assert operation["requestBody"] == {
            "required": True,
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "title": {"type": "string"},
                            "priority": {"$ref": "#/components/schemas/Priority"},
                        },
                        "required": ["title"],
                    }
                }
            },
        }
        assert operation["responses"]["200"]["content"]["application/json"]["schema"] == TASK_REF
        assert "security" not in operation

    def test_path_parameters(self, tasks_doc: ParsedMapiDocument) -> None:
        operation = generate_openapi_from_mapi(tasks_doc)["paths"]["/tasks/{task_id}"]["get"]
        assert operation["parameters"] == [
            {"name": "task_id", "in": "path", "required": True, "schema": {"type": "string"}}
        ]
        assert operation["responses"]["200"]["content"]["application/json"]["schema"] == TASK_REF

    def test_public_capability(self, tasks_doc: ParsedMapiDocument) -> None:
        operation = generate_openapi_from_mapi(tasks_doc)["paths"]["/health"]["get"]
        assert operation["security"] == []
        assert operation["responses"] == {"200": {"description": "Successful response"}}
        assert "parameters" not in operation

    def test_get_input_becomes_query_parameters(self) -> None:
        spec = generate_openapi_from_mapi(_mapi("auth: api_key\nauth_header: X-Token", SEARCH_CAPABILITY))
        operation = spec["paths"]["/items/{kind}"]["get"]

        assert "requestBody" not in operation
        assert operation["parameters"] == [
            {"name": "kind", "in": "path", "required": True, "schema": {"type": "string"}},
            {
                "name": "q",
                "in": "query",
                "required": True,
                "description": "Query text",
                "schema": {"type": "string"},
            },
            {"name": "limit", "in": "query", "required": False, "schema": {"type": "number"}},
        ]
        assert spec["security"] == [{"apiKeyAuth": []}]
        assert spec["components"]["securitySchemes"]["apiKeyAuth"] == {
            "type": "apiKey",
            "in": "header",
            "name": "X-Token",
        }

    def test_streaming_response(self) -> None:
        spec = generate_openapi_from_mapi(_mapi("auth: none", STREAM_CAPABILITY))
        content = spec["paths"]["/items/stream"]["post"]["responses"]["200"]["content"]
        assert list(content) == ["text/event-stream"]

    def test_duplicate_route_is_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        duplicate = SEARCH_CAPABILITY.replace("id: items.search", "id: items.find")
        with caplog.at_level(logging.WARNING, logger="mapiconv"):
            spec = generate_openapi_from_mapi(_mapi("auth: none", SEARCH_CAPABILITY, duplicate))

        assert spec["paths"]["/items/{kind}"]["get"]["operationId"] == "items.search"
        assert "Skipping capability 'items.find'" in caplog.text


class TestSecuritySchemes:
    def test_oauth2(self) -> None:
        spec = generate_openapi_from_mapi(_mapi("auth: oauth2\nauth_scopes: [read, write]"))
        assert spec["security"] == [{"oauth2": ["read", "write"]}]
        assert spec["components"]["securitySchemes"]["oauth2"] == {
            "type": "oauth2",
            "flows": {"clientCredentials": {"scopes": {"read": "", "write": ""}}},
        }

    def test_unknown_scheme_is_omitted(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="mapiconv"):
            spec = generate_openapi_from_mapi(_mapi("auth: basic"))
        assert "security" not in spec
        assert "'basic' has no OpenAPI mapping" in caplog.text


class TestDeclaredSchema:
    def test_alias_to_known_type(self) -> None:
        assert declared_schema("type Out = Task[];", {"Task"}) == {"type": "array", "items": TASK_REF}

    def test_bare_type_name(self) -> None:
        assert declared_schema("Task", {"Task"}) == TASK_REF

    def test_alias_to_object_literal(self) -> None:
        schema = declared_schema("type Out = { ok: boolean };", set())
        assert schema == {"type": "object", "properties": {"ok": {"type": "boolean"}}, "required": ["ok"]}

    def test_interface(self) -> None:
        schema = declared_schema("interface Out {\n  count?: number;\n}", set())
        assert schema == {"type": "object", "properties": {"count": {"type": "number"}}}
