"""Tests for mapiconv.generator.dependencies."""

from __future__ import annotations

from typing import Optional

import pytest

from mapiconv.generator.dependencies import (
    AUTH_DEPENDENCY,
    TYPES_DEPENDENCY,
    declared_type_names,
    determine_mapi_dependencies,
    determine_openapi_dependencies,
)
from mapiconv.models import (
    Capability,
    CapabilityMeta,
    OpenApiAuth,
    OpenApiOperation,
    ParsedMapiDocument,
    ParsedOpenApiDocument,
)


def _cap(auth: Optional[str] = None, raw: str = "## Capability: X") -> Capability:
    return Capability(name="X", meta=CapabilityMeta(id="x", auth=auth), raw_content=raw)


def _mapi(auth: Optional[str] = None, global_types: Optional[str] = None) -> ParsedMapiDocument:
    meta = {"auth": auth} if auth is not None else {}
    return ParsedMapiDocument(title="T", meta=meta, global_types=global_types)


def _op(security: Optional[list] = None) -> OpenApiOperation:
    return OpenApiOperation(operation_id="a", method="GET", path="/a", security=security)


def _openapi(auth: Optional[str] = "bearer", schemas: Optional[dict] = None) -> ParsedOpenApiDocument:
    return ParsedOpenApiDocument(
        title="T",
        auth=OpenApiAuth(type=auth) if auth else None,
        schemas=schemas or {},
    )


class TestDeclaredTypeNames:
    def test_interfaces_and_aliases(self) -> None:
        source = "interface Task { id: string }\ntype Priority = 'low' | 'high';\nexport interface User {}"
        assert declared_type_names(source) == ["Task", "Priority", "User"]


class TestMapiAuth:
    @pytest.mark.parametrize(
        ("cap_auth", "doc_auth", "expected"),
        [
            ("required", None, True),
            ("required", "none", True),
            ("none", "bearer", False),
            ("optional", "bearer", False),
            (None, "bearer", True),
            (None, "api_key", True),
            (None, "none", False),
            (None, None, False),
        ],
    )
    def test_auth_rules(self, cap_auth: Optional[str], doc_auth: Optional[str], expected: bool) -> None:
        deps = determine_mapi_dependencies(_cap(auth=cap_auth), _mapi(auth=doc_auth))
        assert (AUTH_DEPENDENCY in deps) is expected


class TestMapiTypes:
    def test_mentioned_type_adds_dependency(self) -> None:
        cap = _cap(raw="## Capability: X\n\n### Output\n```typescript\nTask[]\n```")
        deps = determine_mapi_dependencies(cap, _mapi(global_types="interface Task { id: string }"))
        assert deps == [TYPES_DEPENDENCY]

    def test_substring_match_counts(self) -> None:
        cap = _cap(raw="returns a TaskList")
        deps = determine_mapi_dependencies(cap, _mapi(global_types="interface Task {}"))
        assert deps == [TYPES_DEPENDENCY]

    def test_unmentioned_types(self) -> None:
        cap = _cap(raw="## Capability: Ping")
        assert determine_mapi_dependencies(cap, _mapi(global_types="interface Task {}")) == []

    def test_no_global_types(self) -> None:
        assert determine_mapi_dependencies(_cap(raw="Task"), _mapi()) == []

    def test_auth_comes_first(self) -> None:
        cap = _cap(raw="Task")
        deps = determine_mapi_dependencies(cap, _mapi(auth="bearer", global_types="interface Task {}"))
        assert deps == [AUTH_DEPENDENCY, TYPES_DEPENDENCY]

    def test_fixture_document(self, tasks_doc: ParsedMapiDocument) -> None:
        deps = {c.meta.id: determine_mapi_dependencies(c, tasks_doc) for c in tasks_doc.capabilities}
        assert deps == {
            "tasks.create": ["auth", "schemas/types"],
            "tasks.get": ["auth", "schemas/types"],
            "system.health": [],
            "tasks.events": ["auth", "schemas/types"],
        }


class TestOpenapiDependencies:
    def test_document_auth_applies(self) -> None:
        assert determine_openapi_dependencies(_op(), _openapi()) == [AUTH_DEPENDENCY]

    def test_explicit_empty_security_is_public(self) -> None:
        assert determine_openapi_dependencies(_op(security=[]), _openapi()) == []

    def test_explicit_security_without_document_auth(self) -> None:
        deps = determine_openapi_dependencies(_op(security=[{"key": []}]), _openapi(auth=None))
        assert deps == [AUTH_DEPENDENCY]

    def test_no_auth_anywhere(self) -> None:
        assert determine_openapi_dependencies(_op(), _openapi(auth=None)) == []

    def test_any_schema_adds_types(self) -> None:
        deps = determine_openapi_dependencies(_op(), _openapi(auth=None, schemas={"Unused": {"type": "string"}}))
        assert deps == [TYPES_DEPENDENCY]

    def test_auth_dependency_is_monotonic(self) -> None:
        """Adding a document-level scheme never removes an auth dependency."""
        for security in (None, [], [{"k": []}]):
            without = determine_openapi_dependencies(_op(security), _openapi(auth=None))
            with_auth = determine_openapi_dependencies(_op(security), _openapi(auth="bearer"))
            if AUTH_DEPENDENCY in without:
                assert AUTH_DEPENDENCY in with_auth

    def test_fixture_document(self, messages_doc: ParsedOpenApiDocument) -> None:
        deps = [determine_openapi_dependencies(op, messages_doc) for op in messages_doc.operations]
        assert deps == [
            ["auth", "schemas/types"],
            ["auth", "schemas/types"],
            ["auth", "schemas/types"],
            ["schemas/types"],
        ]
