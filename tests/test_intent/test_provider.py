"""Tests for mapiconv.intent.provider."""

from __future__ import annotations

import asyncio

from mapiconv.intent.provider import IntentGenerator, request_keywords


class _StaticGenerator:
    def __init__(self, keywords: list[str]) -> None:
        self.keywords = keywords
        self.calls: list[tuple[str, str]] = []

    async def generate(self, capability_id: str, description: str) -> list[str]:
        self.calls.append((capability_id, description))
        return self.keywords


class TestRequestKeywords:
    def test_protocol_object(self) -> None:
        generator = _StaticGenerator(["send", "chat"])
        result = asyncio.run(request_keywords(generator, "messages.create", "Send a message"))
        assert result == ["send", "chat"]
        assert generator.calls == [("messages.create", "Send a message")]

    def test_protocol_is_runtime_checkable(self) -> None:
        assert isinstance(_StaticGenerator([]), IntentGenerator)

    def test_sync_callable(self) -> None:
        result = asyncio.run(request_keywords(lambda cid, desc: [cid, desc], "a.b", "text"))
        assert result == ["a.b", "text"]

    def test_async_callable(self) -> None:
        async def provider(capability_id: str, description: str) -> list[str]:
            return [capability_id.upper()]

        assert asyncio.run(request_keywords(provider, "a.b", "")) == ["A.B"]

    def test_blank_keywords_are_dropped(self) -> None:
        result = asyncio.run(request_keywords(lambda cid, desc: ["  one ", "", "  "], "a", "b"))
        assert result == ["one"]

    def test_none_result_is_empty(self) -> None:
        assert asyncio.run(request_keywords(lambda cid, desc: None, "a", "b")) == []
