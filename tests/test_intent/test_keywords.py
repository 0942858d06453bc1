"""Tests for mapiconv.intent.keywords."""

from __future__ import annotations

from mapiconv.intent.keywords import (
    MAX_KEYWORDS,
    extract_intent_keywords,
    extract_openapi_intent_keywords,
)
from mapiconv.models import OpenApiOperation


class TestExtractIntentKeywords:
    def test_id_phrase_and_tokens_lead(self) -> None:
        keywords = extract_intent_keywords("Count the tokens in a message", "messages.count_tokens")
        assert keywords[:4] == ["messages count tokens", "messages", "count", "tokens"]

    def test_description_words_then_synonyms(self) -> None:
        keywords = extract_intent_keywords("Count the tokens in a message", "messages.count_tokens")
        assert keywords[4:] == ["message", "how many", "tally"]

    def test_stop_words_and_short_words_dropped(self) -> None:
        keywords = extract_intent_keywords("Use it to do a thing for the user", "thing.do")
        assert "the" not in keywords
        assert "use" not in keywords
        assert "user" in keywords

    def test_frequency_ranking(self) -> None:
        keywords = extract_intent_keywords("alpha beta beta gamma beta alpha", "x")
        assert keywords == ["beta", "alpha", "gamma"]

    def test_single_token_id_has_no_phrase(self) -> None:
        assert extract_intent_keywords(None, "ping") == ["ping"]

    def test_no_duplicates(self) -> None:
        keywords = extract_intent_keywords("Create create CREATE tasks", "tasks.create")
        assert len(keywords) == len(set(keywords))

    def test_bounded(self) -> None:
        text = " ".join(f"word{i}x" for i in range(50))
        assert len(extract_intent_keywords(text, "a.b")) == MAX_KEYWORDS
        assert len(extract_intent_keywords(text, "a.b", max_keywords=3)) == 3

    def test_deterministic(self) -> None:
        text = "Send a structured list of input messages and receive the reply"
        assert extract_intent_keywords(text, "messages.create") == extract_intent_keywords(
            text, "messages.create"
        )


class TestExtractOpenapiIntentKeywords:
    def test_tags_and_path_segments_are_added(self) -> None:
        op = OpenApiOperation(
            operation_id="getHealth",
            method="GET",
            path="/v1/health/{region}",
            summary="Health",
            tags=["Ops"],
        )
        keywords = extract_openapi_intent_keywords(op)
        assert keywords[0] == "get health"
        assert "ops" in keywords
        assert "health" in keywords
        assert "v1" not in keywords
        assert "{region}" not in keywords

    def test_capability_id_defaults_to_normalized_operation_id(self) -> None:
        op = OpenApiOperation(operation_id="messages_count_tokens", method="POST", path="/count")
        assert extract_openapi_intent_keywords(op)[0] == "messages count tokens"

    def test_falls_back_to_operation_id_text(self) -> None:
        op = OpenApiOperation(operation_id="archive_everything", method="POST", path="/archive")
        keywords = extract_openapi_intent_keywords(op, "archive.everything")
        assert keywords[:3] == ["archive everything", "archive", "everything"]
