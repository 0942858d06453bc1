"""Tests for mapiconv.generator.naming."""

from __future__ import annotations

import pytest

from mapiconv.generator.naming import normalize_operation_id, pascal_case, unique_id


class TestNormalizeOperationId:
    @pytest.mark.parametrize(
        ("operation_id", "expected"),
        [
            ("messages_count_tokens", "messages.count_tokens"),
            ("getUserProfile", "get.user.profile"),
            ("Already.Dotted", "already.dotted"),
            ("messages.create", "messages.create"),
            ("listPets_byOwner", "list.pets.by.owner"),
            ("get_users_id_posts", "get.users_id_posts"),
            ("ping", "ping"),
            ("HTTPStatus", "httpstatus"),
        ],
    )
    def test_normalize(self, operation_id: str, expected: str) -> None:
        assert normalize_operation_id(operation_id) == expected

    def test_idempotent_on_normalized_ids(self) -> None:
        once = normalize_operation_id("messages_count_tokens")
        assert normalize_operation_id(once) == once


class TestPascalCase:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("messages_count-tokens.v2", "MessagesCountTokensV2"),
            ("messages.create", "MessagesCreate"),
            ("getUserProfile", "GetUserProfile"),
            ("get health", "GetHealth"),
            ("", ""),
        ],
    )
    def test_pascal_case(self, text: str, expected: str) -> None:
        assert pascal_case(text) == expected


class TestUniqueId:
    def test_unused_candidate(self) -> None:
        assert unique_id("a", set()) == "a"

    def test_suffixes(self) -> None:
        assert unique_id("a", {"a"}) == "a_2"
        assert unique_id("a", {"a", "a_2", "a_3"}) == "a_4"
