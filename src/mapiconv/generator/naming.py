"""Identifier helpers shared by the generators."""

from __future__ import annotations

import re


def normalize_operation_id(operation_id: str) -> str:
    """Normalize an OpenAPI ``operationId`` into a dotted capability id.

    * Ids that already contain a dot are only lowercased.
    * Otherwise a dot is inserted at every lower-to-upper camel-case
      boundary, the result is lowercased, and the *first* underscore (only)
      becomes a dot, giving ``resource.action`` ids whose action may keep
      inner underscores.

    Examples::

        >>> normalize_operation_id("messages_count_tokens")
        'messages.count_tokens'
        >>> normalize_operation_id("getUserProfile")
        'get.user.profile'
        >>> normalize_operation_id("Already.Dotted")
        'already.dotted'
    """
    if "." in operation_id:
        return operation_id.lower()

    normalized = re.sub(r"([a-z])([A-Z])", r"\1.\2", operation_id).lower()
    return normalized.replace("_", ".", 1)


def pascal_case(text: str) -> str:
    """Convert ``messages_count-tokens.v2`` style text to ``MessagesCountTokensV2``."""
    return "".join(
        word[:1].upper() + word[1:]
        for word in re.split(r"[_.\-\s]+", text)
        if word
    )


def unique_id(candidate: str, used: set[str]) -> str:
    """Return *candidate*, or ``candidate_2``, ``candidate_3``... if already in *used*."""
    if candidate not in used:
        return candidate
    counter = 2
    while f"{candidate}_{counter}" in used:
        counter += 1
    return f"{candidate}_{counter}"
