"""Heuristic intent-keyword extraction.

The default, local, fully synchronous keyword source for the ``Skill.md``
capability index. Output depends only on the input text, so two runs over the
same document yield byte-identical indexes.

Ranking, highest first:

1. the capability id as a phrase (``messages.count_tokens`` ->
   ``messages count tokens``),
2. the individual id tokens,
3. description words, by frequency and then by first occurrence,
4. common synonyms of the id's action verb.

Stop words and words shorter than three characters are dropped from the
description; duplicates are dropped everywhere.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Optional

from mapiconv.models import OpenApiOperation

MAX_KEYWORDS = 12
"""Upper bound on the number of keywords returned per capability."""

_STOP_WORDS = frozenset(
    """
    a about above after all also an and any are as at be been being both but by
    can could did do does doing each for from further had has have having her
    here hers him his how if in into is it its itself just may me might more
    most must my no nor not now of off on once only or other our out over own
    same she should so some such than that the their them then there these they
    this those through to too under until up upon use used uses using very via
    was we were what when where which while who whom why will with within
    without would you your yours given returns return specified provided
    optionally operation endpoint request response api
    """.split()
)

_VERB_SYNONYMS: dict[str, tuple[str, ...]] = {
    "create": ("add", "new"),
    "list": ("show all", "browse"),
    "get": ("fetch", "retrieve"),
    "retrieve": ("get", "fetch"),
    "update": ("edit", "modify"),
    "patch": ("edit", "modify"),
    "delete": ("remove", "destroy"),
    "remove": ("delete",),
    "search": ("find", "query"),
    "count": ("how many", "tally"),
    "send": ("post", "submit"),
    "upload": ("attach", "send file"),
    "download": ("export", "save"),
    "cancel": ("abort", "stop"),
}

_WORD_RE = re.compile(r"[a-z][a-z0-9]*(?:-[a-z0-9]+)*")
_ID_SPLIT_RE = re.compile(r"[._\-/\s]+")
_VERSION_SEGMENT_RE = re.compile(r"^v\d+(\.\d+)*$")


def extract_intent_keywords(
    text: Optional[str],
    capability_id: str,
    max_keywords: int = MAX_KEYWORDS,
) -> list[str]:
    """Derive ranked routing keywords for a capability.

    Args:
        text: The capability's intention or description; the display name
            when nothing better exists.
        capability_id: Dot-delimited capability id.
        max_keywords: Maximum number of keywords returned.

    Returns:
        An ordered, de-duplicated keyword list.

    Example::

        >>> extract_intent_keywords("Count the tokens in a message", "messages.count_tokens")[:4]
        ['messages count tokens', 'messages', 'count', 'tokens']
    """
    id_tokens = [t for t in _ID_SPLIT_RE.split(capability_id.lower()) if t]

    keywords: list[str] = []
    if len(id_tokens) > 1:
        keywords.append(" ".join(id_tokens))
    keywords.extend(t for t in id_tokens if len(t) > 1 and t not in _STOP_WORDS)
    keywords.extend(_ranked_words(text or ""))
    for token in id_tokens:
        keywords.extend(_VERB_SYNONYMS.get(token, ()))

    return _dedupe(keywords)[:max_keywords]


def extract_openapi_intent_keywords(
    operation: OpenApiOperation,
    capability_id: Optional[str] = None,
    max_keywords: int = MAX_KEYWORDS,
) -> list[str]:
    """Derive ranked routing keywords for an OpenAPI operation.

    Combines :func:`extract_intent_keywords` over the summary and
    description with the operation's tags and static path segments.

    Args:
        operation: The parsed operation.
        capability_id: The normalised capability id; derived from the
            ``operationId`` when omitted.
        max_keywords: Maximum number of keywords returned.
    """
    if capability_id is None:
        from mapiconv.generator.naming import normalize_operation_id

        capability_id = normalize_operation_id(operation.operation_id)

    text = " ".join(t for t in (operation.summary, operation.description) if t)
    keywords = extract_intent_keywords(text or operation.operation_id, capability_id, max_keywords=max_keywords)

    extra = [tag.lower() for tag in operation.tags]
    for segment in operation.path.strip("/").split("/"):
        if not segment or segment.startswith("{") or _VERSION_SEGMENT_RE.match(segment):
            continue
        if segment.lower() in _STOP_WORDS:
            continue
        extra.append(segment.lower())

    return _dedupe([*keywords, *extra])[:max_keywords]


def _ranked_words(text: str) -> list[str]:
    words = [w for w in _WORD_RE.findall(text.lower()) if len(w) > 2 and w not in _STOP_WORDS]
    counts = Counter(words)
    first_seen: dict[str, int] = {}
    for index, word in enumerate(words):
        first_seen.setdefault(word, index)
    return sorted(first_seen, key=lambda w: (-counts[w], first_seen[w]))


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        item = item.strip()
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result
