"""LLM-backed intent keywords via the Anthropic Messages API.

:class:`AnthropicIntentGenerator` implements
:class:`~mapiconv.intent.provider.IntentGenerator` with one
``POST /v1/messages`` call per capability, made through
:class:`httpx.AsyncClient`. The model is asked for a JSON array of short
keyword phrases; the reply is parsed leniently (fenced JSON, a bare array, or
a comma/newline separated list).

There are no retries. HTTP failures, network errors, and unusable replies
raise :class:`~mapiconv.exceptions.IntentGenerationError`.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

import httpx

from mapiconv.exceptions import IntentGenerationError

DEFAULT_MODEL = "claude-3-5-haiku-latest"
DEFAULT_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"

_SYSTEM_PROMPT = (
    "You write routing keywords for API capabilities. Given a capability id "
    "and its description, reply with a JSON array of short lowercase phrases "
    "(one to three words each) that a user might say when they want this "
    "capability. Most distinctive first. Reply with the JSON array only."
)


class AnthropicIntentGenerator:
    """Generate intent keywords with a Claude model.

    Args:
        api_key: Anthropic API key, sent as ``x-api-key``.
        model: Model id used for every request.
        max_keywords: Keywords requested from, and kept from, each reply.
        timeout: Per-request timeout in seconds.
        base_url: API root, overridable for proxies and tests.
        transport: Optional httpx transport (tests pass
            :class:`httpx.MockTransport`).

    Example::

        generator = AnthropicIntentGenerator(api_key=key)
        keywords = await generator.generate("messages.create", "Send a message")
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_keywords: int = 8,
        timeout: float = 30.0,
        base_url: str = DEFAULT_BASE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_keywords = max_keywords
        self._timeout = timeout
        self._base_url = base_url
        self._transport = transport

    async def generate(self, capability_id: str, description: str) -> list[str]:
        """Return up to ``max_keywords`` keywords for one capability.

        Raises:
            IntentGenerationError: On HTTP, network, or parse failure.
        """
        payload = {
            "model": self._model,
            "max_tokens": 256,
            "system": _SYSTEM_PROMPT,
            "messages": [
                {
                    "role": "user",
                    "content": (
                        f"Capability id: {capability_id}\n"
                        f"Description: {description}\n"
                        f"Return at most {self._max_keywords} keywords."
                    ),
                }
            ],
        }
        headers = {
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post("/v1/messages", json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise IntentGenerationError(
                f"Keyword provider returned HTTP {exc.response.status_code} for {capability_id}"
            ) from exc
        except httpx.RequestError as exc:
            raise IntentGenerationError(
                f"Keyword provider request failed for {capability_id}: {exc}"
            ) from exc

        keywords = parse_keyword_reply(_reply_text(response.json()))
        if not keywords:
            raise IntentGenerationError(f"Keyword provider returned no keywords for {capability_id}")
        return keywords[: self._max_keywords]


def _reply_text(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    for block in body.get("content") or []:
        if isinstance(block, dict) and block.get("type") == "text":
            return str(block.get("text", ""))
    return ""


def parse_keyword_reply(text: str) -> list[str]:
    """Extract a keyword list from a model reply.

    Accepts a JSON array (optionally inside a markdown code fence) and falls
    back to splitting on commas and newlines.
    """
    trimmed = text.strip()
    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", trimmed)
    if fenced:
        trimmed = fenced.group(1).strip()

    array = re.search(r"\[[\s\S]*\]", trimmed)
    if array:
        try:
            parsed = json.loads(array.group(0))
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return _clean([str(item) for item in parsed if isinstance(item, (str, int, float))])

    return _clean(re.split(r"[,\n]", trimmed))


def _clean(items: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        keyword = item.strip().strip("-*\"'` ").lower()
        if keyword and keyword not in seen:
            seen.add(keyword)
            result.append(keyword)
    return result
