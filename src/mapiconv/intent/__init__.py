"""Intent Keyword Extractor -- routing keywords for the capability index.

Sub-modules:

* :mod:`~mapiconv.intent.keywords` -- the deterministic local heuristic
  (:func:`extract_intent_keywords`, :func:`extract_openapi_intent_keywords`).
* :mod:`~mapiconv.intent.provider` -- the :class:`IntentGenerator` strategy
  interface for external providers.
* :mod:`~mapiconv.intent.anthropic` -- an httpx-based provider backed by the
  Anthropic Messages API.
"""

from mapiconv.intent.anthropic import AnthropicIntentGenerator
from mapiconv.intent.keywords import extract_intent_keywords, extract_openapi_intent_keywords
from mapiconv.intent.provider import IntentGenerator, IntentProvider, request_keywords

__all__ = [
    "AnthropicIntentGenerator",
    "IntentGenerator",
    "IntentProvider",
    "extract_intent_keywords",
    "extract_openapi_intent_keywords",
    "request_keywords",
]
