"""Pluggable external intent-keyword providers.

A provider replaces the heuristic extractor for a conversion run. It is
anything with an ``async def generate(capability_id, description)`` method
returning a keyword list (see :class:`IntentGenerator`), or a bare callable
with the same signature, sync or async.

The Skill generator awaits the provider once per capability, in document
order. Provider exceptions are not caught here: retry and fallback policy
belong to the provider or its caller.
"""

from __future__ import annotations

import inspect
from typing import Awaitable, Callable, Protocol, Union, runtime_checkable


@runtime_checkable
class IntentGenerator(Protocol):
    """Strategy interface for external keyword providers."""

    async def generate(self, capability_id: str, description: str) -> list[str]:
        """Return ordered routing keywords for one capability."""
        ...


IntentProvider = Union[
    IntentGenerator,
    Callable[[str, str], Union[list[str], Awaitable[list[str]]]],
]
"""Anything :func:`request_keywords` accepts as a provider."""


async def request_keywords(
    provider: IntentProvider,
    capability_id: str,
    description: str,
) -> list[str]:
    """Ask *provider* for keywords and normalise the reply.

    Args:
        provider: An :class:`IntentGenerator` or a plain callable.
        capability_id: Normalised capability id.
        description: Free-text description of the capability.

    Returns:
        The provider's keywords, stripped, with blanks removed.
    """
    generate = getattr(provider, "generate", provider)
    result = generate(capability_id, description)
    if inspect.isawaitable(result):
        result = await result
    return [str(k).strip() for k in result or [] if str(k).strip()]
