"""Parse MAPI source text into :class:`~mapiconv.models.ParsedMapiDocument`.

MAPI is a markdown dialect for describing API capabilities::

    # Tasks API

    Free-text description of the API.

    ~~~meta
    version: 1.0.0
    base_url: https://api.example.com
    auth: bearer
    ~~~

    ## Global Types

    ```typescript
    interface Task { id: string; title: string; }
    ```

    ## Capability: Create Task

    ~~~meta
    id: tasks.create
    transport: HTTP POST /tasks
    ~~~

    ### Intention
    Create a new task.

    ### Input
    ```typescript
    interface CreateTaskRequest { title: string; }
    ```

Level-two headings delimit document sections (``Capability: <name>`` for
capabilities, ``Global Types`` for shared declarations); level-three headings
delimit the named subsections of a capability. Metadata lives in tilde fences
tagged ``meta``; code lives in backtick fences. Headings inside fences are
never treated as structure.

Parsing is lenient. Missing or unrecognised subsections are simply absent on
the resulting :class:`~mapiconv.models.Capability`, whitespace-only sections
count as missing, and a capability without a meta block receives an id
derived from its name.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from mapiconv.models import Capability, CapabilityMeta, ParsedMapiDocument

logger = logging.getLogger(__name__)

_TITLE_RE = re.compile(r"^#\s+(.+?)\s*#*\s*$")
_FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})\s*([\w+-]*)")
_CAPABILITY_RE = re.compile(r"^capability\s*:\s*(.+)$", re.IGNORECASE)
_TYPES_HEADINGS = frozenset({"global types", "shared types", "types", "schemas"})

_SUBSECTIONS: dict[str, str] = {
    "intention": "intention",
    "auth intention": "auth_intention",
    "input": "input",
    "output": "output",
    "logic constraints": "logic_constraints",
    "errors": "errors",
    "example": "example",
    "examples": "example",
}
# Subsections whose value is the contents of their first code fence.
_CODE_SUBSECTIONS = frozenset({"input", "output"})

_BOOLEAN_VALUES = {"true": True, "yes": True, "false": False, "no": False}


def parse_mapi(text: str) -> ParsedMapiDocument:
    """Parse a MAPI document.

    Args:
        text: The full MAPI source.

    Returns:
        The MAPI intermediate model. Capabilities appear in document order
        and carry unique, lowercase ids.

    Example::

        doc = parse_mapi(Path("tasks.md").read_text())
        for cap in doc.capabilities:
            print(cap.meta.id, cap.meta.transport)
    """
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    preamble, sections = _split_sections(lines, level=2)

    title, preamble = _extract_title(preamble)
    meta, description = _split_meta(preamble)

    global_types: Optional[str] = None
    capabilities: list[Capability] = []
    used_ids: set[str] = set()

    for heading, body in sections:
        cap_match = _CAPABILITY_RE.match(heading)
        if cap_match:
            capability = _parse_capability(cap_match.group(1).strip(), heading, body, used_ids)
            used_ids.add(capability.meta.id)
            capabilities.append(capability)
        elif heading.lower() in _TYPES_HEADINGS and global_types is None:
            global_types = _code_or_text(body)
        else:
            logger.debug("Ignoring MAPI section '%s'", heading)

    return ParsedMapiDocument(
        title=title or "Untitled API",
        description=description,
        meta=meta,
        global_types=global_types,
        capabilities=capabilities,
    )


def _parse_capability(
    name: str,
    heading: str,
    body: list[str],
    used_ids: set[str],
) -> Capability:
    intro, subsections = _split_sections(body, level=3)
    raw_meta, _ = _split_meta(intro)

    fields: dict[str, Optional[str]] = {}
    for sub_heading, sub_body in subsections:
        key = _SUBSECTIONS.get(sub_heading.lower())
        if key is None or key in fields:
            continue
        if key in _CODE_SUBSECTIONS:
            fields[key] = _code_or_text(sub_body)
        else:
            fields[key] = _clean_text(sub_body)

    return Capability(
        name=name,
        meta=_capability_meta(raw_meta, name, used_ids),
        raw_content="\n".join([f"## {heading}", *body]).strip(),
        **fields,
    )


def _capability_meta(raw: dict[str, Any], name: str, used_ids: set[str]) -> CapabilityMeta:
    cap_id = str(raw.get("id") or "").strip().lower()
    if not cap_id:
        cap_id = re.sub(r"[^a-z0-9.]+", "_", name.lower()).strip("_") or "capability"
        logger.debug("Capability '%s' has no id; using '%s'", name, cap_id)
    if cap_id in used_ids:
        counter = 2
        while f"{cap_id}_{counter}" in used_ids:
            counter += 1
        logger.warning("Duplicate capability id '%s'; renamed to '%s_%d'", cap_id, cap_id, counter)
        cap_id = f"{cap_id}_{counter}"

    auth = raw.get("auth")
    return CapabilityMeta(
        id=cap_id,
        transport=str(raw.get("transport") or "INTERNAL").strip(),
        auth=str(auth).strip().lower() if auth not in (None, "") else None,
        idempotent=_as_bool(raw.get("idempotent")),
        deprecated=bool(_as_bool(raw.get("deprecated"))),
    )


# ------------------------------------------------------------------ #
# Block structure
# ------------------------------------------------------------------ #


def _split_sections(
    lines: list[str],
    level: int,
) -> tuple[list[str], list[tuple[str, list[str]]]]:
    """Split *lines* on headings of exactly *level*, ignoring fenced content.

    Returns:
        ``(preamble, [(heading_text, body_lines), ...])``.
    """
    heading_re = re.compile(r"^#{%d}\s+(.+?)\s*#*\s*$" % level)
    preamble: list[str] = []
    sections: list[tuple[str, list[str]]] = []
    current = preamble
    fence: Optional[str] = None

    for line in lines:
        fence = _track_fence(line, fence)
        match = heading_re.match(line) if fence is None else None
        if match and not line.startswith("#" * (level + 1)):
            body: list[str] = []
            sections.append((match.group(1).strip(), body))
            current = body
        else:
            current.append(line)

    return preamble, sections


def _track_fence(line: str, fence: Optional[str]) -> Optional[str]:
    """Return the fence marker still open after *line* (``None`` outside fences)."""
    match = _FENCE_RE.match(line)
    if match is None:
        return fence
    marker = match.group(1)
    if fence is None:
        return marker
    if marker[0] == fence[0] and len(marker) >= len(fence) and not match.group(2):
        return None
    return fence


def _extract_title(lines: list[str]) -> tuple[Optional[str], list[str]]:
    fence: Optional[str] = None
    for i, line in enumerate(lines):
        fence = _track_fence(line, fence)
        if fence is None:
            match = _TITLE_RE.match(line)
            if match:
                return match.group(1), lines[:i] + lines[i + 1:]
    return None, lines


def _split_meta(lines: list[str]) -> tuple[dict[str, Any], Optional[str]]:
    """Pull the first ``~~~meta`` block out of *lines*.

    Returns:
        ``(meta, remaining_text)`` where *remaining_text* is ``None`` when
        only whitespace is left.
    """
    start = end = None
    for i, line in enumerate(lines):
        if start is None and re.match(r"^\s{0,3}~{3,}\s*meta\s*$", line, re.IGNORECASE):
            start = i
        elif start is not None and re.match(r"^\s{0,3}~{3,}\s*$", line):
            end = i
            break

    if start is None:
        return {}, _clean_text(lines)
    if end is None:
        end = len(lines)

    meta = _parse_meta_lines(lines[start + 1:end])
    remaining = lines[:start] + lines[end + 1:]
    return meta, _clean_text(remaining)


def _parse_meta_lines(lines: list[str]) -> dict[str, Any]:
    meta: dict[str, Any] = {}
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or ":" not in stripped:
            continue
        key, value = stripped.split(":", 1)
        meta[key.strip().lower()] = _coerce_meta_value(value.strip())
    return meta


def _coerce_meta_value(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.startswith("[") and value.endswith("]"):
        return [item.strip().strip("'\"") for item in value[1:-1].split(",") if item.strip()]
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    return value


def _as_bool(value: Any) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    return _BOOLEAN_VALUES.get(str(value).strip().lower())


def _clean_text(lines: list[str]) -> Optional[str]:
    """Join *lines*, drop trailing horizontal rules, and map blank text to ``None``."""
    trimmed = list(lines)
    while trimmed and (not trimmed[-1].strip() or re.fullmatch(r"\s*(-{3,}|\*{3,})\s*", trimmed[-1])):
        trimmed.pop()
    text = "\n".join(trimmed).strip()
    return text or None


def _code_or_text(lines: list[str]) -> Optional[str]:
    """Return the contents of the first code fence in *lines*, or the plain text."""
    fence: Optional[str] = None
    code: list[str] = []
    for line in lines:
        new_fence = _track_fence(line, fence)
        if fence is None and new_fence is not None:
            fence = new_fence
            continue
        if fence is not None and new_fence is None:
            text = "\n".join(code).strip("\n")
            return text if text.strip() else None
        if fence is not None:
            code.append(line)
    if fence is not None:
        text = "\n".join(code).strip("\n")
        return text if text.strip() else None
    return _clean_text(lines)
