"""Load source documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw MAPI text and OpenAPI documents.
OpenAPI documents may be JSON or YAML with automatic format detection, and
must declare a supported OpenAPI version (3.x).

The public functions are:

* :func:`read_source` -- Read raw text from any supported source.
* :func:`load_openapi` -- Read and decode an OpenAPI document into a dict.
* :func:`parse_content` -- Decode JSON or YAML text into a dict.
* :func:`validate_openapi_version` -- Check and return the ``openapi``
  version string, rejecting Swagger 2.x.
* :func:`detect_format` -- Decide whether a source is MAPI or OpenAPI.
* :func:`load_document` -- All of the above, returning a parsed document.
"""

from __future__ import annotations

import json
import re
import sys
from pathlib import Path
from typing import Any, Union

import httpx
import yaml

from mapiconv.exceptions import SourceParseError
from mapiconv.models import ParsedMapiDocument, ParsedOpenApiDocument, SourceFormat

_MAPI_SUFFIXES = (".md", ".mapi", ".markdown")
_OPENAPI_SUFFIXES = (".json", ".yaml", ".yml")


def read_source(source: str) -> str:
    """Read raw text from a URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The source text.

    Raises:
        SourceParseError: If the source cannot be read or is empty.
    """
    if source == "-":
        return _read_stdin()
    elif source.startswith(("http://", "https://")):
        return _read_url(source)
    else:
        return _read_file(source)


def _read_stdin() -> str:
    """Read all available input from stdin.

    Raises:
        SourceParseError: If stdin is empty or cannot be read.
    """
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise SourceParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SourceParseError("No input received from stdin")

    return content


def _read_url(url: str) -> str:
    """Fetch a source document over HTTP(S).

    Raises:
        SourceParseError: If the URL cannot be fetched.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SourceParseError(
            f"HTTP {exc.response.status_code} fetching source from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SourceParseError(f"Failed to fetch source from {url}: {exc}") from exc

    return response.text


def _read_file(path: str) -> str:
    """Read a source document from a local file.

    Raises:
        SourceParseError: If the file is missing, unreadable, or empty.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SourceParseError(f"Source file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceParseError(f"Failed to read source file {path}: {exc}") from exc

    if not content.strip():
        raise SourceParseError(f"Source file is empty: {path}")

    return content


def _format_hint(source: str) -> str:
    suffix = Path(source.split("?", 1)[0]).suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return ""


def load_openapi(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from URL, file path, or stdin and decode it.

    Raises:
        SourceParseError: If the source cannot be loaded or decoded.
    """
    return parse_content(read_source(source), hint=_format_hint(source))


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    This order is chosen because valid JSON is also valid YAML, but JSON
    parsing is stricter and faster.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        SourceParseError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise SourceParseError(
                    "Document must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SourceParseError(f"Invalid JSON: {exc}") from exc

    try:
        result = yaml.safe_load(content)
        if not isinstance(result, dict):
            raise SourceParseError(
                "Document must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse document as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SourceParseError(msg)


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Supports OpenAPI 3.x. Raises SourceParseError for Swagger 2.x,
    missing version fields, or unsupported versions.

    Args:
        spec: The decoded OpenAPI document.

    Returns:
        The OpenAPI version string (e.g., '3.0.3', '3.1.0').

    Raises:
        SourceParseError: If the version is missing, unsupported, or indicates Swagger 2.x.
    """
    if "swagger" in spec:
        swagger_ver = str(spec["swagger"])
        raise SourceParseError(
            f"Swagger {swagger_ver} is not supported. "
            "Only OpenAPI 3.x documents are supported. "
            "Consider converting with https://converter.swagger.io"
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SourceParseError(
            "Missing 'openapi' field. Is this an OpenAPI 3.x document?"
        )

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        return version_str

    raise SourceParseError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only OpenAPI 3.x documents are supported."
    )


def detect_format(source: str, content: str) -> SourceFormat:
    """Decide whether *content* is a MAPI or an OpenAPI document.

    The file extension wins when it is conclusive; otherwise the content is
    sniffed: a JSON object or a top-level ``openapi:``/``swagger:`` key
    means OpenAPI, anything else is treated as MAPI.
    """
    suffix = Path(source.split("?", 1)[0]).suffix.lower()
    if suffix in _MAPI_SUFFIXES:
        return SourceFormat.MAPI
    if suffix in _OPENAPI_SUFFIXES:
        return SourceFormat.OPENAPI

    stripped = content.lstrip()
    if stripped.startswith("{"):
        return SourceFormat.OPENAPI
    if re.search(r"^(openapi|swagger)\s*:", content, re.MULTILINE):
        return SourceFormat.OPENAPI
    return SourceFormat.MAPI


def load_document(
    source: str,
    fmt: SourceFormat = SourceFormat.AUTO,
) -> Union[ParsedMapiDocument, ParsedOpenApiDocument]:
    """Read *source* and parse it into the matching intermediate model.

    Args:
        source: A URL, file path, or '-' for stdin.
        fmt: Force a source format instead of detecting it.

    Returns:
        A :class:`~mapiconv.models.ParsedMapiDocument` or a
        :class:`~mapiconv.models.ParsedOpenApiDocument`.

    Raises:
        SourceParseError: If the source cannot be read or decoded.
    """
    from mapiconv.parser.mapi import parse_mapi
    from mapiconv.parser.openapi import parse_openapi

    content = read_source(source)
    if fmt == SourceFormat.AUTO:
        fmt = detect_format(source, content)

    if fmt == SourceFormat.MAPI:
        return parse_mapi(content)

    raw = parse_content(content, hint=_format_hint(source))
    version = validate_openapi_version(raw)
    return parse_openapi(raw, version)
