"""Format parsers -- load MAPI or OpenAPI sources into the intermediate model.

Typical usage::

    from mapiconv.parser import load_document

    doc = load_document("openapi.yaml")   # ParsedOpenApiDocument
    doc = load_document("tasks.md")       # ParsedMapiDocument

Sub-modules:

* :mod:`~mapiconv.parser.loader` -- I/O layer (URL, file, stdin), JSON/YAML
  decoding, OpenAPI version validation, and source-format detection.
* :mod:`~mapiconv.parser.resolver` -- inlines non-schema ``$ref`` pointers
  with circular-reference detection.
* :mod:`~mapiconv.parser.openapi` -- builds
  :class:`~mapiconv.models.ParsedOpenApiDocument`.
* :mod:`~mapiconv.parser.mapi` -- builds
  :class:`~mapiconv.models.ParsedMapiDocument`.
"""

from mapiconv.parser.loader import (
    detect_format,
    load_document,
    load_openapi,
    read_source,
    validate_openapi_version,
)
from mapiconv.parser.mapi import parse_mapi
from mapiconv.parser.openapi import parse_openapi

__all__ = [
    "detect_format",
    "load_document",
    "load_openapi",
    "parse_mapi",
    "parse_openapi",
    "read_source",
    "validate_openapi_version",
]
