"""Schema Type Mapper -- display types, example payloads, and TypeScript rendering.

Every function here works on raw OpenAPI schema dicts plus a flat table of
named schemas (``components.schemas``), never on linked object graphs, so
self-referential schemas cannot cause unbounded recursion.

Sub-modules:

* :mod:`~mapiconv.schema.type_mapper` -- :func:`describe_type` for field
  tables.
* :mod:`~mapiconv.schema.examples` -- :func:`generate_example`, the
  depth-bounded example synthesizer.
* :mod:`~mapiconv.schema.typescript` -- :func:`schema_to_typescript` and the
  reverse :func:`parse_typescript_types`.
"""

from mapiconv.schema.examples import generate_example
from mapiconv.schema.type_mapper import TypeDescription, describe_type
from mapiconv.schema.typescript import parse_typescript_types, schema_to_typescript

__all__ = [
    "TypeDescription",
    "describe_type",
    "generate_example",
    "parse_typescript_types",
    "schema_to_typescript",
]
