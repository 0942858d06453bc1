"""Generators -- turn the intermediate model into output artifacts.

Typical usage::

    from mapiconv.generator import ConvertOptions, generate_skill

    output = generate_skill(doc, ConvertOptions(api_name="Tasks"))
    print(output.skill_md)

Sub-modules:

* :mod:`~mapiconv.generator.skill` -- the Skill bundle generator.
* :mod:`~mapiconv.generator.mapi` -- OpenAPI -> MAPI text.
* :mod:`~mapiconv.generator.openapi` -- MAPI -> OpenAPI document.
* :mod:`~mapiconv.generator.dependencies` -- shared-artifact dependencies.
* :mod:`~mapiconv.generator.auth` -- ``auth.md`` templates.
* :mod:`~mapiconv.generator.naming` -- capability id normalization.
"""

from mapiconv.generator.dependencies import (
    determine_mapi_dependencies,
    determine_openapi_dependencies,
)
from mapiconv.generator.mapi import generate_mapi_from_openapi
from mapiconv.generator.naming import normalize_operation_id
from mapiconv.generator.openapi import generate_openapi_from_mapi
from mapiconv.generator.skill import (
    ConvertOptions,
    generate_skill,
    generate_skill_async,
    generate_skill_from_mapi,
    generate_skill_from_openapi,
)

__all__ = [
    "ConvertOptions",
    "determine_mapi_dependencies",
    "determine_openapi_dependencies",
    "generate_mapi_from_openapi",
    "generate_openapi_from_mapi",
    "generate_skill",
    "generate_skill_async",
    "generate_skill_from_mapi",
    "generate_skill_from_openapi",
    "normalize_operation_id",
]
