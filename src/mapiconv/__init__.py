"""mapiconv -- Convert API descriptions between MAPI, OpenAPI, and Skill bundles.

This package reads a MAPI document (a fenced-block markdown dialect for
describing API capabilities) or an OpenAPI 3.x document, normalises it into an
immutable intermediate model, and renders a progressively-loadable *Skill*
bundle for language-model agents: a ``Skill.md`` index, shared documents under
``common/``, and one document per capability under ``capabilities/``.

Typical workflow::

    mapiconv skill openapi.yaml -o ./skill     # OpenAPI -> Skill bundle
    mapiconv to-mapi openapi.yaml -o api.md    # OpenAPI -> MAPI
    mapiconv to-openapi api.md -o openapi.json # MAPI -> OpenAPI

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: Project configuration and option resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    writer: Persist generated artifact sets to disk.
"""

__version__ = "0.3.0"
