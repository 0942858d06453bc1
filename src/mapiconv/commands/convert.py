"""Conversion commands -- ``skill``, ``to-mapi``, and ``to-openapi``.

Each command loads one source (file path, URL, or ``-`` for stdin), runs
one generator, and either writes the result (``--output``) or prints it to
stdout. Diagnostics go to stderr through :mod:`mapiconv.output`.

Usage::

    mapiconv skill openapi.yaml -o ./skill
    mapiconv to-mapi openapi.yaml -o api.md
    mapiconv to-openapi api.md --yaml > openapi.yaml
"""

from __future__ import annotations

import json
from typing import Optional, Union

import typer
import yaml

from mapiconv.config import build_convert_options, resolve_config
from mapiconv.exceptions import MapiconvError
from mapiconv.generator import (
    generate_mapi_from_openapi,
    generate_openapi_from_mapi,
    generate_skill,
)
from mapiconv.models import ParsedMapiDocument, ParsedOpenApiDocument, SourceFormat
from mapiconv.output import debug, error, info, print_document, success, suggest
from mapiconv.parser import load_document
from mapiconv.writer import write_skill, write_text_file

SOURCE_HELP = "MAPI or OpenAPI source: file path, http(s) URL, or '-' for stdin."
FORMAT_HELP = "Source format; 'auto' detects it from the extension and content."


def load_source(
    source: str,
    source_format: SourceFormat,
) -> Union[ParsedMapiDocument, ParsedOpenApiDocument]:
    """Load *source*, turning loader errors into a clean CLI exit."""
    try:
        doc = load_document(source, source_format)
    except MapiconvError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    kind = "OpenAPI" if isinstance(doc, ParsedOpenApiDocument) else "MAPI"
    debug(f"Loaded {kind} document '{doc.title}' from {source}")
    return doc


def skill_command(
    source: str = typer.Argument(..., help=SOURCE_HELP),
    output_dir: str = typer.Option(
        "./skill", "--output", "-o", help="Output directory for the Skill bundle."
    ),
    source_format: SourceFormat = typer.Option(
        SourceFormat.AUTO, "--format", "-f", help=FORMAT_HELP
    ),
    api_name: Optional[str] = typer.Option(
        None, "--api-name", help="Display name used in Skill.md instead of the title."
    ),
    intent_provider: Optional[str] = typer.Option(
        None, "--intent-provider", help="Intent keyword source: heuristic or anthropic."
    ),
    intent_model: Optional[str] = typer.Option(
        None, "--intent-model", help="Model id for the anthropic intent provider."
    ),
) -> None:
    """Generate a Skill bundle from a MAPI or OpenAPI document.

    Writes ``Skill.md``, ``common/`` and ``capabilities/`` under the
    output directory.

    Example::

        mapiconv skill openapi.yaml -o ./skills/messages
        mapiconv skill api.md --intent-provider anthropic
    """
    try:
        config = resolve_config(
            cli_api_name=api_name,
            cli_intent_provider=intent_provider,
            cli_intent_model=intent_model,
        )
        options = build_convert_options(config)
    except MapiconvError as exc:
        error(f"Config error: {exc}")
        raise typer.Exit(code=exc.exit_code) from None

    doc = load_source(source, source_format)
    info(f"Generating Skill bundle for '{options.api_name or doc.title}'")

    try:
        result = generate_skill(doc, options)
        result_path = write_skill(result, output_dir)
    except MapiconvError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except OSError as exc:
        error(f"Cannot write Skill bundle: {exc}")
        raise typer.Exit(code=1) from None

    success(f"Skill bundle with {len(result.index)} capabilities written to: {result_path}")
    suggest(f"Review: cat {result_path}/Skill.md")


def to_mapi_command(
    source: str = typer.Argument(..., help="OpenAPI source: file path, http(s) URL, or '-'."),
    output_file: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write MAPI here instead of stdout."
    ),
    api_name: Optional[str] = typer.Option(
        None, "--api-name", help="Title used instead of the OpenAPI info.title."
    ),
) -> None:
    """Convert an OpenAPI document into MAPI markdown.

    Example::

        mapiconv to-mapi openapi.yaml -o api.md
    """
    doc = load_source(source, SourceFormat.OPENAPI)
    assert isinstance(doc, ParsedOpenApiDocument)
    _emit(generate_mapi_from_openapi(doc, api_name=api_name), output_file, "markdown")


def to_openapi_command(
    source: str = typer.Argument(..., help="MAPI source: file path, http(s) URL, or '-'."),
    output_file: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write OpenAPI here instead of stdout."
    ),
    as_yaml: bool = typer.Option(False, "--yaml", help="Emit YAML instead of JSON."),
) -> None:
    """Convert a MAPI document into an OpenAPI 3.1 document.

    Capabilities without an HTTP transport are skipped.

    Example::

        mapiconv to-openapi api.md -o openapi.json
        mapiconv to-openapi api.md --yaml
    """
    doc = load_source(source, SourceFormat.MAPI)
    assert isinstance(doc, ParsedMapiDocument)

    openapi_doc = generate_openapi_from_mapi(doc)
    if as_yaml:
        text = yaml.safe_dump(openapi_doc, sort_keys=False, allow_unicode=True)
        _emit(text, output_file, "yaml")
    else:
        _emit(json.dumps(openapi_doc, indent=2, ensure_ascii=False) + "\n", output_file, "json")


def _emit(text: str, output_file: Optional[str], language: str) -> None:
    if output_file is None:
        print_document(text, language)
        return
    try:
        path = write_text_file(output_file, text)
    except OSError as exc:
        error(f"Cannot write {output_file}: {exc}")
        raise typer.Exit(code=1) from None
    success(f"Wrote {path}")
