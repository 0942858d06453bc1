"""``mapiconv inspect`` -- list the capabilities a source would produce.

Shows one row per capability with its id, transport, dependencies, and the
first intent keywords, exactly as they would appear in ``Skill.md`` (with
the local keyword heuristic). Honours ``--json`` and ``--plain``.
"""

from __future__ import annotations

import typer

from mapiconv.commands.convert import FORMAT_HELP, SOURCE_HELP, load_source
from mapiconv.generator import generate_skill
from mapiconv.models import ParsedOpenApiDocument, SourceFormat
from mapiconv.output import info, print_table


def inspect_command(
    source: str = typer.Argument(..., help=SOURCE_HELP),
    source_format: SourceFormat = typer.Option(
        SourceFormat.AUTO, "--format", "-f", help=FORMAT_HELP
    ),
) -> None:
    """Show the capability index of a MAPI or OpenAPI document.

    Example::

        mapiconv inspect openapi.yaml
        mapiconv --json inspect api.md
    """
    doc = load_source(source, source_format)
    result = generate_skill(doc)

    if not result.index:
        info("No capabilities found.")
        return

    if isinstance(doc, ParsedOpenApiDocument):
        transports = [f"HTTP {op.method} {op.path}" for op in doc.operations]
    else:
        transports = [cap.meta.transport for cap in doc.capabilities]

    rows: list[list[str]] = []
    for entry, transport in zip(result.index, transports):
        rows.append([
            entry.id,
            transport,
            ", ".join(entry.dependencies) or "-",
            ", ".join(entry.intent_keywords[:5]),
        ])

    print_table(
        ["ID", "Transport", "Dependencies", "Keywords"],
        rows,
        title=f"{doc.title} -- Capabilities ({len(rows)})",
    )
