"""Jinja2 environment for the markdown templates in ``generator/templates/``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``generator/templates/``)."""


@lru_cache(maxsize=1)
def create_jinja_env() -> Environment:
    """Create the Jinja2 environment shared by all markdown templates.

    Autoescape is disabled for ``.md.j2`` files (they produce Markdown, not
    HTML). Block trimming and lstrip keep the templates readable without
    leaking blank lines into the output.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("md.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_template(name: str, **context: Any) -> str:
    """Render the template *name* with *context*."""
    return create_jinja_env().get_template(name).render(**context)
