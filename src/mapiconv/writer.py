"""Persist generated artifacts to disk.

The generators return strings; this module is the only place that turns
them into files. Every write goes through a temp-file-then-rename
(:func:`_atomic_write`) so an interrupted run never leaves a half-written
document behind.

Skill bundle layout::

    <output_dir>/
        Skill.md
        common/auth.md
        common/schemas/types.md
        capabilities/<id>.md
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from mapiconv.exceptions import MapiconvError
from mapiconv.models import SkillOutput

logger = logging.getLogger(__name__)

SKILL_INDEX_FILENAME = "Skill.md"


def write_skill(output: SkillOutput, output_dir: Union[str, Path]) -> Path:
    """Write a Skill bundle under *output_dir*.

    Args:
        output: The generated artifact set.
        output_dir: Target directory. Created (with parents) if missing;
            existing files with the same names are replaced.

    Returns:
        The resolved output directory.

    Example::

        result = generate_skill(doc)
        write_skill(result, "./skills/tasks")
    """
    root = Path(output_dir).resolve()
    root.mkdir(parents=True, exist_ok=True)

    write_text_file(root / SKILL_INDEX_FILENAME, output.skill_md)
    for relative, body in output.common.items():
        write_text_file(_inside(root / "common", relative), body)
    for relative, body in output.capabilities.items():
        write_text_file(_inside(root / "capabilities", relative), body)

    logger.debug(
        "Wrote %d common and %d capability files to %s",
        len(output.common), len(output.capabilities), root,
    )
    return root


def write_text_file(path: Union[str, Path], text: str) -> Path:
    """Write *text* to *path* as UTF-8, creating parent directories."""
    target = Path(path)
    _atomic_write(target, text)
    return target


def _inside(base: Path, relative: str) -> Path:
    """Join *relative* onto *base*, refusing paths that escape it."""
    target = (base / relative).resolve()
    if base.resolve() not in target.parents:
        raise MapiconvError(f"Refusing to write outside {base}: {relative}")
    return target


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Optional[str] = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
            newline="\n",
        ) as handle:
            tmp_path = handle.name
            handle.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise
