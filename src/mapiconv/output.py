"""Console output for the ``mapiconv`` CLI.

Converted documents and ``inspect`` tables go to stdout, so
``mapiconv to-openapi api.md > openapi.json`` stays clean. Status lines,
errors and hints go to stderr. Rich styling is used only when stdout is an
interactive terminal and colour is allowed (``NO_COLOR``, ``TERM=dumb`` and
``--no-color`` all turn it off).

:class:`OutputManager` is built once by :func:`~mapiconv.app.main_callback`
and installed with :func:`set_output`. Commands call the module-level
helpers, which delegate to the installed instance.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How stdout data is rendered. ``AUTO`` picks ``RICH`` or ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (line prefix, Rich style)
_DIAGNOSTIC_STYLES: dict[str, tuple[str, str]] = {
    "info": ("", ""),
    "success": ("", "green"),
    "error": ("Error: ", "bold red"),
    "suggest": ("→ ", "dim"),
    "debug": ("[debug] ", "dim"),
}

_QUIET_HIDES = frozenset({"info", "success", "suggest"})


class OutputManager:
    """Holds the resolved output preferences and the two consoles.

    Args:
        format: Rendering for stdout data. ``AUTO`` becomes ``RICH`` on a
            colour-capable TTY and ``PLAIN`` otherwise.
        no_color: Disable colour and styling on both streams.
        quiet: Hide informational diagnostics. Errors are always shown.
        verbose: Show debug diagnostics.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    def print_document(self, text: str, language: str) -> None:
        """Write a converted document to stdout.

        Rich mode highlights it as *language* (``json``, ``yaml`` or
        ``markdown``). Every other mode writes the text untouched.
        """
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, language, theme="monokai", word_wrap=True))
        else:
            _write_stdout(text)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows to stdout as a Rich table, JSON records, or TSV lines."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            _write_stdout(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            _write_stdout("\n".join("\t".join(line) for line in [headers, *rows]))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    def info(self, message: str) -> None:
        self._emit("info", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def suggest(self, message: str) -> None:
        """Show a next-step hint, such as the command to inspect the result."""
        self._emit("suggest", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._emit("debug", message)

    def _emit(self, level: str, message: str) -> None:
        if self._quiet and level in _QUIET_HIDES:
            return
        prefix, style = _DIAGNOSTIC_STYLES[level]
        line = prefix + message
        if self._no_color:
            print(line, file=sys.stderr, flush=True)
        else:
            self._stderr.print(line, style=style or None, markup=False, highlight=False)


def _write_stdout(text: str) -> None:
    sys.stdout.write(text if text.endswith("\n") else text + "\n")
    sys.stdout.flush()


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to anything, or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def print_document(text: str, language: str) -> None:
    get_output().print_document(text, language)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
