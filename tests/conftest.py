"""Shared test fixtures for mapiconv.

Provides reusable fixtures for loading source fixtures, creating isolated
config environments, managing output state, and running CLI commands.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from mapiconv.models import ParsedMapiDocument, ParsedOpenApiDocument
from mapiconv.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Source fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def messages_api_raw() -> dict[str, Any]:
    """Load the raw Messages API OpenAPI 3.1 document."""
    with open(FIXTURES_DIR / "messages_api.json") as f:
        return json.load(f)


@pytest.fixture
def messages_doc(messages_api_raw: dict[str, Any]) -> ParsedOpenApiDocument:
    """Parsed Messages API document."""
    from mapiconv.parser.openapi import parse_openapi

    return parse_openapi(messages_api_raw, "3.1.0")


@pytest.fixture
def tasks_mapi_text() -> str:
    """Raw MAPI source of the Tasks API."""
    return (FIXTURES_DIR / "tasks.mapi.md").read_text(encoding="utf-8")


@pytest.fixture
def tasks_doc(tasks_mapi_text: str) -> ParsedMapiDocument:
    """Parsed Tasks API MAPI document."""
    from mapiconv.parser.mapi import parse_mapi

    return parse_mapi(tasks_mapi_text)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_DATA_HOME to a subdirectory of tmp_path so that crash logs
    never touch the real user directory. Clears all MAPICONV_* variables
    and ANTHROPIC_API_KEY, and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "MAPICONV_API_NAME",
        "MAPICONV_INTENT_PROVIDER",
        "MAPICONV_INTENT_MODEL",
        "ANTHROPIC_API_KEY",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
