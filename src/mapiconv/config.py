"""Configuration: data directory, project config, precedence, and credentials.

This module handles everything the CLI needs before a conversion runs:

* **Data directory** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.mapiconv/`` on macOS and Windows. Holds crash logs. See
  :func:`get_data_dir`.
* **Project config** -- an optional ``./mapiconv.json`` holding a
  :class:`~mapiconv.models.ConvertConfig`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, and project config into the effective settings.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or an interactive prompt.
* **Wiring** -- :func:`build_convert_options` turns the effective settings
  into :class:`~mapiconv.generator.skill.ConvertOptions`, constructing the
  configured intent provider.
"""

from __future__ import annotations

import getpass
import json
import logging
import os
import platform
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from mapiconv.exceptions import ConfigError
from mapiconv.generator.skill import ConvertOptions
from mapiconv.intent.anthropic import DEFAULT_MODEL, AnthropicIntentGenerator
from mapiconv.models import ConvertConfig

logger = logging.getLogger(__name__)

_APP_NAME = "mapiconv"
_PROJECT_CONFIG_FILENAME = "mapiconv.json"

ENV_API_NAME = "MAPICONV_API_NAME"
ENV_INTENT_PROVIDER = "MAPICONV_INTENT_PROVIDER"
ENV_INTENT_MODEL = "MAPICONV_INTENT_MODEL"

INTENT_PROVIDERS = ("heuristic", "anthropic")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/mapiconv/`` (default
    ``~/.local/share/mapiconv/``). On macOS/Windows: ``~/.mapiconv/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config(directory: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``mapiconv.json``.

    Args:
        directory: Directory to look in; the current working directory
            by default.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (directory or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_api_name: Optional[str] = None,
    cli_intent_provider: Optional[str] = None,
    cli_intent_model: Optional[str] = None,
    directory: Optional[Path] = None,
) -> ConvertConfig:
    """Resolve conversion settings with the full precedence chain.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``MAPICONV_API_NAME``,
           ``MAPICONV_INTENT_PROVIDER``, ``MAPICONV_INTENT_MODEL``)
        3. Project config (``./mapiconv.json``)
        4. Defaults

    Raises:
        ConfigError: If the project file is invalid or the resolved intent
            provider is unknown.
    """
    project = load_project_config(directory) or {}
    try:
        config = ConvertConfig.model_validate(project)
    except ValidationError as exc:
        raise ConfigError(f"Invalid project config: {exc}") from exc

    api_name = _first(cli_api_name, os.environ.get(ENV_API_NAME), config.api_name)
    provider = _first(cli_intent_provider, os.environ.get(ENV_INTENT_PROVIDER), config.intent.provider)
    model = _first(cli_intent_model, os.environ.get(ENV_INTENT_MODEL), config.intent.model)

    if provider not in INTENT_PROVIDERS:
        raise ConfigError(
            f"Unknown intent provider '{provider}'. Expected one of: {', '.join(INTENT_PROVIDERS)}"
        )

    intent = config.intent.model_copy(update={"provider": provider, "model": model})
    return config.model_copy(update={"api_name": api_name, "intent": intent})


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter API key: ")

    raise ConfigError(f"Unknown credential source format: {source}")


# --- Wiring ---


def build_convert_options(config: ConvertConfig) -> ConvertOptions:
    """Build generator options from *config*.

    The ``anthropic`` provider resolves its API key through
    :func:`resolve_credential` here, so a missing key fails before any
    capability is processed.
    """
    intent_generator = None
    if config.intent.provider == "anthropic":
        intent_generator = AnthropicIntentGenerator(
            api_key=resolve_credential(config.intent.api_key_source),
            model=config.intent.model or DEFAULT_MODEL,
            max_keywords=config.intent.max_keywords,
            timeout=config.intent.timeout,
        )
        logger.debug("Using Anthropic intent provider (model %s)", config.intent.model or DEFAULT_MODEL)

    return ConvertOptions(api_name=config.api_name, intent_generator=intent_generator)
