"""Exception hierarchy for mapiconv.

All exceptions inherit from :class:`MapiconvError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`mapiconv.exit_codes`.
The top-level error handler in :func:`mapiconv.app.main` catches
``MapiconvError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Only I/O and configuration problems raise. Imperfect *content* inside a
readable document (missing sections, dangling schema references, operations
without an ``operationId``) degrades silently into best-effort output.

Subclass hierarchy::

    MapiconvError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- IntentGenerationError  (exit 6)
    +-- SourceParseError       (exit 7)
    +-- ConfigError            (exit 1)
"""

from mapiconv.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PROVIDER_ERROR,
    EXIT_SOURCE_PARSE_ERROR,
)


class MapiconvError(Exception):
    """Base exception for all mapiconv errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`mapiconv.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(MapiconvError):
    """Raised for invalid CLI arguments or an unsupported source format."""

    exit_code = EXIT_INVALID_USAGE


class IntentGenerationError(MapiconvError):
    """Raised by an external intent-keyword provider that could not produce keywords.

    The conversion core never catches this; it propagates to the caller,
    which owns any retry or fallback policy.
    """

    exit_code = EXIT_PROVIDER_ERROR


class SourceParseError(MapiconvError):
    """Raised when a source document cannot be read, decoded, or version-checked."""

    exit_code = EXIT_SOURCE_PARSE_ERROR


class ConfigError(MapiconvError):
    """Raised for configuration problems (invalid project config, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
