"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~mapiconv.exceptions.MapiconvError` subclass.
External tooling (CI scripts, shell wrappers) can inspect the exit code to
determine the failure class without parsing stderr.

Example::

    $ mapiconv skill missing.yaml -o ./skill
    $ echo $?
    7   # EXIT_SOURCE_PARSE_ERROR -- the source could not be read
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_PROVIDER_ERROR = 6
"""The external intent-keyword provider failed (network, HTTP, or bad reply)."""

EXIT_SOURCE_PARSE_ERROR = 7
"""The source document could not be read, parsed, or validated."""
