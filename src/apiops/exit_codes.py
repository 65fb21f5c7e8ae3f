"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apiops.exceptions.ApiopsError` subclass.
CI pipelines can inspect the exit code to tell a provider outage from a
schema drift without parsing stderr.

Example::

    $ apiops extract --output-folder ./apim
    $ echo $?
    7   # EXIT_DECODE_ERROR -- a resource document did not decode
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (reported by Typer itself)."""

EXIT_AUTH_FAILURE = 3
"""The provider rejected the credentials."""

EXIT_NOT_FOUND = 4
"""The provider reported that a resource does not exist (HTTP 404)."""

EXIT_PROVIDER_ERROR = 5
"""The provider failed (HTTP 5xx, throttling, or an unexpected status)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_DECODE_ERROR = 7
"""A resource document was present but malformed."""

EXIT_UNSUPPORTED_FORMAT = 8
"""An API specification format has no known file-naming rule."""

EXIT_STORAGE_ERROR = 9
"""Reading or writing the artifact tree failed."""

EXIT_VALIDATION_ERROR = 10
"""A resource name was blank."""

EXIT_CANCELLED = 130
"""The run was cancelled (e.g. Ctrl-C)."""
