"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~vksdk.exceptions.VKError` subclass.
Shell wrappers can inspect the exit code to tell the failure class apart
without parsing stderr.

Example::

    $ vksdk auth exchange 3f1c...
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the code was rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""Authorization failed or the access token was rejected."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused, HTTP 5xx)."""

EXIT_DECODE_ERROR = 7
"""The response body could not be decoded in the requested format."""
