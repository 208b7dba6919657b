"""Exception hierarchy for vksdk.

All exceptions inherit from :class:`VKError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`vksdk.exit_codes`.
The CLI entry point in :func:`vksdk.app.main` catches ``VKError`` and
exits with the appropriate code, while unexpected exceptions produce a
crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    VKError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- AuthError                  (exit 3)
    |   +-- AlreadyAuthorizedError
    |   +-- AuthorizationError
    |   +-- InvalidTokenError
    +-- TransportError             (exit 6)
    +-- DecodeError                (exit 7)
    +-- ConfigError                (exit 1)

Application-level error payloads returned by the API (``{"error": {...}}``
from a method call) are *not* raised: they decode successfully and the
caller inspects them.
"""

from __future__ import annotations

from typing import Optional

from vksdk.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class VKError(Exception):
    """Base exception for all vksdk errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`vksdk.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(VKError):
    """Raised for invalid CLI arguments or malformed ``key=value`` parameters."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(VKError):
    """Base class for authorization-flow failures."""

    exit_code = EXIT_AUTH_FAILURE


class AlreadyAuthorizedError(AuthError):
    """Raised when a code exchange is attempted on an already authorized client.

    The exchange is a one-time transition, not a refresh. Use
    :meth:`~vksdk.client.VK.set_access_token` to replace a token.
    """

    def __init__(self, message: str = "Already authorized.") -> None:
        super().__init__(message)


class AuthorizationError(AuthError):
    """Raised when the OAuth endpoint rejects the code or client credentials.

    Args:
        code: The ``error`` value returned by the token endpoint.
        description: The optional ``error_description``.

    The message is ``"<code>: <description>"`` or just ``"<code>"``.
    """

    def __init__(self, code: str, description: Optional[str] = None) -> None:
        self.code = code
        self.description = description
        message = f"{code}: {description}" if description else code
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Raised when a directly assigned access token fails validation."""

    def __init__(self, message: str = "Invalid access token.") -> None:
        super().__init__(message)


class TransportError(VKError):
    """Raised on network-level failures (timeout, DNS, refused connection, HTTP 5xx).

    Args:
        message: Description of the failure.
        status: HTTP status code when the failure was a server error
            response, ``None`` for connection-level failures.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class DecodeError(VKError):
    """Raised when a response body does not parse in the requested format.

    Args:
        message: Description of the failure.
        body: The first few hundred characters of the offending body.
    """

    exit_code = EXIT_DECODE_ERROR

    def __init__(self, message: str, body: str = "") -> None:
        super().__init__(message)
        self.body = body


class ConfigError(VKError):
    """Raised for configuration problems (missing profiles, invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
