"""Credential state and the authorization state machine.

:class:`CredentialState` holds the application identity (app id and
secret), the optional API version pin, the optional access token, and the
current :class:`AuthState`. It performs no I/O; the gateways in
:mod:`vksdk.client` drive its transitions::

    UNAUTHENTICATED --begin_exchange--> EXCHANGING --mark_authorized--> AUTHORIZED
    UNAUTHENTICATED / AUTHORIZED --begin_validation--> VALIDATING
    VALIDATING --mark_authorized--> AUTHORIZED
    VALIDATING --mark_unauthenticated--> UNAUTHENTICATED

``authorized`` is true only in ``AUTHORIZED``, and that state can only be
entered with a non-empty token.
"""

from __future__ import annotations

import enum
from typing import Any, Optional


class AuthState(str, enum.Enum):
    """Phases of the authorization lifecycle."""

    UNAUTHENTICATED = "unauthenticated"
    EXCHANGING = "exchanging"
    VALIDATING = "validating"
    AUTHORIZED = "authorized"


class CredentialState:
    """Application identity plus the current token and authorization phase.

    ``app_id`` and ``api_secret`` are fixed at construction. A token passed
    here is stored but not trusted: the state stays ``UNAUTHENTICATED``
    until the token is validated or replaced through the gateway.

    Args:
        app_id: VK application id.
        api_secret: VK application secret key. Never shown by ``repr()``.
        access_token: Optional token to send with requests.
        api_version: Optional API version sent as ``v`` with every call.
    """

    def __init__(
        self,
        app_id: str,
        api_secret: str,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
    ) -> None:
        self._app_id = str(app_id)
        self._api_secret = api_secret
        self._access_token = access_token
        self._api_version = api_version
        self._state = AuthState.UNAUTHENTICATED

    def __repr__(self) -> str:
        return (
            f"CredentialState(app_id={self._app_id!r}, "
            f"api_version={self._api_version!r}, state={self._state.value!r}, "
            f"has_token={self._access_token is not None})"
        )

    @property
    def app_id(self) -> str:
        return self._app_id

    @property
    def api_secret(self) -> str:
        return self._api_secret

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    @property
    def api_version(self) -> Optional[str]:
        return self._api_version

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def authorized(self) -> bool:
        return self._state == AuthState.AUTHORIZED

    def set_api_version(self, version: Any) -> None:
        """Pin the API version for all later requests. ``None`` unpins it."""
        self._api_version = None if version is None else str(version)

    def is_authorized(self) -> bool:
        return self.authorized

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def begin_exchange(self) -> AuthState:
        """Enter ``EXCHANGING`` and return the phase to restore on failure."""
        previous = self._state
        self._state = AuthState.EXCHANGING
        return previous

    def begin_validation(self) -> AuthState:
        """Enter ``VALIDATING`` and return the phase that was left."""
        previous = self._state
        self._state = AuthState.VALIDATING
        return previous

    def restore(self, state: AuthState) -> None:
        """Return to *state* after an interrupted exchange or validation."""
        self._state = state

    def mark_authorized(self, token: str) -> None:
        """Install a confirmed *token* and enter ``AUTHORIZED``.

        Raises:
            ValueError: If *token* is empty.
        """
        if not token:
            raise ValueError("An authorized state requires a non-empty access token")
        self._access_token = token
        self._state = AuthState.AUTHORIZED

    def mark_unauthenticated(self) -> None:
        """Drop authorization. The stored token, if any, is kept but untrusted."""
        self._state = AuthState.UNAUTHENTICATED
