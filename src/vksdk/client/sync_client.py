"""Blocking VK API gateway.

This module provides :class:`VK`, the blocking gateway used by the vksdk
CLI and by threaded callers. It layers on top of
:class:`~vksdk.client.base.GatewayBase`:

- **Code exchange** -- trades the authorization code for a token, once.
- **Token validation** -- a lightweight authenticated call decides
  whether a token is live.
- **Direct token assignment** -- validates, then installs, a token.
- **Signed calls** -- ``call(method, params)`` signs and dispatches any
  API method.

Authorization-mutating operations are serialized with a
:class:`threading.Lock`. The transport (an
:class:`~vksdk.transport.HttpxTransport` unless one is injected) is owned
by the gateway and released by :meth:`VK.close` or on leaving the
``with`` block.

See Also:
    :class:`~vksdk.client.async_client.AsyncVK` for the non-blocking
    equivalent.
"""

from __future__ import annotations

import threading
from typing import Any, Mapping, Optional

from vksdk.client.base import (
    DEFAULT_CALLBACK_URL,
    VALIDATION_METHOD,
    FormatArg,
    GatewayBase,
    profile_kwargs,
)
from vksdk.client.response import decode_json, read_result
from vksdk.exceptions import DecodeError, InvalidTokenError, TransportError
from vksdk.models import Profile, ResponseFormat
from vksdk.signing import Clock, NonceFactory, random_nonce, unix_timestamp
from vksdk.transport import DEFAULT_TIMEOUT, HttpxTransport, Transport


class VK(GatewayBase):
    """Blocking client for the VK API.

    Args:
        app_id: VK application id.
        api_secret: VK application secret key.
        access_token: Optional token to send with calls. The client is not
            authorized until the token is confirmed through
            :meth:`set_access_token`.
        api_version: Optional API version sent as ``v``.
        transport: Injected transport. When omitted an
            :class:`~vksdk.transport.HttpxTransport` is created and owned
            by this gateway.
        timeout: Request timeout for the default transport.
        verify_ssl: TLS verification for the default transport.
        clock: Source of the ``timestamp`` parameter.
        nonce: Source of the ``random`` parameter.

    Example::

        with VK("42", "s3cr3t") as vk:
            vk.set_access_token(token)
            friends = vk.call("friends.get", {"user_id": 1})
    """

    def __init__(
        self,
        app_id: str,
        api_secret: str,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
        transport: Optional[Transport] = None,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        clock: Clock = unix_timestamp,
        nonce: NonceFactory = random_nonce,
    ) -> None:
        super().__init__(
            app_id,
            api_secret,
            access_token=access_token,
            api_version=api_version,
            clock=clock,
            nonce=nonce,
        )
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(
            timeout=timeout, verify_ssl=verify_ssl
        )
        self._auth_lock = threading.Lock()

    @classmethod
    def from_profile(cls, profile: Profile, **kwargs: Any) -> VK:
        """Build a gateway from a configuration profile.

        Extra keyword arguments override the resolved ones.
        """
        options = profile_kwargs(profile)
        options.update(kwargs)
        return cls(**options)

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> VK:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the transport if this gateway created it."""
        if self._owns_transport:
            self._transport.close()

    # ------------------------------------------------------------------ #
    # Authorization
    # ------------------------------------------------------------------ #

    def exchange_code_for_token(
        self,
        code: str,
        callback_url: str = DEFAULT_CALLBACK_URL,
    ) -> dict[str, Any]:
        """Exchange an authorization code for an access token.

        Args:
            code: The ``code`` the service appended to the callback URL.
            callback_url: Must match the one used for the authorize URL.

        Returns:
            The full decoded token response (``access_token``,
            ``expires_in``, ``user_id``, ...).

        Raises:
            AlreadyAuthorizedError: If the client already holds an
                authorized token. No request is made.
            AuthorizationError: If the endpoint answers with ``error``.
            TransportError: On network failure.
            DecodeError: If the body is not JSON.
        """
        with self._auth_lock:
            self._check_exchange_allowed()
            previous = self._credentials.begin_exchange()
            try:
                url = self._token_request_url(code, callback_url)
                self._debug_request("GET", url)
                response = self._transport.send(url, "GET", headers=self._headers)
                self._debug_response(url, response.status)
                return self._finish_exchange(decode_json(response))
            except BaseException:
                self._credentials.restore(previous)
                raise

    def validate_token(self) -> bool:
        """Return whether the current token is accepted by the API.

        Returns ``False`` without any request when no token is set. Any
        failure (error payload, transport error, undecodable body) also
        yields ``False``.
        """
        return self._check_token(self._credentials.access_token)

    def set_access_token(self, token: str) -> None:
        """Validate *token* and install it as the authorized token.

        Raises:
            InvalidTokenError: If the API rejects *token*. The client is
                left unauthorized.
        """
        with self._auth_lock:
            previous = self._credentials.begin_validation()
            try:
                valid = self._check_token(token)
            except BaseException:
                self._credentials.restore(previous)
                raise
            if valid:
                self._credentials.mark_authorized(token)
                return
            self._credentials.mark_unauthenticated()
            raise InvalidTokenError()

    def _check_token(self, token: Optional[str]) -> bool:
        if not token:
            return False
        try:
            result = self._call(VALIDATION_METHOD, None, ResponseFormat.decoded(), "GET", token)
        except (TransportError, DecodeError):
            return False
        return self._is_live(result)

    # ------------------------------------------------------------------ #
    # Method calls
    # ------------------------------------------------------------------ #

    def call(
        self,
        method: str,
        params: Optional[Mapping[str, Any]] = None,
        format: FormatArg = ResponseFormat.decoded(),
        http_method: str = "GET",
    ) -> Any:
        """Sign and dispatch an API method call.

        Args:
            method: API method name, e.g. ``"friends.get"``.
            params: Method parameters. Not modified.
            format: :class:`~vksdk.models.ResponseFormat` (or a legacy
                string: ``"array"`` for decoded, anything else raw).
            http_method: ``"post"`` sends a form body; anything else is a
                GET. ``execute`` is always POSTed.

        Returns:
            The decoded JSON value, or the body text for a raw format.
            API error payloads are returned, not raised.

        Raises:
            TransportError: On network failure or HTTP 5xx.
            DecodeError: If a decoded result was requested and the body
                is not JSON.
        """
        return self._call(method, params, format, http_method)

    def _call(
        self,
        method: str,
        params: Optional[Mapping[str, Any]],
        format: FormatArg,
        http_method: str,
        access_token: Optional[str] = None,
    ) -> Any:
        prepared = self._prepare_call(method, params, format, http_method, access_token)
        self._debug_request(prepared.http_method, prepared.url)
        response = self._transport.send(
            prepared.url,
            prepared.http_method,
            headers=self._headers,
            body=prepared.body,
        )
        self._debug_response(prepared.url, response.status)
        return read_result(response, prepared.response_format)
