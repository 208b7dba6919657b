"""Non-blocking VK API gateway -- mirrors :class:`~vksdk.client.sync_client.VK`.

:class:`AsyncVK` has the same operations and semantics as
:class:`~vksdk.client.sync_client.VK`, but every network operation is a
coroutine that suspends at the transport (an
:class:`~vksdk.transport.AsyncHttpxTransport` unless one is injected).
Code exchange and token assignment are serialized with an
:class:`asyncio.Lock`.

Example::

    async with AsyncVK("42", "s3cr3t") as vk:
        await vk.set_access_token(token)
        friends = await vk.call("friends.get", {"user_id": 1})
"""

from __future__ import annotations

import asyncio
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
from vksdk.transport import DEFAULT_TIMEOUT, AsyncHttpxTransport, AsyncTransport


class AsyncVK(GatewayBase):
    """Asynchronous client for the VK API.

    Takes the same arguments as :class:`~vksdk.client.sync_client.VK`;
    *transport* must implement :class:`~vksdk.transport.AsyncTransport`.
    """

    def __init__(
        self,
        app_id: str,
        api_secret: str,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
        transport: Optional[AsyncTransport] = None,
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
        self._transport: AsyncTransport = transport or AsyncHttpxTransport(
            timeout=timeout, verify_ssl=verify_ssl
        )
        self._auth_lock = asyncio.Lock()

    @classmethod
    def from_profile(cls, profile: Profile, **kwargs: Any) -> AsyncVK:
        options = profile_kwargs(profile)
        options.update(kwargs)
        return cls(**options)

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncVK:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the transport if this gateway created it."""
        if self._owns_transport:
            await self._transport.aclose()

    # ------------------------------------------------------------------ #
    # Authorization
    # ------------------------------------------------------------------ #

    async def exchange_code_for_token(
        self,
        code: str,
        callback_url: str = DEFAULT_CALLBACK_URL,
    ) -> dict[str, Any]:
        """Exchange an authorization code for an access token.

        See :meth:`vksdk.client.sync_client.VK.exchange_code_for_token`.
        """
        async with self._auth_lock:
            self._check_exchange_allowed()
            previous = self._credentials.begin_exchange()
            try:
                url = self._token_request_url(code, callback_url)
                self._debug_request("GET", url)
                response = await self._transport.send(url, "GET", headers=self._headers)
                self._debug_response(url, response.status)
                return self._finish_exchange(decode_json(response))
            except BaseException:
                self._credentials.restore(previous)
                raise

    async def validate_token(self) -> bool:
        return await self._check_token(self._credentials.access_token)

    async def set_access_token(self, token: str) -> None:
        """Validate *token* and install it as the authorized token.

        Raises:
            InvalidTokenError: If the API rejects *token*.
        """
        async with self._auth_lock:
            previous = self._credentials.begin_validation()
            try:
                valid = await self._check_token(token)
            except BaseException:
                self._credentials.restore(previous)
                raise
            if valid:
                self._credentials.mark_authorized(token)
                return
            self._credentials.mark_unauthenticated()
            raise InvalidTokenError()

    async def _check_token(self, token: Optional[str]) -> bool:
        if not token:
            return False
        try:
            result = await self._call(
                VALIDATION_METHOD, None, ResponseFormat.decoded(), "GET", token
            )
        except (TransportError, DecodeError):
            return False
        return self._is_live(result)

    # ------------------------------------------------------------------ #
    # Method calls
    # ------------------------------------------------------------------ #

    async def call(
        self,
        method: str,
        params: Optional[Mapping[str, Any]] = None,
        format: FormatArg = ResponseFormat.decoded(),
        http_method: str = "GET",
    ) -> Any:
        """Sign and dispatch an API method call.

        See :meth:`vksdk.client.sync_client.VK.call`.
        """
        return await self._call(method, params, format, http_method)

    async def _call(
        self,
        method: str,
        params: Optional[Mapping[str, Any]],
        format: FormatArg,
        http_method: str,
        access_token: Optional[str] = None,
    ) -> Any:
        prepared = self._prepare_call(method, params, format, http_method, access_token)
        self._debug_request(prepared.http_method, prepared.url)
        response = await self._transport.send(
            prepared.url,
            prepared.http_method,
            headers=self._headers,
            body=prepared.body,
        )
        self._debug_response(prepared.url, response.status)
        return read_result(response, prepared.response_format)
