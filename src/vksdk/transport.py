"""HTTP transport boundary for the gateways.

The gateways never talk to :mod:`httpx` directly. They depend on a
*transport*: any object exposing ``send(url, method, headers, body=None)``
that returns a :class:`~vksdk.models.TransportResponse`. This keeps the
connection handle owned by exactly one gateway and lets tests swap in a
stub.

Two httpx-backed implementations are provided:

* :class:`HttpxTransport` -- blocking, wraps :class:`httpx.Client`.
* :class:`AsyncHttpxTransport` -- non-blocking, wraps :class:`httpx.AsyncClient`.

Both map every :class:`httpx.HTTPError` and every HTTP 5xx response to
:class:`~vksdk.exceptions.TransportError`. 4xx responses are returned as
is because the OAuth endpoint reports rejected codes as JSON bodies with
4xx statuses.

TLS verification is on by default. ``verify_ssl=False`` must be asked for
explicitly and prints a warning every time a transport is built with it.
"""

from __future__ import annotations

from typing import Mapping, Optional, Protocol

import httpx

from vksdk import __version__
from vksdk.exceptions import TransportError
from vksdk.models import TransportResponse
from vksdk.output import get_output

DEFAULT_TIMEOUT = 30.0
USER_AGENT = f"vksdk/{__version__} (+httpx/{httpx.__version__})"

_INSECURE_WARNING = (
    "TLS certificate verification is DISABLED for VK API requests. "
    "Tokens and the application secret can be intercepted."
)


class Transport(Protocol):
    """Blocking transport capability used by :class:`~vksdk.client.VK`."""

    def send(
        self,
        url: str,
        method: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse: ...

    def close(self) -> None: ...


class AsyncTransport(Protocol):
    """Non-blocking transport capability used by :class:`~vksdk.client.AsyncVK`."""

    async def send(
        self,
        url: str,
        method: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse: ...

    async def aclose(self) -> None: ...


def endpoint_of(url: str) -> str:
    """Strip the query string; query strings carry secrets and are never shown."""
    return url.split("?", 1)[0]


def _client_options(
    timeout: float,
    verify_ssl: bool,
    user_agent: Optional[str],
) -> dict:
    if not verify_ssl:
        get_output().warning(_INSECURE_WARNING)
    return {
        "timeout": timeout,
        "verify": verify_ssl,
        "headers": {"User-Agent": user_agent or USER_AGENT},
        "follow_redirects": True,
    }


def _to_transport_response(
    response: httpx.Response,
    method: str,
    url: str,
) -> TransportResponse:
    if response.status_code >= 500:
        raise TransportError(
            f"{method} {endpoint_of(url)} failed: HTTP {response.status_code}",
            status=response.status_code,
        )
    return TransportResponse(
        status=response.status_code,
        body=response.content,
        headers=dict(response.headers),
    )


class HttpxTransport:
    """Blocking transport backed by :class:`httpx.Client`.

    Args:
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates. Disabling it is insecure and
            triggers a warning.
        user_agent: Overrides the default ``vksdk/<version>`` agent.
        transport: Optional low-level :class:`httpx.BaseTransport`
            (e.g. :class:`httpx.MockTransport` in tests).
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client: Optional[httpx.Client] = httpx.Client(
            transport=transport,
            **_client_options(timeout, verify_ssl, user_agent),
        )

    @property
    def closed(self) -> bool:
        return self._client is None

    def send(
        self,
        url: str,
        method: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        if self._client is None:
            raise TransportError("Transport is closed")
        try:
            response = self._client.request(
                method,
                url,
                headers=dict(headers or {}),
                data=dict(body) if body is not None else None,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {endpoint_of(url)} failed: {exc}") from exc
        return _to_transport_response(response, method, url)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


class AsyncHttpxTransport:
    """Non-blocking transport backed by :class:`httpx.AsyncClient`.

    Takes the same arguments as :class:`HttpxTransport`; *transport* must be
    an :class:`httpx.AsyncBaseTransport`.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client: Optional[httpx.AsyncClient] = httpx.AsyncClient(
            transport=transport,
            **_client_options(timeout, verify_ssl, user_agent),
        )

    @property
    def closed(self) -> bool:
        return self._client is None

    async def send(
        self,
        url: str,
        method: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[Mapping[str, str]] = None,
    ) -> TransportResponse:
        if self._client is None:
            raise TransportError("Transport is closed")
        try:
            response = await self._client.request(
                method,
                url,
                headers=dict(headers or {}),
                data=dict(body) if body is not None else None,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {endpoint_of(url)} failed: {exc}") from exc
        return _to_transport_response(response, method, url)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
