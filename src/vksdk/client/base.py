"""Shared request building for the sync and async gateways.

:class:`GatewayBase` holds the :class:`~vksdk.credentials.CredentialState`
and everything that does not touch the network: authorization URLs, the
token-endpoint URL, signed method-call requests, and the interpretation of
token-endpoint payloads. :class:`~vksdk.client.sync_client.VK` and
:class:`~vksdk.client.async_client.AsyncVK` add the I/O on top.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union
from urllib.parse import urlencode

from vksdk.auth.credential_store import TokenStore
from vksdk.config import resolve_credential
from vksdk.credentials import AuthState, CredentialState
from vksdk.exceptions import AlreadyAuthorizedError, AuthorizationError, DecodeError
from vksdk.models import Profile, ResponseFormat
from vksdk.output import get_output
from vksdk.signing import Clock, NonceFactory, random_nonce, sign_params, unix_timestamp
from vksdk.transport import USER_AGENT, endpoint_of

AUTHORIZE_URL = "https://oauth.vk.com/authorize"
ACCESS_TOKEN_URL = "https://oauth.vk.com/access_token"
API_URL = "https://api.vk.com/method/"
DEFAULT_CALLBACK_URL = "https://api.vk.com/blank.html"

# Cheap authenticated call used to tell whether a token is live.
VALIDATION_METHOD = "account.getAppPermissions"

FormatArg = Union[ResponseFormat, str]


@dataclass(frozen=True)
class PreparedCall:
    """A signed method call ready for the transport."""

    url: str
    http_method: str
    body: Optional[dict[str, str]]
    response_format: ResponseFormat


def _join_scopes(scopes: Union[str, Sequence[str]]) -> str:
    if isinstance(scopes, str):
        return scopes
    return ",".join(scopes)


def authorize_url(
    app_id: str,
    scopes: Union[str, Sequence[str]] = "",
    callback_url: str = DEFAULT_CALLBACK_URL,
    test_mode: bool = False,
) -> str:
    """Build the authorization URL from the application id alone."""
    params: dict[str, Any] = {
        "client_id": app_id,
        "scope": _join_scopes(scopes),
        "redirect_uri": callback_url,
        "response_type": "code",
    }
    if test_mode:
        params["test_mode"] = 1
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def profile_kwargs(profile: Profile) -> dict[str, Any]:
    """Resolve a profile into gateway constructor arguments.

    The access token comes from ``access_token_source`` when set, otherwise
    from the profile's token store when it holds an unexpired token.
    """
    token: Optional[str] = None
    if profile.access_token_source:
        token = resolve_credential(profile.access_token_source)
    else:
        entry = TokenStore(profile.name).load_valid()
        if entry is not None:
            token = entry.access_token
    return {
        "app_id": profile.app_id,
        "api_secret": resolve_credential(profile.api_secret_source),
        "access_token": token,
        "api_version": profile.api_version,
        "timeout": profile.request.timeout,
        "verify_ssl": profile.request.verify_ssl,
    }


class GatewayBase:
    """State and request building shared by :class:`VK` and :class:`AsyncVK`.

    Args:
        app_id: VK application id.
        api_secret: VK application secret key.
        access_token: Optional token. It is sent with calls but the client
            is not considered authorized until the token is confirmed.
        api_version: Optional API version sent as ``v``.
        clock: Source of the ``timestamp`` parameter.
        nonce: Source of the ``random`` parameter.
    """

    def __init__(
        self,
        app_id: str,
        api_secret: str,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
        clock: Clock = unix_timestamp,
        nonce: NonceFactory = random_nonce,
    ) -> None:
        self._credentials = CredentialState(
            app_id,
            api_secret,
            access_token=access_token,
            api_version=None if api_version is None else str(api_version),
        )
        self._clock = clock
        self._nonce = nonce
        self._headers = {"User-Agent": USER_AGENT}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._credentials!r})"

    @property
    def credentials(self) -> CredentialState:
        return self._credentials

    @property
    def access_token(self) -> Optional[str]:
        return self._credentials.access_token

    @property
    def state(self) -> AuthState:
        return self._credentials.state

    def set_api_version(self, version: Any) -> None:
        self._credentials.set_api_version(version)

    def is_authorized(self) -> bool:
        return self._credentials.is_authorized()

    # ------------------------------------------------------------------ #
    # URL building
    # ------------------------------------------------------------------ #

    def build_authorize_url(
        self,
        scopes: Union[str, Sequence[str]] = "",
        callback_url: str = DEFAULT_CALLBACK_URL,
        test_mode: bool = False,
    ) -> str:
        """Return the URL the user opens to grant access to the application.

        No request is made. Values are passed through exactly as given; a
        sequence of scope names is joined with commas.

        Args:
            scopes: Scope string (e.g. ``"friends,photos"``) or names.
            callback_url: Where the service redirects with ``?code=``.
            test_mode: Adds ``test_mode=1`` for applications in test mode.
        """
        return authorize_url(self._credentials.app_id, scopes, callback_url, test_mode)

    def build_api_url(self, method: str, format: FormatArg = ResponseFormat.decoded()) -> str:
        """``https://api.vk.com/method/<method>.<ext>``."""
        return f"{API_URL}{method}.{ResponseFormat.coerce(format).extension}"

    def _token_request_url(self, code: str, callback_url: str) -> str:
        params = {
            "client_id": self._credentials.app_id,
            "client_secret": self._credentials.api_secret,
            "code": code,
            "redirect_uri": callback_url,
        }
        return f"{ACCESS_TOKEN_URL}?{urlencode(params)}"

    def _prepare_call(
        self,
        method: str,
        params: Optional[Mapping[str, Any]],
        format: FormatArg,
        http_method: str,
        access_token: Optional[str] = None,
    ) -> PreparedCall:
        """Sign *params* and pick GET or POST.

        ``execute`` always goes out as POST; otherwise only the literal
        ``"post"`` selects POST.
        """
        response_format = ResponseFormat.coerce(format)
        signed = sign_params(
            params,
            self._credentials,
            clock=self._clock,
            nonce=self._nonce,
            access_token=access_token,
        )
        url = self.build_api_url(method, response_format)
        if method == "execute" or http_method == "post":
            return PreparedCall(url, "POST", signed, response_format)
        return PreparedCall(f"{url}?{urlencode(signed)}", "GET", None, response_format)

    # ------------------------------------------------------------------ #
    # Authorization flow helpers
    # ------------------------------------------------------------------ #

    def _check_exchange_allowed(self) -> None:
        if self._credentials.access_token is not None and self._credentials.authorized:
            raise AlreadyAuthorizedError()

    def _finish_exchange(self, payload: Any) -> dict[str, Any]:
        """Apply a decoded token-endpoint payload to the credential state."""
        if not isinstance(payload, dict):
            raise DecodeError(
                f"Unexpected token response type: {type(payload).__name__}",
                body=str(payload)[:200],
            )
        if "error" in payload:
            raise AuthorizationError(
                str(payload["error"]),
                payload.get("error_description"),
            )
        token = payload.get("access_token")
        if not token:
            raise AuthorizationError(
                "invalid_response", "token response has no access_token"
            )
        self._credentials.mark_authorized(str(token))
        get_output().debug(f"Authorized app {self._credentials.app_id}")
        return payload

    @staticmethod
    def _is_live(result: Any) -> bool:
        return isinstance(result, dict) and "response" in result

    @staticmethod
    def _debug_request(http_method: str, url: str) -> None:
        get_output().debug(f"{http_method} {endpoint_of(url)}")

    @staticmethod
    def _debug_response(url: str, status: int) -> None:
        get_output().debug(f"{endpoint_of(url)} -> HTTP {status}")
