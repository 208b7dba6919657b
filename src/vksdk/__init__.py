"""vksdk -- client library and CLI for the VK social network HTTP API.

The package signs and dispatches calls to ``https://api.vk.com/method/`` and
drives the OAuth authorization flow (authorize URL, code exchange, token
validation). Callers pass a method name and a parameter mapping; the
remote API's business semantics are left to the caller.

Typical workflow::

    from vksdk import VK

    with VK("42", "s3cr3t") as vk:
        url = vk.build_authorize_url("friends,photos")
        # ... user authorizes and returns with ?code=...
        vk.exchange_code_for_token(code)
        friends = vk.call("friends.get", {"user_id": 1})

Modules:
    credentials: Credential state and the authorization state machine.
    signing: Request parameter augmentation and MD5 signatures.
    transport: Injected HTTP transport (httpx-backed by default).
    client: :class:`VK` and :class:`AsyncVK` gateways.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and profile management.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from vksdk.client import AsyncVK, VK  # noqa: E402
from vksdk.credentials import AuthState, CredentialState  # noqa: E402
from vksdk.exceptions import (  # noqa: E402
    AlreadyAuthorizedError,
    AuthorizationError,
    DecodeError,
    InvalidTokenError,
    TransportError,
    VKError,
)
from vksdk.models import ResponseFormat  # noqa: E402

__all__ = [
    "__version__",
    "VK",
    "AsyncVK",
    "AuthState",
    "CredentialState",
    "ResponseFormat",
    "VKError",
    "AlreadyAuthorizedError",
    "AuthorizationError",
    "InvalidTokenError",
    "TransportError",
    "DecodeError",
]
