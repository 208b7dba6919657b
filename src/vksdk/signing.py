"""Request signing for VK API method calls.

Every call carries authentication parameters (``timestamp``, ``api_id``,
``random``, ``client_secret`` and, when present, ``access_token`` and
``v``) plus a ``sig`` parameter: the MD5 hex digest of all ``key=value``
pairs concatenated in ascending key order with no separator, followed by
the raw application secret.

Values are converted to strings *before* signing, so the text that is
signed is exactly the text that goes on the wire.

The clock and the nonce source are plain callables so tests can pin them
and check signatures byte for byte.
"""

from __future__ import annotations

import hashlib
import random
import time
from typing import Any, Callable, Mapping, Optional

from vksdk.credentials import CredentialState

NONCE_MAX = 10000

Clock = Callable[[], int]
NonceFactory = Callable[[], int]


def unix_timestamp() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


def random_nonce() -> int:
    """A random integer in ``0..NONCE_MAX`` inclusive."""
    return random.randint(0, NONCE_MAX)


def stringify(value: Any) -> str:
    """Render a parameter value the way it is signed and sent.

    Booleans become ``"1"`` / ``""``, ``None`` becomes ``""``, lists and
    tuples are joined with commas (VK's convention for id lists).
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    return str(value)


def signature_base(params: Mapping[str, str], secret: str) -> str:
    """Return the exact text that is hashed for *params*.

    The ``sig`` key itself is excluded.
    """
    pairs = "".join(
        f"{key}={value}"
        for key, value in sorted(params.items())
        if key != "sig"
    )
    return pairs + secret


def compute_signature(params: Mapping[str, str], secret: str) -> str:
    """MD5 hex digest of :func:`signature_base`."""
    return hashlib.md5(signature_base(params, secret).encode("utf-8")).hexdigest()


def sign_params(
    params: Optional[Mapping[str, Any]],
    credentials: CredentialState,
    clock: Clock = unix_timestamp,
    nonce: NonceFactory = random_nonce,
    access_token: Optional[str] = None,
) -> dict[str, str]:
    """Augment *params* with auth parameters and append ``sig``.

    The caller's mapping is not modified. Auth parameters overwrite
    caller-supplied keys of the same name; a caller-supplied ``sig`` is
    dropped.

    Args:
        params: Method parameters supplied by the caller.
        credentials: Source of app id, secret, token and API version.
        clock: Returns the Unix timestamp to embed.
        nonce: Returns the ``random`` value to embed.
        access_token: Token to send instead of the one held by
            *credentials* (used when validating a candidate token).

    Returns:
        A new dict with string values, sorted by key, ``sig`` last.
    """
    merged: dict[str, Any] = dict(params or {})
    merged["timestamp"] = clock()
    merged["api_id"] = credentials.app_id
    merged["random"] = nonce()
    merged["client_secret"] = credentials.api_secret

    token = access_token if access_token is not None else credentials.access_token
    if token is not None:
        merged["access_token"] = token
    if credentials.api_version is not None:
        merged["v"] = credentials.api_version

    merged.pop("sig", None)
    signed = {key: stringify(value) for key, value in sorted(merged.items())}
    signed["sig"] = compute_signature(signed, credentials.api_secret)
    return signed
