"""VK API gateways.

Provides a blocking and a non-blocking gateway with identical semantics:

    :class:`VK` -- backed by :class:`~vksdk.transport.HttpxTransport`.
    :class:`AsyncVK` -- backed by :class:`~vksdk.transport.AsyncHttpxTransport`.

Both are context managers that release the transport they created on exit.

Example::

    from vksdk.client import VK

    with VK("42", "s3cr3t", api_version="5.199") as vk:
        print(vk.build_authorize_url("friends"))
"""

from vksdk.client.async_client import AsyncVK
from vksdk.client.base import (
    ACCESS_TOKEN_URL,
    API_URL,
    AUTHORIZE_URL,
    DEFAULT_CALLBACK_URL,
    VALIDATION_METHOD,
)
from vksdk.client.sync_client import VK

__all__ = [
    "VK",
    "AsyncVK",
    "AUTHORIZE_URL",
    "ACCESS_TOKEN_URL",
    "API_URL",
    "DEFAULT_CALLBACK_URL",
    "VALIDATION_METHOD",
]
