"""Canonical Pydantic models shared across all vksdk modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`OutputConfig`, :class:`GlobalConfig`,
    and :class:`Profile`.

**Request/response models** -- used by the gateway and the transport:
    :class:`ResponseKind`, :class:`ResponseFormat`, and
    :class:`TransportResponse`.
"""

from __future__ import annotations

import enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP settings applied to every request made through a profile."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(
        default=True,
        description="Verify TLS certificates. Disabling this is insecure.",
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/vksdk/config.json``.

    Loaded and saved by :func:`~vksdk.config.load_global_config` and
    :func:`~vksdk.config.save_global_config`. See
    :func:`~vksdk.config.resolve_config` for the precedence chain.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    output: OutputConfig = Field(default_factory=OutputConfig)


class Profile(BaseModel):
    """Per-application profile stored under the ``profiles/`` config directory.

    A profile names one VK application. Secrets are never stored inline:
    ``api_secret_source`` and ``access_token_source`` are credential source
    descriptors resolved by :func:`~vksdk.config.resolve_credential`.

    Example::

        Profile(
            name="myapp",
            app_id="5123456",
            api_secret_source="env:VK_API_SECRET",
            api_version="5.199",
        )
    """

    model_config = ConfigDict(extra="allow")

    name: str
    app_id: str = Field(description="VK application id")
    api_secret_source: str = Field(
        default="prompt",
        description="Credential source for the app secret: env:VAR, file:/path, prompt",
    )
    access_token_source: Optional[str] = Field(
        default=None,
        description="Credential source for the access token: env:VAR, file:/path, "
        "prompt, store:PROFILE",
    )
    api_version: Optional[str] = Field(
        default=None, description="API version sent as 'v' with every call"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Request / response ---


class ResponseKind(str, enum.Enum):
    """How a method call's response body is handed back to the caller."""

    DECODED = "decoded"
    RAW = "raw"


_DECODED_ALIASES = ("array", "decoded")


class ResponseFormat(BaseModel):
    """Requested response format for :meth:`~vksdk.client.VK.call`.

    Two variants exist:

    * ``ResponseFormat.decoded()`` -- the endpoint is asked for JSON and the
      parsed value is returned.
    * ``ResponseFormat.raw("xml")`` -- the endpoint is asked for that format
      directly and the body text is returned untouched.

    The legacy string spelling is accepted through :meth:`coerce`:
    ``"array"`` and ``"decoded"`` mean decoded, any other string is a raw
    format name.
    """

    model_config = ConfigDict(frozen=True)

    kind: ResponseKind = ResponseKind.DECODED
    name: str = "json"

    @classmethod
    def decoded(cls) -> ResponseFormat:
        return cls()

    @classmethod
    def raw(cls, name: str) -> ResponseFormat:
        return cls(kind=ResponseKind.RAW, name=name)

    @classmethod
    def coerce(cls, value: Union[ResponseFormat, str]) -> ResponseFormat:
        """Return *value* as a :class:`ResponseFormat`, mapping legacy strings."""
        if isinstance(value, ResponseFormat):
            return value
        if value in _DECODED_ALIASES:
            return cls.decoded()
        return cls.raw(value)

    @property
    def is_decoded(self) -> bool:
        return self.kind == ResponseKind.DECODED

    @property
    def extension(self) -> str:
        """The suffix appended to the method name in the endpoint URL."""
        return "json" if self.is_decoded else self.name


class TransportResponse(BaseModel):
    """What a :class:`~vksdk.transport.Transport` hands back for one request."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
