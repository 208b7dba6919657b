"""Tests for vksdk.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from vksdk.models import (
    GlobalConfig,
    Profile,
    RequestConfig,
    ResponseFormat,
    ResponseKind,
    TransportResponse,
)


class TestResponseFormat:
    def test_decoded(self) -> None:
        fmt = ResponseFormat.decoded()
        assert fmt.kind == ResponseKind.DECODED
        assert fmt.is_decoded is True
        assert fmt.extension == "json"

    def test_raw(self) -> None:
        fmt = ResponseFormat.raw("xml")
        assert fmt.is_decoded is False
        assert fmt.extension == "xml"

    @pytest.mark.parametrize("alias", ["array", "decoded"])
    def test_coerce_legacy_decoded_aliases(self, alias: str) -> None:
        assert ResponseFormat.coerce(alias) == ResponseFormat.decoded()

    def test_coerce_other_string_is_raw(self) -> None:
        assert ResponseFormat.coerce("xml") == ResponseFormat.raw("xml")
        assert ResponseFormat.coerce("json") == ResponseFormat.raw("json")

    def test_coerce_passes_instances_through(self) -> None:
        fmt = ResponseFormat.raw("xml")
        assert ResponseFormat.coerce(fmt) is fmt

    def test_frozen(self) -> None:
        fmt = ResponseFormat.decoded()
        with pytest.raises(ValidationError):
            fmt.name = "xml"  # type: ignore[misc]


class TestConfigModels:
    def test_request_defaults_verify_tls(self) -> None:
        config = RequestConfig()
        assert config.verify_ssl is True
        assert config.timeout == 30.0

    def test_profile_defaults(self) -> None:
        profile = Profile(name="app", app_id="42")
        assert profile.api_secret_source == "prompt"
        assert profile.access_token_source is None
        assert profile.api_version is None
        assert profile.request.verify_ssl is True

    def test_profile_requires_app_id(self) -> None:
        with pytest.raises(ValidationError):
            Profile(name="app")  # type: ignore[call-arg]

    def test_global_defaults(self) -> None:
        config = GlobalConfig()
        assert config.default_profile is None
        assert config.auto_select_single_profile is True
        assert config.output.format == "auto"


class TestTransportResponse:
    def test_text_decodes_utf8(self) -> None:
        response = TransportResponse(status=200, body="привет".encode("utf-8"))
        assert response.text == "привет"

    def test_text_is_lenient(self) -> None:
        response = TransportResponse(status=200, body=b"\xff\xfe")
        assert isinstance(response.text, str)
