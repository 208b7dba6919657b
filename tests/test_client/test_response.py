"""Tests for vksdk.client.response -- decoding and CLI rendering of call results."""

from __future__ import annotations

import json

import pytest

from vksdk.client.response import api_error, decode_json, format_call_result, read_result
from vksdk.exceptions import DecodeError
from vksdk.models import ResponseFormat, TransportResponse
from vksdk.output import OutputFormat, OutputManager, set_output


def _response(body: bytes, status: int = 200) -> TransportResponse:
    return TransportResponse(status=status, body=body)


class TestDecodeJson:
    def test_object(self) -> None:
        assert decode_json(_response(b'{"response": [1, 2]}')) == {"response": [1, 2]}

    def test_scalar(self) -> None:
        assert decode_json(_response(b"1")) == 1

    def test_unicode(self) -> None:
        body = json.dumps({"response": "Привет"}, ensure_ascii=False).encode("utf-8")
        assert decode_json(_response(body)) == {"response": "Привет"}

    def test_invalid(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode_json(_response(b"<html>502 Bad Gateway</html>", status=200))
        assert "HTTP 200" in str(exc_info.value)
        assert exc_info.value.body.startswith("<html>")

    def test_excerpt_is_truncated(self) -> None:
        with pytest.raises(DecodeError) as exc_info:
            decode_json(_response(b"x" * 5000))
        assert len(exc_info.value.body) == 200

    def test_empty(self) -> None:
        with pytest.raises(DecodeError):
            decode_json(_response(b""))


class TestReadResult:
    def test_decoded(self) -> None:
        result = read_result(_response(b'{"response": 1}'), ResponseFormat.decoded())
        assert result == {"response": 1}

    def test_raw_returns_text_unparsed(self) -> None:
        result = read_result(_response(b"not json at all"), ResponseFormat.raw("xml"))
        assert result == "not json at all"


class TestApiError:
    def test_error_object(self) -> None:
        payload = {"error": {"error_code": 5, "error_msg": "User authorization failed"}}
        assert api_error(payload) == (5, "User authorization failed")

    def test_error_string(self) -> None:
        assert api_error({"error": "invalid_request"}) == (None, "invalid_request")

    def test_success(self) -> None:
        assert api_error({"response": []}) is None

    def test_non_dict(self) -> None:
        assert api_error("<xml/>") is None


class TestFormatCallResult:
    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(format=OutputFormat.JSON, no_color=True))
        format_call_result({"response": {"count": 1}})
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"response": {"count": 1}}
        assert captured.err == ""

    def test_api_error_warns_on_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(format=OutputFormat.JSON, no_color=True))
        payload = {"error": {"error_code": 15, "error_msg": "Access denied"}}
        format_call_result(payload)
        captured = capsys.readouterr()
        assert json.loads(captured.out) == payload
        assert "API error 15: Access denied" in captured.err

    def test_raw_text(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        format_call_result("<response>1</response>")
        assert capsys.readouterr().out.strip() == "<response>1</response>"
