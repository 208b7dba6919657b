"""Response decoding -- maps a :class:`~vksdk.models.TransportResponse` to call results.

The gateways use :func:`decode_json` and :func:`read_result` to turn raw
bodies into what :meth:`~vksdk.client.VK.call` returns. :func:`api_error`
and :func:`format_call_result` bridge the result to the output system for
the CLI.

A VK method call that fails on the application level still answers with a
well-formed body (``{"error": {"error_code": 5, "error_msg": ...}}``). That
body decodes normally; only unparseable bodies raise
:class:`~vksdk.exceptions.DecodeError`.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from vksdk.exceptions import DecodeError
from vksdk.models import ResponseFormat, TransportResponse
from vksdk.output import get_output

_EXCERPT = 200


def decode_json(response: TransportResponse) -> Any:
    """Parse the body as JSON.

    Raises:
        DecodeError: If the body is empty or not valid JSON.
    """
    text = response.text
    try:
        return json.loads(text)
    except ValueError as exc:
        raise DecodeError(
            f"Response (HTTP {response.status}) is not valid JSON: {exc}",
            body=text[:_EXCERPT],
        ) from exc


def read_result(response: TransportResponse, response_format: ResponseFormat) -> Any:
    """Return the decoded value for ``Decoded`` or the body text for ``Raw``."""
    if response_format.is_decoded:
        return decode_json(response)
    return response.text


def api_error(result: Any) -> Optional[tuple[Any, str]]:
    """Return ``(error_code, error_msg)`` if *result* is an API error payload."""
    if not isinstance(result, dict) or "error" not in result:
        return None
    err = result["error"]
    if isinstance(err, dict):
        return err.get("error_code"), str(err.get("error_msg", ""))
    return None, str(err)


def format_call_result(result: Any) -> None:
    """Print a call result through the global output manager.

    An API error payload is reported on stderr as well, so the data on
    stdout stays untouched for pipes.
    """
    output = get_output()
    err = api_error(result)
    if err is not None:
        code, message = err
        label = f"API error {code}" if code is not None else "API error"
        output.warning(f"{label}: {message}")
    output.format_response(result)
