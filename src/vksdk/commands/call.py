"""Call command -- sign and send any VK API method.

Implements ``vksdk call METHOD [key=value ...]``. Parameters are passed
through as strings; the active profile supplies the credentials.

Example::

    vksdk call users.get user_ids=1,2 fields=photo_50
    vksdk call execute code='return 1;'
    vksdk call users.get user_ids=1 --format xml
"""

from __future__ import annotations

from typing import Optional

import typer

from vksdk.exceptions import InvalidUsageError, VKError
from vksdk.output import error


def parse_params(pairs: Optional[list[str]]) -> dict[str, str]:
    """Turn ``["a=1", "b=x=y"]`` into ``{"a": "1", "b": "x=y"}``.

    Raises:
        InvalidUsageError: If an item has no ``=`` or an empty key.
    """
    params: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Expected key=value, got: {pair!r}")
        params[key] = value
    return params


def call_command(
    ctx: typer.Context,
    method: str = typer.Argument(help="API method name, e.g. users.get."),
    params: Optional[list[str]] = typer.Argument(None, help="Parameters as key=value."),
    post: bool = typer.Option(False, "--post", help="Send parameters as a POST form body."),
    response_format: str = typer.Option(
        "json",
        "--format",
        help="'json' decodes the response; any other value is requested and printed raw.",
    ),
) -> None:
    """Sign and send an API method call, printing the response."""
    from vksdk.client import VK
    from vksdk.client.response import format_call_result
    from vksdk.commands import active_profile
    from vksdk.models import ResponseFormat

    fmt = ResponseFormat.decoded() if response_format == "json" else ResponseFormat.raw(response_format)
    try:
        call_params = parse_params(params)
        profile = active_profile(ctx)
        with VK.from_profile(profile) as vk:
            result = vk.call(method, call_params, fmt, "post" if post else "GET")
    except VKError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    format_call_result(result)
