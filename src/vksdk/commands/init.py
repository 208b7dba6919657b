"""Init command -- create a profile for a VK application.

Implements the ``vksdk init`` top-level command. A profile records the
application id, where to read the application secret (and optionally the
access token) from, the API version to pin, and HTTP settings. Secrets
themselves are never written to the profile.
"""

from __future__ import annotations

from typing import Optional

import typer

from vksdk.output import info, success, suggest, warning


def init_command(
    name: str = typer.Argument(help="Profile name."),
    app_id: str = typer.Option(..., "--app-id", help="VK application id."),
    secret_source: str = typer.Option(
        "prompt",
        "--secret-source",
        "-s",
        help="Where to read the app secret: env:VAR, file:/path, prompt.",
    ),
    token_source: Optional[str] = typer.Option(
        None,
        "--token-source",
        help="Where to read the access token: env:VAR, file:/path, prompt, store:PROFILE.",
    ),
    api_version: Optional[str] = typer.Option(
        None, "--api-version", help="API version to send as 'v' (e.g. 5.199)."
    ),
    timeout: float = typer.Option(30.0, "--timeout", help="Request timeout in seconds."),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Disable TLS certificate verification. Unsafe; for debugging proxies only.",
    ),
    make_default: bool = typer.Option(
        False, "--default", help="Make this the default profile."
    ),
) -> None:
    """Create or overwrite a profile.

    Example::

        vksdk init myapp --app-id 5123456 --secret-source env:VK_SECRET --api-version 5.199
    """
    from vksdk.config import load_global_config, profile_exists, save_global_config, save_profile
    from vksdk.models import Profile, RequestConfig

    if profile_exists(name):
        info(f'Profile "{name}" already exists and will be overwritten.')
    if insecure:
        warning("TLS verification disabled for this profile.")

    profile = Profile(
        name=name,
        app_id=app_id,
        api_secret_source=secret_source,
        access_token_source=token_source,
        api_version=api_version,
        request=RequestConfig(timeout=timeout, verify_ssl=not insecure),
    )
    save_profile(profile)

    if make_default:
        config = load_global_config()
        config.default_profile = name
        save_global_config(config)

    success(f'Profile "{name}" created.')
    suggest(f"Get an authorization link: vksdk --profile {name} auth url --scope friends")
