"""Auth commands -- run the authorization flow and manage tokens.

Provides the ``vksdk auth`` sub-command group.

Typical workflow::

    vksdk auth url --scope friends,photos   # open the printed link
    vksdk auth exchange 3f1c0e...           # paste the code from the redirect
    vksdk call users.get user_ids=1         # the stored token is used
"""

from __future__ import annotations

from typing import Any

import typer

from vksdk.client.base import DEFAULT_CALLBACK_URL
from vksdk.exceptions import VKError
from vksdk.output import error, format_response, info, print_data, print_table, success, suggest


auth_app = typer.Typer(no_args_is_help=True)


def _masked(payload: dict[str, Any]) -> dict[str, Any]:
    shown = dict(payload)
    token = shown.get("access_token")
    if isinstance(token, str) and token:
        shown["access_token"] = f"{token[:4]}..." if len(token) > 8 else "***"
    return shown


@auth_app.command("url")
def auth_url(
    ctx: typer.Context,
    scope: str = typer.Option("", "--scope", help="Comma-separated scope list."),
    redirect_uri: str = typer.Option(
        DEFAULT_CALLBACK_URL, "--redirect-uri", help="Callback URL registered for the app."
    ),
    test_mode: bool = typer.Option(False, "--test-mode", help="Request a test-mode token."),
) -> None:
    """Print the authorization URL for the active profile.

    Only the app id is needed, so the secret source is not consulted.
    """
    from vksdk.client.base import authorize_url
    from vksdk.commands import active_profile

    try:
        profile = active_profile(ctx)
        url = authorize_url(profile.app_id, scope, redirect_uri, test_mode)
    except VKError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_data(url)
    suggest("Open it, approve access, then run: vksdk auth exchange CODE")


@auth_app.command("exchange")
def auth_exchange(
    ctx: typer.Context,
    code: str = typer.Argument(help="The code parameter from the redirect URL."),
    redirect_uri: str = typer.Option(
        DEFAULT_CALLBACK_URL, "--redirect-uri", help="Same callback URL used for 'auth url'."
    ),
) -> None:
    """Exchange an authorization code for a token and store it."""
    from vksdk.auth.credential_store import TokenEntry, TokenStore
    from vksdk.client import VK
    from vksdk.commands import active_profile

    try:
        profile = active_profile(ctx)
        with VK.from_profile(profile) as vk:
            payload = vk.exchange_code_for_token(code, redirect_uri)
    except VKError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    store = TokenStore(profile.name)
    store.save(TokenEntry.from_token_response(payload))
    success(f'Authorized. Token stored for "{profile.name}".')
    info(f"Token file: {store.path}")
    format_response(_masked(payload))


@auth_app.command("set-token")
def auth_set_token(
    ctx: typer.Context,
    token: str = typer.Argument(help="Access token to validate and store."),
) -> None:
    """Validate an existing access token and store it."""
    from vksdk.auth.credential_store import TokenEntry, TokenStore
    from vksdk.client import VK
    from vksdk.commands import active_profile

    try:
        profile = active_profile(ctx)
        with VK.from_profile(profile) as vk:
            vk.set_access_token(token)
    except VKError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    TokenStore(profile.name).save(TokenEntry(access_token=token))
    success(f'Token accepted and stored for "{profile.name}".')


@auth_app.command("validate")
def auth_validate(ctx: typer.Context) -> None:
    """Check whether the active profile's token is accepted by the API."""
    from vksdk.client import VK
    from vksdk.commands import active_profile
    from vksdk.exit_codes import EXIT_AUTH_FAILURE

    try:
        profile = active_profile(ctx)
        with VK.from_profile(profile) as vk:
            valid = vk.validate_token()
    except VKError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not valid:
        error("Token is missing or was rejected.")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)
    success("Token is valid.")


@auth_app.command("status")
def auth_status(ctx: typer.Context) -> None:
    """Show the active profile and its stored token (never the token itself)."""
    from vksdk.auth.credential_store import TokenStore
    from vksdk.commands import active_profile

    try:
        profile = active_profile(ctx)
    except VKError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    entry = TokenStore(profile.name).load()
    if entry is None:
        token_state = "none"
    elif entry.is_expired():
        token_state = "expired"
    else:
        token_state = "stored"
    expires = entry.expires_at.isoformat() if entry and entry.expires_at else ""
    print_table(
        ["profile", "app_id", "api_version", "token_source", "token", "user_id", "expires_at"],
        [[
            profile.name,
            profile.app_id,
            profile.api_version or "",
            profile.access_token_source or f"store:{profile.name}",
            token_state,
            str(entry.user_id) if entry and entry.user_id is not None else "",
            expires,
        ]],
        title="Auth status",
    )


@auth_app.command("logout")
def auth_logout(ctx: typer.Context) -> None:
    """Delete the stored token of the active profile."""
    from vksdk.auth.credential_store import TokenStore
    from vksdk.commands import active_profile

    try:
        profile = active_profile(ctx)
    except VKError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    TokenStore(profile.name).clear()
    success(f'Stored token removed for "{profile.name}".')
