"""Config commands -- view and modify global configuration and profiles.

Provides the ``vksdk config`` sub-command group. Settings are persisted in
the vksdk config directory.
"""

from __future__ import annotations

import typer

from vksdk.exit_codes import EXIT_INVALID_USAGE
from vksdk.output import error, format_response, info, print_table, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the global configuration."""
    from vksdk.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("list")
def config_list() -> None:
    """List profiles."""
    from vksdk.config import list_profiles, load_global_config, load_profile

    default = load_global_config().default_profile
    rows = []
    for name in list_profiles():
        profile = load_profile(name)
        rows.append([
            name,
            profile.app_id,
            profile.api_version or "",
            "*" if name == default else "",
        ])
    if not rows:
        info("No profiles. Create one with: vksdk init NAME --app-id ID")
        return
    print_table(["profile", "app_id", "api_version", "default"], rows, title="Profiles")


@config_app.command("use")
def config_use(
    name: str = typer.Argument(help="Profile to make the default."),
) -> None:
    """Set the default profile."""
    from vksdk.config import load_global_config, profile_exists, save_global_config

    if not profile_exists(name):
        error(f"Profile '{name}' not found.")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    config = load_global_config()
    config.default_profile = name
    save_global_config(config)
    success(f'Default profile set to "{name}".')


@config_app.command("remove")
def config_remove(
    name: str = typer.Argument(help="Profile to delete."),
) -> None:
    """Delete a profile and its stored token."""
    from vksdk.auth.credential_store import TokenStore
    from vksdk.config import delete_profile, load_global_config, save_global_config
    from vksdk.exceptions import ConfigError

    try:
        delete_profile(name)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    TokenStore(name).clear()
    config = load_global_config()
    if config.default_profile == name:
        config.default_profile = None
        save_global_config(config)
    success(f'Profile "{name}" removed.')
