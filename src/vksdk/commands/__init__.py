"""Built-in CLI sub-commands for vksdk.

* :mod:`~vksdk.commands.init` -- create a profile for a VK application.
* :mod:`~vksdk.commands.config` -- view and modify global settings.
* :mod:`~vksdk.commands.auth` -- run the authorization flow and manage tokens.
* :mod:`~vksdk.commands.call` -- sign and send an arbitrary API method.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``auth`` and ``config``) or a plain callback
function registered directly on the root app (for ``init`` and ``call``).
"""

from __future__ import annotations

from typing import Optional

import typer

from vksdk.exceptions import ConfigError
from vksdk.models import Profile


def active_profile(ctx: typer.Context) -> Profile:
    """Resolve the profile selected by ``--profile``, the env, or config.

    Raises:
        ConfigError: If no profile can be resolved.
    """
    from vksdk.config import resolve_config

    cli_profile: Optional[str] = (ctx.obj or {}).get("profile")
    _, profile = resolve_config(cli_profile=cli_profile)
    if profile is None:
        raise ConfigError("No profile selected. Create one with: vksdk init NAME --app-id ID")
    return profile
