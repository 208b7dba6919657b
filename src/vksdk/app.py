"""The ``vksdk`` command line.

Registers ``init``, ``config``, ``auth`` and ``call`` on one Typer app.
Global flags are handled in :func:`main_callback`: they pick the output
format and the profile that the sub-commands resolve through
:func:`vksdk.commands.active_profile`.

:func:`main` is the console-script entry point.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from vksdk import __version__
from vksdk.commands.auth import auth_app
from vksdk.commands.call import call_command
from vksdk.commands.config import config_app
from vksdk.commands.init import init_command
from vksdk.exceptions import ConfigError, VKError
from vksdk.exit_codes import EXIT_GENERIC_FAILURE
from vksdk.output import OutputFormat, OutputManager, error, set_output


app = typer.Typer(
    name="vksdk",
    help="Sign and send VK API calls, and run the VK OAuth flow.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("init")(init_command)
app.command("call")(call_command)
app.add_typer(config_app, name="config", help="Configuration and profiles.")
app.add_typer(auth_app, name="auth", help="Authorization flow and tokens.")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"vksdk {__version__}")
        raise typer.Exit()


def _default_format() -> OutputFormat:
    """``output.format`` from the global config; ``AUTO`` if unset or unreadable.

    An unreadable config is reported again by the command that needs it.
    """
    from vksdk.config import load_global_config

    try:
        return OutputFormat(load_global_config().output.format)
    except (ConfigError, ValueError):
        return OutputFormat.AUTO


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Print the vksdk version and exit.",
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Application profile (see 'vksdk config list')."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON."),
    plain_output: bool = typer.Option(
        False, "--plain", help="Print results as tab-separated text."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Never use colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print results and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log each request and response status to stderr."
    ),
) -> None:
    """Install the output manager and remember the selected profile."""
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = _default_format()

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile


def _exit_on_sigint() -> None:
    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Save the current traceback under ``<data_dir>/logs`` and return its path."""
    from vksdk.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text(f"vksdk {__version__}\n{traceback.format_exc()}")
    return str(log_path)


def main() -> None:
    """Console-script entry point.

    A :class:`~vksdk.exceptions.VKError` that escapes a command exits with
    its ``exit_code``; any other exception is logged to a crash file.
    """
    _exit_on_sigint()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except VKError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Traceback saved to {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
