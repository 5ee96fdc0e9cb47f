"""Typer application and CLI entry point for nexusgem.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``setup``, ``request``, ``config``). The root
callback owns the flag surface shared by every command -- which config file
and scope to use, and how the setup flow should behave -- and resolves it
into :class:`~nexusgem.models.SetupOptions` stored on the Typer context.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.

See Also:
    :mod:`nexusgem.config`: Option precedence and file locations.
    :mod:`nexusgem.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from nexusgem import __version__
from nexusgem.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="nexusgem",
    help="Manage Nexus rubygems repository credentials and send authenticated requests.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Built-in commands
# ------------------------------------------------------------------ #

from nexusgem.commands.config import config_app  # noqa: E402
from nexusgem.commands.request import request_command  # noqa: E402
from nexusgem.commands.setup import setup_command  # noqa: E402

app.command("setup")(setup_command)
app.command("request")(request_command)
app.add_typer(config_app, name="config", help="Inspect and edit the stored configuration.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"nexusgem {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    nexus_config: Optional[Path] = typer.Option(
        None, "--nexus-config", help="File location of nexus config."
    ),
    repo: Optional[str] = typer.Option(
        None, "--repo", help="Pick the config under that key."
    ),
    secrets: Optional[Path] = typer.Option(
        None,
        "--secrets",
        help="Use and store secrets in the given file instead of the config file. "
        "The file location is remembered in the config file.",
    ),
    password: bool = typer.Option(
        False,
        "--password",
        help="Always prompt for the password and delete a stored password if it exists.",
    ),
    encrypt: bool = typer.Option(
        False,
        "--encrypt",
        help="Prompt for an encryption password and use it to encrypt stored "
        "credentials. Once set up, the prompt appears on every run; the "
        "encryption password is never stored.",
    ),
    nexus_clear: bool = typer.Option(
        False, "--nexus-clear", "-c", help="Clear the nexus config and prompt again."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~nexusgem.output.OutputManager` from
    CLI flags and stores the resolved
    :class:`~nexusgem.models.SetupOptions` in ``ctx.obj["options"]``.
    """
    from nexusgem.config import resolve_options
    from nexusgem.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["options"] = resolve_options(
        cli_config=nexus_config,
        cli_repo=repo,
        cli_secrets=secrets,
        password=password,
        encrypt=encrypt,
        clear=nexus_clear,
    )


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from nexusgem.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``nexusgem`` console script.

    Unhandled :class:`~nexusgem.exceptions.NexusError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from nexusgem.exceptions import NexusError
        from nexusgem.output import error

        if isinstance(exc, NexusError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
