"""Setup command -- configure the repository URL and credentials.

Implements ``nexusgem setup``: runs the full setup flow (encryption
passphrase, repository URL, proxy, sign-in) for the selected scope and
reports the resulting state. Flags on the root command control which
prompts are forced::

    nexusgem setup                      # prompt only for what is missing
    nexusgem --repo internal setup      # a second repository in the same file
    nexusgem --nexus-clear setup        # re-enter URL and credentials
    nexusgem --encrypt setup            # encrypt the stored credentials
"""

from __future__ import annotations

import typer

from nexusgem.commands import manager_from_context
from nexusgem.exceptions import NexusError
from nexusgem.output import error, info, success


def setup_command(ctx: typer.Context) -> None:
    """Prompt for whatever is missing and store it.

    Raises:
        typer.Exit: With the error's exit code when setup fails (invalid
            URL, wrong encryption password, unreadable config file).
    """
    manager = manager_from_context(ctx)
    try:
        session = manager.setup()
        url = manager.url
        signed_in = manager.authorization is not None
    except NexusError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    scope = session.scope or "(default)"
    info(f"Repository {scope}: {url}")
    if session.proxy is not None:
        info(f"Proxy: {session.proxy.host}:{session.proxy.port}")
    if signed_in:
        success("Nexus credentials are set up.")
    else:
        info("No Nexus credentials stored; requests will be sent unauthenticated.")
