"""Built-in CLI sub-commands for nexusgem.

* :mod:`~nexusgem.commands.setup` -- run the interactive credential setup.
* :mod:`~nexusgem.commands.request` -- send an authenticated request.
* :mod:`~nexusgem.commands.config` -- show the stored record, edit the
  proxy hint.

Every command reads the :class:`~nexusgem.models.SetupOptions` resolved by
the root callback from ``ctx.obj["options"]``.
"""

from __future__ import annotations

import typer

from nexusgem.auth.manager import CredentialManager
from nexusgem.auth.prompter import ConsolePrompter
from nexusgem.models import SetupOptions


def options_from_context(ctx: typer.Context) -> SetupOptions:
    """Return the options resolved by the root callback, or the defaults."""
    options = (ctx.obj or {}).get("options")
    if options is None:
        from nexusgem.config import resolve_options

        options = resolve_options()
    return options


def manager_from_context(ctx: typer.Context) -> CredentialManager:
    """Create the invocation's :class:`CredentialManager` with a console prompter."""
    return CredentialManager(options_from_context(ctx), ConsolePrompter())
