"""Interactive prompting used by the credential setup flow.

:class:`~nexusgem.auth.manager.CredentialManager` never reads from the
terminal itself; it talks to a :class:`Prompter`. :class:`ConsolePrompter`
is the interactive implementation, tests use a scripted fake.
"""

from __future__ import annotations

from typing import Protocol

import typer

from nexusgem.output import get_output


class Prompter(Protocol):
    """Synchronous question/answer interface. Answers are always strings, possibly empty."""

    def ask(self, prompt: str) -> str:
        """Ask a question with the answer echoed."""
        ...

    def ask_secret(self, prompt: str) -> str:
        """Ask a question with echo suppressed."""
        ...

    def notify(self, message: str) -> None:
        """Tell the user something; no answer expected."""
        ...


class ConsolePrompter:
    """Prompt on the terminal via :func:`typer.prompt`.

    Notices go to stderr through the global output manager so that stdout
    stays reserved for response data.
    """

    def ask(self, prompt: str) -> str:
        return typer.prompt(
            prompt.rstrip().rstrip(":"), default="", show_default=False, err=True
        )

    def ask_secret(self, prompt: str) -> str:
        return typer.prompt(
            prompt.rstrip().rstrip(":"),
            default="",
            show_default=False,
            hide_input=True,
            err=True,
        )

    def notify(self, message: str) -> None:
        get_output().info(message)
