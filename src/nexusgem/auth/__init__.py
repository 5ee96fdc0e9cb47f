"""Credential storage and the interactive setup flow.

The main entry points are:

- :func:`open_store` -- open one scope's record of a config file, plain or
  encrypted.
- :class:`ConfigStore` / :class:`EncryptedConfigStore` -- the two store
  implementations.
- :class:`CredentialManager` -- runs the setup state machine (encryption,
  URL, proxy, sign-in) and sends authenticated requests.
- :class:`Prompter` / :class:`ConsolePrompter` -- interactive I/O.

Typical usage::

    from nexusgem.auth import ConsolePrompter, CredentialManager
    from nexusgem.config import resolve_options

    manager = CredentialManager(resolve_options(), ConsolePrompter())
    manager.setup()
"""

from nexusgem.auth.credential_store import ConfigStore, EncryptedConfigStore, open_store
from nexusgem.auth.manager import CredentialManager, Session, basic_token
from nexusgem.auth.prompter import ConsolePrompter, Prompter

__all__ = [
    "ConfigStore",
    "ConsolePrompter",
    "CredentialManager",
    "EncryptedConfigStore",
    "Prompter",
    "Session",
    "basic_token",
    "open_store",
]
