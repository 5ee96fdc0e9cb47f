"""Credential setup flow -- the per-invocation state machine.

:class:`CredentialManager` owns a :class:`Session` for one command
invocation and walks it through four independent steps in fixed order:

1. **Encryption** -- when ``--encrypt`` is given or the record is already
   encrypted, ask for the passphrase and re-open the store with it. This
   must precede every read of ``authorization``.
2. **URL** -- when no URL is stored or ``--nexus-clear`` is given, ask for
   the repository URL.
3. **Proxy** -- resolve the outbound proxy for the URL.
4. **Sign-in** -- when no authorization is stored, ``--nexus-clear`` is
   given, or the password must always be prompted, ask for credentials.

Any subset of the steps may run. Afterwards :meth:`CredentialManager.make_request`
sends authenticated requests using the session's URL, proxy and token.

See Also:
    :mod:`nexusgem.auth.credential_store` -- the stores the session holds.
    :class:`~nexusgem.client.request_builder.RequestBuilder` -- request
    construction and dispatch.
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass
from typing import Optional, Union

import httpx

from nexusgem.auth.credential_store import AUTHORIZATION, ConfigStore, open_store
from nexusgem.auth.prompter import Prompter
from nexusgem.client.request_builder import Customize, RequestBuilder
from nexusgem.exceptions import ConfigError, UserInputError
from nexusgem.models import (
    ALWAYS_PROMPT_MARKER,
    AlwaysPromptAuthorization,
    Authorization,
    HTTPMethod,
    ProxySpec,
    SetupOptions,
    TokenAuthorization,
    dump_authorization,
    parse_authorization,
)
from nexusgem.proxy import KeyValueLookup, ProxyResolver

_WHITESPACE = re.compile(r"\s+")


def basic_token(username: str, password: str) -> str:
    """Return the ``Authorization`` value for HTTP Basic auth, without line breaks."""
    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return "Basic " + _WHITESPACE.sub("", encoded)


@dataclass
class Session:
    """State of one invocation. Never persisted.

    Attributes:
        scope: Active scope key (``None`` for the top-level record).
        store: The open store; replaced when the encryption passphrase is
            supplied.
        proxy: Proxy resolved for the repository URL.
        token: Credential entered this run while the always-prompt marker
            is stored; used for requests but never written to disk.
    """

    scope: Optional[str]
    store: ConfigStore
    proxy: Optional[ProxySpec] = None
    token: Optional[str] = None


class CredentialManager:
    """Collects and maintains repository URL and credentials for one invocation.

    Args:
        options: Resolved flag surface (config file, scope, behaviour flags).
        prompter: Interactive I/O used for every question and notice.
        environ: Environment lookup for proxy resolution. Defaults to
            ``os.environ``.
        transport: Optional httpx transport handed to
            :class:`~nexusgem.client.request_builder.RequestBuilder`.

    Example::

        manager = CredentialManager(resolve_options(), ConsolePrompter())
        manager.setup()
        response = manager.make_request("GET", "api/v1/dependencies")
    """

    def __init__(
        self,
        options: SetupOptions,
        prompter: Prompter,
        environ: Optional[KeyValueLookup] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._options = options
        self._prompter = prompter
        self._environ = environ
        self._transport = transport
        self._session: Optional[Session] = None

    # ------------------------------------------------------------------ #
    # Session and stored values
    # ------------------------------------------------------------------ #

    @property
    def options(self) -> SetupOptions:
        return self._options

    @property
    def session(self) -> Session:
        """The invocation's session, opening the store on first access."""
        if self._session is None:
            self._session = Session(scope=self._options.repo, store=self._open())
        return self._session

    @property
    def store(self) -> ConfigStore:
        return self.session.store

    @property
    def location(self) -> str:
        """Where credentials are written, for user-facing notices."""
        store = self.store
        return str(store.secrets_path or store.path)

    @property
    def url(self) -> Optional[str]:
        """Stored repository URL, without a trailing slash."""
        url = self.store.get("url")
        return url.rstrip("/") if url else None

    @property
    def stored_authorization(self) -> Optional[Authorization]:
        """The stored authorization variant (decrypted when encrypted).

        Raises:
            DecryptionError: If the passphrase does not match.
            ConfigError: If the stored value has an unknown shape.
        """
        try:
            return parse_authorization(self.store.get(AUTHORIZATION))
        except ValueError as exc:
            raise ConfigError(f"Invalid authorization in {self.store.path}: {exc}") from exc

    @property
    def authorization(self) -> Optional[str]:
        """The ``Authorization`` header value to send, if any."""
        if self.session.token is not None:
            return self.session.token
        stored = self.stored_authorization
        if isinstance(stored, TokenAuthorization):
            return stored.value
        return None

    def always_prompt_password(self) -> bool:
        """True if ``--password`` was given or the always-prompt marker is stored.

        The marker is never encrypted, so this never needs the passphrase.
        """
        if self._options.password:
            return True
        return self.store.get_raw(AUTHORIZATION) == ALWAYS_PROMPT_MARKER

    # ------------------------------------------------------------------ #
    # Setup flow
    # ------------------------------------------------------------------ #

    def setup(self) -> Session:
        """Run the setup steps whose guards fire and return the session.

        Raises:
            UserInputError: If the entered URL has no host. Nothing is
                stored and sign-in is not attempted.
        """
        if self._options.encrypt or self.store.is_encrypted():
            self.prompt_encryption()
        if not self.store.has("url") or self._options.clear:
            self.configure_url()
        self.use_proxy()
        if (
            not self.store.has(AUTHORIZATION)
            or self._options.clear
            or self.always_prompt_password()
        ):
            self.sign_in()
        return self.session

    def prompt_encryption(self) -> None:
        """Ask for the encryption passphrase and re-open the store with it."""
        passphrase = self._prompter.ask_secret(
            "Enter your Nexus encryption credentials (no prompt)"
        )
        self.session.store = self._open(passphrase)

    def configure_url(self) -> None:
        """Ask for the repository URL and store it without a trailing slash.

        Raises:
            UserInputError: If the answer is not a URL with a host.
        """
        self._prompter.notify("Enter the URL of the rubygems repository on a Nexus server")
        answer = self._prompter.ask("URL: ").strip()

        try:
            host = httpx.URL(answer).host
        except httpx.InvalidURL:
            host = ""
        if not host:
            raise UserInputError("no URL given")

        self.store.set("url", answer.rstrip("/"))
        self._prompter.notify(f"The Nexus URL has been stored in {self.store.path}")

    def use_proxy(self) -> Optional[ProxySpec]:
        """Resolve the proxy for the stored URL and activate it for this session."""
        resolver = ProxyResolver(environ=self._environ, settings=self.store)
        self.session.proxy = resolver.resolve(self.url)
        return self.session.proxy

    def sign_in(self) -> None:
        """Ask for username and password and store (or clear) the credentials."""
        self._prompter.notify("Enter your Nexus credentials")
        username = self._prompter.ask("Username: ") or ""
        password = self._prompter.ask_secret("Password: ") or ""

        if username or password:
            token = basic_token(username, password)
            if self.always_prompt_password():
                self.session.token = token
                self.store.set(AUTHORIZATION, dump_authorization(AlwaysPromptAuthorization()))
                self._prompter.notify("Your Nexus credentials will be used for this session only")
            else:
                self.store.set(AUTHORIZATION, token)
                self._prompter.notify(f"Your Nexus credentials have been stored in {self.location}")
        elif self.always_prompt_password():
            if self._options.password:
                self.store.set(AUTHORIZATION, dump_authorization(AlwaysPromptAuthorization()))
        else:
            self.store.delete(AUTHORIZATION)
            self.session.token = None
            self._prompter.notify(f"Your Nexus credentials have been deleted from {self.location}")

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def request_builder(self) -> RequestBuilder:
        """Return a :class:`RequestBuilder` bound to the session's URL, proxy and token.

        Raises:
            ConfigError: If no repository URL is configured yet.
        """
        url = self.url
        if not url:
            raise ConfigError("No Nexus URL configured; run 'nexusgem setup' first")
        return RequestBuilder(
            url,
            proxy=self.session.proxy,
            authorization=self.authorization,
            transport=self._transport,
        )

    def make_request(
        self,
        method: Union[str, HTTPMethod],
        path: str,
        customize: Optional[Customize] = None,
    ) -> httpx.Response:
        """Send an authenticated request relative to the repository URL."""
        return self.request_builder().make_request(method, path, customize)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _open(self, passphrase: Optional[str] = None) -> ConfigStore:
        return open_store(
            self._options.config_path,
            scope=self._options.repo,
            passphrase=passphrase,
            secrets_path=self._options.secrets_path,
        )
