"""Canonical Pydantic models shared across all nexusgem modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Stored configuration** -- :class:`ConfigRecord` describes one scope's
record in the JSON config file, and the :data:`Authorization` variants
(:class:`TokenAuthorization`, :class:`AlwaysPromptAuthorization`) describe
what can be stored in its ``authorization`` field.

**Resolved runtime values** -- :class:`ProxySpec` (the outcome of proxy
resolution) and :class:`SetupOptions` (the resolved flag surface).

**Request vocabulary** -- :class:`HTTPMethod`.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Authorization variants ---

ALWAYS_PROMPT_MARKER: dict[str, str] = {"prompt": "always"}
"""On-disk form of :class:`AlwaysPromptAuthorization`.

A JSON object rather than a string, so that no real credential can ever be
mistaken for the marker.
"""


class TokenAuthorization(BaseModel):
    """A stored ``Authorization`` header value, e.g. ``"Basic dXNlcjpwYXNz"``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["token"] = "token"
    value: str


class AlwaysPromptAuthorization(BaseModel):
    """Marker meaning "never store a credential, prompt on every invocation"."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["always_prompt"] = "always_prompt"


Authorization = Union[TokenAuthorization, AlwaysPromptAuthorization]
"""The non-empty states of a record's ``authorization`` field."""


def parse_authorization(raw: Any) -> Optional[Authorization]:
    """Convert a stored ``authorization`` value into its tagged variant.

    Args:
        raw: The JSON value found in the record (``None`` when absent).

    Returns:
        ``None`` for an absent value, :class:`AlwaysPromptAuthorization` for
        the marker object, :class:`TokenAuthorization` for a string.

    Raises:
        ValueError: If the stored value has an unknown shape.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        return TokenAuthorization(value=raw)
    if raw == ALWAYS_PROMPT_MARKER:
        return AlwaysPromptAuthorization()
    raise ValueError(f"Unrecognised authorization value of type {type(raw).__name__}")


def dump_authorization(auth: Optional[Authorization]) -> Any:
    """Inverse of :func:`parse_authorization`."""
    if auth is None:
        return None
    if isinstance(auth, AlwaysPromptAuthorization):
        return dict(ALWAYS_PROMPT_MARKER)
    return auth.value


# --- Stored record ---


class ConfigRecord(BaseModel):
    """One scope's settings as read from the config file.

    ``config show`` validates the record against this model before
    printing it. The stores operate on the raw mapping so that unknown
    fields (and, for the unscoped record, sibling scope records) survive
    untouched.

    Attributes:
        url: Base URL of the rubygems repository, never with a trailing slash.
        authorization: Stored authorization (possibly ciphertext when
            ``salt`` is present).
        http_proxy: Proxy hint. A proxy URL string, or ``False`` for
            "never use a proxy".
        secrets: Location of a separate secrets file, if one is in use.
        salt: Base64 PBKDF2 salt; its presence marks the authorization as
            encrypted.
    """

    model_config = ConfigDict(extra="allow")

    url: Optional[str] = None
    authorization: Optional[Union[str, dict[str, str]]] = None
    http_proxy: Optional[Union[str, bool]] = None
    secrets: Optional[str] = None
    salt: Optional[str] = None


# --- Proxy ---


class ProxySpec(BaseModel):
    """An HTTP/HTTPS forward proxy to route requests through.

    Attributes:
        scheme: Proxy URL scheme (``http`` or ``https``).
        host: Proxy host name or address.
        port: Proxy port; the scheme default when the URL omits it.
        user: Optional user name embedded in the proxy URL.
        password: Optional password embedded in the proxy URL.
    """

    model_config = ConfigDict(frozen=True)

    scheme: str = "http"
    host: str
    port: int
    user: Optional[str] = None
    password: Optional[str] = None

    @property
    def url(self) -> str:
        """Proxy URL without credentials, suitable for :class:`httpx.Proxy`."""
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def auth(self) -> Optional[tuple[str, str]]:
        """``(user, password)`` when the proxy URL embedded a user name."""
        if self.user is None:
            return None
        return (self.user, self.password or "")


# --- Options ---


class SetupOptions(BaseModel):
    """The resolved flag surface consumed by :class:`~nexusgem.auth.manager.CredentialManager`.

    Attributes:
        config_path: Config file to read and write.
        repo: Scope key selecting a record inside the config file. ``None``
            selects the top-level record.
        secrets_path: Separate file for secret fields, if requested.
        password: Always prompt for the password and never store it.
        encrypt: Prompt for an encryption passphrase and encrypt the stored
            credential with it.
        clear: Re-prompt for URL and credentials, replacing stored values.
    """

    config_path: Path
    repo: Optional[str] = None
    secrets_path: Optional[Path] = None
    password: bool = False
    encrypt: bool = False
    clear: bool = False


# --- Requests ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods supported by :class:`~nexusgem.client.request_builder.RequestBuilder`."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class RequestDraft(BaseModel):
    """Mutable request description handed to ``customize`` callbacks.

    Callbacks may add headers, query parameters, or a body before the
    request is built and dispatched.
    """

    method: HTTPMethod
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, Any] = Field(default_factory=dict)
    content: Optional[Union[str, bytes]] = None
