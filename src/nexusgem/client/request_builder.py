"""Build and dispatch authenticated requests against a Nexus repository.

:class:`RequestBuilder` turns ``(method, path)`` into a request against the
stored repository URL, routes it through the resolved proxy, attaches the
authorization header, lets the caller customise the request, and sends it
with a blocking :class:`httpx.Client`. The raw :class:`httpx.Response` is
returned; interpreting status codes is the caller's business.
"""

from __future__ import annotations

from typing import Callable, Optional, Union

import httpx

from nexusgem import __version__
from nexusgem.exceptions import ConnectionError_, InvalidMethodError
from nexusgem.models import HTTPMethod, ProxySpec, RequestDraft
from nexusgem.output import get_output

READ_TIMEOUT = 300.0
"""Gem uploads can be large and users are often on slow VPN links."""

CONNECT_TIMEOUT = 30.0

DEFAULT_USER_AGENT = f"nexusgem/{__version__}"

Customize = Callable[[RequestDraft], None]


def coerce_method(method: Union[str, HTTPMethod]) -> HTTPMethod:
    """Return *method* as an :class:`HTTPMethod`.

    Raises:
        InvalidMethodError: For anything but GET, POST, PUT and DELETE.
    """
    if isinstance(method, HTTPMethod):
        return method
    try:
        return HTTPMethod(str(method).upper())
    except ValueError:
        raise InvalidMethodError(f"Unsupported HTTP method: {method!r}") from None


class RequestBuilder:
    """Construct and send requests relative to a repository base URL.

    Args:
        base_url: Repository URL without a trailing slash.
        proxy: Proxy to route requests through, or ``None`` for direct.
        authorization: ``Authorization`` header value. Never logged.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.
        user_agent: ``User-Agent`` header value.

    Example::

        builder = RequestBuilder("https://nexus.example.com/repository/gems",
                                 authorization="Basic YWxpY2U6czNjcmV0")
        response = builder.make_request("GET", "api/v1/dependencies")
    """

    def __init__(
        self,
        base_url: str,
        proxy: Optional[ProxySpec] = None,
        authorization: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
        user_agent: Optional[str] = DEFAULT_USER_AGENT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._proxy = proxy
        self._authorization = authorization
        self._transport = transport
        self._user_agent = user_agent

    @property
    def proxy(self) -> Optional[ProxySpec]:
        return self._proxy

    def url_for(self, path: str) -> str:
        """Return ``<base_url>/<path>``."""
        return f"{self._base_url}/{path.lstrip('/')}"

    def make_request(
        self,
        method: Union[str, HTTPMethod],
        path: str,
        customize: Optional[Customize] = None,
    ) -> httpx.Response:
        """Send one request and return the raw response.

        Args:
            method: GET, POST, PUT or DELETE.
            path: Path relative to the base URL.
            customize: Optional callback that may modify the
                :class:`~nexusgem.models.RequestDraft` (headers, params,
                body) before it is sent.

        Returns:
            The :class:`httpx.Response`, whatever its status code.

        Raises:
            InvalidMethodError: For unsupported methods.
            ConnectionError_: On network or timeout errors. Not retried.
        """
        draft = RequestDraft(method=coerce_method(method), url=self.url_for(path))
        if self._user_agent:
            draft.headers["User-Agent"] = self._user_agent
        if self._authorization:
            draft.headers["Authorization"] = self._authorization

        if customize is not None:
            customize(draft)

        self._log_request(draft)

        with self._client() as client:
            request = client.build_request(
                draft.method.value,
                draft.url,
                headers=draft.headers,
                params=draft.params or None,
                content=draft.content,
            )
            try:
                return client.send(request)
            except httpx.TransportError as exc:
                raise ConnectionError_(
                    f"{draft.method.value} {draft.url} failed: {exc}"
                ) from exc

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _client(self) -> httpx.Client:
        kwargs: dict = {
            "timeout": httpx.Timeout(CONNECT_TIMEOUT, read=READ_TIMEOUT),
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif self._proxy is not None:
            kwargs["proxy"] = httpx.Proxy(self._proxy.url, auth=self._proxy.auth)
        # proxy settings are resolved by ProxyResolver, not by httpx itself
        kwargs["trust_env"] = False
        return httpx.Client(**kwargs)

    def _log_request(self, draft: RequestDraft) -> None:
        output = get_output()
        if not output.is_verbose:
            return
        output.debug(f"{draft.method.value} {draft.url}")
        if "Authorization" in draft.headers:
            output.debug("use authorization")
        else:
            output.debug("no authorization")
        if self._proxy is not None:
            output.debug(f"use proxy at {self._proxy.host}:{self._proxy.port}")
