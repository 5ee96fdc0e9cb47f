"""HTTP client module for nexusgem.

:class:`RequestBuilder` wraps :mod:`httpx` to send requests relative to the
configured repository URL, with the resolved proxy, the stored
authorization header, and a 300 second read timeout.

Example::

    from nexusgem.client import RequestBuilder

    builder = RequestBuilder("https://nexus.example.com/repository/gems")
    resp = builder.make_request("GET", "api/v1/dependencies")
"""

from nexusgem.client.request_builder import RequestBuilder, coerce_method

__all__ = ["RequestBuilder", "coerce_method"]
