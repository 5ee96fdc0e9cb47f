"""nexusgem -- credentials and authenticated requests for Nexus rubygems repositories.

This package keeps the connection settings for one or more Nexus hosted
rubygems repositories (server URL, authorization token, proxy hint) in a
small JSON file, optionally encrypting the stored credential with a
passphrase, and builds authenticated HTTP requests against the server.

Typical workflow::

    nexusgem setup                       # prompt for URL and credentials
    nexusgem --repo internal setup       # a second repository, same file
    nexusgem request GET api/v1/gems     # authenticated request

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware paths, atomic JSON IO, option precedence.
    proxy: Outbound proxy resolution from settings and environment.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
