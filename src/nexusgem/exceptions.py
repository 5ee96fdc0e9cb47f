"""Exception hierarchy for nexusgem.

All exceptions inherit from :class:`NexusError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`nexusgem.exit_codes`.
The top-level error handler in :func:`nexusgem.app.main` catches
``NexusError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Messages must never contain a password, passphrase, or authorization token.

Subclass hierarchy::

    NexusError (exit 1)
    +-- InvalidUsageError     (exit 2)
    |   +-- UserInputError
    |   +-- InvalidMethodError
    +-- AuthError             (exit 3)
    |   +-- DecryptionError
    +-- ConnectionError_      (exit 6)
    +-- ConfigError           (exit 1)
        +-- ProxyParseError
"""

from nexusgem.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class NexusError(Exception):
    """Base exception for all nexusgem errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`nexusgem.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(NexusError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class UserInputError(InvalidUsageError):
    """Raised when an interactive answer is unusable (e.g. a URL without a host)."""


class InvalidMethodError(InvalidUsageError, ValueError):
    """Raised when a request is made with an unsupported HTTP method."""


class AuthError(NexusError):
    """Raised when stored credentials cannot be used."""

    exit_code = EXIT_AUTH_FAILURE


class DecryptionError(AuthError):
    """Raised when an encrypted authorization cannot be decrypted.

    Either the passphrase is wrong or the stored ciphertext is corrupt. This
    is distinct from "no credential stored", which is reported
    as ``None`` by the stores.
    """


class ConnectionError_(NexusError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(NexusError):
    """Raised for configuration problems (unreadable or invalid config files)."""

    exit_code = EXIT_GENERIC_FAILURE


class ProxyParseError(ConfigError):
    """Raised when a configured proxy (setting or environment) is not a usable URL."""
