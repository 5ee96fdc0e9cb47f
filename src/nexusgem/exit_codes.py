"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~nexusgem.exceptions.NexusError` subclass.
Shell wrappers can inspect the exit code to determine the failure class
without parsing stderr.

Example::

    $ nexusgem request GET api/v1/gems
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the encryption passphrase was wrong
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or invalid interactive input."""

EXIT_AUTH_FAILURE = 3
"""Stored credentials could not be used (e.g. wrong encryption passphrase)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
