"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apicache.exceptions.ApicacheError` subclass.
Shell scripts wrapping the ``apicache`` command can inspect the exit code
to determine the failure class without parsing stderr.

Example::

    $ apicache show 'GET:/users:'
    $ echo $?
    4   # EXIT_NOT_FOUND -- no entry is stored under that key
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The origin API rejected the request's credentials."""

EXIT_NOT_FOUND = 4
"""The requested resource or cache key was not found."""

EXIT_SERVER_ERROR = 5
"""The origin API returned an error status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_STORAGE_ERROR = 7
"""The cache storage backend failed to read or write an entry."""

EXIT_PLUGIN_ERROR = 10
"""A plugin failed to register or was looked up under an unknown name."""
