"""Exception hierarchy for apicache.

All exceptions inherit from :class:`ApicacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apicache.exit_codes`.
The command-line entry point :func:`apicache.app.main` catches
``ApicacheError`` and exits with the appropriate code.

The caching core never wraps failures of the origin operation: whatever the
origin raises reaches the caller unchanged. The HTTP-flavoured subclasses
below are raised by the host adapter (:mod:`apicache.client`) when it maps
response status codes.

Subclass hierarchy::

    ApicacheError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- StorageError        (exit 7)
    +-- PluginError         (exit 10)
    +-- ConfigError         (exit 1)
"""

from apicache.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_PLUGIN_ERROR,
    EXIT_SERVER_ERROR,
    EXIT_STORAGE_ERROR,
)


class ApicacheError(Exception):
    """Base exception for all apicache errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`apicache.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApicacheError):
    """Raised for invalid CLI arguments (e.g. ``--input`` that is not JSON)."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(ApicacheError):
    """Raised when the origin API answers HTTP 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(ApicacheError):
    """Raised when the origin API answers HTTP 404 or a cache key does not exist."""

    exit_code = EXIT_NOT_FOUND


class ServerError(ApicacheError):
    """Raised when the origin API answers with any other error status."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(ApicacheError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class StorageError(ApicacheError):
    """Raised when a storage backend cannot write, delete, or clear entries."""

    exit_code = EXIT_STORAGE_ERROR


class PluginError(ApicacheError):
    """Raised when a plugin is registered twice or looked up under an unknown name."""

    exit_code = EXIT_PLUGIN_ERROR


class ConfigError(ApicacheError):
    """Raised for invalid cache configuration (bad TTL, size, or environment values)."""

    exit_code = EXIT_GENERIC_FAILURE
