"""
Error types raised by the s3jail path resolution core.

Both session-level errors are fatal for the triggering request and are
never retried: a retry would reproduce the same missing filesystem or
the same misconfigured jail.
"""


class S3JailError(Exception):
    """Base class for all s3jail errors."""
    pass


class FilesystemUnavailable(S3JailError):
    """
    Raised when no backing filesystem is bound to the authenticated user.

    The message is fixed so that clients never learn which lookup failed.
    """

    MESSAGE = "Error finding filesystem."

    def __init__(self, username: str = ""):
        super().__init__(self.MESSAGE)
        self.username = username


class JailMappingError(S3JailError):
    """
    Raised when a session's home directory is not inside its jail.

    This is a configuration defect, detected on the first path resolution
    of the session rather than at session start. jail and home are the
    normalized values (no surrounding "/", no "." segments), so a jail
    configured as "/jail/" is reported as "jail".
    """

    def __init__(self, jail: str, home: str):
        super().__init__(f"User directory is outside jailed path: {jail}: {home}")
        self.jail = jail
        self.home = home


class UnsafeUsernameError(S3JailError):
    """Raised when a username cannot be used as a single path segment."""

    def __init__(self, username: str):
        super().__init__(f"Username cannot be used in a path: {username!r}")
        self.username = username


class ConfigError(RuntimeError):
    """Raised when the jail configuration file is missing or invalid."""

    def __init__(self, message: str, path: str = "", cause: Exception | None = None):
        super().__init__(message)
        self.path = path
        self.cause = cause
