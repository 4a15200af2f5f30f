"""
Session Context - per-session bucket, home, jail and filesystem lookup.

The transport layer owns the session. Everything the path translator needs
to know about it is gathered here once, through four lookup contracts, and
frozen into a SessionContext value:

    session ──► FilesystemResolver.resolve(username)   (required)
            ──► BucketResolver.get_bucket(session)     (None → "")
            ──► HomeResolver.get_home_path(session)    (None → "")
            ──► JailResolver.get_jail(session)         (None → "")

Lookups may perform I/O; caching, retries and timeouts are the lookup
services' concern. resolve_context() itself keeps no state.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import FilesystemUnavailable
from .jail import split_segments

logger = logging.getLogger(__name__)


# =============================================================================
# Session and Filesystem Handles
# =============================================================================

@dataclass(frozen=True)
class SessionHandle:
    """
    Identity of an authenticated transport session.

    Attributes:
        session_id: Opaque identifier assigned by the transport layer
        username: Authenticated username
        remote_address: Client address, for logging only
    """
    session_id: str
    username: str
    remote_address: str = ""


class FilesystemHandle(ABC):
    """
    Backing filesystem bound to a user.

    The core only needs one to exist; its shape is whatever the
    surrounding transport layer requires.
    """

    separator: str = "/"

    @property
    @abstractmethod
    def uri(self) -> str:
        """Location of the backing store (e.g. s3://bucket)."""
        pass


# =============================================================================
# Lookup Contracts
# =============================================================================

class BucketResolver(ABC):
    """Finds the storage bucket for a session."""

    @abstractmethod
    def get_bucket(self, session: SessionHandle) -> Optional[str]:
        pass


class HomeResolver(ABC):
    """Finds the bucket-relative home directory for a session."""

    @abstractmethod
    def get_home_path(self, session: SessionHandle) -> Optional[str]:
        pass


class JailResolver(ABC):
    """Finds the bucket-relative jail prefix for a session."""

    @abstractmethod
    def get_jail(self, session: SessionHandle) -> Optional[str]:
        pass


class FilesystemResolver(ABC):
    """Finds the backing filesystem for a username."""

    @abstractmethod
    def resolve(self, username: str) -> Optional[FilesystemHandle]:
        pass


# =============================================================================
# Session Context
# =============================================================================

def clean_path(path: Optional[str]) -> str:
    """Strip surrounding separators and empty or "." segments from a path."""
    if not path:
        return ""
    return "/".join(split_segments(path))


@dataclass(frozen=True)
class SessionContext:
    """
    Immutable, session-scoped inputs to path translation.

    bucket, home and jail are normalized on construction so that
    "users/bob/", "/users/bob" and "users/./bob" compare equal.
    """
    bucket: str
    home: str = ""
    jail: str = ""
    filesystem: Any = None
    username: str = ""

    def __post_init__(self):
        object.__setattr__(self, "bucket", clean_path(self.bucket))
        object.__setattr__(self, "home", clean_path(self.home))
        object.__setattr__(self, "jail", clean_path(self.jail))

    @property
    def is_jailed(self) -> bool:
        """True when a jail prefix is configured."""
        return bool(self.jail)


def resolve_context(
    session: SessionHandle,
    bucket_resolver: BucketResolver,
    home_resolver: HomeResolver,
    jail_resolver: JailResolver,
    filesystem_resolver: FilesystemResolver,
) -> SessionContext:
    """
    Gather bucket, home, jail and filesystem for a session.

    Args:
        session: The authenticated session
        bucket_resolver: Bucket lookup
        home_resolver: Home directory lookup
        jail_resolver: Jail prefix lookup
        filesystem_resolver: Filesystem lookup by username

    Returns:
        SessionContext for the session

    Raises:
        FilesystemUnavailable: If no filesystem is bound to the user
    """
    filesystem = filesystem_resolver.resolve(session.username)
    if filesystem is None:
        logger.warning(
            f"SESSION_CONTEXT: No filesystem for user={session.username} "
            f"session={session.session_id}"
        )
        raise FilesystemUnavailable(username=session.username)

    context = SessionContext(
        bucket=bucket_resolver.get_bucket(session) or "",
        home=home_resolver.get_home_path(session) or "",
        jail=jail_resolver.get_jail(session) or "",
        filesystem=filesystem,
        username=session.username,
    )

    logger.debug(
        f"SESSION_CONTEXT: Resolved session={session.session_id} "
        f"bucket={context.bucket!r} home={context.home!r} jail={context.jail!r}"
    )
    return context


@dataclass(frozen=True)
class ResolverSet:
    """The four lookups needed to build a SessionContext."""
    bucket: BucketResolver
    home: HomeResolver
    jail: JailResolver
    filesystem: FilesystemResolver

    def resolve_context(self, session: SessionHandle) -> SessionContext:
        return resolve_context(
            session,
            bucket_resolver=self.bucket,
            home_resolver=self.home,
            jail_resolver=self.jail,
            filesystem_resolver=self.filesystem,
        )
