"""
Lookup services for bucket, home, jail and filesystem.

These are the stock implementations of the lookup contracts in
s3jail.core.session_context. A host can mix them freely, e.g. a fixed
bucket with a per-user home under a shared jail.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Optional

from ..core.exceptions import UnsafeUsernameError
from ..core.session_context import (
    BucketResolver,
    FilesystemHandle,
    FilesystemResolver,
    HomeResolver,
    JailResolver,
    SessionHandle,
)

if TYPE_CHECKING:
    from .config import JailConfig

logger = logging.getLogger(__name__)


def expand_placeholders(template: str, username: str) -> str:
    """
    Resolve the {username} placeholder in a path template.

    Raises:
        UnsafeUsernameError: If the username would add or climb path segments
    """
    if "{username}" not in template:
        return template
    if "/" in username or username in ("", ".", ".."):
        logger.warning(f"RESOLVERS: Rejected username {username!r} for template '{template}'")
        raise UnsafeUsernameError(username)
    return template.replace("{username}", username)


class FixedBucketResolver(BucketResolver):
    """Same bucket for every session."""

    def __init__(self, bucket: str):
        self.bucket = bucket

    def get_bucket(self, session: SessionHandle) -> Optional[str]:
        return self.bucket


class FixedHomeResolver(HomeResolver):
    """Same home directory for every session (bucket root by default)."""

    def __init__(self, home: str = ""):
        self.home = home

    def get_home_path(self, session: SessionHandle) -> Optional[str]:
        return self.home


class PerUserHomeResolver(HomeResolver):
    """Home directory built from a template such as "users/{username}"."""

    def __init__(self, template: str = "users/{username}"):
        self.template = template

    def get_home_path(self, session: SessionHandle) -> Optional[str]:
        return expand_placeholders(self.template, session.username)


class FixedJailResolver(JailResolver):
    """Same jail for every session (no jail by default)."""

    def __init__(self, jail: str = ""):
        self.jail = jail

    def get_jail(self, session: SessionHandle) -> Optional[str]:
        return self.jail


class ObjectStoreFilesystem(FilesystemHandle):
    """Handle on an object-store backed filesystem."""

    def __init__(self, uri: str, username: str = ""):
        self._uri = uri
        self.username = username

    @property
    def uri(self) -> str:
        return self._uri

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectStoreFilesystem):
            return NotImplemented
        return self._uri == other._uri and self.username == other.username

    def __hash__(self) -> int:
        return hash((self._uri, self.username))

    def __repr__(self) -> str:
        return f"ObjectStoreFilesystem(uri={self._uri!r}, username={self.username!r})"


class CachingFilesystemResolver(FilesystemResolver):
    """
    Resolves one filesystem per user through a factory and keeps it.

    The cache is shared by all sessions of the host, so it is guarded by a
    lock. The factory runs outside the lock; when two sessions race, the
    first handle stored wins. A missing filesystem is not cached.
    """

    def __init__(self, factory: Callable[[str], Optional[FilesystemHandle]]):
        self._factory = factory
        self._cache: dict[str, FilesystemHandle] = {}
        self._lock = threading.Lock()

    def resolve(self, username: str) -> Optional[FilesystemHandle]:
        with self._lock:
            cached = self._cache.get(username)
        if cached is not None:
            return cached

        handle = self._factory(username)
        if handle is None:
            logger.debug(f"FS_RESOLVER: No filesystem for user={username}")
            return None

        with self._lock:
            return self._cache.setdefault(username, handle)

    def invalidate(self, username: Optional[str] = None) -> None:
        """Forget one user's filesystem, or all of them."""
        with self._lock:
            if username is None:
                self._cache.clear()
            else:
                self._cache.pop(username, None)


class ConfiguredSessionResolver(BucketResolver, HomeResolver, JailResolver):
    """
    Bucket, home and jail taken from a JailConfig.

    Per-user overrides win over the top-level values; {username} is
    expanded in both.
    """

    def __init__(self, config: "JailConfig"):
        self.config = config

    def get_bucket(self, session: SessionHandle) -> Optional[str]:
        return self.config.settings_for(session.username).bucket

    def get_home_path(self, session: SessionHandle) -> Optional[str]:
        return self.config.settings_for(session.username).home

    def get_jail(self, session: SessionHandle) -> Optional[str]:
        return self.config.settings_for(session.username).jail
