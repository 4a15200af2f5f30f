"""
Path Translator - virtual/physical path translation for jailed sessions.

Clients see VIRTUAL paths. Storage operations need PHYSICAL paths, fully
qualified with the bucket. When a jail is configured the client sees a
DISPLAY form in which everything above its home is hidden.

Without a jail (bucket=bucket, home=bob):

    .                        → /bucket/bob
    /subdir                  → /bucket/bob/subdir
    dir/subdir/..            → /bucket/bob/dir/subdir/..
    /bucket/bob/file.txt     → /bucket/bob/file.txt   (already physical)

With a jail (bucket=bucket, jail=users, home=users/bob):

    physical                        display
    .            → /bucket/users/bob/         /bob/
    /            → /bucket/users/bob/         /bob/
    /bob/a.txt   → /bucket/users/bob/a.txt    /bob/a.txt
    /a.txt       → /bucket/users/bob/a.txt    /bob/a.txt
    /bucket/users/bob/a.txt → /bucket/users/bob/a.txt   /bob/a.txt

RULES:
======

- "." segments (including a trailing one) are dropped.
- ".." segments are kept verbatim. Collapsing them is left to the backing
  store, so containment here is a string-level guarantee only.
- A path already in physical or display form passes through, which makes
  re-resolution idempotent.
- The session root (bucket root, or the visible root under a jail) is
  formatted with a trailing "/"; anything below it has none.

The translator is total: every input string resolves. Configuration
errors are raised when the translator is built, before any path is
computed.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from .jail import check_containment, split_segments
from .session_context import SessionContext

logger = logging.getLogger(__name__)

SEPARATOR = "/"


@dataclass(frozen=True)
class NormalizedPath:
    """A requested path split into segments, "." removed."""
    absolute: bool
    segments: tuple[str, ...]


@dataclass(frozen=True)
class ResolvedPath:
    """
    Result of resolving one requested path.

    Attributes:
        physical: Bucket-qualified path for storage operations
        display: Client-visible path (equals physical without a jail)
        object_key: Bucket-relative storage key
        is_root: True when the path names the session root itself
    """
    physical: str
    display: str
    object_key: str
    is_root: bool = False

    def __str__(self) -> str:
        return self.physical


def _format(parts: tuple[str, ...], trailing: bool) -> str:
    path = SEPARATOR + SEPARATOR.join(parts)
    if trailing and not path.endswith(SEPARATOR):
        path += SEPARATOR
    return path


class PathTranslator:
    """
    Resolves client paths against one session's context.

    The context is immutable and resolution has no side effects, so a
    translator can be shared freely by the threads serving its session.

    Under a jail the visible root is the last segment of home and the
    physical base is all of home, so for home=users/bob/private paths stay
    under /bucket/users/bob/private/ and display as /private/...

    Usage:
        translator = PathTranslator(context)
        translator.to_physical("docs/a.txt")   # → /bucket/users/bob/docs/a.txt
        translator.to_display("docs/a.txt")    # → /bob/docs/a.txt
    """

    def __init__(self, context: SessionContext):
        """
        Args:
            context: The resolved session context

        Raises:
            JailMappingError: If the context's home is outside its jail
        """
        check_containment(context.home, context.jail)

        self._context = context
        self._bucket_parts = (context.bucket,) if context.bucket else ()
        self._home_parts = tuple(split_segments(context.home))

        if context.is_jailed:
            # Under a jail the session root is home itself
            self._root_parts = self._bucket_parts + self._home_parts
            self._visible_root = self._home_parts[-1]
        else:
            self._root_parts = self._bucket_parts
            self._visible_root = ""

    @property
    def context(self) -> SessionContext:
        """Get the session context."""
        return self._context

    @property
    def visible_root(self) -> str:
        """Display-facing root segment; empty without a jail."""
        return self._visible_root

    @property
    def root(self) -> ResolvedPath:
        """The session root."""
        return self._build(self._root_parts)

    def normalize(self, path: str) -> NormalizedPath:
        """
        Split a requested path into segments.

        A leading "/" marks the path absolute. Empty and "." segments are
        removed; ".." is kept.
        """
        path = path or ""
        return NormalizedPath(
            absolute=path.startswith(SEPARATOR),
            segments=tuple(split_segments(path)),
        )

    def resolve(self, path: str) -> ResolvedPath:
        """
        Resolve a requested path to its physical and display forms.

        Args:
            path: Client-supplied path (virtual, display or physical form)

        Returns:
            ResolvedPath for the requested path
        """
        normalized = self.normalize(path)
        resolved = self._build(self._qualify(normalized))

        if self._context.is_jailed and ".." in normalized.segments:
            logger.warning(
                f"PATH_TRANSLATOR: Parent segment kept in jailed path "
                f"'{path}' (user={self._context.username})"
            )
        logger.debug(
            f"PATH_TRANSLATOR: '{path}' -> '{resolved.physical}' "
            f"(display '{resolved.display}')"
        )
        return resolved

    def to_physical(self, path: str) -> str:
        """Resolve a requested path to its physical form."""
        return self.resolve(path).physical

    def to_display(self, path: str) -> str:
        """Resolve a requested path to its client-visible form."""
        return self.resolve(path).display

    def translate_error_paths(self, message: str) -> str:
        """
        Replace physical paths in a message with their display form.

        Keeps storage error text from revealing the bucket or the jail
        layout to a jailed client.
        """
        if not self._context.is_jailed:
            return message

        physical_root = _format(self._root_parts, trailing=False)
        pattern = re.compile(re.escape(physical_root) + r"(?=/|$|[\s'\"])")
        return pattern.sub(SEPARATOR + self._visible_root, message)

    def _qualify(self, normalized: NormalizedPath) -> tuple[str, ...]:
        """Turn normalized segments into full physical segments."""
        segments = normalized.segments

        if not self._context.is_jailed:
            if normalized.absolute and self._bucket_parts and segments[:1] == self._bucket_parts:
                return segments
            return self._bucket_parts + self._home_parts + segments

        root_len = len(self._root_parts)
        if normalized.absolute and segments[:root_len] == self._root_parts:
            rest = segments[root_len:]
        elif normalized.absolute and segments[:1] == (self._visible_root,):
            rest = segments[1:]
        else:
            # Absolute or relative, virtual paths start at the visible root
            rest = segments
        return self._root_parts + rest

    def _build(self, parts: tuple[str, ...]) -> ResolvedPath:
        is_root = parts == self._root_parts
        physical = _format(parts, trailing=is_root)

        if self._context.is_jailed:
            below_root = parts[len(self._root_parts):]
            display = _format((self._visible_root,) + below_root, trailing=is_root)
        else:
            display = physical

        key = SEPARATOR.join(parts[len(self._bucket_parts):])
        if is_root and key:
            key += SEPARATOR

        return ResolvedPath(
            physical=physical,
            display=display,
            object_key=key,
            is_root=is_root,
        )
