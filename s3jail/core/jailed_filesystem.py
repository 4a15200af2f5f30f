"""
Jailed Filesystem View - the per-session entry point for the transport layer.

Each transport session gets one view. The view resolves the session
context lazily on the first path operation, validates the jail, and keeps
the resulting translator for the rest of the session:

    view = configure_jailed_filesystem(session, resolvers)
    view.resolve_file("docs/a.txt").physical   # storage path
    view.resolve_file("docs/a.txt").display    # what the client sees
    view.set_attributes("docs/a.txt", {"permissions": 0o644, "mtime": 0})

A failed resolution (FilesystemUnavailable, JailMappingError) caches
nothing, so every later request fails the same way.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any, Optional

from .attributes import AttributeChangeListener, filter_attributes
from .path_translator import PathTranslator, ResolvedPath
from .session_context import ResolverSet, SessionContext, SessionHandle

logger = logging.getLogger(__name__)

AttributeWriter = Callable[[str, dict[str, Any]], None]


class JailedFilesystemView:
    """
    Path resolution and attribute updates for one session.

    Usage:
        view = JailedFilesystemView(session, resolvers, attribute_writer=store.set_attrs)
        resolved = view.resolve_file("/")          # → display /bob/
    """

    def __init__(
        self,
        session: SessionHandle,
        resolvers: ResolverSet,
        attribute_writer: Optional[AttributeWriter] = None,
    ):
        """
        Args:
            session: The transport session this view serves
            resolvers: Lookups for bucket, home, jail and filesystem
            attribute_writer: Storage call taking (physical_path, attributes)
        """
        self._session = session
        self._resolvers = resolvers
        self._attribute_writer = attribute_writer
        self._translator: Optional[PathTranslator] = None
        self._listeners: list[AttributeChangeListener] = []

    @property
    def session(self) -> SessionHandle:
        return self._session

    @property
    def translator(self) -> PathTranslator:
        """
        The session's translator, resolved on first access.

        Raises:
            FilesystemUnavailable: If no filesystem is bound to the user
            JailMappingError: If home is outside the jail
        """
        if self._translator is None:
            context = self._resolvers.resolve_context(self._session)
            self._translator = PathTranslator(context)
            logger.info(
                f"JAILED_FS: Session {self._session.session_id} resolved for "
                f"user={self._session.username}, bucket={context.bucket!r}, "
                f"root={self._translator.root.display!r}"
            )
        return self._translator

    @property
    def context(self) -> SessionContext:
        return self.translator.context

    def resolve_file(self, path: str) -> ResolvedPath:
        """Resolve a client-supplied path for this session."""
        return self.translator.resolve(path)

    def add_listener(self, listener: AttributeChangeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: AttributeChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_attributes(self, path: str, attributes: Mapping[str, Any]) -> dict[str, Any]:
        """
        Filter and apply an attribute-set request.

        Listeners and storage only ever see the filtered attributes.

        Args:
            path: Client-supplied path
            attributes: Requested attribute changes

        Returns:
            The filtered attributes that were applied
        """
        resolved = self.resolve_file(path)
        filtered = filter_attributes(attributes)

        for listener in list(self._listeners):
            listener.modifying_attributes(self._session, resolved.physical, filtered)

        error: Optional[BaseException] = None
        try:
            if self._attribute_writer is not None:
                self._attribute_writer(resolved.physical, filtered)
        except Exception as e:
            error = e
            logger.error(
                f"JAILED_FS: Failed to set attributes on "
                f"'{resolved.display}': {self.translator.translate_error_paths(str(e))}"
            )
            raise
        finally:
            for listener in list(self._listeners):
                listener.modified_attributes(self._session, resolved.physical, filtered, error)

        return filtered


# =============================================================================
# Session-Scoped View Management
# =============================================================================

# One view per session; the lock guards registration from concurrent sessions
_session_views: dict[str, JailedFilesystemView] = {}
_views_lock = threading.Lock()


def configure_jailed_filesystem(
    session: SessionHandle,
    resolvers: ResolverSet,
    attribute_writer: Optional[AttributeWriter] = None,
) -> JailedFilesystemView:
    """
    Create and register the view for a session.

    Nothing is looked up here; the context is resolved on the first
    path operation.
    """
    view = JailedFilesystemView(session, resolvers, attribute_writer=attribute_writer)
    with _views_lock:
        _session_views[session.session_id] = view
    logger.info(
        f"JAILED_FS: Configured for session {session.session_id}, user={session.username}"
    )
    return view


def get_jailed_filesystem(session_id: str) -> JailedFilesystemView:
    """
    Get the view for a session.

    Raises:
        RuntimeError: If no view is configured for this session
    """
    with _views_lock:
        view = _session_views.get(session_id)
    if view is None:
        raise RuntimeError(
            f"JailedFilesystemView not configured for session {session_id}. "
            "Call configure_jailed_filesystem() first."
        )
    return view


def has_jailed_filesystem(session_id: str) -> bool:
    with _views_lock:
        return session_id in _session_views


def cleanup_jailed_filesystem(session_id: str) -> None:
    """Drop the view when the session ends."""
    with _views_lock:
        removed = _session_views.pop(session_id, None)
    if removed is not None:
        logger.info(f"JAILED_FS: Cleaned up view for session {session_id}")
