"""
Jail invariant checks.

A jail is a bucket-relative path prefix that a session may never escape.
The session's home directory must be the jail itself or lie somewhere
beneath it, compared segment by segment so that a jail of ``users`` does
not accept a home of ``userstuff``.
"""
import logging

from .exceptions import JailMappingError

logger = logging.getLogger(__name__)


def split_segments(path: str) -> list[str]:
    """Split a "/" separated path, dropping empty and "." segments."""
    return [part for part in path.split("/") if part and part != "."]


def is_segment_prefix(prefix: str, path: str) -> bool:
    """
    Check whether ``prefix`` is a whole-segment prefix of ``path``.

    Equal paths count as a prefix. An empty prefix is a prefix of
    everything.
    """
    prefix_parts = split_segments(prefix)
    path_parts = split_segments(path)
    if len(prefix_parts) > len(path_parts):
        return False
    return path_parts[: len(prefix_parts)] == prefix_parts


def check_containment(home: str, jail: str) -> None:
    """
    Validate that ``home`` lies within ``jail``.

    Args:
        home: Bucket-relative home directory (may be empty)
        jail: Bucket-relative jail prefix (empty means no containment)

    A jailed home containing ".." is rejected: the store would collapse
    it to a directory the prefix comparison never saw.

    Raises:
        JailMappingError: If a jail is configured and home is outside it
    """
    if not split_segments(jail):
        return
    if ".." not in split_segments(home) and (home == jail or is_segment_prefix(jail, home)):
        return

    logger.error(f"JAIL: Home directory '{home}' is outside jail '{jail}'")
    raise JailMappingError(jail=jail, home=home)
