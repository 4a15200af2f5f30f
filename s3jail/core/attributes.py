"""
Attribute filtering for attribute-set requests.

Object storage has no POSIX permission bits, so the "permissions"
attribute is stripped before attributes reach storage or any listener.
"""
import logging
from abc import ABC
from collections.abc import Mapping
from typing import Any, Optional

from .session_context import SessionHandle

logger = logging.getLogger(__name__)

DISALLOWED_ATTRIBUTES = frozenset({"permissions"})


def filter_attributes(attributes: Mapping[str, Any]) -> dict[str, Any]:
    """
    Remove disallowed keys from an attribute mapping.

    Only exact key matches are removed; every other entry is passed
    through unchanged. The input mapping is not modified.
    """
    filtered = {
        key: value
        for key, value in attributes.items()
        if key not in DISALLOWED_ATTRIBUTES
    }
    dropped = len(attributes) - len(filtered)
    if dropped:
        logger.debug(f"ATTRIBUTES: Dropped {dropped} disallowed attribute(s)")
    return filtered


class AttributeChangeListener(ABC):
    """
    Observer of attribute-set requests.

    Both hooks receive the filtered attributes and the resolved physical
    path. Override the ones you need; the defaults do nothing.
    """

    def modifying_attributes(
        self,
        session: SessionHandle,
        path: str,
        attributes: Mapping[str, Any],
    ) -> None:
        """Called before the attributes are written to storage."""
        pass

    def modified_attributes(
        self,
        session: SessionHandle,
        path: str,
        attributes: Mapping[str, Any],
        error: Optional[BaseException] = None,
    ) -> None:
        """Called after the write, with the error if it failed."""
        pass
