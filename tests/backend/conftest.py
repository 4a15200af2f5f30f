"""
Pytest configuration and fixtures for backend tests.

Provides fixtures for:
- A transport session for user "bob"
- Mocked bucket/home/jail/filesystem lookups
- Temporary configuration files
"""
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path before importing project modules
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from s3jail.core.session_context import (  # noqa: E402
    BucketResolver,
    FilesystemResolver,
    HomeResolver,
    JailResolver,
    ResolverSet,
    SessionHandle,
)
from s3jail.services.resolvers import ObjectStoreFilesystem  # noqa: E402


@pytest.fixture
def session() -> SessionHandle:
    """Authenticated session for user bob."""
    return SessionHandle(session_id="test-session-123", username="bob")


@pytest.fixture
def filesystem() -> ObjectStoreFilesystem:
    """Filesystem handle bound to bob."""
    return ObjectStoreFilesystem(uri="s3://bucket", username="bob")


@pytest.fixture
def lookups(filesystem: ObjectStoreFilesystem) -> dict[str, MagicMock]:
    """
    Mocked lookups: bucket "bucket", no home, no jail, filesystem found.

    Tests adjust return values before the first resolution.
    """
    bucket = MagicMock(spec=BucketResolver)
    bucket.get_bucket.return_value = "bucket"
    home = MagicMock(spec=HomeResolver)
    home.get_home_path.return_value = ""
    jail = MagicMock(spec=JailResolver)
    jail.get_jail.return_value = ""
    fs = MagicMock(spec=FilesystemResolver)
    fs.resolve.return_value = filesystem
    return {"bucket": bucket, "home": home, "jail": jail, "filesystem": fs}


@pytest.fixture
def resolvers(lookups: dict[str, MagicMock]) -> ResolverSet:
    """ResolverSet over the mocked lookups."""
    return ResolverSet(
        bucket=lookups["bucket"],
        home=lookups["home"],
        jail=lookups["jail"],
        filesystem=lookups["filesystem"],
    )


@pytest.fixture
def write_config(tmp_path: Path):
    """Write YAML text to a temporary s3jail.yaml and return its path."""
    def _write(text: str) -> Path:
        path = tmp_path / "s3jail.yaml"
        path.write_text(text, encoding="utf-8")
        return path
    return _write
