"""
Services package for s3jail.

Contains the stock lookup services and the YAML configuration loader
that wires them together.
"""
from .config import JailConfig, build_resolvers, load_jail_config
from .resolvers import (
    CachingFilesystemResolver,
    ConfiguredSessionResolver,
    FixedBucketResolver,
    FixedHomeResolver,
    FixedJailResolver,
    ObjectStoreFilesystem,
    PerUserHomeResolver,
)

__all__ = [
    "JailConfig",
    "build_resolvers",
    "load_jail_config",
    "CachingFilesystemResolver",
    "ConfiguredSessionResolver",
    "FixedBucketResolver",
    "FixedHomeResolver",
    "FixedJailResolver",
    "ObjectStoreFilesystem",
    "PerUserHomeResolver",
]
