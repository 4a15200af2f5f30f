"""
Jail configuration loader.

Reads bucket, home and jail settings from s3jail.yaml:

    bucket: my-bucket
    home: "users/{username}"
    jail: users
    filesystem:
      uri: "s3://{bucket}"
      users: ["*"]
    users:
      alice:
        home: "users/alice/private"

Lookup order for the file: explicit path, the S3JAIL_CONFIG environment
variable, then config/s3jail.yaml under the project root.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..core.exceptions import ConfigError
from ..core.session_context import ResolverSet, clean_path
from .resolvers import (
    CachingFilesystemResolver,
    ConfiguredSessionResolver,
    ObjectStoreFilesystem,
    expand_placeholders,
)

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "S3JAIL_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "s3jail.yaml"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return clean_path(str(value).strip())


class UserOverride(BaseModel):
    """Per-user settings; unset fields fall back to the top-level values."""

    bucket: str | None = Field(default=None, description="Bucket for this user")
    home: str | None = Field(default=None, description="Home directory template")
    jail: str | None = Field(default=None, description="Jail prefix template")

    @field_validator("bucket", "home", "jail", mode="before")
    @classmethod
    def normalize_path(cls, value: Any) -> Optional[str]:
        return _clean(value)


class FilesystemConfig(BaseModel):
    """Which users get a backing filesystem, and where it lives."""

    uri: str = Field(default="s3://{bucket}", description="Filesystem URI template")
    users: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Users with a filesystem; '*' means everyone",
    )

    def allows(self, username: str) -> bool:
        return "*" in self.users or username in self.users


class UserSettings(BaseModel):
    """Effective settings for one user, placeholders expanded."""

    bucket: str = ""
    home: str = ""
    jail: str = ""


class JailConfig(BaseModel):
    """Full jail configuration from YAML."""

    bucket: str = Field(default="", description="Default bucket")
    home: str = Field(default="", description="Default home directory template")
    jail: str = Field(default="", description="Default jail prefix template")
    filesystem: FilesystemConfig = Field(default_factory=FilesystemConfig)
    users: dict[str, UserOverride] = Field(default_factory=dict)

    @field_validator("bucket", "home", "jail", mode="before")
    @classmethod
    def normalize_path(cls, value: Any) -> str:
        return _clean(value) or ""

    @field_validator("users", mode="before")
    @classmethod
    def default_overrides(cls, value: Any) -> Any:
        # "alice:" with no body in YAML parses as None
        if not value:
            return {}
        if not isinstance(value, dict):
            return value
        return {name: override or {} for name, override in value.items()}

    def settings_for(self, username: str) -> UserSettings:
        """Resolve the effective bucket, home and jail for a user."""
        override = self.users.get(username) or UserOverride()
        bucket = override.bucket if override.bucket is not None else self.bucket
        home = override.home if override.home is not None else self.home
        jail = override.jail if override.jail is not None else self.jail
        return UserSettings(
            bucket=expand_placeholders(bucket, username),
            home=expand_placeholders(home, username),
            jail=expand_placeholders(jail, username),
        )

    def filesystem_for(self, username: str) -> Optional[ObjectStoreFilesystem]:
        """Build the user's filesystem handle, or None if the user has none."""
        if not self.filesystem.allows(username):
            return None
        bucket = self.settings_for(username).bucket
        uri = expand_placeholders(self.filesystem.uri, username).replace("{bucket}", bucket)
        return ObjectStoreFilesystem(uri=uri, username=username)


def resolve_config_path(config_path: Optional[Path | str] = None) -> Path:
    """Pick the configuration file to load."""
    if config_path:
        return Path(config_path)
    env_path = os.environ.get(CONFIG_ENV_VAR, "")
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def parse_jail_config(data: dict[str, Any], source: str = "<dict>") -> JailConfig:
    """
    Validate a raw configuration mapping.

    Raises:
        ConfigError: If the mapping does not describe a valid configuration
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Jail config in {source} must be a mapping", path=source)
    try:
        return JailConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid jail config in {source}: {exc}", path=source, cause=exc) from exc


def load_jail_config(config_path: Optional[Path | str] = None) -> JailConfig:
    """
    Load the jail configuration from YAML.

    Args:
        config_path: Path to config file (see module docstring for defaults)

    Returns:
        JailConfig instance

    Raises:
        ConfigError: If the file is missing, unparseable or invalid
    """
    path = resolve_config_path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Jail config not found at {path}. "
            f"Create config/s3jail.yaml or set {CONFIG_ENV_VAR}.",
            path=str(path),
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}", path=str(path), cause=exc) from exc

    config = parse_jail_config(raw, source=str(path))
    logger.info(
        f"JAIL_CONFIG: Loaded {path}: bucket={config.bucket!r}, "
        f"jail={config.jail!r}, {len(config.users)} user override(s)"
    )
    return config


def build_resolvers(config: JailConfig) -> ResolverSet:
    """Wire the configured lookups into a ResolverSet."""
    session_resolver = ConfiguredSessionResolver(config)
    return ResolverSet(
        bucket=session_resolver,
        home=session_resolver,
        jail=session_resolver,
        filesystem=CachingFilesystemResolver(config.filesystem_for),
    )
