#!/usr/bin/env python3
"""CLI tool for checking how paths resolve for a user."""
import argparse
import json
import logging
import sys

from s3jail.core.exceptions import ConfigError, S3JailError
from s3jail.core.jailed_filesystem import JailedFilesystemView
from s3jail.core.session_context import SessionHandle
from s3jail.services.config import build_resolvers, load_jail_config

logger = logging.getLogger(__name__)


def resolve_paths(
    config_path: str | None,
    username: str,
    paths: list[str],
    as_json: bool = False,
) -> list[str]:
    """Resolve each path for the user and return one output line per path."""
    config = load_jail_config(config_path)
    session = SessionHandle(session_id=f"cli-{username}", username=username)
    view = JailedFilesystemView(session, build_resolvers(config))

    lines = []
    for path in paths:
        resolved = view.resolve_file(path)
        if as_json:
            lines.append(json.dumps({
                "requested": path,
                "physical": resolved.physical,
                "display": resolved.display,
                "object_key": resolved.object_key,
            }))
        else:
            lines.append(f"{path} -> {resolved.physical} ({resolved.display})")
    return lines


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Resolve SFTP paths for a jailed user")
    parser.add_argument("paths", nargs="*", default=["."], help="Paths to resolve")
    parser.add_argument("--config", help="Path to s3jail.yaml")
    parser.add_argument("--username", required=True, help="Authenticated username")
    parser.add_argument("--json", action="store_true", help="Print JSON lines")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
    )

    try:
        lines = resolve_paths(args.config, args.username, args.paths or ["."], args.json)
    except (ConfigError, S3JailError) as e:
        logger.error(f"Failed to resolve paths: {e}")
        return 1

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
