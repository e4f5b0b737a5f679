"""Command-line entry point for press-sync.

Loads configuration (CLI > env / .env > YAML > defaults), configures
logging, runs one sync and prints the report to stdout. Log output goes
to stderr.

Exit codes:
    0 -- run completed with no item errors
    1 -- a content directory was unreadable, or an item failed
    2 -- invalid configuration
"""

import argparse
import json
import logging
import sys

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .config import load_config
from .config_loader import load_hierarchical_config
from .config_schema import SyncSettings, UnifiedConfig, build_config
from .core.client import WordPressClient
from .logger import setup_logging
from .sync.engine import SyncEngine
from .sync.reporter import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)
from .sync.scanner import ScanError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="press-sync",
        description="Publish local markdown posts and media to WordPress",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Publish ./posts and ./media using .env / config.yml settings
  press-sync

  # Preview what would be published
  press-sync --dry-run

  # Override connection settings
  press-sync --url https://blog.example.com --username admin

  # Machine-readable output
  press-sync --json

State is recorded in posts.json and media.json in the state directory
(default: the working directory). Delete an entry to publish it again.
        """,
    )

    parser.add_argument(
        "--url",
        help="Override site URL (takes precedence over WP_URL env var and config files)",
    )
    parser.add_argument(
        "--username",
        help="Override username (takes precedence over WP_USERNAME env var and config files)",
    )
    parser.add_argument(
        "--password",
        help="Override password (takes precedence over WP_PASSWORD env var and config files)"
        " (visible in process list -- prefer WP_PASSWORD env var for security)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (use only for development)",
    )
    parser.add_argument("--posts-dir", help="Directory of markdown posts")
    parser.add_argument("--media-dir", help="Directory of media files")
    parser.add_argument(
        "--state-dir", help="Directory holding posts.json and media.json"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Classify local content without publishing or saving state",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also append log output here")
    parser.add_argument(
        "--version",
        action="version",
        version=f"press-sync version {__version__}",
    )
    return parser


def _sync_settings(unified: UnifiedConfig, args) -> SyncSettings:
    overrides = {
        key: value
        for key, value in (
            ("posts_dir", args.posts_dir),
            ("media_dir", args.media_dir),
            ("state_dir", args.state_dir),
        )
        if value
    }
    return unified.sync.model_copy(update=overrides)


def main(argv: list[str] | None = None) -> int:
    """Run one sync and return the process exit code."""
    args = build_parser().parse_args(argv)
    load_dotenv()

    try:
        unified = build_config(load_hierarchical_config())
    except (ValidationError, yaml.YAMLError, ValueError, OSError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    setup_logging(
        debug=args.debug,
        log_file=args.log_file or unified.logging.file,
        debug_format=unified.logging.format,
        level=unified.logging.level,
    )

    # Dry runs make no remote calls and need no credentials.
    client = None
    if not args.dry_run:
        try:
            config = load_config(
                url=args.url,
                username=args.username,
                password=args.password,
                insecure=args.insecure,
                debug=args.debug,
                yaml_fallbacks=unified.wordpress.model_dump(exclude_none=True),
            )
        except ValueError as exc:
            print(f"Invalid configuration: {exc}", file=sys.stderr)
            return 2
        client = WordPressClient(config)

    engine = SyncEngine(
        client=client,
        settings=_sync_settings(unified, args),
    )

    try:
        report = engine.run(dry_run=args.dry_run)
    except ScanError as exc:
        logger.error("%s", exc)
        return 1

    if args.json:
        print(json.dumps(report_to_json(report), indent=2))
    elif report.dry_run:
        print(format_dry_run_preview(report))
    else:
        print(format_sync_report(report))

    return 1 if report.errors else 0


def run() -> None:
    """Console script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
