#!/usr/bin/env python3
"""
CLI entry point for the search export tool.

Exports the full result set of a query to CSV or JSON-lines, validates
connections, and checks queries against the server.

Usage:
    search-export export --config config/export.yaml --profile logs
    search-export export --endpoint https://localhost:9200 --index logs-* --format json
    search-export validate --config config/export.yaml --ask-password
    search-export test-query --config config/export.yaml --query '{"term": {"level": "error"}}'
"""

import argparse
import getpass
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, Optional

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from search_export.config import ExportConfig
from search_export.core.errors import ConfigError
from search_export.exporter import check_query, export_to_file, validate_connection
from search_export.runner import LoggingProgress, QueuedProgress


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure logging."""
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.TimedRotatingFileHandler(
            log_file, when="midnight", encoding="utf-8"
        )
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logging.getLogger().addHandler(handler)


def read_query(text: Optional[str]) -> Optional[str]:
    """Return inline query text, or the contents of a file given as @path."""
    if text and text.startswith("@"):
        return Path(text[1:]).read_text(encoding="utf-8")
    return text


def resolve_password(args, config: ExportConfig) -> Optional[str]:
    if args.ask_password:
        return getpass.getpass("Password: ")
    return config.get_password()


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Export search index query results to CSV or JSON-lines",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, help="Path to configuration YAML file")
    common.add_argument("--profile", help="Profile name (default profile when omitted)")
    common.add_argument("--endpoint", help="Override the profile endpoint URL")
    common.add_argument("--index", help="Override the profile index or pattern")
    common.add_argument("--username", help="Override the profile username")
    common.add_argument(
        "--insecure",
        action="store_true",
        default=None,
        help="Skip TLS certificate verification",
    )
    common.add_argument(
        "--ask-password",
        action="store_true",
        help="Prompt for the password instead of reading SEARCH_EXPORT_PASSWORD",
    )
    common.add_argument("--timeout", type=float, help="Request timeout in seconds")
    common.add_argument("--verbose", "-v", action="store_true", help="Enable verbose/debug logging")
    common.add_argument("--log-file", type=Path, help="Also write logs to a daily rotating file")

    query_args = argparse.ArgumentParser(add_help=False)
    query_args.add_argument("--query", help="Query JSON, or @path to a file containing it")
    query_args.add_argument("--query-name", help="Name of a query saved in the profile")

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser(
        "export", parents=[common, query_args], help="Export all matching documents"
    )
    export_parser.add_argument("--format", choices=["csv", "json"], help="Output format")
    export_parser.add_argument("--fields", help="Comma-separated list of fields to export")
    export_parser.add_argument("--batch-size", type=int, help="Documents per batch")
    export_parser.add_argument("--scroll", help="Cursor lifetime, e.g. 2m")
    export_parser.add_argument("--output-dir", type=Path, help="Output directory")

    subparsers.add_parser("validate", parents=[common], help="Validate the connection")
    subparsers.add_parser(
        "test-query", parents=[common, query_args], help="Check a query against the server"
    )

    return parser.parse_args(argv)


def _resolve_query(args, config: ExportConfig) -> Any:
    inline = read_query(args.query)
    if inline is not None:
        return inline
    return config.get_query(args.profile, args.query_name)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)
    logger = logging.getLogger(__name__)

    try:
        config = ExportConfig(config_path=args.config)
        settings = config.get_settings()
        timeout = args.timeout or settings.get("request_timeout", 30)
        connection = config.connection_spec(
            args.profile,
            endpoint=args.endpoint,
            index=args.index,
            username=args.username,
            ignore_tls_errors=args.insecure,
        )
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        password = resolve_password(args, config)

        if args.command == "validate":
            result = validate_connection(connection, password, timeout=timeout)
            print(result.message)
            return 0 if result.success else 1

        if args.command == "test-query":
            query = _resolve_query(args, config)
            result = check_query(connection, query, password, timeout=timeout)
            print(result.message)
            return 0 if result.success else 1

        fields = [f.strip() for f in args.fields.split(",") if f.strip()] if args.fields else None
        export = config.export_spec(
            args.profile,
            format=args.format,
            fields=fields,
            batch_size=args.batch_size,
            scroll_timeout=args.scroll,
            output_dir=args.output_dir,
        )
        query = _resolve_query(args, config)

        progress = QueuedProgress(LoggingProgress(label=f"export {connection.index}"))
        try:
            result = export_to_file(
                connection,
                export,
                query,
                password=password,
                progress=progress,
                request_timeout=timeout,
                release_timeout=settings.get("release_timeout", 5),
            )
        finally:
            progress.close(timeout=1.0)

        print(result.summary())
        return 0 if result.success else 1

    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
