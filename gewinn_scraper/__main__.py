"""
CLI entry point for gewinn-scraper.

Usage:
    python -m gewinn_scraper
    python -m gewinn_scraper --db-url sqlite:///contests.db --init-db
    python -m gewinn_scraper --dry-run --log-level DEBUG
"""

import argparse
import logging
import sys

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging (to stderr; stdout carries progress lines)."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="gewinn-scraper",
        description="Import contests from 12gewinn.de into the contest database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Import using the packaged configuration (MySQL on localhost)
  python -m gewinn_scraper

  # Use a SQLite database and create the table first
  python -m gewinn_scraper --db-url sqlite:///contests.db --init-db

  # Crawl and check without writing anything
  python -m gewinn_scraper --dry-run

  # Keep links that point back into 12gewinn.de
  python -m gewinn_scraper --no-internal-filter
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to a YAML config file (default: packaged site.yml)",
    )

    parser.add_argument(
        "--base-url",
        type=str,
        help="Site to crawl (default from config: https://www.12gewinn.de)",
    )

    parser.add_argument("--db-url", type=str, help="SQLAlchemy database URL (overrides --db-*)")
    parser.add_argument("--db-host", type=str, help="Database host")
    parser.add_argument("--db-name", type=str, help="Database name")
    parser.add_argument("--db-user", type=str, help="Database user")
    parser.add_argument("--db-password", type=str, help="Database password")

    parser.add_argument(
        "--no-internal-filter",
        action="store_true",
        help="Also store participation links that point into the crawled site",
    )

    parser.add_argument(
        "--lenient-root-urls",
        action="store_true",
        help="Resolve '/path' links by appending to the page URL (legacy behaviour)",
    )

    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create the contest table (with unique link constraint) if missing",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Crawl and check for duplicates without inserting",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


def apply_overrides(config, args):
    """Apply command line overrides to the loaded configuration."""
    if args.base_url:
        config.site.base_url = args.base_url
        config.site.homepage_url = None
    if args.no_internal_filter:
        config.site.filter_internal_links = False
    if args.lenient_root_urls:
        config.site.strict_root_urls = False

    if args.db_url:
        config.store.url = args.db_url
    if args.db_host:
        config.store.host = args.db_host
    if args.db_name:
        config.store.database = args.db_name
    if args.db_user:
        config.store.user = args.db_user
    if args.db_password is not None:
        config.store.password = args.db_password

    return config


def run(args) -> int:
    """Load config, connect the store and run one import."""
    from .config.loader import load_config
    from .errors import ConfigError, StoreConnectionError
    from .orchestrator import ContestImporter
    from .storage import ContestStore

    logger = structlog.get_logger(__name__)

    try:
        config = apply_overrides(load_config(args.config), args)
    except ConfigError as e:
        logger.error("config_invalid", error=str(e))
        return EXIT_CONFIG_ERROR

    store = ContestStore.from_config(config.store)
    try:
        store.connect()
    except StoreConnectionError as e:
        logger.error("store_unavailable", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.init_db:
        store.create_schema()

    importer = ContestImporter(
        config=config,
        store=store,
        line_sink=print,
        dry_run=args.dry_run,
    )
    importer.run()

    return EXIT_OK


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    if args.version:
        from . import __version__
        print(f"gewinn-scraper {__version__}")
        sys.exit(EXIT_OK)

    setup_logging(args.log_level, args.json_logs)

    try:
        sys.exit(run(args))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
