"""
CLI entry point for gtr-extractor.

Usage:
    python -m gtr_extractor
    python -m gtr_extractor --output exports --timeout 60
    python -m gtr_extractor --config /path/to/gtr.yml --json-logs
"""

import argparse
import asyncio
import logging
import sys

import structlog

from .core.errors import ConfigError, SearchAbortedError

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
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
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract CDT/DTP projects from the Gateway to Research API into CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search, enrich and export both categories
  python -m gtr_extractor

  # Write CSV files into another directory
  python -m gtr_extractor --output exports

  # Fetch project details four at a time
  python -m gtr_extractor --detail-concurrency 4

  # Use custom config file
  python -m gtr_extractor --config /path/to/gtr.yml
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to gtr.yml config file",
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Output directory (default: from config, current directory)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Request timeout in seconds (default: from config, 30)",
    )

    parser.add_argument(
        "--detail-concurrency",
        type=int,
        help="Project detail requests in flight (default: 1, sequential)",
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
        help="Output logs as JSON",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


async def main_async(args):
    """Async main function."""
    from .config.loader import load_config
    from .orchestrator import ExtractorPipeline

    config = load_config(args.config)

    # Command line overrides
    if args.output:
        config.output_dir = args.output
    if args.timeout is not None:
        if args.timeout <= 0:
            raise ConfigError(f"--timeout must be positive, got {args.timeout}")
        config.api.timeout = args.timeout
    if args.detail_concurrency is not None:
        if args.detail_concurrency < 1:
            raise ConfigError(
                f"--detail-concurrency must be at least 1, got {args.detail_concurrency}"
            )
        config.detail_concurrency = args.detail_concurrency

    pipeline = ExtractorPipeline(config)
    return await pipeline.run()


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"gtr-extractor {__version__}")
        sys.exit(0)

    # Setup logging
    setup_logging(args.log_level, args.json_logs)
    logger = structlog.get_logger(__name__)

    try:
        asyncio.run(main_async(args))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except SearchAbortedError as e:
        logger.error(
            "run_aborted",
            url=e.url,
            error_type=type(e.cause).__name__ if e.cause else None,
            error=str(e.cause) if e.cause else str(e),
        )
        sys.exit(1)
    except ConfigError as e:
        logger.error("config_error", error=str(e))
        sys.exit(1)
    except Exception as e:
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
