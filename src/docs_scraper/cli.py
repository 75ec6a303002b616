"""Command-line entry point.

Usage:
    # Crawl the default site into ./data and ./data.tar.gz
    docs-scraper

    # Another site, narrower concurrency, JSON logs
    docs-scraper --site https://docs.example.com --concurrency 20 --log-json

    # Debug only the fetcher
    docs-scraper --logger-level docs_scraper.utils.fetcher=debug

    # Everything can also come from DOCS_SCRAPER_* environment variables or .env
    DOCS_SCRAPER_CONTENT_SELECTOR="main article" docs-scraper
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys

from pydantic import ValidationError

from .config import Settings
from .domain.model import CrawlSummary
from .observability.logging import configure_logging
from .scraper import DocsScraper


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130

# argparse dest -> Settings field
_OVERRIDES = {
    "site": "site_url",
    "output": "output_dir",
    "archive": "archive_path",
    "concurrency": "max_concurrency",
    "max_retries": "max_retries",
    "retry_delay": "retry_delay_seconds",
    "backoff": "retry_backoff",
    "timeout": "fetch_timeout",
    "selector": "content_selector",
    "user_agent": "user_agent",
    "log_level": "log_level",
    "log_json": "log_json",
    "metrics_file": "metrics_file",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docs-scraper",
        description="Crawl a documentation site and save each article as Markdown, HTML and text.",
    )
    parser.add_argument("--site", help="Root URL to crawl; links outside its origin are ignored")
    parser.add_argument("--output", type=Path, help="Output directory (deleted and recreated)")
    parser.add_argument("--archive", type=Path, help="Archive path (default: <output>.tar.gz)")
    parser.add_argument("--concurrency", type=int, help="Maximum pages processed at once")
    parser.add_argument("--max-retries", type=int, help="Retries per URL after the first failure")
    parser.add_argument("--retry-delay", type=float, help="Seconds to wait before a retry")
    parser.add_argument("--backoff", choices=["constant", "exponential"], help="Retry delay policy")
    parser.add_argument("--timeout", type=float, help="Per-fetch timeout in seconds")
    parser.add_argument("--selector", help="CSS selector of the content region")
    parser.add_argument("--user-agent", help="User-Agent header")
    parser.add_argument("--log-level", help="debug, info, warning, error")
    parser.add_argument("--log-json", action="store_true", default=None, help="Emit JSON log lines")
    parser.add_argument(
        "--logger-level",
        action="append",
        default=[],
        metavar="NAME=LEVEL",
        help="Per-logger level override, e.g. docs_scraper.fetcher=debug (repeatable)",
    )
    parser.add_argument("--metrics-file", type=Path, help="Write Prometheus metrics here when done")
    return parser


def parse_logger_levels(pairs: list[str]) -> dict[str, str]:
    """Turn ``NAME=LEVEL`` flag values into a logger name -> level mapping.

    Raises:
        ValueError: a value is missing the ``=`` or one of its sides
    """
    levels: dict[str, str] = {}
    for pair in pairs:
        name, sep, level = pair.partition("=")
        if not sep or not name.strip() or not level.strip():
            raise ValueError(f"Expected NAME=LEVEL, got {pair!r}")
        levels[name.strip()] = level.strip()
    return levels


def load_settings(args: argparse.Namespace) -> Settings:
    """Environment/.env settings with command-line flags layered on top."""
    overrides = {
        field: getattr(args, dest) for dest, field in _OVERRIDES.items() if getattr(args, dest) is not None
    }
    return Settings(**overrides)


async def crawl(settings: Settings) -> CrawlSummary:
    async with DocsScraper(settings) as scraper:
        return await scraper.run()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        logger_levels = parse_logger_levels(args.logger_level)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        settings = load_settings(args)
    except ValidationError as exc:
        configure_logging("INFO")
        logger.error(f"Configuration is invalid: {exc}")
        return EXIT_CONFIG_ERROR

    configure_logging(settings.log_level, settings.log_json, logger_levels=logger_levels)

    try:
        summary = asyncio.run(crawl(settings))
    except KeyboardInterrupt:
        logger.warning("Interrupted; partial output left in place")
        return EXIT_INTERRUPTED

    for key, value in summary.to_dict().items():
        logger.info(f"  {key}: {value}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
