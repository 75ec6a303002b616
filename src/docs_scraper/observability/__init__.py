"""Observability module for structured logging, crawl context and metrics."""

from docs_scraper.observability.context import (
    bind_work_item,
    crawl_context,
    generate_crawl_id,
    get_crawl_context,
    set_crawl_context,
)
from docs_scraper.observability.logging import JsonFormatter, configure_logging
from docs_scraper.observability.metrics import (
    ABANDONED,
    FETCH_FAILURES,
    FETCH_LATENCY,
    NO_CONTENT,
    PAGES_SAVED,
    RETRIES,
    track_latency,
    write_metrics,
)


__all__ = [
    "ABANDONED",
    "FETCH_FAILURES",
    "FETCH_LATENCY",
    "NO_CONTENT",
    "PAGES_SAVED",
    "RETRIES",
    "JsonFormatter",
    "bind_work_item",
    "configure_logging",
    "crawl_context",
    "generate_crawl_id",
    "get_crawl_context",
    "set_crawl_context",
    "track_latency",
    "write_metrics",
]
