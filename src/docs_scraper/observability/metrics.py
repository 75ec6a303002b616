"""Prometheus metrics for crawl runs."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
import time

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, write_to_textfile


PAGES_SAVED = Counter(
    "docs_scraper_pages_saved_total",
    "Pages extracted and written to disk",
)

FETCH_FAILURES = Counter(
    "docs_scraper_fetch_failures_total",
    "Failed fetch or parse attempts",
    ["reason"],
)

RETRIES = Counter(
    "docs_scraper_retries_total",
    "Retries scheduled after a failed attempt",
)

ABANDONED = Counter(
    "docs_scraper_abandoned_total",
    "URLs dropped after exhausting their retries",
)

NO_CONTENT = Counter(
    "docs_scraper_no_content_total",
    "Pages without a content region",
)

FETCH_LATENCY = Histogram(
    "docs_scraper_fetch_latency_seconds",
    "Page fetch latency",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


@contextmanager
def track_latency(histogram: Histogram) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.observe(time.perf_counter() - start)


def write_metrics(path: Path, registry: CollectorRegistry = REGISTRY) -> None:
    """Write the registry in text exposition format to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    write_to_textfile(str(path), registry)
