"""Domain layer - crawl state, value objects and the error taxonomy.

No HTTP clients or filesystem access live here; the engine modules depend on
this package, never the other way around.
"""

from docs_scraper.domain.crawl_state import CrawlState, DedupLedger
from docs_scraper.domain.errors import (
    ArchiveFailure,
    FetchFailure,
    InvalidUrlError,
    NoContentError,
    ParseFailure,
    PersistenceFailure,
    RetryableError,
    ScraperError,
)
from docs_scraper.domain.model import CrawlSummary, PageRecord, RenderedPage, WorkItem


__all__ = [
    "ArchiveFailure",
    "CrawlState",
    "CrawlSummary",
    "DedupLedger",
    "FetchFailure",
    "InvalidUrlError",
    "NoContentError",
    "PageRecord",
    "ParseFailure",
    "PersistenceFailure",
    "RenderedPage",
    "RetryableError",
    "ScraperError",
    "WorkItem",
]
