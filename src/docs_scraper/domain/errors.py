"""Error taxonomy for the crawl engine.

Retryable errors (fetch and parse) are handed to the retry controller;
everything else is contained at the page boundary and never retried.
"""

from __future__ import annotations


class ScraperError(Exception):
    """Base error for the docs scraper."""


class InvalidUrlError(ScraperError, ValueError):
    """Raised when an href cannot be resolved to an absolute URL."""

    def __init__(self, href: str, base_url: str, reason: str = ""):
        self.href = href
        self.base_url = base_url
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f'Invalid URL "{href}" on page {base_url}{detail}')


class RetryableError(ScraperError):
    """Transient failure while fetching or parsing a page."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(message)


class FetchFailure(RetryableError):
    """Network error, timeout, or non-success HTTP status."""

    def __init__(self, url: str, message: str, *, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(url, message)


class ParseFailure(RetryableError):
    """Response body could not be turned into a document tree."""


class NoContentError(ScraperError):
    """Content region missing or empty; the page is not an article."""

    def __init__(self, url: str, selector: str):
        self.url = url
        self.selector = selector
        super().__init__(f"No content matching {selector!r} on {url}")


class PersistenceFailure(ScraperError):
    """Filesystem error while writing a page's outputs."""

    def __init__(self, url: str, path: str, cause: OSError):
        self.url = url
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to persist {url} to {path}: {cause}")


class ArchiveFailure(ScraperError):
    """Archive creation failed during finalization."""
