"""Crawl context propagation across async boundaries.

Each frontier worker binds the work item it is processing so that every log
line emitted while handling it carries the URL and attempt number.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4


crawl_context: ContextVar[dict | None] = ContextVar("crawl_context", default=None)


def generate_crawl_id() -> str:
    """Generate a 12-char hex crawl ID."""
    return uuid4().hex[:12]


def get_crawl_context() -> dict:
    """Get the current crawl context (empty dict when unbound)."""
    return crawl_context.get() or {}


def set_crawl_context(crawl_id: str, **extra: object) -> None:
    """Bind the crawl ID (and optional extras) for the current async context."""
    crawl_context.set({"crawl_id": crawl_id, **extra})


@contextmanager
def bind_work_item(url: str, retry_count: int) -> Iterator[None]:
    """Temporarily add the current work item to the crawl context."""
    ctx = crawl_context.get() or {}
    token = crawl_context.set({**ctx, "url": url, "retry_count": retry_count})
    try:
        yield
    finally:
        crawl_context.reset(token)
