"""Domain model - value objects flowing through the crawl engine.

- WorkItem: one unit of frontier work, immutable; a retry is a new item
- PageRecord: metadata entry for one extracted page (serialized to metadata.json)
- RenderedPage: the three output representations of one page
- CrawlSummary: what a finished run reports back to the caller
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


@dataclass(slots=True, frozen=True)
class WorkItem:
    """A URL scheduled for processing, with the number of failed attempts so far."""

    url: str
    retry_count: int = 0

    def __post_init__(self) -> None:
        if self.retry_count < 0:
            raise ValueError("retry_count must be non-negative")

    def next_attempt(self) -> WorkItem:
        return WorkItem(url=self.url, retry_count=self.retry_count + 1)

    @property
    def is_retry(self) -> bool:
        return self.retry_count > 0


class PageRecord(BaseModel):
    """Metadata entry recorded once per successfully extracted page.

    Fields:
        url: Source URL of the page
        path: On-disk identifier (directory name under the output root, "" for the site root)
        title: Text of the page's first <title> element
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Source URL of the page")
    path: str = Field(description="Identifier of the page directory under the output root")
    title: str = Field(default="", description="Page title")


@dataclass(slots=True, frozen=True)
class RenderedPage:
    """Markdown, HTML and plain-text renditions of a content region."""

    markdown: str
    html: str
    text: str

    def files(self) -> dict[str, str]:
        return {
            "index.md": self.markdown,
            "index.html": self.html,
            "index.txt": self.text,
        }


@dataclass(slots=True, frozen=True)
class CrawlSummary:
    """Outcome of a completed crawl run."""

    pages_saved: int
    urls_seen: int
    urls_visited: int
    urls_abandoned: int
    retries_scheduled: int
    no_content_pages: int
    persistence_failures: int
    elapsed_seconds: float
    metadata_path: Path | None
    archive_path: Path | None

    def to_dict(self) -> dict[str, object]:
        return {
            "pages_saved": self.pages_saved,
            "urls_seen": self.urls_seen,
            "urls_visited": self.urls_visited,
            "urls_abandoned": self.urls_abandoned,
            "retries_scheduled": self.retries_scheduled,
            "no_content_pages": self.no_content_pages,
            "persistence_failures": self.persistence_failures,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "metadata_path": str(self.metadata_path) if self.metadata_path else None,
            "archive_path": str(self.archive_path) if self.archive_path else None,
        }
