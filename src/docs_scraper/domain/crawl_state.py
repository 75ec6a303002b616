"""Process-wide crawl state with an explicit lifecycle.

One CrawlState is created per scraper run and shared by the frontier, the
page processor, the retry controller and the finalizer. Every mutation is a
synchronous point operation; the crawl runs on a single asyncio event loop,
so a check-and-insert with no await in between cannot interleave with another
task.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import time

from .model import PageRecord


class DedupLedger:
    """Tracks URLs admitted to the frontier (seen) and URLs whose fetch started (visited)."""

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._visited: set[str] = set()

    def admit(self, url: str) -> bool:
        """Mark ``url`` as seen. Returns False if it was already admitted."""
        if url in self._seen:
            return False
        self._seen.add(url)
        return True

    def begin_visit(self, url: str) -> bool:
        """Mark ``url`` as visited. Returns False if processing already started.

        A URL visited without prior admission is admitted as well so that
        visited stays a subset of seen.
        """
        if url in self._visited:
            return False
        self._seen.add(url)
        self._visited.add(url)
        return True

    def is_seen(self, url: str) -> bool:
        return url in self._seen

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    @property
    def seen_count(self) -> int:
        return len(self._seen)

    @property
    def visited_count(self) -> int:
        return len(self._visited)


@dataclass
class CrawlState:
    """Everything the finalizer needs, plus run counters for the summary."""

    ledger: DedupLedger = field(default_factory=DedupLedger)
    records: list[PageRecord] = field(default_factory=list)
    success_count: int = 0
    abandoned_count: int = 0
    retry_count: int = 0
    no_content_count: int = 0
    persistence_failure_count: int = 0
    started_at: float = field(default_factory=time.monotonic)
    _claims: dict[str, str] = field(default_factory=dict, repr=False)

    def record_page(self, record: PageRecord) -> int:
        """Append a page record and bump the success counter. Returns the new count."""
        self.records.append(record)
        self.success_count += 1
        return self.success_count

    def claim_identifier(
        self,
        identifier: str,
        url: str,
        disambiguate: Callable[[str, str], str],
    ) -> str | None:
        """Reserve an on-disk identifier for ``url``.

        Returns the identifier to write under, or None when ``url`` already
        owns one (the page was or is being written). While the candidate is
        owned by a different URL it is disambiguated again; every round makes
        it longer, so the loop ends at an unclaimed name.
        """
        candidate = identifier
        while True:
            owner = self._claims.get(candidate)
            if owner is None:
                self._claims[candidate] = url
                return candidate
            if owner == url:
                return None
            candidate = disambiguate(candidate, url)

    def release_identifier(self, identifier: str, url: str) -> None:
        """Give back an identifier claimed by ``url`` that ended up with no output."""
        if self._claims.get(identifier) == url:
            del self._claims[identifier]

    def identifier_owner(self, identifier: str) -> str | None:
        return self._claims.get(identifier)

    def elapsed(self) -> float:
        return time.monotonic() - self.started_at
