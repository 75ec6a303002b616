"""Per-URL page processing: fetch, discover, extract, render, persist."""

from __future__ import annotations

import logging

from .domain.crawl_state import CrawlState
from .domain.errors import InvalidUrlError, NoContentError
from .domain.model import PageRecord, WorkItem
from .observability.metrics import NO_CONTENT, PAGES_SAVED
from .utils.content import ContentExtractor
from .utils.fetcher import PageFetcher
from .utils.frontier import Frontier
from .utils.page_store import PageStore
from .utils.path_builder import PathBuilder
from .utils.url_scope import UrlScope


logger = logging.getLogger(__name__)


class PageProcessor:
    """Processes one WorkItem end to end.

    Raises ``RetryableError`` (fetch or parse) for the retry controller and
    ``PersistenceFailure`` for filesystem errors; a page that simply has no
    content region is not an error.
    """

    def __init__(
        self,
        *,
        state: CrawlState,
        frontier: Frontier,
        fetcher: PageFetcher,
        extractor: ContentExtractor,
        scope: UrlScope,
        store: PageStore,
        path_builder: PathBuilder,
    ):
        self.state = state
        self.frontier = frontier
        self.fetcher = fetcher
        self.extractor = extractor
        self.scope = scope
        self.store = store
        self.path_builder = path_builder

    async def process(self, item: WorkItem) -> PageRecord | None:
        """Process ``item``. Returns the PageRecord when a page was saved."""
        url = item.url

        # Retries continue a visit their first attempt already began
        if not item.is_retry and not self.state.ledger.begin_visit(url):
            logger.debug(f"Skipping already visited: {url}")
            return None

        html = await self.fetcher.fetch(url)
        soup = self.extractor.parse(html, url)

        queued = self._enqueue_links(self.extractor.extract_links(soup), url)
        logger.debug(f"Queued {queued} new links from {url}")

        base_identifier = self.path_builder.build_identifier(url)
        identifier = self.state.claim_identifier(base_identifier, url, self.path_builder.disambiguate)
        if identifier is None:
            logger.debug(f"Skipping (already processed): {url}")
            return None
        if identifier != base_identifier:
            owner = self.state.identifier_owner(base_identifier)
            logger.info(f"Identifier {base_identifier!r} already used by {owner}; writing {url} as {identifier!r}")
        if await self.store.page_exists(identifier):
            logger.debug(f"Skipping (output exists): {url}")
            return None

        try:
            region = self.extractor.select_region(soup, url)
        except NoContentError as e:
            # Navigation shells and index pages have no article; free the identifier for a page that does
            self.state.release_identifier(identifier, url)
            self.state.no_content_count += 1
            NO_CONTENT.inc()
            logger.debug(str(e))
            return None

        self.extractor.rewrite_references(region)
        rendered = self.extractor.render(region, url)
        await self.store.write_page(identifier, url, rendered)

        record = PageRecord(url=url, path=identifier, title=self.extractor.extract_title(soup))
        count = self.state.record_page(record)
        PAGES_SAVED.inc()

        logger.info(f"[{self.frontier.queue_length}] [{count}] {url}")
        return record

    def _enqueue_links(self, hrefs: list[str], page_url: str) -> int:
        queued = 0
        for href in hrefs:
            try:
                absolute = self.scope.resolve(href, page_url)
            except InvalidUrlError as e:
                logger.warning(str(e))
                continue

            if not self.scope.is_in_scope(absolute):
                continue

            if self.state.ledger.admit(absolute):
                self.frontier.submit(WorkItem(absolute))
                queued += 1
        return queued
