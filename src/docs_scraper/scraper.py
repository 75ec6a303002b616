"""Crawl orchestration.

``DocsScraper`` owns one run: it resets the output root, seeds the frontier
with the site URL, routes processor failures to the retry controller by
exception class, and finalizes when the frontier goes idle.

Example:
    async with DocsScraper(Settings(site_url="https://shopify.dev")) as scraper:
        summary = await scraper.run()
"""

from __future__ import annotations

import logging

import anyio
import httpx

from .config import Settings
from .domain.crawl_state import CrawlState
from .domain.errors import PersistenceFailure, RetryableError
from .domain.model import CrawlSummary, WorkItem
from .finalizer import Finalizer
from .observability.context import generate_crawl_id, set_crawl_context
from .observability.metrics import write_metrics
from .processor import PageProcessor
from .retry import RetryController
from .utils.archiver import TarArchiver
from .utils.content import ContentExtractor
from .utils.fetcher import PageFetcher
from .utils.frontier import Frontier
from .utils.page_store import PageStore
from .utils.path_builder import PathBuilder
from .utils.url_scope import UrlScope


logger = logging.getLogger(__name__)


class DocsScraper:
    """Crawls one documentation site into per-page Markdown/HTML/text files."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        archiver: TarArchiver | None = None,
    ):
        """Initialize scraper.

        Args:
            settings: Settings instance with all configuration
            transport: Optional httpx transport (tests inject ``httpx.MockTransport``)
            archiver: Optional archive collaborator
        """
        self.settings = settings
        self.crawl_id = generate_crawl_id()

        self.state = CrawlState()
        self.scope = UrlScope(settings.site_url)
        self.path_builder = PathBuilder()
        self.store = PageStore(settings.output_dir, self.path_builder)
        self.fetcher = PageFetcher(settings, transport=transport)
        self.frontier = Frontier(self._handle, max_concurrency=settings.max_concurrency)
        self.retry = RetryController(
            self.frontier,
            self.state,
            max_retries=settings.max_retries,
            delay_for=settings.get_retry_delay,
        )
        self.processor = PageProcessor(
            state=self.state,
            frontier=self.frontier,
            fetcher=self.fetcher,
            extractor=ContentExtractor(self.scope, settings.content_selector),
            scope=self.scope,
            store=self.store,
            path_builder=self.path_builder,
        )
        self.finalizer = Finalizer(
            self.state,
            self.store,
            archiver or TarArchiver(),
            settings.get_archive_path(),
        )
        self.frontier.on_idle(self.finalizer.finalize)

        self._ran = False

    async def __aenter__(self) -> DocsScraper:
        await self.fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.fetcher.__aexit__(exc_type, exc_val, exc_tb)

    async def run(self) -> CrawlSummary:
        """Crawl from the site URL until the frontier is idle, then finalize."""
        if self.fetcher.client is None:
            raise RuntimeError("DocsScraper must be used as async context manager")
        if self._ran:
            raise RuntimeError("DocsScraper.run() can only be called once; create a new scraper")
        self._ran = True

        set_crawl_context(self.crawl_id)
        logger.info(
            f"Starting crawl {self.crawl_id} of {self.scope.site_url} "
            f"(concurrency={self.settings.max_concurrency}, max_retries={self.settings.max_retries}, "
            f"selector={self.settings.content_selector!r})"
        )

        await self.store.reset()

        root = self.scope.site_url
        self.state.ledger.admit(root)
        self.frontier.submit(WorkItem(root))

        await self.frontier.run()

        summary = self._build_summary()
        logger.info(
            f"Crawl complete: {summary.pages_saved} pages saved, {summary.urls_seen} URLs seen, "
            f"{summary.urls_abandoned} abandoned in {summary.elapsed_seconds:.1f}s"
        )

        if self.settings.metrics_file:
            await anyio.to_thread.run_sync(write_metrics, self.settings.metrics_file)

        return summary

    async def _handle(self, item: WorkItem) -> None:
        try:
            await self.processor.process(item)
        except RetryableError as e:
            self.retry.handle_failure(item, e)
        except PersistenceFailure:
            self.state.persistence_failure_count += 1
            raise

    def _build_summary(self) -> CrawlSummary:
        return CrawlSummary(
            pages_saved=self.state.success_count,
            urls_seen=self.state.ledger.seen_count,
            urls_visited=self.state.ledger.visited_count,
            urls_abandoned=self.state.abandoned_count,
            retries_scheduled=self.state.retry_count,
            no_content_pages=self.state.no_content_count,
            persistence_failures=self.state.persistence_failure_count,
            elapsed_seconds=self.state.elapsed(),
            metadata_path=self.finalizer.metadata_path,
            archive_path=self.finalizer.created_archive,
        )
