"""Bounded retry for transient page failures."""

from __future__ import annotations

from collections.abc import Callable
import logging

from .domain.crawl_state import CrawlState
from .domain.errors import RetryableError
from .domain.model import WorkItem
from .observability.metrics import ABANDONED, RETRIES
from .utils.frontier import Frontier


logger = logging.getLogger(__name__)


class RetryController:
    """Re-submits failed work items after a delay, up to ``max_retries`` times.

    An item that always fails is attempted ``max_retries + 1`` times in total
    and then dropped; no failed-URL ledger is kept.
    """

    def __init__(
        self,
        frontier: Frontier,
        state: CrawlState,
        *,
        max_retries: int,
        delay_for: Callable[[int], float],
    ):
        """Initialize retry controller.

        Args:
            frontier: Frontier receiving the delayed resubmissions
            state: Crawl state (retry/abandon counters)
            max_retries: Retries allowed after the first attempt
            delay_for: Maps the failed item's retry_count to a delay in seconds
        """
        self.frontier = frontier
        self.state = state
        self.max_retries = max_retries
        self.delay_for = delay_for

    def handle_failure(self, item: WorkItem, error: RetryableError) -> bool:
        """Schedule a retry for ``item``. Returns False when the item is abandoned."""
        if item.retry_count < self.max_retries:
            delay = self.delay_for(item.retry_count)
            logger.warning(
                f"Error scraping {item.url}: {error}, retrying in {delay:.2f}s "
                f"(attempt {item.retry_count + 2}/{self.max_retries + 1})"
            )
            self.frontier.submit_after(item.next_attempt(), delay)
            self.state.retry_count += 1
            RETRIES.inc()
            return True

        logger.error(f"Error scraping {item.url}: {error}, giving up after {item.retry_count + 1} attempts")
        self.state.abandoned_count += 1
        ABANDONED.inc()
        return False
