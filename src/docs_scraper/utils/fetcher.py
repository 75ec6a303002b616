"""HTTP transport for the crawl engine.

Thin wrapper over ``httpx.AsyncClient`` that turns every way a fetch can go
wrong (connection error, timeout, non-200 status) into ``FetchFailure`` so
the processor can hand it to the retry controller by exception class.
"""

from __future__ import annotations

import logging

import httpx

from ..config import Settings
from ..domain.errors import FetchFailure
from ..observability.metrics import FETCH_FAILURES, FETCH_LATENCY, track_latency


logger = logging.getLogger(__name__)


class PageFetcher:
    """Fetches page HTML with a fixed timeout."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize fetcher.

        Args:
            settings: Settings instance (timeout, user agent, concurrency)
            transport: Optional transport override (tests use ``httpx.MockTransport``)
        """
        self.settings = settings
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> PageFetcher:
        self.client = self._create_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()
            self.client = None

    def _create_client(self) -> httpx.AsyncClient:
        """Create HTTP client sized for the crawl's concurrency."""
        timeout = httpx.Timeout(self.settings.fetch_timeout, connect=min(10.0, self.settings.fetch_timeout))
        limits = httpx.Limits(
            max_connections=self.settings.max_concurrency,
            max_keepalive_connections=min(20, self.settings.max_concurrency),
        )

        headers = {
            "User-Agent": self.settings.get_user_agent(),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en,en-US;q=0.9",
            "Accept-Encoding": "gzip, deflate",
        }

        return httpx.AsyncClient(
            transport=self._transport,
            timeout=timeout,
            limits=limits,
            headers=headers,
            follow_redirects=True,
            verify=True,
        )

    async def fetch(self, url: str) -> str:
        """Fetch ``url`` and return the response body as text.

        Raises:
            FetchFailure: network error, timeout, or status other than 200
        """
        if self.client is None:
            raise RuntimeError("PageFetcher must be used as async context manager")

        try:
            with track_latency(FETCH_LATENCY):
                response = await self.client.get(url)
        except httpx.TimeoutException as e:
            FETCH_FAILURES.labels(reason="timeout").inc()
            raise FetchFailure(url, f"Timed out fetching {url}: {e!r}") from e
        except httpx.HTTPError as e:
            FETCH_FAILURES.labels(reason="network").inc()
            raise FetchFailure(url, f"Failed to fetch {url}: {e!r}") from e

        if response.status_code != 200:
            FETCH_FAILURES.labels(reason="status").inc()
            raise FetchFailure(
                url,
                f"Failed to fetch {url}: {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug(f"Fetched {url} ({len(response.content)} bytes)")
        return response.text
