"""Content region extraction and rendering.

Parses page HTML with BeautifulSoup, enumerates hyperlinks for discovery,
locates the content region by CSS selector, rewrites its relative references
to absolute URLs, and renders it as Markdown, HTML and plain text.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging

from bs4 import BeautifulSoup, Tag
from markdownify import markdownify

from ..domain.errors import NoContentError, ParseFailure
from ..domain.model import RenderedPage
from .url_scope import UrlScope


logger = logging.getLogger(__name__)

# Attributes rewritten to absolute URLs inside the content region
REWRITE_TARGETS: tuple[tuple[str, str], ...] = (("a", "href"), ("img", "src"))


def _attr_value(value: str | list[str] | None) -> str | None:
    # BeautifulSoup can return list for attribute values, ensure it's a string
    if isinstance(value, list):
        return value[0] if value else None
    return value


def provenance_header(url: str, scraped_at: datetime) -> str:
    """Comment prepended to every rendition recording where and when it came from."""
    return f"<!-- Page URL: {url}\nDate scraped: {scraped_at.isoformat()} -->\n\n"


class ContentExtractor:
    """Turns fetched HTML into links, a title and rendered content."""

    def __init__(self, scope: UrlScope, content_selector: str):
        self.scope = scope
        self.content_selector = content_selector

    def parse(self, html: str, url: str) -> BeautifulSoup:
        """Parse ``html`` into a document tree.

        Raises:
            ParseFailure: the parser rejected the document
        """
        try:
            return BeautifulSoup(html, "html.parser")
        except Exception as e:
            raise ParseFailure(url, f"Failed to parse {url}: {e}") from e

    def extract_links(self, soup: BeautifulSoup) -> list[str]:
        """Raw ``href`` values of every ``<a>`` in document order."""
        links: list[str] = []
        for element in soup.find_all("a", href=True):
            href = _attr_value(element.get("href"))
            if href is not None:
                links.append(href)
        return links

    def extract_title(self, soup: BeautifulSoup) -> str:
        title = soup.find("title")
        return title.get_text().strip() if title else ""

    def select_region(self, soup: BeautifulSoup, url: str) -> Tag:
        """Locate the content region.

        Raises:
            NoContentError: selector matched nothing or the region is blank
        """
        region = soup.select_one(self.content_selector)
        if region is None or not region.decode_contents().strip():
            raise NoContentError(url, self.content_selector)
        return region

    def rewrite_references(self, region: Tag) -> int:
        """Make relative ``a[href]`` and ``img[src]`` values absolute. Returns the number rewritten."""
        rewritten = 0
        for tag_name, attr in REWRITE_TARGETS:
            for element in region.find_all(tag_name, attrs={attr: True}):
                value = _attr_value(element.get(attr))
                if not value:
                    continue
                absolute = self.scope.absolutize(value)
                if absolute != value:
                    element[attr] = absolute
                    rewritten += 1
        return rewritten

    def render(self, region: Tag, url: str, scraped_at: datetime | None = None) -> RenderedPage:
        """Render the (already rewritten) region in all three formats."""
        scraped_at = scraped_at or datetime.now(timezone.utc)
        header = provenance_header(url, scraped_at)
        region_html = region.decode_contents().strip()

        return RenderedPage(
            markdown=header + markdownify(region_html, heading_style="ATX").strip() + "\n",
            html=header + region_html + "\n",
            text=header + region.get_text().strip() + "\n",
        )
