"""URL resolution and same-site scope checks.

Links are resolved against the page they appear on and normalized so that
trivially different spellings of one URL deduplicate to the same string:
lowercase scheme and host, default ports dropped, empty path becomes "/".
Fragments survive normalization because scope needs to see them.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import SplitResult, urljoin, urlsplit, urlunsplit

from ..domain.errors import InvalidUrlError


logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}

# Browsers silently drop tab/newline inside hrefs; any other control character is malformed
_STRIPPED_CHARS = re.compile(r"[\t\n\r]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def _origin(parts: SplitResult) -> tuple[str, str, int | None]:
    scheme = parts.scheme.lower()
    return scheme, (parts.hostname or "").lower(), parts.port or DEFAULT_PORTS.get(scheme)


class UrlScope:
    """Resolves hrefs and decides whether a URL belongs to the crawled site."""

    def __init__(self, site_url: str):
        """Initialize scope.

        Args:
            site_url: Root URL of the site; its origin is the crawl boundary
        """
        self.site_url = self.resolve(site_url, site_url)
        parts = urlsplit(self.site_url)
        self.origin = _origin(parts)
        self.site_root = urlunsplit((parts.scheme, parts.netloc, "/", "", ""))

    @staticmethod
    def resolve(href: str, base_url: str) -> str:
        """Resolve ``href`` against ``base_url`` into a normalized absolute URL.

        Raises:
            InvalidUrlError: href is empty or cannot be parsed
        """
        cleaned = _STRIPPED_CHARS.sub("", href.strip())
        if not cleaned:
            raise InvalidUrlError(href, base_url, "empty href")
        if _CONTROL_CHARS.search(cleaned):
            raise InvalidUrlError(href, base_url, "control character in href")

        try:
            absolute = urljoin(base_url, cleaned)
            parts = urlsplit(absolute)
            port = parts.port
        except ValueError as e:
            raise InvalidUrlError(href, base_url, str(e)) from e

        scheme = parts.scheme.lower()
        if scheme not in DEFAULT_PORTS:
            # mailto:, javascript:, tel: ... never in scope, leave untouched
            return absolute

        if not parts.hostname:
            raise InvalidUrlError(href, base_url, "missing host")

        host = parts.hostname.lower()
        if ":" in host:
            host = f"[{host}]"
        netloc = host if port in (None, DEFAULT_PORTS[scheme]) else f"{host}:{port}"
        userinfo, sep, _ = parts.netloc.rpartition("@")
        if sep:
            netloc = f"{userinfo}@{netloc}"

        normalized = urlunsplit((scheme, netloc, parts.path or "/", parts.query, parts.fragment))
        # urljoin drops an empty fragment; keep the marker so scope still rejects it
        if "#" in cleaned and not parts.fragment:
            normalized += "#"
        return normalized

    def is_in_scope(self, url: str) -> bool:
        """True iff ``url`` shares the site origin and has no fragment component."""
        if "#" in url:
            return False
        try:
            return _origin(urlsplit(url)) == self.origin
        except ValueError:
            return False

    def absolutize(self, reference: str) -> str:
        """Anchor a relative reference at the site root; absolute references are returned unchanged."""
        try:
            parts = urlsplit(reference)
        except ValueError:
            return reference
        if parts.scheme or parts.netloc:
            return reference
        return urljoin(self.site_root, reference)
