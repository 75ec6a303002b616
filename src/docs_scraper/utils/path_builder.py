"""Path builder for deterministic URL-to-identifier mapping.

Every content page is written to ``<output_dir>/<identifier>/``. The
identifier is derived from the URL path only:

- Percent-decode the path (``/caf%C3%A9`` and ``/café`` share a directory)
- Drop empty, ``.`` and ``..`` segments
- Replace filesystem-reserved characters inside a segment with ``_``
- Join segments with a single ``-``
- The site root maps to the empty identifier (the output root itself)
- Names of files kept in the output root (the root page's renditions and
  ``metadata.json``) are never used as identifiers; they get the
  ``disambiguate`` suffix instead

Different URLs can still map to the same identifier (``/a/b`` vs ``/a-b``,
or paths differing only in their query string). Callers resolve that with
``disambiguate``, which appends a short hash of the full URL.
"""

import hashlib
from pathlib import Path
import re
from urllib.parse import unquote, urlsplit


class PathBuilder:
    """Build filesystem-safe page identifiers from URLs."""

    SEPARATOR = "-"
    MAX_IDENTIFIER_LENGTH = 150
    HASH_LENGTH = 10

    # Files living in the output root next to the page directories
    RESERVED_IDENTIFIERS = frozenset({"index.md", "index.html", "index.txt", "metadata.json"})

    # Reserved on Windows, plus the path separators and control characters everywhere
    _RESERVED = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')

    def build_identifier(self, url: str) -> str:
        """Derive the on-disk identifier for ``url``.

        Examples:
            >>> PathBuilder().build_identifier("https://shopify.dev/docs/api/admin")
            'docs-api-admin'
            >>> PathBuilder().build_identifier("https://shopify.dev/")
            ''
        """
        path = unquote(urlsplit(url).path)

        segments = [
            self._normalize_segment(segment)
            for segment in path.split("/")
            if segment and segment not in (".", "..")
        ]
        identifier = self.SEPARATOR.join(s for s in segments if s)

        if len(identifier) > self.MAX_IDENTIFIER_LENGTH:
            identifier = self._truncate(identifier)

        if identifier.lower() in self.RESERVED_IDENTIFIERS:
            identifier = self.disambiguate(identifier, url)

        return identifier

    def disambiguate(self, identifier: str, url: str) -> str:
        """Return a collision-free variant of ``identifier`` for ``url``."""
        digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[: self.HASH_LENGTH]
        if not identifier:
            return f"index--{digest}"
        return f"{identifier}--{digest}"

    def page_dir(self, identifier: str, *, relative_to: Path) -> Path:
        """Directory holding a page's outputs; the root page lives in ``relative_to`` itself."""
        if not identifier:
            return relative_to
        return relative_to / identifier

    def _normalize_segment(self, segment: str) -> str:
        segment = self._RESERVED.sub("_", segment)
        # Names made only of dots would be interpreted as relative directories
        if segment.strip(".") == "":
            return ""
        return segment

    def _truncate(self, identifier: str) -> str:
        """Keep a readable prefix and replace the overflow with its hash."""
        overflow = identifier[self.MAX_IDENTIFIER_LENGTH :]
        digest = hashlib.sha256(overflow.encode("utf-8")).hexdigest()[: self.HASH_LENGTH]
        keep = self.MAX_IDENTIFIER_LENGTH - self.HASH_LENGTH - 1
        return f"{identifier[:keep]}{self.SEPARATOR}{digest}"
