"""Filesystem-backed store for extracted pages and the metadata index."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from pathlib import Path
import shutil

import anyio
import orjson

from ..domain.errors import PersistenceFailure
from ..domain.model import PageRecord, RenderedPage
from .path_builder import PathBuilder


logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.json"
MARKER_FILENAME = "index.md"


class PageStore:
    """Persist page renditions under ``<output_dir>/<identifier>/``."""

    def __init__(self, output_dir: Path, path_builder: PathBuilder | None = None):
        self.output_dir = output_dir
        self.path_builder = path_builder or PathBuilder()

    @property
    def metadata_path(self) -> Path:
        return self.output_dir / METADATA_FILENAME

    async def reset(self) -> None:
        """Delete any previous output and recreate an empty output root."""
        await anyio.to_thread.run_sync(self._reset_sync)

    def _reset_sync(self) -> None:
        if self.output_dir.exists():
            logger.info(f"Removing previous output at {self.output_dir}")
            shutil.rmtree(self.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def page_dir(self, identifier: str) -> Path:
        return self.path_builder.page_dir(identifier, relative_to=self.output_dir)

    async def page_exists(self, identifier: str) -> bool:
        """True when a page has already been written under ``identifier``."""
        marker = self.page_dir(identifier) / MARKER_FILENAME
        return await anyio.to_thread.run_sync(marker.exists)

    async def write_page(self, identifier: str, url: str, rendered: RenderedPage) -> Path:
        """Write ``index.md``, ``index.html`` and ``index.txt`` for one page.

        Raises:
            PersistenceFailure: any filesystem error
        """
        target = self.page_dir(identifier)
        try:
            await anyio.to_thread.run_sync(self._write_files, target, rendered.files())
        except OSError as e:
            raise PersistenceFailure(url, str(target), e) from e
        return target

    @staticmethod
    def _write_files(target: Path, files: dict[str, str]) -> None:
        target.mkdir(parents=True, exist_ok=True)
        # index.md is written last: its presence marks the page as complete
        for name in sorted(files, key=lambda n: n == MARKER_FILENAME):
            (target / name).write_text(files[name], encoding="utf-8")

    async def write_metadata(self, records: Iterable[PageRecord]) -> Path:
        """Serialize page records to ``metadata.json`` at the output root."""
        payload = orjson.dumps([record.model_dump() for record in records], option=orjson.OPT_INDENT_2)
        path = self.metadata_path
        await anyio.to_thread.run_sync(self._write_bytes, path, payload)
        return path

    @staticmethod
    def _write_bytes(path: Path, payload: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)
