"""End-of-crawl metadata index and archive."""

from __future__ import annotations

import logging
from pathlib import Path

from .domain.crawl_state import CrawlState
from .domain.errors import ArchiveFailure
from .utils.archiver import TarArchiver
from .utils.page_store import PageStore


logger = logging.getLogger(__name__)


class Finalizer:
    """Writes ``metadata.json`` and archives the output root, once.

    Both steps are best-effort: a failure is logged and never invalidates
    the per-page outputs already on disk.
    """

    def __init__(self, state: CrawlState, store: PageStore, archiver: TarArchiver, archive_path: Path):
        self.state = state
        self.store = store
        self.archiver = archiver
        self.archive_path = archive_path

        self.finalized = False
        self.metadata_path: Path | None = None
        self.created_archive: Path | None = None

    async def finalize(self) -> None:
        if self.finalized:
            logger.warning("Finalizer already ran; ignoring second invocation")
            return
        self.finalized = True

        try:
            self.metadata_path = await self.store.write_metadata(self.state.records)
            logger.info(f"Wrote {len(self.state.records)} page records to {self.metadata_path}")
        except OSError as e:
            logger.error(f"Error writing metadata to {self.store.metadata_path}: {e}")

        try:
            self.created_archive = await self.archiver.create(self.archive_path, self.store.output_dir)
        except ArchiveFailure as e:
            logger.error(str(e))

        logger.info("All items have been processed!")
