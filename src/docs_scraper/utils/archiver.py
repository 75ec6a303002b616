"""Gzip-compressed tar archive of the output root."""

from __future__ import annotations

import logging
from pathlib import Path
import tarfile

import anyio

from ..domain.errors import ArchiveFailure


logger = logging.getLogger(__name__)


class TarArchiver:
    """Creates ``.tar.gz`` archives whose entries are relative to the source directory."""

    async def create(self, archive_path: Path, source_dir: Path) -> Path:
        """Archive the children of ``source_dir`` into ``archive_path``.

        Raises:
            ArchiveFailure: source missing, unreadable, or archive not writable
        """
        try:
            entries = await anyio.to_thread.run_sync(self._list_entries, archive_path, source_dir)
            await anyio.to_thread.run_sync(self._write_archive, archive_path, entries)
        except (OSError, tarfile.TarError) as e:
            raise ArchiveFailure(f"Error creating archive {archive_path}: {e}") from e

        logger.info(f"Archive created at {archive_path} ({len(entries)} entries)")
        return archive_path

    @staticmethod
    def _list_entries(archive_path: Path, source_dir: Path) -> list[Path]:
        if not source_dir.is_dir():
            raise FileNotFoundError(f"Archive source {source_dir} is not a directory")
        archive_resolved = archive_path.resolve()
        return sorted(child for child in source_dir.iterdir() if child.resolve() != archive_resolved)

    @staticmethod
    def _write_archive(archive_path: Path, entries: list[Path]) -> None:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_path, "w:gz") as tar:
            for entry in entries:
                tar.add(entry, arcname=entry.name)
