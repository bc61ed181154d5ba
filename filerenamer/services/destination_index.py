"""Index of media already present in a destination folder.

Maps fingerprints to existing files so cross-run duplicates can be
recognised before anything is placed.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Optional

from ..core.config import EngineConfig
from ..core.models import ExistingFile
from ..core.protocols import ProgressReporter
from ..engines.fingerprint import ContentFingerprinter, is_media


logger = logging.getLogger(__name__)


class DestinationIndex:
    """Fingerprint -> existing file, scoped to one folder and one batch."""

    def __init__(self, folder: Optional[Path] = None):
        self.folder = folder
        self._entries: dict[str, ExistingFile] = {}

    @classmethod
    def empty(cls) -> "DestinationIndex":
        """Index used in in-place mode, where there is nothing to scan."""
        return cls()

    @classmethod
    def build(
        cls,
        folder: Path,
        fingerprinter: ContentFingerprinter,
        progress: Optional[ProgressReporter] = None,
        config: Optional[EngineConfig] = None,
    ) -> "DestinationIndex":
        """Scan the immediate media children of ``folder``.

        Args:
            folder: Destination folder to scan (not recursed).
            fingerprinter: Used to identify each existing file.
            progress: Receives a scan message every few files.
            config: Supplies the progress interval.

        Returns:
            A populated index.
        """
        config = config or EngineConfig()
        index = cls(folder)
        processed = 0

        for entry in sorted(folder.iterdir()):
            if not is_media(entry):
                continue
            try:
                if not entry.is_file():
                    continue
                stats = entry.stat()
            except OSError as e:
                logger.warning("Cannot stat %s: %s", entry, e)
                continue

            fingerprint = fingerprinter.fingerprint(entry)
            index.add(fingerprint, ExistingFile(
                path=entry,
                name=entry.name,
                size=stats.st_size,
                mod_time=stats.st_mtime,
            ))

            processed += 1
            if progress and processed % config.index_progress_interval == 0:
                progress.progress(
                    f"Scanning existing images... ({processed} processed)"
                )

        logger.info("Indexed %d existing files in %s", len(index), folder)
        return index

    def add(self, fingerprint: str, existing: ExistingFile) -> None:
        # First file with a given fingerprint wins
        self._entries.setdefault(fingerprint, existing)

    def lookup(self, fingerprint: str) -> Optional[ExistingFile]:
        return self._entries.get(fingerprint)

    def evict_path(self, path: Path) -> int:
        """Drop every entry pointing at ``path``.

        Returns:
            Number of entries removed.
        """
        resolved = path.resolve()
        stale = [
            fp for fp, existing in self._entries.items()
            if existing.path.resolve() == resolved
        ]
        for fp in stale:
            del self._entries[fp]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
