"""Folder flattening: lift every file under a folder into its parent."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from ..core.config import EngineConfig, ProgressKind
from ..core.errors import NameResolutionError
from ..core.models import FlattenResult
from ..core.protocols import ProgressReporter
from .transfer import rename_file, resolve_unique_path


logger = logging.getLogger(__name__)

EXTRACTED_SEPARATOR = "_extracted_"


def collect_files(folder: Path) -> tuple[list[Path], list[Path]]:
    """Walk ``folder`` depth-first without recursion.

    Symlinks are treated as files and never followed.

    Returns:
        (files in depth-first order, directories in post-order)
    """
    files: list[Path] = []
    post_order: list[Path] = []
    # (directory, children already pushed)
    stack: list[tuple[Path, bool]] = [(folder, False)]

    while stack:
        directory, expanded = stack.pop()
        if expanded:
            post_order.append(directory)
            continue

        stack.append((directory, True))
        entries = sorted(directory.iterdir())
        subdirs = []
        for entry in entries:
            if entry.is_dir() and not entry.is_symlink():
                subdirs.append(entry)
            else:
                files.append(entry)
        # Reversed so the first subdirectory is visited first
        for subdir in reversed(subdirs):
            stack.append((subdir, False))

    return files, post_order


class FolderFlattener:
    """Moves all files under a folder into the folder's parent.

    Directories left empty are removed bottom-up; anything that still
    has entries stays on disk and is reported.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        reporter: Optional[ProgressReporter] = None,
    ):
        self._config = config or EngineConfig()
        self._reporter = reporter

    def _log(self, message: str, kind: ProgressKind = ProgressKind.LOG) -> None:
        if self._reporter:
            self._reporter.log(message, kind)

    def flatten(self, folder: Path) -> FlattenResult:
        """Flatten one folder. Never raises.

        Args:
            folder: Folder whose contents move up one level.

        Returns:
            Counts plus errors for anything that could not be moved or removed.
        """
        result = FlattenResult()
        # A relative "." has itself as parent
        folder = folder.resolve()
        try:
            files, directories = collect_files(folder)
        except OSError as e:
            logger.error("Error extracting folder contents: %s", e)
            result.errors.append(f"Failed to process folder: {e}")
            return result

        parent = folder.parent
        if not files:
            logger.info("Folder %s is already empty", folder.name)
        else:
            logger.info("Found %d files to extract from %s", len(files), folder.name)

        for path in files:
            try:
                target = resolve_unique_path(
                    parent,
                    path.stem,
                    path.suffix,
                    separator=EXTRACTED_SEPARATOR,
                    max_attempts=self._config.max_name_attempts,
                )
                rename_file(path, target)
            except (OSError, NameResolutionError) as e:
                logger.error("Failed to extract %s: %s", path, e)
                result.errors.append(f"Failed to extract {path.name}: {e}")
                continue

            result.files_extracted += 1
            self._log(f"Extracted: {path.relative_to(folder)} -> {target.name}")

        for directory in directories:
            self._remove_if_empty(directory, result)

        return result

    def _remove_if_empty(self, directory: Path, result: FlattenResult) -> None:
        try:
            remaining = len(os.listdir(directory))
            if remaining:
                logger.info(
                    "Folder %s still contains %d items - not deleting",
                    directory.name,
                    remaining,
                )
                result.retained_folders.append(str(directory))
                return
            directory.rmdir()
        except OSError as e:
            logger.error("Failed to delete folder %s: %s", directory, e)
            result.errors.append(f"Failed to delete folder {directory.name}: {e}")
            result.retained_folders.append(str(directory))
            return

        result.folders_deleted += 1
        self._log(f"Deleting empty folder: {directory.name}")
