"""Exception types raised inside the engine.

Batch-level rejections carry the message shown to the user; per-file
errors are converted into entries of the batch error list.
"""
from __future__ import annotations

from pathlib import Path


class FileRenamerError(Exception):
    """Base class for all engine errors."""


class BatchRejected(FileRenamerError):
    """The batch cannot start; nothing was touched."""


class BusyError(BatchRejected):
    def __init__(self) -> None:
        super().__init__("Another operation is already in progress. Please wait.")


class InvalidDestinationError(BatchRejected):
    pass


class NoMediaFilesError(BatchRejected):
    def __init__(self) -> None:
        super().__init__("No valid media files (images or videos) found.")


class TransferError(FileRenamerError):
    """Placing a single file failed."""


class CopyVerificationError(TransferError):
    """The copied file does not match the source size."""

    def __init__(self, source: Path, target: Path, source_size: int, target_size: int):
        self.source = source
        self.target = target
        self.source_size = source_size
        self.target_size = target_size
        super().__init__(
            "Copy verification failed: file sizes do not match "
            f"({source_size} != {target_size})"
        )


class NameResolutionError(TransferError):
    """No free file name could be found in the target directory."""
