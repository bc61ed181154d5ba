"""Domain models for a rename batch."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import Field

from .config import WireModel


SECRET_UNAVAILABLE = "ERROR_GENERATING_KEY"


class PlacementAction(Enum):
    """What happened to a single file."""
    RENAMED = "renamed"            # Renamed inside its own folder
    MOVED = "moved"                # Copied, verified and source removed
    QUARANTINED = "quarantined"    # Duplicate moved aside
    QUARANTINE_FAILED = "quarantine_failed"
    SKIPPED = "skipped"            # Not a regular file
    ERROR = "error"


class QuarantineReason(str, Enum):
    """Why a file was moved into quarantine."""
    DUPLICATE = "duplicate"              # Same content already in the destination
    BATCH_DUPLICATE = "batch_duplicate"  # Same content earlier in this batch


@dataclass(frozen=True, slots=True)
class ColorDescriptor:
    """Dominant color of an image in HSL (degrees, percent, percent)."""
    hue: float
    saturation: float
    lightness: float
    rgb: tuple[int, int, int] = (0, 0, 0)

    def describe(self) -> str:
        return (
            f"H:{round(self.hue)}° S:{round(self.saturation)}% "
            f"L:{round(self.lightness)}%"
        )


@dataclass(frozen=True, slots=True)
class MediaRecord:
    """A candidate file captured once at batch start.

    Only the fingerprint is filled in later, via ``attach_fingerprint``.
    """
    source_path: Path
    file_size: int
    mod_time: datetime
    sort_key: float
    birth_time: Optional[datetime] = None
    derived_date: Optional[datetime] = None
    color: Optional[ColorDescriptor] = None
    is_file: bool = True
    fingerprint: Optional[str] = None

    @property
    def name(self) -> str:
        return self.source_path.name

    @property
    def extension(self) -> str:
        return self.source_path.suffix

    @property
    def effective_date(self) -> datetime:
        """Capture date, else creation time, else modification time."""
        return self.derived_date or self.birth_time or self.mod_time

    def attach_fingerprint(self, fingerprint: str) -> None:
        if self.fingerprint is not None and self.fingerprint != fingerprint:
            raise ValueError(f"Fingerprint already set for {self.source_path}")
        object.__setattr__(self, "fingerprint", fingerprint)


@dataclass(frozen=True, slots=True)
class ExistingFile:
    """A media file already present in the destination folder."""
    path: Path
    name: str
    size: int
    mod_time: float


@dataclass(frozen=True, slots=True)
class SecretArtifact:
    """Identifier plus the secret that controls it."""
    identifier: str
    secret: str

    @property
    def available(self) -> bool:
        return self.secret != SECRET_UNAVAILABLE

    def file_name(self) -> str:
        return f"{self.identifier}_private_key.txt"

    def render(self, associated_file: str) -> str:
        return (
            f"Private Key for {self.identifier}\n\n"
            f"Private Key (WIF): {self.secret}\n\n"
            "WARNING: Keep this file secure! Anyone with this private key "
            "controls the identifier it belongs to.\n"
            f"Address: {self.identifier}\n"
            f"Associated File: {associated_file}"
        )


@dataclass(frozen=True, slots=True)
class QuarantineRecord:
    """One line of the append-only recovery log."""
    timestamp: datetime
    original_path: Path
    quarantine_path: Path
    reason: str

    def to_log_line(self) -> str:
        return (
            f"{self.timestamp.isoformat()} - Moved: {self.original_path} -> "
            f"{self.quarantine_path} (Reason: {self.reason})\n"
        )


@dataclass(slots=True)
class PlacementOutcome:
    """Result of placing a single file."""
    action: PlacementAction
    source: Path
    target: Optional[Path] = None
    reason: Optional[str] = None
    error: Optional[str] = None
    secret_path: Optional[Path] = None
    # Non-fatal problems that did not undo the placement
    warnings: list[str] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.action in (PlacementAction.RENAMED, PlacementAction.MOVED)


class TransferResult(WireModel):
    """Per-batch aggregate, mutated while the batch runs."""
    total_files: int = 0
    files_renamed: int = 0
    duplicates_quarantined: int = 0
    quarantined_file_names: List[str] = Field(default_factory=list)
    skipped_files: int = 0
    errors: List[str] = Field(default_factory=list)

    def record(self, outcome: PlacementOutcome) -> None:
        """Fold a placement outcome into the totals."""
        name = outcome.source.name
        match outcome.action:
            case PlacementAction.RENAMED | PlacementAction.MOVED:
                self.files_renamed += 1
            case PlacementAction.QUARANTINED:
                self.duplicates_quarantined += 1
                self.quarantined_file_names.append(name)
            case PlacementAction.QUARANTINE_FAILED:
                self.duplicates_quarantined += 1
                self.errors.append(f"Failed to quarantine duplicate: {name}")
            case PlacementAction.SKIPPED:
                self.skipped_files += 1
                self.errors.append(outcome.error or f"Skipped non-file: {name}")
            case PlacementAction.ERROR:
                self.errors.append(
                    outcome.error or f"Failed to process {name}: unknown error"
                )
        self.errors.extend(outcome.warnings)


class FlattenResult(WireModel):
    """Outcome of flattening one folder."""
    files_extracted: int = 0
    folders_deleted: int = 0
    errors: List[str] = Field(default_factory=list)
    retained_folders: List[str] = Field(default_factory=list)


class FlattenTotals(WireModel):
    """Outcome of a flatten request spanning several folders."""
    total_files_extracted: int = 0
    total_folders_deleted: int = 0
    errors: List[str] = Field(default_factory=list)

    def add(self, result: FlattenResult) -> None:
        self.total_files_extracted += result.files_extracted
        self.total_folders_deleted += result.folders_deleted
        self.errors.extend(result.errors)


class BatchResponse(WireModel):
    """Reply to a rename batch."""
    success: bool
    results: Optional[TransferResult] = None
    error: Optional[str] = None


class FlattenResponse(WireModel):
    """Reply to a flatten request."""
    success: bool = True
    results: FlattenTotals = Field(default_factory=FlattenTotals)
    error: Optional[str] = None
