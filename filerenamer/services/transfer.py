"""Safe transfer engine: places one file per call.

Renames stay on one filesystem and use a single rename. Cross-folder
moves copy, verify the copy's size, and only then delete the source.
Duplicates are handed to the quarantine manager instead.
"""
from __future__ import annotations

import errno
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.config import MIB, EngineConfig, ProgressKind, TransferMode
from ..core.errors import CopyVerificationError, NameResolutionError
from ..core.models import (
    MediaRecord,
    PlacementAction,
    PlacementOutcome,
    QuarantineReason,
)
from ..core.protocols import ProgressReporter
from ..engines.fingerprint import ContentFingerprinter
from .destination_index import DestinationIndex
from .naming import NamingStrategy, date_folder_name, write_secret_artifact
from .quarantine import QuarantineManager


logger = logging.getLogger(__name__)


def file_size(path: Path) -> int:
    return path.stat().st_size


def _is_taken(candidate: Path, allow: Optional[Path]) -> bool:
    if not os.path.lexists(candidate):
        return False
    if allow is None:
        return True
    try:
        return not os.path.samefile(candidate, allow)
    except OSError:
        return True


def resolve_unique_path(
    directory: Path,
    base_name: str,
    extension: str,
    separator: str = "_",
    max_attempts: int = 10000,
    allow: Optional[Path] = None,
) -> Path:
    """Find a free file name in ``directory``.

    Tries ``base_name + extension`` first, then appends ``separator`` and
    1, 2, 3... to the base name. Never returns an existing entry, except
    ``allow`` itself (a file that is already where it belongs).

    Raises:
        NameResolutionError: If every attempt is taken.
    """
    candidate = directory / f"{base_name}{extension}"
    counter = 1
    while _is_taken(candidate, allow):
        if counter > max_attempts:
            raise NameResolutionError(
                f"No free name for {base_name}{extension} in {directory} "
                f"after {max_attempts} attempts"
            )
        candidate = directory / f"{base_name}{separator}{counter}{extension}"
        counter += 1
    return candidate


def rename_file(source: Path, target: Path) -> None:
    """Rename without ever replacing a different existing file."""
    if os.path.lexists(target) and not os.path.samefile(source, target):
        raise FileExistsError(errno.EEXIST, "Target already exists", str(target))
    os.rename(source, target)


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except OSError as e:
        logger.warning("Could not remove partial copy %s: %s", path, e)


def safe_move(source: Path, target: Path, chunk_size: int = MIB) -> int:
    """Copy ``source`` to ``target``, verify the size, then delete ``source``.

    On a size mismatch the copy is kept for inspection and the source is
    untouched. Any other failure after the copy exists removes the copy
    and re-raises.

    Returns:
        Size in bytes of the placed file.

    Raises:
        CopyVerificationError: If the copy's size differs from the source.
        OSError: If copying or deleting the source fails.
    """
    created = False
    try:
        with source.open("rb") as src, target.open("xb") as dst:
            created = True
            shutil.copyfileobj(src, dst, chunk_size)

        try:
            shutil.copystat(source, target)
        except OSError as e:
            logger.debug("Could not copy timestamps to %s: %s", target, e)

        source_size = file_size(source)
        target_size = file_size(target)
        if source_size != target_size:
            raise CopyVerificationError(source, target, source_size, target_size)

        source.unlink()
        return target_size
    except CopyVerificationError:
        raise
    except Exception:
        if created:
            _discard(target)
        raise


class SeenSet:
    """Fingerprints placed so far in this batch, with their source paths."""

    def __init__(self) -> None:
        self._paths: dict[str, set[Path]] = {}

    def add(self, fingerprint: str, resolved_source: Path) -> None:
        self._paths.setdefault(fingerprint, set()).add(resolved_source)

    def conflicts(self, fingerprint: str, resolved_source: Path) -> bool:
        """True if the fingerprint was seen under a different source path."""
        paths = self._paths.get(fingerprint)
        if not paths:
            return False
        return resolved_source not in paths

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        fingerprint, path = pair
        return path in self._paths.get(fingerprint, ())

    def __len__(self) -> int:
        return sum(len(paths) for paths in self._paths.values())


@dataclass(frozen=True, slots=True)
class TargetResolution:
    """Where unique files go for this batch."""
    mode: TransferMode
    destination: Optional[Path] = None
    sort_into_folders: bool = False

    def __post_init__(self) -> None:
        if self.mode == TransferMode.MOVE and self.destination is None:
            raise ValueError("Move mode requires a destination folder")

    def target_directory(self, record: MediaRecord) -> Path:
        if self.mode == TransferMode.MOVE:
            base = self.destination
        else:
            base = record.source_path.parent
        if self.sort_into_folders:
            return base / date_folder_name(record.effective_date)
        return base


class SafeTransferEngine:
    """Runs the per-file placement state machine.

    ``place`` never raises; every failure becomes an ERROR outcome.
    """

    def __init__(
        self,
        fingerprinter: ContentFingerprinter,
        naming: NamingStrategy,
        quarantine: QuarantineManager,
        reporter: Optional[ProgressReporter] = None,
        config: Optional[EngineConfig] = None,
    ):
        self._fingerprinter = fingerprinter
        self._naming = naming
        self._quarantine = quarantine
        self._reporter = reporter
        self._config = config or EngineConfig()

    def _log(self, message: str, kind: ProgressKind = ProgressKind.LOG) -> None:
        if self._reporter:
            self._reporter.log(message, kind)

    def place(
        self,
        record: MediaRecord,
        index: DestinationIndex,
        seen: SeenSet,
        resolution: TargetResolution,
    ) -> PlacementOutcome:
        """Place a single file.

        Args:
            record: File to place.
            index: Files already in the destination (empty in in-place mode).
            seen: Fingerprints placed earlier in this batch.
            resolution: Mode and destination for this batch.

        Returns:
            What happened to the file.
        """
        if not record.is_file:
            return PlacementOutcome(
                PlacementAction.SKIPPED,
                record.source_path,
                error=f"Skipped non-file: {record.name}",
            )

        try:
            return self._place(record, index, seen, resolution)
        except Exception as e:
            logger.error("Error processing %s: %s", record.source_path, e)
            self._log(f"Failed to process {record.name}: {e}", ProgressKind.ERROR)
            return PlacementOutcome(
                PlacementAction.ERROR,
                record.source_path,
                error=f"Failed to process {record.name}: {e}",
            )

    def _place(
        self,
        record: MediaRecord,
        index: DestinationIndex,
        seen: SeenSet,
        resolution: TargetResolution,
    ) -> PlacementOutcome:
        source = record.source_path
        fingerprint = record.fingerprint or self._fingerprinter.fingerprint(source)
        record.attach_fingerprint(fingerprint)
        resolved_source = source.resolve()
        logger.debug("Processing %s (hash: %s...)", record.name, fingerprint[:8])

        existing = index.lookup(fingerprint)
        if existing is not None and existing.path.resolve() != resolved_source:
            logger.info("Duplicate: %s matches existing %s", record.name, existing.name)
            return self._quarantine_duplicate(record, QuarantineReason.DUPLICATE)

        if seen.conflicts(fingerprint, resolved_source):
            logger.info("Duplicate in batch: %s", record.name)
            return self._quarantine_duplicate(record, QuarantineReason.BATCH_DUPLICATE)

        base_name, artifact = self._naming.derive_base_name(record)
        target_dir = resolution.target_directory(record)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create folder %s: %s", target_dir, e)
            return PlacementOutcome(
                PlacementAction.ERROR,
                source,
                error=f"Failed to create folder for {record.name}",
            )

        target = resolve_unique_path(
            target_dir,
            base_name,
            record.extension,
            max_attempts=self._config.max_name_attempts,
            allow=source,
        )
        action = self._transfer(source, target, index, resolution)
        outcome = PlacementOutcome(action, source, target=target)

        if artifact is not None:
            try:
                outcome.secret_path = write_secret_artifact(artifact, target)
            except OSError as e:
                logger.error("Failed to create private key file: %s", e)
                outcome.warnings.append(
                    f"Failed to create private key file for {target.name}"
                )

        seen.add(fingerprint, resolved_source)
        return outcome

    def _transfer(
        self,
        source: Path,
        target: Path,
        index: DestinationIndex,
        resolution: TargetResolution,
    ) -> PlacementAction:
        if target.resolve() == source.resolve():
            self._log(f"Already named: {source.name}")
            return PlacementAction.RENAMED

        same_folder = source.parent.resolve() == target.parent.resolve()
        if resolution.mode == TransferMode.INPLACE or same_folder:
            rename_file(source, target)
            if resolution.mode == TransferMode.MOVE:
                # The old path no longer exists; later files must not match it
                index.evict_path(source)
            self._log(f"Renamed: {source.name} -> {target.name}", ProgressKind.SUCCESS)
            return PlacementAction.RENAMED

        safe_move(source, target, self._config.hash_chunk_size)
        index.evict_path(source)
        self._log(
            f"Safely moved: {source.name} -> {target.name} (verified copy)",
            ProgressKind.SUCCESS,
        )
        return PlacementAction.MOVED

    def _quarantine_duplicate(
        self,
        record: MediaRecord,
        reason: QuarantineReason,
    ) -> PlacementOutcome:
        if self._quarantine.quarantine(record.source_path, reason.value):
            record_path = self._quarantine.last_record.quarantine_path
            return PlacementOutcome(
                PlacementAction.QUARANTINED,
                record.source_path,
                target=record_path,
                reason=reason.value,
            )

        self._log(f"Failed to quarantine duplicate: {record.name}", ProgressKind.ERROR)
        return PlacementOutcome(
            PlacementAction.QUARANTINE_FAILED,
            record.source_path,
            reason=reason.value,
            error=f"Failed to quarantine duplicate: {record.name}",
        )
