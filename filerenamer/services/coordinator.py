"""Batch coordinator: runs rename batches and flatten requests one at a time."""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from ..core.config import BatchRequest, EngineConfig, FlattenRequest, ProgressKind, TransferMode
from ..core.errors import (
    BatchRejected,
    BusyError,
    InvalidDestinationError,
    NoMediaFilesError,
)
from ..core.models import BatchResponse, FlattenResponse, FlattenTotals, TransferResult
from ..core.protocols import IdentifierGenerator, MetadataOracle, ProgressReporter
from ..engines.fingerprint import ContentFingerprinter, is_media
from ..engines.metadata import PillowMetadataOracle
from ..logging.rich_logger import QuietProgressReporter
from .destination_index import DestinationIndex
from .flattener import FolderFlattener
from .naming import create_naming_strategy
from .ordering import BatchOrderingPipeline
from .quarantine import QuarantineManager
from .transfer import SafeTransferEngine, SeenSet, TargetResolution


logger = logging.getLogger(__name__)


class BatchCoordinator:
    """Owns the single-flight guard and wires the services into one run.

    Only one operation (rename batch or flatten) runs at a time; a second
    caller is turned away with a busy response instead of waiting.
    """

    def __init__(
        self,
        reporter: Optional[ProgressReporter] = None,
        oracle: Optional[MetadataOracle] = None,
        generator: Optional[IdentifierGenerator] = None,
        config: Optional[EngineConfig] = None,
    ):
        self._reporter = reporter or QuietProgressReporter()
        self._oracle = oracle or PillowMetadataOracle()
        self._generator = generator
        self._config = config or EngineConfig()
        self._fingerprinter = ContentFingerprinter(self._config)
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def _single_flight(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise BusyError()
        try:
            yield
        finally:
            self._lock.release()

    # --- Rename batches ---

    def process(self, request: BatchRequest) -> BatchResponse:
        """Run one rename batch.

        Returns:
            success with results, or failure with a single error message
            when the batch could not start or broke unexpectedly.
        """
        try:
            with self._single_flight():
                results = self._run_batch(request)
        except BatchRejected as e:
            logger.warning("Batch rejected: %s", e)
            self._reporter.log(str(e), ProgressKind.ERROR)
            return BatchResponse(success=False, error=str(e))
        except Exception as e:
            logger.exception("Batch failed")
            self._reporter.log(f"Processing failed: {e}", ProgressKind.ERROR)
            return BatchResponse(success=False, error=str(e))
        return BatchResponse(success=True, results=results)

    def _validate(self, request: BatchRequest) -> tuple[TargetResolution, list[Path]]:
        destination = None
        if request.mode == TransferMode.MOVE:
            destination = request.destination_folder
            if destination is None:
                raise InvalidDestinationError(
                    "A destination folder is required in move mode."
                )
            if not destination.exists():
                raise InvalidDestinationError(
                    "Destination folder does not exist or is not accessible."
                )
            if not destination.is_dir():
                raise InvalidDestinationError("Destination path is not a directory.")

        media_paths = self._filter_media(request.file_paths)
        if not media_paths:
            raise NoMediaFilesError()

        resolution = TargetResolution(
            mode=request.mode,
            destination=destination,
            sort_into_folders=request.sort_into_folders,
        )
        return resolution, media_paths

    def _filter_media(self, paths: list[Path]) -> list[Path]:
        media: list[Path] = []
        seen: set[Path] = set()
        for path in paths:
            if not is_media(path):
                continue
            key = path.resolve()
            if key in seen:
                logger.debug("Ignoring repeated path %s", path)
                continue
            seen.add(key)
            media.append(path)
        return media

    def _run_batch(self, request: BatchRequest) -> TransferResult:
        resolution, media_paths = self._validate(request)
        results = TransferResult(total_files=len(media_paths))
        self._reporter.log(
            f"Processing {len(media_paths)} files "
            f"(mode: {request.mode.value}, sort: {request.sort_by.value})",
            ProgressKind.INFO,
        )

        index = DestinationIndex.empty()
        if resolution.mode == TransferMode.MOVE:
            self._reporter.progress("Scanning existing images...")
            index = DestinationIndex.build(
                resolution.destination,
                self._fingerprinter,
                self._reporter,
                self._config,
            )

        pipeline = BatchOrderingPipeline(self._oracle, self._reporter, self._config)
        records, load_errors = pipeline.order(media_paths, request.sort_by)
        results.errors.extend(load_errors)

        engine = SafeTransferEngine(
            self._fingerprinter,
            create_naming_strategy(request.sort_by, self._generator),
            QuarantineManager(self._config, self._reporter),
            self._reporter,
            self._config,
        )
        seen = SeenSet()

        for i, record in enumerate(records, 1):
            self._reporter.progress(
                f"Processing image {i} of {len(records)}...",
                processed_files=i,
            )
            outcome = engine.place(record, index, seen, resolution)
            results.record(outcome)

        self._reporter.log(
            f"Done: {results.files_renamed} renamed, "
            f"{results.duplicates_quarantined} duplicates quarantined, "
            f"{len(results.errors)} errors",
            ProgressKind.SUCCESS if not results.errors else ProgressKind.INFO,
        )
        return results

    # --- Flattening ---

    def flatten(self, request: FlattenRequest) -> FlattenResponse:
        """Flatten every requested folder, continuing past failures."""
        try:
            with self._single_flight():
                flattener = FolderFlattener(self._config, self._reporter)
                totals = FlattenTotals()
                for i, folder in enumerate(request.folder_paths, 1):
                    self._reporter.progress(
                        f"Extracting folder {i} of {len(request.folder_paths)}...",
                        processed_files=i,
                    )
                    totals.add(flattener.flatten(folder))
        except BusyError as e:
            self._reporter.log(str(e), ProgressKind.ERROR)
            return FlattenResponse(success=False, error=str(e))
        return FlattenResponse(success=True, results=totals)
