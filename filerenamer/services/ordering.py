"""Batch ordering: per-file sort keys and a deterministic processing order."""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from ..core.config import EngineConfig, ProgressKind, SortBy
from ..core.models import ColorDescriptor, MediaRecord
from ..core.protocols import MetadataOracle, ProgressReporter
from ..engines.fingerprint import is_video


logger = logging.getLogger(__name__)


def _birth_time(stats) -> Optional[datetime]:
    # st_birthtime only exists on macOS, the BSDs and recent Windows builds
    birth = getattr(stats, "st_birthtime", None)
    if birth is None or birth <= 0:
        return None
    return datetime.fromtimestamp(birth)


def date_sort_key(dt: datetime) -> float:
    """Milliseconds since the epoch."""
    return dt.timestamp() * 1000


class BatchOrderingPipeline:
    """Loads sort keys for a batch and returns records in processing order.

    Ordering is ascending by sort key; ties keep input order.
    """

    def __init__(
        self,
        oracle: MetadataOracle,
        reporter: Optional[ProgressReporter] = None,
        config: Optional[EngineConfig] = None,
    ):
        self._oracle = oracle
        self._reporter = reporter
        self._config = config or EngineConfig()

    def _log(self, message: str, kind: ProgressKind = ProgressKind.LOG) -> None:
        if self._reporter:
            self._reporter.log(message, kind)

    def order(
        self,
        paths: Iterable[Path],
        sort_by: SortBy,
    ) -> tuple[list[MediaRecord], list[str]]:
        """Build one MediaRecord per path and sort them.

        Args:
            paths: Candidate files in input order.
            sort_by: Which key to sort on.

        Returns:
            (records in processing order, errors for paths that could not be read)
        """
        paths = list(paths)
        if sort_by == SortBy.COLOR and self._reporter:
            self._reporter.progress("Analyzing image colors...")

        records: list[MediaRecord] = []
        errors: list[str] = []
        for path in paths:
            try:
                records.append(self._load(path, sort_by))
            except OSError as e:
                logger.warning("Cannot read %s: %s", path, e)
                errors.append(f"Failed to process {path.name}: {e}")

        # list.sort is stable, so equal keys keep input order
        records.sort(key=lambda r: r.sort_key)
        self._log(self._summary(records, sort_by), ProgressKind.INFO)
        return records, errors

    def _load(self, path: Path, sort_by: SortBy) -> MediaRecord:
        stats = path.stat()
        mod_time = datetime.fromtimestamp(stats.st_mtime)
        birth_time = _birth_time(stats)
        is_file = path.is_file()

        derived_date = self._extract_date(path) if is_file else None
        color: Optional[ColorDescriptor] = None

        if sort_by == SortBy.COLOR:
            color = self._extract_color(path) if is_file else None
            sort_key = color.hue if color else self._config.color_sentinel
        else:
            effective = derived_date or birth_time or mod_time
            sort_key = date_sort_key(effective)

        return MediaRecord(
            source_path=path,
            file_size=stats.st_size,
            mod_time=mod_time,
            sort_key=sort_key,
            birth_time=birth_time,
            derived_date=derived_date,
            color=color,
            is_file=is_file,
        )

    def _extract_date(self, path: Path) -> Optional[datetime]:
        try:
            return self._oracle.extract_date(path)
        except Exception as e:
            logger.debug("Date lookup failed for %s: %s", path.name, e)
            return None

    def _extract_color(self, path: Path) -> Optional[ColorDescriptor]:
        if is_video(path):
            self._log(f"Video color sorting coming soon for: {path.name}", ProgressKind.INFO)
            return None
        try:
            color = self._oracle.extract_color(path)
        except Exception as e:
            logger.warning("Failed to extract color from %s: %s", path.name, e)
            self._log(f"Failed to extract color from {path.name}: {e}", ProgressKind.ERROR)
            return None

        if color is None:
            self._log(f"Failed to extract color from {path.name}", ProgressKind.ERROR)
            return None

        self._log(f"Analyzed {path.name} - Color: {color.describe()}", ProgressKind.INFO)
        return color

    def _summary(self, records: list[MediaRecord], sort_by: SortBy) -> str:
        if sort_by == SortBy.COLOR:
            analysed = sum(1 for r in records if r.color is not None)
            return (
                f"Sorted {len(records)} files by color "
                f"({analysed} analyzed, {len(records) - analysed} placed last)"
            )
        return f"Sorted {len(records)} files by date"
