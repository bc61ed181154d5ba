"""Quarantine: duplicates are moved aside, never deleted."""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..core.config import EngineConfig, ProgressKind
from ..core.models import QuarantineRecord
from ..core.protocols import ProgressReporter


logger = logging.getLogger(__name__)


def _iso_now() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp_token(dt: datetime) -> str:
    """UTC ISO timestamp safe for file names, e.g. 2024-03-05T14-07-09-123Z."""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H-%M-%S-") + f"{dt.microsecond // 1000:03d}Z"


class QuarantineManager:
    """Moves flagged files into a reserved folder beside them.

    Every move is appended to a plain-text recovery log in that folder so
    the user can put files back by hand.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        reporter: Optional[ProgressReporter] = None,
    ):
        self._config = config or EngineConfig()
        self._reporter = reporter
        self.last_record: Optional[QuarantineRecord] = None

    def quarantine_dir_for(self, path: Path) -> Path:
        return path.parent / self._config.quarantine_dir_name

    def quarantine(self, path: Path, reason: str) -> bool:
        """Move ``path`` into quarantine.

        Returns:
            True on success, False if the file could not be moved. Never raises.
        """
        try:
            self.last_record = self._move(path, reason)
        except OSError as e:
            logger.error("Failed to quarantine file %s: %s", path, e)
            return False

        logger.info(
            "Moved to quarantine: %s -> %s",
            self.last_record.original_path,
            self.last_record.quarantine_path,
        )
        if self._reporter:
            self._reporter.log(
                f"Quarantined {path.name} ({reason})", ProgressKind.INFO
            )
        return True

    def _move(self, path: Path, reason: str) -> QuarantineRecord:
        quarantine_dir = self.quarantine_dir_for(path)
        quarantine_dir.mkdir(parents=True, exist_ok=True)

        moved_at = _iso_now()
        base = f"{path.stem}_{reason}_{_timestamp_token(moved_at)}"
        target = quarantine_dir / f"{base}{path.suffix}"
        counter = 1
        while target.exists():
            target = quarantine_dir / f"{base}_{counter}{path.suffix}"
            counter += 1

        # Same parent directory, so this is a rename on one filesystem
        os.rename(path, target)

        record = QuarantineRecord(
            timestamp=moved_at,
            original_path=path,
            quarantine_path=target,
            reason=reason,
        )
        try:
            with (quarantine_dir / self._config.recovery_log_name).open(
                "a", encoding="utf-8"
            ) as log:
                log.write(record.to_log_line())
        except OSError as e:
            # Log failures never undo the move
            logger.warning("Could not write recovery log for %s: %s", target, e)
        return record
