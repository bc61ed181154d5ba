"""Protocol definitions (interfaces) for dependency injection."""
from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

from .config import ProgressKind
from .models import ColorDescriptor


class MetadataOracle(Protocol):
    """Supplies capture dates and dominant colors for media files.

    Implementations:
    - PillowMetadataOracle: EXIF dates and palette analysis via Pillow
    """

    @abstractmethod
    def extract_date(self, path: Path) -> Optional[datetime]:
        """Capture date embedded in the file, or None."""
        ...

    @abstractmethod
    def extract_color(self, path: Path) -> Optional[ColorDescriptor]:
        """Dominant color of the file, or None when it cannot be analysed."""
        ...


class IdentifierGenerator(Protocol):
    """Mints a public identifier together with the secret that controls it."""

    @abstractmethod
    def generate_identifier_and_secret(self) -> tuple[str, str]:
        """Return (identifier, secret). May raise on failure."""
        ...


class ProgressReporter(Protocol):
    """Fire-and-forget notifications from the engine to its shell.

    Two channels: progress updates (status text and/or processed count)
    and log lines tagged with a ProgressKind. Neither may block the
    batch or raise into it.
    """

    @abstractmethod
    def progress(
        self,
        message: Optional[str] = None,
        processed_files: Optional[int] = None,
    ) -> None:
        """Report a status message and/or the number of files processed."""
        ...

    @abstractmethod
    def log(self, message: str, kind: ProgressKind = ProgressKind.LOG) -> None:
        """Emit a log line."""
        ...
