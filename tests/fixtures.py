"""Test fixtures: synthetic media on disk and in-memory collaborators.

The fakes implement the capability protocols so tests control dates,
colors and identifiers exactly.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image

from filerenamer.core.config import ProgressKind
from filerenamer.core.models import ColorDescriptor


def make_image(
    path: Path,
    color: str | tuple[int, int, int] = "red",
    size: tuple[int, int] = (32, 32),
    exif_datetime: Optional[str] = None,
) -> Path:
    """Write a solid-color image; JPEGs can carry an EXIF DateTime."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, color=color)
    if exif_datetime is not None:
        exif = Image.Exif()
        exif[306] = exif_datetime
        img.save(path, exif=exif.tobytes())
    else:
        img.save(path)
    return path


def make_file(path: Path, content: bytes = b"data") -> Path:
    """Write arbitrary bytes under a media-looking name."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@dataclass
class FakeOracle:
    """Metadata oracle driven by dictionaries keyed on file name."""
    dates: dict[str, datetime] = field(default_factory=dict)
    colors: dict[str, ColorDescriptor] = field(default_factory=dict)
    broken: set[str] = field(default_factory=set)

    def extract_date(self, path: Path) -> Optional[datetime]:
        return self.dates.get(path.name)

    def extract_color(self, path: Path) -> Optional[ColorDescriptor]:
        if path.name in self.broken:
            raise RuntimeError("decoder exploded")
        return self.colors.get(path.name)


def hue(value: float) -> ColorDescriptor:
    return ColorDescriptor(hue=value, saturation=80.0, lightness=50.0)


class FakeGenerator:
    """Identifier generator yielding ID0001, ID0002, ..."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.calls = 0

    def generate_identifier_and_secret(self) -> tuple[str, str]:
        self.calls += 1
        n = next(self._counter)
        return f"ID{n:04d}", f"SECRET{n:04d}"


class FailingGenerator:
    def generate_identifier_and_secret(self) -> tuple[str, str]:
        raise RuntimeError("no entropy")


class RecordingReporter:
    """Progress reporter that keeps every event for assertions."""

    def __init__(self) -> None:
        self.progress_events: list[tuple[Optional[str], Optional[int]]] = []
        self.log_events: list[tuple[str, ProgressKind]] = []

    def progress(
        self,
        message: Optional[str] = None,
        processed_files: Optional[int] = None,
    ) -> None:
        self.progress_events.append((message, processed_files))

    def log(self, message: str, kind: ProgressKind = ProgressKind.LOG) -> None:
        self.log_events.append((message, kind))

    @property
    def messages(self) -> list[str]:
        return [m for m, _ in self.progress_events if m] + [m for m, _ in self.log_events]
