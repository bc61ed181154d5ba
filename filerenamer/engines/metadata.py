"""Metadata oracle backed by Pillow.

Reads capture dates from EXIF and derives a dominant color from a reduced
palette. Videos have no date or color support here; callers fall back to
filesystem times and the color sentinel.
"""
from __future__ import annotations

import colorsys
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image, ImageFile

from ..core.models import ColorDescriptor
from .fingerprint import is_image


logger = logging.getLogger(__name__)

# Allow loading truncated images
ImageFile.LOAD_TRUNCATED_IMAGES = True

EXIF_IFD = 0x8769
TAG_DATETIME_ORIGINAL = 36867
TAG_DATETIME_DIGITIZED = 36868
TAG_DATETIME = 306

# Swatches paler, darker or greyer than this are only used as a last resort
MIN_VIBRANT_SATURATION = 0.25
MIN_VIBRANT_LIGHTNESS = 0.15
MAX_VIBRANT_LIGHTNESS = 0.85


def rgb_to_hsl(r: int, g: int, b: int) -> tuple[float, float, float]:
    """Convert 0-255 RGB to (hue degrees, saturation %, lightness %)."""
    h, l, s = colorsys.rgb_to_hls(r / 255, g / 255, b / 255)
    return h * 360, s * 100, l * 100


def parse_exif_datetime(dt_str: str) -> Optional[datetime]:
    """Parse EXIF datetime string."""
    formats = [
        "%Y:%m:%d %H:%M:%S",
        "%Y-%m-%d %H:%M:%S",
        "%Y/%m/%d %H:%M:%S",
    ]
    value = dt_str.strip().rstrip("\x00")
    for fmt in formats:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


class PillowMetadataOracle:
    """Metadata oracle using Pillow for EXIF and palette analysis."""

    def __init__(self, sample_size: int = 64, palette_colors: int = 16):
        """Initialize the oracle.

        Args:
            sample_size: Edge length images are reduced to before analysis.
            palette_colors: Number of palette entries to quantize into.
        """
        self._sample_size = sample_size
        self._palette_colors = palette_colors

    def extract_date(self, path: Path) -> Optional[datetime]:
        """Extract the capture date from EXIF.

        Priority:
        1. DateTimeOriginal
        2. DateTimeDigitized
        3. DateTime (last modification recorded by the camera)
        """
        if not is_image(path):
            return None

        try:
            with Image.open(path) as img:
                exif = img.getexif()
                if not exif:
                    return None

                sub_ifd = exif.get_ifd(EXIF_IFD)
                for tag_id in (TAG_DATETIME_ORIGINAL, TAG_DATETIME_DIGITIZED):
                    value = sub_ifd.get(tag_id) or exif.get(tag_id)
                    if isinstance(value, str):
                        parsed = parse_exif_datetime(value)
                        if parsed:
                            return parsed

                value = exif.get(TAG_DATETIME)
                if isinstance(value, str):
                    return parse_exif_datetime(value)
                return None
        except Exception as e:
            logger.debug("EXIF parsing failed for %s: %s", path.name, e)
            return None

    def extract_color(self, path: Path) -> Optional[ColorDescriptor]:
        """Extract the dominant color of an image, preferring vivid swatches."""
        if not is_image(path):
            return None

        try:
            with Image.open(path) as img:
                sample = img.convert("RGB")
                sample.thumbnail((self._sample_size, self._sample_size))
                quantized = sample.quantize(colors=self._palette_colors)
                palette = quantized.getpalette() or []
                counts = quantized.getcolors() or []
        except Exception as e:
            logger.debug("Color extraction failed for %s: %s", path.name, e)
            return None

        swatches = []
        for count, index in counts:
            rgb = tuple(palette[index * 3:index * 3 + 3])
            if len(rgb) != 3:
                continue
            swatches.append((count, rgb))

        if not swatches:
            return None

        def is_vibrant(rgb: tuple[int, int, int]) -> bool:
            h, l, s = colorsys.rgb_to_hls(*(c / 255 for c in rgb))
            return (
                s >= MIN_VIBRANT_SATURATION
                and MIN_VIBRANT_LIGHTNESS <= l <= MAX_VIBRANT_LIGHTNESS
            )

        vibrant = [sw for sw in swatches if is_vibrant(sw[1])]
        _, rgb = max(vibrant or swatches, key=lambda sw: sw[0])
        hue, saturation, lightness = rgb_to_hsl(*rgb)
        return ColorDescriptor(
            hue=hue,
            saturation=saturation,
            lightness=lightness,
            rgb=(int(rgb[0]), int(rgb[1]), int(rgb[2])),
        )
