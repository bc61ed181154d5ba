"""Tests for the Pillow metadata oracle."""
import pytest
from datetime import datetime
from pathlib import Path

from filerenamer.engines.metadata import (
    PillowMetadataOracle,
    parse_exif_datetime,
    rgb_to_hsl,
)

from .fixtures import make_file, make_image


class TestParseExifDatetime:

    def test_standard_format(self):
        assert parse_exif_datetime("2024:03:05 14:07:09") == datetime(2024, 3, 5, 14, 7, 9)

    def test_dashed_format(self):
        assert parse_exif_datetime("2024-03-05 14:07:09") == datetime(2024, 3, 5, 14, 7, 9)

    def test_trailing_nul(self):
        assert parse_exif_datetime("2024:03:05 14:07:09\x00") is not None

    def test_garbage(self):
        assert parse_exif_datetime("0000:00:00 00:00:00") is None
        assert parse_exif_datetime("yesterday") is None


class TestRgbToHsl:

    @pytest.mark.parametrize("rgb,expected_hue", [
        ((255, 0, 0), 0),
        ((0, 255, 0), 120),
        ((0, 0, 255), 240),
    ])
    def test_primary_hues(self, rgb, expected_hue):
        hue, saturation, lightness = rgb_to_hsl(*rgb)
        assert hue == pytest.approx(expected_hue)
        assert saturation == pytest.approx(100)
        assert lightness == pytest.approx(50)

    def test_grey_has_no_saturation(self):
        _, saturation, lightness = rgb_to_hsl(128, 128, 128)
        assert saturation == pytest.approx(0)
        assert lightness == pytest.approx(50.2, abs=0.1)


class TestPillowMetadataOracle:
    """Tests for EXIF dates and dominant colors."""

    @pytest.fixture
    def oracle(self):
        return PillowMetadataOracle()

    def test_exif_date(self, oracle, tmp_path: Path):
        path = make_image(tmp_path / "dated.jpg", exif_datetime="2021:06:15 10:30:45")

        assert oracle.extract_date(path) == datetime(2021, 6, 15, 10, 30, 45)

    def test_no_exif(self, oracle, tmp_path: Path):
        path = make_image(tmp_path / "plain.png")
        assert oracle.extract_date(path) is None

    def test_video_has_no_date(self, oracle, tmp_path: Path):
        path = make_file(tmp_path / "clip.mp4")
        assert oracle.extract_date(path) is None

    def test_corrupt_image_has_no_date(self, oracle, tmp_path: Path):
        path = make_file(tmp_path / "broken.jpg", b"not really a jpeg")
        assert oracle.extract_date(path) is None

    @pytest.mark.parametrize("color,low,high", [
        ((0, 0, 255), 235, 245),
        ((0, 200, 0), 115, 125),
    ])
    def test_dominant_hue(self, oracle, tmp_path: Path, color, low, high):
        path = make_image(tmp_path / "solid.png", color=color)

        result = oracle.extract_color(path)

        assert result is not None
        assert low <= result.hue <= high

    def test_red_hue_wraps_near_zero(self, oracle, tmp_path: Path):
        path = make_image(tmp_path / "red.png", color=(255, 0, 0))

        hue = oracle.extract_color(path).hue
        assert hue < 5 or hue > 355

    def test_grey_falls_back_to_most_common(self, oracle, tmp_path: Path):
        path = make_image(tmp_path / "grey.png", color=(120, 120, 120))

        result = oracle.extract_color(path)

        assert result is not None
        assert result.saturation == pytest.approx(0, abs=1)

    def test_video_has_no_color(self, oracle, tmp_path: Path):
        assert oracle.extract_color(make_file(tmp_path / "clip.mov")) is None

    def test_corrupt_image_has_no_color(self, oracle, tmp_path: Path):
        path = make_file(tmp_path / "broken.png", b"\x89PNG garbage")
        assert oracle.extract_color(path) is None
