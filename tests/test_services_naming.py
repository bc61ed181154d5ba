"""Tests for naming strategies."""
import pytest
from datetime import datetime
from pathlib import Path

from filerenamer.core.config import SortBy
from filerenamer.core.models import SECRET_UNAVAILABLE, MediaRecord, SecretArtifact
from filerenamer.services.naming import (
    DateNamingStrategy,
    IdentifierNamingStrategy,
    create_naming_strategy,
    date_folder_name,
    format_timestamp,
    write_secret_artifact,
)

from .fixtures import FailingGenerator, FakeGenerator


def _record(derived=None, birth=None) -> MediaRecord:
    return MediaRecord(
        source_path=Path("/photos/IMG_1.jpg"),
        file_size=1,
        mod_time=datetime(2020, 1, 2, 3, 4, 5),
        sort_key=0.0,
        birth_time=birth,
        derived_date=derived,
    )


class TestFormatting:

    def test_timestamp_is_fixed_width(self):
        assert format_timestamp(datetime(2024, 3, 5, 4, 7, 9)) == "2024-03-05_04-07-09"

    def test_folder_name(self):
        assert date_folder_name(datetime(2024, 3, 5, 23, 59, 59)) == "2024-03-05"

    def test_timestamps_sort_chronologically(self):
        dates = [datetime(2024, 12, 1), datetime(2024, 2, 1, 10), datetime(2023, 12, 31)]
        names = [format_timestamp(d) for d in dates]
        assert sorted(names) == [format_timestamp(d) for d in sorted(dates)]


class TestDateNamingStrategy:

    def test_uses_metadata_date(self):
        name, artifact = DateNamingStrategy().derive_base_name(
            _record(derived=datetime(2021, 6, 15, 10, 30, 45))
        )
        assert name == "2021-06-15_10-30-45"
        assert artifact is None

    def test_falls_back_to_birth_time(self):
        name, _ = DateNamingStrategy().derive_base_name(
            _record(birth=datetime(2019, 9, 9, 9, 9, 9))
        )
        assert name == "2019-09-09_09-09-09"

    def test_falls_back_to_mtime(self):
        name, _ = DateNamingStrategy().derive_base_name(_record())
        assert name == "2020-01-02_03-04-05"


class TestIdentifierNamingStrategy:

    def test_uses_generator(self):
        strategy = IdentifierNamingStrategy(FakeGenerator())

        name, artifact = strategy.derive_base_name(_record())

        assert name == "ID0001"
        assert artifact == SecretArtifact("ID0001", "SECRET0001")

    def test_new_identifier_per_file(self):
        strategy = IdentifierNamingStrategy(FakeGenerator())

        first, _ = strategy.derive_base_name(_record())
        second, _ = strategy.derive_base_name(_record())

        assert first != second

    def test_generator_failure_uses_fallback(self):
        strategy = IdentifierNamingStrategy(FailingGenerator())

        name, artifact = strategy.derive_base_name(_record())

        assert name.startswith("1")
        assert artifact.secret == SECRET_UNAVAILABLE
        assert artifact.available is False


class TestCreateNamingStrategy:

    @pytest.mark.parametrize("sort_by", [SortBy.DATE, SortBy.COLOR])
    def test_date_names_for_date_and_color(self, sort_by):
        assert isinstance(create_naming_strategy(sort_by), DateNamingStrategy)

    def test_identifier(self):
        strategy = create_naming_strategy(SortBy.IDENTIFIER, FakeGenerator())
        assert isinstance(strategy, IdentifierNamingStrategy)


class TestWriteSecretArtifact:

    def test_written_next_to_target(self, tmp_path: Path):
        target = tmp_path / "ID0001.jpg"

        path = write_secret_artifact(SecretArtifact("ID0001", "SECRET0001"), target)

        assert path == tmp_path / "ID0001_private_key.txt"
        text = path.read_text(encoding="utf-8")
        assert "SECRET0001" in text
        assert "Associated File: ID0001.jpg" in text

    def test_never_overwrites(self, tmp_path: Path):
        existing = tmp_path / "ID0001_private_key.txt"
        existing.write_text("keep me")

        with pytest.raises(FileExistsError):
            write_secret_artifact(SecretArtifact("ID0001", "S"), tmp_path / "ID0001.jpg")

        assert existing.read_text() == "keep me"
