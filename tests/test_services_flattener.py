"""Tests for folder flattening."""
import pytest
from pathlib import Path

from filerenamer.services import flattener as flattener_module
from filerenamer.services.flattener import FolderFlattener, collect_files

from .fixtures import RecordingReporter, make_file


class TestCollectFiles:
    """Tests for the iterative walk."""

    def test_depth_first_files_and_post_order_dirs(self, tmp_path: Path):
        root = tmp_path / "root"
        make_file(root / "a.txt")
        make_file(root / "sub1" / "b.txt")
        make_file(root / "sub1" / "deep" / "c.txt")
        make_file(root / "sub2" / "d.txt")

        files, dirs = collect_files(root)

        assert [f.name for f in files] == ["a.txt", "b.txt", "c.txt", "d.txt"]
        assert dirs == [
            root / "sub1" / "deep",
            root / "sub1",
            root / "sub2",
            root,
        ]

    def test_deep_tree_without_recursion_limit(self, tmp_path: Path):
        current = tmp_path / "root"
        for i in range(60):
            current = current / f"d{i}"
        make_file(current / "leaf.txt")

        files, dirs = collect_files(tmp_path / "root")

        assert len(files) == 1
        assert len(dirs) == 61


class TestFolderFlattener:
    """Tests for FolderFlattener."""

    @pytest.fixture
    def flattener(self):
        return FolderFlattener()

    def test_three_files_and_empty_subfolder(self, flattener, tmp_path: Path):
        folder = tmp_path / "dropped"
        for name in ("a.jpg", "b.jpg", "c.mp4"):
            make_file(folder / name)
        (folder / "empty").mkdir()

        result = flattener.flatten(folder)

        assert result.files_extracted == 3
        assert result.folders_deleted == 2
        assert result.errors == []
        assert not folder.exists()
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.jpg", "b.jpg", "c.mp4"]

    def test_nested_files_lifted_to_parent(self, flattener, tmp_path: Path):
        folder = tmp_path / "trip"
        make_file(folder / "day1" / "x.jpg", b"x")
        make_file(folder / "day2" / "morning" / "y.jpg", b"y")

        result = flattener.flatten(folder)

        assert result.files_extracted == 2
        assert result.folders_deleted == 4
        assert (tmp_path / "x.jpg").read_bytes() == b"x"
        assert (tmp_path / "y.jpg").read_bytes() == b"y"

    def test_collisions_get_extracted_suffix(self, flattener, tmp_path: Path):
        make_file(tmp_path / "photo.jpg", b"parent")
        folder = tmp_path / "dropped"
        make_file(folder / "photo.jpg", b"one")
        make_file(folder / "sub" / "photo.jpg", b"two")

        result = flattener.flatten(folder)

        assert result.files_extracted == 2
        assert (tmp_path / "photo.jpg").read_bytes() == b"parent"
        assert (tmp_path / "photo_extracted_1.jpg").read_bytes() == b"one"
        assert (tmp_path / "photo_extracted_2.jpg").read_bytes() == b"two"

    def test_empty_folder_is_pruned(self, flattener, tmp_path: Path):
        folder = tmp_path / "nothing"
        folder.mkdir()

        result = flattener.flatten(folder)

        assert result.files_extracted == 0
        assert result.folders_deleted == 1
        assert not folder.exists()

    def test_failed_move_retains_folder(self, flattener, tmp_path: Path, monkeypatch):
        folder = tmp_path / "dropped"
        make_file(folder / "ok.jpg")
        stuck = make_file(folder / "inner" / "stuck.jpg")
        real_rename = flattener_module.rename_file

        def selective_rename(source, target):
            if source.name == "stuck.jpg":
                raise PermissionError("locked")
            real_rename(source, target)

        monkeypatch.setattr(flattener_module, "rename_file", selective_rename)

        result = flattener.flatten(folder)

        assert result.files_extracted == 1
        assert result.folders_deleted == 0
        assert result.errors == ["Failed to extract stuck.jpg: locked"]
        assert stuck.exists()
        resolved = folder.resolve()
        assert result.retained_folders == [str(resolved / "inner"), str(resolved)]

    def test_missing_folder_reports_error(self, flattener, tmp_path: Path):
        result = flattener.flatten(tmp_path / "gone")

        assert result.files_extracted == 0
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Failed to process folder:")

    def test_logs_extractions(self, tmp_path: Path):
        reporter = RecordingReporter()
        folder = tmp_path / "dropped"
        make_file(folder / "sub" / "a.jpg")

        FolderFlattener(reporter=reporter).flatten(folder)

        messages = [m for m, _ in reporter.log_events]
        assert f"Extracted: {Path('sub') / 'a.jpg'} -> a.jpg" in messages
        assert "Deleting empty folder: sub" in messages

    def test_relative_current_folder(self, flattener, tmp_path: Path, monkeypatch):
        folder = tmp_path / "drop"
        make_file(folder / "a.txt", b"a")
        make_file(folder / "sub" / "b.txt", b"b")
        monkeypatch.chdir(folder)

        result = flattener.flatten(Path("."))

        assert result.files_extracted == 2
        assert result.folders_deleted == 2
        assert result.retained_folders == []
        assert (tmp_path / "a.txt").read_bytes() == b"a"
        assert (tmp_path / "b.txt").read_bytes() == b"b"
        assert not folder.exists()
