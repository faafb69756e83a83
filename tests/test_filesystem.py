"""Tests for the filesystem wrapper."""
import pytest

from bmad_installer.core.errors import CopyError
from bmad_installer.core.filesystem import LocalFileSystem


@pytest.fixture
def fs():
    return LocalFileSystem()


class TestCopy:
    """File copy and directory merge."""

    def test_copy_file_respects_overwrite(self, fs, tmp_path):
        src = tmp_path / "src.txt"
        dest = tmp_path / "out" / "dest.txt"
        src.write_text("new")
        dest.parent.mkdir()
        dest.write_text("old")

        assert fs.copy_file(src, dest, overwrite=False) is False
        assert dest.read_text() == "old"
        assert fs.copy_file(src, dest) is True
        assert dest.read_text() == "new"

    def test_copy_directory_merges(self, fs, tmp_path):
        src = tmp_path / "src"
        (src / "nested").mkdir(parents=True)
        (src / "nested" / "a.md").write_text("a")
        dest = tmp_path / "dest"
        dest.mkdir()
        (dest / "keep.md").write_text("keep")

        written = fs.copy(src, dest)

        assert written == ["nested/a.md"]
        assert (dest / "keep.md").read_text() == "keep"
        assert (dest / "nested" / "a.md").read_text() == "a"

    def test_copy_missing_source_raises(self, fs, tmp_path):
        with pytest.raises(CopyError):
            fs.copy(tmp_path / "absent", tmp_path / "dest")


class TestWriteAndList:
    """Writes, listings and removal."""

    def test_atomic_write_leaves_no_temp_file(self, fs, tmp_path):
        target = tmp_path / "deep" / "file.yaml"
        fs.write_text(target, "a: 1\n", atomic=True)
        assert target.read_text() == "a: 1\n"
        assert list(target.parent.iterdir()) == [target]

    def test_walk_files_sorted_posix(self, fs, tmp_path):
        (tmp_path / "b").mkdir()
        (tmp_path / "b" / "z.md").write_text("")
        (tmp_path / "a.md").write_text("")
        assert fs.walk_files(tmp_path) == ["a.md", "b/z.md"]

    def test_walk_missing_root_is_empty(self, fs, tmp_path):
        assert fs.walk_files(tmp_path / "absent") == []

    def test_list_dir_sorted(self, fs, tmp_path):
        (tmp_path / "b").mkdir()
        (tmp_path / "a.txt").write_text("")
        entries = fs.list_dir(tmp_path)
        assert [(e.name, e.is_dir) for e in entries] == [("a.txt", False), ("b", True)]

    def test_remove_tree_and_missing(self, fs, tmp_path):
        tree = tmp_path / "tree"
        (tree / "x").mkdir(parents=True)
        fs.remove(tree)
        fs.remove(tmp_path / "never-existed")
        assert not tree.exists()
