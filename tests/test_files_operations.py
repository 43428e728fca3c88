"""
File operation tests.

This module contains tests for:
- ZIP extraction (layout preservation, directory entries, unsafe members)
- Recursive folder deletion
- Atomic text writes
"""

import os
import zipfile

import pytest

from pkgmgr import files
from pkgmgr.files import (
    _is_safe_archive_member,
    atomic_write_lines,
    delete_folder,
    extract_archive,
    remove_file,
    safe_extract_path,
)


@pytest.mark.unit
class TestExtractArchive:
    def test_preserves_subdirectories(self, make_zip, tmp_path):
        zip_path = make_zip(
            "nested.zip",
            {"bin/tool.exe": "exe", "docs/readme.txt": "hi", "top.cfg": "x=1"},
        )
        out_dir = tmp_path / "out"
        assert extract_archive(str(zip_path), str(out_dir)) is True
        assert (out_dir / "bin" / "tool.exe").read_text() == "exe"
        assert (out_dir / "docs" / "readme.txt").read_text() == "hi"
        assert (out_dir / "top.cfg").read_text() == "x=1"

    def test_directory_entries_are_skipped(self, tmp_path):
        zip_path = tmp_path / "dirs.zip"
        with zipfile.ZipFile(zip_path, "w") as zf:
            zf.writestr("emptydir/", "")
            zf.writestr("data/file.txt", "content")
        out_dir = tmp_path / "out"
        assert extract_archive(str(zip_path), str(out_dir)) is True
        assert (out_dir / "data" / "file.txt").exists()
        assert not (out_dir / "emptydir").exists()

    def test_unsafe_members_are_skipped(self, make_zip, tmp_path):
        zip_path = make_zip("evil.zip", {"../escape.txt": "bad", "ok.txt": "good"})
        out_dir = tmp_path / "out"
        assert extract_archive(str(zip_path), str(out_dir)) is True
        assert (out_dir / "ok.txt").exists()
        assert not (tmp_path / "escape.txt").exists()

    def test_bad_zip_returns_false(self, tmp_path):
        bogus = tmp_path / "bogus.zip"
        bogus.write_bytes(b"this is not a zip file")
        assert extract_archive(str(bogus), str(tmp_path / "out")) is False

    def test_missing_archive_returns_false(self, tmp_path):
        assert extract_archive(str(tmp_path / "nope.zip"), str(tmp_path / "out")) is False


@pytest.mark.unit
class TestSafePaths:
    @pytest.mark.parametrize(
        "member", ["/etc/passwd", "\\windows\\x", "..", "../x", "a/\x00b", ""]
    )
    def test_unsafe_member_names(self, member):
        assert _is_safe_archive_member(member) is False

    @pytest.mark.parametrize("member", ["a.txt", "dir/a.txt", "dir/../a.txt"])
    def test_safe_member_names(self, member):
        assert _is_safe_archive_member(member) is True

    def test_safe_extract_path_rejects_traversal(self, tmp_path):
        with pytest.raises(ValueError):
            safe_extract_path(str(tmp_path), "../outside.txt")

    def test_safe_extract_path_inside_base(self, tmp_path):
        result = safe_extract_path(str(tmp_path), "sub/file.txt")
        assert result == os.path.join(os.path.realpath(tmp_path), "sub", "file.txt")


@pytest.mark.unit
class TestDeleteFolder:
    def test_deletes_recursively(self, tmp_path):
        folder = tmp_path / "pkg"
        (folder / "a" / "b").mkdir(parents=True)
        (folder / "a" / "b" / "f.txt").write_text("x")
        assert delete_folder(str(folder)) is True
        assert not folder.exists()

    def test_missing_folder_is_ok(self, tmp_path, mocker):
        mock_logger = mocker.patch("pkgmgr.files.logger")
        assert delete_folder(str(tmp_path / "gone")) is True
        mock_logger.info.assert_called_once()

    def test_failure_returns_false(self, tmp_path, mocker):
        folder = tmp_path / "pkg"
        folder.mkdir()
        mocker.patch.object(files.shutil, "rmtree", side_effect=OSError("busy"))
        assert delete_folder(str(folder)) is False

    def test_remove_file(self, tmp_path):
        target = tmp_path / "a.zip"
        target.write_bytes(b"x")
        assert remove_file(str(target)) is True
        assert not target.exists()
        assert remove_file(str(target)) is True


@pytest.mark.unit
class TestAtomicWriteLines:
    def test_writes_lines(self, tmp_path):
        target = tmp_path / "out.txt"
        assert atomic_write_lines(str(target), ["one", "two"]) is True
        assert target.read_text(encoding="utf-8") == "one\ntwo\n"

    def test_replace_failure_keeps_old_content(self, tmp_path, mocker):
        target = tmp_path / "out.txt"
        target.write_text("original\n", encoding="utf-8")
        mocker.patch.object(files.os, "replace", side_effect=OSError("disk full"))
        assert atomic_write_lines(str(target), ["new"]) is False
        assert target.read_text(encoding="utf-8") == "original\n"
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]
