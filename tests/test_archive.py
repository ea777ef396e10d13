"""Tests for ZIP packaging of resolved workspaces."""

from __future__ import annotations

import zipfile
from pathlib import Path, PurePosixPath

import pytest

from aliaszip.archive import REPRODUCIBLE_TIMESTAMP, ZipArchiver, is_excluded
from aliaszip.errors import ArchiveError


def _workspace(root: Path) -> Path:
    (root / "Docs" / "empty").mkdir(parents=True)
    (root / "notes.txt").write_text("notes", encoding="utf-8")
    (root / "Docs" / "report.pdf").write_bytes(b"%PDF")
    (root / ".DS_Store").write_bytes(b"\x00\x00\x00\x01Bud1")
    (root / "Docs" / ".DS_Store").write_bytes(b"\x00\x00\x00\x01Bud1")
    (root / "Docs" / "._report.pdf").write_bytes(b"appledouble")
    return root


def test_archive_members_are_relative_to_workspace(tmp_path: Path) -> None:
    workspace = _workspace(tmp_path / "ws")
    archive_path = tmp_path / "out" / "MyFolder.zip"

    result = ZipArchiver().create(workspace, archive_path)

    with zipfile.ZipFile(archive_path) as archive:
        names = archive.namelist()
        assert archive.read("Docs/report.pdf") == b"%PDF"
        assert archive.getinfo("Docs/empty/").is_dir()

    assert names == ["Docs/", "Docs/empty/", "Docs/report.pdf", "notes.txt"]
    assert result.files == 2
    assert result.directories == 2
    assert result.archive_path == archive_path


def test_metadata_files_are_excluded(tmp_path: Path) -> None:
    workspace = _workspace(tmp_path / "ws")
    archive_path = tmp_path / "MyFolder.zip"

    result = ZipArchiver().create(workspace, archive_path)

    with zipfile.ZipFile(archive_path) as archive:
        assert not any(PurePosixPath(name).name == ".DS_Store" for name in archive.namelist())
        assert not any(PurePosixPath(name).name.startswith("._") for name in archive.namelist())
    assert result.excluded == [".DS_Store", "Docs/.DS_Store", "Docs/._report.pdf"]


def test_custom_patterns_replace_defaults(tmp_path: Path) -> None:
    workspace = _workspace(tmp_path / "ws")
    archive_path = tmp_path / "out.zip"

    ZipArchiver(["*.pdf"]).create(workspace, archive_path)

    with zipfile.ZipFile(archive_path) as archive:
        names = set(archive.namelist())
    assert "Docs/report.pdf" not in names
    assert ".DS_Store" in names


def test_excluded_directory_drops_its_contents() -> None:
    assert is_excluded(PurePosixPath("cache/__MACOSX/file.txt"), ["__MACOSX"])
    assert is_excluded(PurePosixPath("a/b/.DS_Store"), [".DS_Store"])
    assert is_excluded(PurePosixPath("build/out.o"), ["build/*"])
    assert not is_excluded(PurePosixPath("docs/readme.md"), [".DS_Store", "._*"])


def test_empty_workspace_produces_empty_archive(tmp_path: Path) -> None:
    workspace = tmp_path / "ws"
    workspace.mkdir()
    archive_path = tmp_path / "Empty.zip"

    result = ZipArchiver().create(workspace, archive_path)

    with zipfile.ZipFile(archive_path) as archive:
        assert archive.namelist() == []
    assert result.files == 0


def test_existing_archive_is_replaced(tmp_path: Path) -> None:
    workspace = _workspace(tmp_path / "ws")
    archive_path = tmp_path / "MyFolder.zip"
    with zipfile.ZipFile(archive_path, "w") as stale:
        stale.writestr("stale.txt", "old")

    ZipArchiver().create(workspace, archive_path)

    with zipfile.ZipFile(archive_path) as archive:
        assert "stale.txt" not in archive.namelist()
    assert not (tmp_path / "MyFolder.zip.partial").exists()


def test_reproducible_archives_are_byte_identical(tmp_path: Path) -> None:
    workspace = _workspace(tmp_path / "ws")
    archiver = ZipArchiver(reproducible=True)

    archiver.create(workspace, tmp_path / "first.zip")
    (workspace / "notes.txt").touch()
    archiver.create(workspace, tmp_path / "second.zip")

    assert (tmp_path / "first.zip").read_bytes() == (tmp_path / "second.zip").read_bytes()
    with zipfile.ZipFile(tmp_path / "first.zip") as archive:
        assert {info.date_time for info in archive.infolist()} == {REPRODUCIBLE_TIMESTAMP}


def test_stored_compression(tmp_path: Path) -> None:
    workspace = _workspace(tmp_path / "ws")

    ZipArchiver(compression="stored").create(workspace, tmp_path / "stored.zip")

    with zipfile.ZipFile(tmp_path / "stored.zip") as archive:
        assert archive.getinfo("notes.txt").compress_type == zipfile.ZIP_STORED


def test_unwritable_destination_raises_archive_error(tmp_path: Path) -> None:
    workspace = _workspace(tmp_path / "ws")
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(ArchiveError):
        ZipArchiver().create(workspace, blocker / "MyFolder.zip")


def test_missing_workspace_raises_archive_error(tmp_path: Path) -> None:
    with pytest.raises(ArchiveError):
        ZipArchiver().create(tmp_path / "missing", tmp_path / "out.zip")
