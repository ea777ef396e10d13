"""End-to-end tests for resolving and archiving a folder."""

from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from aliaszip.config.models import AliasZipConfig, WorkspaceOptions
from aliaszip.errors import ArchiveError, ResolutionError, UsageError
from aliaszip.pipeline import PackagingPipeline, default_archive_path
from conftest import FakeShortcutResolver, make_alias


def _config(tmp_path: Path, **workspace: object) -> AliasZipConfig:
    return AliasZipConfig(workspace=WorkspaceOptions(temp_root=tmp_path / "scratch", **workspace))


def _desktop_folder(home: Path) -> Path:
    docs = home / "Projects" / "Docs"
    docs.mkdir(parents=True)
    (docs / "report.pdf").write_bytes(b"%PDF-1.7 report")
    folder = home / "Desktop" / "MyFolder"
    folder.mkdir(parents=True)
    (folder / "notes.txt").write_text("meeting notes", encoding="utf-8")
    (folder / ".DS_Store").write_bytes(b"Bud1")
    make_alias(folder / "Docs", docs)
    return folder


def test_desktop_folder_scenario(tmp_path: Path, fake_shortcuts: FakeShortcutResolver) -> None:
    folder = _desktop_folder(tmp_path / "home")
    cwd = tmp_path / "cwd"
    archive_path = default_archive_path(folder, cwd=cwd)
    pipeline = PackagingPipeline.from_config(_config(tmp_path), shortcuts=fake_shortcuts)

    result = pipeline.run(folder, archive_path)

    assert archive_path == cwd / "MyFolder.zip"
    with zipfile.ZipFile(archive_path) as archive:
        assert archive.namelist() == ["Docs/", "Docs/report.pdf", "notes.txt"]
        assert archive.read("Docs/report.pdf") == b"%PDF-1.7 report"
        assert archive.read("notes.txt") == b"meeting notes"
        for name in archive.namelist():
            assert not archive.read(name).startswith(b"fake-alias:")
    assert result.archive.excluded == [".DS_Store"]
    assert result.resolution.counts()["directory_shortcuts"] == 1
    assert not result.workspace.exists()
    assert list((tmp_path / "scratch").iterdir()) == []


def test_json_payload_describes_run(tmp_path: Path, fake_shortcuts: FakeShortcutResolver) -> None:
    folder = _desktop_folder(tmp_path / "home")
    pipeline = PackagingPipeline.from_config(_config(tmp_path), shortcuts=fake_shortcuts)

    payload = pipeline.run(folder, tmp_path / "MyFolder.zip").json_payload

    assert payload["context"]["workspace"] is None
    assert payload["counts"]["archived_files"] == 2
    assert payload["counts"]["directory_shortcuts"] == 1
    assert payload["shortcuts"][0]["path"] == "Docs"
    assert payload["shortcuts"][0]["kind"] == "directory_shortcut"
    assert payload["excluded"] == [".DS_Store"]


def test_keep_workspace_leaves_resolved_tree(
    tmp_path: Path, fake_shortcuts: FakeShortcutResolver
) -> None:
    folder = _desktop_folder(tmp_path / "home")
    pipeline = PackagingPipeline.from_config(_config(tmp_path), shortcuts=fake_shortcuts)

    result = pipeline.run(folder, tmp_path / "MyFolder.zip", keep_workspace=True)

    assert result.workspace_kept is True
    assert (result.workspace / "Docs" / "report.pdf").read_bytes() == b"%PDF-1.7 report"


def test_archive_failure_still_removes_workspace(
    tmp_path: Path, fake_shortcuts: FakeShortcutResolver
) -> None:
    folder = _desktop_folder(tmp_path / "home")
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")
    pipeline = PackagingPipeline.from_config(_config(tmp_path), shortcuts=fake_shortcuts)

    with pytest.raises(ArchiveError):
        pipeline.run(folder, blocker / "MyFolder.zip")

    assert list((tmp_path / "scratch").iterdir()) == []


def test_resolution_failure_removes_workspace_unless_kept(
    tmp_path: Path, fake_shortcuts: FakeShortcutResolver
) -> None:
    folder = _desktop_folder(tmp_path / "home")
    make_alias(folder / "gone", tmp_path / "missing")

    with pytest.raises(ResolutionError):
        PackagingPipeline.from_config(_config(tmp_path), shortcuts=fake_shortcuts).run(
            folder, tmp_path / "MyFolder.zip"
        )
    assert list((tmp_path / "scratch").iterdir()) == []
    assert not (tmp_path / "MyFolder.zip").exists()

    keeping = PackagingPipeline.from_config(
        _config(tmp_path, keep_on_failure=True), shortcuts=fake_shortcuts
    )
    with pytest.raises(ResolutionError):
        keeping.run(folder, tmp_path / "MyFolder.zip")
    assert len(list((tmp_path / "scratch").iterdir())) == 1


def test_skip_policy_from_config(tmp_path: Path, fake_shortcuts: FakeShortcutResolver) -> None:
    folder = _desktop_folder(tmp_path / "home")
    make_alias(folder / "gone", tmp_path / "missing")
    config = _config(tmp_path)
    config.resolution.on_unresolved = "skip"

    result = PackagingPipeline.from_config(config, shortcuts=fake_shortcuts).run(
        folder, tmp_path / "MyFolder.zip"
    )

    assert [skipped.path for skipped in result.resolution.skipped] == ["gone"]
    with zipfile.ZipFile(result.archive_path) as archive:
        assert "gone" not in archive.namelist()


def test_source_must_be_a_directory(tmp_path: Path, fake_shortcuts: FakeShortcutResolver) -> None:
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("x", encoding="utf-8")
    pipeline = PackagingPipeline.from_config(_config(tmp_path), shortcuts=fake_shortcuts)

    with pytest.raises(UsageError):
        pipeline.run(not_a_dir, tmp_path / "out.zip")


def test_default_archive_path_variants(tmp_path: Path) -> None:
    source = tmp_path / "MyFolder"
    existing_dir = tmp_path / "existing"
    existing_dir.mkdir()

    assert default_archive_path(source, cwd=tmp_path) == tmp_path / "MyFolder.zip"
    assert default_archive_path(source, existing_dir) == existing_dir / "MyFolder.zip"
    assert default_archive_path(source, tmp_path / "new-dir") == tmp_path / "new-dir" / "MyFolder.zip"
    assert default_archive_path(source, tmp_path / "custom.zip") == tmp_path / "custom.zip"
    with pytest.raises(ValueError):
        default_archive_path(source)


def test_relative_source_is_reported_by_folder_name(
    tmp_path: Path, fake_shortcuts: FakeShortcutResolver
) -> None:
    folder = _desktop_folder(tmp_path / "home")
    (folder / "sub").mkdir()
    pipeline = PackagingPipeline.from_config(_config(tmp_path), shortcuts=fake_shortcuts)

    result = pipeline.run(folder / "sub" / "..", tmp_path / "out.zip")

    assert result.source == folder
    assert result.json_payload["context"]["source"] == folder.as_posix()
