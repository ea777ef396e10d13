"""ZIP packaging for resolved workspaces."""

from __future__ import annotations

import fnmatch
import logging
import os
import shutil
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Literal, Sequence

from pydantic import BaseModel, Field

from aliaszip.config.models import DEFAULT_EXCLUDE_PATTERNS
from aliaszip.errors import ArchiveError

LOGGER = logging.getLogger(__name__)

REPRODUCIBLE_TIMESTAMP = (1980, 1, 1, 0, 0, 0)
_COMPRESSION = {
    "deflated": zipfile.ZIP_DEFLATED,
    "stored": zipfile.ZIP_STORED,
}


class ArchiveResult(BaseModel):
    """Summary of a written archive.

    Attributes:
        archive_path: Location of the archive.
        files: Number of file members.
        directories: Number of directory members.
        excluded: Workspace-relative paths left out by exclude patterns.
    """

    archive_path: Path
    files: int = 0
    directories: int = 0
    excluded: List[str] = Field(default_factory=list)


def is_excluded(relative: PurePosixPath, patterns: Iterable[str]) -> bool:
    """Return True when any path component, or the whole path, matches a pattern."""
    text = relative.as_posix()
    for pattern in patterns:
        if fnmatch.fnmatchcase(text, pattern):
            return True
        if any(fnmatch.fnmatchcase(part, pattern) for part in relative.parts):
            return True
    return False


class ZipArchiver:
    """Write the contents of a directory into a ZIP archive."""

    def __init__(
        self,
        exclude_patterns: Sequence[str] | None = None,
        *,
        compression: Literal["deflated", "stored"] = "deflated",
        reproducible: bool = False,
    ) -> None:
        self.exclude_patterns = list(
            DEFAULT_EXCLUDE_PATTERNS if exclude_patterns is None else exclude_patterns
        )
        self.compression = _COMPRESSION[compression]
        self.reproducible = reproducible

    def create(self, source_dir: Path, archive_path: Path) -> ArchiveResult:
        """Archive everything under source_dir into archive_path.

        Member names are relative to source_dir. An existing archive at the
        destination is replaced.

        Args:
            source_dir: Directory whose contents are archived.
            archive_path: Destination archive file.

        Returns:
            ArchiveResult: Member counts and excluded paths.

        Raises:
            ArchiveError: If the directory cannot be read or the archive cannot be written.
        """

        source = Path(source_dir)
        if not source.is_dir():
            raise ArchiveError(f"Nothing to archive; {source} is not a directory.", path=source)

        destination = Path(archive_path)
        partial = destination.with_name(destination.name + ".partial")
        result = ArchiveResult(archive_path=destination)

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(partial, "w", compression=self.compression) as archive:
                for path, relative in self._members(source, result):
                    if path.is_dir():
                        self._write_directory(archive, path, relative)
                        result.directories += 1
                    else:
                        self._write_file(archive, path, relative)
                        result.files += 1
            os.replace(partial, destination)
        except (OSError, ValueError, zipfile.BadZipFile) as exc:
            if partial.exists():
                partial.unlink()
            raise ArchiveError(f"Unable to write archive {destination}: {exc}", path=destination) from exc

        LOGGER.info(
            "Wrote %s (%d files, %d directories, %d excluded)",
            destination,
            result.files,
            result.directories,
            len(result.excluded),
        )
        return result

    def _members(self, source: Path, result: ArchiveResult) -> list[tuple[Path, PurePosixPath]]:
        members: list[tuple[Path, PurePosixPath]] = []
        for path in source.rglob("*"):
            relative = PurePosixPath(path.relative_to(source).as_posix())
            if is_excluded(relative, self.exclude_patterns):
                result.excluded.append(relative.as_posix())
                continue
            members.append((path, relative))
        members.sort(key=lambda member: member[1].as_posix())
        result.excluded.sort()
        return members

    def _timestamp(self, path: Path) -> tuple[int, int, int, int, int, int]:
        if self.reproducible:
            return REPRODUCIBLE_TIMESTAMP
        info = zipfile.ZipInfo.from_file(path, strict_timestamps=False)
        return info.date_time

    def _write_directory(self, archive: zipfile.ZipFile, path: Path, relative: PurePosixPath) -> None:
        info = zipfile.ZipInfo(f"{relative.as_posix()}/", date_time=self._timestamp(path))
        info.external_attr = (0o40755 << 16) | 0x10
        archive.writestr(info, b"")

    def _write_file(self, archive: zipfile.ZipFile, path: Path, relative: PurePosixPath) -> None:
        info = zipfile.ZipInfo.from_file(path, relative.as_posix(), strict_timestamps=False)
        info.compress_type = self.compression
        if self.reproducible:
            info.date_time = REPRODUCIBLE_TIMESTAMP
        with path.open("rb") as reader, archive.open(info, "w") as writer:
            shutil.copyfileobj(reader, writer)


__all__ = ["ArchiveResult", "REPRODUCIBLE_TIMESTAMP", "ZipArchiver", "is_excluded"]
