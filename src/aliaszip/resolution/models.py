"""Data models describing a resolved tree."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class EntryKind(str, Enum):
    """Classification of a directory entry before it is materialized."""

    FILE = "file"
    DIRECTORY = "directory"
    SHORTCUT = "shortcut"
    DANGLING_LINK = "dangling_link"
    OTHER = "other"


class ResolvedEntry(BaseModel):
    """An entry written into the workspace.

    Attributes:
        path: Workspace-relative POSIX path of the written entry.
        kind: How the entry was produced.
        source: Absolute path the content was read from.
        shortcut: Shortcut path when the entry replaced a shortcut.
    """

    path: str
    kind: Literal["file", "directory", "file_shortcut", "directory_shortcut"]
    source: Path
    shortcut: Optional[Path] = None


class SkippedEntry(BaseModel):
    """An entry left out of the workspace under the skip policy."""

    path: str
    source: Path
    reason: str


class ResolutionReport(BaseModel):
    """Aggregate outcome of resolving one source tree.

    Attributes:
        source_root: Directory that was resolved.
        destination_root: Directory the resolved tree was written to.
        entries: Entries written in traversal order.
        skipped: Entries that were not written.
    """

    source_root: Path
    destination_root: Path
    entries: List[ResolvedEntry] = Field(default_factory=list)
    skipped: List[SkippedEntry] = Field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        """Return the number of entries per kind plus the skipped total."""
        counts = {
            "files": 0,
            "directories": 0,
            "file_shortcuts": 0,
            "directory_shortcuts": 0,
        }
        for entry in self.entries:
            if entry.kind == "file":
                counts["files"] += 1
            elif entry.kind == "directory":
                counts["directories"] += 1
            elif entry.kind == "file_shortcut":
                counts["file_shortcuts"] += 1
            else:
                counts["directory_shortcuts"] += 1
        counts["skipped"] = len(self.skipped)
        return counts

    @property
    def shortcuts(self) -> List[ResolvedEntry]:
        """Entries that replaced a shortcut."""
        return [entry for entry in self.entries if entry.shortcut is not None]


__all__ = ["EntryKind", "ResolvedEntry", "SkippedEntry", "ResolutionReport"]
