"""Entry classification probes."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .models import EntryKind

if TYPE_CHECKING:
    from .shortcuts import ShortcutResolver


def classify_entry(path: Path, shortcuts: "ShortcutResolver") -> EntryKind:
    """Return the kind of the entry at path.

    Directories are checked first so a directory can never be taken for a
    shortcut; symbolic links are followed.

    Args:
        path: Entry to classify.
        shortcuts: Resolver that recognizes platform shortcut files.

    Returns:
        EntryKind: Classification for the entry.
    """

    if path.is_dir():
        return EntryKind.DIRECTORY
    if path.is_file():
        if shortcuts.is_shortcut(path):
            return EntryKind.SHORTCUT
        return EntryKind.FILE
    if path.is_symlink():
        return EntryKind.DANGLING_LINK
    return EntryKind.OTHER


def is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


__all__ = ["classify_entry", "is_hidden"]
