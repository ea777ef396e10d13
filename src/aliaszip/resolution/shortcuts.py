"""Shortcut detection and resolution backends."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import Protocol

from aliaszip.errors import AccessError, ResolutionError

LOGGER = logging.getLogger(__name__)

# Header shared by bookmark-based Finder alias files.
ALIAS_MAGIC = b"book\x00\x00\x00\x00mark\x00\x00\x00\x00"

OSASCRIPT_BIN = "/usr/bin/osascript"

RESOLVE_ALIAS_SCRIPT = """\
on run argv
    set theItem to POSIX file (item 1 of argv)
    tell application "Finder"
        set originalItem to original item of (theItem as alias)
        return POSIX path of (originalItem as alias)
    end tell
end run
"""


class ShortcutResolver(Protocol):
    """Capability that recognizes shortcut files and reports their targets."""

    def is_shortcut(self, path: Path) -> bool:
        """Return True when path is a shortcut file."""
        ...

    def resolve(self, path: Path) -> Path:
        """Return the absolute original target of the shortcut at path.

        Raises:
            ResolutionError: If the shortcut cannot be resolved.
        """
        ...


class FinderAliasResolver:
    """Resolve macOS Finder aliases by asking Finder through `osascript`."""

    def __init__(
        self,
        *,
        osascript: str = OSASCRIPT_BIN,
        timeout: float | None = None,
    ) -> None:
        self.osascript = osascript
        self.timeout = timeout

    def is_shortcut(self, path: Path) -> bool:
        """Return True when the file starts with the Finder alias header."""
        try:
            with path.open("rb") as handle:
                header = handle.read(len(ALIAS_MAGIC))
        except OSError as exc:
            raise AccessError(f"Unable to read {path}: {exc}", path=path) from exc
        return header == ALIAS_MAGIC

    def resolve(self, path: Path) -> Path:
        """Return the POSIX path of the alias's original item."""
        if sys.platform != "darwin":
            raise ResolutionError(
                f"Cannot resolve Finder alias {path}: Finder is only available on macOS.",
                path=path,
            )

        command = [self.osascript, "-e", RESOLVE_ALIAS_SCRIPT, "--", str(path)]
        LOGGER.debug("Querying Finder for alias target of %s", path)
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ResolutionError(
                f"Cannot resolve alias {path}: {self.osascript} is not available.", path=path
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ResolutionError(
                f"Timed out after {self.timeout}s resolving alias {path}.", path=path
            ) from exc

        if completed.returncode != 0:
            detail = completed.stderr.strip() or f"exit status {completed.returncode}"
            raise ResolutionError(f"Unable to resolve alias {path}: {detail}", path=path)

        raw = completed.stdout.strip()
        if not raw:
            raise ResolutionError(f"Finder returned no original item for {path}.", path=path)

        target = Path(raw.rstrip("/") or "/")
        if not target.is_absolute():
            raise ResolutionError(
                f"Finder returned a relative path for {path}: {raw}", path=path
            )
        return target


__all__ = ["ALIAS_MAGIC", "ShortcutResolver", "FinderAliasResolver"]
