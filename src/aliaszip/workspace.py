"""Temporary workspace lifecycle."""

from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from aliaszip.errors import WriteError

LOGGER = logging.getLogger(__name__)


class TempWorkspaceFactory:
    """Create and delete scratch directories for resolved trees."""

    def __init__(self, root: Path | None = None, prefix: str = "aliaszip_") -> None:
        self.root = root.expanduser() if root is not None else None
        self.prefix = prefix

    def create(self) -> Path:
        """Create a fresh, empty workspace directory and return its path."""
        try:
            if self.root is not None:
                self.root.mkdir(parents=True, exist_ok=True)
            path = tempfile.mkdtemp(prefix=self.prefix, dir=self.root)
        except OSError as exc:
            raise WriteError(f"Unable to create a temporary workspace: {exc}", path=self.root) from exc
        LOGGER.debug("Created workspace %s", path)
        return Path(path)

    def delete(self, path: Path) -> None:
        """Remove a workspace and everything below it."""
        if not path.exists():
            return
        shutil.rmtree(path)
        LOGGER.debug("Removed workspace %s", path)

    @contextmanager
    def workspace(self, *, keep: bool = False, keep_on_failure: bool = False) -> Iterator[Path]:
        """Yield a workspace that is deleted on exit.

        Args:
            keep: Leave the workspace on disk regardless of the outcome.
            keep_on_failure: Leave the workspace on disk when the body raises.
        """

        path = self.create()
        failed = False
        try:
            yield path
        except BaseException:
            failed = True
            raise
        finally:
            if keep or (failed and keep_on_failure):
                LOGGER.info("Keeping workspace %s", path)
            else:
                self.delete(path)


__all__ = ["TempWorkspaceFactory"]
