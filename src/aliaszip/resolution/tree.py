"""Recursive materialization of a source tree with shortcuts replaced by their targets."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Literal

from aliaszip.errors import AccessError, CycleError, ResolutionError, UsageError, WriteError

from .models import EntryKind, ResolutionReport, ResolvedEntry, SkippedEntry
from .probes import classify_entry, is_hidden
from .shortcuts import ShortcutResolver

LOGGER = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024


class TreeResolver:
    """Copy a directory tree into a destination, dereferencing every shortcut.

    Shortcuts to files are replaced by a copy of the target file; shortcuts to
    directories are replaced by the resolved contents of the target directory.
    The resolver never writes outside the destination and never modifies the
    source tree.
    """

    def __init__(
        self,
        shortcuts: ShortcutResolver,
        *,
        on_unresolved: Literal["fail", "skip"] = "fail",
        include_hidden: bool = True,
        max_chain_depth: int = 10,
    ) -> None:
        if max_chain_depth < 1:
            raise ValueError("max_chain_depth must be at least 1.")
        self.shortcuts = shortcuts
        self.on_unresolved = on_unresolved
        self.include_hidden = include_hidden
        self.max_chain_depth = max_chain_depth

    def resolve(self, source_dir: Path, dest_dir: Path) -> ResolutionReport:
        """Materialize source_dir into dest_dir.

        Args:
            source_dir: Existing directory to resolve.
            dest_dir: Destination directory; created when missing.

        Returns:
            ResolutionReport: Entries written and entries skipped.

        Raises:
            AccessError: If a directory cannot be listed or a file cannot be read.
            ResolutionError: If a shortcut cannot be resolved under the fail policy.
            CycleError: If a shortcut or link leads back into an active directory.
            WriteError: If the destination cannot be written.
            UsageError: If the destination is the source directory itself.
        """

        source_root = Path(source_dir).expanduser().absolute()
        dest_root = Path(dest_dir).expanduser().absolute()
        if not source_root.is_dir():
            raise AccessError(f"Source is not a readable directory: {source_root}", path=source_root)
        if dest_root.resolve() == source_root.resolve():
            raise UsageError(f"Destination must differ from the source: {dest_root}", path=dest_root)

        report = ResolutionReport(source_root=source_root, destination_root=dest_root)
        self._resolve_job(source_root, dest_root, "", report, set(), dest_root.resolve())
        return report

    # Internal helpers -------------------------------------------------

    def _resolve_job(
        self,
        source: Path,
        destination: Path,
        relative: str,
        report: ResolutionReport,
        active: set[Path],
        workspace: Path,
    ) -> None:
        canonical = source.resolve()
        if canonical in active:
            raise CycleError(
                f"{source} leads back to {canonical}, which is already being resolved.",
                path=source,
            )

        active.add(canonical)
        try:
            self._make_dir(destination)
            for entry in self._list(source):
                if not self.include_hidden and is_hidden(entry):
                    LOGGER.debug("Skipping hidden entry %s", entry)
                    continue
                child_relative = f"{relative}/{entry.name}" if relative else entry.name
                self._materialize(
                    entry, destination / entry.name, child_relative, report, active, workspace
                )
        finally:
            active.discard(canonical)

    def _materialize(
        self,
        entry: Path,
        target: Path,
        relative: str,
        report: ResolutionReport,
        active: set[Path],
        workspace: Path,
    ) -> None:
        kind = classify_entry(entry, self.shortcuts)

        if kind is EntryKind.DIRECTORY:
            if entry.resolve() == workspace:
                LOGGER.debug("Skipping %s: it is the destination directory.", entry)
                return
            LOGGER.debug("Descending into %s", entry)
            report.entries.append(ResolvedEntry(path=relative, kind="directory", source=entry))
            self._resolve_job(entry, target, relative, report, active, workspace)
            return

        if kind is EntryKind.FILE:
            LOGGER.debug("Copying %s", entry)
            self._copy_file(entry, target)
            report.entries.append(ResolvedEntry(path=relative, kind="file", source=entry))
            return

        if kind is EntryKind.SHORTCUT:
            try:
                original = self._follow(entry)
            except ResolutionError as exc:
                self._unresolved(entry, relative, str(exc), report, exc)
                return

            if original.is_dir():
                LOGGER.info("Resolving folder alias: %s -> %s", entry.name, original)
                report.entries.append(
                    ResolvedEntry(
                        path=relative,
                        kind="directory_shortcut",
                        source=original,
                        shortcut=entry,
                    )
                )
                self._resolve_job(original, target, relative, report, active, workspace)
            else:
                LOGGER.info("Resolving file alias: %s -> %s", entry.name, original)
                self._copy_file(original, target)
                report.entries.append(
                    ResolvedEntry(
                        path=relative,
                        kind="file_shortcut",
                        source=original,
                        shortcut=entry,
                    )
                )
            return

        if kind is EntryKind.DANGLING_LINK:
            self._unresolved(entry, relative, f"Dangling symbolic link: {entry}", report, None)
            return

        LOGGER.warning("Skipping %s: not a regular file or directory.", entry)
        report.skipped.append(
            SkippedEntry(path=relative, source=entry, reason="not a regular file or directory")
        )

    def _follow(self, shortcut: Path) -> Path:
        """Return the final non-shortcut target of a shortcut chain."""
        current = shortcut
        for _ in range(self.max_chain_depth):
            original = self.shortcuts.resolve(current)
            if not original.exists():
                raise ResolutionError(
                    f"Alias {shortcut} points to a missing target: {original}", path=shortcut
                )
            if original.is_dir():
                return original
            if not original.is_file():
                raise ResolutionError(
                    f"Alias {shortcut} points to {original}, which is not a regular file "
                    "or directory.",
                    path=shortcut,
                )
            if not self.shortcuts.is_shortcut(original):
                return original
            LOGGER.debug("Alias %s points to another alias %s", current, original)
            current = original

        raise ResolutionError(
            f"Alias {shortcut} exceeds the maximum chain depth of {self.max_chain_depth}.",
            path=shortcut,
        )

    def _unresolved(
        self,
        entry: Path,
        relative: str,
        reason: str,
        report: ResolutionReport,
        error: ResolutionError | None,
    ) -> None:
        if self.on_unresolved == "fail":
            if error is not None:
                raise error
            raise ResolutionError(reason, path=entry)

        LOGGER.warning("Skipping unresolvable entry %s: %s", entry, reason)
        report.skipped.append(SkippedEntry(path=relative, source=entry, reason=reason))

    def _list(self, source: Path) -> list[Path]:
        try:
            return sorted(source.iterdir(), key=lambda child: child.name)
        except OSError as exc:
            raise AccessError(f"Unable to list directory {source}: {exc}", path=source) from exc

    def _make_dir(self, destination: Path) -> None:
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(
                f"Unable to create directory {destination}: {exc}", path=destination
            ) from exc

    def _copy_file(self, source: Path, destination: Path) -> None:
        try:
            reader = source.open("rb")
        except OSError as exc:
            raise AccessError(f"Unable to read {source}: {exc}", path=source) from exc

        with reader:
            try:
                writer = destination.open("wb")
            except OSError as exc:
                raise WriteError(f"Unable to write {destination}: {exc}", path=destination) from exc
            with writer:
                while True:
                    try:
                        chunk = reader.read(COPY_CHUNK_SIZE)
                    except OSError as exc:
                        raise AccessError(f"Unable to read {source}: {exc}", path=source) from exc
                    if not chunk:
                        break
                    try:
                        writer.write(chunk)
                    except OSError as exc:
                        raise WriteError(
                            f"Unable to write {destination}: {exc}", path=destination
                        ) from exc

        try:
            shutil.copymode(source, destination)
        except OSError as exc:
            raise WriteError(
                f"Unable to copy permissions to {destination}: {exc}", path=destination
            ) from exc


__all__ = ["TreeResolver"]
