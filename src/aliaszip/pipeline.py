"""High-level orchestration: resolve a tree into a workspace, archive it, clean up."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from aliaszip.archive import ArchiveResult, ZipArchiver
from aliaszip.config.models import AliasZipConfig
from aliaszip.errors import UsageError
from aliaszip.resolution import FinderAliasResolver, ResolutionReport, ShortcutResolver, TreeResolver
from aliaszip.workspace import TempWorkspaceFactory

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PackagingResult:
    """Outcome of a resolve-and-archive run.

    Attributes:
        source: Directory that was packaged.
        archive_path: Archive written for the run.
        resolution: Report produced by the tree resolver.
        archive: Summary of the written archive.
        workspace: Workspace the tree was resolved into.
        workspace_kept: Whether the workspace was left on disk.
    """

    source: Path
    archive_path: Path
    resolution: ResolutionReport
    archive: ArchiveResult
    workspace: Path
    workspace_kept: bool

    @property
    def json_payload(self) -> dict[str, Any]:
        """Return a JSON-ready description of the run."""
        return {
            "context": {
                "source": self.source.as_posix(),
                "archive": self.archive_path.as_posix(),
                "workspace": self.workspace.as_posix() if self.workspace_kept else None,
            },
            "counts": {
                **self.resolution.counts(),
                "archived_files": self.archive.files,
                "archived_directories": self.archive.directories,
                "excluded": len(self.archive.excluded),
            },
            "shortcuts": [entry.model_dump(mode="json") for entry in self.resolution.shortcuts],
            "skipped": [entry.model_dump(mode="json") for entry in self.resolution.skipped],
            "excluded": list(self.archive.excluded),
        }


def default_archive_path(source: Path, output: Path | None = None, cwd: Path | None = None) -> Path:
    """Return where the archive for source should be written.

    Args:
        source: Directory being packaged; its base name names the archive.
        output: Explicit archive file or directory.
        cwd: Directory used when no output is given.

    Returns:
        Path: Absolute archive path.
    """

    archive_name = f"{source.name}.zip"
    if output is None:
        if cwd is None:
            raise ValueError("Either output or cwd must be provided.")
        return (cwd / archive_name).absolute()

    candidate = output.expanduser()
    if candidate.is_dir() or (not candidate.exists() and candidate.suffix == ""):
        return (candidate / archive_name).absolute()
    return candidate.absolute()


def build_tree_resolver(
    config: AliasZipConfig,
    shortcuts: ShortcutResolver | None = None,
) -> TreeResolver:
    """Build a tree resolver from configuration, defaulting to Finder alias resolution."""
    resolution = config.resolution
    if shortcuts is None:
        shortcuts = FinderAliasResolver(timeout=resolution.query_timeout_seconds)
    return TreeResolver(
        shortcuts,
        on_unresolved=resolution.on_unresolved,
        include_hidden=resolution.include_hidden,
        max_chain_depth=resolution.max_chain_depth,
    )


class PackagingPipeline:
    """Coordinate workspace creation, tree resolution, and archiving."""

    def __init__(
        self,
        resolver: TreeResolver,
        archiver: ZipArchiver,
        workspaces: TempWorkspaceFactory,
        keep_on_failure: bool = False,
    ) -> None:
        self.resolver = resolver
        self.archiver = archiver
        self.workspaces = workspaces
        self.keep_on_failure = keep_on_failure

    @classmethod
    def from_config(
        cls,
        config: AliasZipConfig,
        shortcuts: ShortcutResolver | None = None,
    ) -> "PackagingPipeline":
        """Build a pipeline from configuration, defaulting to Finder alias resolution."""
        resolver = build_tree_resolver(config, shortcuts)
        archiver = ZipArchiver(
            config.archive.exclude_patterns,
            compression=config.archive.compression,
            reproducible=config.archive.reproducible,
        )
        workspaces = TempWorkspaceFactory(
            root=config.workspace.temp_root,
            prefix=config.workspace.prefix,
        )
        return cls(resolver, archiver, workspaces, keep_on_failure=config.workspace.keep_on_failure)

    def run(self, source: Path, archive_path: Path, keep_workspace: bool = False) -> PackagingResult:
        """Resolve source into a workspace and archive it at archive_path.

        The workspace is removed whether or not the run succeeds, unless it is
        explicitly kept.

        Raises:
            UsageError: If source is not an existing directory.
            AliasZipError: Any resolution, write, or archive failure.
        """

        source_root = Path(source).expanduser().resolve()
        if not source_root.is_dir():
            raise UsageError(f"Not a directory: {source_root}", path=source_root)

        LOGGER.info("Starting recursive resolution for %s", source_root.name)
        with self.workspaces.workspace(
            keep=keep_workspace, keep_on_failure=self.keep_on_failure
        ) as workspace:
            report = self.resolver.resolve(source_root, workspace)
            LOGGER.info("Creating archive %s", archive_path.name)
            archive = self.archiver.create(workspace, archive_path)

        return PackagingResult(
            source=source_root,
            archive_path=archive.archive_path,
            resolution=report,
            archive=archive,
            workspace=workspace,
            workspace_kept=keep_workspace,
        )


__all__ = ["PackagingPipeline", "PackagingResult", "build_tree_resolver", "default_archive_path"]
