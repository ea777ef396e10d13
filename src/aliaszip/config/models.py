"""Configuration models describing aliaszip settings."""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EXCLUDE_PATTERNS = [".DS_Store", "._*", "Thumbs.db", "desktop.ini"]


class AliasZipBaseModel(BaseModel):
    """Shared configuration for aliaszip Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ResolutionOptions(AliasZipBaseModel):
    """Settings that govern how source trees and shortcuts are resolved.

    Attributes:
        on_unresolved: Policy for dangling or unresolvable shortcuts.
        include_hidden: Whether dot-files and dot-directories are copied.
        max_chain_depth: Maximum number of shortcut hops followed for one entry.
        query_timeout_seconds: Timeout for a single platform shortcut query.
    """

    on_unresolved: Literal["fail", "skip"] = "fail"
    include_hidden: bool = True
    max_chain_depth: int = Field(default=10, ge=1)
    query_timeout_seconds: Optional[float] = Field(default=None, gt=0)


class ArchiveOptions(AliasZipBaseModel):
    """Settings for the produced ZIP archive.

    Attributes:
        exclude_patterns: Glob patterns for OS metadata files left out of archives.
        compression: ZIP compression method.
        reproducible: Whether members receive a fixed timestamp.
    """

    exclude_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    compression: Literal["deflated", "stored"] = "deflated"
    reproducible: bool = False


class WorkspaceOptions(AliasZipBaseModel):
    """Temporary workspace settings.

    Attributes:
        temp_root: Directory that hosts workspaces; the system default when unset.
        prefix: Name prefix for workspace directories.
        keep_on_failure: Whether a workspace survives a failed run for inspection.
    """

    temp_root: Optional[Path] = None
    prefix: str = "aliaszip_"
    keep_on_failure: bool = False


class LoggingSettings(AliasZipBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[Path] = None
    max_size_mb: int = 100
    backup_count: int = 5


class CLIOptions(AliasZipBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class AliasZipConfig(AliasZipBaseModel):
    """Top-level configuration struct for aliaszip.

    Attributes:
        resolution: Tree and shortcut resolution settings.
        archive: Archive creation settings.
        workspace: Temporary workspace settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    resolution: ResolutionOptions = Field(default_factory=ResolutionOptions)
    archive: ArchiveOptions = Field(default_factory=ArchiveOptions)
    workspace: WorkspaceOptions = Field(default_factory=WorkspaceOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_EXCLUDE_PATTERNS",
    "AliasZipBaseModel",
    "ResolutionOptions",
    "ArchiveOptions",
    "WorkspaceOptions",
    "LoggingSettings",
    "CLIOptions",
    "AliasZipConfig",
]
