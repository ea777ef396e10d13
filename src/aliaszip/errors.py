"""Error taxonomy for resolving and archiving alias trees."""

from __future__ import annotations

from pathlib import Path


class AliasZipError(Exception):
    """Base exception for resolution, workspace, and archive failures.

    Attributes:
        path: Filesystem path the failure relates to, when known.
        code: Machine-readable identifier surfaced by the CLI.
    """

    code = "aliaszip_error"

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class UsageError(AliasZipError):
    """Raised when the requested input path cannot be processed."""

    code = "usage_error"


class AccessError(AliasZipError):
    """Raised when a source directory cannot be listed or a file cannot be read."""

    code = "access_error"


class ResolutionError(AliasZipError):
    """Raised when a shortcut cannot be resolved to an existing target."""

    code = "resolution_error"


class CycleError(ResolutionError):
    """Raised when a shortcut or link leads back into a directory being resolved."""

    code = "cycle_error"


class ConfigError(AliasZipError):
    """Raised when settings cannot be read, parsed, or validated."""

    code = "config_error"


class WriteError(AliasZipError):
    """Raised when the workspace cannot be written."""

    code = "write_error"


class ArchiveError(AliasZipError):
    """Raised when the archive cannot be produced."""

    code = "archive_error"


__all__ = [
    "AliasZipError",
    "UsageError",
    "AccessError",
    "ResolutionError",
    "CycleError",
    "ConfigError",
    "WriteError",
    "ArchiveError",
]
