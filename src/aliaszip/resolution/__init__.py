"""Tree and shortcut resolution for aliaszip."""

from .models import EntryKind, ResolutionReport, ResolvedEntry, SkippedEntry
from .probes import classify_entry
from .shortcuts import ALIAS_MAGIC, FinderAliasResolver, ShortcutResolver
from .tree import TreeResolver

__all__ = [
    "ALIAS_MAGIC",
    "EntryKind",
    "FinderAliasResolver",
    "ResolutionReport",
    "ResolvedEntry",
    "ShortcutResolver",
    "SkippedEntry",
    "TreeResolver",
    "classify_entry",
]
