"""Shared fixtures for aliaszip tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

from aliaszip.errors import ResolutionError

FAKE_ALIAS_MARKER = b"fake-alias:"


class FakeShortcutResolver:
    """Shortcut resolver backed by marker files that name their target.

    A fake alias is a regular file whose content is `fake-alias:<target>`; an
    empty target makes the alias unresolvable.
    """

    def __init__(self) -> None:
        self.queries: list[Path] = []

    def is_shortcut(self, path: Path) -> bool:
        with path.open("rb") as handle:
            return handle.read(len(FAKE_ALIAS_MARKER)) == FAKE_ALIAS_MARKER

    def resolve(self, path: Path) -> Path:
        self.queries.append(path)
        target = path.read_bytes()[len(FAKE_ALIAS_MARKER) :].decode("utf-8").strip()
        if not target:
            raise ResolutionError(f"Corrupt alias: {path}", path=path)
        return Path(target)


def make_alias(alias: Path, target: Path | str) -> Path:
    """Create a fake alias at alias pointing to target."""
    alias.parent.mkdir(parents=True, exist_ok=True)
    alias.write_bytes(FAKE_ALIAS_MARKER + str(target).encode("utf-8"))
    return alias


def snapshot_tree(root: Path) -> dict[str, bytes | None]:
    """Return relative paths under root mapped to file bytes (None for directories)."""
    snapshot: dict[str, bytes | None] = {}
    for current, dirnames, filenames in os.walk(root):
        base = Path(current)
        for name in dirnames:
            snapshot[(base / name).relative_to(root).as_posix()] = None
        for name in filenames:
            path = base / name
            snapshot[path.relative_to(root).as_posix()] = path.read_bytes()
    return snapshot


@pytest.fixture
def fake_shortcuts() -> FakeShortcutResolver:
    return FakeShortcutResolver()


@pytest.fixture
def alias_factory() -> Callable[[Path, Path | str], Path]:
    return make_alias


@pytest.fixture
def home_env(tmp_path: Path) -> dict[str, str]:
    """Environment with HOME pointing at a scratch directory."""
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    return env
