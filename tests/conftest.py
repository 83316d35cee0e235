"""Shared pytest fixtures for preflight CLI tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from preflight_cli.models import Entry, EntryKind, ScanConfig, ScanMode

# =============================================================================
# Tree Building
# =============================================================================

TreeSpec = dict[str, int | None]


def build_tree(root: Path, spec: TreeSpec) -> None:
    """Create files and directories under root.

    Keys are relative paths. A value of None creates a directory; an int
    creates a file of that many bytes.
    """
    for rel, size in spec.items():
        path = root / rel
        if size is None:
            path.mkdir(parents=True, exist_ok=True)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"x" * size)


@pytest.fixture
def scan_root(tmp_path: Path) -> Path:
    """An empty directory to scan. Reports are written beside it, not inside."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def report_path(tmp_path: Path) -> Path:
    """Location for the CSV report, outside the scanned tree."""
    return tmp_path / "report.csv"


@pytest.fixture
def make_tree(scan_root: Path) -> Callable[[TreeSpec], Path]:
    """Factory that populates scan_root and returns it."""

    def _make(spec: TreeSpec) -> Path:
        build_tree(scan_root, spec)
        return scan_root

    return _make


@pytest.fixture
def make_config(scan_root: Path, report_path: Path) -> Callable[..., ScanConfig]:
    """Factory for a ScanConfig over scan_root writing to report_path."""

    def _make(**overrides: object) -> ScanConfig:
        values: dict[str, object] = {"root": scan_root, "output": report_path}
        values.update(overrides)
        return ScanConfig(**values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def deep_chain(scan_root: Path) -> Iterator[Callable[[int], str]]:
    """Factory for a chain of nested "d" directories under scan_root.

    Returns the deepest directory. Teardown removes the chain bottom-up,
    one level at a time.
    """
    created: list[str] = []

    def _make(depth: int) -> str:
        current = str(scan_root)
        for _ in range(depth):
            current = os.path.join(current, "d")
            os.mkdir(current)
            created.append(current)
        return current

    yield _make

    for directory in reversed(created):
        for name in os.listdir(directory):
            path = os.path.join(directory, name)
            if not os.path.isdir(path):
                os.remove(path)
        os.rmdir(directory)


# =============================================================================
# In-memory Entries
# =============================================================================


@pytest.fixture
def default_config() -> ScanConfig:
    """Issue-scan config with default thresholds; never touches disk."""
    return ScanConfig(root=Path("/data"), output=Path("/tmp/report.csv"), mode=ScanMode.ISSUES)


def _make_entry(
    name: str,
    *,
    parent: str = "/data",
    kind: EntryKind = EntryKind.FILE,
    size: int = 0,
) -> Entry:
    return Entry(
        full_path=f"{parent}/{name}",
        name=name,
        parent_path=parent,
        kind=kind,
        size_bytes=size,
    )


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    """Factory for an Entry that never touches the filesystem."""
    return _make_entry


@pytest.fixture
def entry_with_path_length() -> Callable[..., Entry]:
    """Factory for a file entry whose full path is exactly `length` characters."""

    def _make(length: int, *, name: str = "file.txt") -> Entry:
        padding = length - len(name) - 2
        assert padding > 0, "length too short for name"
        return _make_entry(name, parent="/" + "p" * padding)

    return _make
