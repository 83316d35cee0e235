"""Depth-first directory traversal.

The walker yields one Entry for every file and directory below a root.
Subtrees or files that cannot be read (permission denied, I/O errors,
entries removed during the scan) are skipped and logged at DEBUG level;
they never stop the scan. The only fatal condition is the root itself
disappearing.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from preflight_cli.errors import RootNotFoundError
from preflight_cli.models import Entry, EntryKind

logger = logging.getLogger(__name__)


def _list_directory(path: str) -> list[os.DirEntry[str]]:
    """List a directory sorted by name so repeated scans are identical."""
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)


def _skip_unreadable(root: str, path: str, err: OSError) -> None:
    """Log a skipped subtree, or raise if the root itself is gone."""
    if not os.path.isdir(root):
        raise RootNotFoundError(root) from err
    logger.debug("Skipping unreadable path %s: %s", path, err)


def walk(
    root: Path | str,
    kind: EntryKind | None = None,
    *,
    exclude: Iterable[Path | str] = (),
) -> Iterator[Entry]:
    """Yield entries for everything below root, depth-first.

    Files in a directory are yielded before its subdirectories are
    entered. Symlinks to directories are not followed. Directories are
    visited from an explicit stack, so depth is limited only by the
    filesystem.

    Args:
        root: Directory to traverse. The root itself is not yielded.
        kind: If given, only entries of this kind are yielded.
        exclude: Files to leave out (e.g. the report being written).

    Raises:
        RootNotFoundError: If root does not exist or vanishes mid-walk.
    """
    root_str = os.fspath(root)
    if not os.path.isdir(root_str):
        raise RootNotFoundError(root_str)

    excluded = {os.path.abspath(os.fspath(p)) for p in exclude}
    excluded_names = {os.path.basename(p) for p in excluded}

    pending = [root_str]
    while pending:
        directory = pending.pop()
        try:
            entries = _list_directory(directory)
        except OSError as err:
            _skip_unreadable(root_str, directory, err)
            continue

        subdirs: list[str] = []

        for dir_entry in entries:
            try:
                is_dir = dir_entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and dir_entry.is_file()
            except OSError as err:
                _skip_unreadable(root_str, dir_entry.path, err)
                continue

            if is_dir:
                subdirs.append(dir_entry.path)
                if kind is not EntryKind.FILE:
                    yield Entry(
                        full_path=dir_entry.path,
                        name=dir_entry.name,
                        parent_path=directory,
                        kind=EntryKind.DIRECTORY,
                    )
            elif is_file and kind is not EntryKind.DIRECTORY:
                if dir_entry.name in excluded_names and (
                    os.path.abspath(dir_entry.path) in excluded
                ):
                    continue
                try:
                    size = dir_entry.stat().st_size
                except OSError as err:
                    _skip_unreadable(root_str, dir_entry.path, err)
                    continue
                yield Entry(
                    full_path=dir_entry.path,
                    name=dir_entry.name,
                    parent_path=directory,
                    kind=EntryKind.FILE,
                    size_bytes=size,
                )

        # Reversed so the first subdirectory is popped next
        pending.extend(reversed(subdirs))


def iter_files(root: Path | str, *, exclude: Iterable[Path | str] = ()) -> Iterator[Entry]:
    """Yield every file below root."""
    return walk(root, EntryKind.FILE, exclude=exclude)


def iter_directories(root: Path | str) -> Iterator[Entry]:
    """Yield every directory below root."""
    return walk(root, EntryKind.DIRECTORY)
