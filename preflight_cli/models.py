"""Data model for a preflight scan.

Entries are what the walker sees, issues are what the rules produce, and
RunCounters is the mutable tally owned by a single scan run. ScanConfig
is frozen for the lifetime of a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from preflight_cli.constants import (
    BYTES_PER_MB,
    DEFAULT_MAX_FILE_SIZE_MB,
    DEFAULT_MAX_NAME_LENGTH,
    DEFAULT_MAX_PATH_LENGTH,
    DEFAULT_TOP_N,
    ISSUE_SCAN_PROGRESS_INTERVAL,
)
from preflight_cli.errors import ConfigError

# =============================================================================
# Enums
# =============================================================================


class EntryKind(Enum):
    """Kind of filesystem object. Values match the report's Type column."""

    FILE = "File"
    DIRECTORY = "Directory"


class IssueType(Enum):
    """Categories of migration issues. Values match the IssueType column."""

    PATH_TOO_LONG = "PathTooLong"
    FILE_NAME_TOO_LONG = "FileNameTooLong"
    INVALID_CHARACTERS = "InvalidCharacters"
    RESERVED_NAME = "ReservedName"
    INVALID_FILE_NAME = "InvalidFileName"
    FILE_TOO_LARGE = "FileTooLarge"
    LEADING_SPACE = "LeadingSpace"
    TRAILING_PERIOD = "TrailingPeriod"
    TRAILING_SPACE = "TrailingSpace"


class ScanMode(Enum):
    """Which evaluator configuration and report layout a run uses."""

    ISSUES = "issues"
    LONG_PATHS = "long_paths"


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class Entry:
    """A file or directory observed during traversal."""

    full_path: str
    name: str
    parent_path: str
    kind: EntryKind
    size_bytes: int = 0

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def path_length(self) -> int:
        return len(self.full_path)

    @property
    def name_length(self) -> int:
        return len(self.name)


def size_in_mb(size_bytes: int) -> float:
    """Convert bytes to megabytes rounded to two decimals."""
    return round(size_bytes / BYTES_PER_MB, 2)


@dataclass(frozen=True)
class Issue:
    """A single rule violation recorded against one entry."""

    path: str
    name: str
    parent_path: str
    kind: EntryKind
    issue_type: IssueType
    description: str
    path_length: int
    name_length: int
    size_bytes: int = 0

    @classmethod
    def from_entry(cls, entry: Entry, issue_type: IssueType, description: str) -> Issue:
        """Copy the identifying fields of an entry into a new issue."""
        return cls(
            path=entry.full_path,
            name=entry.name,
            parent_path=entry.parent_path,
            kind=entry.kind,
            issue_type=issue_type,
            description=description,
            path_length=entry.path_length,
            name_length=entry.name_length,
            size_bytes=entry.size_bytes if entry.is_file else 0,
        )

    @property
    def size_mb(self) -> float:
        return size_in_mb(self.size_bytes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "path": self.path,
            "name": self.name,
            "directory": self.parent_path,
            "type": self.kind.value,
            "issue_type": self.issue_type.value,
            "description": self.description,
            "path_length": self.path_length,
            "name_length": self.name_length,
            "size_bytes": self.size_bytes,
        }


@dataclass
class RunCounters:
    """Progress and outcome tallies for one scan run."""

    items_scanned: int = 0
    issues_found: int = 0
    by_type: dict[IssueType, int] = field(default_factory=dict)

    def record_item(self) -> None:
        self.items_scanned += 1

    def record_issue(self, issue_type: IssueType) -> None:
        self.issues_found += 1
        self.by_type[issue_type] = self.by_type.get(issue_type, 0) + 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict, issue types in enum order."""
        return {
            "items_scanned": self.items_scanned,
            "issues_found": self.issues_found,
            "by_type": {t.value: self.by_type[t] for t in IssueType if t in self.by_type},
        }


@dataclass(frozen=True)
class ScanConfig:
    """Immutable settings for one scan run.

    Build instances through config.build_scan_config() when settings come
    from the command line, environment or a config file.
    """

    root: Path
    output: Path
    mode: ScanMode = ScanMode.ISSUES
    max_path_length: int = DEFAULT_MAX_PATH_LENGTH
    max_name_length: int = DEFAULT_MAX_NAME_LENGTH
    max_file_size_mb: int = DEFAULT_MAX_FILE_SIZE_MB
    progress_interval: int = ISSUE_SCAN_PROGRESS_INTERVAL
    top_n: int = DEFAULT_TOP_N

    def __post_init__(self) -> None:
        """Validate thresholds."""
        for name in (
            "max_path_length",
            "max_name_length",
            "max_file_size_mb",
            "progress_interval",
            "top_n",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                msg = f"{name} must be a positive integer, got {value!r}"
                raise ConfigError(msg, setting=name, value=value)

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * BYTES_PER_MB

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "root": str(self.root),
            "output": str(self.output),
            "mode": self.mode.value,
            "max_path_length": self.max_path_length,
            "max_name_length": self.max_name_length,
            "max_file_size_mb": self.max_file_size_mb,
            "progress_interval": self.progress_interval,
            "top_n": self.top_n,
        }
