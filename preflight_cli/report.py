"""Incremental CSV reporting.

Issues are written to the report as they are found, one flushed row at a
time, so a crash or kill mid-scan keeps every row already recorded. Only
the N highest-ranked issues are kept in memory for the end-of-run
summary.

Example:
    >>> with IssueReporter(Path("issues.csv"), ISSUE_LAYOUT) as reporter:
    ...     for issue in issues:
    ...         reporter.record_issue(issue)
    ...     summary = reporter.finalize()
"""

from __future__ import annotations

import csv
import heapq
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import IO, Any

from preflight_cli.constants import DEFAULT_TOP_N
from preflight_cli.errors import OutputSinkError
from preflight_cli.models import Issue, ScanMode

logger = logging.getLogger(__name__)

# =============================================================================
# Report Layouts
# =============================================================================


@dataclass(frozen=True)
class ReportLayout:
    """Column order, row conversion and ranking key for one report shape."""

    columns: tuple[str, ...]
    row: Callable[[Issue], dict[str, Any]]
    rank: Callable[[Issue], int]


def _issue_row(issue: Issue) -> dict[str, Any]:
    return {
        "Path": issue.path,
        "IssueType": issue.issue_type.value,
        "IssueDescription": issue.description,
        "FileName": issue.name,
        "Directory": issue.parent_path,
        "FileSizeBytes": issue.size_bytes,
        "FileSizeMB": f"{issue.size_mb:.2f}",
        "PathLength": issue.path_length,
        "FileNameLength": issue.name_length,
    }


def _long_path_row(issue: Issue) -> dict[str, Any]:
    return {
        "Path": issue.path,
        "Length": issue.path_length,
        "Type": issue.kind.value,
        "Name": issue.name,
        "Directory": issue.parent_path,
    }


def _by_path_length(issue: Issue) -> int:
    return issue.path_length


ISSUE_LAYOUT = ReportLayout(
    columns=(
        "Path",
        "IssueType",
        "IssueDescription",
        "FileName",
        "Directory",
        "FileSizeBytes",
        "FileSizeMB",
        "PathLength",
        "FileNameLength",
    ),
    row=_issue_row,
    rank=_by_path_length,
)

LONG_PATH_LAYOUT = ReportLayout(
    columns=("Path", "Length", "Type", "Name", "Directory"),
    row=_long_path_row,
    rank=_by_path_length,
)


def layout_for_mode(mode: ScanMode) -> ReportLayout:
    """Return the report layout a scan mode writes."""
    if mode is ScanMode.LONG_PATHS:
        return LONG_PATH_LAYOUT
    return ISSUE_LAYOUT


# =============================================================================
# Top-N Buffer
# =============================================================================


class TopN:
    """Fixed-capacity buffer of the N highest-ranked issues seen so far.

    Backed by a min-heap whose root is the weakest retained issue. On equal
    rank the earlier issue is kept.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_TOP_N,
        key: Callable[[Issue], int] = _by_path_length,
    ) -> None:
        if capacity <= 0:
            msg = f"capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self.capacity = capacity
        self._key = key
        self._heap: list[tuple[int, int, Issue]] = []
        self._seen = 0

    def __len__(self) -> int:
        return len(self._heap)

    def offer(self, issue: Issue) -> None:
        """Consider an issue for retention."""
        # Negated arrival order makes later ties compare lower
        item = (self._key(issue), -self._seen, issue)
        self._seen += 1
        if len(self._heap) < self.capacity:
            heapq.heappush(self._heap, item)
        elif item[:2] > self._heap[0][:2]:
            heapq.heapreplace(self._heap, item)

    def items(self) -> list[Issue]:
        """Retained issues, highest rank first."""
        ordered = sorted(self._heap, key=lambda item: item[:2], reverse=True)
        return [issue for _, _, issue in ordered]


# =============================================================================
# Reporter
# =============================================================================


@dataclass(frozen=True)
class ReportSummary:
    """What the reporter leaves behind once finalized."""

    output: Path | None
    rows_written: int
    top: list[Issue]


class IssueReporter:
    """Streams issues into a CSV report and keeps a top-N summary.

    The report is created (truncated) by open(). The header is written with
    the first issue. finalize() closes the file and deletes it when no issue
    was recorded. Used as a context manager the file is always closed, also
    when the scan fails.
    """

    def __init__(
        self,
        output: Path,
        layout: ReportLayout = ISSUE_LAYOUT,
        *,
        top_n: int = DEFAULT_TOP_N,
    ) -> None:
        self.output = output
        self.layout = layout
        self.top = TopN(top_n, key=layout.rank)
        self.rows_written = 0
        self._file: IO[str] | None = None
        self._writer: csv.DictWriter[str] | None = None

    def __enter__(self) -> IssueReporter:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
        if exc_type is not None and self.rows_written == 0:
            self._remove_empty_report()

    @property
    def closed(self) -> bool:
        return self._file is None

    def open(self) -> None:
        """Create or truncate the report file."""
        try:
            # Names that are not valid UTF-8 are written as backslash escapes
            self._file = open(
                self.output, "w", newline="", encoding="utf-8", errors="backslashreplace"
            )
        except OSError as err:
            raise OutputSinkError(str(self.output), err.strerror or str(err)) from err
        self._writer = csv.DictWriter(self._file, fieldnames=list(self.layout.columns))
        logger.debug("Opened report %s", self.output)

    def record_issue(self, issue: Issue) -> None:
        """Append one issue to the report and flush it to disk."""
        if self._file is None or self._writer is None:
            raise OutputSinkError(str(self.output), "report is not open")
        try:
            if self.rows_written == 0:
                self._writer.writeheader()
            self._writer.writerow(self.layout.row(issue))
            self._file.flush()
        except OSError as err:
            raise OutputSinkError(str(self.output), err.strerror or str(err)) from err
        self.rows_written += 1
        self.top.offer(issue)

    def close(self) -> None:
        """Close the report file. Safe to call more than once."""
        if self._file is None:
            return
        try:
            self._file.close()
        except OSError as err:
            raise OutputSinkError(str(self.output), err.strerror or str(err)) from err
        finally:
            self._file = None
            self._writer = None

    def finalize(self, issues_found: int | None = None) -> ReportSummary:
        """Close the report and drop it if nothing was written.

        Args:
            issues_found: Issue count from the run; defaults to rows written.

        Returns:
            ReportSummary with the report path (None if removed) and top-N.
        """
        if issues_found is None:
            issues_found = self.rows_written
        self.close()
        if issues_found == 0:
            self._remove_empty_report()
            return ReportSummary(output=None, rows_written=0, top=[])
        return ReportSummary(
            output=self.output,
            rows_written=self.rows_written,
            top=self.top.items(),
        )

    def _remove_empty_report(self) -> None:
        try:
            self.output.unlink(missing_ok=True)
        except OSError as err:
            raise OutputSinkError(str(self.output), err.strerror or str(err)) from err
        logger.debug("Removed empty report %s", self.output)
