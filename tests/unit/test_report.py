"""Unit tests for the incremental reporter and the top-N buffer."""

from __future__ import annotations

import csv
from pathlib import Path

import pytest
from hypothesis import given
from hypothesis import strategies as st

from preflight_cli.errors import OutputSinkError
from preflight_cli.models import Entry, EntryKind, Issue, IssueType, ScanMode
from preflight_cli.report import (
    ISSUE_LAYOUT,
    LONG_PATH_LAYOUT,
    IssueReporter,
    TopN,
    layout_for_mode,
)


def _issue(
    name: str = "file.txt",
    *,
    path_length: int | None = None,
    kind: EntryKind = EntryKind.FILE,
    size: int = 0,
    issue_type: IssueType = IssueType.PATH_TOO_LONG,
) -> Issue:
    parent = "/data"
    if path_length is not None:
        parent = "/" + "p" * (path_length - len(name) - 2)
    entry = Entry(f"{parent}/{name}", name, parent, kind, size)
    return Issue.from_entry(entry, issue_type, "description")


def _read_rows(path: Path) -> list[dict[str, str]]:
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


# =============================================================================
# Layouts
# =============================================================================


@pytest.mark.unit
class TestLayouts:
    def test_issue_columns(self) -> None:
        assert ISSUE_LAYOUT.columns == (
            "Path",
            "IssueType",
            "IssueDescription",
            "FileName",
            "Directory",
            "FileSizeBytes",
            "FileSizeMB",
            "PathLength",
            "FileNameLength",
        )

    def test_long_path_columns(self) -> None:
        assert LONG_PATH_LAYOUT.columns == ("Path", "Length", "Type", "Name", "Directory")

    def test_issue_row(self) -> None:
        issue = _issue("big.iso", size=314_572_800, issue_type=IssueType.FILE_TOO_LARGE)
        row = ISSUE_LAYOUT.row(issue)

        assert row["IssueType"] == "FileTooLarge"
        assert row["FileName"] == "big.iso"
        assert row["Directory"] == "/data"
        assert row["FileSizeBytes"] == 314_572_800
        assert row["FileSizeMB"] == "300.00"
        assert row["PathLength"] == len("/data/big.iso")
        assert row["FileNameLength"] == 7

    def test_long_path_row_for_directory(self) -> None:
        row = LONG_PATH_LAYOUT.row(_issue("deep", path_length=300, kind=EntryKind.DIRECTORY))
        assert row["Length"] == 300
        assert row["Type"] == "Directory"
        assert row["Name"] == "deep"

    def test_layout_for_mode(self) -> None:
        assert layout_for_mode(ScanMode.ISSUES) is ISSUE_LAYOUT
        assert layout_for_mode(ScanMode.LONG_PATHS) is LONG_PATH_LAYOUT


# =============================================================================
# TopN
# =============================================================================


@pytest.mark.unit
class TestTopN:
    def test_keeps_highest_ranked(self) -> None:
        top = TopN(3)
        for length in [120, 300, 150, 410, 90, 299]:
            top.offer(_issue(path_length=length))

        assert [i.path_length for i in top.items()] == [410, 300, 299]
        assert len(top) == 3

    def test_ties_keep_earliest(self) -> None:
        top = TopN(2)
        first = _issue("first.txt", path_length=200)
        second = _issue("second.txt", path_length=200)
        third = _issue("third.txt", path_length=200)
        for issue in (first, second, third):
            top.offer(issue)

        assert top.items() == [first, second]

    def test_keeps_every_issue_of_one_entry(self) -> None:
        top = TopN(3)
        entry = Entry("/data/ CON?.txt ", " CON?.txt ", "/data", EntryKind.FILE)
        for issue_type in (
            IssueType.INVALID_CHARACTERS,
            IssueType.LEADING_SPACE,
            IssueType.TRAILING_SPACE,
        ):
            top.offer(Issue.from_entry(entry, issue_type, "description"))
        top.offer(_issue("other.txt"))

        kept = top.items()
        assert [i.name for i in kept] == [" CON?.txt "] * 3
        assert [i.issue_type for i in kept] == [
            IssueType.INVALID_CHARACTERS,
            IssueType.LEADING_SPACE,
            IssueType.TRAILING_SPACE,
        ]

    def test_rejects_zero_capacity(self) -> None:
        with pytest.raises(ValueError, match="capacity"):
            TopN(0)

    @given(
        lengths=st.lists(st.integers(min_value=20, max_value=2000), max_size=60),
        capacity=st.integers(min_value=1, max_value=12),
    )
    def test_matches_true_top_n_after_every_offer(self, lengths: list[int], capacity: int) -> None:
        top = TopN(capacity)
        seen: list[int] = []
        for index, length in enumerate(lengths):
            top.offer(_issue(f"f{index}.txt", path_length=length))
            seen.append(length)

            kept = [i.path_length for i in top.items()]
            assert len(kept) == min(capacity, len(seen))
            assert kept == sorted(seen, reverse=True)[:capacity]


# =============================================================================
# IssueReporter
# =============================================================================


@pytest.mark.unit
class TestIssueReporter:
    def test_header_written_with_first_issue(self, report_path: Path) -> None:
        with IssueReporter(report_path, ISSUE_LAYOUT) as reporter:
            assert report_path.read_text() == ""
            reporter.record_issue(_issue("a.txt"))

            # Flushed: readable before the reporter closes
            lines = report_path.read_text().splitlines()
            assert lines[0] == ",".join(ISSUE_LAYOUT.columns)
            assert len(lines) == 2

            reporter.finalize()

    def test_rows_in_emission_order(self, report_path: Path) -> None:
        names = ["c.txt", "a.txt", "b.txt"]
        with IssueReporter(report_path, ISSUE_LAYOUT) as reporter:
            for name in names:
                reporter.record_issue(_issue(name))
            summary = reporter.finalize()

        assert [row["FileName"] for row in _read_rows(report_path)] == names
        assert summary.output == report_path
        assert summary.rows_written == 3

    def test_truncates_existing_report(self, report_path: Path) -> None:
        report_path.write_text("stale content\n")
        with IssueReporter(report_path, LONG_PATH_LAYOUT) as reporter:
            reporter.record_issue(_issue(path_length=500))
            reporter.finalize()

        rows = _read_rows(report_path)
        assert len(rows) == 1
        assert rows[0]["Length"] == "500"

    def test_no_issues_removes_report(self, report_path: Path) -> None:
        with IssueReporter(report_path) as reporter:
            assert report_path.exists()
            summary = reporter.finalize(0)

        assert not report_path.exists()
        assert summary.output is None
        assert summary.top == []

    def test_finalize_returns_top_n(self, report_path: Path) -> None:
        with IssueReporter(report_path, top_n=2) as reporter:
            for length in (150, 450, 300):
                reporter.record_issue(_issue(path_length=length))
            summary = reporter.finalize()

        assert [i.path_length for i in summary.top] == [450, 300]

    def test_open_failure_raises_sink_error(self, tmp_path: Path) -> None:
        missing = tmp_path / "no-such-dir" / "report.csv"
        with pytest.raises(OutputSinkError) as exc_info:
            with IssueReporter(missing):
                pass

        assert exc_info.value.code == "PRFLT-OUT001"
        assert exc_info.value.path == str(missing)  # type: ignore[attr-defined]

    def test_record_after_close_raises(self, report_path: Path) -> None:
        reporter = IssueReporter(report_path)
        reporter.open()
        reporter.close()

        with pytest.raises(OutputSinkError, match="not open"):
            reporter.record_issue(_issue())

    def test_close_is_idempotent(self, report_path: Path) -> None:
        reporter = IssueReporter(report_path)
        reporter.open()
        reporter.close()
        reporter.close()
        assert reporter.closed

    def test_failure_closes_and_keeps_recorded_rows(self, report_path: Path) -> None:
        with pytest.raises(RuntimeError):
            with IssueReporter(report_path) as reporter:
                reporter.record_issue(_issue("kept.txt"))
                raise RuntimeError("boom")

        assert reporter.closed
        assert [row["FileName"] for row in _read_rows(report_path)] == ["kept.txt"]

    def test_failure_before_any_issue_removes_report(self, report_path: Path) -> None:
        with pytest.raises(RuntimeError):
            with IssueReporter(report_path) as reporter:
                raise RuntimeError("boom")

        assert reporter.closed
        assert not report_path.exists()

    def test_undecodable_name_is_escaped(self, report_path: Path) -> None:
        with IssueReporter(report_path) as reporter:
            name = "bad\udcff\x01.txt"
            reporter.record_issue(_issue(name, issue_type=IssueType.INVALID_CHARACTERS))
            reporter.finalize()

        data = report_path.read_bytes()
        assert b"bad\\udcff\x01.txt" in data
        (row,) = _read_rows(report_path)
        assert row["FileName"] == "bad\\udcff\x01.txt"
