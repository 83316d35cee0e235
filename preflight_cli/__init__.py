"""Preflight CLI - Find what will block a file tree from migrating to hosted storage."""

from preflight_cli.cli import cli
from preflight_cli.models import Entry, EntryKind, Issue, IssueType, ScanConfig, ScanMode
from preflight_cli.scan import ScanOutcome, Scanner, run_scan

__all__ = [
    "Entry",
    "EntryKind",
    "Issue",
    "IssueType",
    "ScanConfig",
    "ScanMode",
    "ScanOutcome",
    "Scanner",
    "cli",
    "run_scan",
]
