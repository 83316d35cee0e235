"""Scan orchestration: walk, evaluate, report.

A run walks the tree twice, first files and then directories, evaluating
every entry against the rule set for the configured mode and streaming
issues into the report as they are found. Nothing but the counters and
the top-N buffer is held in memory, so trees of any size can be scanned.

Example:
    >>> from preflight_cli.scan import run_scan
    >>> outcome = run_scan(config)
    >>> print(f"Found {outcome.counters.issues_found} issues")
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from preflight_cli.errors import OutputSinkError, PreflightError
from preflight_cli.evaluate import evaluate_entry
from preflight_cli.models import Entry, Issue, RunCounters, ScanConfig
from preflight_cli.report import IssueReporter, layout_for_mode
from preflight_cli.rules import Rule, rules_for_mode
from preflight_cli.walker import iter_directories, iter_files

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[RunCounters], None]


class ScanPhase(Enum):
    """Lifecycle of a single scan run."""

    IDLE = "idle"
    SCANNING_FILES = "scanning_files"
    SCANNING_DIRECTORIES = "scanning_directories"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ScanOutcome:
    """Result of a completed scan run."""

    config: ScanConfig
    counters: RunCounters
    top: list[Issue] = field(default_factory=list)
    output: Path | None = None
    elapsed_seconds: float = 0.0

    @property
    def has_issues(self) -> bool:
        return self.counters.issues_found > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "root": str(self.config.root),
            "mode": self.config.mode.value,
            "output": str(self.output) if self.output is not None else None,
            "summary": self.counters.to_dict(),
            "thresholds": {
                "max_path_length": self.config.max_path_length,
                "max_name_length": self.config.max_name_length,
                "max_file_size_mb": self.config.max_file_size_mb,
            },
            "top": [issue.to_dict() for issue in self.top],
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }


class Scanner:
    """Drives one scan run from IDLE to DONE (or FAILED).

    A Scanner is single-use: counters start at zero and belong to this run.
    """

    def __init__(
        self,
        config: ScanConfig,
        *,
        rules: Sequence[Rule] | None = None,
        progress: ProgressCallback | None = None,
    ) -> None:
        self.config = config
        self.rules = tuple(rules) if rules is not None else rules_for_mode(config.mode)
        self.progress = progress
        self.counters = RunCounters()
        self.phase = ScanPhase.IDLE

    def run(self) -> ScanOutcome:
        """Scan the configured root and write the report.

        Returns:
            ScanOutcome with counters, top-N issues and the report path
            (None when no issues were found and the report was removed).

        Raises:
            RootNotFoundError: If the root is missing or vanishes mid-scan.
            OutputSinkError: If the report cannot be created or written.
        """
        if self.phase is not ScanPhase.IDLE:
            msg = f"Scanner already used (phase: {self.phase.value})"
            raise RuntimeError(msg)

        config = self.config
        started = time.monotonic()
        logger.info("Scanning %s (%s mode)", config.root, config.mode.value)

        try:
            with IssueReporter(
                config.output, layout_for_mode(config.mode), top_n=config.top_n
            ) as reporter:
                self.phase = ScanPhase.SCANNING_FILES
                self._process(iter_files(config.root, exclude=[config.output]), reporter)

                self.phase = ScanPhase.SCANNING_DIRECTORIES
                self._process(iter_directories(config.root), reporter)

                self.phase = ScanPhase.FINALIZING
                summary = reporter.finalize(self.counters.issues_found)
        except PreflightError:
            self.phase = ScanPhase.FAILED
            raise
        except OSError as err:
            self.phase = ScanPhase.FAILED
            raise OutputSinkError(str(config.output), err.strerror or str(err)) from err
        except BaseException:
            self.phase = ScanPhase.FAILED
            raise

        self.phase = ScanPhase.DONE
        elapsed = time.monotonic() - started
        logger.info(
            "Scanned %d items, found %d issues in %.2fs",
            self.counters.items_scanned,
            self.counters.issues_found,
            elapsed,
        )
        return ScanOutcome(
            config=config,
            counters=self.counters,
            top=summary.top,
            output=summary.output,
            elapsed_seconds=elapsed,
        )

    def _process(self, entries: Iterator[Entry], reporter: IssueReporter) -> None:
        """Evaluate and report each entry before moving to the next."""
        interval = self.config.progress_interval
        for entry in entries:
            for issue in evaluate_entry(entry, self.config, self.counters, rules=self.rules):
                reporter.record_issue(issue)
            self.counters.record_item()
            if self.progress is not None and self.counters.items_scanned % interval == 0:
                self.progress(self.counters)


def run_scan(
    config: ScanConfig,
    *,
    rules: Sequence[Rule] | None = None,
    progress: ProgressCallback | None = None,
) -> ScanOutcome:
    """Run a complete scan with a fresh Scanner.

    Args:
        config: Settings for the run.
        rules: Optional rules to evaluate instead of the mode's default set.
        progress: Optional callback invoked every config.progress_interval items.

    Returns:
        ScanOutcome for the run.
    """
    return Scanner(config, rules=rules, progress=progress).run()
