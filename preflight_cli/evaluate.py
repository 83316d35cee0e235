"""Entry evaluator that runs every rule against one entry."""

from __future__ import annotations

from collections.abc import Sequence

from preflight_cli.models import Entry, Issue, RunCounters, ScanConfig
from preflight_cli.rules import Rule, rules_for_mode


def evaluate_entry(
    entry: Entry,
    config: ScanConfig,
    counters: RunCounters | None = None,
    *,
    rules: Sequence[Rule] | None = None,
) -> list[Issue]:
    """Run rules against a single entry.

    Every rule runs, in order, whether or not an earlier one fired.

    Args:
        entry: The file or directory to evaluate.
        config: Thresholds for the current run.
        counters: Optional run tally; one issue is recorded per result.
        rules: Optional rules to run. Defaults to the set for config.mode.

    Returns:
        Issues in rule order (empty if the entry is clean).
    """
    if rules is None:
        rules = rules_for_mode(config.mode)

    issues: list[Issue] = []

    for rule in rules:
        issue = rule.check(entry, config)
        if issue is None:
            continue
        issues.append(issue)
        if counters is not None:
            counters.record_issue(issue.issue_type)

    return issues
