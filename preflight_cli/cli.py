"""Preflight CLI - Find what will block a file tree from migrating to hosted storage.

The CLI is a thin wrapper around the Python API (see scan.py).
All scanning logic lives in the library; the CLI handles user interaction.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click

from preflight_cli.config import build_scan_config
from preflight_cli.errors import PreflightError
from preflight_cli.json_output import ErrorDetail, error_envelope, success_envelope
from preflight_cli.models import Issue, IssueType, RunCounters, ScanMode
from preflight_cli.output import detail, error, info, success, warn
from preflight_cli.scan import ScanOutcome, run_scan


def should_output_json(ctx: click.Context, json_flag: bool = False) -> bool:
    """Determine if JSON output should be used.

    Global --format=json and the per-command --json flag both enable it.
    """
    obj = ctx.find_root().obj or {}
    global_format = obj.get("format", "text")
    return global_format == "json" or json_flag


def output_json_envelope(envelope: Any) -> None:
    """Output a JSON envelope to stdout."""
    click.echo(envelope.to_json())


def _configure_logging(verbose: bool) -> None:
    """Send library logging to stderr; DEBUG with --verbose, WARNING otherwise."""
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("preflight_cli").setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(package_name="preflight-cli")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format (json for machine parsing, text for humans).",
)
@click.pass_context
def cli(ctx: click.Context, output_format: str) -> None:
    """Preflight - Report names, paths and sizes that will block a migration."""
    ctx.ensure_object(dict)
    ctx.obj["format"] = output_format


# ─────────────────────────────────────────────────────────────────────────────
# Shared scan plumbing
# ─────────────────────────────────────────────────────────────────────────────


def _display(path: object) -> str:
    """Render a path for the terminal, escaping bytes that are not valid UTF-8."""
    return str(path).encode("utf-8", "backslashreplace").decode("utf-8")


def _print_progress(counters: RunCounters) -> None:
    detail(f"Scanned {counters.items_scanned} items, {counters.issues_found} issues")


def _print_top(outcome: ScanOutcome) -> None:
    """Print the longest paths retained by the reporter, each path once."""
    unique: dict[str, Issue] = {}
    for issue in outcome.top:
        unique.setdefault(issue.path, issue)
    if not unique:
        return
    info(f"Top {len(unique)} longest paths:")
    for issue in unique.values():
        detail(f"  {issue.path_length:>5}  {issue.kind.value:<9}  {_display(issue.path)}")


def _print_summary(outcome: ScanOutcome) -> None:
    counters = outcome.counters
    success(f"Scanned {counters.items_scanned} items in {outcome.elapsed_seconds:.1f}s")

    if not outcome.has_issues:
        success("No issues found; no report written")
        return

    noun = "issue" if counters.issues_found == 1 else "issues"
    warn(f"{counters.issues_found} {noun} found")
    if outcome.config.mode is ScanMode.ISSUES:
        for issue_type in IssueType:
            count = counters.by_type.get(issue_type, 0)
            if count:
                detail(f"  {issue_type.value}: {count}")
    _print_top(outcome)
    info(f"Report written to {_display(outcome.output)}")


def _run_command(
    ctx: click.Context,
    command: str,
    mode: ScanMode,
    root: str | None,
    *,
    json_output: bool,
    verbose: bool,
    config_file: Path | None,
    cli_values: dict[str, Any],
) -> None:
    """Build the config, run the scan and report the outcome."""
    use_json = should_output_json(ctx, json_output)
    _configure_logging(verbose)

    try:
        config = build_scan_config(mode, root, cli_values=cli_values, config_file=config_file)
        if not use_json:
            info(f"Scanning {_display(config.root)}")
        outcome = run_scan(config, progress=None if use_json else _print_progress)
    except PreflightError as err:
        if use_json:
            output_json_envelope(error_envelope(command, [ErrorDetail.from_error(err)]))
        else:
            error(_display(err.message))
        raise SystemExit(1) from err

    if use_json:
        output_json_envelope(success_envelope(command, outcome.to_dict()))
    else:
        _print_summary(outcome)

    # Finding issues is the point of the scan; exit 0 either way


_common_options = [
    click.argument("root", required=False),
    click.option(
        "--output",
        "-o",
        default=None,
        help="CSV report path (relative paths resolve against the current directory).",
    ),
    click.option(
        "--max-path-length",
        type=int,
        default=None,
        help="Flag paths longer than this many characters.",
    ),
    click.option(
        "--config",
        "config_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="YAML config file (default: preflight.yaml in the current directory).",
    ),
    click.option("--json", "json_output", is_flag=True, help="Output summary as JSON"),
    click.option("--verbose", "-v", is_flag=True, help="Log skipped paths and timing to stderr"),
]


def _with_common_options(func: Any) -> Any:
    for option in reversed(_common_options):
        func = option(func)
    return func


@cli.command()
@_with_common_options
@click.option(
    "--max-name-length",
    type=int,
    default=None,
    help="Flag file and folder names longer than this many characters.",
)
@click.option(
    "--max-file-size-mb",
    type=int,
    default=None,
    help="Flag files larger than this many megabytes.",
)
@click.pass_context
def scan(
    ctx: click.Context,
    root: str | None,
    output: str | None,
    max_path_length: int | None,
    config_file: Path | None,
    json_output: bool,
    verbose: bool,
    max_name_length: int | None,
    max_file_size_mb: int | None,
) -> None:
    """Scan ROOT for every entry that would fail to migrate.

    Checks path length, name length, invalid characters, reserved names,
    blocked names, leading spaces, trailing periods and spaces, and file
    size. Every issue is written to a CSV report as it is found.

    Examples:

        preflight scan /srv/share

        preflight scan /srv/share -o share_issues.csv --max-path-length 300

        preflight --format json scan /srv/share
    """
    _run_command(
        ctx,
        "scan",
        ScanMode.ISSUES,
        root,
        json_output=json_output,
        verbose=verbose,
        config_file=config_file,
        cli_values={
            "output": output,
            "max_path_length": max_path_length,
            "max_name_length": max_name_length,
            "max_file_size_mb": max_file_size_mb,
        },
    )


@cli.command("long-paths")
@_with_common_options
@click.pass_context
def long_paths(
    ctx: click.Context,
    root: str | None,
    output: str | None,
    max_path_length: int | None,
    config_file: Path | None,
    json_output: bool,
    verbose: bool,
) -> None:
    """List every file and folder under ROOT whose full path is too long.

    A quicker, single-rule scan that writes Path, Length, Type, Name and
    Directory for each long path.

    Examples:

        preflight long-paths /srv/share

        preflight long-paths /srv/share --max-path-length 256
    """
    _run_command(
        ctx,
        "long-paths",
        ScanMode.LONG_PATHS,
        root,
        json_output=json_output,
        verbose=verbose,
        config_file=config_file,
        cli_values={"output": output, "max_path_length": max_path_length},
    )
