"""Standardized terminal output utilities.

All user-facing CLI messages go through these functions so scan progress,
summaries and errors look the same across commands.

Basic Usage:
    from preflight_cli.output import success, info, warn, error, detail

    success("Scan complete: 48,211 items scanned")
    info("Report written to preflight_issues.csv")
    warn("1,204 issues found")
    error("Directory does not exist: /srv/share")
    detail("Scanned 1000 items, 12 issues")

Errors and warnings go to stderr by default; everything else to stdout.
"""

from __future__ import annotations

import sys
from typing import TextIO

import click

# ANSI color codes via click's style system
_STYLES = {
    "success": {"fg": "green"},
    "info": {"fg": "blue"},
    "warn": {"fg": "yellow"},
    "error": {"fg": "red"},
    "detail": {"fg": "bright_black"},  # Dimmed/gray
}

_PREFIXES = {
    "success": "\u2713",  # checkmark
    "info": "\u2192",  # arrow
    "warn": "\u26a0",  # warning
    "error": "\u2717",  # X
    "detail": " ",  # space (no prefix, just indent)
}


def _output(message: str, style: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Internal helper for styled output.

    Args:
        message: The message to display.
        style: The style name (success, error, info, warn, detail).
        file: File to write to.
        nl: Whether to print a newline after the message.
    """
    fg_color = _STYLES[style]["fg"]
    styled_prefix = click.style(_PREFIXES[style], fg=fg_color)
    styled_message = click.style(message, fg=fg_color)
    click.echo(f"{styled_prefix} {styled_message}", file=file, nl=nl)


def success(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print a success message with green checkmark.

    Example:
        >>> success("Scan complete")
        ✓ Scan complete
    """
    _output(message, "success", file=file, nl=nl)


def info(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print an info message with blue arrow.

    Example:
        >>> info("Report written to issues.csv")
        → Report written to issues.csv
    """
    _output(message, "info", file=file, nl=nl)


def warn(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print a warning message with yellow warning symbol (stderr by default)."""
    _output(message, "warn", file=file or sys.stderr, nl=nl)


def error(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print an error message with red X (stderr by default)."""
    _output(message, "error", file=file or sys.stderr, nl=nl)


def detail(message: str, *, file: TextIO | None = None, nl: bool = True) -> None:
    """Print a detail/progress message in dimmed text.

    Example:
        >>> detail("Scanned 100 items, 3 issues")
          Scanned 100 items, 3 issues
    """
    _output(message, "detail", file=file, nl=nl)
