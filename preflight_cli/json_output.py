"""JSON output envelope for machine-readable CLI output.

With `--format json` (or a command's `--json` flag) the human summary is
replaced by a single envelope on stdout:

    {
        "success": true|false,
        "command": "scan" | "long-paths",
        "data": { ... },
        "errors": [ ... ]  # Only present when success=false
    }

The CSV report is written either way; the envelope only replaces the
console summary.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from preflight_cli.errors import PreflightError


@dataclass
class ErrorDetail:
    """One entry of the errors array.

    Attributes:
        type: Error class name (e.g., "RootNotFoundError")
        message: Human-readable error description
        code: Structured PRFLT code, when the error has one
    """

    type: str
    message: str
    code: str | None = None

    @classmethod
    def from_error(cls, err: PreflightError) -> ErrorDetail:
        return cls(type=type(err).__name__, message=err.message, code=err.code)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        d = {"type": self.type, "message": self.message}
        if self.code is not None:
            d["code"] = self.code
        return d


@dataclass
class OutputEnvelope:
    """Wrapper structure for all JSON command output."""

    success: bool
    command: str
    data: dict[str, Any] | None
    errors: list[ErrorDetail] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary; errors are omitted for success envelopes."""
        result: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "data": self.data,
        }
        if self.errors is not None:
            result["errors"] = [e.to_dict() for e in self.errors]
        return result

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def success_envelope(command: str, data: dict[str, Any]) -> OutputEnvelope:
    """Create a success envelope with the given command and data."""
    return OutputEnvelope(success=True, command=command, data=data)


def error_envelope(
    command: str,
    errors: list[ErrorDetail],
    *,
    data: dict[str, Any] | None = None,
) -> OutputEnvelope:
    """Create an error envelope.

    Args:
        command: Name of the command (e.g., "scan", "long-paths")
        errors: ErrorDetail objects describing what failed
        data: Optional partial data to include (default: empty dict)
    """
    return OutputEnvelope(
        success=False,
        command=command,
        data=data if data is not None else {},
        errors=errors,
    )
