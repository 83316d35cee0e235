"""Structured error codes for preflight.

All errors follow the format PRFLT-{category}{number}:
- PRFLT-ROOT*: Scan root errors
- PRFLT-OUT*: Output sink errors
- PRFLT-CFG*: Configuration errors

Every error defined here is fatal for a run. Problems reading a single
file or subtree during traversal are not errors; the walker skips them.
"""

from __future__ import annotations

from typing import Any


class PreflightError(Exception):
    """Base class for all preflight errors.

    All errors have:
    - code: Structured error code (e.g., PRFLT-ROOT002)
    - message: Human-readable error message
    """

    code: str = "PRFLT-000"

    # Reserved attribute names that cannot be overwritten by context
    _RESERVED_ATTRS = frozenset({"code", "message", "context", "args"})

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize a preflight error.

        Args:
            message: Human-readable error message.
            **context: Additional context stored as error attributes.
                Reserved keys (code, message, context, args) are ignored.
        """
        self.message = message
        self.context = context
        for key, value in context.items():
            if key not in self._RESERVED_ATTRS:
                setattr(self, key, value)
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert error to JSON-serializable dict."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# Root Errors (PRFLT-ROOT*)
class RootError(PreflightError):
    """Base class for problems with the directory being scanned."""

    code = "PRFLT-ROOT000"


class RootNotSpecifiedError(RootError):
    """Raised when the root argument is empty.

    Error code: PRFLT-ROOT001
    """

    code = "PRFLT-ROOT001"

    def __init__(self) -> None:
        super().__init__("A root directory to scan is required")


class RootNotFoundError(RootError):
    """Raised when the root directory does not exist (or vanished mid-scan).

    Error code: PRFLT-ROOT002
    """

    code = "PRFLT-ROOT002"

    def __init__(self, path: str) -> None:
        super().__init__(f"Directory does not exist: {path}", path=path)


class RootNotADirectoryError(RootError):
    """Raised when the root exists but is not a directory.

    Error code: PRFLT-ROOT003
    """

    code = "PRFLT-ROOT003"

    def __init__(self, path: str) -> None:
        super().__init__(f"Path is not a directory: {path}", path=path)


# Output Errors (PRFLT-OUT*)
class OutputSinkError(PreflightError):
    """Raised when the report file cannot be created or written.

    Error code: PRFLT-OUT001
    """

    code = "PRFLT-OUT001"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot write report {path}: {reason}", path=path, reason=reason)


# Configuration Errors (PRFLT-CFG*)
class ConfigError(PreflightError):
    """Raised when a setting or config file is invalid.

    Error code: PRFLT-CFG001
    """

    code = "PRFLT-CFG001"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, **context)
