"""Shared constants for the preflight CLI.

This module contains the limits and name lists used by the rule set,
the reporter and the configuration layer so they stay consistent.
"""

from __future__ import annotations

# Bytes per megabyte (binary), used for FileTooLarge and the FileSizeMB column
BYTES_PER_MB: int = 1_048_576

# Threshold defaults for the full issue scan
DEFAULT_MAX_PATH_LENGTH: int = 400
DEFAULT_MAX_NAME_LENGTH: int = 255
DEFAULT_MAX_FILE_SIZE_MB: int = 256_000

# The long-path scan uses its own, stricter path threshold
DEFAULT_LONG_PATH_LENGTH: int = 280

# Items between progress lines
ISSUE_SCAN_PROGRESS_INTERVAL: int = 100
LONG_PATH_PROGRESS_INTERVAL: int = 1000

# Size of the end-of-run summary buffer
DEFAULT_TOP_N: int = 10

# Report filenames used when --output is not given
DEFAULT_ISSUE_REPORT: str = "preflight_issues.csv"
DEFAULT_LONG_PATH_REPORT: str = "long_paths.csv"

# Characters that may not appear anywhere in a name
INVALID_NAME_CHARACTERS: frozenset[str] = frozenset('<>:"|?*/\\')

# Control codes 0x00-0x1F are also rejected
CONTROL_CHARACTER_LIMIT: int = 0x20

# Reserved device names (compared case-insensitively against the stem)
RESERVED_NAMES: frozenset[str] = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{i}" for i in range(10)}
    | {f"LPT{i}" for i in range(10)}
)

# Names the storage service refuses outright (compared case-insensitively)
BLOCKED_NAMES: frozenset[str] = frozenset({".lock", "_vti_", "desktop.ini"})

# Office lock/temp files start with this prefix
BLOCKED_NAME_PREFIX: str = "~$"
