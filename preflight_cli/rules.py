"""Migration rule base class and built-in rules.

Each rule checks one constraint imposed by the destination storage service
on a single entry. Rules are stateless and independent: a rule firing never
stops another one from running, so one entry can produce several issues.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod

from preflight_cli.constants import (
    BLOCKED_NAME_PREFIX,
    BLOCKED_NAMES,
    CONTROL_CHARACTER_LIMIT,
    INVALID_NAME_CHARACTERS,
    RESERVED_NAMES,
)
from preflight_cli.models import Entry, Issue, IssueType, ScanConfig, ScanMode


def strip_extension(name: str) -> str:
    """Return the name without its final extension.

    Follows os.path.splitext: "a.b.txt" -> "a.b", "README" -> "README",
    ".gitignore" -> ".gitignore" (a leading dot is not an extension).
    """
    return os.path.splitext(name)[0]


def find_invalid_characters(name: str) -> list[str]:
    """Return each distinct illegal character in name, in order of appearance."""
    found: list[str] = []
    for char in name:
        if char in found:
            continue
        if char in INVALID_NAME_CHARACTERS or ord(char) < CONTROL_CHARACTER_LIMIT:
            found.append(char)
    return found


def _display_char(char: str) -> str:
    if ord(char) < CONTROL_CHARACTER_LIMIT:
        return f"0x{ord(char):02X}"
    return char


class Rule(ABC):
    """Base class for all migration rules.

    Subclasses must define:
        issue_type: The IssueType this rule reports
        description: Human-readable explanation of the constraint

    Subclasses must implement:
        check(): Evaluate one entry and return an Issue or None
    """

    issue_type: IssueType
    description: str

    @abstractmethod
    def check(self, entry: Entry, config: ScanConfig) -> Issue | None:
        """Evaluate this rule against a single entry.

        Args:
            entry: The file or directory being evaluated.
            config: Thresholds for the current run.

        Returns:
            An Issue if the entry violates the rule, otherwise None.
        """
        ...

    def _issue(self, entry: Entry, message: str) -> Issue:
        """Helper to create an issue of this rule's type."""
        return Issue.from_entry(entry, self.issue_type, message)


class PathTooLongRule(Rule):
    """Full path is longer than the configured maximum."""

    issue_type = IssueType.PATH_TOO_LONG
    description = "Full path exceeds the maximum path length"

    def check(self, entry: Entry, config: ScanConfig) -> Issue | None:
        length = entry.path_length
        if length <= config.max_path_length:
            return None
        return self._issue(
            entry,
            f"Path length {length} exceeds maximum of {config.max_path_length} characters",
        )


class FileNameTooLongRule(Rule):
    issue_type = IssueType.FILE_NAME_TOO_LONG
    description = "Name exceeds the maximum name length"

    def check(self, entry: Entry, config: ScanConfig) -> Issue | None:
        length = entry.name_length
        if length <= config.max_name_length:
            return None
        return self._issue(
            entry,
            f"Name length {length} exceeds maximum of {config.max_name_length} characters",
        )


class InvalidCharactersRule(Rule):
    """Name contains characters the service rejects.

    Fires once per entry no matter how many offending characters are
    present; the message lists all of them.
    """

    issue_type = IssueType.INVALID_CHARACTERS
    description = 'Name contains < > : " | ? * / \\ or control characters'

    def check(self, entry: Entry, config: ScanConfig) -> Issue | None:
        found = find_invalid_characters(entry.name)
        if not found:
            return None
        shown = " ".join(_display_char(c) for c in found)
        return self._issue(entry, f"Name contains invalid characters: {shown}")


class ReservedNameRule(Rule):
    """Stem is a reserved device name (CON, PRN, AUX, NUL, COM0-9, LPT0-9)."""

    issue_type = IssueType.RESERVED_NAME
    description = "Name is a reserved device name"

    def check(self, entry: Entry, config: ScanConfig) -> Issue | None:
        stem = strip_extension(entry.name)
        if stem.upper() not in RESERVED_NAMES:
            return None
        return self._issue(entry, f"'{stem}' is a reserved name")


class InvalidFileNameRule(Rule):
    """Name is blocked by the service (.lock, _vti_, desktop.ini, ~$ prefix)."""

    issue_type = IssueType.INVALID_FILE_NAME
    description = "Name is not allowed by the storage service"

    def check(self, entry: Entry, config: ScanConfig) -> Issue | None:
        name = entry.name
        if name.lower() in BLOCKED_NAMES:
            return self._issue(entry, f"'{name}' is not an allowed name")
        if name.startswith(BLOCKED_NAME_PREFIX):
            return self._issue(
                entry, f"Names starting with '{BLOCKED_NAME_PREFIX}' are not allowed"
            )
        return None


class LeadingSpaceRule(Rule):
    issue_type = IssueType.LEADING_SPACE
    description = "Name starts with a space"

    def check(self, entry: Entry, config: ScanConfig) -> Issue | None:
        if not entry.name.startswith(" "):
            return None
        return self._issue(entry, "Name starts with a space")


class TrailingPeriodRule(Rule):
    issue_type = IssueType.TRAILING_PERIOD
    description = "Name (without extension) ends with a period"

    def check(self, entry: Entry, config: ScanConfig) -> Issue | None:
        if not strip_extension(entry.name).endswith("."):
            return None
        return self._issue(entry, "Name ends with a period")


class TrailingSpaceRule(Rule):
    issue_type = IssueType.TRAILING_SPACE
    description = "Name (without extension) ends with a space"

    def check(self, entry: Entry, config: ScanConfig) -> Issue | None:
        if not strip_extension(entry.name).endswith(" "):
            return None
        return self._issue(entry, "Name ends with a space")


class FileTooLargeRule(Rule):
    """File is bigger than the upload limit. Directories are never checked."""

    issue_type = IssueType.FILE_TOO_LARGE
    description = "File exceeds the maximum upload size"

    def check(self, entry: Entry, config: ScanConfig) -> Issue | None:
        if not entry.is_file or entry.size_bytes <= config.max_file_size_bytes:
            return None
        return self._issue(
            entry,
            f"File size {entry.size_bytes} bytes exceeds maximum of "
            f"{config.max_file_size_mb} MB",
        )


# Immutable tuples; order sets the order issues are emitted for one entry
DEFAULT_RULES: tuple[Rule, ...] = (
    PathTooLongRule(),
    FileNameTooLongRule(),
    InvalidCharactersRule(),
    ReservedNameRule(),
    InvalidFileNameRule(),
    LeadingSpaceRule(),
    TrailingPeriodRule(),
    TrailingSpaceRule(),
    FileTooLargeRule(),
)

LONG_PATH_RULES: tuple[Rule, ...] = (PathTooLongRule(),)


def rules_for_mode(mode: ScanMode) -> tuple[Rule, ...]:
    """Return the rule set a scan mode evaluates."""
    if mode is ScanMode.LONG_PATHS:
        return LONG_PATH_RULES
    return DEFAULT_RULES
