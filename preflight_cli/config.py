"""Configuration management for preflight scans.

Settings are resolved with the following precedence (highest to lowest):
1. CLI argument
2. Environment variable (PREFLIGHT_<KEY>)
3. Mode section of the config file (`scan:` or `long_paths:`)
4. Top level of the config file
5. Built-in default for the scan mode

The config file is YAML. It is read from --config when given, otherwise from
`preflight.yaml` in the working directory if that file exists.

Usage:
    from preflight_cli.config import build_scan_config, load_config

    config = build_scan_config(
        ScanMode.ISSUES,
        root="/srv/share",
        cli_values={"max_path_length": 300},
    )
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from preflight_cli.constants import (
    DEFAULT_ISSUE_REPORT,
    DEFAULT_LONG_PATH_LENGTH,
    DEFAULT_LONG_PATH_REPORT,
    DEFAULT_MAX_FILE_SIZE_MB,
    DEFAULT_MAX_NAME_LENGTH,
    DEFAULT_MAX_PATH_LENGTH,
    DEFAULT_TOP_N,
    ISSUE_SCAN_PROGRESS_INTERVAL,
    LONG_PATH_PROGRESS_INTERVAL,
)
from preflight_cli.errors import (
    ConfigError,
    RootNotADirectoryError,
    RootNotFoundError,
    RootNotSpecifiedError,
)
from preflight_cli.models import ScanConfig, ScanMode

# Config file looked up in the working directory when --config is not given
CONFIG_FILENAME = "preflight.yaml"

# Integer settings that can come from any source
INT_SETTINGS: frozenset[str] = frozenset(
    {"max_path_length", "max_name_length", "max_file_size_mb", "progress_interval", "top_n"}
)

KNOWN_SETTINGS: frozenset[str] = INT_SETTINGS | {"output"}

# Config file section name for each mode
_MODE_SECTIONS: dict[ScanMode, str] = {
    ScanMode.ISSUES: "scan",
    ScanMode.LONG_PATHS: "long_paths",
}

_MODE_DEFAULTS: dict[ScanMode, dict[str, Any]] = {
    ScanMode.ISSUES: {
        "max_path_length": DEFAULT_MAX_PATH_LENGTH,
        "max_name_length": DEFAULT_MAX_NAME_LENGTH,
        "max_file_size_mb": DEFAULT_MAX_FILE_SIZE_MB,
        "progress_interval": ISSUE_SCAN_PROGRESS_INTERVAL,
        "top_n": DEFAULT_TOP_N,
        "output": DEFAULT_ISSUE_REPORT,
    },
    ScanMode.LONG_PATHS: {
        "max_path_length": DEFAULT_LONG_PATH_LENGTH,
        "max_name_length": DEFAULT_MAX_NAME_LENGTH,
        "max_file_size_mb": DEFAULT_MAX_FILE_SIZE_MB,
        "progress_interval": LONG_PATH_PROGRESS_INTERVAL,
        "top_n": DEFAULT_TOP_N,
        "output": DEFAULT_LONG_PATH_REPORT,
    },
}


def mode_defaults(mode: ScanMode) -> dict[str, Any]:
    """Return a copy of the built-in defaults for a scan mode."""
    return dict(_MODE_DEFAULTS[mode])


def find_config_file(cwd: Path | None = None) -> Path | None:
    """Return preflight.yaml in the working directory, if present."""
    candidate = (cwd or Path.cwd()) / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_config(config_file: Path | None) -> dict[str, Any]:
    """Load settings from a YAML config file.

    Args:
        config_file: Path to the file, or None.

    Returns:
        Config dictionary. Returns empty dict if no file is given or it is empty.

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping.
    """
    if config_file is None:
        return {}

    try:
        content = config_file.read_text(encoding="utf-8")
    except OSError as err:
        msg = f"Cannot read config file {config_file}: {err.strerror or err}"
        raise ConfigError(msg, path=str(config_file)) from err

    if not content.strip():
        return {}

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as err:
        msg = f"Invalid YAML in config file {config_file}: {err}"
        raise ConfigError(msg, path=str(config_file)) from err

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config file {config_file} must contain a mapping"
        raise ConfigError(msg, path=str(config_file))
    return data


def _get_env_var_name(key: str) -> str:
    """Convert a setting key to environment variable name.

    Args:
        key: Setting key (e.g., "max_path_length")

    Returns:
        Environment variable name (e.g., "PREFLIGHT_MAX_PATH_LENGTH")
    """
    return f"PREFLIGHT_{key.upper()}"


def _coerce(key: str, value: Any, source: str) -> Any:
    """Convert a raw setting to its expected type."""
    if key not in INT_SETTINGS:
        return str(value)
    if isinstance(value, bool):
        msg = f"{key} from {source} must be an integer, got {value!r}"
        raise ConfigError(msg, setting=key, source=source)
    try:
        return int(value)
    except (TypeError, ValueError) as err:
        msg = f"{key} from {source} must be an integer, got {value!r}"
        raise ConfigError(msg, setting=key, source=source) from err


def get_setting(
    key: str,
    mode: ScanMode,
    *,
    cli_value: Any | None = None,
    file_config: dict[str, Any] | None = None,
) -> Any:
    """Resolve a setting with full precedence.

    Args:
        key: Setting key (e.g., "max_path_length", "output")
        mode: Scan mode, selects the config file section and the defaults
        cli_value: Value passed via CLI argument (highest precedence)
        file_config: Parsed config file contents

    Returns:
        Resolved value, converted to int for numeric settings.
    """
    if cli_value is not None:
        return _coerce(key, cli_value, "command line")

    env_var = _get_env_var_name(key)
    env_value = os.environ.get(env_var)
    if env_value is not None:
        return _coerce(key, env_value, env_var)

    file_config = file_config or {}
    section = file_config.get(_MODE_SECTIONS[mode])
    if isinstance(section, dict) and key in section:
        return _coerce(key, section[key], "config file")

    if key in file_config:
        return _coerce(key, file_config[key], "config file")

    return _MODE_DEFAULTS[mode][key]


def resolve_root(root: str | Path | None) -> Path:
    """Validate the scan root and return it in absolute form.

    Raises:
        RootNotSpecifiedError: If root is missing or blank.
        RootNotFoundError: If root does not exist.
        RootNotADirectoryError: If root is not a directory.
    """
    if root is None or not str(root).strip():
        raise RootNotSpecifiedError()
    path = Path(os.path.abspath(os.path.expanduser(str(root))))
    if not path.exists():
        raise RootNotFoundError(str(path))
    if not path.is_dir():
        raise RootNotADirectoryError(str(path))
    return path


def resolve_output(output: str | Path, cwd: Path | None = None) -> Path:
    """Resolve the report path against the working directory."""
    path = Path(output).expanduser()
    if not path.is_absolute():
        path = (cwd or Path.cwd()) / path
    return path


def build_scan_config(
    mode: ScanMode,
    root: str | Path | None,
    *,
    cli_values: dict[str, Any] | None = None,
    config_file: Path | None = None,
    cwd: Path | None = None,
) -> ScanConfig:
    """Build the immutable ScanConfig for a run.

    Args:
        mode: Which scan to run.
        root: Directory to scan, as given by the user.
        cli_values: Settings given on the command line (None values ignored).
        config_file: Explicit config file; defaults to preflight.yaml in cwd.
        cwd: Working directory for relative paths (defaults to Path.cwd()).

    Returns:
        Validated ScanConfig.
    """
    root_path = resolve_root(root)
    cli_values = cli_values or {}

    unknown = set(cli_values) - KNOWN_SETTINGS
    if unknown:
        msg = f"Unknown settings: {', '.join(sorted(unknown))}"
        raise ConfigError(msg, settings=sorted(unknown))

    if config_file is None:
        config_file = find_config_file(cwd)
    file_config = load_config(config_file)

    resolved = {
        key: get_setting(key, mode, cli_value=cli_values.get(key), file_config=file_config)
        for key in sorted(KNOWN_SETTINGS)
    }

    return ScanConfig(
        root=root_path,
        output=resolve_output(resolved["output"], cwd),
        mode=mode,
        max_path_length=resolved["max_path_length"],
        max_name_length=resolved["max_name_length"],
        max_file_size_mb=resolved["max_file_size_mb"],
        progress_interval=resolved["progress_interval"],
        top_n=resolved["top_n"],
    )
