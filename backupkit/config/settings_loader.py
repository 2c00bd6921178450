"""Loading and creation of YAML backup configuration files."""

import os
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from backupkit.models import BackupMode, BackupSettings

PathLike = Union[str, Path]

CONFIG_EXTENSION = ".yaml"

DEFAULT_CONFIG = """\
# Backup Kit configuration

# copy     - mirror new and changed files into target_dir, never delete
# sync     - mirror into target_dir and delete what was removed from the sources
# isolated - copy everything into a new dated snapshot under target_dir
backup_type: copy

target_dir: /path/to/backup

source_dirs:
  - /path/to/source

# Directory names skipped wherever they appear (case-insensitive)
excluded_dirs:
  - node_modules
  - __pycache__

# File extensions skipped, without the leading dot (case-insensitive)
excluded_types:
  - tmp

ignore_hidden_files: true

# Isolated mode only: delete snapshots older than this many days (0 keeps all)
max_isolation_days: 0

# Re-attempt files that were busy or failed during the backup
retry_enabled: true
"""

_STRING_LIST_KEYS = ("source_dirs", "excluded_dirs", "excluded_types")
_BOOL_KEYS = ("ignore_hidden_files", "retry_enabled")
_INT_KEYS = (
    "max_isolation_days",
    "min_file_write_wait_ms",
    "retry_interval_ms",
    "max_retry_time_ms",
)


def resolve_config_path(name: PathLike) -> Path:
    """Resolve a config name given on the command line to a file path.

    ``.yaml`` is appended when the name has no extension; relative names are
    resolved against the current directory.
    """
    path = Path(os.path.expanduser(str(name)))
    if not path.suffix:
        path = path.with_name(path.name + CONFIG_EXTENSION)
    return path.resolve()


def create_default_config(path: PathLike) -> Path:
    """Write the default configuration file.

    Args:
        path: Config file to create.

    Returns:
        The path written.

    Raises:
        FileExistsError: If the file already exists.
    """
    config_path = Path(path)
    if config_path.exists():
        raise FileExistsError(f"Config file already exists: {config_path}")

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "x", encoding="utf-8") as f:
        f.write(DEFAULT_CONFIG)
    return config_path


def load_settings(path: PathLike) -> BackupSettings:
    """Load and validate a YAML configuration file.

    Args:
        path: Config file to read.

    Returns:
        The validated BackupSettings.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the YAML is malformed, a value has the wrong type, or
            the resulting settings are invalid.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file {config_path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping of settings")

    settings = settings_from_dict(data)

    invalid = settings.get_invalid_settings()
    if invalid:
        details = "\n".join(f"  - {key}: {reason}" for key, reason in invalid.items())
        raise ValueError(f"Invalid settings in config file {config_path}:\n{details}")

    return settings


def settings_from_dict(data: Dict[str, Any]) -> BackupSettings:
    """Build BackupSettings from parsed config values.

    Unknown keys are ignored. An unrecognized ``backup_type`` leaves the mode
    unset, so it is reported together with the other invalid settings.

    Raises:
        ValueError: If a value has the wrong type.
    """
    kwargs: Dict[str, Any] = {}

    backup_type = data.get("backup_type")
    if backup_type is not None:
        try:
            kwargs["backup_mode"] = BackupMode.parse(str(backup_type))
        except ValueError:
            kwargs["backup_mode"] = None

    target_dir = data.get("target_dir")
    if target_dir is not None:
        if not isinstance(target_dir, str):
            raise ValueError("target_dir must be a path string")
        kwargs["target_dir"] = Path(os.path.expanduser(target_dir)) if target_dir.strip() else None

    for key in _STRING_LIST_KEYS:
        value = data.get(key)
        if value is not None:
            kwargs[key] = _string_list(key, value)

    if kwargs.get("source_dirs"):
        kwargs["source_dirs"] = [Path(os.path.expanduser(d)) for d in kwargs["source_dirs"]]

    for key in _BOOL_KEYS:
        value = data.get(key)
        if value is not None:
            if not isinstance(value, bool):
                raise ValueError(f"{key} must be true or false")
            kwargs[key] = value

    for key in _INT_KEYS:
        value = data.get(key)
        if value is not None:
            # bool is an int subclass but never a sensible count
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{key} must be a whole number")
            kwargs[key] = value

    return BackupSettings(**kwargs)


def _string_list(key: str, value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(item, (str, int, float)) for item in value):
        raise ValueError(f"{key} must be a list of strings")
    return [str(item) for item in value]
