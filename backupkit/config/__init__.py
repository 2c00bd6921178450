"""YAML configuration for Backup Kit."""

from backupkit.config.settings_loader import (
    DEFAULT_CONFIG,
    create_default_config,
    load_settings,
    resolve_config_path,
    settings_from_dict,
)

__all__ = [
    "DEFAULT_CONFIG",
    "create_default_config",
    "load_settings",
    "resolve_config_path",
    "settings_from_dict",
]
