"""Tests for YAML configuration loading and creation."""

import os
from pathlib import Path

import pytest
import yaml

from backupkit.config import (
    DEFAULT_CONFIG,
    create_default_config,
    load_settings,
    resolve_config_path,
    settings_from_dict,
)
from backupkit.models import BackupMode


def write_config(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestResolveConfigPath:
    """Tests for config name resolution."""

    def test_extension_is_appended(self, temp_dir: Path):
        original_cwd = os.getcwd()
        try:
            os.chdir(temp_dir)
            assert resolve_config_path("nightly") == (temp_dir / "nightly.yaml").resolve()
        finally:
            os.chdir(original_cwd)

    def test_existing_extension_is_kept(self, temp_dir: Path):
        assert resolve_config_path(temp_dir / "nightly.yml").name == "nightly.yml"


class TestCreateDefaultConfig:
    """Tests for the default config writer."""

    def test_default_config_is_written(self, temp_dir: Path):
        path = create_default_config(temp_dir / "backup.yaml")

        assert path.read_text(encoding="utf-8") == DEFAULT_CONFIG
        data = yaml.safe_load(DEFAULT_CONFIG)
        assert data["backup_type"] == "copy"
        assert data["source_dirs"] == ["/path/to/source"]

    def test_existing_file_is_not_overwritten(self, temp_dir: Path):
        existing = write_config(temp_dir / "backup.yaml", "backup_type: sync\n")

        with pytest.raises(FileExistsError):
            create_default_config(existing)

        assert existing.read_text() == "backup_type: sync\n"

    def test_default_config_loads_as_valid_settings(self, temp_dir: Path):
        settings = load_settings(create_default_config(temp_dir / "backup.yaml"))

        assert settings.backup_mode is BackupMode.COPY
        assert settings.excluded_dirs == frozenset({"node_modules", "__pycache__"})
        assert settings.excluded_types == frozenset({"tmp"})


class TestLoadSettings:
    """Tests for load_settings."""

    def test_full_config(self, temp_dir: Path):
        path = write_config(temp_dir / "full.yaml", """
backup_type: Isolated
target_dir: /backup
source_dirs:
  - /data/docs
  - /data/photos
excluded_dirs: [Cache]
excluded_types: [.TMP, log]
ignore_hidden_files: false
max_isolation_days: 30
retry_enabled: false
min_file_write_wait_ms: 1000
unknown_key: ignored
""")

        settings = load_settings(path)

        assert settings.backup_mode is BackupMode.ISOLATED
        assert settings.target_dir == Path("/backup")
        assert settings.source_dirs == (Path("/data/docs"), Path("/data/photos"))
        assert settings.excluded_dirs == frozenset({"cache"})
        assert settings.excluded_types == frozenset({"tmp", "log"})
        assert settings.ignore_hidden_files is False
        assert settings.max_isolation_days == 30
        assert settings.retry_enabled is False
        assert settings.min_file_write_wait_ms == 1000
        assert settings.max_retry_time_ms == 3000

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(FileNotFoundError):
            load_settings(temp_dir / "missing.yaml")

    def test_malformed_yaml(self, temp_dir: Path):
        path = write_config(temp_dir / "bad.yaml", "source_dirs: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_settings(path)

    def test_invalid_settings_are_listed(self, temp_dir: Path):
        path = write_config(temp_dir / "partial.yaml", "backup_type: mirror\n")

        with pytest.raises(ValueError) as exc_info:
            load_settings(path)

        message = str(exc_info.value)
        assert "backup_type" in message
        assert "target_dir" in message
        assert "source_dirs" in message

    def test_empty_file_is_invalid(self, temp_dir: Path):
        path = write_config(temp_dir / "empty.yaml", "")

        with pytest.raises(ValueError):
            load_settings(path)

    def test_top_level_must_be_mapping(self, temp_dir: Path):
        path = write_config(temp_dir / "list.yaml", "- copy\n- sync\n")

        with pytest.raises(ValueError, match="mapping"):
            load_settings(path)


class TestSettingsFromDict:
    """Tests for value type checking."""

    @pytest.mark.parametrize("data", [
        {"ignore_hidden_files": "yes"},
        {"max_isolation_days": "30"},
        {"max_isolation_days": True},
        {"source_dirs": {"a": 1}},
        {"target_dir": 42},
    ])
    def test_wrong_types_raise(self, data):
        with pytest.raises(ValueError):
            settings_from_dict(data)

    def test_single_source_string_is_accepted(self):
        settings = settings_from_dict({"source_dirs": "/data"})
        assert settings.source_dirs == (Path("/data"),)

    def test_home_directory_is_expanded(self):
        settings = settings_from_dict({"target_dir": "~/backup"})
        assert settings.target_dir == Path(os.path.expanduser("~/backup"))
