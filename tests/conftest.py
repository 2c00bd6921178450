"""Pytest fixtures for Backup Kit tests."""

import os
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator, List, Tuple

import pytest

from backupkit.models import BackupMode, BackupSettings


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests running whole backups on disk")


class RecordingSink:
    """Log sink that keeps every (category, detail) event for assertions."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, str]] = []

    def __call__(self, category: str, detail: str = "") -> None:
        self.events.append((category, detail))

    def categories(self) -> List[str]:
        return [category for category, _ in self.events]

    def details(self, category: str) -> List[str]:
        return [detail for cat, detail in self.events if cat == category]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def recorder() -> RecordingSink:
    """Return a fresh RecordingSink."""
    return RecordingSink()


@pytest.fixture
def source_tree(temp_dir: Path) -> Dict[str, object]:
    """Create the standard source tree used by the backup tests.

    Creates:
        Source/
        ├── root-file0.txt, root-file1.txt, root-file2.txt
        ├── .hidden-file1.txt
        ├── .hidden-dir/
        │   ├── .hidden-file2.txt
        │   └── inside-hidden.txt
        ├── SubAlpha0/ and SubAlpha1/
        │   ├── alpha-file{i}0.txt, alpha-file{i}1.txt
        │   └── SubBeta0/ and SubBeta1/
        │       └── beta-file{i}{k}.md

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Dictionary with the source ``root``, the ``visible_files`` count
        (files backed up when hidden files are ignored) and ``all_files``.
    """
    root = temp_dir / "Source"
    root.mkdir()

    for i in range(3):
        (root / f"root-file{i}.txt").write_text(f"root file {i}")

    (root / ".hidden-file1.txt").write_text("hidden file")
    hidden_dir = root / ".hidden-dir"
    hidden_dir.mkdir()
    (hidden_dir / ".hidden-file2.txt").write_text("hidden file in hidden dir")
    (hidden_dir / "inside-hidden.txt").write_text("plain name in hidden dir")

    for i in range(2):
        alpha = root / f"SubAlpha{i}"
        alpha.mkdir()
        for j in range(2):
            (alpha / f"alpha-file{i}{j}.txt").write_text(f"alpha {i}{j}")
        for k in range(2):
            beta = alpha / f"SubBeta{k}"
            beta.mkdir()
            (beta / f"beta-file{i}{k}.md").write_text(f"beta {i}{k}")

    return {"root": root, "visible_files": 11, "all_files": 14}


@pytest.fixture
def target_dir(temp_dir: Path) -> Path:
    """Return the (not yet created) backup target next to the source."""
    return temp_dir / "Target"


@pytest.fixture
def make_settings(source_tree: Dict[str, object], target_dir: Path) -> Callable[..., BackupSettings]:
    """Return a factory for BackupSettings over the standard tree.

    Files written by the fixtures are brand new, so the quiescence window is
    disabled and retries are off unless a test asks for them.
    """
    def factory(**overrides) -> BackupSettings:
        values = dict(
            source_dirs=[source_tree["root"]],
            target_dir=target_dir,
            backup_mode=BackupMode.COPY,
            min_file_write_wait_ms=0,
            retry_enabled=False,
        )
        values.update(overrides)
        return BackupSettings(**values)

    return factory


@pytest.fixture
def count_files() -> Callable[[Path], int]:
    """Return a function counting the regular files beneath a directory."""
    def counter(root: Path) -> int:
        return sum(len(files) for _, _, files in os.walk(root))

    return counter
