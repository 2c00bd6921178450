"""
Core data models for the backup utility.

This module contains the following dataclasses:
- BackupSettings: Validated configuration describing what to back up and how
- DeferredError: A per-file failure queued for retry or final reporting
- LogMessage: One category/detail event emitted by the backup engine
- BackupSummary: Summary of a completed backup run
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from .backup_mode import BackupMode
from .copy_outcome import CopyOutcome

PathLike = Union[str, Path]


def _normalize_names(names: Iterable[str]) -> FrozenSet[str]:
    return frozenset(str(name).strip().lower() for name in names if str(name).strip())


def _normalize_types(types: Iterable[str]) -> FrozenSet[str]:
    return frozenset(
        str(ext).strip().lstrip(".").lower() for ext in types if str(ext).strip().lstrip(".")
    )


@dataclass(frozen=True)
class BackupSettings:
    """Settings for one backup run. Immutable once constructed."""
    source_dirs: Tuple[Path, ...] = ()                # Ordered source roots
    target_dir: Optional[Path] = None                 # Backup destination root
    backup_mode: Optional[BackupMode] = None          # Copy / Sync / Isolated
    excluded_dirs: FrozenSet[str] = frozenset()       # Lower-case directory names
    excluded_types: FrozenSet[str] = frozenset()      # Lower-case extensions, no dot
    ignore_hidden_files: bool = True
    max_isolation_days: int = 0                       # 0 disables snapshot pruning
    retry_enabled: bool = True
    min_file_write_wait_ms: int = 500                 # Quiescence window
    retry_interval_ms: int = 500                      # Sleep between retry sweeps
    max_retry_time_ms: int = 3000                     # Retry wall-clock budget

    def __post_init__(self) -> None:
        # Accept any iterable of str/Path and store normalized forms
        object.__setattr__(self, "source_dirs", tuple(Path(d) for d in self.source_dirs))
        if self.target_dir is not None and str(self.target_dir) != "":
            object.__setattr__(self, "target_dir", Path(self.target_dir))
        else:
            object.__setattr__(self, "target_dir", None)
        object.__setattr__(self, "excluded_dirs", _normalize_names(self.excluded_dirs))
        object.__setattr__(self, "excluded_types", _normalize_types(self.excluded_types))

    def get_invalid_settings(self) -> Dict[str, str]:
        """Describe every invalid setting, keyed by its config file name.

        Returns:
            Dictionary mapping setting names to a reason. Empty when valid.
        """
        invalid: Dict[str, str] = {}

        if self.backup_mode is None:
            valid = " / ".join(mode.value for mode in BackupMode)
            invalid["backup_type"] = (
                f"setting is missing or associated value is invalid, valid values are: {valid}"
            )

        if self.target_dir is None:
            invalid["target_dir"] = "setting or associated value is missing."

        if not self.source_dirs:
            invalid["source_dirs"] = "setting or associated values are missing."

        if self.max_isolation_days < 0:
            invalid["max_isolation_days"] = "value must be zero or a positive number of days."

        for name in ("min_file_write_wait_ms", "retry_interval_ms", "max_retry_time_ms"):
            if getattr(self, name) < 0:
                invalid[name] = "value must be zero or a positive number of milliseconds."

        return invalid

    @property
    def is_valid(self) -> bool:
        """True when the settings may be handed to the backup engine."""
        return not self.get_invalid_settings()


@dataclass
class DeferredError:
    """A file that could not be backed up during the traversal pass."""
    source_file: Path                  # File that failed
    source_subdir: Path                # Directory of the file relative to its source root
    target_dir: Path                   # Directory the file was being copied into
    outcome: CopyOutcome               # Failure classification
    timestamp: datetime = field(default_factory=datetime.now)  # Time of (latest) failure

    @property
    def can_be_retried(self) -> bool:
        return self.outcome.can_be_retried


@dataclass(frozen=True)
class LogMessage:
    """A single category + detail event emitted during a backup run."""
    category: str
    detail: str = ""

    MIN_PADDING = 8

    def format(self, max_length: Optional[int] = None) -> str:
        """Render the event as a single line.

        Events with a detail are rendered as ``CATEGORY - detail`` with the
        category padded for alignment. When ``max_length`` is given and the
        line would exceed it, the start of the detail is dropped and marked
        with ``~`` so the (more meaningful) end of a path stays visible.

        Args:
            max_length: Optional maximum line length.

        Returns:
            The formatted line.
        """
        if not self.detail:
            return self.category

        prefix = self.category.ljust(self.MIN_PADDING) + " - "
        line = prefix + self.detail

        if max_length is not None and len(line) > max_length:
            to_remove = len(line) - max_length + 1
            if len(self.detail) > to_remove:
                line = f"{prefix}~{self.detail[to_remove:]}"

        return line

    def __str__(self) -> str:
        return self.format()


@dataclass
class BackupSummary:
    """Summary of a backup run returned by BackupRunner."""
    backup_mode: BackupMode                # Mode that was run
    files_copied: int = 0                  # New or changed files copied
    files_deleted: int = 0                 # Entries removed by sync or retention
    errors: List[DeferredError] = field(default_factory=list)  # Unresolved failures
    duration_seconds: float = 0.0          # Total run duration
    snapshot_dir: Optional[Path] = None    # Snapshot created (isolated mode only)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def completed_without_error(self) -> bool:
        return not self.errors
