"""Shared state and helpers for the backup mode handlers.

Every mode handler receives a BackupContext holding the settings, the
engine components and the run's error queue, and returns the number of
files it copied.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from backupkit.log_sink import LogSink
from backupkit.models import BackupSettings, DeferredError
from backupkit.operations import FileRemover
from backupkit.scanning import ExclusionFilter, TreeWalker


@dataclass
class BackupContext:
    """Per-run state handed to a mode handler."""
    settings: BackupSettings
    target_root: Path                      # Configured target directory
    exclusion_filter: ExclusionFilter
    walker: TreeWalker
    remover: FileRemover
    log: LogSink
    errors: List[DeferredError] = field(default_factory=list)  # Run error queue
    now: Callable[[], datetime] = datetime.now
    snapshot_dir: Optional[Path] = None    # Set by the isolated mode
    files_deleted: int = 0                 # Sync deletions and retention prunes


def source_subdir(source_dir: Path, target_root: Path) -> Path:
    """Get the part of a source path that is mirrored under the target root.

    The leading path components shared by the source and the target are
    removed, e.g. source ``/work/Source`` and target ``/work/Target`` give
    ``Source``. The path anchor is always removed. When the source is an
    ancestor of the target nothing would remain, so the source's own name
    is used instead.

    Args:
        source_dir: Source root directory.
        target_root: Backup target root.

    Returns:
        Relative path of the source's mirror beneath the target root.
    """
    source_parts = Path(os.path.abspath(source_dir)).parts
    target_parts = Path(os.path.abspath(target_root)).parts

    common = 0
    for source_part, target_part in zip(source_parts, target_parts):
        if os.path.normcase(source_part) != os.path.normcase(target_part):
            break
        common += 1

    remainder = source_parts[max(common, 1):]
    if remainder:
        return Path(*remainder)

    name = Path(os.path.abspath(source_dir)).name
    return Path(name or "root")


def backup_sources(context: BackupContext, destination_root: Path) -> int:
    """Walk every configured source into ``destination_root``.

    Mirror paths are always computed against the configured target root,
    so a snapshot directory holds the same layout as a plain copy.

    Returns:
        Number of files copied across all sources.
    """
    backup_count = 0

    for source_dir in context.settings.source_dirs:
        context.log("Source DIR", str(source_dir))
        backup_count += context.walker.walk(
            source_dir,
            source_subdir(source_dir, context.target_root),
            destination_root,
            context.errors,
        )

    return backup_count
