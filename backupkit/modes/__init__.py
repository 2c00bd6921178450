"""Backup mode handlers.

Each handler takes a BackupContext and returns the number of files copied.
"""

from typing import Callable, Dict

from backupkit.models import BackupMode

from .context import BackupContext, backup_sources, source_subdir
from .copy_mode import run_copy
from .isolated_mode import (
    create_snapshot_dir,
    format_snapshot_name,
    prune_snapshots,
    run_isolated,
    try_parse_snapshot_name,
)
from .sync_mode import prune_mirror, run_sync

ModeHandler = Callable[[BackupContext], int]

MODE_HANDLERS: Dict[BackupMode, ModeHandler] = {
    BackupMode.COPY: run_copy,
    BackupMode.SYNC: run_sync,
    BackupMode.ISOLATED: run_isolated,
}

__all__ = [
    "BackupContext",
    "MODE_HANDLERS",
    "ModeHandler",
    "backup_sources",
    "create_snapshot_dir",
    "format_snapshot_name",
    "prune_mirror",
    "prune_snapshots",
    "run_copy",
    "run_isolated",
    "run_sync",
    "source_subdir",
    "try_parse_snapshot_name",
]
