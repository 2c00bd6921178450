"""Isolated mode: one fresh dated snapshot per run, with age-based retention.

Snapshot directories live directly under the target root and are named
``YYYY-MM-DD HHMMSS``. A second run within the same second gets a ``-1``,
``-2``, ... suffix.
"""

import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from backupkit.log_sink import LogSink
from backupkit.operations import FileRemover

from .context import BackupContext, backup_sources

SNAPSHOT_FORMAT = "%Y-%m-%d %H%M%S"
SNAPSHOT_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2} \d{6})(?:-(\d+))?$")


def format_snapshot_name(timestamp: datetime) -> str:
    """Format the base snapshot directory name for a timestamp."""
    return timestamp.strftime(SNAPSHOT_FORMAT)


def create_snapshot_dir(target_root: Path, timestamp: datetime) -> Path:
    """Create a new, uniquely named snapshot directory under the target root.

    Args:
        target_root: Backup target root (must exist).
        timestamp: Time the snapshot is taken.

    Returns:
        Path of the created directory.
    """
    base_name = format_snapshot_name(timestamp)
    snapshot_dir = target_root / base_name
    counter = 1

    while True:
        try:
            snapshot_dir.mkdir(exist_ok=False)
            return snapshot_dir
        except FileExistsError:
            snapshot_dir = target_root / f"{base_name}-{counter}"
            counter += 1


def try_parse_snapshot_name(name: str) -> Optional[datetime]:
    """Parse the timestamp encoded in a snapshot directory name.

    The optional ``-N`` collision suffix is accepted and ignored.

    Args:
        name: Directory name to parse.

    Returns:
        The encoded timestamp, or None if the name is not a snapshot name.
    """
    match = SNAPSHOT_PATTERN.match(name)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), SNAPSHOT_FORMAT)
    except ValueError:
        # Right shape but not a real date, e.g. month 13
        return None


def prune_snapshots(
    target_root: Path,
    max_age_days: int,
    now: datetime,
    remover: FileRemover,
    log: LogSink,
    keep: Optional[Path] = None,
) -> int:
    """Delete snapshot directories older than ``max_age_days``.

    Only direct children of ``target_root`` whose names parse as snapshot
    names are considered; everything else is left alone.

    Args:
        target_root: Backup target root holding the snapshots.
        max_age_days: Retention window in days. Zero or less disables pruning.
        now: Reference time for computing ages.
        remover: FileRemover used to delete expired snapshots.
        log: Sink for progress events.
        keep: Snapshot that must survive regardless of age (the current one).

    Returns:
        Number of snapshot directories deleted.
    """
    if max_age_days <= 0:
        return 0

    max_age = timedelta(days=max_age_days)
    deleted = 0

    try:
        children = sorted(target_root.iterdir())
    except OSError as e:
        log("ERROR", f"Cannot read target directory {target_root}: {e}")
        return 0

    for child in children:
        if not child.is_dir() or child.is_symlink():
            continue
        if keep is not None and child == keep:
            continue

        timestamp = try_parse_snapshot_name(child.name)
        if timestamp is None:
            continue

        if now - timestamp > max_age:
            if remover.delete_directory(child):
                deleted += 1

    return deleted


def run_isolated(context: BackupContext) -> int:
    """Back up every source into a new snapshot, then apply retention.

    Args:
        context: Per-run state. ``snapshot_dir`` is set to the new snapshot
            and ``files_deleted`` is increased by the snapshots pruned.

    Returns:
        Number of files copied.
    """
    started = context.now()
    snapshot_dir = create_snapshot_dir(context.target_root, started)
    context.snapshot_dir = snapshot_dir
    context.log("Snapshot DIR", str(snapshot_dir))

    backup_count = backup_sources(context, snapshot_dir)

    if context.settings.max_isolation_days > 0:
        context.files_deleted += prune_snapshots(
            context.target_root,
            context.settings.max_isolation_days,
            started,
            context.remover,
            context.log,
            keep=snapshot_dir,
        )

    return backup_count
