"""Sync mode: mirror the sources and prune what they no longer contain.

Before the copy pass, the mirror of every configured source root is
compared entry by entry against the source and extraneous target entries
are deleted. Pruning first clears target entries that changed between file
and directory, so the copy pass never collides with them. Deletion is
confined to those mirrors: anything else under the target root (other
mirrors, snapshot directories, unrelated files) is never touched.
"""

import os
from pathlib import Path
from typing import Dict

from .context import BackupContext, backup_sources, source_subdir


def run_sync(context: BackupContext) -> int:
    """Synchronize the target root with the configured sources.

    Args:
        context: Per-run state. ``files_deleted`` is increased by the number
            of target entries removed.

    Returns:
        Number of files copied.
    """
    context.log("Target DIR", str(context.target_root))

    for source_dir in context.settings.source_dirs:
        mirror_dir = context.target_root / source_subdir(source_dir, context.target_root)
        if not mirror_dir.is_dir():
            continue

        if context.exclusion_filter.is_directory_skipped(source_dir):
            # Whole source is now excluded or hidden
            if context.remover.delete_directory(mirror_dir):
                context.files_deleted += 1
            continue

        hidden = context.exclusion_filter.is_hidden(source_dir)
        context.files_deleted += prune_mirror(context, source_dir, mirror_dir, hidden)

    return backup_sources(context, context.target_root)


def prune_mirror(
    context: BackupContext,
    source_dir: Path,
    mirror_dir: Path,
    inherited_hidden: bool = False,
) -> int:
    """Delete entries of ``mirror_dir`` that no longer belong to ``source_dir``.

    A target entry is removed when the source has no entry of that name,
    when the entry changed between file and directory, when its name or type
    is now excluded, or when hidden files are ignored and it is hidden.

    Args:
        context: Per-run state.
        source_dir: Source directory being mirrored.
        mirror_dir: Its mirror in the target.
        inherited_hidden: True when an ancestor source directory is hidden.

    Returns:
        Number of target entries deleted (a deleted directory counts once).
    """
    exclusion = context.exclusion_filter
    ignore_hidden = context.settings.ignore_hidden_files

    try:
        with os.scandir(source_dir) as entries:
            source_entries: Dict[str, bool] = {
                os.path.normcase(entry.name): entry.is_dir(follow_symlinks=False)
                for entry in entries
            }
        with os.scandir(mirror_dir) as entries:
            target_entries = sorted(
                ((entry.name, entry.is_dir(follow_symlinks=False)) for entry in entries),
                key=lambda item: item[0],
            )
    except OSError as e:
        context.log("ERROR", f"Cannot compare {mirror_dir} with {source_dir}: {e}")
        return 0

    deleted = 0

    for name, target_is_dir in target_entries:
        source_path = source_dir / name
        target_path = mirror_dir / name
        source_is_dir = source_entries.get(os.path.normcase(name))

        if source_is_dir is None or source_is_dir != target_is_dir:
            remove = True
        elif target_is_dir:
            remove = exclusion.is_directory_skipped(source_path, inherited_hidden)
        else:
            remove = exclusion.is_file_excluded(source_path, inherited_hidden)

        # Hidden options may have changed since the target was written
        remove = remove or (ignore_hidden and exclusion.is_hidden(target_path))

        if remove:
            if context.remover.delete(target_path):
                deleted += 1
        elif target_is_dir:
            hidden = inherited_hidden or exclusion.is_hidden(source_path)
            deleted += prune_mirror(context, source_path, target_path, hidden)

    return deleted
