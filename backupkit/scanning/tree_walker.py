"""Recursive source tree traversal.

This module provides the TreeWalker class, which walks a source directory
depth-first (files before subdirectories), applies the exclusion rules and
hands every surviving file to a FileCopier.

Example:
    >>> from backupkit.scanning import TreeWalker
    >>> walker = TreeWalker(exclusion_filter, copier)
    >>> errors = []
    >>> copied = walker.walk(Path("/data/docs"), Path("docs"), Path("/backup"), errors)
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, Set, Tuple

from backupkit.log_sink import LogSink, logging_sink
from backupkit.models import CopyOutcome, DeferredError

from .exclusion_filter import ExclusionFilter

if TYPE_CHECKING:
    # Imported for annotations only; operations imports scanning at runtime
    from backupkit.operations.file_copier import FileCopier


class BackupAbortedError(Exception):
    """Raised when a single directory produces too many copy errors.

    Aborts the whole backup run rather than accumulating unbounded errors
    from a pathological directory (a tree mid-write, a permissions wall).

    Attributes:
        directory: Source directory that crossed the threshold.
        error_count: Number of errors recorded for that directory.
    """

    def __init__(self, directory: Path, error_count: int) -> None:
        self.directory = directory
        self.error_count = error_count
        super().__init__(
            f"Backup aborted due to excessive errors ({error_count} in {directory})"
        )


class TreeWalker:
    """Walks source trees and backs up every eligible file.

    At each directory the walker:
    - skips the whole subtree if the directory is excluded or (when hidden
      files are ignored) hidden, or is one of the ``skip_paths``
    - backs up the immediate files, recording failures as DeferredError
    - recurses into each immediate subdirectory

    Symbolic links to directories are not followed.

    Attributes:
        MAX_ERRORS_PER_DIRECTORY: Errors tolerated in one directory before
            the run is aborted with BackupAbortedError.
    """

    MAX_ERRORS_PER_DIRECTORY = 3

    def __init__(
        self,
        exclusion_filter: ExclusionFilter,
        copier: "FileCopier",
        log: Optional[LogSink] = None,
        skip_paths: Iterable[Path] = (),
    ) -> None:
        """Initialize the TreeWalker.

        Args:
            exclusion_filter: Rules deciding which entries are skipped.
            copier: FileCopier used for every eligible file.
            log: Sink for progress events. Defaults to the logging sink.
            skip_paths: Directories never descended into, such as a target
                root that lives inside a source tree.
        """
        self._filter = exclusion_filter
        self._copier = copier
        self._log = log or logging_sink
        self._skip_paths: Set[Path] = {Path(p).resolve() for p in skip_paths}

    def walk(
        self,
        source_dir: Path,
        source_subdir: Path,
        target_root: Path,
        errors: List[DeferredError],
        inherited_hidden: bool = False,
    ) -> int:
        """Back up a source directory tree.

        Args:
            source_dir: Directory being backed up.
            source_subdir: Path of ``source_dir`` relative to the target root;
                files are copied into ``target_root / source_subdir``.
            target_root: Root of the backup target.
            errors: Queue receiving a DeferredError for every failed file.
            inherited_hidden: True when an ancestor directory is hidden.

        Returns:
            Number of files copied in this subtree.

        Raises:
            BackupAbortedError: If more than MAX_ERRORS_PER_DIRECTORY files
                fail in a single directory.
        """
        if self._filter.is_directory_skipped(source_dir, inherited_hidden):
            return 0

        hidden = inherited_hidden or self._filter.is_hidden(source_dir)

        files, subdirs = self._list_directory(source_dir)
        if files is None:
            return 0

        self._log("Backing up DIR", str(source_dir))

        target_dir = target_root / source_subdir
        backup_count = 0
        error_count = 0

        for source_file in files:
            if self._filter.is_file_excluded(source_file, hidden):
                continue

            outcome = self._copier.copy_file(source_file, target_dir, hidden)

            if outcome is CopyOutcome.OK:
                backup_count += 1
            elif outcome.is_error:
                errors.append(DeferredError(
                    source_file=source_file,
                    source_subdir=source_subdir,
                    target_dir=target_dir,
                    outcome=outcome,
                ))
                error_count += 1
                if error_count > self.MAX_ERRORS_PER_DIRECTORY:
                    raise BackupAbortedError(source_dir, error_count)

        for subdir in subdirs:
            if self._skip_paths and subdir.resolve() in self._skip_paths:
                continue
            backup_count += self.walk(
                subdir,
                source_subdir / subdir.name,
                target_root,
                errors,
                hidden,
            )

        return backup_count

    def _list_directory(self, directory: Path) -> Tuple[Optional[List[Path]], List[Path]]:
        """List the immediate files and subdirectories of a directory.

        Returns:
            Tuple of (files, subdirectories), each sorted by name. Files is
            None if the directory could not be read (the error is logged).
        """
        files: List[Path] = []
        subdirs: List[Path] = []

        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            subdirs.append(Path(entry.path))
                        elif entry.is_file():
                            files.append(Path(entry.path))
                    except OSError:
                        # Entry vanished or cannot be inspected
                        continue
        except OSError as e:
            self._log("ERROR", f"Cannot read directory {directory}: {e}")
            return None, []

        files.sort(key=lambda p: p.name)
        subdirs.sort(key=lambda p: p.name)
        return files, subdirs
