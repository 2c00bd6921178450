"""Source scanning package for backupkit.

This package decides which source entries are backed up and walks the
source trees. It contains two main classes:

- ExclusionFilter: Pure predicates for excluded file types, excluded
  directory names and (inherited) hidden entries.
- TreeWalker: Depth-first traversal that hands eligible files to a
  FileCopier and queues failures for retry.

Example:
    >>> from backupkit.scanning import ExclusionFilter
    >>> exclusion = ExclusionFilter(settings)
    >>> exclusion.is_directory_excluded("node_modules")
    True
"""

from .exclusion_filter import ExclusionFilter
from .tree_walker import BackupAbortedError, TreeWalker

__all__ = ["ExclusionFilter", "TreeWalker", "BackupAbortedError"]
