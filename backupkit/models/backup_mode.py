"""
BackupMode enum for the three backup policies.

The backup modes, in order of how much they change the target:
1. Copy - Additive mirror, nothing is ever deleted from the target
2. Sync - Mirror plus removal of target entries no longer in the source
3. Isolated - Fresh dated snapshot per run, old snapshots pruned by age
"""

from enum import Enum


class BackupMode(Enum):
    """Selects the policy a backup run applies to the target directory."""
    COPY = "copy"            # Copy new/changed files, never delete
    SYNC = "sync"            # Keep target in step with source, deleting extras
    ISOLATED = "isolated"    # New dated snapshot directory for every run

    @classmethod
    def parse(cls, value: str) -> "BackupMode":
        """Parse a mode from its (case-insensitive) name.

        Raises:
            ValueError: If the value does not name a backup mode.
        """
        text = str(value).strip().lower()
        for mode in cls:
            if mode.value == text:
                return mode
        valid = " / ".join(mode.value for mode in cls)
        raise ValueError(f"Unknown backup type '{value}', valid values are: {valid}")
