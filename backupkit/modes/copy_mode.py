"""Copy mode: additive mirror of the sources into the target.

Files removed from a source stay in the target indefinitely; this mode
never deletes anything.
"""

from .context import BackupContext, backup_sources


def run_copy(context: BackupContext) -> int:
    """Copy new and changed source files into the target root.

    Args:
        context: Per-run state.

    Returns:
        Number of files copied.
    """
    context.log("Target DIR", str(context.target_root))
    return backup_sources(context, context.target_root)
