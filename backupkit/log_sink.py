"""Log sink plumbing shared by the backup engine components.

Engine components never print. They call an injected sink with a category
and an optional detail string, synchronously, in the order events happen.
The default sink forwards each event to the ``backupkit`` logger.
"""

import logging
from typing import Callable, Iterable

from backupkit.models import LogMessage

LogSink = Callable[[str, str], None]

logger = logging.getLogger("backupkit")

# Categories reported at WARNING level by the default sink
WARNING_CATEGORIES = frozenset({"ERROR", "ABORTED"})


def logging_sink(category: str, detail: str = "") -> None:
    """Forward a backup event to the standard logging module."""
    level = logging.WARNING if category in WARNING_CATEGORIES else logging.INFO
    logger.log(level, LogMessage(category, detail).format())


def combine_sinks(sinks: Iterable[LogSink]) -> LogSink:
    """Create a sink that forwards every event to each of the given sinks."""
    targets = list(sinks)

    def sink(category: str, detail: str = "") -> None:
        for target in targets:
            target(category, detail)

    return sink
