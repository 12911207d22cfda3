"""Run observability — structured events for one generation run.

Quick Start:
    >>> from prerender.observability import EventLog
    >>> log = EventLog()
    >>> # pass to StaticGenerator(config, event_log=log)
    >>> log.stats()["by_type"]

"""

from prerender.observability.events import (
    BuildEvent,
    PageWritten,
    RenderAttempted,
    RunCompleted,
    RunEvent,
    now_ns,
)
from prerender.observability.log import EventLog

__all__ = [
    "BuildEvent",
    "EventLog",
    "PageWritten",
    "RenderAttempted",
    "RunCompleted",
    "RunEvent",
    "now_ns",
]
