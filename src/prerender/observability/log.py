"""Event log for a generation run.

Keeps the most recent ``RunEvent`` objects of a run in memory so the CLI
(``--verbose``) and tests can look at what happened to each route.

Thread Safety:
    Events are normally appended from the event loop, but the log may be
    shared with other threads.  Every access goes through one
    ``threading.Lock``.

"""

import threading
from collections import Counter, deque
from collections.abc import Iterable, Iterator
from typing import Any

from prerender.observability.events import RenderAttempted, RunEvent


class EventLog:
    """Ring buffer of run events; the oldest are dropped once full.

    Args:
        max_events: Capacity of the buffer.

    """

    __slots__ = ("_buffer", "_capacity", "_lock")

    def __init__(self, max_events: int = 10_000) -> None:
        self._capacity = max_events
        self._buffer: deque[RunEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: RunEvent) -> None:
        with self._lock:
            self._buffer.append(event)

    def extend(self, events: Iterable[RunEvent]) -> None:
        with self._lock:
            self._buffer.extend(events)

    def _snapshot(self) -> list[RunEvent]:
        with self._lock:
            return list(self._buffer)

    def query(
        self,
        *,
        event_type: type | None = None,
        route: str | None = None,
        since_ns: int = 0,
        limit: int = 100,
    ) -> list[RunEvent]:
        """Return up to *limit* matching events, newest first.

        Args:
            event_type: Keep only instances of this event class.
            route: Keep only events about exactly this route.  Events
                without a route (``BuildEvent``, ``RunCompleted``) never
                match.
            since_ns: Drop events stamped before this monotonic time.
            limit: Maximum number of events returned.

        """
        matches: list[RunEvent] = []
        for event in reversed(self._snapshot()):
            if len(matches) == limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if route is not None and getattr(event, "route", None) != route:
                continue
            if event.timestamp_ns < since_ns:
                continue
            matches.append(event)
        return matches

    def attempts(self, route: str) -> list[RenderAttempted]:
        """Every recorded render attempt for *route*, in attempt order."""
        return [
            event
            for event in self._snapshot()
            if isinstance(event, RenderAttempted) and event.route == route
        ]

    def recent(self, n: int = 20) -> list[RunEvent]:
        """The last *n* events, oldest first."""
        return self._snapshot()[-n:]

    def clear(self) -> int:
        """Drop every event.  Returns how many were dropped."""
        with self._lock:
            dropped = len(self._buffer)
            self._buffer.clear()
        return dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def __iter__(self) -> Iterator[RunEvent]:
        return iter(self._snapshot())

    def stats(self) -> dict[str, Any]:
        """Counts per event type plus failed render attempts."""
        events = self._snapshot()
        return {
            "total": len(events),
            "max_events": self._capacity,
            "by_type": dict(Counter(type(event).__name__ for event in events)),
            "failed_attempts": sum(
                1 for event in events
                if isinstance(event, RenderAttempted) and not event.success
            ),
        }
