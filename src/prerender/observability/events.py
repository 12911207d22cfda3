"""Event model for generation-run observability.

Every step of a run that touches a route or the output tree records a
frozen event with a monotonic nanosecond timestamp.

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal, TypeAlias


# ---------------------------------------------------------------------------
# Route events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RenderAttempted:
    """One render attempt for a route finished.

    Attributes:
        route: The route being rendered.
        attempt: 1-based attempt number.
        success: Whether the attempt produced HTML.
        error: ``repr`` of the failure, or *None*.
        duration_ms: Time spent on the attempt in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    route: str
    attempt: int
    success: bool
    error: str | None
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class PageWritten:
    """Rendered HTML for a route was written to the output tree.

    Attributes:
        route: The rendered route.
        output_path: Path relative to the output directory.
        size_bytes: Bytes written.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    route: str
    output_path: str
    size_bytes: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Output events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BuildEvent:
    """An output-assembly action occurred.

    Attributes:
        kind: The type of action.
        target: Output path (or description).
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["clean", "copy_assets", "copy_public", "sitemap", "robots"]
    target: str
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RunCompleted:
    """A generation run finished (successfully or with failed routes)."""

    total: int
    success: int
    failed: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

RunEvent: TypeAlias = RenderAttempted | PageWritten | BuildEvent | RunCompleted


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
