"""Terminal output — start banner, per-attempt log and run summary.

Everything is printed to stderr.  Detects ``NO_COLOR`` / ``TERM`` for safe
fallback to plain text.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

from prerender.observability.events import RenderAttempted

if TYPE_CHECKING:
    from pathlib import Path

    from prerender.config import RenderConfig
    from prerender.generator import RenderStats
    from prerender.observability.log import EventLog


# ---------------------------------------------------------------------------
# ANSI helpers: respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_RED = "\033[31m" if _COLOR else ""


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(config: RenderConfig, *, build_command: str | None = None) -> None:
    """Print the start-of-run banner to stderr."""
    from prerender import __version__

    lines: list[str] = [
        "",
        f"  {_BOLD}prerender{_RESET} {_DIM}v{__version__}{_RESET}  {_YELLOW}[generate]{_RESET}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]
    if build_command:
        lines.append(f"  {_DIM}├─{_RESET} build: {_DIM}{build_command}{_RESET}")
    lines.append(f"  {_DIM}├─{_RESET} input: {_DIM}{config.input_dir}{_RESET}")
    lines.append(
        f"  {_DIM}├─{_RESET} {config.parallel} parallel, "
        f"{_plural(max(config.retries, 1), 'attempt')} per route"
    )
    lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_dir}{_RESET}")
    lines.append("")

    print("\n".join(lines), file=sys.stderr)


def print_attempts(event_log: EventLog) -> None:
    """Print one line per render attempt recorded in *event_log*."""
    for event in event_log:
        if not isinstance(event, RenderAttempted):
            continue
        mark = f"{_GREEN}ok{_RESET}" if event.success else f"{_RED}failed{_RESET}"
        detail = f" {_DIM}{event.error}{_RESET}" if event.error else ""
        print(
            f"  {event.route} {_DIM}#{event.attempt}{_RESET} {mark} "
            f"{_DIM}{event.duration_ms:.0f}ms{_RESET}{detail}",
            file=sys.stderr,
        )


def print_summary(stats: RenderStats, output_dir: Path) -> None:
    """Print the run summary to stderr."""
    lines = [
        "",
        "─" * 41,
        f"  {_GREEN}Generation complete{_RESET}",
        f"  Pages: {_BOLD}{stats.success}{_RESET}/{stats.total}",
        f"  Time: {_BOLD}{stats.duration_ms:.0f}ms{_RESET}",
        f"  Output: {_BOLD}{output_dir}{_RESET}",
    ]
    if stats.failed > 0:
        lines.append(f"  {_RED}Failed: {stats.failed}{_RESET}")
        lines.extend(
            f"    {_DIM}{r.route}{_RESET}: {r.error}" for r in stats.failures
        )

    print("\n".join(lines), file=sys.stderr)
