"""Batch scheduler — render routes in bounded concurrent windows.

Routes are split into consecutive batches of ``parallel`` routes.  Batches
run strictly one after another; the routes inside a batch render
concurrently.  Each route is retried until it succeeds or runs out of
attempts, and a successful page is written to disk straight away.

Results come back in route order.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from typing import TYPE_CHECKING, Protocol

from prerender._errors import OutputWriteError
from prerender.observability.events import PageWritten, RenderAttempted, now_ns

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from prerender._types import Route
    from prerender.observability.log import EventLog
    from prerender.renderer import RenderResult


class RenderWorker(Protocol):
    """Anything that can render a route against a running server."""

    async def render(self, server_url: str, route: Route) -> RenderResult: ...


async def render_all(
    worker: RenderWorker,
    server_url: str,
    routes: Sequence[Route],
    *,
    parallel: int,
    retries: int,
    output_dir: Path,
    event_log: EventLog | None = None,
) -> list[RenderResult]:
    """Render every route and write the successful ones under *output_dir*.

    Args:
        worker: Initialized render worker.
        server_url: Base URL of the running static server.
        routes: Resolved routes, in output order.
        parallel: Batch size (routes in flight at once).
        retries: Maximum attempts per route; at least one is always made.
        output_dir: Root of the output tree.
        event_log: Optional sink for per-attempt and per-write events.

    Returns:
        One result per route, in the order of *routes*.

    """
    batch_size = max(parallel, 1)
    max_attempts = max(retries, 1)
    results: list[RenderResult] = []

    for start in range(0, len(routes), batch_size):
        batch = routes[start:start + batch_size]
        batch_results = await asyncio.gather(*(
            _render_route(
                worker,
                server_url,
                route,
                max_attempts=max_attempts,
                output_dir=output_dir,
                event_log=event_log,
            )
            for route in batch
        ))
        results.extend(batch_results)

    return results


async def _render_route(
    worker: RenderWorker,
    server_url: str,
    route: Route,
    *,
    max_attempts: int,
    output_dir: Path,
    event_log: EventLog | None,
) -> RenderResult:
    attempt = 0
    while True:
        attempt += 1
        t0 = time.perf_counter()
        result = await worker.render(server_url, route)
        if event_log is not None:
            event_log.append(RenderAttempted(
                route=route,
                attempt=attempt,
                success=result.success,
                error=None if result.error is None else repr(result.error),
                duration_ms=(time.perf_counter() - t0) * 1000,
                timestamp_ns=now_ns(),
            ))
        if result.success or attempt >= max_attempts:
            break

    result = replace(result, attempts=attempt)
    if not result.success:
        return result

    target = _output_file(output_dir, result.output_path)
    if target is None:
        msg = (
            f"Output path {result.output_path!r} for route {route!r} "
            f"is outside the output directory"
        )
        return replace(result, success=False, error=OutputWriteError(msg))

    try:
        size = await asyncio.to_thread(write_html, target, result.html)
    except OSError as exc:
        msg = f"Failed to write {result.output_path!r} for route {route!r}: {exc}"
        error = OutputWriteError(msg)
        error.__cause__ = exc
        return replace(result, success=False, error=error)

    if event_log is not None:
        event_log.append(PageWritten(
            route=route,
            output_path=result.output_path,
            size_bytes=size,
            timestamp_ns=now_ns(),
        ))
    return result


def _output_file(output_dir: Path, output_path: str) -> Path | None:
    """Resolve *output_path* under *output_dir*, or *None* if it escapes."""
    root = output_dir.resolve()
    target = (root / output_path).resolve()
    if target == root or not target.is_relative_to(root):
        return None
    return target


def write_html(filepath: Path, html: str) -> int:
    """Write HTML content to a file, creating parent dirs as needed.

    Returns the size in bytes of the written file.

    """
    filepath.parent.mkdir(parents=True, exist_ok=True)
    data = html.encode("utf-8")
    filepath.write_bytes(data)
    return len(data)
