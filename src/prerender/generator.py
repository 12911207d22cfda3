"""Static generation — the end-to-end pipeline of one run.

Pipeline order:
    1. Resolve routes (generator failures abort here)
    2. Clean the output directory
    3. Start the static server over ``input_dir``
    4. Launch the browser
    5. Render all routes in batches, writing pages as they succeed
    6. Copy build assets and the public directory
    7. Write sitemap.xml / robots.txt when configured
    8. Close the browser, then the server (always, in that order)

"""

from __future__ import annotations

import sys
import time
from collections.abc import Callable, Mapping
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

from prerender.config import RenderConfig, merge_config
from prerender.export.assets import clean_output, copy_assets, copy_public_dir
from prerender.export.robots import write_robots
from prerender.export.sitemap import write_sitemap
from prerender.observability.events import BuildEvent, RunCompleted, now_ns
from prerender.renderer import BrowserRenderer
from prerender.resolver import resolve_routes
from prerender.scheduler import RenderWorker, render_all
from prerender.server import serve_directory

if TYPE_CHECKING:
    from prerender.observability.log import EventLog
    from prerender.renderer import RenderResult


# Builds a worker that is initialized on ``async with`` entry and closed on exit
RendererFactory: TypeAlias = Callable[[RenderConfig], AbstractAsyncContextManager[RenderWorker]]


@dataclass(frozen=True, slots=True)
class RenderStats:
    """Aggregate result of one generation run.

    Attributes:
        total: Number of resolved routes.
        success: Routes rendered and written.
        failed: Routes that failed after all attempts (or failed to write).
        duration_ms: Wall-clock time of the whole run.
        results: One result per route, in route order.

    """

    total: int
    success: int
    failed: int
    duration_ms: float
    results: tuple[RenderResult, ...]

    @property
    def failures(self) -> tuple[RenderResult, ...]:
        """The failed results, in route order."""
        return tuple(r for r in self.results if not r.success)


class StaticGenerator:
    """Renders a built single-page app to static files.

    Args:
        config: A merged :class:`RenderConfig`, or raw overrides to merge
            over the defaults.
        event_log: Optional sink for run events.
        renderer_factory: Builds the render worker for a run.  Defaults to
            :class:`BrowserRenderer`.

    """

    def __init__(
        self,
        config: RenderConfig | Mapping[str, object] | None = None,
        *,
        event_log: EventLog | None = None,
        renderer_factory: RendererFactory = BrowserRenderer,
    ) -> None:
        self._config = config if isinstance(config, RenderConfig) else merge_config(config)
        self._event_log = event_log
        self._renderer_factory = renderer_factory

    @property
    def config(self) -> RenderConfig:
        return self._config

    async def generate(self) -> RenderStats:
        """Run the full pipeline and return aggregate statistics.

        Raises:
            ServerError: If the local server cannot be started.
            Exception: Whatever a route generator raised.

        """
        start = time.perf_counter()
        config = self._config
        output_dir = config.output_dir

        routes = await resolve_routes(config)

        self._timed("clean", output_dir, lambda: clean_output(output_dir))

        async with serve_directory(
            config.input_dir.resolve(),
            config.port,
            config.host,
            startup_timeout=config.server_timeout / 1000,
        ) as server:
            async with self._renderer_factory(config) as renderer:
                results = await render_all(
                    renderer,
                    server.url,
                    routes,
                    parallel=config.parallel,
                    retries=config.retries,
                    output_dir=output_dir,
                    event_log=self._event_log,
                )

                self._copy_assets()
                self._write_seo_files(results)

        duration_ms = (time.perf_counter() - start) * 1000
        success = sum(1 for r in results if r.success)
        stats = RenderStats(
            total=len(results),
            success=success,
            failed=len(results) - success,
            duration_ms=duration_ms,
            results=tuple(results),
        )

        if self._event_log is not None:
            self._event_log.append(RunCompleted(
                total=stats.total,
                success=stats.success,
                failed=stats.failed,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            ))
        return stats

    # ------------------------------------------------------------------
    # Output assembly
    # ------------------------------------------------------------------

    def _copy_assets(self) -> None:
        """Copy build assets and public files; failures only warn."""
        config = self._config
        try:
            self._timed(
                "copy_assets",
                config.output_dir,
                lambda: copy_assets(config.input_dir, config.output_dir),
            )
            self._timed(
                "copy_public",
                config.output_dir,
                lambda: copy_public_dir(config.public_dir, config.output_dir),
            )
        except Exception as exc:
            print(f"  Warning: failed to copy some assets: {exc}", file=sys.stderr)

    def _write_seo_files(self, results: list[RenderResult]) -> None:
        config = self._config
        output_dir = config.output_dir
        if config.sitemap is not None and config.sitemap.hostname:
            self._timed(
                "sitemap",
                output_dir / "sitemap.xml",
                lambda: write_sitemap(results, config.sitemap, output_dir),
            )
        if config.robots is not None:
            self._timed(
                "robots",
                output_dir / "robots.txt",
                lambda: write_robots(config.robots, config.sitemap, output_dir),
            )

    def _timed(self, kind: str, target: Path, action: Callable[[], object]) -> None:
        t0 = time.perf_counter()
        action()
        if self._event_log is not None:
            self._event_log.append(BuildEvent(
                kind=kind,  # type: ignore[arg-type]
                target=str(target),
                duration_ms=(time.perf_counter() - t0) * 1000,
                timestamp_ns=now_ns(),
            ))


async def generate(
    config: RenderConfig | Mapping[str, object] | None = None,
    *,
    event_log: EventLog | None = None,
) -> RenderStats:
    """Render the app described by *config* to static files.

    Convenience wrapper around :class:`StaticGenerator`.
    """
    return await StaticGenerator(config, event_log=event_log).generate()
