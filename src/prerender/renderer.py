"""Render worker — drive headless Chromium through one route at a time.

A single browser process is shared by every route of a run.  Each render
attempt gets its own browser context (isolated cookies, storage and cache)
which is closed again on every exit path.

Attempt sequence:
    1. Open an isolated context + page (viewport, user agent)
    2. ``before_render`` hook
    3. Navigate; wait for network idle / load, then the optional selector
    4. Serialize the document
    5. Inject meta tags, minify
    6. ``after_render`` hook (may replace the HTML)
    7. Return a successful :class:`RenderResult`

Any failure in steps 2-6 calls ``on_error`` and returns a failed result.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Self
from urllib.parse import urljoin

from prerender._errors import RenderError
from prerender.postprocess import post_process

if TYPE_CHECKING:
    from types import TracebackType

    from playwright.async_api import Browser, Playwright

    from prerender._types import Route
    from prerender.config import RenderConfig

_DEVTOOLS_FLAG = "--auto-open-devtools-for-tabs"


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Outcome of rendering one route.

    Attributes:
        route: The route that was rendered.
        html: Final HTML (empty when rendering failed).
        output_path: File path relative to the output directory.
        success: Whether the page was rendered (and written).
        error: The terminal error of a failed route.
        attempts: Number of render attempts made.

    """

    route: Route
    html: str
    output_path: str
    success: bool
    error: BaseException | None = None
    attempts: int = 1


class BrowserRenderer:
    """Owns one Chromium process and renders routes against a server.

    Args:
        config: Frozen render configuration.

    """

    def __init__(self, config: RenderConfig) -> None:
        self._config = config
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def __aenter__(self) -> Self:
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def initialized(self) -> bool:
        return self._browser is not None

    async def initialize(self) -> None:
        """Start Playwright and launch the browser."""
        from playwright.async_api import async_playwright

        options = self._config.browser
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=options.headless,
                timeout=options.timeout,
                args=[_DEVTOOLS_FLAG] if options.devtools else [],
            )
        except BaseException:
            await self._playwright.stop()
            self._playwright = None
            raise

    async def render(self, server_url: str, route: Route) -> RenderResult:
        """Render *route* served from *server_url*.

        Raises:
            RenderError: If called before :meth:`initialize`.

        """
        if self._browser is None:
            msg = "Browser not initialized; call initialize() first"
            raise RenderError(msg)

        config = self._config
        output_path = config.output_path_for(route)

        context = await self._browser.new_context(
            viewport={
                "width": config.browser.viewport.width,
                "height": config.browser.viewport.height,
            },
            user_agent=config.browser.user_agent,
        )
        try:
            page = await context.new_page()
            await config.hooks.before_render(route)

            await page.goto(
                urljoin(server_url, route),
                wait_until=config.wait_for.wait_until,
                timeout=config.wait_for.timeout,
            )
            if config.wait_for.selector:
                await page.wait_for_selector(
                    config.wait_for.selector,
                    timeout=config.wait_for.timeout,
                )

            html = await page.content()
            html = post_process(
                html,
                meta=config.inject_meta,
                minify=config.minify_html,
            )

            replaced = await config.hooks.after_render(route, html)
            if replaced is not None:
                html = replaced

            return RenderResult(
                route=route,
                html=html,
                output_path=output_path,
                success=True,
            )
        except Exception as exc:
            await self._report_error(route, exc)
            return RenderResult(
                route=route,
                html="",
                output_path=output_path,
                success=False,
                error=exc,
            )
        finally:
            await context.close()

    async def _report_error(self, route: Route, error: BaseException) -> None:
        try:
            await self._config.hooks.on_error(route, error)
        except Exception as hook_exc:
            print(f"  on_error hook failed for {route}: {hook_exc}", file=sys.stderr)

    async def close(self) -> None:
        """Close the browser and stop Playwright.  Idempotent."""
        browser, playwright = self._browser, self._playwright
        self._browser = self._playwright = None
        try:
            if browser is not None:
                await browser.close()
        finally:
            if playwright is not None:
                await playwright.stop()
