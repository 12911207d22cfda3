"""Shared test fixtures for prerender."""

from __future__ import annotations

import asyncio
import urllib.error
import urllib.request
from pathlib import Path
from urllib.parse import urljoin

import pytest

from prerender.renderer import RenderResult

INDEX_HTML = (
    "<!DOCTYPE html>\n<html>\n<head>\n<title>App</title>\n</head>\n"
    '<body>\n  <div id="app"></div>\n  <script src="/assets/app.js"></script>\n</body>\n</html>\n'
)


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """Create a minimal built single-page app.

    Layout::

        dist/index.html
        dist/favicon.ico
        dist/assets/app.js
        dist/assets/style.css
        dist/docs/index.html
        dist/docs/guide.html

    """
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "docs").mkdir()
    (dist / "index.html").write_text(INDEX_HTML)
    (dist / "favicon.ico").write_bytes(b"\x00\x00\x01\x00")
    (dist / "assets" / "app.js").write_text("console.log('app');\n")
    (dist / "assets" / "style.css").write_text("body { margin: 0; }\n")
    (dist / "docs" / "index.html").write_text("<html><body>docs</body></html>")
    (dist / "docs" / "guide.html").write_text("<html><body>guide</body></html>")
    return dist


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """A public directory with one nested file."""
    public = tmp_path / "public"
    (public / "img").mkdir(parents=True)
    (public / "robots-note.txt").write_text("public file")
    (public / "img" / "logo.svg").write_text("<svg/>")
    return public


def http_get(url: str) -> tuple[int, dict[str, str], bytes]:
    """Blocking GET returning (status, headers, body), including error statuses."""
    try:
        with urllib.request.urlopen(url, timeout=5) as response:
            return response.status, response.headers, response.read()
    except urllib.error.HTTPError as exc:
        return exc.code, exc.headers, exc.read()


class FetchingRenderer:
    """Render worker that fetches pages over HTTP instead of driving a browser.

    Usable as the ``renderer_factory`` of ``StaticGenerator``.
    """

    def __init__(self, config: object) -> None:
        self.config = config
        self.entered = False
        self.closed = False
        self.calls: list[str] = []

    async def __aenter__(self) -> FetchingRenderer:
        self.entered = True
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.closed = True

    async def render(self, server_url: str, route: str) -> RenderResult:
        self.calls.append(route)
        output_path = self.config.output_path_for(route)  # type: ignore[attr-defined]
        status, _, body = await asyncio.to_thread(http_get, urljoin(server_url, route))
        if status != 200:
            return RenderResult(
                route=route,
                html="",
                output_path=output_path,
                success=False,
                error=RuntimeError(f"HTTP {status}"),
            )
        return RenderResult(
            route=route,
            html=body.decode("utf-8"),
            output_path=output_path,
            success=True,
        )


class ScriptedWorker:
    """Render worker whose per-route outcomes are scripted.

    Args:
        fail_until: Route -> number of leading attempts that fail.
            Routes not listed succeed on the first attempt; ``-1`` means
            every attempt fails.
        delay: Seconds each render sleeps (to let renders overlap).

    """

    def __init__(self, fail_until: dict[str, int] | None = None, delay: float = 0.0) -> None:
        self.fail_until = fail_until or {}
        self.delay = delay
        self.attempts: dict[str, int] = {}
        self.timeline: list[tuple[str, str]] = []

    async def render(self, server_url: str, route: str) -> RenderResult:
        self.timeline.append(("start", route))
        attempt = self.attempts.get(route, 0) + 1
        self.attempts[route] = attempt
        if self.delay:
            await asyncio.sleep(self.delay)
        self.timeline.append(("end", route))

        output_path = "index.html" if route == "/" else f"{route.strip('/')}/index.html"
        failing = self.fail_until.get(route, 0)
        if failing == -1 or attempt <= failing:
            return RenderResult(
                route=route,
                html="",
                output_path=output_path,
                success=False,
                error=TimeoutError(f"attempt {attempt} timed out"),
            )
        return RenderResult(
            route=route,
            html=f"<html><body>{route} #{attempt}</body></html>",
            output_path=output_path,
            success=True,
        )
