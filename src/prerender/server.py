"""Ephemeral static server — serve the built app to the headless browser.

``StaticFilesApp`` is a minimal ASGI application over a build directory with
single-page-app fallback routing.  ``StaticServer`` runs it under uvicorn on
a socket bound up front, so port ``0`` yields an OS-assigned port and bind
failures surface as :class:`ServerError` before anything else starts.

Request policy:
    directory                          -> ``<dir>/index.html``
    missing path, no ``.`` in last part -> root ``index.html`` (SPA fallback)
    missing path with an extension     -> 404
    path escaping the root             -> 404
    anything unexpected                -> 500

"""

from __future__ import annotations

import asyncio
import mimetypes
import socket
import sys
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeAlias

import uvicorn

from prerender._errors import ServerError

Scope: TypeAlias = dict[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[dict[str, Any]]]
Send: TypeAlias = Callable[[dict[str, Any]], Awaitable[None]]

_ALLOWED_METHODS = frozenset({"GET", "HEAD"})


@dataclass(frozen=True, slots=True)
class ServerInstance:
    """A running server.

    Attributes:
        url: Base URL (e.g., ``"http://localhost:53127"``).
        port: The port actually bound.
        close: Coroutine function performing a graceful shutdown.

    """

    url: str
    port: int
    close: Callable[[], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class _Response:
    status: int
    body: bytes
    content_type: str = "text/plain"
    cache: bool = False


_NOT_FOUND = _Response(404, b"Not Found")
_NOT_ALLOWED = _Response(405, b"Method Not Allowed")
_SERVER_ERROR = _Response(500, b"Internal Server Error")


class StaticFilesApp:
    """ASGI app serving files rooted at *root_dir*.

    Args:
        root_dir: Directory containing the built application.

    """

    __slots__ = ("_root",)

    def __init__(self, root_dir: Path) -> None:
        self._root = Path(root_dir).resolve()

    @property
    def root(self) -> Path:
        return self._root

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        method = scope.get("method", "GET")
        if method not in _ALLOWED_METHODS:
            response = _NOT_ALLOWED
        else:
            try:
                response = await self.respond(scope.get("path", "/"))
            except Exception as exc:
                print(f"  Server error: {exc!r}", file=sys.stderr)
                response = _SERVER_ERROR

        headers = [
            (b"content-type", response.content_type.encode("latin-1")),
            (b"content-length", str(len(response.body)).encode("latin-1")),
        ]
        if response.cache:
            headers.append((b"cache-control", b"no-cache"))
        if method not in _ALLOWED_METHODS:
            headers.append((b"allow", b"GET, HEAD"))

        await send({
            "type": "http.response.start",
            "status": response.status,
            "headers": headers,
        })
        await send({
            "type": "http.response.body",
            "body": b"" if method == "HEAD" else response.body,
        })

    async def respond(self, request_path: str) -> _Response:
        """Resolve *request_path* to a response following the SPA policy."""
        file_path = self._map(request_path)
        if file_path is None:
            return _NOT_FOUND

        if await asyncio.to_thread(file_path.is_dir):
            file_path = file_path / "index.html"
        elif not await asyncio.to_thread(file_path.exists):
            last_segment = request_path.rstrip("/").rsplit("/", 1)[-1]
            if "." in last_segment:
                return _NOT_FOUND
            file_path = self._root / "index.html"

        content = await asyncio.to_thread(file_path.read_bytes)
        content_type, _ = mimetypes.guess_type(file_path.name)
        return _Response(
            status=200,
            body=content,
            content_type=content_type or "application/octet-stream",
            cache=True,
        )

    def _map(self, request_path: str) -> Path | None:
        """Map a URL path into the root directory, or *None* if it escapes."""
        candidate = (self._root / request_path.lstrip("/")).resolve()
        if candidate != self._root and not candidate.is_relative_to(self._root):
            return None
        return candidate


class StaticServer:
    """Runs a :class:`StaticFilesApp` under uvicorn for one generation run.

    Args:
        root_dir: Directory containing the built application.
        startup_timeout: Seconds to wait for the listener to come up.

    """

    def __init__(self, root_dir: Path, *, startup_timeout: float = 30.0) -> None:
        self._app = StaticFilesApp(root_dir)
        self._startup_timeout = startup_timeout
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task[None] | None = None
        self._socket: socket.socket | None = None

    @property
    def app(self) -> StaticFilesApp:
        return self._app

    async def start(self, port: int = 0, host: str = "localhost") -> ServerInstance:
        """Bind *host*:*port* and start serving.

        Raises:
            ServerError: If the address cannot be bound or the server does
                not come up within the start-up timeout.

        """
        self._socket = _bind_socket(host, port)
        bound_port = self._socket.getsockname()[1]

        config = uvicorn.Config(
            self._app,
            log_config=None,
            log_level="warning",
            access_log=False,
            lifespan="off",
            timeout_graceful_shutdown=5,
        )
        self._server = uvicorn.Server(config)
        self._task = asyncio.create_task(self._server.serve(sockets=[self._socket]))

        try:
            async with asyncio.timeout(self._startup_timeout):
                while not self._server.started:
                    if self._task.done():
                        break
                    await asyncio.sleep(0.01)
        except TimeoutError as exc:
            await self.close()
            msg = f"Static server did not start within {self._startup_timeout:.0f}s"
            raise ServerError(msg) from exc

        if not self._server.started:
            await self.close()
            msg = f"Static server failed to start on {host}:{bound_port}"
            raise ServerError(msg)

        url = f"http://{_format_host(host)}:{bound_port}"
        print(f"  Static server started on {url}", file=sys.stderr)
        return ServerInstance(url=url, port=bound_port, close=self.close)

    async def close(self) -> None:
        """Shut the server down gracefully.  Safe to call at any time."""
        server, task, sock = self._server, self._task, self._socket
        self._server = self._task = self._socket = None

        if server is not None:
            server.should_exit = True
        if task is not None:
            # A failed start-up already reported itself; closing must not raise.
            with suppress(Exception, asyncio.CancelledError):
                await task
        if sock is not None:
            sock.close()


@asynccontextmanager
async def serve_directory(
    root_dir: Path,
    port: int = 0,
    host: str = "localhost",
    *,
    startup_timeout: float = 30.0,
) -> AsyncIterator[ServerInstance]:
    """Serve *root_dir* for the duration of the ``async with`` block."""
    server = StaticServer(root_dir, startup_timeout=startup_timeout)
    try:
        yield await server.start(port, host)
    finally:
        await server.close()


def _bind_socket(host: str, port: int) -> socket.socket:
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except OSError as exc:
        msg = f"Cannot resolve server host {host!r}: {exc}"
        raise ServerError(msg) from exc

    # Prefer IPv4 so that "localhost" binds where browsers look first
    infos.sort(key=lambda info: info[0] != socket.AF_INET)
    family, _, _, _, address = infos[0]

    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(address)
    except OSError as exc:
        sock.close()
        msg = f"Cannot bind static server to {host}:{port}: {exc}"
        raise ServerError(msg) from exc
    return sock


def _format_host(host: str) -> str:
    return f"[{host}]" if ":" in host else host
