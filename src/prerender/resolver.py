"""Route resolver — flatten every route source into one ordered set.

Sources are consumed in a fixed order:

    1. ``routes`` — a static list, or a callback invoked once
    2. ``dynamic_routes`` — each generator invoked once, in declaration order

Duplicates collapse silently; the first occurrence keeps its position.
Generator failures are not caught here: they abort the run before any
server or browser is started.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from prerender.config import CallbackRoutes, StaticRoutes, maybe_await

if TYPE_CHECKING:
    from prerender._types import Route, RouteGenerator
    from prerender.config import RenderConfig


async def resolve_routes(config: RenderConfig) -> tuple[Route, ...]:
    """Return the deduplicated routes for *config* in first-seen order."""
    # dict preserves insertion order and ignores repeated keys
    routes: dict[Route, None] = {}

    source = config.routes
    if isinstance(source, StaticRoutes):
        routes.update(dict.fromkeys(source.routes))
    elif isinstance(source, CallbackRoutes):
        routes.update(dict.fromkeys(await _call_generator(source.callback)))

    for dynamic in config.dynamic_routes:
        routes.update(dict.fromkeys(await _call_generator(dynamic.generator)))

    return tuple(routes)


async def _call_generator(generator: RouteGenerator) -> list[Route]:
    produced = await maybe_await(generator())
    if produced is None:
        return []
    if isinstance(produced, str) or not isinstance(produced, Iterable):
        msg = f"Route generator returned {type(produced).__name__}, expected a list of routes"
        raise TypeError(msg)
    return [str(route) for route in produced]
