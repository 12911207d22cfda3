"""Shared type definitions for prerender."""

from collections.abc import Awaitable, Callable, Iterable
from typing import Literal, TypeAlias

# Route URL path (e.g., "/", "/blog/hello")
Route: TypeAlias = str

# Output naming scheme
FileNaming: TypeAlias = Literal["nested", "flat", "custom"]

# Maps a route to its output path relative to the output directory
OutputNaming: TypeAlias = Callable[[Route], str]

# Produces routes, synchronously or as a coroutine
RouteGenerator: TypeAlias = Callable[[], Iterable[Route] | Awaitable[Iterable[Route]]]

# User lifecycle callbacks (sync or async)
BeforeRenderHook: TypeAlias = Callable[[Route], object]
AfterRenderHook: TypeAlias = Callable[[Route, str], object]
ErrorHook: TypeAlias = Callable[[Route, BaseException], object]
