"""Output naming — map a route to its file path inside the output directory.

Two built-in schemes:

    nested (default)
        ``/``            -> ``index.html``
        ``/about``       -> ``about/index.html``
        ``/about/team``  -> ``about/team/index.html``

    flat
        ``/``            -> ``index.html``
        ``/about``       -> ``about.html``
        ``/about/team``  -> ``about-team.html``

A user-supplied ``custom_naming`` callable always wins over both.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prerender._types import FileNaming, OutputNaming, Route


def nested_naming(route: Route) -> str:
    """Clean-URL layout: one directory per route holding ``index.html``."""
    clean = route.strip("/")
    if not clean:
        return "index.html"
    return f"{clean}/index.html"


def flat_naming(route: Route) -> str:
    """Single-level layout: path segments joined with ``-``."""
    clean = route.strip("/")
    if not clean:
        return "index.html"
    return "-".join(clean.split("/")) + ".html"


def resolve_naming(
    file_naming: FileNaming,
    custom_naming: OutputNaming | None = None,
) -> OutputNaming:
    """Pick the naming function for a configuration.

    ``custom_naming`` is used whenever it is set, whatever ``file_naming``
    says.  ``"custom"`` without a callable falls back to nested naming.

    """
    if custom_naming is not None:
        return custom_naming
    if file_naming == "flat":
        return flat_naming
    return nested_naming
