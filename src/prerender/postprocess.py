"""HTML post-processing applied to every successfully rendered page.

Order is fixed: meta injection first, then minification.
"""

from __future__ import annotations

import html as html_lib
import re
from collections.abc import Mapping

_HEAD_OPEN = re.compile(r"<head(?:\s[^>]*)?>", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_BETWEEN_TAGS = re.compile(r">\s+<")


def inject_meta(html: str, meta: Mapping[str, str]) -> str:
    """Insert one ``<meta name=... content=...>`` per entry after ``<head>``.

    Pages without a ``<head>`` tag are returned unchanged.
    """
    if not meta:
        return html

    match = _HEAD_OPEN.search(html)
    if match is None:
        return html

    tags = "\n  ".join(
        f'<meta name="{html_lib.escape(name)}" content="{html_lib.escape(content)}">'
        for name, content in meta.items()
    )
    end = match.end()
    return f"{html[:end]}\n  {tags}{html[end:]}"


def minify_html(html: str) -> str:
    """Collapse whitespace runs and drop whitespace between adjacent tags."""
    collapsed = _WHITESPACE.sub(" ", html)
    return _BETWEEN_TAGS.sub("><", collapsed).strip()


def post_process(html: str, *, meta: Mapping[str, str], minify: bool) -> str:
    html = inject_meta(html, meta)
    if minify:
        html = minify_html(html)
    return html
